"""Bearer token authentication for the user management API."""
from __future__ import annotations

import logging
import secrets
from typing import Iterable, Optional, Tuple

from fastapi import Request

from .errors import UnauthorizedError

logger = logging.getLogger("usermanagement.security")


class TokenValidator:
    """Immutable set of accepted API tokens."""

    def __init__(self, tokens: Iterable[Optional[str]]):
        cleaned: list[str] = []
        for token in tokens:
            value = token.strip() if token else ""
            if value and value not in cleaned:
                cleaned.append(value)
        self._tokens: Tuple[str, ...] = tuple(cleaned)

    @classmethod
    def from_settings(cls, token: Optional[str], tokens: Iterable[Optional[str]] = ()) -> "TokenValidator":
        """Combine the single-token and multi-token settings."""

        return cls([*tokens, token])

    @property
    def has_configured_tokens(self) -> bool:
        return bool(self._tokens)

    def is_valid(self, token: Optional[str]) -> bool:
        if not token or not token.strip():
            return False

        provided = token.strip()
        matched = False
        for candidate in self._tokens:
            # no early exit
            if secrets.compare_digest(provided.encode("utf-8"), candidate.encode("utf-8")):
                matched = True
        return matched


_BEARER_PREFIX = "bearer "


def extract_token(header: Optional[str]) -> str:
    """Return the credential carried by an ``Authorization`` header value.

    ``Bearer <token>`` (any case) and a bare ``<token>`` are both accepted.
    """

    value = (header or "").strip()
    if value.lower().startswith(_BEARER_PREFIX):
        return value[len(_BEARER_PREFIX):].strip()
    return value


class TokenAuth:
    """Checks every request against the configured tokens before routing."""

    def __init__(self, validator: TokenValidator, *, public_paths: Iterable[str] = ()):
        self._validator = validator
        self._public_paths = frozenset(public_paths)

    @property
    def validator(self) -> TokenValidator:
        return self._validator

    def is_public(self, path: str) -> bool:
        return path in self._public_paths

    def authenticate(self, request: Request) -> None:
        """Raise :class:`UnauthorizedError` unless ``request`` carries a valid token."""

        if self.is_public(request.url.path):
            return None

        provided = extract_token(request.headers.get("Authorization"))
        if self._validator.is_valid(provided):
            return None

        logger.warning("Rejected unauthenticated %s request to %s", request.method, request.url.path)
        raise UnauthorizedError()


__all__ = ["TokenAuth", "TokenValidator", "extract_token"]
