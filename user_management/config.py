"""Configuration management for the user management service."""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Mapping, Optional, Tuple

import yaml

DEFAULT_LOG_LEVEL = "INFO"


@dataclass(frozen=True)
class Settings:
    """Runtime settings resolved from the YAML file and the environment."""

    token: Optional[str] = None
    tokens: Tuple[str, ...] = field(default_factory=tuple)
    log_level: str = DEFAULT_LOG_LEVEL

    @staticmethod
    def from_dict(data: Mapping[str, object]) -> "Settings":
        """Create :class:`Settings` from the parsed YAML document."""

        authentication = data.get("authentication") or {}
        if not isinstance(authentication, Mapping):
            raise ValueError("The 'authentication' section must be a mapping")

        raw_tokens = authentication.get("tokens") or []
        if isinstance(raw_tokens, str) or not isinstance(raw_tokens, list):
            raise ValueError("'authentication.tokens' must be a list of strings")

        logging_section = data.get("logging") or {}
        if not isinstance(logging_section, Mapping):
            raise ValueError("The 'logging' section must be a mapping")

        token = authentication.get("token")
        return Settings(
            token=str(token) if token is not None else None,
            tokens=tuple(str(item) for item in raw_tokens if item is not None),
            log_level=str(logging_section.get("level", DEFAULT_LOG_LEVEL)).upper(),
        )

    def with_environment(self, environ: Mapping[str, str]) -> "Settings":
        """Return a copy with ``USER_MANAGEMENT_*`` overrides applied."""

        token = environ.get("USER_MANAGEMENT_API_TOKEN") or self.token
        tokens = self.tokens
        raw = environ.get("USER_MANAGEMENT_API_TOKENS")
        if raw:
            tokens = tuple(item.strip() for item in raw.split(",") if item.strip())
        log_level = environ.get("USER_MANAGEMENT_LOG_LEVEL") or self.log_level
        return Settings(token=token, tokens=tokens, log_level=log_level.upper())


def load_settings(config_path: Path | None = None, environ: Mapping[str, str] | None = None) -> Settings:
    """Load settings from ``config_path`` (when it exists) and the environment."""

    env = os.environ if environ is None else environ
    path = config_path or resolve_config_path(env.get("USER_MANAGEMENT_CONFIG"))

    raw: Dict[str, object] = {}
    if path.is_file():
        with path.open("r", encoding="utf-8") as handle:
            loaded = yaml.safe_load(handle) or {}
        if not isinstance(loaded, dict):
            raise ValueError(f"Configuration file {path} must contain a mapping")
        raw = loaded

    return Settings.from_dict(raw).with_environment(env)


def resolve_config_path(env_value: Optional[str]) -> Path:
    """Resolve the path to the configuration file."""
    if env_value:
        candidate = Path(env_value).expanduser().resolve(strict=False)
    else:
        candidate = (Path(__file__).resolve().parent.parent / "config" / "settings.yaml").resolve(strict=False)
    return candidate


__all__ = ["Settings", "load_settings", "resolve_config_path"]
