"""Domain models for the user management service."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional
from uuid import UUID


@dataclass(frozen=True)
class User:
    """Represents a user record held by a repository.

    Instances are immutable; updates produce a replacement value.
    """

    id: UUID
    email: str
    full_name: str
    created_at: datetime
    updated_at: Optional[datetime] = None


def normalize_email(email: str) -> str:
    """Return the case-insensitive comparison key for ``email``."""

    return email.strip().lower()


__all__ = ["User", "normalize_email"]
