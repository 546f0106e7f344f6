"""Core package for the user management service."""

from __future__ import annotations

from typing import Any

from .models import User
from .repository import InMemoryUserRepository, UserRepository


def create_app(*args: Any, **kwargs: Any):
    """Factory function that returns the HTTP API application."""

    from .service import create_app as _create_app

    return _create_app(*args, **kwargs)


def create_application(*args: Any, **kwargs: Any):
    """Factory function that builds the application from configuration."""

    from .application import create_application as _create_application

    return _create_application(*args, **kwargs)


__all__ = [
    "InMemoryUserRepository",
    "User",
    "UserRepository",
    "create_app",
    "create_application",
]
