"""Application factory that wires settings, storage and the HTTP API."""
from __future__ import annotations

from pathlib import Path
from typing import Optional

from fastapi import FastAPI

from .config import load_settings
from .repository import InMemoryUserRepository
from .security import TokenValidator
from .service import create_app


def create_application(*, config_path: Optional[str] = None) -> FastAPI:
    """Create the ASGI application from the configuration file and environment.

    Suitable for ``uvicorn user_management.application:create_application --factory``.
    """

    settings = load_settings(Path(config_path).expanduser() if config_path else None)
    validator = TokenValidator.from_settings(settings.token, settings.tokens)

    app = create_app(
        repository=InMemoryUserRepository(),
        token_validator=validator,
        settings=settings,
    )
    app.state.settings = settings
    return app


__all__ = ["create_application"]
