"""HTTP API exposing CRUD operations on user records."""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import List, Optional
from uuid import UUID

from email_validator import EmailNotValidError, validate_email
from fastapi import APIRouter, FastAPI, Request, Response, status
from fastapi.responses import JSONResponse, RedirectResponse
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .config import Settings, load_settings
from .error_handlers import register_error_handlers
from .errors import EmailAlreadyInUseError, UnauthorizedError, UserNotFoundError
from .models import User
from .repository import InMemoryUserRepository, UserRepository
from .security import TokenAuth, TokenValidator

logger = logging.getLogger("usermanagement.service")

_MIN_FULL_NAME_LENGTH = 2
_DOCUMENTATION_PATHS = ("/", "/docs", "/docs/oauth2-redirect", "/openapi.json")


class UserPayload(BaseModel):
    """Request body shared by the create and update endpoints."""

    model_config = ConfigDict(populate_by_name=True)

    email: Optional[str] = Field(default=None, validate_default=True)
    full_name: Optional[str] = Field(default=None, alias="fullName", validate_default=True)

    @field_validator("email")
    @classmethod
    def _validate_email(cls, value: Optional[str]) -> str:
        if value is None or not value.strip():
            raise ValueError("Email is required.")
        stripped = value.strip()
        try:
            validate_email(stripped, check_deliverability=False)
        except EmailNotValidError:
            raise ValueError("Email must be a valid email address.") from None
        return stripped

    @field_validator("full_name")
    @classmethod
    def _validate_full_name(cls, value: Optional[str]) -> str:
        if value is None or not value.strip():
            raise ValueError("Full name is required.")
        stripped = value.strip()
        if len(stripped) < _MIN_FULL_NAME_LENGTH:
            raise ValueError("Full name must be at least 2 characters long.")
        return stripped


class UserResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: UUID
    email: str
    full_name: str = Field(alias="fullName")
    created_at: datetime = Field(alias="createdAt")
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt")


def _user_to_response(user: User) -> UserResponse:
    return UserResponse(
        id=user.id,
        email=user.email,
        full_name=user.full_name,
        created_at=user.created_at,
        updated_at=user.updated_at,
    )


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def register_user_routes(app: FastAPI, repository: UserRepository) -> None:
    """Expose the ``/api/users`` endpoints on the provided FastAPI application."""

    router = APIRouter(prefix="/api/users", tags=["users"])

    @router.get(
        "",
        response_model=List[UserResponse],
        response_model_exclude_none=True,
        summary="Get all users",
    )
    async def list_users() -> List[UserResponse]:
        users = await repository.list_users()
        return [_user_to_response(user) for user in users]

    @router.get(
        "/{user_id}",
        response_model=UserResponse,
        response_model_exclude_none=True,
        summary="Get a user by id",
    )
    async def get_user(user_id: UUID) -> UserResponse:
        user = await repository.get_user(user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        return _user_to_response(user)

    @router.post(
        "",
        status_code=status.HTTP_201_CREATED,
        response_model=UserResponse,
        response_model_exclude_none=True,
        summary="Create a new user",
    )
    async def create_user(payload: UserPayload, response: Response) -> UserResponse:
        email = payload.email or ""
        if await repository.email_exists(email):
            raise EmailAlreadyInUseError(email)

        user = User(
            id=uuid.uuid4(),
            email=email,
            full_name=payload.full_name or "",
            created_at=_utcnow(),
        )
        created = await repository.create_user(user)

        response.headers["Location"] = f"/api/users/{created.id}"
        return _user_to_response(created)

    @router.put(
        "/{user_id}",
        response_model=UserResponse,
        response_model_exclude_none=True,
        summary="Update an existing user",
    )
    async def update_user(user_id: UUID, payload: UserPayload) -> UserResponse:
        email = payload.email or ""
        full_name = payload.full_name or ""
        conflict_detail = f"A different user already uses email '{email}'."

        if await repository.email_exists(email, exclude_id=user_id):
            raise EmailAlreadyInUseError(email, detail=conflict_detail)

        def apply(current: User) -> User:
            return User(
                id=current.id,
                email=email,
                full_name=full_name,
                created_at=current.created_at,
                updated_at=_utcnow(),
            )

        try:
            updated = await repository.update_user(user_id, apply)
        except EmailAlreadyInUseError as exc:
            raise EmailAlreadyInUseError(exc.email, detail=conflict_detail) from exc

        if updated is None:
            raise UserNotFoundError(user_id)
        return _user_to_response(updated)

    @router.delete(
        "/{user_id}",
        status_code=status.HTTP_204_NO_CONTENT,
        response_class=Response,
        summary="Delete a user",
    )
    async def delete_user(user_id: UUID) -> Response:
        if not await repository.delete_user(user_id):
            raise UserNotFoundError(user_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    app.include_router(router)


def create_app(
    *,
    repository: UserRepository | None = None,
    token_validator: TokenValidator | None = None,
    settings: Settings | None = None,
) -> FastAPI:
    """Instantiate the FastAPI application for the user management API."""

    if token_validator is None:
        resolved = settings or load_settings()
        token_validator = TokenValidator.from_settings(resolved.token, resolved.tokens)

    if not token_validator.has_configured_tokens:
        logger.warning(
            "No API tokens are configured. Every request outside the documentation routes"
            " will be rejected; set USER_MANAGEMENT_API_TOKEN or USER_MANAGEMENT_API_TOKENS."
        )

    store = repository if repository is not None else InMemoryUserRepository()

    app = FastAPI(
        title="User Management API",
        version="1.0.0",
        description="In-memory user directory protected by shared bearer tokens.",
        redoc_url=None,
    )
    app.state.repository = store
    app.state.token_validator = token_validator

    auth = TokenAuth(token_validator, public_paths=_DOCUMENTATION_PATHS)

    # Registered before log_requests so that it runs inside it.
    @app.middleware("http")
    async def require_token(request: Request, call_next):
        try:
            auth.authenticate(request)
        except UnauthorizedError as exc:
            return JSONResponse(
                status_code=exc.status_code,
                content=exc.to_response(),
                headers={"WWW-Authenticate": "Bearer"},
            )
        return await call_next(request)

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        try:
            response = await call_next(request)
        except Exception:
            logger.info(
                "Handled %s %s with status code %s",
                request.method,
                request.url.path,
                status.HTTP_500_INTERNAL_SERVER_ERROR,
            )
            raise
        logger.info(
            "Handled %s %s with status code %s",
            request.method,
            request.url.path,
            response.status_code,
        )
        return response

    @app.get("/", include_in_schema=False)
    async def index() -> RedirectResponse:
        return RedirectResponse(url="/docs")

    register_user_routes(app, store)
    register_error_handlers(app)

    return app


__all__ = ["UserPayload", "UserResponse", "create_app", "register_user_routes"]
