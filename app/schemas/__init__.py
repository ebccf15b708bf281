"""Pydantic request/response schemas."""

from app.schemas.auth import (
    AccessTokenResponse,
    CurrentUser,
    CurrentUserResponse,
    SignInRequest,
    SignInResponse,
    SignUpRequest,
    UserSummary,
)
from app.schemas.common import CamelModel, MessageResponse, Pagination
from app.schemas.health import HealthResponse

__all__ = [
    "AccessTokenResponse",
    "CamelModel",
    "CurrentUser",
    "CurrentUserResponse",
    "HealthResponse",
    "MessageResponse",
    "Pagination",
    "SignInRequest",
    "SignInResponse",
    "SignUpRequest",
    "UserSummary",
]
