"""Request/response schemas for self-service profile endpoints."""

from pydantic import Field

from app.schemas.auth import CurrentUser
from app.schemas.common import CamelModel


class ChangePasswordRequest(CamelModel):
    password: str = Field(..., max_length=255, description="Current password")
    new_password: str = Field(..., max_length=255)
    new_password_match: str = Field(..., max_length=255)


class ProfileResponse(CamelModel):
    message: str
    user: CurrentUser
