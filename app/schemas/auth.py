"""Request/response schemas for auth endpoints."""

from datetime import datetime

from pydantic import Field

from app.schemas.common import CamelModel


class SignUpRequest(CamelModel):
    """Local registration. Policy checks (length, charset, strength) run in the service."""

    username: str = Field(..., max_length=255, description="3-20 letters, digits or underscores")
    password: str = Field(..., max_length=255, description="At least 8 chars with upper, lower and digit")
    email: str = Field(..., max_length=254)
    first_name: str = Field(..., max_length=100)
    last_name: str = Field(..., max_length=100)
    phone: str | None = Field(default=None, max_length=32)
    bio: str | None = Field(default=None, max_length=500)


class SignInRequest(CamelModel):
    """Credentials for sign-in."""

    username: str = Field(..., max_length=255, description="Username")
    password: str = Field(..., max_length=255, description="Password")


class UserSummary(CamelModel):
    """Minimal account view returned with a fresh access token."""

    id: str
    username: str
    email: str
    display_name: str
    avatar_url: str = ""


class SignInResponse(CamelModel):
    """Access token in the body; the refresh secret travels only in the cookie."""

    message: str = "Signed in"
    access_token: str = Field(..., description="Signed access token (Bearer)")
    user: UserSummary


class AccessTokenResponse(CamelModel):
    access_token: str = Field(..., description="Signed access token (Bearer)")


class CurrentUser(CamelModel):
    """Authenticated account without the password hash."""

    id: str
    username: str
    email: str
    display_name: str
    avatar_url: str = ""
    bio: str | None = None
    phone: str | None = None
    is_admin: bool = False
    is_super_admin: bool = False
    is_oauth_user: bool = False
    created_at: datetime | None = None


class CurrentUserResponse(CamelModel):
    user: CurrentUser
