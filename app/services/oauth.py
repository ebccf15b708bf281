"""Google sign-in: authorization URL, code exchange, profile fetch and account linking."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING
from urllib.parse import urlencode

import httpx
from sqlalchemy.orm import Session

from app.models import User

if TYPE_CHECKING:
    from app.core.config import Settings

logger = logging.getLogger(__name__)

GOOGLE_AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GOOGLE_USERINFO_URL = "https://www.googleapis.com/oauth2/v2/userinfo"
GOOGLE_SCOPES = "openid email profile"

LOCAL_ACCOUNT_EXISTS = (
    "This email is already registered with email/password. "
    "Please sign in with your password instead."
)


class OAuthNotConfiguredError(Exception):
    """Raised when Google sign-in is used without client credentials."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class OAuthError(Exception):
    """Raised when Google rejects the exchange or returns an unusable profile."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(message)


@dataclass(slots=True)
class GoogleProfile:
    id: str
    email: str | None
    name: str | None
    picture: str | None


def is_google_configured(settings: Settings) -> bool:
    if not settings.GOOGLE_CLIENT_ID or not settings.GOOGLE_CLIENT_ID.strip():
        return False
    if settings.GOOGLE_CLIENT_SECRET is None:
        return False
    return bool(settings.GOOGLE_CLIENT_SECRET.get_secret_value().strip())


def authorization_url(settings: Settings, state: str) -> str:
    if not settings.GOOGLE_CLIENT_ID:
        raise OAuthNotConfiguredError(
            "Google OAuth is not configured. Please set GOOGLE_CLIENT_ID in environment variables."
        )
    query = urlencode(
        {
            "client_id": settings.GOOGLE_CLIENT_ID,
            "redirect_uri": settings.GOOGLE_REDIRECT_URI,
            "response_type": "code",
            "scope": GOOGLE_SCOPES,
            "state": state,
            "access_type": "offline",
            "prompt": "consent",
        }
    )
    return f"{GOOGLE_AUTH_URL}?{query}"


def _json(resp: httpx.Response) -> dict:
    try:
        body = resp.json()
    except json.JSONDecodeError as e:
        raise OAuthError("Google returned an invalid response", status_code=resp.status_code) from e
    if not isinstance(body, dict):
        raise OAuthError("Google returned an invalid response", status_code=resp.status_code)
    return body


async def fetch_profile(code: str, settings: Settings) -> GoogleProfile:
    """Exchange an authorization code and read the signed-in Google profile."""
    if not is_google_configured(settings):
        raise OAuthNotConfiguredError("Google OAuth is not configured")
    timeout = httpx.Timeout(settings.GOOGLE_REQUEST_TIMEOUT_SEC)
    try:
        async with httpx.AsyncClient(timeout=timeout) as client:
            token_resp = await client.post(
                GOOGLE_TOKEN_URL,
                data={
                    "code": code,
                    "client_id": settings.GOOGLE_CLIENT_ID,
                    "client_secret": settings.GOOGLE_CLIENT_SECRET.get_secret_value(),
                    "redirect_uri": settings.GOOGLE_REDIRECT_URI,
                    "grant_type": "authorization_code",
                },
            )
            token = _json(token_resp).get("access_token")
            if not token:
                raise OAuthError(
                    "Failed to get access token from Google", status_code=token_resp.status_code
                )
            user_resp = await client.get(
                GOOGLE_USERINFO_URL, headers={"Authorization": f"Bearer {token}"}
            )
    except httpx.HTTPError as e:
        raise OAuthError("Google is unreachable") from e

    body = _json(user_resp)
    if not body.get("id"):
        raise OAuthError("Failed to get user info from Google", status_code=user_resp.status_code)
    return GoogleProfile(
        id=str(body["id"]),
        email=body.get("email"),
        name=body.get("name"),
        picture=body.get("picture"),
    )


def find_or_create_user(db: Session, profile: GoogleProfile) -> User:
    """
    Link a Google profile to an externally authenticated account, creating it on first use.

    Refuses an email that belongs to a local-password account. Existing external accounts
    get their avatar synced from Google.
    """
    email = (profile.email or f"{profile.id}@google.com").strip().lower()
    user = db.query(User).filter(User.email == email).first()

    if user is None:
        user = User(
            username=f"google_{profile.id}".lower(),
            email=email,
            password_hash=None,
            display_name=profile.name or "Google User",
            avatar_url=profile.picture or "",
            is_oauth_user=True,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        logger.info("Account created from Google profile", extra={"username": user.username})
        return user

    if not user.is_oauth_user:
        raise OAuthError(LOCAL_ACCOUNT_EXISTS)

    if profile.picture and user.avatar_url != profile.picture:
        user.avatar_url = profile.picture
        user.avatar_id = None
        db.commit()
        db.refresh(user)
    return user
