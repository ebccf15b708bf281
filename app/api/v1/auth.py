"""Sign-up, sign-in, sign-out, token refresh, Google sign-in, and the auth dependencies
(get_current_user, require_admin, require_admin_area, require_permission,
require_super_admin)."""

import logging
from typing import Annotated
from urllib.parse import quote

from fastapi import APIRouter, Cookie, Depends, Header, HTTPException, Request, Response, status
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from app.core.config import Settings, get_settings
from app.core.database import get_db
from app.core.security import generate_oauth_state
from app.models import User
from app.schemas.auth import (
    AccessTokenResponse,
    SignInRequest,
    SignInResponse,
    SignUpRequest,
    UserSummary,
)
from app.schemas.common import MessageResponse
from app.services import auth as auth_service
from app.services import oauth
from app.services import permissions
from app.services.permissions import AdminContext, Permission

logger = logging.getLogger(__name__)
router = APIRouter()

OAUTH_STATE_COOKIE = "oauth_state"
OAUTH_STATE_MAX_AGE_SEC = 600

DbSession = Annotated[Session, Depends(get_db)]
AppSettings = Annotated[Settings, Depends(get_settings)]


def get_current_user(
    db: DbSession,
    settings: AppSettings,
    authorization: Annotated[str | None, Header()] = None,
) -> User:
    """Dependency: resolve the caller from 'Authorization: Bearer <token>'. 401/403/404 on failure."""
    return permissions.authenticate(db, settings, authorization)


CurrentAccount = Annotated[User, Depends(get_current_user)]


def require_admin(user: CurrentAccount) -> User:
    """Dependency: authenticated account with is_admin set. Raises 403 otherwise."""
    permissions.require_admin(user)
    return user


def require_admin_area(user: CurrentAccount, db: DbSession) -> User:
    """Dependency: router-level gate for /admin. Super admins and grant holders pass too."""
    permissions.require_admin_area(db, user)
    return user


def require_permission(permission: Permission):
    """Dependency factory: authenticated account holding one capability."""

    def dependency(user: CurrentAccount, db: DbSession) -> AdminContext:
        return permissions.require_permission(db, user, permission)

    return dependency


def require_super_admin(user: CurrentAccount, db: DbSession) -> AdminContext:
    return permissions.require_super_admin(db, user)


def _set_refresh_cookie(response: Response, settings: Settings, token: str) -> None:
    response.set_cookie(
        key=settings.REFRESH_COOKIE_NAME,
        value=token,
        max_age=settings.REFRESH_TOKEN_EXPIRE_DAYS * 24 * 60 * 60,
        httponly=True,
        secure=settings.is_production,
        samesite="none" if settings.is_production else "lax",
        path="/",
    )


def _clear_refresh_cookie(response: Response, settings: Settings) -> None:
    response.delete_cookie(
        key=settings.REFRESH_COOKIE_NAME,
        httponly=True,
        secure=settings.is_production,
        samesite="none" if settings.is_production else "lax",
        path="/",
    )


@router.post("/signup", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
def signup(body: SignUpRequest, db: DbSession) -> MessageResponse:
    """Register a local account. Does not sign in."""
    auth_service.sign_up(db, body)
    return MessageResponse(message="Account created")


@router.post("/signin", response_model=SignInResponse)
def signin(
    body: SignInRequest,
    response: Response,
    db: DbSession,
    settings: AppSettings,
) -> SignInResponse:
    """
    Verify credentials; returns an access token in the body and sets the refresh
    secret as an HttpOnly cookie. Send the token as: Authorization: Bearer <accessToken>
    """
    result = auth_service.sign_in(db, settings, body.username, body.password)
    _set_refresh_cookie(response, settings, result.refresh_token)
    return SignInResponse(
        access_token=result.access_token,
        user=UserSummary.model_validate(result.user),
    )


@router.post("/signout", response_model=MessageResponse)
def signout(
    response: Response,
    request: Request,
    db: DbSession,
    settings: AppSettings,
) -> MessageResponse:
    """Delete the session behind the refresh cookie, if any, and clear the cookie. Idempotent."""
    auth_service.sign_out(db, request.cookies.get(settings.REFRESH_COOKIE_NAME))
    _clear_refresh_cookie(response, settings)
    return MessageResponse(message="Signed out")


@router.post("/refresh", response_model=AccessTokenResponse)
def refresh(request: Request, db: DbSession, settings: AppSettings) -> AccessTokenResponse:
    """Exchange the refresh cookie for a new access token. The cookie is not rotated."""
    token = auth_service.refresh_access_token(
        db, settings, request.cookies.get(settings.REFRESH_COOKIE_NAME)
    )
    return AccessTokenResponse(access_token=token)


@router.get("/google")
def google_signin(settings: AppSettings) -> RedirectResponse:
    """Start Google sign-in: store a CSRF state cookie and redirect to the consent screen."""
    state = generate_oauth_state()
    try:
        url = oauth.authorization_url(settings, state)
    except oauth.OAuthNotConfiguredError as e:
        raise HTTPException(status_code=500, detail=e.message) from e
    response = RedirectResponse(url, status_code=status.HTTP_302_FOUND)
    response.set_cookie(
        key=OAUTH_STATE_COOKIE,
        value=state,
        max_age=OAUTH_STATE_MAX_AGE_SEC,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
    )
    return response


def _signin_error(settings: Settings, message: str) -> RedirectResponse:
    return RedirectResponse(
        f"{settings.CLIENT_URL}/signin?error={quote(message)}",
        status_code=status.HTTP_302_FOUND,
    )


@router.get("/google/callback")
async def google_callback(
    db: DbSession,
    settings: AppSettings,
    code: str | None = None,
    state: str | None = None,
    error: str | None = None,
    error_description: str | None = None,
    oauth_state: Annotated[str | None, Cookie()] = None,
) -> RedirectResponse:
    """
    Finish Google sign-in. Success redirects to the client with the access token and sets
    the refresh cookie; every failure redirects to the client's sign-in page with a message.
    """
    if error:
        logger.warning("Google sign-in refused", extra={"error": error})
        return _signin_error(settings, error_description or error)
    if not state or state != oauth_state:
        return _signin_error(settings, "Invalid state parameter")
    if not code:
        return _signin_error(settings, "Authorization code not provided")

    try:
        profile = await oauth.fetch_profile(code, settings)
        user = oauth.find_or_create_user(db, profile)
    except (oauth.OAuthError, oauth.OAuthNotConfiguredError) as e:
        logger.warning("Google sign-in failed: %s", e.message)
        return _signin_error(settings, e.message)

    result = auth_service.create_session(db, settings, user)
    logger.info("Sign-in succeeded", extra={"username": user.username, "provider": "google"})
    response = RedirectResponse(
        f"{settings.CLIENT_URL}/auth/google/callback?token={result.access_token}",
        status_code=status.HTTP_302_FOUND,
    )
    _set_refresh_cookie(response, settings, result.refresh_token)
    response.delete_cookie(OAUTH_STATE_COOKIE)
    return response
