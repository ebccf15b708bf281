"""Authentication service: sign-up, sign-in, sign-out and access-token refresh.

Sign-in issues two credentials: a short-lived signed access token (returned in the
body) and a long-lived opaque refresh secret (stored server-side as a RefreshSession
and handed to the client only through an HttpOnly cookie). Refresh exchanges the secret
for a new access token; the secret itself is not rotated on use.
"""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.security import (
    create_access_token,
    generate_refresh_token,
    hash_password,
    is_strong_password,
    is_valid_email,
    is_valid_username,
    verify_password,
)
from app.models import RefreshSession, User
from app.schemas.auth import SignUpRequest
from app.services.errors import bad_request, conflict, forbidden, unauthorized

if TYPE_CHECKING:
    from app.core.config import Settings

logger = logging.getLogger(__name__)

# Same message for unknown user, external account and wrong password.
INVALID_CREDENTIALS = "Invalid username or password"


@dataclass(slots=True)
class SignInResult:
    access_token: str
    refresh_token: str
    refresh_expires_at: datetime
    user: User


def normalize_username(username: str) -> str:
    return (username or "").strip().lower()


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def sign_up(db: Session, payload: SignUpRequest) -> User:
    """
    Create a local account. Does not sign the caller in.

    Raises ServiceError(bad_request) on policy violations and ServiceError(conflict)
    naming the field when the username or email is taken.
    """
    raw_username = (payload.username or "").strip()
    if not is_valid_username(raw_username):
        raise bad_request(
            "Username must be 3-20 characters and contain only letters, numbers, and underscores",
            field="username",
        )
    email = normalize_email(payload.email)
    if not is_valid_email(email):
        raise bad_request("Invalid email format", field="email")
    if not is_strong_password(payload.password):
        raise bad_request(
            "Password must be at least 8 characters with uppercase, lowercase, and a number",
            field="password",
        )
    first_name = (payload.first_name or "").strip()
    last_name = (payload.last_name or "").strip()
    if not first_name or not last_name:
        raise bad_request("First name and last name are required")

    username = raw_username.lower()
    # One query covering both unique fields.
    existing = (
        db.query(User)
        .filter(or_(User.username == username, User.email == email))
        .all()
    )
    if any(u.username == username for u in existing):
        raise conflict("Username already exists", field="username")
    if existing:
        raise conflict("Email already exists", field="email")

    user = User(
        username=username,
        email=email,
        password_hash=hash_password(payload.password),
        display_name=f"{first_name} {last_name}",
        phone=(payload.phone or "").strip() or None,
        bio=(payload.bio or "").strip() or None,
        is_admin=False,
        is_super_admin=False,
        is_oauth_user=False,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError as e:
        # Lost a race with a concurrent sign-up for the same username or email.
        db.rollback()
        raise conflict("Username or email already exists") from e
    db.refresh(user)
    logger.info("Account created", extra={"username": username})
    return user


def create_session(
    db: Session,
    settings: "Settings",
    user: User,
    now: datetime | None = None,
) -> SignInResult:
    """Mint an access token and persist a new refresh session for user."""
    now = now or datetime.now(UTC)
    refresh_token = generate_refresh_token()
    expires_at = now + timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS)
    db.add(
        RefreshSession(
            refresh_token=refresh_token,
            user_id=user.id,
            expires_at=expires_at,
        )
    )
    db.commit()
    return SignInResult(
        access_token=create_access_token(user.id, settings),
        refresh_token=refresh_token,
        refresh_expires_at=expires_at,
        user=user,
    )


def sign_in(
    db: Session,
    settings: "Settings",
    username: str,
    password: str,
    now: datetime | None = None,
) -> SignInResult:
    """
    Verify credentials and open a session.

    Every failure raises ServiceError(unauthorized) with the same message so callers
    cannot tell a missing account from a wrong password.
    """
    user = db.query(User).filter(User.username == normalize_username(username)).first()
    if user is None or user.is_oauth_user or not user.password_hash:
        logger.info("Sign-in rejected", extra={"username": normalize_username(username)})
        raise unauthorized(INVALID_CREDENTIALS)
    if not verify_password(password or "", user.password_hash):
        logger.info("Sign-in rejected", extra={"username": user.username})
        raise unauthorized(INVALID_CREDENTIALS)

    result = create_session(db, settings, user, now=now)
    logger.info("Sign-in succeeded", extra={"username": user.username})
    return result


def sign_out(db: Session, refresh_token: str | None) -> None:
    """Delete the session for refresh_token if any. Idempotent."""
    if not refresh_token:
        return
    db.query(RefreshSession).filter(
        RefreshSession.refresh_token == refresh_token
    ).delete(synchronize_session=False)
    db.commit()


def refresh_access_token(
    db: Session,
    settings: "Settings",
    refresh_token: str | None,
    now: datetime | None = None,
) -> str:
    """
    Exchange a refresh secret for a new access token.

    Missing secret: unauthorized. Unknown secret: forbidden. Expired secret: the
    session is deleted and forbidden is raised. The secret is not rotated.
    """
    if not refresh_token:
        raise unauthorized("Refresh token not found")

    session = db.get(RefreshSession, refresh_token)
    if session is None:
        raise forbidden("Invalid or expired refresh token")

    now = now or datetime.now(UTC)
    if session.is_expired(now):
        db.delete(session)
        db.commit()
        raise forbidden("Refresh token expired")

    return create_access_token(session.user_id, settings)


def revoke_user_sessions(db: Session, user_id: str) -> int:
    """Delete every session of user_id without committing; returns the count."""
    return (
        db.query(RefreshSession)
        .filter(RefreshSession.user_id == user_id)
        .delete(synchronize_session=False)
    )
