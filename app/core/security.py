"""Password hashing, credential policy and token minting/verification."""

import re
import secrets
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Any

import bcrypt
import jwt

if TYPE_CHECKING:
    from app.core.config import Settings

# Bcrypt cost (rounds); must stay at or above 10.
BCRYPT_ROUNDS = 12

USERNAME_MIN_LEN = 3
USERNAME_MAX_LEN = 20
PASSWORD_MIN_LEN = 8
PASSWORD_MAX_LEN = 128
EMAIL_MAX_LEN = 254

# Refresh secrets are 64 random bytes, hex encoded (512 bits).
REFRESH_TOKEN_BYTES = 64

_USERNAME_RE = re.compile(r"^[A-Za-z0-9_]+$")
_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def is_valid_username(username: str) -> bool:
    """3-20 characters, letters, digits and underscore only."""
    if not username:
        return False
    if not (USERNAME_MIN_LEN <= len(username) <= USERNAME_MAX_LEN):
        return False
    return bool(_USERNAME_RE.match(username))


def is_valid_email(email: str) -> bool:
    if not email or len(email) > EMAIL_MAX_LEN:
        return False
    return bool(_EMAIL_RE.match(email))


def is_strong_password(password: str) -> bool:
    """At least 8 characters with an uppercase letter, a lowercase letter and a digit."""
    if not password or not (PASSWORD_MIN_LEN <= len(password) <= PASSWORD_MAX_LEN):
        return False
    return (
        any(c.islower() for c in password)
        and any(c.isupper() for c in password)
        and any(c.isdigit() for c in password)
    )


def hash_password(plain_password: str) -> str:
    """Hash a plain-text password for storage. Do not store plain passwords."""
    # bcrypt has a 72-byte limit; truncate to avoid errors (validation already limits length).
    pw_bytes = plain_password.encode("utf-8")[:72]
    return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(plain_password: str, hashed: str | None) -> bool:
    """Verify a plain password against a stored hash. A missing hash never matches."""
    if not hashed:
        return False
    pw_bytes = plain_password.encode("utf-8")[:72]
    try:
        return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


def create_access_token(sub: str, settings: "Settings") -> str:
    """Create a signed access token carrying only the account id, iat and exp."""
    now = datetime.now(UTC)
    expire = now + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    payload: dict[str, Any] = {
        "sub": str(sub),
        "exp": expire,
        "iat": now,
    }
    return jwt.encode(
        payload,
        settings.JWT_SECRET.get_secret_value(),
        algorithm=settings.JWT_ALGORITHM,
    )


def decode_access_token(token: str, settings: "Settings") -> dict[str, Any]:
    """
    Decode and validate an access token; return its payload (sub, exp, iat).

    Raises jwt.ExpiredSignatureError when expired and jwt.InvalidTokenError for any
    other signature or format problem.
    """
    return jwt.decode(
        token,
        settings.JWT_SECRET.get_secret_value(),
        algorithms=[settings.JWT_ALGORITHM],
        options={"require": ["sub", "exp", "iat"]},
    )


def generate_refresh_token() -> str:
    """Return a new opaque refresh secret from the OS CSPRNG."""
    return secrets.token_hex(REFRESH_TOKEN_BYTES)


def generate_oauth_state() -> str:
    return secrets.token_hex(32)
