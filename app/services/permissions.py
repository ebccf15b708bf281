"""Authorization guard: resolve the caller from a bearer token and check privileges.

Nothing here is cached: every request re-reads the account and its permission grant,
so a revoked or changed grant takes effect on the next request even while the
caller's access token is still valid.
"""

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

import jwt
from sqlalchemy.orm import Session

from app.core.security import decode_access_token
from app.models import AdminRole, User
from app.models.admin_role import ROLE_SUPER_ADMIN
from app.services.errors import forbidden, not_found, unauthorized

if TYPE_CHECKING:
    from app.core.config import Settings


class Permission(str, Enum):
    """Capability flags; values are the AdminRole column names."""

    MANAGE_USERS = "manage_users"
    DELETE_USERS = "delete_users"
    MANAGE_IMAGES = "manage_images"
    DELETE_IMAGES = "delete_images"
    MANAGE_CATEGORIES = "manage_categories"
    MANAGE_ADMINS = "manage_admins"
    VIEW_DASHBOARD = "view_dashboard"


ALL_PERMISSIONS: tuple[Permission, ...] = tuple(Permission)


@dataclass(slots=True)
class AdminContext:
    """The authenticated account plus the grant that let it through (None for bootstrap super admins)."""

    user: User
    admin_role: AdminRole | None = None

    @property
    def is_super_admin(self) -> bool:
        if self.user.is_super_admin:
            return True
        return self.admin_role is not None and self.admin_role.role == ROLE_SUPER_ADMIN


def extract_bearer_token(authorization: str | None) -> str | None:
    """Return the token from 'Bearer <token>', or None when absent or malformed."""
    if not authorization:
        return None
    parts = authorization.strip().split(" ", 1)
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return None
    token = parts[1].strip()
    return token or None


def authenticate(db: Session, settings: "Settings", authorization: str | None) -> User:
    """
    Resolve the caller of a request from its Authorization header.

    Raises unauthorized when no token is present, forbidden when the token is expired
    or invalid, and not_found when the account was deleted after the token was issued.
    """
    token = extract_bearer_token(authorization)
    if token is None:
        raise unauthorized("Access token not found")

    try:
        payload = decode_access_token(token, settings)
    except jwt.ExpiredSignatureError as e:
        raise forbidden("Access token expired") from e
    except jwt.InvalidTokenError as e:
        raise forbidden("Invalid access token") from e

    user = db.get(User, str(payload["sub"]))
    if user is None:
        raise not_found("User not found")
    return user


def get_admin_role(db: Session, user_id: str) -> AdminRole | None:
    return db.get(AdminRole, user_id, populate_existing=True)


def role_grants(admin_role: AdminRole, permission: Permission) -> bool:
    """A super_admin role supersedes the stored flags."""
    if admin_role.role == ROLE_SUPER_ADMIN:
        return True
    return bool(getattr(admin_role, permission.value))


def require_admin(user: User) -> None:
    if not user.is_admin:
        raise forbidden("Admin access required")


def require_admin_area(db: Session, user: User) -> None:
    """Entry gate for the admin area: super-admin flag, any grant, or is_admin."""
    if user.is_super_admin or user.is_admin:
        return
    if get_admin_role(db, user.id) is None:
        raise forbidden("Admin access required")


def require_permission(db: Session, user: User, permission: Permission) -> AdminContext:
    """
    Check one capability for an authenticated account.

    Order: account super-admin flag, then grant presence, then grant role, then the
    named flag. The returned context carries the grant for downstream checks.
    """
    if user.is_super_admin:
        return AdminContext(user=user)

    admin_role = get_admin_role(db, user.id)
    if admin_role is None:
        raise forbidden("Admin access required")
    if not role_grants(admin_role, permission):
        raise forbidden(f"Permission denied: {permission.value} required")
    return AdminContext(user=user, admin_role=admin_role)


def require_super_admin(db: Session, user: User) -> AdminContext:
    if user.is_super_admin:
        return AdminContext(user=user)

    admin_role = get_admin_role(db, user.id)
    if admin_role is None or admin_role.role != ROLE_SUPER_ADMIN:
        raise forbidden("Super admin access required")
    return AdminContext(user=user, admin_role=admin_role)


def has_permission(db: Session, user_id: str, permission: Permission) -> bool:
    """Boolean form of require_permission, looked up by account id."""
    user = db.get(User, user_id)
    if user is None:
        return False
    if user.is_super_admin:
        return True
    admin_role = get_admin_role(db, user_id)
    if admin_role is None:
        return False
    return role_grants(admin_role, permission)
