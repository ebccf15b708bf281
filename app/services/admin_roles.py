"""Permission delegation: super admins grant, edit and revoke other accounts' grants.

No account may create, edit or revoke its own grant, and accounts carrying the
bootstrap is_super_admin flag never hold a grant.
"""

import logging

from sqlalchemy.orm import Session

from app.models import AdminRole, User
from app.models.admin_role import ROLE_ADMIN
from app.schemas.admin import (
    AccountRef,
    AdminRoleCreate,
    AdminRoleOut,
    AdminRoleUpdate,
    PermissionSet,
)
from app.services.errors import bad_request, forbidden, not_found
from app.services.permissions import ALL_PERMISSIONS, AdminContext

logger = logging.getLogger(__name__)


def _account_ref(db: Session, user_id: str | None) -> AccountRef | None:
    if not user_id:
        return None
    user = db.get(User, user_id)
    return AccountRef.model_validate(user) if user is not None else None


def to_out(db: Session, admin_role: AdminRole) -> AdminRoleOut:
    """Nest the flat capability columns under permissions and resolve account references."""
    return AdminRoleOut(
        user_id=admin_role.user_id,
        user=_account_ref(db, admin_role.user_id),
        role=admin_role.role,
        permissions=PermissionSet(
            **{p.value: bool(getattr(admin_role, p.value)) for p in ALL_PERMISSIONS}
        ),
        granted_by=_account_ref(db, admin_role.granted_by),
        created_at=admin_role.created_at,
        updated_at=admin_role.updated_at,
    )


def list_roles(db: Session) -> list[AdminRole]:
    """All grants, newest first, excluding any held by bootstrap super admins."""
    return (
        db.query(AdminRole)
        .join(User, User.id == AdminRole.user_id)
        .filter(User.is_super_admin.is_(False))
        .order_by(AdminRole.created_at.desc())
        .all()
    )


def get_role(db: Session, ctx: AdminContext, user_id: str) -> AdminRole:
    """Anyone behind the admin gate may read their own grant; others need super admin."""
    if user_id != ctx.user.id and not ctx.is_super_admin:
        raise forbidden("Super admin access required")
    admin_role = db.get(AdminRole, user_id)
    if admin_role is None:
        raise not_found("Admin role not found")
    return admin_role


def create_role(db: Session, ctx: AdminContext, body: AdminRoleCreate) -> AdminRole:
    if body.user_id == ctx.user.id:
        raise bad_request("You cannot grant an admin role to yourself")
    user = db.get(User, body.user_id)
    if user is None:
        raise not_found("User not found")
    if user.is_super_admin:
        raise bad_request("User is already a super admin; super admins cannot hold an admin role")
    if db.get(AdminRole, body.user_id) is not None:
        raise bad_request("User already has an admin role")

    permissions = body.permissions or PermissionSet()
    admin_role = AdminRole(
        user_id=user.id,
        role=body.role or ROLE_ADMIN,
        granted_by=ctx.user.id,
        **{p.value: getattr(permissions, p.value) for p in ALL_PERMISSIONS},
    )
    user.is_admin = True
    db.add(admin_role)
    db.commit()
    db.refresh(admin_role)
    logger.info(
        "Admin role granted",
        extra={"user_id": user.id, "role": admin_role.role, "granted_by": ctx.user.id},
    )
    return admin_role


def _editable(db: Session, ctx: AdminContext, user_id: str, action: str) -> AdminRole:
    if user_id == ctx.user.id:
        raise bad_request(f"You cannot {action} your own admin role")
    admin_role = db.get(AdminRole, user_id)
    if admin_role is None:
        raise not_found("This user does not have an admin role")
    user = db.get(User, user_id)
    if user is not None and user.is_super_admin:
        raise bad_request(f"Cannot {action} the admin role of a super admin")
    return admin_role


def update_role(db: Session, ctx: AdminContext, user_id: str, body: AdminRoleUpdate) -> AdminRole:
    """Merge: omitted role or permission flags keep their stored values. Last write wins."""
    admin_role = _editable(db, ctx, user_id, "change")
    if body.role is not None:
        admin_role.role = body.role
    if body.permissions is not None:
        for name, value in body.permissions.model_dump(exclude_none=True).items():
            setattr(admin_role, name, value)
    db.commit()
    db.refresh(admin_role)
    logger.info(
        "Admin role updated",
        extra={"user_id": user_id, "role": admin_role.role, "updated_by": ctx.user.id},
    )
    return admin_role


def delete_role(db: Session, ctx: AdminContext, user_id: str) -> None:
    admin_role = _editable(db, ctx, user_id, "remove")
    db.delete(admin_role)
    user = db.get(User, user_id)
    if user is not None:
        user.is_admin = False
    db.commit()
    logger.info("Admin role revoked", extra={"user_id": user_id, "revoked_by": ctx.user.id})
