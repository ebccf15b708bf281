"""Admin endpoints: dashboard, account and image moderation, and permission delegation.

Every route sits behind require_admin_area (super admin, grant holder or is_admin); each
then checks its own capability with require_permission, or require_super_admin for grants.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from app.api.v1.auth import (
    AppSettings,
    CurrentAccount,
    DbSession,
    require_admin_area,
    require_permission,
    require_super_admin,
)
from app.models import User
from app.schemas.admin import (
    AdminImageListResponse,
    AdminRoleCreate,
    AdminRoleListResponse,
    AdminRoleResponse,
    AdminRoleUpdate,
    AdminUserListResponse,
    AdminUserOut,
    AdminUserResponse,
    AdminUserUpdate,
    CategoryCount,
    DashboardResponse,
    DashboardStats,
    DeleteOutcomeResponse,
)
from app.schemas.common import MessageResponse, Pagination
from app.schemas.image import ImageOut
from app.services import admin_roles, dashboard
from app.services import images as images_service
from app.services import users as users_service
from app.services.filters import PageParams
from app.services.permissions import AdminContext, Permission, get_admin_role

router = APIRouter(dependencies=[Depends(require_admin_area)])

SuperAdmin = Annotated[AdminContext, Depends(require_super_admin)]
DashboardViewer = Annotated[AdminContext, Depends(require_permission(Permission.VIEW_DASHBOARD))]
UserManager = Annotated[AdminContext, Depends(require_permission(Permission.MANAGE_USERS))]
UserDeleter = Annotated[AdminContext, Depends(require_permission(Permission.DELETE_USERS))]
ImageManager = Annotated[AdminContext, Depends(require_permission(Permission.MANAGE_IMAGES))]
ImageDeleter = Annotated[AdminContext, Depends(require_permission(Permission.DELETE_IMAGES))]


def _user_out(user: User, image_count: int | None = None) -> AdminUserOut:
    return AdminUserOut.model_validate(user).model_copy(update={"image_count": image_count})


@router.get("/dashboard/stats", response_model=DashboardResponse)
def dashboard_stats(_ctx: DashboardViewer, db: DbSession) -> DashboardResponse:
    data = dashboard.collect(db)
    return DashboardResponse(
        stats=DashboardStats(
            total_users=data.total_users,
            total_images=data.total_images,
            category_stats=[CategoryCount(**row) for row in data.category_stats],
        ),
        recent_users=[_user_out(u) for u in data.recent_users],
        recent_images=[ImageOut.model_validate(i) for i in data.recent_images],
    )


@router.get("/users", response_model=AdminUserListResponse)
def list_users(
    _ctx: UserManager,
    db: DbSession,
    page: int | None = None,
    limit: int | None = None,
    search: str | None = None,
) -> AdminUserListResponse:
    """Paged; search matches username, email or display name."""
    params = PageParams.clamp(page, limit)
    rows, total = users_service.list_users(db, params, search=search)
    counts = users_service.image_counts(db, [u.id for u in rows])
    return AdminUserListResponse(
        users=[_user_out(u, counts.get(u.id, 0)) for u in rows],
        pagination=Pagination(**params.pagination(total)),
    )


@router.get("/users/{user_id}", response_model=AdminUserResponse)
def get_user(user_id: str, _ctx: UserManager, db: DbSession) -> AdminUserResponse:
    user = users_service.get_user(db, user_id)
    counts = users_service.image_counts(db, [user.id])
    return AdminUserResponse(user=_user_out(user, counts.get(user.id, 0)))


@router.put("/users/{user_id}", response_model=AdminUserResponse)
def update_user(
    user_id: str,
    body: AdminUserUpdate,
    ctx: UserManager,
    db: DbSession,
) -> AdminUserResponse:
    user = users_service.update_user(db, ctx, user_id, body)
    return AdminUserResponse(message="User updated", user=_user_out(user))


@router.delete("/users/{user_id}", response_model=DeleteOutcomeResponse)
async def delete_user(
    user_id: str,
    ctx: UserDeleter,
    db: DbSession,
    settings: AppSettings,
) -> DeleteOutcomeResponse:
    """
    Delete an account with its images, collections, grant and sessions. Remote image
    cleanup is best-effort; failures are listed in externalCleanupErrors.
    """
    outcome = await users_service.delete_user(db, settings, ctx, user_id)
    return DeleteOutcomeResponse(
        message="User deleted",
        persisted=outcome.persisted,
        images_deleted=outcome.images_deleted,
        external_cleanup_errors=outcome.external_cleanup_errors,
    )


@router.get("/images", response_model=AdminImageListResponse)
def list_images(
    _ctx: ImageManager,
    db: DbSession,
    page: int | None = None,
    limit: int | None = None,
    search: str | None = None,
    category: str | None = None,
    user_id: Annotated[str | None, Query(alias="userId")] = None,
) -> AdminImageListResponse:
    params = PageParams.clamp(page, limit)
    rows, total = images_service.list_images_admin(
        db, params, search=search, category=category, user_id=user_id
    )
    return AdminImageListResponse(
        images=[ImageOut.model_validate(i) for i in rows],
        pagination=Pagination(**params.pagination(total)),
    )


@router.delete("/images/{image_id}", response_model=DeleteOutcomeResponse)
async def delete_image(
    image_id: str,
    _ctx: ImageDeleter,
    db: DbSession,
    settings: AppSettings,
) -> DeleteOutcomeResponse:
    outcome = await images_service.delete_image(db, settings, image_id)
    return DeleteOutcomeResponse(
        message="Image deleted",
        persisted=outcome.persisted,
        images_deleted=outcome.images_deleted,
        external_cleanup_errors=outcome.external_cleanup_errors,
    )


@router.get("/roles", response_model=AdminRoleListResponse)
def list_roles(_ctx: SuperAdmin, db: DbSession) -> AdminRoleListResponse:
    return AdminRoleListResponse(
        admin_roles=[admin_roles.to_out(db, r) for r in admin_roles.list_roles(db)]
    )


@router.get("/roles/{user_id}", response_model=AdminRoleResponse)
def get_role(user_id: str, user: CurrentAccount, db: DbSession) -> AdminRoleResponse:
    """Own grant for any admin; anyone else's for super admins."""
    ctx = AdminContext(user=user, admin_role=get_admin_role(db, user.id))
    admin_role = admin_roles.get_role(db, ctx, user_id)
    return AdminRoleResponse(admin_role=admin_roles.to_out(db, admin_role))


@router.post("/roles", response_model=AdminRoleResponse, status_code=status.HTTP_201_CREATED)
def create_role(body: AdminRoleCreate, ctx: SuperAdmin, db: DbSession) -> AdminRoleResponse:
    admin_role = admin_roles.create_role(db, ctx, body)
    return AdminRoleResponse(
        message="Admin role granted", admin_role=admin_roles.to_out(db, admin_role)
    )


@router.put("/roles/{user_id}", response_model=AdminRoleResponse)
def update_role(
    user_id: str, body: AdminRoleUpdate, ctx: SuperAdmin, db: DbSession
) -> AdminRoleResponse:
    admin_role = admin_roles.update_role(db, ctx, user_id, body)
    return AdminRoleResponse(
        message="Admin role updated", admin_role=admin_roles.to_out(db, admin_role)
    )


@router.delete("/roles/{user_id}", response_model=MessageResponse)
def delete_role(user_id: str, ctx: SuperAdmin, db: DbSession) -> MessageResponse:
    admin_roles.delete_role(db, ctx, user_id)
    return MessageResponse(message="Admin role revoked")
