"""Schemas for the admin surface: users, images, permission grants and dashboard."""

from datetime import datetime
from typing import Literal

from pydantic import Field

from app.schemas.auth import CurrentUser
from app.schemas.common import CamelModel, Pagination
from app.schemas.image import ImageOut

RoleName = Literal["super_admin", "admin", "moderator"]


class PermissionSet(CamelModel):
    manage_users: bool = False
    delete_users: bool = False
    manage_images: bool = False
    delete_images: bool = False
    manage_categories: bool = False
    manage_admins: bool = False
    view_dashboard: bool = True


class PermissionPatch(CamelModel):
    """Partial permission update; omitted flags keep their stored value."""

    manage_users: bool | None = None
    delete_users: bool | None = None
    manage_images: bool | None = None
    delete_images: bool | None = None
    manage_categories: bool | None = None
    manage_admins: bool | None = None
    view_dashboard: bool | None = None


class AccountRef(CamelModel):
    id: str
    username: str
    email: str | None = None
    display_name: str


class AdminRoleOut(CamelModel):
    user_id: str
    user: AccountRef | None = None
    role: RoleName
    permissions: PermissionSet
    granted_by: AccountRef | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class AdminRoleCreate(CamelModel):
    user_id: str = Field(..., min_length=1)
    role: RoleName = "admin"
    permissions: PermissionSet | None = None


class AdminRoleUpdate(CamelModel):
    role: RoleName | None = None
    permissions: PermissionPatch | None = None


class AdminRoleResponse(CamelModel):
    message: str | None = None
    admin_role: AdminRoleOut


class AdminRoleListResponse(CamelModel):
    admin_roles: list[AdminRoleOut]


class AdminUserOut(CurrentUser):
    image_count: int | None = None


class AdminUserListResponse(CamelModel):
    users: list[AdminUserOut]
    pagination: Pagination


class AdminUserResponse(CamelModel):
    message: str | None = None
    user: AdminUserOut


class AdminUserUpdate(CamelModel):
    display_name: str | None = Field(default=None, max_length=255)
    email: str | None = Field(default=None, max_length=254)
    bio: str | None = Field(default=None, max_length=500)


class DeleteOutcomeResponse(CamelModel):
    """Result of a cross-system delete; remote cleanup failures do not block it."""

    message: str
    persisted: bool = True
    images_deleted: int = 0
    external_cleanup_errors: list[str] = Field(default_factory=list)


class CategoryCount(CamelModel):
    id: str | None = None
    name: str
    count: int


class DashboardStats(CamelModel):
    total_users: int
    total_images: int
    category_stats: list[CategoryCount]


class DashboardResponse(CamelModel):
    stats: DashboardStats
    recent_users: list[AdminUserOut]
    recent_images: list[ImageOut]


class AdminImageListResponse(CamelModel):
    images: list[ImageOut]
    pagination: Pagination
