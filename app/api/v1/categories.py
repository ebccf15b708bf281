"""Category endpoints: public active list and admin management (manage_categories)."""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from app.api.v1.auth import DbSession, require_permission
from app.models import Category
from app.schemas.category import (
    CategoryAdminListResponse,
    CategoryAdminOut,
    CategoryCreate,
    CategoryListResponse,
    CategoryOut,
    CategoryResponse,
    CategoryUpdate,
)
from app.schemas.common import MessageResponse
from app.services import categories as categories_service
from app.services.permissions import AdminContext, Permission

router = APIRouter()

CategoryManager = Annotated[AdminContext, Depends(require_permission(Permission.MANAGE_CATEGORIES))]


def _admin_out(category: Category, image_count: int) -> CategoryAdminOut:
    return CategoryAdminOut.model_validate(category).model_copy(update={"image_count": image_count})


@router.get("", response_model=CategoryListResponse)
def list_categories(db: DbSession) -> CategoryListResponse:
    return CategoryListResponse(
        categories=[CategoryOut.model_validate(c) for c in categories_service.list_active(db)]
    )


@router.get("/admin", response_model=CategoryAdminListResponse)
def list_categories_admin(_ctx: CategoryManager, db: DbSession) -> CategoryAdminListResponse:
    """All categories, inactive included, with the number of images in each."""
    return CategoryAdminListResponse(
        categories=[_admin_out(c, n) for c, n in categories_service.list_with_counts(db)]
    )


@router.post("/admin", response_model=CategoryResponse, status_code=status.HTTP_201_CREATED)
def create_category(
    body: CategoryCreate, _ctx: CategoryManager, db: DbSession
) -> CategoryResponse:
    category = categories_service.create_category(db, body)
    return CategoryResponse(message="Category created", category=_admin_out(category, 0))


@router.put("/admin/{category_id}", response_model=CategoryResponse)
@router.patch("/admin/{category_id}", response_model=CategoryResponse)
def update_category(
    category_id: str,
    body: CategoryUpdate,
    _ctx: CategoryManager,
    db: DbSession,
) -> CategoryResponse:
    category = categories_service.update_category(db, category_id, body)
    return CategoryResponse(
        message="Category updated",
        category=_admin_out(category, categories_service.image_count(db, category.id)),
    )


@router.delete("/admin/{category_id}", response_model=MessageResponse)
def delete_category(category_id: str, _ctx: CategoryManager, db: DbSession) -> MessageResponse:
    """Refused with 400 while any image uses the category."""
    categories_service.delete_category(db, category_id)
    return MessageResponse(message="Category deleted")
