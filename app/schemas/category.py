"""Schemas for categories (public list and admin management)."""

from datetime import datetime

from pydantic import Field

from app.schemas.common import CamelModel


class CategoryOut(CamelModel):
    id: str
    name: str
    description: str = ""


class CategoryAdminOut(CategoryOut):
    is_active: bool = True
    image_count: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None


class CategoryListResponse(CamelModel):
    categories: list[CategoryOut]


class CategoryAdminListResponse(CamelModel):
    categories: list[CategoryAdminOut]


class CategoryCreate(CamelModel):
    name: str = Field(..., max_length=100)
    description: str | None = Field(default=None, max_length=500)


class CategoryUpdate(CamelModel):
    name: str | None = Field(default=None, max_length=100)
    description: str | None = Field(default=None, max_length=500)
    is_active: bool | None = None


class CategoryResponse(CamelModel):
    message: str
    category: CategoryAdminOut
