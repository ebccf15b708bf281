"""Schemas for image listing and upload responses."""

from datetime import datetime

from app.schemas.common import CamelModel, Pagination


class UploaderSummary(CamelModel):
    id: str
    username: str
    display_name: str
    avatar_url: str = ""


class CategorySummary(CamelModel):
    id: str
    name: str


class ImageOut(CamelModel):
    id: str
    public_id: str
    image_title: str
    image_url: str
    thumbnail_url: str | None = None
    small_url: str | None = None
    regular_url: str | None = None
    category: CategorySummary | None = None
    uploader: UploaderSummary | None = None
    location: str | None = None
    camera_model: str | None = None
    views: int = 0
    downloads: int = 0
    created_at: datetime | None = None


class ImageThumb(CamelModel):
    """Compact image view used inside collections."""

    id: str
    image_title: str
    image_url: str
    thumbnail_url: str | None = None


class ImageListResponse(CamelModel):
    images: list[ImageOut]
    pagination: Pagination


class ImageResponse(CamelModel):
    message: str
    image: ImageOut


class ImageCounterResponse(CamelModel):
    views: int
    downloads: int
