"""Schemas for user collections."""

from datetime import datetime

from pydantic import Field

from app.schemas.common import CamelModel
from app.schemas.image import ImageThumb, UploaderSummary


class CollectionOut(CamelModel):
    id: str
    name: str
    description: str = ""
    user_id: str
    owner: UploaderSummary | None = None
    is_public: bool = False
    cover_image: ImageThumb | None = None
    images: list[ImageThumb] = Field(default_factory=list)
    image_count: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None


class CollectionListResponse(CamelModel):
    collections: list[CollectionOut]


class CollectionResponse(CamelModel):
    message: str | None = None
    collection: CollectionOut


class CollectionCreate(CamelModel):
    name: str = Field(..., max_length=100)
    description: str | None = Field(default=None, max_length=500)
    is_public: bool = False


class CollectionUpdate(CamelModel):
    name: str | None = Field(default=None, max_length=100)
    description: str | None = Field(default=None, max_length=500)
    is_public: bool | None = None
    cover_image: str | None = Field(default=None, description="Image id to use as cover")
