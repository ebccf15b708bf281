"""Gallery endpoints: browse and search, per-user listing, upload, and view/download counters."""

from typing import Annotated

from fastapi import APIRouter, File, Form, UploadFile, status

from app.api.v1.auth import AppSettings, CurrentAccount, DbSession
from app.schemas.common import Pagination
from app.schemas.image import (
    ImageCounterResponse,
    ImageListResponse,
    ImageOut,
    ImageResponse,
)
from app.services import images as images_service
from app.services.filters import PageParams

router = APIRouter()


def _page(rows, total: int, params: PageParams) -> ImageListResponse:
    return ImageListResponse(
        images=[ImageOut.model_validate(row) for row in rows],
        pagination=Pagination(**params.pagination(total)),
    )


@router.get("", response_model=ImageListResponse)
def list_images(
    db: DbSession,
    page: int | None = None,
    limit: int | None = None,
    search: str | None = None,
    category: str | None = None,
) -> ImageListResponse:
    """
    Public gallery, newest first. search matches title or location (case-insensitive,
    partial); category is an id or a case-insensitive name. limit is capped at 100.
    """
    params = PageParams.clamp(page, limit)
    rows, total = images_service.list_images(db, params, search=search, category=category)
    return _page(rows, total, params)


@router.get("/user/{user_id}", response_model=ImageListResponse)
def list_user_images(
    user_id: str,
    _user: CurrentAccount,
    db: DbSession,
    page: int | None = None,
    limit: int | None = None,
) -> ImageListResponse:
    params = PageParams.clamp(page, limit)
    rows, total = images_service.list_user_images(db, user_id, params)
    return _page(rows, total, params)


@router.post("/upload", response_model=ImageResponse, status_code=status.HTTP_201_CREATED)
async def upload_image(
    user: CurrentAccount,
    db: DbSession,
    settings: AppSettings,
    image: Annotated[UploadFile | None, File()] = None,
    image_title: Annotated[str | None, Form(alias="imageTitle")] = None,
    image_category: Annotated[str | None, Form(alias="imageCategory")] = None,
    location: Annotated[str | None, Form()] = None,
    camera_model: Annotated[str | None, Form(alias="cameraModel")] = None,
) -> ImageResponse:
    """
    Multipart upload. The file goes to the media provider first, then the record is
    written; a failed write removes the remote file again.
    """
    # One byte past the limit is enough for the size check to reject it.
    content = await image.read(settings.MAX_UPLOAD_BYTES + 1) if image is not None else b""
    created = await images_service.upload_image(
        db,
        settings,
        user,
        content=content,
        filename=(image.filename if image is not None else None) or "upload",
        content_type=(image.content_type if image is not None else None) or "",
        title=image_title or "",
        category_ref=image_category or "",
        location=location,
        camera_model=camera_model,
    )
    return ImageResponse(message="Image uploaded", image=ImageOut.model_validate(created))


@router.patch("/{image_id}/view", response_model=ImageCounterResponse)
def increment_view(image_id: str, db: DbSession) -> ImageCounterResponse:
    image = images_service.increment_counter(db, image_id, "views")
    return ImageCounterResponse(views=image.views, downloads=image.downloads)


@router.patch("/{image_id}/download", response_model=ImageCounterResponse)
def increment_download(image_id: str, db: DbSession) -> ImageCounterResponse:
    image = images_service.increment_counter(db, image_id, "downloads")
    return ImageCounterResponse(views=image.views, downloads=image.downloads)
