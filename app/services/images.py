"""Image gallery: search, two-phase upload and best-effort deletion."""

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.models import Collection, Image, User, collection_images
from app.models.image import CAMERA_MODEL_MAX_LEN, LOCATION_MAX_LEN, TITLE_MAX_LEN
from app.services import media
from app.services.categories import resolve_category
from app.services.errors import bad_request, not_found
from app.services.filters import PageParams, contains_any, paginate

if TYPE_CHECKING:
    from app.core.config import Settings

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_TYPES = frozenset({"image/jpeg", "image/png", "image/gif", "image/webp"})


@dataclass(slots=True)
class DeleteOutcome:
    """Partial-outcome result of a delete spanning the database and the media provider."""

    persisted: bool = True
    images_deleted: int = 0
    external_cleanup_errors: list[str] = field(default_factory=list)


def _clean(value: str | None, max_len: int, name: str) -> str | None:
    value = (value or "").strip()
    if not value:
        return None
    if len(value) > max_len:
        raise bad_request(f"{name} must be less than {max_len} characters")
    return value


def _gallery_query(db: Session, search: str | None):
    query = db.query(Image)
    predicate = contains_any([Image.image_title, Image.location], search)
    if predicate is not None:
        query = query.filter(predicate)
    return query


def list_images(
    db: Session,
    params: PageParams,
    search: str | None = None,
    category: str | None = None,
) -> tuple[list[Image], int]:
    """Public gallery, newest first. An unknown category yields an empty page."""
    query = _gallery_query(db, search)
    if category and category.strip():
        resolved = resolve_category(db, category)
        if resolved is None:
            return [], 0
        query = query.filter(Image.category_id == resolved.id)
    return paginate(query.order_by(Image.created_at.desc()), params)


def list_images_admin(
    db: Session,
    params: PageParams,
    search: str | None = None,
    category: str | None = None,
    user_id: str | None = None,
) -> tuple[list[Image], int]:
    """Admin listing: also filters by uploader and matches inactive categories."""
    query = _gallery_query(db, search)
    if category and category.strip():
        resolved = resolve_category(db, category, active_only=False)
        if resolved is None:
            return [], 0
        query = query.filter(Image.category_id == resolved.id)
    if user_id and user_id.strip():
        query = query.filter(Image.uploaded_by == user_id.strip())
    return paginate(query.order_by(Image.created_at.desc()), params)


def list_user_images(db: Session, user_id: str, params: PageParams) -> tuple[list[Image], int]:
    query = db.query(Image).filter(Image.uploaded_by == user_id).order_by(Image.created_at.desc())
    return paginate(query, params)


def validate_upload(
    settings: "Settings",
    content: bytes | None,
    content_type: str | None,
    title: str | None,
    category_ref: str | None,
) -> None:
    if not content:
        raise bad_request("Image file is required", field="image")
    if not (title or "").strip() or not (category_ref or "").strip():
        raise bad_request("Title and category are required")
    content_type = (content_type or "").split(";")[0].strip().lower()
    if not content_type.startswith("image/"):
        raise bad_request("File must be an image", field="image")
    if content_type not in ALLOWED_IMAGE_TYPES:
        raise bad_request(
            f"Invalid file type. Allowed types: {', '.join(sorted(ALLOWED_IMAGE_TYPES))}",
            field="image",
        )
    if len(content) > settings.MAX_UPLOAD_BYTES:
        raise bad_request(
            f"File size too large. Maximum size is {settings.MAX_UPLOAD_BYTES // (1024 * 1024)}MB",
            field="image",
        )


async def upload_image(
    db: Session,
    settings: "Settings",
    user: User,
    content: bytes,
    filename: str,
    content_type: str,
    title: str,
    category_ref: str,
    location: str | None = None,
    camera_model: str | None = None,
) -> Image:
    """
    Store the bytes at the media provider, then record the image.

    If the database write fails the remote object is destroyed before the original
    error propagates; a failed destroy is logged and does not replace that error.
    """
    validate_upload(settings, content, content_type, title, category_ref)
    title = _clean(title, TITLE_MAX_LEN, "Image title")
    location = _clean(location, LOCATION_MAX_LEN, "Location")
    camera_model = _clean(camera_model, CAMERA_MODEL_MAX_LEN, "Camera model")

    category = resolve_category(db, category_ref)
    if category is None:
        raise bad_request("Category not found", field="imageCategory")

    uploaded = await media.upload_image(content, filename, content_type, settings)

    try:
        image = Image(
            public_id=uploaded.public_id,
            image_url=uploaded.secure_url,
            thumbnail_url=media.variant_url(uploaded.secure_url, media.THUMBNAIL_TRANSFORMATION),
            small_url=media.variant_url(uploaded.secure_url, media.SMALL_TRANSFORMATION),
            regular_url=media.variant_url(uploaded.secure_url, media.REGULAR_TRANSFORMATION),
            image_title=title,
            category_id=category.id,
            uploaded_by=user.id,
            location=location,
            camera_model=camera_model,
        )
        db.add(image)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.error(
            "Image record could not be saved; rolling back media upload",
            extra={"public_id": uploaded.public_id},
        )
        await media.destroy_image_quietly(uploaded.public_id, settings)
        raise

    db.refresh(image)
    logger.info(
        "Image uploaded",
        extra={"image_id": image.id, "public_id": image.public_id, "user_id": user.id},
    )
    return image


def increment_counter(db: Session, image_id: str, counter: str) -> Image:
    """Atomically bump views or downloads."""
    column = getattr(Image, counter)
    updated = (
        db.query(Image)
        .filter(Image.id == image_id)
        .update({column: column + 1}, synchronize_session=False)
    )
    if not updated:
        raise not_found("Image not found")
    db.commit()
    image = db.get(Image, image_id, populate_existing=True)
    if image is None:
        raise not_found("Image not found")
    return image


async def delete_image(db: Session, settings: "Settings", image_id: str) -> DeleteOutcome:
    """Destroy the remote object best-effort, then delete the record regardless."""
    image = db.get(Image, image_id)
    if image is None:
        raise not_found("Image not found")

    outcome = DeleteOutcome(images_deleted=1)
    error = await media.destroy_image_quietly(image.public_id, settings)
    if error:
        outcome.external_cleanup_errors.append(error)

    _detach_from_collections(db, [image.id])
    db.delete(image)
    db.commit()
    return outcome


async def delete_user_images(db: Session, settings: "Settings", user_id: str) -> DeleteOutcome:
    """
    Cascade step for account deletion: destroy each owned image at the provider, then
    delete the rows. Does not commit.
    """
    images = db.query(Image).filter(Image.uploaded_by == user_id).all()
    outcome = DeleteOutcome(images_deleted=len(images))
    for image in images:
        error = await media.destroy_image_quietly(image.public_id, settings)
        if error:
            outcome.external_cleanup_errors.append(error)

    image_ids = [image.id for image in images]
    if image_ids:
        _detach_from_collections(db, image_ids)
        db.query(Image).filter(Image.id.in_(image_ids)).delete(synchronize_session=False)
    return outcome


def _detach_from_collections(db: Session, image_ids: list[str]) -> None:
    db.execute(collection_images.delete().where(collection_images.c.image_id.in_(image_ids)))
    db.query(Collection).filter(Collection.cover_image_id.in_(image_ids)).update(
        {Collection.cover_image_id: None}, synchronize_session=False
    )
