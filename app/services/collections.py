"""User collections: named, optionally public sets of gallery images."""

from sqlalchemy import or_
from sqlalchemy.orm import Session, selectinload

from app.models import Collection, Image, User
from app.models.base import utcnow
from app.schemas.collection import CollectionCreate, CollectionOut, CollectionUpdate
from app.services.errors import bad_request, not_found

PUBLIC_LIST_LIMIT = 20


def to_out(collection: Collection) -> CollectionOut:
    out = CollectionOut.model_validate(collection)
    out.image_count = len(collection.images)
    return out


def _base_query(db: Session):
    return db.query(Collection).options(
        selectinload(Collection.images), selectinload(Collection.cover_image)
    )


def _owned(db: Session, user: User, collection_id: str) -> Collection:
    collection = (
        _base_query(db)
        .filter(Collection.id == collection_id, Collection.user_id == user.id)
        .first()
    )
    if collection is None:
        raise not_found("Collection not found")
    return collection


def list_own(db: Session, user: User) -> list[Collection]:
    return (
        _base_query(db)
        .filter(Collection.user_id == user.id)
        .order_by(Collection.created_at.desc())
        .all()
    )


def list_public(db: Session) -> list[Collection]:
    return (
        _base_query(db)
        .filter(Collection.is_public.is_(True))
        .order_by(Collection.created_at.desc())
        .limit(PUBLIC_LIST_LIMIT)
        .all()
    )


def get_visible(db: Session, user: User, collection_id: str) -> Collection:
    """A collection the caller owns or one that is public."""
    collection = (
        _base_query(db)
        .filter(
            Collection.id == collection_id,
            or_(Collection.user_id == user.id, Collection.is_public.is_(True)),
        )
        .first()
    )
    if collection is None:
        raise not_found("Collection not found")
    return collection


def create(db: Session, user: User, body: CollectionCreate) -> Collection:
    name = (body.name or "").strip()
    if not name:
        raise bad_request("Collection name is required", field="name")
    collection = Collection(
        name=name,
        description=(body.description or "").strip(),
        user_id=user.id,
        is_public=body.is_public,
    )
    db.add(collection)
    db.commit()
    return _owned(db, user, collection.id)


def update(db: Session, user: User, collection_id: str, body: CollectionUpdate) -> Collection:
    collection = _owned(db, user, collection_id)
    if body.name is not None:
        name = body.name.strip()
        if not name:
            raise bad_request("Collection name is required", field="name")
        collection.name = name
    if body.description is not None:
        collection.description = body.description.strip()
    if body.is_public is not None:
        collection.is_public = body.is_public
    if "cover_image" in body.model_fields_set:
        if body.cover_image and body.cover_image not in {img.id for img in collection.images}:
            raise bad_request("Cover image must belong to the collection", field="coverImage")
        collection.cover_image_id = body.cover_image or None
    db.commit()
    return _owned(db, user, collection_id)


def delete(db: Session, user: User, collection_id: str) -> None:
    collection = _owned(db, user, collection_id)
    db.delete(collection)
    db.commit()


def add_image(db: Session, user: User, collection_id: str, image_id: str) -> Collection:
    collection = _owned(db, user, collection_id)
    image = db.get(Image, image_id)
    if image is None:
        raise not_found("Image not found")
    if any(img.id == image_id for img in collection.images):
        raise bad_request("Image already in collection")

    collection.images.append(image)
    if collection.cover_image_id is None:
        collection.cover_image_id = image.id
    collection.updated_at = utcnow()
    db.commit()
    return _owned(db, user, collection_id)


def remove_image(db: Session, user: User, collection_id: str, image_id: str) -> Collection:
    """Removing an absent image is a no-op; the cover falls back to the first remaining image."""
    collection = _owned(db, user, collection_id)
    collection.images = [img for img in collection.images if img.id != image_id]
    if collection.cover_image_id == image_id:
        collection.cover_image_id = collection.images[0].id if collection.images else None
    db.commit()
    return _owned(db, user, collection_id)
