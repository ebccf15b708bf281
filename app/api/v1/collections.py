"""Collection endpoints for the authenticated caller."""

from fastapi import APIRouter, status

from app.api.v1.auth import CurrentAccount, DbSession
from app.schemas.collection import (
    CollectionCreate,
    CollectionListResponse,
    CollectionResponse,
    CollectionUpdate,
)
from app.schemas.common import MessageResponse
from app.services import collections as collections_service
from app.services.collections import to_out

router = APIRouter()


@router.get("", response_model=CollectionListResponse)
def list_own(user: CurrentAccount, db: DbSession) -> CollectionListResponse:
    return CollectionListResponse(
        collections=[to_out(c) for c in collections_service.list_own(db, user)]
    )


@router.get("/public", response_model=CollectionListResponse)
def list_public(_user: CurrentAccount, db: DbSession) -> CollectionListResponse:
    """The 20 newest public collections."""
    return CollectionListResponse(
        collections=[to_out(c) for c in collections_service.list_public(db)]
    )


@router.get("/{collection_id}", response_model=CollectionResponse)
def get_collection(collection_id: str, user: CurrentAccount, db: DbSession) -> CollectionResponse:
    return CollectionResponse(
        collection=to_out(collections_service.get_visible(db, user, collection_id))
    )


@router.post("", response_model=CollectionResponse, status_code=status.HTTP_201_CREATED)
def create_collection(
    body: CollectionCreate, user: CurrentAccount, db: DbSession
) -> CollectionResponse:
    collection = collections_service.create(db, user, body)
    return CollectionResponse(message="Collection created", collection=to_out(collection))


@router.put("/{collection_id}", response_model=CollectionResponse)
def update_collection(
    collection_id: str,
    body: CollectionUpdate,
    user: CurrentAccount,
    db: DbSession,
) -> CollectionResponse:
    collection = collections_service.update(db, user, collection_id, body)
    return CollectionResponse(message="Collection updated", collection=to_out(collection))


@router.delete("/{collection_id}", response_model=MessageResponse)
def delete_collection(collection_id: str, user: CurrentAccount, db: DbSession) -> MessageResponse:
    collections_service.delete(db, user, collection_id)
    return MessageResponse(message="Collection deleted")


@router.post("/{collection_id}/images/{image_id}", response_model=CollectionResponse)
def add_image(
    collection_id: str, image_id: str, user: CurrentAccount, db: DbSession
) -> CollectionResponse:
    collection = collections_service.add_image(db, user, collection_id, image_id)
    return CollectionResponse(message="Image added to collection", collection=to_out(collection))


@router.delete("/{collection_id}/images/{image_id}", response_model=CollectionResponse)
def remove_image(
    collection_id: str, image_id: str, user: CurrentAccount, db: DbSession
) -> CollectionResponse:
    collection = collections_service.remove_image(db, user, collection_id, image_id)
    return CollectionResponse(
        message="Image removed from collection", collection=to_out(collection)
    )
