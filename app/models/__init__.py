"""SQLAlchemy ORM models."""

from app.models.admin_role import AdminRole
from app.models.base import Base
from app.models.category import Category
from app.models.collection import Collection, collection_images
from app.models.image import Image
from app.models.session import RefreshSession
from app.models.user import User

__all__ = [
    "AdminRole",
    "Base",
    "Category",
    "Collection",
    "Image",
    "RefreshSession",
    "User",
    "collection_images",
]
