"""ORM model for uploaded images."""

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import relationship

from app.models.base import Base, generate_uuid, utcnow

TITLE_MAX_LEN = 200
LOCATION_MAX_LEN = 200
CAMERA_MODEL_MAX_LEN = 100


class Image(Base):
    """
    Image metadata; the bytes live at the media provider under public_id.

    category_id is RESTRICT: a category cannot be removed while referenced.
    """

    __tablename__ = "images"
    __table_args__ = (
        Index("ix_images_uploaded_by_created_at", "uploaded_by", "created_at"),
        Index("ix_images_category_id_created_at", "category_id", "created_at"),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid)
    public_id = Column(String(255), nullable=False, unique=True, index=True)
    image_title = Column(String(TITLE_MAX_LEN), nullable=False, index=True)
    image_url = Column(String(2048), nullable=False)
    thumbnail_url = Column(String(2048), nullable=True)
    small_url = Column(String(2048), nullable=True)
    regular_url = Column(String(2048), nullable=True)
    category_id = Column(
        String(36),
        ForeignKey("categories.id", ondelete="RESTRICT"),
        nullable=False,
    )
    uploaded_by = Column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    location = Column(String(LOCATION_MAX_LEN), nullable=True, index=True)
    camera_model = Column(String(CAMERA_MODEL_MAX_LEN), nullable=True)
    views = Column(Integer, nullable=False, default=0)
    downloads = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    uploader = relationship("User", lazy="joined")
    category = relationship("Category", lazy="joined")
