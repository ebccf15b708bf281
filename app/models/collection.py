"""ORM models for user-curated image collections."""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, String, Table
from sqlalchemy.orm import relationship

from app.models.base import Base, generate_uuid, utcnow

NAME_MAX_LEN = 100
DESCRIPTION_MAX_LEN = 500

collection_images = Table(
    "collection_images",
    Base.metadata,
    Column(
        "collection_id",
        String(36),
        ForeignKey("collections.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "image_id",
        String(36),
        ForeignKey("images.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column("added_at", DateTime(timezone=True), nullable=False, default=utcnow),
)


class Collection(Base):
    __tablename__ = "collections"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    name = Column(String(NAME_MAX_LEN), nullable=False)
    description = Column(String(DESCRIPTION_MAX_LEN), nullable=False, default="")
    user_id = Column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    is_public = Column(Boolean, nullable=False, default=False, index=True)
    cover_image_id = Column(
        String(36),
        ForeignKey("images.id", ondelete="SET NULL"),
        nullable=True,
    )
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    owner = relationship("User", lazy="joined")
    images = relationship(
        "Image",
        secondary=collection_images,
        order_by=collection_images.c.added_at,
    )
    cover_image = relationship("Image", foreign_keys=[cover_image_id])
