"""ORM model for accounts (local and externally authenticated)."""

from sqlalchemy import Boolean, Column, DateTime, String

from app.models.base import Base, generate_uuid, utcnow

BIO_MAX_LEN = 500


class User(Base):
    """
    Account record.

    password_hash is NULL for externally authenticated (OAuth) accounts; those accounts
    never have a password set or checked. is_super_admin is the bootstrap flag that
    grants every permission even without an admin_roles row.
    """

    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    username = Column(String(64), nullable=False, unique=True, index=True)
    email = Column(String(254), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=True)
    display_name = Column(String(255), nullable=False)
    avatar_url = Column(String(2048), nullable=False, default="")
    avatar_id = Column(String(255), nullable=True)
    bio = Column(String(BIO_MAX_LEN), nullable=True)
    phone = Column(String(32), nullable=True)
    is_admin = Column(Boolean, nullable=False, default=False, index=True)
    is_super_admin = Column(Boolean, nullable=False, default=False, index=True)
    is_oauth_user = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )
