"""ORM model for administrative permission grants."""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, String

from app.models.base import Base, utcnow

ROLE_SUPER_ADMIN = "super_admin"
ROLE_ADMIN = "admin"
ROLE_MODERATOR = "moderator"
ROLES = (ROLE_SUPER_ADMIN, ROLE_ADMIN, ROLE_MODERATOR)


class AdminRole(Base):
    """
    At most one grant per account: a role plus one boolean column per capability.

    A super_admin role supersedes the stored flags.
    """

    __tablename__ = "admin_roles"

    user_id = Column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    )
    role = Column(String(32), nullable=False, default=ROLE_ADMIN, index=True)
    manage_users = Column(Boolean, nullable=False, default=False)
    delete_users = Column(Boolean, nullable=False, default=False)
    manage_images = Column(Boolean, nullable=False, default=False)
    delete_images = Column(Boolean, nullable=False, default=False)
    manage_categories = Column(Boolean, nullable=False, default=False)
    manage_admins = Column(Boolean, nullable=False, default=False)
    view_dashboard = Column(Boolean, nullable=False, default=True)
    granted_by = Column(
        String(36),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )
