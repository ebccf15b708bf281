"""ORM model for refresh-token sessions."""

from datetime import UTC, datetime

from sqlalchemy import Column, DateTime, ForeignKey, String
from sqlalchemy.ext.hybrid import hybrid_method

from app.models.base import Base, utcnow


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes (SQLite drops tzinfo) as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


class RefreshSession(Base):
    """
    Server-side record backing one refresh secret.

    The row exists exactly as long as the secret is valid; one row per sign-in, so an
    account signed in on several devices has several rows.
    """

    __tablename__ = "sessions"

    refresh_token = Column(String(128), primary_key=True)
    user_id = Column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    expires_at = Column(DateTime(timezone=True), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    # One predicate for both the refresh path (instance) and the sweep (SQL).
    @hybrid_method
    def is_expired(self, now: datetime) -> bool:
        return as_utc(self.expires_at) < now

    @is_expired.expression
    def is_expired(cls, now: datetime):
        return cls.expires_at < now
