"""Aggregate counts for the admin dashboard."""

from dataclasses import dataclass

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.models import Category, Image, User

TOP_CATEGORIES = 10
RECENT_USERS = 5
RECENT_IMAGES = 10


@dataclass(slots=True)
class DashboardData:
    total_users: int
    total_images: int
    category_stats: list[dict]
    recent_users: list[User]
    recent_images: list[Image]


def collect(db: Session) -> DashboardData:
    count = func.count(Image.id).label("count")
    rows = (
        db.query(Image.category_id, Category.name, count)
        .outerjoin(Category, Category.id == Image.category_id)
        .group_by(Image.category_id, Category.name)
        .order_by(count.desc())
        .limit(TOP_CATEGORIES)
        .all()
    )
    return DashboardData(
        total_users=db.query(func.count(User.id)).scalar() or 0,
        total_images=db.query(func.count(Image.id)).scalar() or 0,
        category_stats=[
            {"id": category_id, "name": name or "Unknown", "count": n}
            for category_id, name, n in rows
        ],
        recent_users=db.query(User).order_by(User.created_at.desc()).limit(RECENT_USERS).all(),
        recent_images=db.query(Image).order_by(Image.created_at.desc()).limit(RECENT_IMAGES).all(),
    )
