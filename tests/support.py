"""Shared fixtures for the unittest suites: an in-memory database and account builders."""

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "test-signing-secret-not-for-production")
os.environ.setdefault("APP_ENV", "dev")
os.environ.setdefault("SESSION_SWEEP_ENABLED", "false")

from unittest.mock import MagicMock

from pydantic import SecretStr
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.config import get_settings
from app.core.security import hash_password
from app.models import AdminRole, Base, Category, Image, User

PASSWORD = "Password1"
_PASSWORD_HASH = hash_password(PASSWORD)


def make_session_factory() -> sessionmaker:
    """Fresh in-memory SQLite database with every table created."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def app_settings(**overrides):
    """Real Settings with media credentials filled in, plus any overrides."""
    values = {
        "CLOUDINARY_CLOUD_NAME": "demo",
        "CLOUDINARY_API_KEY": "key",
        "CLOUDINARY_API_SECRET": SecretStr("secret"),
    }
    values.update(overrides)
    return get_settings().model_copy(update=values)


def media_settings() -> MagicMock:
    settings = MagicMock()
    settings.CLOUDINARY_CLOUD_NAME = "demo"
    settings.CLOUDINARY_API_KEY = "key"
    settings.CLOUDINARY_API_SECRET = SecretStr("secret")
    settings.CLOUDINARY_API_BASE_URL = "https://api.cloudinary.com/v1_1"
    settings.MEDIA_FOLDER = "photo-app-images"
    settings.MEDIA_UPLOAD_TIMEOUT_SEC = 90.0
    settings.MEDIA_REQUEST_TIMEOUT_SEC = 30.0
    settings.MAX_UPLOAD_BYTES = 10 * 1024 * 1024
    return settings


def make_user(
    db: Session,
    username: str = "alice",
    *,
    email: str | None = None,
    is_admin: bool = False,
    is_super_admin: bool = False,
    is_oauth_user: bool = False,
) -> User:
    user = User(
        username=username,
        email=email or f"{username}@example.com",
        password_hash=None if is_oauth_user else _PASSWORD_HASH,
        display_name=username.title(),
        is_admin=is_admin,
        is_super_admin=is_super_admin,
        is_oauth_user=is_oauth_user,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def grant(db: Session, user: User, role: str = "admin", **flags: bool) -> AdminRole:
    admin_role = AdminRole(user_id=user.id, role=role, **flags)
    user.is_admin = True
    db.add(admin_role)
    db.commit()
    db.refresh(admin_role)
    return admin_role


def make_category(db: Session, name: str = "Nature", is_active: bool = True) -> Category:
    category = Category(name=name, description="", is_active=is_active)
    db.add(category)
    db.commit()
    db.refresh(category)
    return category


def make_image(
    db: Session,
    owner: User,
    category: Category,
    title: str = "Sunset",
    location: str | None = None,
    public_id: str | None = None,
) -> Image:
    image = Image(
        public_id=public_id or f"photo-app-images/{title.lower().replace(' ', '-')}-{owner.username}",
        image_url="https://res.cloudinary.com/demo/image/upload/v1/photo.jpg",
        image_title=title,
        category_id=category.id,
        uploaded_by=owner.id,
        location=location,
    )
    db.add(image)
    db.commit()
    db.refresh(image)
    return image
