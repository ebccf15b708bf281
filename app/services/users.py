"""Account self-service and admin account management."""

import logging
from typing import TYPE_CHECKING

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core.security import hash_password, is_strong_password, is_valid_email, verify_password
from app.models import AdminRole, Collection, Image, User, collection_images
from app.models.user import BIO_MAX_LEN
from app.schemas.admin import AdminUserUpdate
from app.services import media
from app.services.auth import normalize_email, revoke_user_sessions
from app.services.errors import bad_request, conflict, forbidden, not_found
from app.services.filters import PageParams, contains_any, paginate
from app.services.images import ALLOWED_IMAGE_TYPES, DeleteOutcome, delete_user_images
from app.services.permissions import AdminContext

if TYPE_CHECKING:
    from app.core.config import Settings

logger = logging.getLogger(__name__)

AVATAR_FOLDER = "avatars"


def change_password(
    db: Session,
    user: User,
    current_password: str,
    new_password: str,
    new_password_match: str,
) -> None:
    """Replace a local account's password after checking the current one."""
    if user.is_oauth_user or not user.password_hash:
        raise bad_request("Password cannot be changed for accounts signed in with Google")
    if new_password != new_password_match:
        raise bad_request("New passwords do not match", field="newPasswordMatch")
    if not verify_password(current_password or "", user.password_hash):
        raise bad_request("Current password is incorrect", field="password")
    if not is_strong_password(new_password):
        raise bad_request(
            "Password must be at least 8 characters with uppercase, lowercase, and a number",
            field="newPassword",
        )
    user.password_hash = hash_password(new_password)
    db.commit()
    logger.info("Password changed", extra={"user_id": user.id})


def _ensure_email_free(db: Session, email: str, user_id: str) -> None:
    taken = db.query(User.id).filter(User.email == email, User.id != user_id).first()
    if taken is not None:
        raise conflict("Email already exists", field="email")


async def change_info(
    db: Session,
    settings: "Settings",
    user: User,
    display_name: str | None = None,
    email: str | None = None,
    bio: str | None = None,
    phone: str | None = None,
    avatar: tuple[bytes, str, str] | None = None,
) -> User:
    """
    Edit the caller's own profile.

    Email and avatar are fixed for externally authenticated accounts. avatar is
    (content, filename, content_type); the previous avatar is destroyed best-effort
    once the new one is stored.
    """
    if display_name is not None:
        display_name = display_name.strip()
        if not display_name:
            raise bad_request("Display name cannot be empty", field="displayName")
        user.display_name = display_name

    if email is not None and normalize_email(email) != user.email:
        if user.is_oauth_user:
            raise bad_request("Email cannot be changed for accounts signed in with Google")
        email = normalize_email(email)
        if not is_valid_email(email):
            raise bad_request("Invalid email format", field="email")
        _ensure_email_free(db, email, user.id)
        user.email = email

    if bio is not None:
        bio = bio.strip()
        if len(bio) > BIO_MAX_LEN:
            raise bad_request(f"Bio must be at most {BIO_MAX_LEN} characters", field="bio")
        user.bio = bio or None

    if phone is not None:
        user.phone = phone.strip() or None

    old_avatar_id = None
    if avatar is not None:
        if user.is_oauth_user:
            raise bad_request("Avatar cannot be changed for accounts signed in with Google")
        content, filename, content_type = avatar
        content_type = (content_type or "").split(";")[0].strip().lower()
        if content_type not in ALLOWED_IMAGE_TYPES:
            raise bad_request("Avatar must be a JPEG, PNG, GIF or WebP image", field="avatar")
        if len(content) > settings.MAX_UPLOAD_BYTES:
            raise bad_request("Avatar file is too large", field="avatar")
        uploaded = await media.upload_image(
            content,
            filename,
            content_type,
            settings,
            folder=f"{settings.MEDIA_FOLDER}/{AVATAR_FOLDER}",
        )
        old_avatar_id = user.avatar_id
        user.avatar_url = uploaded.secure_url
        user.avatar_id = uploaded.public_id

    db.commit()
    db.refresh(user)

    if old_avatar_id:
        await media.destroy_image_quietly(old_avatar_id, settings)
    return user


def list_users(
    db: Session, params: PageParams, search: str | None = None
) -> tuple[list[User], int]:
    query = db.query(User)
    predicate = contains_any([User.username, User.email, User.display_name], search)
    if predicate is not None:
        query = query.filter(predicate)
    return paginate(query.order_by(User.created_at.desc()), params)


def image_counts(db: Session, user_ids: list[str]) -> dict[str, int]:
    if not user_ids:
        return {}
    rows = (
        db.query(Image.uploaded_by, func.count(Image.id))
        .filter(Image.uploaded_by.in_(user_ids))
        .group_by(Image.uploaded_by)
        .all()
    )
    return dict(rows)


def get_user(db: Session, user_id: str) -> User:
    user = db.get(User, user_id)
    if user is None:
        raise not_found("User not found")
    return user


def update_user(db: Session, ctx: AdminContext, user_id: str, body: AdminUserUpdate) -> User:
    """Admin edit of display name, email and bio. Admin flags are managed through grants only."""
    user = get_user(db, user_id)
    if user.is_super_admin and not ctx.is_super_admin:
        raise forbidden("Super admin access required")

    if body.display_name is not None:
        display_name = body.display_name.strip()
        if not display_name:
            raise bad_request("Display name cannot be empty", field="displayName")
        user.display_name = display_name
    if body.email is not None and normalize_email(body.email) != user.email:
        email = normalize_email(body.email)
        if not is_valid_email(email):
            raise bad_request("Invalid email format", field="email")
        _ensure_email_free(db, email, user.id)
        user.email = email
    if body.bio is not None:
        user.bio = body.bio.strip() or None

    db.commit()
    db.refresh(user)
    return user


async def delete_user(
    db: Session, settings: "Settings", ctx: AdminContext, user_id: str
) -> DeleteOutcome:
    """
    Delete an account and everything it owns.

    Steps run in order and are not one transaction with the media provider: each owned
    image is destroyed remotely best-effort (failures are collected, not raised), then
    the image rows, collections, grant, sessions and account are removed in one commit.
    """
    if user_id == ctx.user.id:
        raise bad_request("You cannot delete your own account")
    user = get_user(db, user_id)
    if user.is_super_admin and not ctx.is_super_admin:
        raise forbidden("Super admin access required")

    avatar_id = user.avatar_id
    outcome = await delete_user_images(db, settings, user_id)

    owned = [cid for (cid,) in db.query(Collection.id).filter(Collection.user_id == user_id)]
    if owned:
        db.execute(
            collection_images.delete().where(collection_images.c.collection_id.in_(owned))
        )
        db.query(Collection).filter(Collection.id.in_(owned)).delete(synchronize_session=False)
    db.query(AdminRole).filter(AdminRole.granted_by == user_id).update(
        {AdminRole.granted_by: None}, synchronize_session=False
    )
    db.query(AdminRole).filter(AdminRole.user_id == user_id).delete(synchronize_session=False)
    revoked = revoke_user_sessions(db, user_id)
    db.delete(user)
    db.commit()

    if avatar_id:
        error = await media.destroy_image_quietly(avatar_id, settings)
        if error:
            outcome.external_cleanup_errors.append(error)

    log = logger.warning if outcome.external_cleanup_errors else logger.info
    log(
        "Account deleted",
        extra={
            "user_id": user_id,
            "images_deleted": outcome.images_deleted,
            "sessions_revoked": revoked,
            "external_cleanup_errors": len(outcome.external_cleanup_errors),
        },
    )
    return outcome
