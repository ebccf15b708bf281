"""Self-service account endpoints for the authenticated caller."""

from typing import Annotated

from fastapi import APIRouter, File, Form, UploadFile

from app.api.v1.auth import AppSettings, CurrentAccount, DbSession
from app.schemas.auth import CurrentUser, CurrentUserResponse
from app.schemas.common import MessageResponse
from app.schemas.user import ChangePasswordRequest, ProfileResponse
from app.services import users as users_service

router = APIRouter()


@router.get("/me", response_model=CurrentUserResponse)
def me(user: CurrentAccount) -> CurrentUserResponse:
    """The authenticated account, without its password hash."""
    return CurrentUserResponse(user=CurrentUser.model_validate(user))


@router.put("/change-password", response_model=MessageResponse)
def change_password(
    body: ChangePasswordRequest,
    user: CurrentAccount,
    db: DbSession,
) -> MessageResponse:
    users_service.change_password(
        db, user, body.password, body.new_password, body.new_password_match
    )
    return MessageResponse(message="Password changed")


@router.put("/change-info", response_model=ProfileResponse)
async def change_info(
    user: CurrentAccount,
    db: DbSession,
    settings: AppSettings,
    display_name: Annotated[str | None, Form(alias="displayName")] = None,
    email: Annotated[str | None, Form()] = None,
    bio: Annotated[str | None, Form()] = None,
    phone: Annotated[str | None, Form()] = None,
    avatar: Annotated[UploadFile | None, File()] = None,
) -> ProfileResponse:
    """
    Multipart profile edit. Every field is optional; omitted fields keep their value.
    An avatar part replaces the stored avatar.
    """
    avatar_part = None
    if avatar is not None and avatar.filename:
        content = await avatar.read(settings.MAX_UPLOAD_BYTES + 1)
        avatar_part = (content, avatar.filename, avatar.content_type or "")
    updated = await users_service.change_info(
        db,
        settings,
        user,
        display_name=display_name,
        email=email,
        bio=bio,
        phone=phone,
        avatar=avatar_part,
    )
    return ProfileResponse(message="Profile updated", user=CurrentUser.model_validate(updated))
