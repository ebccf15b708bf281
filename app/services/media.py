"""Media provider client: upload and destroy images through Cloudinary's REST API."""

from __future__ import annotations

import hashlib
import json
import logging
import time
import uuid
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import httpx

if TYPE_CHECKING:
    from app.core.config import Settings

logger = logging.getLogger(__name__)

# Delivery transformations for the progressive-loading variants.
THUMBNAIL_TRANSFORMATION = "c_limit,w_200,q_auto,f_auto"
SMALL_TRANSFORMATION = "c_limit,w_400,q_auto,f_auto"
REGULAR_TRANSFORMATION = "c_limit,w_1080,q_auto,f_auto"


class MediaProviderError(Exception):
    """Raised when the media provider rejects a request or cannot be reached."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.message = message
        self.status_code = status_code
        self.cause = cause
        super().__init__(message)


class MediaNotConfiguredError(MediaProviderError):
    """Raised when an upload is attempted without provider credentials."""


class MediaTimeoutError(MediaProviderError):
    """Raised when the provider call exceeds its configured timeout."""


@dataclass(slots=True)
class UploadedMedia:
    public_id: str
    secure_url: str
    width: int | None = None
    height: int | None = None
    format: str | None = None


def is_media_configured(settings: Settings) -> bool:
    if not settings.CLOUDINARY_CLOUD_NAME or not settings.CLOUDINARY_CLOUD_NAME.strip():
        return False
    if not settings.CLOUDINARY_API_KEY or not settings.CLOUDINARY_API_KEY.strip():
        return False
    if settings.CLOUDINARY_API_SECRET is None:
        return False
    return bool(settings.CLOUDINARY_API_SECRET.get_secret_value().strip())


def sign_params(params: dict[str, Any], api_secret: str) -> str:
    """
    Cloudinary request signature: SHA-1 over the sorted 'key=value' pairs joined by '&',
    followed by the API secret. Empty values are not signed.
    """
    to_sign = "&".join(
        f"{key}={params[key]}"
        for key in sorted(params)
        if params[key] is not None and params[key] != ""
    )
    return hashlib.sha1(f"{to_sign}{api_secret}".encode("utf-8")).hexdigest()


def variant_url(secure_url: str, transformation: str) -> str:
    """Insert a delivery transformation after '/upload/' in a Cloudinary URL."""
    marker = "/upload/"
    if marker not in secure_url:
        return secure_url
    head, tail = secure_url.split(marker, 1)
    return f"{head}{marker}{transformation}/{tail}"


def _endpoint(settings: Settings, action: str) -> str:
    base = settings.CLOUDINARY_API_BASE_URL.rstrip("/")
    return f"{base}/{settings.CLOUDINARY_CLOUD_NAME}/image/{action}"


def _signed_form(settings: Settings, params: dict[str, Any]) -> dict[str, str]:
    if settings.CLOUDINARY_API_SECRET is None:
        raise MediaNotConfiguredError("Media storage is not configured.")
    signed = dict(params)
    signed["timestamp"] = int(time.time())
    signature = sign_params(signed, settings.CLOUDINARY_API_SECRET.get_secret_value())
    form = {k: str(v) for k, v in signed.items() if v is not None and v != ""}
    form["api_key"] = settings.CLOUDINARY_API_KEY or ""
    form["signature"] = signature
    return form


def _error_detail(resp: httpx.Response) -> str:
    try:
        body = resp.json()
        return str(body.get("error", {}).get("message") or body)[:500]
    except (json.JSONDecodeError, ValueError, AttributeError):
        return resp.text[:500] if resp.text else "Unknown error"


async def upload_image(
    content: bytes,
    filename: str,
    content_type: str,
    settings: Settings,
    folder: str | None = None,
) -> UploadedMedia:
    """
    Upload image bytes; returns the provider's public id and HTTPS URL.

    The public id is chosen here so a timed-out upload can still be cleaned up.
    Raises MediaNotConfiguredError, MediaTimeoutError or MediaProviderError.
    """
    if not is_media_configured(settings):
        raise MediaNotConfiguredError(
            "Media storage is not configured; set CLOUDINARY_CLOUD_NAME, CLOUDINARY_API_KEY, CLOUDINARY_API_SECRET."
        )
    folder = (folder if folder is not None else settings.MEDIA_FOLDER).strip("/")
    public_id = uuid.uuid4().hex
    full_public_id = f"{folder}/{public_id}" if folder else public_id
    form = _signed_form(settings, {"folder": folder, "public_id": public_id})
    files = {"file": (filename or "upload", content, content_type)}
    timeout = httpx.Timeout(settings.MEDIA_UPLOAD_TIMEOUT_SEC)
    start = time.perf_counter()

    try:
        async with httpx.AsyncClient(timeout=timeout) as client:
            resp = await client.post(_endpoint(settings, "upload"), data=form, files=files)
    except httpx.TimeoutException as e:
        logger.warning(
            "Media upload timed out",
            extra={
                "public_id": full_public_id,
                "media_latency_seconds": time.perf_counter() - start,
            },
        )
        await destroy_image_quietly(full_public_id, settings)
        raise MediaTimeoutError(
            "Image upload timed out. Please try again with a smaller file.",
            cause=e,
        ) from e
    except httpx.HTTPError as e:
        raise MediaProviderError("Media provider is unreachable.", cause=e) from e

    if resp.status_code >= 400:
        raise MediaProviderError(
            f"Media provider returned {resp.status_code}: {_error_detail(resp)}",
            status_code=resp.status_code,
        )
    try:
        body = resp.json()
    except json.JSONDecodeError as e:
        raise MediaProviderError("Media provider response is not valid JSON.", cause=e) from e

    secure_url = body.get("secure_url")
    if not secure_url or not body.get("public_id"):
        raise MediaProviderError("Media provider response missing secure_url or public_id.")

    logger.info(
        "Media upload completed",
        extra={
            "public_id": body["public_id"],
            "bytes": len(content),
            "media_latency_seconds": time.perf_counter() - start,
        },
    )
    return UploadedMedia(
        public_id=body["public_id"],
        secure_url=secure_url,
        width=body.get("width"),
        height=body.get("height"),
        format=body.get("format"),
    )


async def destroy_image(public_id: str, settings: Settings) -> None:
    """
    Delete one remote image. A 'not found' result counts as success.

    Raises MediaNotConfiguredError or MediaProviderError.
    """
    if not is_media_configured(settings):
        raise MediaNotConfiguredError("Media storage is not configured.")
    form = _signed_form(settings, {"public_id": public_id})
    timeout = httpx.Timeout(settings.MEDIA_REQUEST_TIMEOUT_SEC)
    try:
        async with httpx.AsyncClient(timeout=timeout) as client:
            resp = await client.post(_endpoint(settings, "destroy"), data=form)
    except httpx.TimeoutException as e:
        raise MediaTimeoutError("Media provider destroy timed out.", cause=e) from e
    except httpx.HTTPError as e:
        raise MediaProviderError("Media provider is unreachable.", cause=e) from e

    if resp.status_code >= 400:
        raise MediaProviderError(
            f"Media provider returned {resp.status_code}: {_error_detail(resp)}",
            status_code=resp.status_code,
        )
    try:
        result = resp.json().get("result")
    except (json.JSONDecodeError, AttributeError) as e:
        raise MediaProviderError("Media provider response is not valid JSON.", cause=e) from e
    if result not in ("ok", "not found"):
        raise MediaProviderError(f"Media provider could not destroy {public_id}: {result}")


async def destroy_image_quietly(public_id: str, settings: Settings) -> str | None:
    """
    Compensating destroy: never raises. Returns an error message when cleanup failed
    (the remote object is then orphaned), else None.
    """
    try:
        await destroy_image(public_id, settings)
    except MediaProviderError as e:
        logger.warning(
            "Media cleanup failed; remote object orphaned",
            extra={"public_id": public_id, "reason": e.message[:200]},
        )
        return f"{public_id}: {e.message}"
    return None
