"""Health check: database connectivity and whether the optional integrations are configured."""

from fastapi import APIRouter

from app.api.v1.auth import AppSettings, DbSession
from app.core.database import check_db_connected
from app.schemas.health import HealthResponse
from app.services.media import is_media_configured
from app.services.oauth import is_google_configured

router = APIRouter()


def _configured(flag: bool) -> str:
    return "configured" if flag else "not_configured"


@router.get("", response_model=HealthResponse)
def get_health(db: DbSession, settings: AppSettings) -> HealthResponse:
    """
    Always 200 while the process is up; a disconnected database is reported, not raised.
    """
    return HealthResponse(
        environment=settings.APP_ENV,
        database="connected" if check_db_connected(db) else "disconnected",
        media_provider=_configured(is_media_configured(settings)),
        google_oauth=_configured(is_google_configured(settings)),
    )
