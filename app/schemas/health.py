"""Health check response: service status plus database and integration readiness."""

from typing import Literal

from pydantic import Field

from app.schemas.common import CamelModel

IntegrationStatus = Literal["configured", "not_configured"]


class HealthResponse(CamelModel):
    status: Literal["ok"] = "ok"
    environment: str = Field(description="dev or prod")
    database: Literal["connected", "disconnected"]
    media_provider: IntegrationStatus = Field(
        description="Whether image uploads can reach the media provider"
    )
    google_oauth: IntegrationStatus
