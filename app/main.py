"""FastAPI application entrypoint. No business logic; only wiring, middleware and error mapping."""

from dotenv import load_dotenv

load_dotenv()

import asyncio
import contextlib
import logging
import traceback
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.v1 import router as v1_router
from app.core.config import settings
from app.core.database import SessionLocal
from app.core.logging import configure_logging
from app.services.errors import ServiceError
from app.services.media import MediaNotConfiguredError, MediaProviderError, MediaTimeoutError
from app.services.session_sweep import sweep_forever

configure_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    sweeper = None
    if settings.SESSION_SWEEP_ENABLED:
        sweeper = asyncio.create_task(sweep_forever(SessionLocal, settings))
    yield
    if sweeper is not None:
        sweeper.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await sweeper


app = FastAPI(
    title="Photo App API",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.CLIENT_URL],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    body: dict[str, str] = {"detail": exc.message}
    if exc.field:
        body["field"] = exc.field
    return JSONResponse(status_code=exc.status_code, content=body)


@app.exception_handler(MediaProviderError)
async def media_error_handler(request: Request, exc: MediaProviderError) -> JSONResponse:
    if isinstance(exc, MediaNotConfiguredError):
        status_code = 503
    elif isinstance(exc, MediaTimeoutError):
        status_code = 504
    else:
        status_code = 502
    logger.warning("Media provider failure: %s", exc.message)
    return JSONResponse(status_code=status_code, content={"detail": exc.message})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    body: dict[str, str] = {"detail": "Internal server error"}
    if not settings.is_production:
        body["trace"] = "".join(traceback.format_exception(exc))
    return JSONResponse(status_code=500, content=body)


app.include_router(v1_router, prefix=settings.API_V1_PREFIX)


@app.get("/")
def root() -> dict[str, str]:
    """Root route; minimal payload for discovery."""
    return {"message": "Photo App API"}
