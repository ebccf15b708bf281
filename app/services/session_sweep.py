"""Expired-session sweep: delete every RefreshSession past its expiry."""

import asyncio
import logging
from collections.abc import Callable
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

from app.models import RefreshSession

if TYPE_CHECKING:
    from app.core.config import Settings

logger = logging.getLogger(__name__)


def run_session_sweep(session: Session, now: datetime | None = None) -> int:
    """
    Delete sessions that are expired at now; returns the number deleted.

    Uses the same expiry predicate as the refresh path. Idempotent: safe to run repeatedly.
    """
    now = now or datetime.now(timezone.utc)
    deleted_count = (
        session.query(RefreshSession)
        .filter(RefreshSession.is_expired(now))
        .delete(synchronize_session=False)
    )
    session.commit()

    if deleted_count > 0:
        logger.info(
            "Session sweep: now=%s, sessions_deleted=%s",
            now.isoformat(),
            deleted_count,
        )
    return deleted_count


def sweep_once(session_factory: Callable[[], Session]) -> int:
    db = session_factory()
    try:
        return run_session_sweep(db)
    finally:
        db.close()


async def sweep_forever(
    session_factory: Callable[[], Session], settings: "Settings"
) -> None:
    """Sweep at start, then every SESSION_SWEEP_INTERVAL_SEC until cancelled. A failed pass is logged."""
    while True:
        try:
            await asyncio.to_thread(sweep_once, session_factory)
        except Exception:
            logger.exception("Session sweep failed")
        await asyncio.sleep(settings.SESSION_SWEEP_INTERVAL_SEC)
