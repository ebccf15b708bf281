"""
CLI entrypoint for the expired-session sweep. Run from cron, e.g.:

  python -m app.session_sweep

Or hourly: 0 * * * * cd /path/to/photo-app && .venv/bin/python -m app.session_sweep

The API process runs the same sweep in the background when SESSION_SWEEP_ENABLED is set.
"""

import logging
import sys

from app.core.database import SessionLocal
from app.core.logging import configure_logging
from app.services.session_sweep import run_session_sweep

logger = logging.getLogger(__name__)


def main() -> int:
    """Delete every session whose expiry has passed."""
    configure_logging()
    db = SessionLocal()
    try:
        sessions_deleted = run_session_sweep(db)
        logger.info("Session sweep completed: sessions_deleted=%s", sessions_deleted)
        return 0
    except Exception as e:
        logger.exception("Session sweep failed: %s", e)
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
