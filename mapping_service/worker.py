"""
Background worker for the retention sweep.

Usage:
    python -m mapping_service.worker

Deletes expired rows from short-lived mapping kinds on a fixed timer,
independent of request traffic. A failed tick is logged and the timer keeps
running.
"""

import asyncio
import logging
from datetime import datetime

from mapping_service.core.config import settings
from mapping_service.core.structured_logging import build_log_context
from mapping_service.db.session import SessionLocal
from mapping_service.services import retention_service

logger = logging.getLogger(__name__)


def run_retention_tick(now: datetime | None = None) -> dict[str, int] | None:
    """One sweep in its own session. Returns per-kind counts, or None if it failed."""
    with SessionLocal() as db:
        try:
            deleted = retention_service.run_retention_sweep(db, now=now)
        except Exception:
            db.rollback()
            logger.exception("Retention sweep failed")
            return None

    total = sum(deleted.values())
    if total:
        logger.info(
            "Retention sweep deleted %d mappings", total, extra=build_log_context(count=total)
        )
    return deleted


async def retention_loop(max_ticks: int | None = None) -> None:
    """Run ``run_retention_tick`` every ``RETENTION_SWEEP_INTERVAL_SECONDS``."""
    interval = settings.RETENTION_SWEEP_INTERVAL_SECONDS
    logger.info(f"Retention worker starting (interval: {interval}s)")

    ticks = 0
    while max_ticks is None or ticks < max_ticks:
        try:
            run_retention_tick()
        except Exception as e:
            logger.error(f"Error in retention loop: {e}")
        ticks += 1
        await asyncio.sleep(interval)


def main() -> None:
    """Entry point for the worker."""
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    try:
        asyncio.run(retention_loop())
    except KeyboardInterrupt:
        logger.info("Worker shutting down")


if __name__ == "__main__":
    main()
