"""
Bulk deletion: parent cascades, run rollback and the scheduled retention sweep.

The sweep is driven by ``worker.retention_loop`` (and the internal endpoint /
CLI for manual runs). Only kinds with a configured retention age are swept.
"""

from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy.orm import Session

from mapping_service.core.structured_logging import build_log_context
from mapping_service.services.mapping_kinds import MappingKind, retention_kinds
from mapping_service.services.mapping_store import MappingStore
from mapping_service.utils.datetime_parsing import as_utc, start_of_day_days_ago

logger = logging.getLogger(__name__)


def delete_by_parent_id(db: Session, kind: MappingKind, parent_id: str) -> int:
    deleted = MappingStore(db, kind).delete_by_parent_id(parent_id)
    logger.info(
        "Deleted %s child mappings",
        kind.name,
        extra=build_log_context(kind=kind.name, parent_id=parent_id, count=deleted),
    )
    return deleted


def delete_created_after(db: Session, kind: MappingKind, timestamp: datetime) -> int:
    """Coarse rollback of everything registered after ``timestamp``."""
    deleted = MappingStore(db, kind).delete_created_after(as_utc(timestamp))
    logger.info(
        "Rolled back %s mappings created after %s",
        kind.name,
        as_utc(timestamp).isoformat(),
        extra=build_log_context(kind=kind.name, count=deleted),
    )
    return deleted


def delete_all(db: Session, kind: MappingKind, only_migrated: bool = False) -> int:
    deleted = MappingStore(db, kind).delete_all(only_migrated=only_migrated)
    logger.info(
        "Deleted all %s mappings (only migrated: %s)",
        kind.name,
        only_migrated,
        extra=build_log_context(kind=kind.name, count=deleted),
    )
    return deleted


def clear_expired_entries(
    db: Session,
    kind: MappingKind,
    days: int,
    now: datetime | None = None,
) -> int:
    """Delete rows created before midnight ``days`` days ago."""
    cutoff = start_of_day_days_ago(days, now=now)
    deleted = MappingStore(db, kind).delete_created_before(cutoff)
    if deleted:
        logger.info(
            "Retention removed %d %s mappings created before %s",
            deleted,
            kind.name,
            cutoff.isoformat(),
            extra=build_log_context(kind=kind.name, count=deleted),
        )
    return deleted


def run_retention_sweep(db: Session, now: datetime | None = None) -> dict[str, int]:
    """
    Sweep every short-lived kind and commit.

    Returns per-kind deleted counts. Errors propagate to the caller, which
    decides whether a failure ends the run (CLI) or just the tick (worker).
    """
    deleted: dict[str, int] = {}
    for kind in retention_kinds():
        deleted[kind.name] = clear_expired_entries(db, kind, kind.retention_days, now=now)
    db.commit()
    return deleted
