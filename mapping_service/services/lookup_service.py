"""Single-kind reads and deletes exposed over HTTP."""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.orm import Session

from mapping_service.core.errors import NotFoundError
from mapping_service.core.structured_logging import build_log_context
from mapping_service.schemas import MappingDto
from mapping_service.services.mapping_kinds import LegacyKey, MappingKind
from mapping_service.services.mapping_store import MappingStore

logger = logging.getLogger(__name__)


def get_by_new_id(db: Session, kind: MappingKind, new_id: Any) -> MappingDto:
    mapping = MappingStore(db, kind).find_by_new_id(new_id)
    if mapping is None:
        raise NotFoundError(f"{kind.description} mapping with {kind.new_id_field}={new_id} not found")
    return mapping


def get_by_legacy_id(db: Session, kind: MappingKind, key: LegacyKey) -> MappingDto:
    mapping = MappingStore(db, kind).find_by_legacy_id(key)
    if mapping is None:
        raise NotFoundError(f"{kind.description} mapping with {kind.describe_legacy(key)} not found")
    return mapping


def list_by_parent(db: Session, kind: MappingKind, parent_id: str) -> list[MappingDto]:
    return MappingStore(db, kind).find_all_by_parent(parent_id)


def list_by_owner(db: Session, kind: MappingKind, owner_id: str) -> list[MappingDto]:
    return MappingStore(db, kind).find_all_by_owner(owner_id)


def delete_by_new_id(db: Session, kind: MappingKind, new_id: Any) -> int:
    """Idempotent: deleting an absent mapping is not an error."""
    deleted = MappingStore(db, kind).delete_by_new_id(new_id)
    logger.info(
        "Deleted %s mapping by new id",
        kind.name,
        extra=build_log_context(kind=kind.name, new_id=str(new_id), count=deleted),
    )
    return deleted


def delete_by_legacy_id(db: Session, kind: MappingKind, key: LegacyKey) -> int:
    deleted = MappingStore(db, kind).delete_by_legacy_id(key)
    logger.info(
        "Deleted %s mapping by legacy id",
        kind.name,
        extra=build_log_context(kind=kind.name, legacy_id=kind.describe_legacy(key), count=deleted),
    )
    return deleted
