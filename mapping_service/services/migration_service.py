"""Queries over a migration run (all rows sharing one label)."""

from __future__ import annotations

from sqlalchemy.orm import Session

from mapping_service.core.errors import NotFoundError
from mapping_service.schemas import MappingDto, Page
from mapping_service.services.mapping_kinds import MappingKind
from mapping_service.services.mapping_store import MappingStore
from mapping_service.utils.pagination import PaginationParams, build_page


def get_migration_page(
    db: Session,
    kind: MappingKind,
    label: str,
    pagination: PaginationParams,
) -> Page:
    """
    One page of a migration run, oldest first.

    Provisional rows are listed, so ``totalElements`` counts them too.
    """
    store = MappingStore(db, kind)
    content = store.find_all_by_label(label, pagination.offset, pagination.size)
    total = store.count_by_label(label, include_provisional=True)
    return build_page(content, total, pagination)


def count_migrated(db: Session, kind: MappingKind, label: str, include_provisional: bool = False) -> int:
    return MappingStore(db, kind).count_by_label(label, include_provisional=include_provisional)


def get_latest_migrated(db: Session, kind: MappingKind) -> MappingDto:
    """Most recently created MIGRATED row across every run."""
    mapping = MappingStore(db, kind).find_latest_migrated()
    if mapping is None:
        raise NotFoundError(f"No migrated {kind.description.lower()} mappings found")
    return mapping
