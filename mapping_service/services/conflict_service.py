"""
Duplicate-create detection for single mapping registration.

The lookups here are a convenience: a concurrent insert can land between the
check and the write. ``MappingStore.create`` re-reads the winning row when the
unique constraint fires, so both paths return the same outcome types.
"""

from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from mapping_service.core.errors import DuplicateMappingError
from mapping_service.core.structured_logging import build_log_context
from mapping_service.schemas import MappingDto
from mapping_service.services.mapping_kinds import MappingKind
from mapping_service.services.mapping_store import (
    Conflict,
    CreateOutcome,
    InsertedAll,
    MappingStore,
    Unchanged,
)

logger = logging.getLogger(__name__)


def already_exists_message(kind: MappingKind, duplicate, existing) -> str:
    return (
        f"{kind.description} mapping already exists.\n"
        f"Existing mapping: {_describe(kind, existing)}\n"
        f"Duplicate mapping: {_describe(kind, duplicate)}"
    )


def _describe(kind: MappingKind, mapping) -> str:
    return f"{kind.new_id_field}={kind.new_key(mapping)}, {kind.describe_legacy(kind.legacy_key(mapping))}"


def register_mapping(db: Session, kind: MappingKind, mapping: MappingDto) -> CreateOutcome:
    """
    Register one mapping.

    1. A row with the same new id and the same legacy id -> ``Unchanged``.
    2. A row with the same new id but another legacy id -> ``Conflict``.
    3. A row with the same legacy id -> ``Conflict`` (``Unchanged`` when the
       new id matches too, which only happens for provisional rows).
    4. Otherwise insert.
    """
    store = MappingStore(db, kind)
    legacy_key = kind.legacy_key(mapping)
    log_context = build_log_context(
        kind=kind.name,
        label=mapping.label,
        new_id=_as_text(kind.new_key(mapping)),
        legacy_id=kind.describe_legacy(legacy_key),
    )

    new_id = kind.new_key(mapping)
    existing = store.find_by_new_id(new_id) if new_id is not None else None
    if existing is None:
        existing = store.find_by_legacy_id(legacy_key)

    if existing is not None:
        outcome: CreateOutcome
        if kind.same_pair(existing, mapping):
            outcome = Unchanged(existing)
        else:
            outcome = Conflict(duplicate=mapping, existing=existing)
    else:
        outcome = store.create(mapping)

    _log_outcome(kind, mapping, outcome, log_context)
    return outcome


def register_mappings(db: Session, kind: MappingKind, mappings: list[MappingDto]) -> CreateOutcome:
    """Insert a list of rows of one kind in the caller's transaction."""
    outcome = MappingStore(db, kind).create_all(mappings)
    if isinstance(outcome, InsertedAll):
        logger.info(
            "Created %d %s mappings",
            len(outcome.mappings),
            kind.name,
            extra=build_log_context(kind=kind.name, count=len(outcome.mappings)),
        )
    else:
        _log_outcome(kind, outcome.duplicate, outcome, build_log_context(kind=kind.name))
    return outcome


def raise_for_conflict(kind: MappingKind, outcome: CreateOutcome):
    """Turn a ``Conflict`` outcome into the exception the HTTP layer renders."""
    if isinstance(outcome, Conflict):
        raise DuplicateMappingError(
            already_exists_message(kind, outcome.duplicate, outcome.existing),
            duplicate=outcome.duplicate,
            existing=outcome.existing,
        )
    return outcome


def _log_outcome(kind: MappingKind, mapping, outcome: CreateOutcome, log_context: dict) -> None:
    if isinstance(outcome, Unchanged):
        logger.debug(
            "Not creating. All OK: %s",
            already_exists_message(kind, mapping, outcome.mapping),
            extra=log_context,
        )
    elif isinstance(outcome, Conflict):
        logger.warning(
            "Duplicate %s mapping rejected: %s",
            kind.name,
            already_exists_message(kind, outcome.duplicate, outcome.existing),
            extra=log_context,
        )
    else:
        logger.info("Created %s mapping", kind.name, extra=log_context)


def _as_text(value) -> str | None:
    return None if value is None else str(value)
