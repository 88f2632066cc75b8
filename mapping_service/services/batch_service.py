"""
Atomic registration of one aggregate across several mapping tables.

An ``AggregateUnitOfWork`` collects the planned writes for one aggregate
(legacy-id rewrites and new rows, possibly of several kinds) and applies
them in a single transaction. A list of aggregates is handled by the caller
as a sequence of independent units of work.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from mapping_service.core.errors import NotFoundError
from mapping_service.core.structured_logging import build_log_context
from mapping_service.schemas import MappingDto
from mapping_service.services.conflict_service import raise_for_conflict
from mapping_service.services.mapping_kinds import LegacyKey, MappingKind
from mapping_service.services.mapping_store import (
    Conflict,
    CreateOutcome,
    InsertedAll,
    MappingStore,
    ensure_distinct_keys,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlannedUpdate:
    kind: MappingKind
    from_key: LegacyKey
    to_key: LegacyKey


@dataclass(frozen=True)
class PlannedOwnerDelete:
    kind: MappingKind
    owner_id: str


class AggregateUnitOfWork:
    def __init__(self, db: Session, label: str | None = None):
        self.db = db
        self.label = label
        self._inserts: list[tuple[MappingKind, MappingDto]] = []
        self._updates: list[PlannedUpdate] = []
        self._owner_deletes: list[PlannedOwnerDelete] = []

    @property
    def is_empty(self) -> bool:
        return not self._inserts and not self._updates and not self._owner_deletes

    def add(self, kind: MappingKind, mapping: MappingDto) -> None:
        self._inserts.append((kind, mapping))

    def add_all(self, kind: MappingKind, mappings: list[MappingDto]) -> None:
        for mapping in mappings:
            self.add(kind, mapping)

    def update_legacy_id(self, kind: MappingKind, from_key: LegacyKey, to_key: LegacyKey) -> None:
        self._updates.append(PlannedUpdate(kind, tuple(from_key), tuple(to_key)))

    def delete_by_owner(self, kind: MappingKind, owner_id: str) -> None:
        self._owner_deletes.append(PlannedOwnerDelete(kind, owner_id))

    def _validate(self) -> None:
        by_kind: dict[str, tuple[MappingKind, list[MappingDto]]] = {}
        for kind, mapping in self._inserts:
            by_kind.setdefault(kind.name, (kind, []))[1].append(mapping)
        for kind, mappings in by_kind.values():
            ensure_distinct_keys(kind, mappings)

    def commit(self) -> CreateOutcome:
        """
        Apply every planned write and commit, or nothing.

        Owner deletes run first, then rewrites, then inserts, so a new row may
        take over an id that was deleted or moved away. A rewrite matching no
        row raises ``NotFoundError``; a unique constraint violation is
        returned as a ``Conflict`` naming the stored row it collided with.
        """
        self._validate()
        try:
            for planned in self._owner_deletes:
                MappingStore(self.db, planned.kind).delete_by_owner(planned.owner_id)
            for planned in self._updates:
                updated = MappingStore(self.db, planned.kind).update_legacy_id(
                    planned.from_key, planned.to_key
                )
                if updated == 0:
                    raise NotFoundError(
                        f"{planned.kind.description} mapping with "
                        f"{planned.kind.describe_legacy(planned.from_key)} not found"
                    )
            rows = [(kind, MappingStore(self.db, kind).add(mapping)) for kind, mapping in self._inserts]
            self.db.flush()
        except NotFoundError:
            self.db.rollback()
            raise
        except IntegrityError:
            self.db.rollback()
            found = self.materialize_conflict()
            if found is None:
                raise
            kind, conflict = found
            logger.warning(
                "Aggregate rejected: %s mapping collides with an existing row",
                kind.name,
                extra=build_log_context(label=self.label),
            )
            return conflict

        created = [kind.to_dto(row) for kind, row in rows]
        self.db.commit()
        logger.info(
            "Committed aggregate: %d created, %d renumbered",
            len(created),
            len(self._updates),
            extra=build_log_context(label=self.label, count=len(created)),
        )
        return InsertedAll(created)

    def materialize_conflict(self) -> tuple[MappingKind, Conflict] | None:
        """First stored row colliding with a planned write (after rollback)."""
        for kind, mapping in self._inserts:
            existing = MappingStore(self.db, kind).find_existing(mapping)
            if existing is not None and not self._deleted_here(kind, existing):
                return kind, Conflict(duplicate=mapping, existing=existing)

        for planned in self._updates:
            store = MappingStore(self.db, planned.kind)
            existing = store.find_by_legacy_id(planned.to_key)
            current = store.find_by_legacy_id(planned.from_key)
            if existing is None or current is None:
                continue
            if planned.kind.new_key(existing) == planned.kind.new_key(current):
                continue
            duplicate = current.model_copy(update=planned.kind.legacy_values(planned.to_key))
            return planned.kind, Conflict(duplicate=duplicate, existing=existing)
        return None

    def _deleted_here(self, kind: MappingKind, existing: MappingDto) -> bool:
        # Rows this unit deletes would not have blocked its inserts
        return any(
            planned.kind.name == kind.name
            and getattr(existing, kind.owner_field) == planned.owner_id
            for planned in self._owner_deletes
        )


def with_shared_fields(mappings: list[MappingDto], **fields: Any) -> list[MappingDto]:
    """Copy ``mappings`` with aggregate-wide values (label, mapping type) applied."""
    values = {name: value for name, value in fields.items() if value is not None}
    return [mapping.model_copy(update=values) for mapping in mappings]


def kind_of(mapping: MappingDto, kinds: tuple[MappingKind, ...]) -> MappingKind:
    """The kind whose schema ``mapping`` is an instance of."""
    for kind in kinds:
        if isinstance(mapping, kind.schema):
            return kind
    return kinds[0]


def raise_for_aggregate_conflict(outcome: CreateOutcome, kinds: tuple[MappingKind, ...]) -> CreateOutcome:
    if isinstance(outcome, Conflict):
        raise_for_conflict(kind_of(outcome.existing, kinds), outcome)
    return outcome
