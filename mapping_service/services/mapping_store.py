"""
Generic crosswalk store.

One ``MappingStore`` per (session, kind). Lookups return at most one row;
``create`` reports its result as a tagged outcome rather than raising, so the
best-effort pre-check in ``conflict_service`` and the unique constraints
enforced by the database end up in the same caller-visible shape.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Iterable, Union

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from mapping_service.core.errors import ValidationFailure
from mapping_service.db.enums import MappingType
from mapping_service.schemas import MappingDto
from mapping_service.services.mapping_kinds import LegacyKey, MappingKind
from mapping_service.utils.datetime_parsing import as_utc


@dataclass(frozen=True)
class Inserted:
    mapping: MappingDto


@dataclass(frozen=True)
class InsertedAll:
    mappings: list[MappingDto]


@dataclass(frozen=True)
class Unchanged:
    """The identical (legacy id, new id) pair was already stored."""

    mapping: MappingDto


@dataclass(frozen=True)
class Conflict:
    """Either key already maps to a different counterpart."""

    duplicate: Any
    existing: MappingDto


CreateOutcome = Union[Inserted, InsertedAll, Unchanged, Conflict]


class MappingStore:
    def __init__(self, db: Session, kind: MappingKind):
        self.db = db
        self.kind = kind
        self.model = kind.model

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def _row_by_new_id(self, new_id: Any):
        return self.db.scalars(
            select(self.model).where(self.kind.new_id_column == new_id).limit(1)
        ).first()

    def _row_by_legacy_id(self, key: LegacyKey):
        return self.db.scalars(
            select(self.model).where(*self.kind.legacy_clause(key)).limit(1)
        ).first()

    def _dto(self, row) -> MappingDto | None:
        return self.kind.to_dto(row) if row is not None else None

    def find_by_new_id(self, new_id: Any) -> MappingDto | None:
        return self._dto(self._row_by_new_id(new_id))

    def find_by_legacy_id(self, key: LegacyKey) -> MappingDto | None:
        return self._dto(self._row_by_legacy_id(key))

    def find_existing(self, mapping: Any) -> MappingDto | None:
        """Row already holding either key of ``mapping`` (new id checked first)."""
        new_id = self.kind.new_key(mapping)
        if new_id is not None:
            existing = self.find_by_new_id(new_id)
            if existing is not None:
                return existing
        return self.find_by_legacy_id(self.kind.legacy_key(mapping))

    def find_all_by_parent(self, parent_id: str) -> list[MappingDto]:
        column = self.kind.column(self._require("parent_field"))
        rows = self.db.scalars(
            select(self.model).where(column == parent_id).order_by(self.model.id)
        ).all()
        return [self.kind.to_dto(row) for row in rows]

    def find_all_by_owner(self, owner_id: str) -> list[MappingDto]:
        column = self.kind.column(self._require("owner_field"))
        legacy_order = [self.kind.column(field) for field in self.kind.legacy_fields]
        rows = self.db.scalars(
            select(self.model).where(column == owner_id).order_by(*legacy_order)
        ).all()
        return [self.kind.to_dto(row) for row in rows]

    def find_all_by_label(self, label: str, offset: int, limit: int) -> list[MappingDto]:
        """Insertion order: rows appended later never shift earlier pages."""
        rows = self.db.scalars(
            select(self.model)
            .where(self.model.label == label)
            .order_by(self.model.when_created, self.model.id)
            .offset(offset)
            .limit(limit)
        ).all()
        return [self.kind.to_dto(row) for row in rows]

    def count_by_label(self, label: str, include_provisional: bool = False) -> int:
        stmt = select(func.count()).select_from(self.model).where(self.model.label == label)
        if self.kind.provisional_field and not include_provisional:
            stmt = stmt.where(self.kind.column(self.kind.provisional_field).is_not(None))
        return self.db.scalar(stmt) or 0

    def find_latest_migrated(self) -> MappingDto | None:
        row = self.db.scalars(
            select(self.model)
            .where(self.model.mapping_type == MappingType.MIGRATED.value)
            .order_by(self.model.when_created.desc(), self.model.id.desc())
            .limit(1)
        ).first()
        return self._dto(row)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def add(self, mapping: MappingDto):
        """Stage a row without flushing (callers own the flush)."""
        row = self.kind.to_row(mapping)
        self.db.add(row)
        return row

    def create(self, mapping: MappingDto) -> CreateOutcome:
        """
        Insert one row, letting the unique constraints decide.

        A constraint violation rolls back the session and re-reads the row
        that won, turning it into ``Unchanged`` (same pair) or ``Conflict``.
        """
        row = self.add(mapping)
        try:
            self.db.flush()
        except IntegrityError:
            self.db.rollback()
            outcome = self.materialize_conflict([mapping])
            if outcome is None:
                raise
            return outcome
        return Inserted(self.kind.to_dto(row))

    def create_all(self, mappings: list[MappingDto]) -> CreateOutcome:
        ensure_distinct_keys(self.kind, mappings)
        rows = [self.add(mapping) for mapping in mappings]
        try:
            self.db.flush()
        except IntegrityError:
            self.db.rollback()
            outcome = self.materialize_conflict(mappings)
            if outcome is None:
                raise
            if isinstance(outcome, Unchanged):
                # A batch insert is not idempotent per row
                duplicate = _matching(self.kind, mappings, outcome.mapping)
                return Conflict(duplicate=duplicate, existing=outcome.mapping)
            return outcome
        return InsertedAll([self.kind.to_dto(row) for row in rows])

    def materialize_conflict(self, mappings: Iterable[Any]) -> Unchanged | Conflict | None:
        """First stored row colliding with any of ``mappings``, as an outcome."""
        for mapping in mappings:
            existing = self.find_existing(mapping)
            if existing is None:
                continue
            if self.kind.same_pair(existing, mapping):
                return Unchanged(existing)
            return Conflict(duplicate=mapping, existing=existing)
        return None

    def update_legacy_id(self, from_key: LegacyKey, to_key: LegacyKey) -> int:
        result = self.db.execute(
            update(self.model)
            .where(*self.kind.legacy_clause(from_key))
            .values(self.kind.legacy_values(to_key))
        )
        return result.rowcount

    def rewrite_owner(self, old_owner: str, new_owner: str) -> int:
        field = self._require("owner_field")
        result = self.db.execute(
            update(self.model)
            .where(self.kind.column(field) == old_owner)
            .values({field: new_owner})
        )
        return result.rowcount

    def rewrite_owner_for_aggregate(self, aggregate_key: Any, new_owner: str) -> list[MappingDto]:
        owner = self._require("owner_field")
        aggregate = self.kind.column(self._require("aggregate_field"))
        self.db.execute(
            update(self.model).where(aggregate == aggregate_key).values({owner: new_owner})
        )
        rows = self.db.scalars(
            select(self.model)
            .where(aggregate == aggregate_key)
            .order_by(self.model.id)
            .execution_options(populate_existing=True)
        ).all()
        return [self.kind.to_dto(row) for row in rows]

    # ------------------------------------------------------------------
    # Deletes
    # ------------------------------------------------------------------

    def _delete(self, *criteria) -> int:
        result = self.db.execute(
            delete(self.model).where(*criteria)
        )
        return result.rowcount

    def delete_by_new_id(self, new_id: Any) -> int:
        return self._delete(self.kind.new_id_column == new_id)

    def delete_by_legacy_id(self, key: LegacyKey) -> int:
        return self._delete(*self.kind.legacy_clause(key))

    def delete_by_parent_id(self, parent_id: str) -> int:
        return self._delete(self.kind.column(self._require("parent_field")) == parent_id)

    def delete_by_owner(self, owner_id: str) -> int:
        return self._delete(self.kind.column(self._require("owner_field")) == owner_id)

    def delete_created_after(self, timestamp: datetime) -> int:
        return self._delete(self.model.when_created > as_utc(timestamp))

    def delete_created_before(self, timestamp: datetime) -> int:
        return self._delete(self.model.when_created < as_utc(timestamp))

    def delete_all(self, only_migrated: bool = False) -> int:
        if only_migrated:
            return self._delete(self.model.mapping_type == MappingType.MIGRATED.value)
        return self._delete()

    def _require(self, attribute: str) -> str:
        field = getattr(self.kind, attribute)
        if not field:
            readable = attribute.replace("_field", "").replace("_", " ")
            raise ValidationFailure(f"{self.kind.description} mappings have no {readable} id")
        return field


def _matching(kind: MappingKind, mappings: list[Any], existing: MappingDto) -> Any:
    for mapping in mappings:
        if kind.same_pair(mapping, existing):
            return mapping
    return existing


def ensure_distinct_keys(kind: MappingKind, mappings: Iterable[Any]) -> None:
    """Reject a submission that repeats a key within itself."""
    seen_new: set[Any] = set()
    seen_legacy: set[LegacyKey] = set()
    for mapping in mappings:
        new_id = kind.new_key(mapping)
        legacy = kind.legacy_key(mapping)
        if new_id is not None and new_id in seen_new:
            raise ValidationFailure(f"{kind.description} DPS id {new_id} appears more than once")
        if legacy in seen_legacy:
            raise ValidationFailure(
                f"{kind.description} NOMIS id {kind.describe_legacy(legacy)} appears more than once"
            )
        seen_new.add(new_id)
        seen_legacy.add(legacy)
