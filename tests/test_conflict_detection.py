import pytest
from sqlalchemy import func, select

from mapping_service.core.errors import DuplicateMappingError
from mapping_service.db.models import ActivityMigrationMapping, VisitBalanceAdjustmentMapping
from mapping_service.schemas import ActivityMigrationMappingDto, VisitBalanceAdjustmentMappingDto
from mapping_service.services import conflict_service
from mapping_service.services.mapping_kinds import ACTIVITIES, VISIT_BALANCE_ADJUSTMENTS
from mapping_service.services.mapping_store import Conflict, Inserted, MappingStore, Unchanged


def _mapping(legacy: int, new: str) -> VisitBalanceAdjustmentMappingDto:
    return VisitBalanceAdjustmentMappingDto(nomis_visit_balance_adjustment_id=legacy, dps_id=new)


def _row_count(db) -> int:
    return db.scalar(select(func.count()).select_from(VisitBalanceAdjustmentMapping))


def test_identical_pair_registered_twice_stores_one_row(db):
    first = conflict_service.register_mapping(db, VISIT_BALANCE_ADJUSTMENTS, _mapping(100, "d1"))
    db.commit()
    second = conflict_service.register_mapping(db, VISIT_BALANCE_ADJUSTMENTS, _mapping(100, "d1"))
    db.commit()

    assert isinstance(first, Inserted)
    assert isinstance(second, Unchanged)
    assert _row_count(db) == 1


def test_new_id_collision_reports_existing_row(db):
    conflict_service.register_mapping(db, VISIT_BALANCE_ADJUSTMENTS, _mapping(100, "d1"))
    db.commit()

    outcome = conflict_service.register_mapping(db, VISIT_BALANCE_ADJUSTMENTS, _mapping(200, "d1"))

    assert isinstance(outcome, Conflict)
    assert outcome.existing.nomis_visit_balance_adjustment_id == 100
    assert outcome.duplicate.nomis_visit_balance_adjustment_id == 200
    assert _row_count(db) == 1


def test_legacy_id_collision_reports_existing_row(db):
    conflict_service.register_mapping(db, VISIT_BALANCE_ADJUSTMENTS, _mapping(100, "d1"))
    db.commit()

    outcome = conflict_service.register_mapping(db, VISIT_BALANCE_ADJUSTMENTS, _mapping(100, "d2"))

    assert isinstance(outcome, Conflict)
    assert outcome.existing.dps_id == "d1"
    assert outcome.duplicate.dps_id == "d2"


def test_constraint_violation_is_converted_to_conflict(db):
    """A racing insert that slips past the lookups still yields a Conflict."""
    store = MappingStore(db, VISIT_BALANCE_ADJUSTMENTS)
    store.create(_mapping(100, "d1"))
    db.commit()

    # Straight to the insert, as if the pre-check had run before the row existed
    outcome = store.create(_mapping(200, "d1"))

    assert isinstance(outcome, Conflict)
    assert outcome.existing.nomis_visit_balance_adjustment_id == 100
    assert outcome.duplicate.nomis_visit_balance_adjustment_id == 200
    assert _row_count(db) == 1


def test_constraint_violation_on_identical_pair_is_unchanged(db):
    store = MappingStore(db, VISIT_BALANCE_ADJUSTMENTS)
    store.create(_mapping(100, "d1"))
    db.commit()

    outcome = store.create(_mapping(100, "d1"))

    assert isinstance(outcome, Unchanged)
    assert outcome.mapping.dps_id == "d1"


def test_raise_for_conflict_carries_both_records(db):
    conflict_service.register_mapping(db, VISIT_BALANCE_ADJUSTMENTS, _mapping(100, "d1"))
    db.commit()
    outcome = conflict_service.register_mapping(db, VISIT_BALANCE_ADJUSTMENTS, _mapping(200, "d1"))

    with pytest.raises(DuplicateMappingError) as exc_info:
        conflict_service.raise_for_conflict(VISIT_BALANCE_ADJUSTMENTS, outcome)

    assert exc_info.value.existing.nomis_visit_balance_adjustment_id == 100
    assert exc_info.value.duplicate.nomis_visit_balance_adjustment_id == 200
    assert "already exists" in str(exc_info.value)


def test_provisional_mapping_without_new_id_is_idempotent(db):
    skipped = ActivityMigrationMappingDto(nomis_course_activity_id=55, activity_id=None)

    first = conflict_service.register_mapping(db, ACTIVITIES, skipped)
    db.commit()
    second = conflict_service.register_mapping(db, ACTIVITIES, skipped)

    assert isinstance(first, Inserted)
    assert isinstance(second, Unchanged)
    assert db.scalar(select(func.count()).select_from(ActivityMigrationMapping)) == 1


def test_batch_insert_rejects_existing_identical_row(db):
    conflict_service.register_mapping(db, VISIT_BALANCE_ADJUSTMENTS, _mapping(100, "d1"))
    db.commit()

    outcome = conflict_service.register_mappings(
        db, VISIT_BALANCE_ADJUSTMENTS, [_mapping(300, "d3"), _mapping(100, "d1")]
    )

    assert isinstance(outcome, Conflict)
    assert outcome.existing.dps_id == "d1"
    assert _row_count(db) == 1
