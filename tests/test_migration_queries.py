from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import update

from mapping_service.core.errors import NotFoundError
from mapping_service.db.enums import MappingType
from mapping_service.db.models import CourtCaseMapping
from mapping_service.schemas import ActivityMigrationMappingDto, CourtCaseMappingDto
from mapping_service.services import migration_service
from mapping_service.services.mapping_kinds import ACTIVITIES, COURT_CASES
from mapping_service.services.mapping_store import MappingStore
from mapping_service.utils.pagination import PaginationParams

LABEL = "2024-03-24T12:00:00"


def _case(nomis_id: int, label: str | None = LABEL, mapping_type=MappingType.MIGRATED) -> CourtCaseMappingDto:
    return CourtCaseMappingDto(
        nomis_court_case_id=nomis_id,
        dps_court_case_id=f"case-{nomis_id}",
        label=label,
        mapping_type=mapping_type,
    )


def test_pages_cover_run_without_repeats(db):
    store = MappingStore(db, COURT_CASES)
    for nomis_id in range(1, 5):
        store.create(_case(nomis_id))
    store.create(_case(99, label="2024-01-01T00:00:00"))
    db.commit()

    first = migration_service.get_migration_page(db, COURT_CASES, LABEL, PaginationParams(page=0, size=3))
    second = migration_service.get_migration_page(db, COURT_CASES, LABEL, PaginationParams(page=1, size=3))

    assert len(first.content) == 3
    assert len(second.content) == 1
    assert first.total_elements == second.total_elements == 4
    assert first.total_pages == 2
    returned = [m.nomis_court_case_id for m in first.content + second.content]
    assert returned == [1, 2, 3, 4]


def test_earlier_pages_are_stable_while_run_grows(db):
    store = MappingStore(db, COURT_CASES)
    for nomis_id in range(1, 4):
        store.create(_case(nomis_id))
    db.commit()

    before = migration_service.get_migration_page(db, COURT_CASES, LABEL, PaginationParams(page=0, size=2))
    store.create(_case(4))
    db.commit()
    after = migration_service.get_migration_page(db, COURT_CASES, LABEL, PaginationParams(page=0, size=2))

    assert [m.dps_court_case_id for m in before.content] == [m.dps_court_case_id for m in after.content]


def test_latest_migrated_is_most_recent_migrated_row(db):
    store = MappingStore(db, COURT_CASES)
    store.create(_case(1))
    store.create(_case(2, label="2024-03-25T08:00:00"))
    store.create(_case(3, label=None, mapping_type=MappingType.DPS_CREATED))
    db.commit()

    # Make case-1 the newest MIGRATED row
    db.execute(
        update(CourtCaseMapping)
        .where(CourtCaseMapping.nomis_court_case_id == 1)
        .values(when_created=datetime.now(timezone.utc) + timedelta(minutes=5))
    )
    db.commit()

    latest = migration_service.get_latest_migrated(db, COURT_CASES)

    assert latest.nomis_court_case_id == 1


def test_latest_migrated_not_found_when_nothing_migrated(db):
    MappingStore(db, COURT_CASES).create(_case(1, mapping_type=MappingType.NOMIS_CREATED))
    db.commit()

    with pytest.raises(NotFoundError):
        migration_service.get_latest_migrated(db, COURT_CASES)


def test_count_excludes_provisional_rows_unless_asked(db):
    store = MappingStore(db, ACTIVITIES)
    store.create(ActivityMigrationMappingDto(nomis_course_activity_id=1, activity_id=11, label=LABEL))
    store.create(ActivityMigrationMappingDto(nomis_course_activity_id=2, activity_id=None, label=LABEL))
    store.create(ActivityMigrationMappingDto(nomis_course_activity_id=3, activity_id=33, label=LABEL))
    db.commit()

    assert migration_service.count_migrated(db, ACTIVITIES, LABEL) == 2
    assert migration_service.count_migrated(db, ACTIVITIES, LABEL, include_provisional=True) == 3


def test_count_for_kind_without_provisional_rows(db):
    store = MappingStore(db, COURT_CASES)
    store.create(_case(1))
    store.create(_case(2))
    db.commit()

    assert migration_service.count_migrated(db, COURT_CASES, LABEL) == 2
    assert migration_service.count_migrated(db, COURT_CASES, "unknown-run") == 0
