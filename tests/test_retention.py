from datetime import datetime, timezone

from sqlalchemy import update

from mapping_service.db.models import VisitBalanceAdjustmentMapping
from mapping_service.schemas import SentenceMappingDto, VisitBalanceAdjustmentMappingDto
from mapping_service.services import retention_service
from mapping_service.services.mapping_kinds import SENTENCES, VISIT_BALANCE_ADJUSTMENTS
from mapping_service.services.mapping_store import MappingStore
from mapping_service.utils.datetime_parsing import start_of_day_days_ago

NOW = datetime(2024, 6, 30, 15, 30, tzinfo=timezone.utc)


def _adjustment(nomis_id: int) -> VisitBalanceAdjustmentMappingDto:
    return VisitBalanceAdjustmentMappingDto(nomis_visit_balance_adjustment_id=nomis_id, dps_id=f"vba-{nomis_id}")


def _set_created(db, nomis_id: int, when: datetime) -> None:
    db.execute(
        update(VisitBalanceAdjustmentMapping)
        .where(VisitBalanceAdjustmentMapping.nomis_visit_balance_adjustment_id == nomis_id)
        .values(when_created=when)
    )


def _sentence(sequence: int, case: str) -> SentenceMappingDto:
    return SentenceMappingDto(
        nomis_booking_id=1,
        nomis_sentence_sequence=sequence,
        dps_sentence_id=f"s-{sequence}",
        dps_court_case_id=case,
    )


def test_delete_by_parent_id_leaves_other_parents(db):
    store = MappingStore(db, SENTENCES)
    store.create(_sentence(1, "case-a"))
    store.create(_sentence(2, "case-a"))
    store.create(_sentence(3, "case-b"))
    db.commit()

    deleted = retention_service.delete_by_parent_id(db, SENTENCES, "case-a")
    db.commit()

    assert deleted == 2
    assert store.find_all_by_parent("case-a") == []
    assert [m.dps_sentence_id for m in store.find_all_by_parent("case-b")] == ["s-3"]


def test_delete_created_after_rolls_back_later_rows(db):
    store = MappingStore(db, VISIT_BALANCE_ADJUSTMENTS)
    store.create(_adjustment(1))
    store.create(_adjustment(2))
    db.commit()
    _set_created(db, 1, datetime(2024, 6, 1, 9, 0, tzinfo=timezone.utc))
    _set_created(db, 2, datetime(2024, 6, 1, 11, 0, tzinfo=timezone.utc))
    db.commit()

    deleted = retention_service.delete_created_after(
        db, VISIT_BALANCE_ADJUSTMENTS, datetime(2024, 6, 1, 10, 0, tzinfo=timezone.utc)
    )
    db.commit()

    assert deleted == 1
    assert store.find_by_new_id("vba-1") is not None
    assert store.find_by_new_id("vba-2") is None


def test_sweep_removes_rows_older_than_expiry(db):
    store = MappingStore(db, VISIT_BALANCE_ADJUSTMENTS)
    for nomis_id in (1, 2, 3):
        store.create(_adjustment(nomis_id))
    db.commit()
    cutoff = start_of_day_days_ago(VISIT_BALANCE_ADJUSTMENTS.retention_days, now=NOW)
    _set_created(db, 1, datetime(2024, 5, 1, tzinfo=timezone.utc))
    _set_created(db, 2, cutoff)
    _set_created(db, 3, NOW)
    db.commit()

    deleted = retention_service.run_retention_sweep(db, now=NOW)

    assert deleted == {VISIT_BALANCE_ADJUSTMENTS.name: 1}
    assert store.find_by_new_id("vba-1") is None
    assert store.find_by_new_id("vba-2") is not None
    assert store.find_by_new_id("vba-3") is not None


def test_cutoff_is_midnight_utc():
    assert start_of_day_days_ago(28, now=NOW) == datetime(2024, 6, 2, tzinfo=timezone.utc)


def test_delete_all_empties_table(db):
    store = MappingStore(db, VISIT_BALANCE_ADJUSTMENTS)
    store.create(_adjustment(1))
    store.create(_adjustment(2))
    db.commit()

    assert retention_service.delete_all(db, VISIT_BALANCE_ADJUSTMENTS) == 2
