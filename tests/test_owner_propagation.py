import pytest

from mapping_service.core.errors import ValidationFailure
from mapping_service.db.enums import MappingType
from mapping_service.schemas import CSIPReportMappingDto, CsraMappingDto, CsraMappingIdDto, OwnerMappingsRequest
from mapping_service.services import owner_service
from mapping_service.services.mapping_kinds import CSIP_REPORTS, CSRAS
from mapping_service.services.mapping_store import Conflict, InsertedAll, MappingStore


def _csra(booking: int, sequence: int, offender_no: str) -> CsraMappingDto:
    return CsraMappingDto(
        dps_csra_id=f"csra-{booking}-{sequence}",
        nomis_booking_id=booking,
        nomis_sequence=sequence,
        offender_no=offender_no,
    )


def _seed(db) -> MappingStore:
    store = MappingStore(db, CSRAS)
    store.create(_csra(1, 1, "A1111AA"))
    store.create(_csra(1, 2, "A1111AA"))
    store.create(_csra(2, 1, "A1111AA"))
    store.create(_csra(3, 1, "B2222BB"))
    db.commit()
    return store


def test_rewrite_owner_moves_only_rows_of_old_owner(db):
    store = _seed(db)

    updated = owner_service.rewrite_owner(db, CSRAS, "A1111AA", "C3333CC")
    db.commit()

    assert updated == 3
    assert store.find_all_by_owner("A1111AA") == []
    assert len(store.find_all_by_owner("C3333CC")) == 3
    assert [m.dps_csra_id for m in store.find_all_by_owner("B2222BB")] == ["csra-3-1"]


def test_rewrite_owner_for_aggregate_returns_moved_rows(db):
    store = _seed(db)

    moved = owner_service.rewrite_owner_for_aggregate(db, CSRAS, 1, "C3333CC")
    db.commit()

    assert [m.dps_csra_id for m in moved] == ["csra-1-1", "csra-1-2"]
    assert all(m.offender_no == "C3333CC" for m in moved)
    assert [m.dps_csra_id for m in store.find_all_by_owner("A1111AA")] == ["csra-2-1"]


def test_merge_rewrites_every_owner_bearing_kind(db):
    _seed(db)
    MappingStore(db, CSIP_REPORTS).create(
        CSIPReportMappingDto(nomis_csip_report_id=7, dps_csip_report_id="r-7", offender_no="A1111AA")
    )
    db.commit()

    counts = owner_service.rewrite_owner_everywhere(db, "A1111AA", "C3333CC")
    db.commit()

    assert counts == {CSIP_REPORTS.name: 1, CSRAS.name: 3}
    assert MappingStore(db, CSIP_REPORTS).find_by_new_id("r-7").offender_no == "C3333CC"


def test_rewrite_for_unknown_owner_changes_nothing(db):
    store = _seed(db)

    assert owner_service.rewrite_owner(db, CSRAS, "Z9999ZZ", "C3333CC") == 0
    assert len(store.find_all_by_owner("A1111AA")) == 3


def _owner_set(*keys: tuple[int, int], label: str | None = "2024-03-24T12:00:00") -> OwnerMappingsRequest:
    return OwnerMappingsRequest[CsraMappingIdDto](
        label=label,
        mapping_type=MappingType.MIGRATED,
        mappings=[
            CsraMappingIdDto(dps_csra_id=f"csra-{booking}-{sequence}", nomis_booking_id=booking, nomis_sequence=sequence)
            for booking, sequence in keys
        ],
    )


def test_replace_owner_mappings_swaps_whole_set(db):
    store = _seed(db)

    outcome = owner_service.replace_owner_mappings(db, CSRAS, "A1111AA", _owner_set((1, 1), (9, 1)))

    assert isinstance(outcome, InsertedAll)
    owned = store.find_all_by_owner("A1111AA")
    assert [m.dps_csra_id for m in owned] == ["csra-1-1", "csra-9-1"]
    assert all(m.label == "2024-03-24T12:00:00" for m in owned)
    assert all(m.mapping_type == MappingType.MIGRATED for m in owned)
    assert store.find_by_new_id("csra-1-2") is None
    assert [m.dps_csra_id for m in store.find_all_by_owner("B2222BB")] == ["csra-3-1"]


def test_replace_owner_mappings_collision_keeps_old_set(db):
    store = _seed(db)

    # (1, 1) is the owner's own row; (3, 1) belongs to another prisoner
    outcome = owner_service.replace_owner_mappings(
        db, CSRAS, "A1111AA", _owner_set((1, 1), (7, 1), (3, 1))
    )

    assert isinstance(outcome, Conflict)
    assert outcome.existing.dps_csra_id == "csra-3-1"
    assert outcome.existing.offender_no == "B2222BB"
    assert outcome.duplicate.offender_no == "A1111AA"
    assert [m.dps_csra_id for m in store.find_all_by_owner("A1111AA")] == [
        "csra-1-1",
        "csra-1-2",
        "csra-2-1",
    ]
    assert store.find_by_new_id("csra-7-1") is None


def test_replace_owner_mappings_with_empty_set_clears_owner(db):
    store = _seed(db)

    owner_service.replace_owner_mappings(db, CSRAS, "A1111AA", _owner_set())

    assert store.find_all_by_owner("A1111AA") == []
    assert len(store.find_all_by_owner("B2222BB")) == 1


def test_replace_owner_mappings_rejects_oversized_owner(db):
    _seed(db)

    with pytest.raises(ValidationFailure):
        owner_service.replace_owner_mappings(db, CSRAS, "X" * 11, _owner_set((5, 1)))
