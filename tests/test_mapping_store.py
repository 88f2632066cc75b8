import pytest

from mapping_service.core.errors import NotFoundError, ValidationFailure
from mapping_service.db.enums import MappingType
from mapping_service.db.models import ActivityMigrationMapping, CsraMapping, SentenceMapping
from mapping_service.schemas import CsraMappingDto, SentenceMappingDto
from mapping_service.services.mapping_kinds import COURT_CASES, CSRAS, SENTENCES, get_kind
from mapping_service.services.mapping_store import Inserted, InsertedAll, MappingStore


def _sentence(booking: int, sequence: int, dps_id: str, case: str = "case-1") -> SentenceMappingDto:
    return SentenceMappingDto(
        nomis_booking_id=booking,
        nomis_sentence_sequence=sequence,
        dps_sentence_id=dps_id,
        dps_court_case_id=case,
    )


def test_round_trip_matches_submitted_mapping(db):
    store = MappingStore(db, SENTENCES)
    submitted = _sentence(12345, 2, "s-1")
    submitted = submitted.model_copy(update={"label": "2024-03-24T12:00:00"})

    outcome = store.create(submitted)
    db.commit()
    found = store.find_by_new_id("s-1")

    assert isinstance(outcome, Inserted)
    assert found.when_created is not None
    assert found.model_dump(exclude={"when_created"}) == submitted.model_dump(exclude={"when_created"})


def test_composite_legacy_key_lookup(db):
    store = MappingStore(db, SENTENCES)
    store.create(_sentence(12345, 1, "s-1"))
    store.create(_sentence(12345, 2, "s-2"))
    db.commit()

    assert store.find_by_legacy_id((12345, 2)).dps_sentence_id == "s-2"
    assert store.find_by_legacy_id((12345, 3)) is None


def test_legacy_key_with_wrong_arity_is_rejected(db):
    store = MappingStore(db, SENTENCES)

    with pytest.raises(ValidationFailure):
        store.find_by_legacy_id((12345,))


def test_create_all_rejects_key_repeated_within_submission(db):
    store = MappingStore(db, SENTENCES)

    with pytest.raises(ValidationFailure):
        store.create_all([_sentence(1, 1, "s-1"), _sentence(1, 1, "s-2")])


def test_create_all_inserts_every_row(db):
    outcome = MappingStore(db, SENTENCES).create_all([_sentence(1, 1, "s-1"), _sentence(1, 2, "s-2")])
    db.commit()

    assert isinstance(outcome, InsertedAll)
    assert [m.dps_sentence_id for m in outcome.mappings] == ["s-1", "s-2"]
    assert db.query(SentenceMapping).count() == 2


def test_delete_by_new_id_is_idempotent(db):
    store = MappingStore(db, SENTENCES)
    store.create(_sentence(1, 1, "s-1"))
    db.commit()

    assert store.delete_by_new_id("s-1") == 1
    assert store.delete_by_new_id("s-1") == 0
    assert store.find_by_new_id("s-1") is None


def test_delete_all_only_migrated_keeps_synchronised_rows(db):
    store = MappingStore(db, SENTENCES)
    store.create(_sentence(1, 1, "s-1").model_copy(update={"mapping_type": MappingType.MIGRATED}))
    store.create(_sentence(1, 2, "s-2"))
    db.commit()

    assert store.delete_all(only_migrated=True) == 1
    assert store.find_by_new_id("s-2") is not None


def test_owner_lookup_on_kind_without_owner_is_rejected(db):
    with pytest.raises(ValidationFailure):
        MappingStore(db, COURT_CASES).find_all_by_owner("A1234BC")


def test_rows_compare_equal_on_natural_key():
    first = CsraMapping(dps_csra_id="c-1", nomis_booking_id=1, nomis_sequence=1, offender_no="A1234BC")
    same_key = CsraMapping(dps_csra_id="c-1", nomis_booking_id=9, nomis_sequence=9, offender_no="B1234BC")
    other = CsraMapping(dps_csra_id="c-2", nomis_booking_id=1, nomis_sequence=1, offender_no="A1234BC")

    assert first == same_key
    assert hash(first) == hash(same_key)
    assert first != other
    assert len({first, same_key, other}) == 2


def test_activity_rows_compare_on_legacy_id():
    provisional = ActivityMigrationMapping(nomis_course_activity_id=5)
    migrated = ActivityMigrationMapping(nomis_course_activity_id=5, activity_id=50)

    assert provisional == migrated
    assert hash(provisional) == hash(migrated)


def test_keyless_rows_are_distinct_but_share_a_hash():
    first = CsraMapping(nomis_booking_id=1, nomis_sequence=1, offender_no="A1234BC")
    second = CsraMapping(nomis_booking_id=1, nomis_sequence=1, offender_no="A1234BC")

    assert first == first
    assert first != second
    assert hash(first) == hash(second)
    assert len({first, second}) == 2


def test_parse_legacy_path():
    assert SENTENCES.parse_legacy_path("12345/2") == (12345, 2)
    assert CSRAS.parse_legacy_path("/7/1/") == (7, 1)

    with pytest.raises(ValidationFailure):
        SENTENCES.parse_legacy_path("12345")
    with pytest.raises(ValidationFailure):
        SENTENCES.parse_legacy_path("12345/two")


def test_unknown_kind():
    with pytest.raises(NotFoundError):
        get_kind("no-such-kind")


def test_owner_lookup_is_ordered_by_legacy_key(db):
    store = MappingStore(db, CSRAS)
    for booking, sequence, dps_id in [(2, 1, "c-3"), (1, 2, "c-2"), (1, 1, "c-1")]:
        store.create(
            CsraMappingDto(
                dps_csra_id=dps_id,
                nomis_booking_id=booking,
                nomis_sequence=sequence,
                offender_no="A1234BC",
            )
        )
    db.commit()

    found = store.find_all_by_owner("A1234BC")

    assert [m.dps_csra_id for m in found] == ["c-1", "c-2", "c-3"]
