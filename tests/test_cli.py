from click.testing import CliRunner

from mapping_service.cli import cli
from mapping_service.schemas import CsraMappingDto, SentenceMappingDto
from mapping_service.services.mapping_kinds import CSRAS, SENTENCES
from mapping_service.services.mapping_store import MappingStore


def test_list_kinds():
    result = CliRunner().invoke(cli, ["list-kinds"])

    assert result.exit_code == 0, result.output
    assert "court-cases: nomis_court_case_id -> dps_court_case_id" in result.output
    assert "csras: nomis_booking_id,nomis_sequence -> dps_csra_id" in result.output
    assert "retention=28d" in result.output


def test_merge_owner(db):
    MappingStore(db, CSRAS).create(
        CsraMappingDto(dps_csra_id="c-1", nomis_booking_id=1, nomis_sequence=1, offender_no="A1111AA")
    )
    db.commit()

    result = CliRunner().invoke(cli, ["merge-owner", "--from", "A1111AA", "--to", "B2222BB"])

    assert result.exit_code == 0, result.output
    assert "csras: moved 1 mapping(s)" in result.output
    db.expire_all()
    assert MappingStore(db, CSRAS).find_by_new_id("c-1").offender_no == "B2222BB"


def test_delete_children(db):
    MappingStore(db, SENTENCES).create(
        SentenceMappingDto(
            nomis_booking_id=1, nomis_sentence_sequence=1, dps_sentence_id="s-1", dps_court_case_id="case-1"
        )
    )
    db.commit()

    result = CliRunner().invoke(cli, ["delete-children", "--kind", "sentences", "--parent-id", "case-1"])

    assert result.exit_code == 0, result.output
    assert "Deleted 1 sentences mapping(s)" in result.output


def test_unknown_kind_fails(db):
    result = CliRunner().invoke(cli, ["rollback-run", "--kind", "nope", "--after", "2024-01-01T00:00:00"])

    assert result.exit_code == 1
    assert "Unknown mapping kind" in result.output


def test_retention_sweep(db):
    result = CliRunner().invoke(cli, ["retention-sweep"])

    assert result.exit_code == 0, result.output
    assert "visit-balance-adjustments: deleted 0 expired mapping(s)" in result.output
