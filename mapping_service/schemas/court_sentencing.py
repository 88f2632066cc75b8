"""Court sentencing mapping schemas."""

from __future__ import annotations

from pydantic import Field

from mapping_service.db.enums import MappingType
from mapping_service.schemas.common import CamelModel, MappingDto


class CourtCaseMappingDto(MappingDto):
    nomis_court_case_id: int
    dps_court_case_id: str = Field(..., min_length=1, max_length=64)


class CourtAppearanceMappingDto(MappingDto):
    nomis_court_appearance_id: int
    dps_court_appearance_id: str = Field(..., min_length=1, max_length=64)
    dps_court_case_id: str | None = Field(None, max_length=64)


class CourtChargeMappingDto(MappingDto):
    nomis_court_charge_id: int
    dps_court_charge_id: str = Field(..., min_length=1, max_length=64)
    dps_court_case_id: str | None = Field(None, max_length=64)


class SentenceMappingDto(MappingDto):
    nomis_booking_id: int
    nomis_sentence_sequence: int
    dps_sentence_id: str = Field(..., min_length=1, max_length=64)
    dps_court_case_id: str | None = Field(None, max_length=64)


class SentenceTermMappingDto(MappingDto):
    nomis_booking_id: int
    nomis_sentence_sequence: int
    nomis_term_sequence: int
    dps_term_id: str = Field(..., min_length=1, max_length=64)
    dps_court_case_id: str | None = Field(None, max_length=64)


class CourtCaseBatchMappingDto(CamelModel):
    """A court case with all of its dependent mappings."""

    court_cases: list[CourtCaseMappingDto] = []
    court_appearances: list[CourtAppearanceMappingDto] = []
    court_charges: list[CourtChargeMappingDto] = []
    sentences: list[SentenceMappingDto] = []
    sentence_terms: list[SentenceTermMappingDto] = []
    label: str | None = Field(None, max_length=20)
    mapping_type: MappingType = MappingType.MIGRATED


class SimpleIdPair(CamelModel):
    from_nomis_id: int
    to_nomis_id: int


class SentenceId(CamelModel):
    nomis_booking_id: int
    nomis_sentence_sequence: int


class SentenceIdPair(CamelModel):
    from_nomis_id: SentenceId
    to_nomis_id: SentenceId


class SentenceTermId(CamelModel):
    nomis_booking_id: int
    nomis_sentence_sequence: int
    nomis_term_sequence: int


class SentenceTermIdPair(CamelModel):
    from_nomis_id: SentenceTermId
    to_nomis_id: SentenceTermId


class CourtCaseBatchUpdateMappingDto(CamelModel):
    """NOMIS ids to rewrite on already registered rows."""

    court_cases: list[SimpleIdPair] = []
    court_appearances: list[SimpleIdPair] = []
    court_charges: list[SimpleIdPair] = []
    sentences: list[SentenceIdPair] = []
    sentence_terms: list[SentenceTermIdPair] = []


class CourtCaseBatchUpdateAndCreateMappingDto(CamelModel):
    mappings_to_create: CourtCaseBatchMappingDto
    mappings_to_update: CourtCaseBatchUpdateMappingDto = CourtCaseBatchUpdateMappingDto()
