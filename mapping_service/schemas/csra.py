from __future__ import annotations

from pydantic import Field

from mapping_service.schemas.common import CamelModel, MappingDto


class CsraMappingDto(MappingDto):
    dps_csra_id: str = Field(..., min_length=1, max_length=64)
    nomis_booking_id: int
    nomis_sequence: int
    offender_no: str = Field(..., min_length=1, max_length=10)


class CsraMappingIdDto(CamelModel):
    """One CSRA within a prisoner's set; owner, label and type come from the set."""

    dps_csra_id: str = Field(..., min_length=1, max_length=64)
    nomis_booking_id: int
    nomis_sequence: int
