"""CSIP mapping schemas."""

from __future__ import annotations

from pydantic import Field

from mapping_service.schemas.common import MappingDto


class CSIPReportMappingDto(MappingDto):
    nomis_csip_report_id: int = Field(..., alias="nomisCSIPReportId")
    dps_csip_report_id: str = Field(..., alias="dpsCSIPReportId", min_length=1, max_length=64)
    offender_no: str | None = Field(None, max_length=10)


class CSIPPlanMappingDto(MappingDto):
    nomis_csip_plan_id: int = Field(..., alias="nomisCSIPPlanId")
    dps_csip_plan_id: str = Field(..., alias="dpsCSIPPlanId", min_length=1, max_length=64)
    dps_csip_report_id: str = Field(..., alias="dpsCSIPReportId", max_length=64)


class CSIPReviewMappingDto(MappingDto):
    nomis_csip_review_id: int = Field(..., alias="nomisCSIPReviewId")
    dps_csip_review_id: str = Field(..., alias="dpsCSIPReviewId", min_length=1, max_length=64)
    dps_csip_report_id: str = Field(..., alias="dpsCSIPReportId", max_length=64)


class CSIPFullMappingDto(CSIPReportMappingDto):
    """A CSIP report with its plan and review mappings."""

    plan_mappings: list[CSIPPlanMappingDto] = []
    review_mappings: list[CSIPReviewMappingDto] = []

    def report(self) -> CSIPReportMappingDto:
        return CSIPReportMappingDto.model_validate(
            self.model_dump(exclude={"plan_mappings", "review_mappings"})
        )
