from __future__ import annotations

from pydantic import Field

from mapping_service.schemas.common import MappingDto


class VisitBalanceAdjustmentMappingDto(MappingDto):
    dps_id: str = Field(..., min_length=1, max_length=64)
    nomis_visit_balance_adjustment_id: int
