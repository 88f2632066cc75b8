"""Pydantic schemas for API request/response models."""

from mapping_service.schemas.activities import ActivityMigrationMappingDto
from mapping_service.schemas.common import (
    AggregateBatchResponse,
    AggregateResult,
    CountResponse,
    DuplicateMappingErrorResponse,
    ErrorResponse,
    MappingDto,
    MergeCountsResponse,
    OwnerMappingsRequest,
    OwnerMappingsResponse,
    Page,
    RetentionSweepResponse,
)
from mapping_service.schemas.court_sentencing import (
    CourtAppearanceMappingDto,
    CourtCaseBatchMappingDto,
    CourtCaseBatchUpdateAndCreateMappingDto,
    CourtCaseBatchUpdateMappingDto,
    CourtCaseMappingDto,
    CourtChargeMappingDto,
    SentenceMappingDto,
    SentenceTermMappingDto,
)
from mapping_service.schemas.csip import (
    CSIPFullMappingDto,
    CSIPPlanMappingDto,
    CSIPReportMappingDto,
    CSIPReviewMappingDto,
)
from mapping_service.schemas.csra import CsraMappingDto, CsraMappingIdDto
from mapping_service.schemas.visit_balances import VisitBalanceAdjustmentMappingDto
