"""SQLAlchemy ORM models, one table per mapping kind."""

from mapping_service.db.models.activities import ActivityMigrationMapping
from mapping_service.db.models.court_sentencing import (
    CourtAppearanceMapping,
    CourtCaseMapping,
    CourtChargeMapping,
    SentenceMapping,
    SentenceTermMapping,
)
from mapping_service.db.models.csip import CSIPPlanMapping, CSIPReportMapping, CSIPReviewMapping
from mapping_service.db.models.csra import CsraMapping
from mapping_service.db.models.visit_balances import VisitBalanceAdjustmentMapping

__all__ = [
    "ActivityMigrationMapping",
    "CourtAppearanceMapping",
    "CourtCaseMapping",
    "CourtChargeMapping",
    "CSIPPlanMapping",
    "CSIPReportMapping",
    "CSIPReviewMapping",
    "CsraMapping",
    "SentenceMapping",
    "SentenceTermMapping",
    "VisitBalanceAdjustmentMapping",
]
