"""
Mapping kind registry.

Every entity kind is the same crosswalk pattern with different column names:
a new-system id, a (possibly composite) legacy key, and optional parent,
owner and aggregate-owner columns. A ``MappingKind`` describes one table so
the store, the routers and the sweeps can stay generic.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from mapping_service.core.config import settings
from mapping_service.core.errors import NotFoundError, ValidationFailure
from mapping_service.db.models import (
    ActivityMigrationMapping,
    CourtAppearanceMapping,
    CourtCaseMapping,
    CourtChargeMapping,
    CSIPPlanMapping,
    CSIPReportMapping,
    CSIPReviewMapping,
    CsraMapping,
    SentenceMapping,
    SentenceTermMapping,
    VisitBalanceAdjustmentMapping,
)
from mapping_service.schemas import (
    ActivityMigrationMappingDto,
    CourtAppearanceMappingDto,
    CourtCaseMappingDto,
    CourtChargeMappingDto,
    CSIPPlanMappingDto,
    CSIPReportMappingDto,
    CSIPReviewMappingDto,
    CsraMappingDto,
    CsraMappingIdDto,
    MappingDto,
    SentenceMappingDto,
    SentenceTermMappingDto,
    VisitBalanceAdjustmentMappingDto,
)

LegacyKey = tuple[Any, ...]


@dataclass(frozen=True)
class MappingKind:
    name: str
    description: str
    model: type
    schema: type[MappingDto]
    new_id_field: str
    legacy_fields: tuple[str, ...]
    new_id_type: type = str
    parent_field: str | None = None
    owner_field: str | None = None
    aggregate_field: str | None = None
    provisional_field: str | None = None
    retention_days_setting: str | None = None
    # Item shape for replacing an owner's whole set in one request
    owner_set_schema: type | None = None

    # ------------------------------------------------------------------
    # Columns
    # ------------------------------------------------------------------

    def column(self, field: str):
        return getattr(self.model, field)

    @property
    def new_id_column(self):
        return self.column(self.new_id_field)

    @property
    def stored_fields(self) -> set[str]:
        """Model columns a caller may supply (not the surrogate or timestamp)."""
        return {
            col.key
            for col in self.model.__table__.columns
            if col.key not in ("id", "when_created")
        }

    @property
    def retention_days(self) -> int | None:
        if not self.retention_days_setting:
            return None
        return getattr(settings, self.retention_days_setting)

    # ------------------------------------------------------------------
    # Keys
    # ------------------------------------------------------------------

    def new_key(self, mapping: Any) -> Any:
        return getattr(mapping, self.new_id_field)

    def legacy_key(self, mapping: Any) -> LegacyKey:
        return tuple(getattr(mapping, field) for field in self.legacy_fields)

    def legacy_clause(self, key: LegacyKey) -> list:
        if len(key) != len(self.legacy_fields):
            raise ValidationFailure(
                f"{self.description} NOMIS id needs {len(self.legacy_fields)} part(s), got {len(key)}"
            )
        return [self.column(field) == value for field, value in zip(self.legacy_fields, key)]

    def legacy_values(self, key: LegacyKey) -> dict[str, Any]:
        return dict(zip(self.legacy_fields, key))

    def same_pair(self, first: Any, second: Any) -> bool:
        return (
            self.new_key(first) == self.new_key(second)
            and self.legacy_key(first) == self.legacy_key(second)
        )

    def describe_legacy(self, key: LegacyKey) -> str:
        return ", ".join(f"{field}={value}" for field, value in zip(self.legacy_fields, key))

    def parse_legacy_path(self, raw: str) -> LegacyKey:
        """Parse ``123`` or ``123/2`` path segments into a legacy key."""
        parts = [part for part in raw.strip("/").split("/") if part]
        if len(parts) != len(self.legacy_fields):
            raise ValidationFailure(
                f"{self.description} NOMIS id needs {len(self.legacy_fields)} part(s), got '{raw}'"
            )
        try:
            return tuple(int(part) for part in parts)
        except ValueError:
            raise ValidationFailure(f"{self.description} NOMIS id must be numeric, got '{raw}'")

    def parse_new_id(self, raw: str) -> Any:
        try:
            return self.new_id_type(raw)
        except ValueError:
            raise ValidationFailure(f"{self.description} DPS id is malformed: '{raw}'")

    # ------------------------------------------------------------------
    # Conversion
    # ------------------------------------------------------------------

    def to_row(self, mapping: MappingDto):
        values = mapping.model_dump(mode="json", include=self.stored_fields)
        return self.model(**values)

    def to_dto(self, row: Any) -> MappingDto:
        return self.schema.model_validate(row)


COURT_CASES = MappingKind(
    name="court-cases",
    description="Court case",
    model=CourtCaseMapping,
    schema=CourtCaseMappingDto,
    new_id_field="dps_court_case_id",
    legacy_fields=("nomis_court_case_id",),
)

COURT_APPEARANCES = MappingKind(
    name="court-appearances",
    description="Court appearance",
    model=CourtAppearanceMapping,
    schema=CourtAppearanceMappingDto,
    new_id_field="dps_court_appearance_id",
    legacy_fields=("nomis_court_appearance_id",),
    parent_field="dps_court_case_id",
)

COURT_CHARGES = MappingKind(
    name="court-charges",
    description="Court charge",
    model=CourtChargeMapping,
    schema=CourtChargeMappingDto,
    new_id_field="dps_court_charge_id",
    legacy_fields=("nomis_court_charge_id",),
    parent_field="dps_court_case_id",
)

SENTENCES = MappingKind(
    name="sentences",
    description="Sentence",
    model=SentenceMapping,
    schema=SentenceMappingDto,
    new_id_field="dps_sentence_id",
    legacy_fields=("nomis_booking_id", "nomis_sentence_sequence"),
    parent_field="dps_court_case_id",
)

SENTENCE_TERMS = MappingKind(
    name="sentence-terms",
    description="Sentence term",
    model=SentenceTermMapping,
    schema=SentenceTermMappingDto,
    new_id_field="dps_term_id",
    legacy_fields=("nomis_booking_id", "nomis_sentence_sequence", "nomis_term_sequence"),
    parent_field="dps_court_case_id",
)

CSIP_REPORTS = MappingKind(
    name="csip-reports",
    description="CSIP report",
    model=CSIPReportMapping,
    schema=CSIPReportMappingDto,
    new_id_field="dps_csip_report_id",
    legacy_fields=("nomis_csip_report_id",),
    owner_field="offender_no",
)

CSIP_PLANS = MappingKind(
    name="csip-plans",
    description="CSIP plan",
    model=CSIPPlanMapping,
    schema=CSIPPlanMappingDto,
    new_id_field="dps_csip_plan_id",
    legacy_fields=("nomis_csip_plan_id",),
    parent_field="dps_csip_report_id",
)

CSIP_REVIEWS = MappingKind(
    name="csip-reviews",
    description="CSIP review",
    model=CSIPReviewMapping,
    schema=CSIPReviewMappingDto,
    new_id_field="dps_csip_review_id",
    legacy_fields=("nomis_csip_review_id",),
    parent_field="dps_csip_report_id",
)

CSRAS = MappingKind(
    name="csras",
    description="CSRA",
    model=CsraMapping,
    schema=CsraMappingDto,
    new_id_field="dps_csra_id",
    legacy_fields=("nomis_booking_id", "nomis_sequence"),
    owner_field="offender_no",
    aggregate_field="nomis_booking_id",
    owner_set_schema=CsraMappingIdDto,
)

ACTIVITIES = MappingKind(
    name="activities",
    description="Activity",
    model=ActivityMigrationMapping,
    schema=ActivityMigrationMappingDto,
    new_id_field="activity_id",
    new_id_type=int,
    legacy_fields=("nomis_course_activity_id",),
    provisional_field="activity_id",
)

VISIT_BALANCE_ADJUSTMENTS = MappingKind(
    name="visit-balance-adjustments",
    description="Visit balance adjustment",
    model=VisitBalanceAdjustmentMapping,
    schema=VisitBalanceAdjustmentMappingDto,
    new_id_field="dps_id",
    legacy_fields=("nomis_visit_balance_adjustment_id",),
    retention_days_setting="VISIT_BALANCE_ADJUSTMENT_EXPIRY_DAYS",
)

KINDS: dict[str, MappingKind] = {
    kind.name: kind
    for kind in (
        COURT_CASES,
        COURT_APPEARANCES,
        COURT_CHARGES,
        SENTENCES,
        SENTENCE_TERMS,
        CSIP_REPORTS,
        CSIP_PLANS,
        CSIP_REVIEWS,
        CSRAS,
        ACTIVITIES,
        VISIT_BALANCE_ADJUSTMENTS,
    )
}


def get_kind(name: str) -> MappingKind:
    kind = KINDS.get(name)
    if not kind:
        raise NotFoundError(f"Unknown mapping kind: {name}")
    return kind


def owner_kinds() -> list[MappingKind]:
    return [kind for kind in KINDS.values() if kind.owner_field]


def retention_kinds() -> list[MappingKind]:
    return [kind for kind in KINDS.values() if kind.retention_days_setting]
