"""CSIP report aggregates: a report with its plans and reviews."""

from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from mapping_service.core.errors import NotFoundError, ValidationFailure
from mapping_service.core.structured_logging import build_log_context
from mapping_service.schemas import CSIPFullMappingDto, MappingDto
from mapping_service.services.batch_service import (
    AggregateUnitOfWork,
    raise_for_aggregate_conflict,
    with_shared_fields,
)
from mapping_service.services.mapping_kinds import CSIP_PLANS, CSIP_REPORTS, CSIP_REVIEWS
from mapping_service.services.mapping_store import CreateOutcome, MappingStore

logger = logging.getLogger(__name__)

CHILD_KINDS = (CSIP_PLANS, CSIP_REVIEWS)
ALL_KINDS = (CSIP_REPORTS, *CHILD_KINDS)


def _children(dto: CSIPFullMappingDto) -> list[tuple]:
    shared = {"label": dto.label, "mapping_type": dto.mapping_type}
    children = []
    for kind, mappings in ((CSIP_PLANS, dto.plan_mappings), (CSIP_REVIEWS, dto.review_mappings)):
        _check_parent(dto.dps_csip_report_id, mappings)
        children.append((kind, with_shared_fields(mappings, **shared)))
    return children


def _check_parent(report_id: str, mappings: list[MappingDto]) -> None:
    for mapping in mappings:
        if mapping.dps_csip_report_id != report_id:
            raise ValidationFailure(
                f"Child mapping belongs to CSIP report {mapping.dps_csip_report_id}, not {report_id}"
            )


def create_csip_with_children(db: Session, dto: CSIPFullMappingDto) -> CreateOutcome:
    """Register a report mapping together with its plans and reviews."""
    uow = AggregateUnitOfWork(db, label=dto.label)
    uow.add(CSIP_REPORTS, dto.report())
    for kind, mappings in _children(dto):
        uow.add_all(kind, mappings)
    return uow.commit()


def create_csip_children(db: Session, dto: CSIPFullMappingDto) -> CreateOutcome:
    """Register plans and reviews for a report whose mapping already exists."""
    if MappingStore(db, CSIP_REPORTS).find_by_new_id(dto.dps_csip_report_id) is None:
        raise NotFoundError(f"CSIP report mapping with dpsCSIPReportId={dto.dps_csip_report_id} not found")
    uow = AggregateUnitOfWork(db, label=dto.label)
    for kind, mappings in _children(dto):
        uow.add_all(kind, mappings)
    return uow.commit()


def get_csip_with_children(db: Session, dps_csip_report_id: str) -> CSIPFullMappingDto:
    report = MappingStore(db, CSIP_REPORTS).find_by_new_id(dps_csip_report_id)
    if report is None:
        raise NotFoundError(f"CSIP report mapping with dpsCSIPReportId={dps_csip_report_id} not found")
    return CSIPFullMappingDto(
        **report.model_dump(),
        plan_mappings=MappingStore(db, CSIP_PLANS).find_all_by_parent(dps_csip_report_id),
        review_mappings=MappingStore(db, CSIP_REVIEWS).find_all_by_parent(dps_csip_report_id),
    )


def delete_csip_children(db: Session, dps_csip_report_id: str) -> dict[str, int]:
    deleted = {
        kind.name: MappingStore(db, kind).delete_by_parent_id(dps_csip_report_id)
        for kind in CHILD_KINDS
    }
    logger.info(
        "Deleted CSIP child mappings",
        extra=build_log_context(
            kind=CSIP_REPORTS.name, parent_id=dps_csip_report_id, count=sum(deleted.values())
        ),
    )
    return deleted


def delete_csip(db: Session, dps_csip_report_id: str) -> dict[str, int]:
    """Remove a report mapping and its children."""
    deleted = delete_csip_children(db, dps_csip_report_id)
    deleted[CSIP_REPORTS.name] = MappingStore(db, CSIP_REPORTS).delete_by_new_id(dps_csip_report_id)
    return deleted


def raise_for_csip_conflict(outcome: CreateOutcome) -> CreateOutcome:
    return raise_for_aggregate_conflict(outcome, ALL_KINDS)
