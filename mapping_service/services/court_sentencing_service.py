"""Court case aggregates: a case with its appearances, charges, sentences and terms."""

from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from mapping_service.core.errors import MappingServiceError, NotFoundError, ValidationFailure
from mapping_service.core.structured_logging import build_log_context
from mapping_service.db.enums import AggregateResultStatus
from mapping_service.schemas import (
    AggregateResult,
    CourtCaseBatchMappingDto,
    CourtCaseBatchUpdateAndCreateMappingDto,
    CourtCaseBatchUpdateMappingDto,
    MappingDto,
)
from mapping_service.services.batch_service import (
    AggregateUnitOfWork,
    kind_of,
    raise_for_aggregate_conflict,
    with_shared_fields,
)
from mapping_service.services.conflict_service import already_exists_message
from mapping_service.services.mapping_kinds import (
    COURT_APPEARANCES,
    COURT_CASES,
    COURT_CHARGES,
    SENTENCE_TERMS,
    SENTENCES,
)
from mapping_service.services.mapping_store import Conflict, CreateOutcome, MappingStore

logger = logging.getLogger(__name__)

CHILD_KINDS = (COURT_APPEARANCES, COURT_CHARGES, SENTENCES, SENTENCE_TERMS)
ALL_KINDS = (COURT_CASES, *CHILD_KINDS)


def _child_lists(dto: CourtCaseBatchMappingDto):
    return (
        (COURT_APPEARANCES, dto.court_appearances),
        (COURT_CHARGES, dto.court_charges),
        (SENTENCES, dto.sentences),
        (SENTENCE_TERMS, dto.sentence_terms),
    )


def _link_children(dto: CourtCaseBatchMappingDto, children: list[MappingDto]) -> list[MappingDto]:
    """Default the parent case id when the body holds exactly one case."""
    default_case = dto.court_cases[0].dps_court_case_id if len(dto.court_cases) == 1 else None
    linked = []
    for child in children:
        if child.dps_court_case_id is None:
            if default_case is None:
                raise ValidationFailure(
                    "dpsCourtCaseId is required on child mappings unless exactly one court case is supplied"
                )
            child = child.model_copy(update={"dps_court_case_id": default_case})
        linked.append(child)
    return linked


def plan_court_case_tree(uow: AggregateUnitOfWork, dto: CourtCaseBatchMappingDto) -> None:
    shared = {"label": dto.label, "mapping_type": dto.mapping_type}
    uow.add_all(COURT_CASES, with_shared_fields(dto.court_cases, **shared))
    for kind, children in _child_lists(dto):
        uow.add_all(kind, _link_children(dto, with_shared_fields(children, **shared)))


def plan_legacy_id_updates(uow: AggregateUnitOfWork, dto: CourtCaseBatchUpdateMappingDto) -> None:
    for pair in dto.court_cases:
        uow.update_legacy_id(COURT_CASES, (pair.from_nomis_id,), (pair.to_nomis_id,))
    for pair in dto.court_appearances:
        uow.update_legacy_id(COURT_APPEARANCES, (pair.from_nomis_id,), (pair.to_nomis_id,))
    for pair in dto.court_charges:
        uow.update_legacy_id(COURT_CHARGES, (pair.from_nomis_id,), (pair.to_nomis_id,))
    for pair in dto.sentences:
        uow.update_legacy_id(
            SENTENCES,
            SENTENCES.legacy_key(pair.from_nomis_id),
            SENTENCES.legacy_key(pair.to_nomis_id),
        )
    for pair in dto.sentence_terms:
        uow.update_legacy_id(
            SENTENCE_TERMS,
            SENTENCE_TERMS.legacy_key(pair.from_nomis_id),
            SENTENCE_TERMS.legacy_key(pair.to_nomis_id),
        )


def create_court_case_tree(db: Session, dto: CourtCaseBatchMappingDto) -> CreateOutcome:
    """Register one court case aggregate atomically."""
    uow = AggregateUnitOfWork(db, label=dto.label)
    plan_court_case_tree(uow, dto)
    return uow.commit()


def update_and_create_court_case_tree(
    db: Session, dto: CourtCaseBatchUpdateAndCreateMappingDto
) -> CreateOutcome:
    """Renumber existing rows and add new ones in the same transaction."""
    uow = AggregateUnitOfWork(db, label=dto.mappings_to_create.label)
    plan_legacy_id_updates(uow, dto.mappings_to_update)
    plan_court_case_tree(uow, dto.mappings_to_create)
    return uow.commit()


def create_court_case_trees(db: Session, dtos: list[CourtCaseBatchMappingDto]) -> list[AggregateResult]:
    """
    Register many aggregates, each in its own transaction.

    Best-effort: one aggregate failing never undoes the ones before it, and
    later aggregates are still attempted. The result list has one entry per
    submitted aggregate, in order.
    """
    results: list[AggregateResult] = []
    for index, dto in enumerate(dtos):
        try:
            outcome = create_court_case_tree(db, dto)
        except MappingServiceError as exc:
            db.rollback()
            results.append(
                AggregateResult(index=index, status=AggregateResultStatus.FAILED, message=str(exc))
            )
            continue
        except Exception:
            db.rollback()
            logger.exception(
                "Court case aggregate %d failed", index, extra=build_log_context(label=dto.label)
            )
            results.append(
                AggregateResult(
                    index=index, status=AggregateResultStatus.FAILED, message="Unexpected error"
                )
            )
            continue

        if isinstance(outcome, Conflict):
            kind = kind_of(outcome.existing, ALL_KINDS)
            results.append(
                AggregateResult(
                    index=index,
                    status=AggregateResultStatus.CONFLICT,
                    message=already_exists_message(kind, outcome.duplicate, outcome.existing),
                    duplicate=outcome.duplicate,
                    existing=outcome.existing,
                )
            )
        else:
            results.append(AggregateResult(index=index, status=AggregateResultStatus.CREATED))

    logger.info(
        "Court case batch processed: %d of %d created",
        sum(1 for result in results if result.status == AggregateResultStatus.CREATED),
        len(results),
        extra=build_log_context(kind=COURT_CASES.name, count=len(results)),
    )
    return results


def raise_for_tree_conflict(outcome: CreateOutcome) -> CreateOutcome:
    return raise_for_aggregate_conflict(outcome, ALL_KINDS)


def get_court_case_tree(db: Session, dps_court_case_id: str) -> CourtCaseBatchMappingDto:
    case = MappingStore(db, COURT_CASES).find_by_new_id(dps_court_case_id)
    if case is None:
        raise NotFoundError(f"Court case mapping with dpsCourtCaseId={dps_court_case_id} not found")
    children = {
        kind.name: MappingStore(db, kind).find_all_by_parent(dps_court_case_id)
        for kind in CHILD_KINDS
    }
    return CourtCaseBatchMappingDto(
        court_cases=[case],
        court_appearances=children[COURT_APPEARANCES.name],
        court_charges=children[COURT_CHARGES.name],
        sentences=children[SENTENCES.name],
        sentence_terms=children[SENTENCE_TERMS.name],
        label=case.label,
        mapping_type=case.mapping_type,
    )


def delete_court_case_tree(db: Session, dps_court_case_id: str) -> dict[str, int]:
    """Remove a court case mapping and every child registered under it."""
    deleted = {
        kind.name: MappingStore(db, kind).delete_by_parent_id(dps_court_case_id)
        for kind in CHILD_KINDS
    }
    deleted[COURT_CASES.name] = MappingStore(db, COURT_CASES).delete_by_new_id(dps_court_case_id)
    logger.info(
        "Deleted court case aggregate",
        extra=build_log_context(
            kind=COURT_CASES.name, new_id=dps_court_case_id, count=sum(deleted.values())
        ),
    )
    return deleted
