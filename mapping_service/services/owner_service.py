"""
Owner propagation after legacy person merges and booking moves.

Each rewrite is a single bulk UPDATE in the caller's transaction, so the
whole set of rows changes or none does. Replacing an owner's whole set is
its own unit of work and commits.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError
from sqlalchemy.orm import Session

from mapping_service.core.errors import ValidationFailure
from mapping_service.core.structured_logging import build_log_context
from mapping_service.schemas import MappingDto, OwnerMappingsRequest
from mapping_service.services.batch_service import AggregateUnitOfWork
from mapping_service.services.mapping_kinds import MappingKind, owner_kinds
from mapping_service.services.mapping_store import CreateOutcome, InsertedAll, MappingStore

logger = logging.getLogger(__name__)


def rewrite_owner(db: Session, kind: MappingKind, old_owner: str, new_owner: str) -> int:
    updated = MappingStore(db, kind).rewrite_owner(old_owner, new_owner)
    logger.info(
        "Moved %d %s mappings from %s to %s",
        updated,
        kind.name,
        old_owner,
        new_owner,
        extra=build_log_context(kind=kind.name, owner_id=new_owner, count=updated),
    )
    return updated


def rewrite_owner_for_aggregate(
    db: Session,
    kind: MappingKind,
    aggregate_key: Any,
    new_owner: str,
) -> list[MappingDto]:
    """Move one aggregate (e.g. one booking) to ``new_owner``; returns the rows moved."""
    moved = MappingStore(db, kind).rewrite_owner_for_aggregate(aggregate_key, new_owner)
    logger.info(
        "Moved %d %s mappings for %s=%s to %s",
        len(moved),
        kind.name,
        kind.aggregate_field,
        aggregate_key,
        new_owner,
        extra=build_log_context(kind=kind.name, owner_id=new_owner, count=len(moved)),
    )
    return moved


def rewrite_owner_everywhere(db: Session, old_owner: str, new_owner: str) -> dict[str, int]:
    """Apply a prisoner merge to every owner-bearing kind."""
    return {kind.name: rewrite_owner(db, kind, old_owner, new_owner) for kind in owner_kinds()}


def replace_owner_mappings(
    db: Session,
    kind: MappingKind,
    owner_id: str,
    request: OwnerMappingsRequest,
) -> CreateOutcome:
    """
    Replace every ``kind`` row held by ``owner_id`` with ``request.mappings``.

    The old rows are deleted and the new ones written under the request's
    label and mapping type in one unit of work. A collision with another
    owner's row leaves the old set in place.
    """
    shared = {
        kind.owner_field: owner_id,
        "label": request.label,
        "mapping_type": request.mapping_type,
    }
    try:
        mappings = [
            kind.schema.model_validate({**item.model_dump(), **shared}) for item in request.mappings
        ]
    except ValidationError as e:
        raise ValidationFailure(str(e))

    unit = AggregateUnitOfWork(db, label=request.label)
    unit.delete_by_owner(kind, owner_id)
    unit.add_all(kind, mappings)
    outcome = unit.commit()

    if isinstance(outcome, InsertedAll):
        logger.info(
            "Replaced %s mappings for %s with %d rows",
            kind.name,
            owner_id,
            len(outcome.mappings),
            extra=build_log_context(kind=kind.name, owner_id=owner_id, count=len(outcome.mappings)),
        )
    return outcome
