"""Prisoner merge across every owner-bearing mapping kind."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from mapping_service.core.deps import get_db
from mapping_service.schemas import MergeCountsResponse
from mapping_service.services import owner_service

router = APIRouter(prefix="/mapping/merge", tags=["merge"])


@router.put("/from/{old_owner}/to/{new_owner}", response_model=MergeCountsResponse)
def merge_prisoner(old_owner: str, new_owner: str, db: Session = Depends(get_db)):
    """
    Move every mapping owned by ``old_owner`` to ``new_owner``.

    All kinds are rewritten in one transaction.
    """
    counts = owner_service.rewrite_owner_everywhere(db, old_owner, new_owner)
    db.commit()
    return MergeCountsResponse(counts=counts)
