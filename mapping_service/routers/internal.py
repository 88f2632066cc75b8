"""
Internal endpoints for scheduled/cron operations.

Protected by X-Internal-Secret header.
The worker runs the same sweep on its own timer; these allow a manual run.
"""
import logging

from fastapi import APIRouter, Header, HTTPException

from mapping_service.core.config import settings
from mapping_service.db.session import SessionLocal
from mapping_service.schemas import RetentionSweepResponse
from mapping_service.services import retention_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/internal/scheduled", tags=["internal"])


def verify_internal_secret(x_internal_secret: str = Header(...)):
    """Verify the internal secret header."""
    expected = settings.INTERNAL_SECRET
    if not expected:
        raise HTTPException(status_code=501, detail="INTERNAL_SECRET not configured")
    if x_internal_secret != expected:
        raise HTTPException(status_code=403, detail="Invalid internal secret")


@router.post("/retention-sweep", response_model=RetentionSweepResponse)
def retention_sweep(x_internal_secret: str = Header(...)):
    """Delete expired rows from short-lived mapping kinds."""
    verify_internal_secret(x_internal_secret)

    with SessionLocal() as db:
        deleted = retention_service.run_retention_sweep(db)

    logger.info("Retention sweep (manual) deleted %d mappings", sum(deleted.values()))
    return RetentionSweepResponse(deleted=deleted)
