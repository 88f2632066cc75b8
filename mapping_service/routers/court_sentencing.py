"""Court case aggregate endpoints."""

from fastapi import APIRouter, Depends, Response, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from mapping_service.core.deps import get_db
from mapping_service.db.enums import AggregateResultStatus
from mapping_service.schemas import (
    AggregateBatchResponse,
    CourtCaseBatchMappingDto,
    CourtCaseBatchUpdateAndCreateMappingDto,
)
from mapping_service.services import court_sentencing_service

router = APIRouter(prefix="/mapping/court-sentencing", tags=["court-sentencing"])


@router.post("/court-cases", status_code=status.HTTP_201_CREATED)
def create_court_case(dto: CourtCaseBatchMappingDto, db: Session = Depends(get_db)):
    """Register a court case with all of its child mappings, all or nothing."""
    outcome = court_sentencing_service.create_court_case_tree(db, dto)
    court_sentencing_service.raise_for_tree_conflict(outcome)
    return Response(status_code=status.HTTP_201_CREATED)


@router.post(
    "/court-cases/batch",
    response_model=AggregateBatchResponse,
    responses={207: {"model": AggregateBatchResponse}},
)
def create_court_cases(dtos: list[CourtCaseBatchMappingDto], db: Session = Depends(get_db)):
    """
    Register many court cases, each atomically and independently.

    201 when every case was created, 207 with the per-case results otherwise.
    """
    results = court_sentencing_service.create_court_case_trees(db, dtos)
    body = AggregateBatchResponse(results=results)
    all_created = all(result.status == AggregateResultStatus.CREATED for result in results)
    return JSONResponse(
        status_code=status.HTTP_201_CREATED if all_created else status.HTTP_207_MULTI_STATUS,
        content=body.model_dump(mode="json", by_alias=True),
    )


@router.put("/court-cases/update-create", status_code=status.HTTP_200_OK)
def update_and_create_court_case(
    dto: CourtCaseBatchUpdateAndCreateMappingDto,
    db: Session = Depends(get_db),
):
    """Renumber existing NOMIS ids and register new mappings in one transaction."""
    outcome = court_sentencing_service.update_and_create_court_case_tree(db, dto)
    court_sentencing_service.raise_for_tree_conflict(outcome)
    return Response(status_code=status.HTTP_200_OK)


@router.get("/court-cases/dps-court-case-id/{dps_court_case_id}/all", response_model=CourtCaseBatchMappingDto)
def get_court_case_tree(dps_court_case_id: str, db: Session = Depends(get_db)):
    return court_sentencing_service.get_court_case_tree(db, dps_court_case_id)


@router.delete("/court-cases/dps-court-case-id/{dps_court_case_id}/all", status_code=status.HTTP_204_NO_CONTENT)
def delete_court_case_tree(dps_court_case_id: str, db: Session = Depends(get_db)):
    court_sentencing_service.delete_court_case_tree(db, dps_court_case_id)
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
