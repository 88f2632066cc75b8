"""CSIP report aggregate endpoints."""

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from mapping_service.core.deps import get_db
from mapping_service.schemas import CSIPFullMappingDto
from mapping_service.services import csip_service

router = APIRouter(prefix="/mapping/csip", tags=["csip"])


@router.post("/all", status_code=status.HTTP_201_CREATED)
def create_csip_with_children(dto: CSIPFullMappingDto, db: Session = Depends(get_db)):
    """Register a CSIP report mapping with its plans and reviews."""
    csip_service.raise_for_csip_conflict(csip_service.create_csip_with_children(db, dto))
    return Response(status_code=status.HTTP_201_CREATED)


@router.post("/children/all", status_code=status.HTTP_201_CREATED)
def create_csip_children(dto: CSIPFullMappingDto, db: Session = Depends(get_db)):
    """Register plans and reviews for an already mapped CSIP report."""
    csip_service.raise_for_csip_conflict(csip_service.create_csip_children(db, dto))
    return Response(status_code=status.HTTP_201_CREATED)


@router.get("/dps-csip-id/{dps_csip_report_id}/all", response_model=CSIPFullMappingDto)
def get_csip_with_children(dps_csip_report_id: str, db: Session = Depends(get_db)):
    return csip_service.get_csip_with_children(db, dps_csip_report_id)


@router.delete("/dps-csip-id/{dps_csip_report_id}/children", status_code=status.HTTP_204_NO_CONTENT)
def delete_csip_children(dps_csip_report_id: str, db: Session = Depends(get_db)):
    csip_service.delete_csip_children(db, dps_csip_report_id)
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/dps-csip-id/{dps_csip_report_id}/all", status_code=status.HTTP_204_NO_CONTENT)
def delete_csip(dps_csip_report_id: str, db: Session = Depends(get_db)):
    csip_service.delete_csip(db, dps_csip_report_id)
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
