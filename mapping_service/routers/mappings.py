"""
Per-kind mapping endpoints.

Every registered kind gets the same surface under ``/mapping/{kind}``;
parent, owner and aggregate-owner routes are only mounted for kinds that
carry those columns.
"""

from datetime import datetime

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from mapping_service.core.deps import get_db
from mapping_service.schemas import CountResponse, OwnerMappingsRequest, OwnerMappingsResponse, Page
from mapping_service.services import conflict_service, lookup_service, migration_service
from mapping_service.services import owner_service, retention_service
from mapping_service.services.batch_service import raise_for_aggregate_conflict
from mapping_service.services.mapping_kinds import KINDS, MappingKind
from mapping_service.utils.pagination import PaginationParams, get_pagination


def build_mapping_router(kind: MappingKind) -> APIRouter:
    router = APIRouter(prefix=f"/mapping/{kind.name}", tags=[kind.name])
    schema = kind.schema

    # =========================================================================
    # Create
    # =========================================================================

    @router.post("", status_code=status.HTTP_201_CREATED)
    def create_mapping(mapping: schema, db: Session = Depends(get_db)):
        """Register one mapping. Re-registering the identical pair succeeds."""
        outcome = conflict_service.register_mapping(db, kind, mapping)
        conflict_service.raise_for_conflict(kind, outcome)
        db.commit()
        return Response(status_code=status.HTTP_201_CREATED)

    @router.post("/batch", status_code=status.HTTP_201_CREATED)
    def create_mappings(mappings: list[schema], db: Session = Depends(get_db)):
        """Register a list of mappings in one transaction."""
        outcome = conflict_service.register_mappings(db, kind, mappings)
        conflict_service.raise_for_conflict(kind, outcome)
        db.commit()
        return Response(status_code=status.HTTP_201_CREATED)

    # =========================================================================
    # Lookups
    # =========================================================================

    @router.get("/nomis-id/{legacy_path:path}", response_model=schema)
    def get_by_nomis_id(legacy_path: str, db: Session = Depends(get_db)):
        return lookup_service.get_by_legacy_id(db, kind, kind.parse_legacy_path(legacy_path))

    @router.get("/dps-id/{new_id}", response_model=schema)
    def get_by_dps_id(new_id: str, db: Session = Depends(get_db)):
        return lookup_service.get_by_new_id(db, kind, kind.parse_new_id(new_id))

    # =========================================================================
    # Migration runs
    # =========================================================================

    @router.get("/migration-id/{label}", response_model=Page[schema])
    def get_by_migration_id(
        label: str,
        pagination: PaginationParams = Depends(get_pagination),
        db: Session = Depends(get_db),
    ):
        return migration_service.get_migration_page(db, kind, label, pagination)

    @router.get("/migration-id/{label}/count", response_model=CountResponse)
    def count_by_migration_id(
        label: str,
        include_provisional: bool = Query(False, alias="includeProvisional"),
        db: Session = Depends(get_db),
    ):
        count = migration_service.count_migrated(db, kind, label, include_provisional)
        return CountResponse(count=count)

    @router.get("/migrated/latest", response_model=schema)
    def get_latest_migrated(db: Session = Depends(get_db)):
        return migration_service.get_latest_migrated(db, kind)

    # =========================================================================
    # Deletes
    # =========================================================================

    @router.delete("/dps-id/{new_id}", status_code=status.HTTP_204_NO_CONTENT)
    def delete_by_dps_id(new_id: str, db: Session = Depends(get_db)):
        lookup_service.delete_by_new_id(db, kind, kind.parse_new_id(new_id))
        db.commit()
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    @router.delete("/nomis-id/{legacy_path:path}", status_code=status.HTTP_204_NO_CONTENT)
    def delete_by_nomis_id(legacy_path: str, db: Session = Depends(get_db)):
        lookup_service.delete_by_legacy_id(db, kind, kind.parse_legacy_path(legacy_path))
        db.commit()
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    @router.delete("/all", status_code=status.HTTP_204_NO_CONTENT)
    def delete_all(
        only_migrated: bool = Query(False, alias="onlyMigrated"),
        db: Session = Depends(get_db),
    ):
        retention_service.delete_all(db, kind, only_migrated=only_migrated)
        db.commit()
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    @router.delete("/created-after", status_code=status.HTTP_204_NO_CONTENT)
    def delete_created_after(timestamp: datetime = Query(...), db: Session = Depends(get_db)):
        """Roll back an abandoned run: remove rows created after ``timestamp``."""
        retention_service.delete_created_after(db, kind, timestamp)
        db.commit()
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    # =========================================================================
    # Children
    # =========================================================================

    if kind.parent_field:

        @router.get("/parent-id/{parent_id}", response_model=list[schema])
        def get_by_parent_id(parent_id: str, db: Session = Depends(get_db)):
            return lookup_service.list_by_parent(db, kind, parent_id)

        @router.delete("/parent-id/{parent_id}", status_code=status.HTTP_204_NO_CONTENT)
        def delete_by_parent_id(parent_id: str, db: Session = Depends(get_db)):
            retention_service.delete_by_parent_id(db, kind, parent_id)
            db.commit()
            return Response(status_code=status.HTTP_204_NO_CONTENT)

    # =========================================================================
    # Owners
    # =========================================================================

    if kind.owner_field:

        @router.get("/owner/{owner_id}/all", response_model=OwnerMappingsResponse[schema])
        def get_by_owner(owner_id: str, db: Session = Depends(get_db)):
            return OwnerMappingsResponse(mappings=lookup_service.list_by_owner(db, kind, owner_id))

        @router.put("/merge/from/{old_owner}/to/{new_owner}", response_model=CountResponse)
        def merge_owner(old_owner: str, new_owner: str, db: Session = Depends(get_db)):
            count = owner_service.rewrite_owner(db, kind, old_owner, new_owner)
            db.commit()
            return CountResponse(count=count)

    if kind.owner_field and kind.owner_set_schema:
        owner_set = OwnerMappingsRequest[kind.owner_set_schema]

        @router.post("/owner/{owner_id}/all", status_code=status.HTTP_201_CREATED)
        def replace_owner_mappings(owner_id: str, owner_mappings: owner_set, db: Session = Depends(get_db)):
            """Replace everything ``owner_id`` holds with the submitted set."""
            outcome = owner_service.replace_owner_mappings(db, kind, owner_id, owner_mappings)
            raise_for_aggregate_conflict(outcome, (kind,))
            return Response(status_code=status.HTTP_201_CREATED)

    if kind.owner_field and kind.aggregate_field:

        @router.put("/merge/aggregate/{aggregate_key}/to/{new_owner}", response_model=list[schema])
        def move_aggregate(aggregate_key: int, new_owner: str, db: Session = Depends(get_db)):
            """Move one aggregate to another owner; returns the moved rows."""
            moved = owner_service.rewrite_owner_for_aggregate(db, kind, aggregate_key, new_owner)
            db.commit()
            return moved

    return router


routers = [build_mapping_router(kind) for kind in KINDS.values()]
