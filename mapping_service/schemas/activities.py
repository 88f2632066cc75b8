from __future__ import annotations

from mapping_service.db.enums import MappingType
from mapping_service.schemas.common import MappingDto


class ActivityMigrationMappingDto(MappingDto):
    nomis_course_activity_id: int
    activity_id: int | None = None
    activity_id2: int | None = None
    mapping_type: MappingType = MappingType.MIGRATED
