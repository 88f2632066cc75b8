"""Service layer modules."""

from mapping_service.services.mapping_kinds import (
    KINDS,
    MappingKind,
    get_kind,
    owner_kinds,
    retention_kinds,
)
from mapping_service.services.mapping_store import (
    Conflict,
    CreateOutcome,
    Inserted,
    InsertedAll,
    MappingStore,
    Unchanged,
)
