"""Enum definitions for mapping provenance."""

from enum import Enum


class MappingType(str, Enum):
    """How a mapping row came to exist."""

    MIGRATED = "MIGRATED"
    NOMIS_CREATED = "NOMIS_CREATED"
    DPS_CREATED = "DPS_CREATED"
    NOMIS_UPDATED = "NOMIS_UPDATED"
    DPS_UPDATED = "DPS_UPDATED"


DEFAULT_MAPPING_TYPE = MappingType.DPS_CREATED


class AggregateResultStatus(str, Enum):
    """Outcome of one aggregate inside a multi-aggregate batch."""

    CREATED = "CREATED"
    CONFLICT = "CONFLICT"
    FAILED = "FAILED"
