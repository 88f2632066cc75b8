"""Shared request/response shapes for mapping endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from mapping_service.core.config import settings
from mapping_service.db.enums import DEFAULT_MAPPING_TYPE, AggregateResultStatus, MappingType

T = TypeVar("T")


class CamelModel(BaseModel):
    """camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class MappingDto(CamelModel):
    """Fields every mapping kind carries."""

    label: str | None = Field(
        None,
        max_length=settings.LABEL_MAX_LENGTH,
        description="Label (a timestamp for migrated ids)",
    )
    mapping_type: MappingType = DEFAULT_MAPPING_TYPE
    when_created: datetime | None = Field(None, description="Assigned by the store")

    def wire(self) -> dict[str, Any]:
        """JSON-ready camelCase dict, as returned to callers."""
        return self.model_dump(mode="json", by_alias=True)


class Page(CamelModel, Generic[T]):
    content: list[T]
    total_elements: int
    number: int
    size: int
    total_pages: int


class CountResponse(CamelModel):
    count: int


class OwnerMappingsResponse(CamelModel, Generic[T]):
    mappings: list[T]


class OwnerMappingsRequest(CamelModel, Generic[T]):
    """A person's complete set of mappings, replacing whatever they held."""

    label: str | None = Field(None, max_length=settings.LABEL_MAX_LENGTH)
    mapping_type: MappingType = DEFAULT_MAPPING_TYPE
    mappings: list[T]


class MergeCountsResponse(CamelModel):
    counts: dict[str, int]


class ErrorResponse(CamelModel):
    status: int
    user_message: str | None = None
    developer_message: str | None = None


class DuplicateErrorContent(CamelModel):
    duplicate: Any
    existing: Any = None


class DuplicateMappingErrorResponse(CamelModel):
    more_info: DuplicateErrorContent
    status: int = 409
    error_code: int = 1409
    user_message: str
    developer_message: str | None = None


class AggregateResult(CamelModel):
    index: int
    status: AggregateResultStatus
    message: str | None = None
    duplicate: Any = None
    existing: Any = None


class AggregateBatchResponse(CamelModel):
    results: list[AggregateResult]


class RetentionSweepResponse(CamelModel):
    deleted: dict[str, int]
