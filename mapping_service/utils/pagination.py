"""Pagination utilities for migration-run list endpoints."""

from dataclasses import dataclass
from typing import TypeVar

from fastapi import Query

from mapping_service.core.config import settings
from mapping_service.schemas.common import Page


T = TypeVar("T")

# Pages are 0-indexed on the wire
DEFAULT_PAGE = 0


@dataclass
class PaginationParams:
    """Pagination parameters from query string."""
    page: int
    size: int

    @property
    def offset(self) -> int:
        return self.page * self.size


def get_pagination(
    page: int = Query(DEFAULT_PAGE, ge=0, description="Page number (0-indexed)"),
    size: int = Query(
        settings.DEFAULT_PAGE_SIZE,
        ge=1,
        le=settings.MAX_PAGE_SIZE,
        description=f"Items per page (max {settings.MAX_PAGE_SIZE})",
    ),
) -> PaginationParams:
    """
    Pagination dependency.

    Usage:
        @router.get("/migration-id/{label}")
        def list_run(label: str, pagination: PaginationParams = Depends(get_pagination)):
            ...
    """
    return PaginationParams(page=page, size=size)


def build_page(content: list[T], total: int, pagination: PaginationParams) -> Page[T]:
    total_pages = (total + pagination.size - 1) // pagination.size if pagination.size > 0 else 0
    return Page(
        content=content,
        total_elements=total,
        number=pagination.page,
        size=pagination.size,
        total_pages=total_pages,
    )
