"""Service exceptions shared by every mapping kind."""

from __future__ import annotations

from typing import Any


class MappingServiceError(Exception):
    """Base exception for mapping service errors."""

    pass


class NotFoundError(MappingServiceError):
    """Lookup miss."""

    pass


class ValidationFailure(MappingServiceError):
    """Malformed request rejected before reaching the store."""

    pass


class DuplicateMappingError(MappingServiceError):
    """
    A create collided with an existing mapping on either key.

    Carries the rejected record and the one already stored so the caller
    can display both.
    """

    def __init__(self, message: str, duplicate: Any, existing: Any = None):
        super().__init__(message)
        self.duplicate = duplicate
        self.existing = existing
