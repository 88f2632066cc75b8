"""Structured logging helpers (identifiers only, never record contents)."""

from typing import Any


def build_log_context(
    *,
    kind: str | None = None,
    label: str | None = None,
    new_id: str | None = None,
    legacy_id: Any = None,
    parent_id: str | None = None,
    owner_id: str | None = None,
    count: int | None = None,
) -> dict[str, Any]:
    """Return a flat log context dict suitable for ``extra=``."""
    context: dict[str, Any] = {}
    if kind:
        context["mapping_kind"] = kind
    if label:
        context["label"] = label
    if new_id:
        context["new_id"] = new_id
    if legacy_id is not None:
        context["legacy_id"] = str(legacy_id)
    if parent_id:
        context["parent_id"] = parent_id
    if owner_id:
        context["owner_id"] = owner_id
    if count is not None:
        context["count"] = count
    return context
