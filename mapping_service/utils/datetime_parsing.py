"""Datetime helpers for mapping timestamps (always UTC)."""

from __future__ import annotations

from datetime import datetime, time, timedelta, timezone


def utc_now() -> datetime:
    """Timestamp assigned to new mapping rows."""
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC; convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def start_of_day_days_ago(days: int, *, now: datetime | None = None) -> datetime:
    """Midnight (UTC) ``days`` days before ``now``."""
    current = as_utc(now) if now else utc_now()
    midnight = datetime.combine(current.date(), time.min, tzinfo=timezone.utc)
    return midnight - timedelta(days=days)
