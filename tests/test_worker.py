import pytest

from mapping_service import worker
from mapping_service.core.config import settings
from mapping_service.services import retention_service


@pytest.mark.asyncio
async def test_failed_tick_does_not_stop_timer(db, monkeypatch):
    calls = []

    def flaky_sweep(session, now=None):
        calls.append(now)
        if len(calls) == 1:
            raise RuntimeError("database unavailable")
        return {"visit-balance-adjustments": 2}

    monkeypatch.setattr(retention_service, "run_retention_sweep", flaky_sweep)
    monkeypatch.setattr(settings, "RETENTION_SWEEP_INTERVAL_SECONDS", 0)

    await worker.retention_loop(max_ticks=3)

    assert len(calls) == 3


def test_tick_returns_none_on_failure(db, monkeypatch):
    def broken_sweep(session, now=None):
        raise RuntimeError("boom")

    monkeypatch.setattr(retention_service, "run_retention_sweep", broken_sweep)

    assert worker.run_retention_tick() is None


def test_tick_returns_counts(db):
    assert worker.run_retention_tick() == {"visit-balance-adjustments": 0}
