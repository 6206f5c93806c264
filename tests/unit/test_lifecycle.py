import asyncio
import os
from datetime import datetime, timedelta, timezone

import pytest

from pixeltune.lifecycle import retention_sweep_once, run_periodic_sweep
from pixeltune.media.media_store import MediaStore


@pytest.mark.unit
def test_retention_sweep_once_uses_reference_time(media_store: MediaStore) -> None:
    path = media_store.paths.derived / "abc_preview.jpg"
    path.write_bytes(b"x")
    now = datetime.now(timezone.utc) + timedelta(hours=30)

    report = retention_sweep_once(store=media_store, retention=timedelta(hours=24), now=now)

    assert report.removed == [path]


@pytest.mark.unit
@pytest.mark.asyncio
async def test_periodic_sweep_stops_on_shutdown(media_store: MediaStore) -> None:
    old = media_store.paths.derived / "old.jpg"
    old.write_bytes(b"x")
    stamp = (datetime.now(timezone.utc) - timedelta(days=2)).timestamp()
    os.utime(old, (stamp, stamp))
    calls: list[datetime] = []

    def _clock() -> datetime:
        current = datetime.now(timezone.utc)
        calls.append(current)
        return current

    shutdown = asyncio.Event()
    task = asyncio.create_task(
        run_periodic_sweep(
            store=media_store,
            retention=timedelta(hours=24),
            shutdown_event=shutdown,
            interval_seconds=0.05,
            clock=_clock,
        )
    )

    await asyncio.sleep(0.12)
    shutdown.set()
    await asyncio.wait_for(task, timeout=1)

    assert len(calls) >= 1
    assert not old.exists()
