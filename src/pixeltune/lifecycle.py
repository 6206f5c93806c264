"""Lifecycle helpers wiring background tasks for FastAPI startup."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Callable

from .media.media_cleanup import SweepReport, sweep_expired_derived
from .media.media_store import MediaStore


logger = logging.getLogger(__name__)


def _default_clock() -> datetime:
    return datetime.now(timezone.utc)


def retention_sweep_once(
    *,
    store: MediaStore,
    retention: timedelta,
    include_incoming: bool = False,
    now: datetime | None = None,
) -> SweepReport:
    """Run a single retention iteration and return its report."""

    current = now or _default_clock()
    return sweep_expired_derived(
        store,
        retention=retention,
        now=current,
        include_incoming=include_incoming,
    )


async def run_periodic_sweep(
    *,
    store: MediaStore,
    retention: timedelta,
    shutdown_event: asyncio.Event,
    interval_seconds: float = 24 * 60 * 60,
    include_incoming: bool = False,
    clock: Callable[[], datetime] | None = None,
) -> None:
    """Execute retention sweeps until ``shutdown_event`` is signalled."""

    interval = max(0.01, float(interval_seconds))
    tick = clock or _default_clock
    while not shutdown_event.is_set():
        now = tick()
        try:
            report = await asyncio.to_thread(
                retention_sweep_once,
                store=store,
                retention=retention,
                include_incoming=include_incoming,
                now=now,
            )
        except Exception:
            logger.exception("Retention sweep iteration failed")
        else:
            if report.expired:
                logger.info(
                    "Swept %s expired files (%s failed)",
                    len(report.removed),
                    len(report.failed),
                )
        try:
            await asyncio.wait_for(shutdown_event.wait(), timeout=interval)
        except asyncio.TimeoutError:
            continue


__all__ = [
    "retention_sweep_once",
    "run_periodic_sweep",
]
