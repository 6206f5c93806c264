"""Retention sweep for derived renditions."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from pathlib import Path

from .media_store import MediaStore

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class SweepReport:
    removed: list[Path] = field(default_factory=list)
    failed: list[Path] = field(default_factory=list)
    expired: list[Path] = field(default_factory=list)

    def merge(self, other: "SweepReport") -> "SweepReport":
        return SweepReport(
            removed=self.removed + other.removed,
            failed=self.failed + other.failed,
            expired=self.expired + other.expired,
        )


def sweep_directory(
    store: MediaStore,
    directory: Path,
    *,
    retention: timedelta,
    now: datetime | None = None,
    dry_run: bool = False,
) -> SweepReport:
    """Delete files in ``directory`` strictly older than ``now - retention``.

    A failure on one entry is logged and does not stop the pass.
    """

    current = now or datetime.now(timezone.utc)
    cutoff = current - retention
    report = SweepReport()
    for stored in store.iter_older_than(directory, cutoff):
        report.expired.append(stored.path)
        if dry_run:
            continue
        try:
            store.delete(stored.path)
        except OSError as exc:
            report.failed.append(stored.path)
            logger.warning(
                "media.sweep.failed",
                extra={"path": str(stored.path), "error": str(exc)},
            )
            continue
        report.removed.append(stored.path)
        logger.info(
            "media.sweep.removed",
            extra={"path": str(stored.path), "modified_at": stored.modified_at.isoformat()},
        )
    return report


def sweep_expired_derived(
    store: MediaStore,
    *,
    retention: timedelta,
    now: datetime | None = None,
    include_incoming: bool = False,
    dry_run: bool = False,
) -> SweepReport:
    """Run one retention pass over the derived store (and optionally uploads)."""

    report = sweep_directory(
        store, store.paths.derived, retention=retention, now=now, dry_run=dry_run
    )
    if include_incoming:
        report = report.merge(
            sweep_directory(
                store, store.paths.incoming, retention=retention, now=now, dry_run=dry_run
            )
        )
    return report


__all__ = ["SweepReport", "sweep_directory", "sweep_expired_derived"]
