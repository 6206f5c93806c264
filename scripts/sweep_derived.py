"""Cron entry point for sweeping expired derived renditions."""

from __future__ import annotations

import argparse
import sys
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from pixeltune.config import AppConfig
from pixeltune.logging import configure_logging
from pixeltune.media.media_cleanup import sweep_expired_derived
from pixeltune.media.media_store import MediaStore


@dataclass(slots=True)
class SweepSummary:
    expired: int
    removed: int
    failed: int
    dry_run: bool


def load_config() -> AppConfig:
    return AppConfig.build_default()


def perform_sweep(
    *,
    dry_run: bool,
    include_incoming: bool | None = None,
    reference_time: datetime | None = None,
) -> SweepSummary:
    """Execute the retention pass and return summary counters."""
    config = load_config()
    store = MediaStore(config.media_paths)
    report = sweep_expired_derived(
        store,
        retention=timedelta(hours=config.retention_hours),
        now=reference_time or datetime.now(timezone.utc),
        include_incoming=config.sweep_incoming if include_incoming is None else include_incoming,
        dry_run=dry_run,
    )
    return SweepSummary(
        expired=len(report.expired),
        removed=len(report.removed),
        failed=len(report.failed),
        dry_run=dry_run,
    )


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Delete derived images past the retention window.")
    parser.add_argument("--dry-run", action="store_true", help="Only report counts without deleting files.")
    parser.add_argument(
        "--include-incoming",
        action="store_true",
        default=None,
        help="Also sweep raw uploads (overrides PIXELTUNE_SWEEP_INCOMING).",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv or [])
    configure_logging(json=False)
    try:
        summary = perform_sweep(dry_run=args.dry_run, include_incoming=args.include_incoming)
    except Exception as exc:
        print(f"sweep failed: {exc}", file=sys.stderr)
        return 2

    if summary.dry_run:
        print(f"sweep dry-run, expired={summary.expired}", file=sys.stdout)
    else:
        print(
            f"sweep done, removed={summary.removed}, failed={summary.failed}",
            file=sys.stdout,
        )
    return 1 if summary.failed else 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
