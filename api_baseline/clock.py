"""Timestamp helpers shared by the recorder, comparator and CLI."""

from __future__ import annotations

from datetime import UTC, datetime


def utc_now_iso(now: datetime | None = None) -> str:
    """ISO-8601 UTC timestamp with millisecond precision and a ``Z`` suffix."""
    now = now or datetime.now(UTC)
    return now.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def file_timestamp(now: datetime | None = None) -> str:
    """Filesystem-safe timestamp, e.g. ``2026-01-22T10-05-00``."""
    stamp = utc_now_iso(now)
    return stamp.replace(":", "-").split(".")[0]
