"""Helper utilities shared by the catalog engines."""

from datetime import datetime, timezone
from pathlib import Path
from typing import Any


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def normalize_text(value: Any) -> str:
    """Lowercase and trim a value for case-insensitive comparison.

    Args:
        value: Value to normalize (stringified first)

    Returns:
        Normalized string
    """
    return str(value).lower().strip()


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse a dataset timestamp such as ``2019-02-07 23:59:59``.

    Naive timestamps are taken as UTC.

    Args:
        value: Timestamp string from the dataset

    Returns:
        Aware datetime, or None if missing or unparseable
    """
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.strip())
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def file_fingerprint(path: Path) -> str:
    """Cheap change marker for a file: its size and mtime.

    Args:
        path: File to fingerprint

    Returns:
        ``"<size>_<mtime_ns>"``, or an empty string if the file cannot be stat'ed
    """
    try:
        stats = path.stat()
    except OSError:
        return ""
    return f"{stats.st_size}_{stats.st_mtime_ns}"
