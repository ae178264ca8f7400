"""Trading-date helpers.

Dataset dates are 6-character ``YYMMDD`` keys taken from file names.
User-facing dates are ISO ``YYYY-MM-DD`` strings. Only the years
2000-2099 are representable.
"""

from __future__ import annotations

import datetime
import re

_DATE_KEY_RE = re.compile(r"(\d{6})")


def parse_file_name_date(file_name: str) -> str | None:
    """Extract the first run of six digits from a file name.

    Args:
        file_name: Uploaded file name (e.g. ``inst_240115.xlsx``).

    Returns:
        The ``YYMMDD`` key, or None if the name has no 6-digit run.
    """
    match = _DATE_KEY_RE.search(file_name)
    if match:
        return match.group(1)
    return None


def format_yymmdd(date_key: str) -> str:
    """Expand ``YYMMDD`` to ``20YY-MM-DD``.

    Keys that are not exactly six characters are returned unchanged.
    """
    if not date_key or len(date_key) != 6:
        return date_key
    return f"20{date_key[:2]}-{date_key[2:4]}-{date_key[4:6]}"


def to_date_key(iso_date: str) -> str:
    """Convert an ISO date to the ``YYMMDD`` key used by datasets.

    Separators are stripped and the two century digits dropped, so
    ``"2024-01-15"`` becomes ``"240115"``.
    """
    return iso_date.replace("-", "")[2:]


def _parse_iso(value: str) -> datetime.date | None:
    try:
        return datetime.date.fromisoformat(value)
    except (TypeError, ValueError):
        return None


def is_within_range(date_key: str | None, start: str, end: str) -> bool:
    """Check whether a dataset date lies in ``[start, end]``.

    Malformed dates on either side evaluate as "not in range".

    Args:
        date_key: Dataset ``YYMMDD`` key.
        start: Inclusive ISO start date.
        end: Inclusive ISO end date.

    Returns:
        True if all three dates parse and ``start <= date <= end``.
    """
    if not date_key:
        return False
    target = _parse_iso(format_yymmdd(date_key))
    lower = _parse_iso(start)
    upper = _parse_iso(end)
    if target is None or lower is None or upper is None:
        return False
    return lower <= target <= upper
