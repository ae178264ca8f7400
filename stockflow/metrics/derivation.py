"""Metric derivation: change-rate normalisation and trade-value parsing.

Source cells may be numbers or strings, possibly scaled differently by
different exporters. Unparsable input always yields 0.0; nothing here
raises on bad data.
"""

from __future__ import annotations

import logging
import math
import re
from collections.abc import Mapping
from typing import Any

import numpy as np

from stockflow.data.schema import raw_change_rate, raw_trade_value

logger = logging.getLogger(__name__)

# Leading decimal literal, as accepted by a lenient float prefix parse.
_LEADING_FLOAT_RE = re.compile(r"^\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float, np.number)) and not isinstance(
        value, (bool, np.bool_)
    )


def _finite_or_zero(num: float) -> float:
    return num if math.isfinite(num) else 0.0


def parse_rate(value: Any) -> float:
    """Normalise a raw change-rate cell to a percentage.

    Strings have ``%`` and ``,`` removed and their leading numeric prefix
    parsed. Non-zero magnitudes below 1 are treated as fractions and
    multiplied by 100 (``0.0234`` -> ``2.34``); larger values are assumed
    to be percentages already.

    This is a heuristic: a genuine change below 1% (e.g. ``0.8``) is
    rescaled too.

    Args:
        value: Raw cell value.

    Returns:
        Percentage as a float, 0.0 if unparsable.
    """
    num = 0.0
    if _is_number(value):
        num = _finite_or_zero(float(value))
    elif isinstance(value, str):
        cleaned = value.replace("%", "").replace(",", "")
        match = _LEADING_FLOAT_RE.match(cleaned)
        if match:
            num = _finite_or_zero(float(match.group(0)))

    if num != 0 and abs(num) < 1:
        return num * 100
    return num


def parse_number(value: Any) -> float:
    """Parse a plain numeric cell, 0.0 for anything unparsable.

    Strings must be a complete decimal number (surrounding whitespace
    allowed). Thousands separators and ``_`` digit grouping are not
    accepted; comma-grouped CSV cells are converted at decode time.
    Blank strings give 0.0.

    Non-finite results (``"nan"``, ``"inf"``, ``"infinity"``) give 0.0,
    as do booleans. Hex literals such as ``"0x10"`` are not numbers here.
    """
    if _is_number(value):
        return _finite_or_zero(float(value))
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return 0.0
        if "_" in text:
            logger.debug("Unparsable numeric cell %r, using 0", value)
            return 0.0
        try:
            return _finite_or_zero(float(text))
        except ValueError:
            logger.debug("Unparsable numeric cell %r, using 0", value)
            return 0.0
    return 0.0


def change_rate(record: Mapping[str, Any] | None) -> float:
    """Normalised change rate of a roster record."""
    return parse_rate(raw_change_rate(record))


def trade_value(record: Mapping[str, Any] | None) -> float:
    """Trade value of a time-series record (0.0 when record is None)."""
    return parse_number(raw_trade_value(record))
