"""Column resolution for schema-free spreadsheet records.

Exporters label the same columns differently (localised vs romanised
headers) but keep the column order. Every field is therefore looked up
by a list of named aliases first and by position second.
"""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from typing import Any

from stockflow.config import (
    CHANGE_RATE_ALIASES,
    CHANGE_RATE_POSITION,
    CODE_ALIASES,
    CODE_POSITION,
    NAME_ALIASES,
    NAME_POSITION,
    TRADE_VALUE_ALIASES,
    TRADE_VALUE_POSITION,
)


def resolve_field(
    record: Mapping[str, Any] | None,
    aliases: Sequence[str],
    position: int,
) -> Any:
    """Return a field by the first present alias, else by position.

    Args:
        record: Decoded row (column label -> value). None is treated as
            an empty record.
        aliases: Acceptable column labels, in priority order.
        position: Zero-based fallback index in the record's column order.

    Returns:
        The resolved value, or None if no alias is present and the
        record has no column at ``position``.
    """
    if not record:
        return None
    for alias in aliases:
        if alias in record:
            return record[alias]
    if 0 <= position < len(record):
        return list(record.values())[position]
    return None


def canonical_code(value: Any) -> str | None:
    """Normalise a raw stock code cell for joining across files.

    Strings are stripped; integral numbers lose their decimal point
    (``5930.0`` -> ``"5930"``). Missing or blank codes give None.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        return str(value)
    if isinstance(value, float):
        if math.isnan(value):
            return None
        if value.is_integer():
            return str(int(value))
    code = str(value).strip()
    return code or None


def stock_code(record: Mapping[str, Any] | None) -> str | None:
    return canonical_code(resolve_field(record, CODE_ALIASES, CODE_POSITION))


def stock_name(record: Mapping[str, Any] | None) -> Any:
    return resolve_field(record, NAME_ALIASES, NAME_POSITION)


def raw_change_rate(record: Mapping[str, Any] | None) -> Any:
    return resolve_field(record, CHANGE_RATE_ALIASES, CHANGE_RATE_POSITION)


def raw_trade_value(record: Mapping[str, Any] | None) -> Any:
    return resolve_field(record, TRADE_VALUE_ALIASES, TRADE_VALUE_POSITION)


def index_by_code(
    records: Sequence[Mapping[str, Any]],
) -> dict[str, Mapping[str, Any]]:
    """Map canonical code to record, keeping the first occurrence.

    Records without a code are skipped, so a missing code never joins.
    """
    index: dict[str, Mapping[str, Any]] = {}
    for record in records:
        code = stock_code(record)
        if code is not None and code not in index:
            index[code] = record
    return index
