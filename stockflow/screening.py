"""Screening: numeric range filters and single-key ordering."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from stockflow.config import FILTER_FIELDS, FilterBounds, SortKey, SortOrder
from stockflow.data.models import StockRow

logger = logging.getLogger(__name__)


def passes_filters(row: StockRow, filters: Mapping[str, FilterBounds]) -> bool:
    """Check one row against every configured bound (inclusive).

    Args:
        row: Reconciled stock row.
        filters: Field name -> bounds. Unset bounds impose no constraint.

    Returns:
        True if the row satisfies all bounds.
    """
    for field_name, bounds in filters.items():
        value = getattr(row, field_name)
        if bounds.min is not None and value < bounds.min:
            return False
        if bounds.max is not None and value > bounds.max:
            return False
    return True


def _sort_value(row: StockRow, key: SortKey) -> Any:
    value = getattr(row, key.value)
    if key is SortKey.NAME:
        # Names may be numbers or missing in hand-made exports.
        return "" if value is None else str(value)
    return value


def sort_rows(
    rows: Iterable[StockRow],
    sort_key: SortKey | None,
    sort_order: SortOrder | None,
) -> list[StockRow]:
    """Order rows by one key; ties keep their incoming order.

    Args:
        rows: Rows to order.
        sort_key: Column to sort on. None leaves the order unchanged.
        sort_order: ASC or DESC. None leaves the order unchanged.

    Returns:
        New list of rows.
    """
    if sort_key is None or sort_order is None:
        return list(rows)
    # sorted() is stable for reverse=True as well.
    return sorted(
        rows,
        key=lambda r: _sort_value(r, sort_key),
        reverse=sort_order is SortOrder.DESC,
    )


def screen_rows(
    rows: Iterable[StockRow],
    filters: Mapping[str, FilterBounds] | None = None,
    sort_key: SortKey | None = None,
    sort_order: SortOrder | None = None,
) -> list[StockRow]:
    """Filter then sort reconciled rows.

    Bounds across fields form a conjunction. Sorting uses a single
    active key; with no key or no order the filtered rows are returned
    in their incoming order.

    Args:
        rows: Output of reconciliation.
        filters: Field name -> bounds. Fields must be in FILTER_FIELDS.
        sort_key: Column to sort on, or None.
        sort_order: ASC/DESC, or None.

    Returns:
        Filtered, sorted list of StockRow.

    Raises:
        ValueError: If a filter names an unknown field.
    """
    filters = filters or {}
    unknown = set(filters) - set(FILTER_FIELDS)
    if unknown:
        raise ValueError(f"Unknown filter fields: {sorted(unknown)}")
    active = {k: b for k, b in filters.items() if b.is_active}

    rows = list(rows)
    kept = [r for r in rows if passes_filters(r, active)]
    if active:
        logger.info(
            "Filtering: %d -> %d rows (%s)",
            len(rows),
            len(kept),
            ", ".join(sorted(active)),
        )

    return sort_rows(kept, sort_key, sort_order)
