"""Report pre-filters applied to a snapshot before analysis."""

from __future__ import annotations

import re
from datetime import date, datetime, time
from typing import Any, Optional

from replenishment_engine.analyzers.validation import InvalidInputError, parse_moment
from replenishment_engine.models.inventory import InventorySnapshot, ReportFilters

_DATE_ONLY = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def _is_date_only(value: Any) -> bool:
    if isinstance(value, datetime):
        return False
    if isinstance(value, date):
        return True
    return isinstance(value, str) and bool(_DATE_ONLY.match(value.strip()))


def range_end(value: Any) -> datetime:
    """Inclusive upper bound for ``date_to``; a bare date covers the whole day."""
    moment = parse_moment(value.strip() if isinstance(value, str) else value, "date_to")
    if _is_date_only(value):
        return datetime.combine(moment.date(), time.max)
    return moment


def apply_filters(
    snapshot: InventorySnapshot, filters: Optional[ReportFilters]
) -> InventorySnapshot:
    """Narrows the snapshot to the filtered item set and date range.

    Category and supplier restrict the catalog; movements follow the remaining
    items. The date range bounds the measured movements, both ends inclusive.
    Receipts outside it stay in the snapshot as price history.
    """
    if filters is None:
        return snapshot

    date_from = parse_moment(filters.date_from, "date_from") if filters.date_from else None
    date_to = range_end(filters.date_to) if filters.date_to else None
    if date_from and date_to and date_from > date_to:
        raise InvalidInputError(f"date_from {date_from} is after date_to {date_to}")

    items = tuple(
        item
        for item in snapshot.items
        if (filters.category_id is None or item.category_id == filters.category_id)
        and (filters.supplier_id is None or item.supplier_id == filters.supplier_id)
    )
    item_ids = {item.item_id for item in items}

    def _in_range(moment) -> bool:
        moment = parse_moment(moment)
        if date_from and moment < date_from:
            return False
        if date_to and moment > date_to:
            return False
        return True

    return InventorySnapshot(
        items=items,
        receipts=tuple(r for r in snapshot.receipts if r.item_id in item_ids),
        issues=tuple(i for i in snapshot.issues if i.item_id in item_ids and _in_range(i.date)),
        movements_from=date_from,
        movements_until=date_to,
    )
