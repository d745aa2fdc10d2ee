"""Movement Aggregator - windowed receipt and issue statistics per item.

- Sums issued and received quantities inside a trailing window
- Lists priced receipts newest-first
- Resolves the unit price in effect at a given moment
"""

from __future__ import annotations

from collections import defaultdict
from datetime import datetime, timedelta
from typing import Optional

from replenishment_engine.analyzers.validation import ensure_window
from replenishment_engine.models.inventory import (
    InventorySnapshot,
    Issue,
    Receipt,
    WindowedAggregate,
)


class MovementAggregator:
    """Read-only index of a snapshot's movements, grouped by item."""

    def __init__(self, snapshot: InventorySnapshot) -> None:
        self.movements_from = snapshot.movements_from
        self.movements_until = snapshot.movements_until

        # {item_id: [Receipt]} / {item_id: [Issue]}, oldest first
        history: dict[str, list[Receipt]] = defaultdict(list)
        receipts: dict[str, list[Receipt]] = defaultdict(list)
        issues: dict[str, list[Issue]] = defaultdict(list)
        for receipt in sorted(snapshot.receipts, key=lambda r: r.date):
            history[receipt.item_id].append(receipt)
            if self._measured(receipt.date):
                receipts[receipt.item_id].append(receipt)
        for issue in sorted(snapshot.issues, key=lambda i: i.date):
            if self._measured(issue.date):
                issues[issue.item_id].append(issue)
        self._price_history = dict(history)
        self._receipts = dict(receipts)
        self._issues = dict(issues)

    def _measured(self, moment: datetime) -> bool:
        if self.movements_from is not None and moment < self.movements_from:
            return False
        if self.movements_until is not None and moment > self.movements_until:
            return False
        return True

    @staticmethod
    def window_bounds(window_days: int, as_of: datetime) -> tuple[datetime, datetime]:
        """Inclusive ``[as_of - window, as_of]`` bounds."""
        ensure_window(window_days)
        return as_of - timedelta(days=window_days), as_of

    # --- Windowed totals ---

    def aggregate(self, item_id: str, window_days: int, as_of: datetime) -> WindowedAggregate:
        """Totals for one item inside the trailing window.

        An item without movements yields zero totals and no receipts.
        """
        start, end = self.window_bounds(window_days, as_of)
        window_receipts = [r for r in self._receipts.get(item_id, ()) if start <= r.date <= end]
        total_issued = sum(
            i.quantity for i in self._issues.get(item_id, ()) if start <= i.date <= end
        )
        priced = [r for r in window_receipts if r.unit_price is not None]
        priced.reverse()

        return WindowedAggregate(
            item_id=item_id,
            window_days=window_days,
            total_received=sum(r.quantity for r in window_receipts),
            total_issued=total_issued,
            priced_receipts=priced,
        )

    def issues_in_window(self, item_id: str, window_days: int, as_of: datetime) -> list[Issue]:
        start, end = self.window_bounds(window_days, as_of)
        return [i for i in self._issues.get(item_id, ()) if start <= i.date <= end]

    def issued_between(
        self, item_id: str, start: datetime, end: datetime, include_end: bool = False
    ) -> int:
        """Issued quantity in ``[start, end)``, or ``[start, end]`` with ``include_end``."""
        total = 0
        for issue in self._issues.get(item_id, ()):
            if issue.date < start:
                continue
            if issue.date > end or (issue.date == end and not include_end):
                break
            total += issue.quantity
        return total

    # --- Price history ---

    def recent_priced_receipts(self, item_id: str, limit: int = 5) -> list[Receipt]:
        """Most recent priced receipts over the full history, newest first."""
        priced = [r for r in self._price_history.get(item_id, ()) if r.unit_price is not None]
        priced.reverse()
        return priced[:limit]

    def price_at(self, item_id: str, moment: datetime) -> Optional[float]:
        """Unit price of the latest priced receipt at or before ``moment``."""
        price = None
        for receipt in self._price_history.get(item_id, ()):
            if receipt.date > moment:
                break
            if receipt.unit_price is not None:
                price = receipt.unit_price
        return price
