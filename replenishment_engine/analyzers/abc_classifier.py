"""ABC Classifier - Pareto ranking of items by value moved.

- Values every issue at the unit price in effect on its date
- Ranks items by total value and computes cumulative shares
- Splits the ranking into classes A (80%), B (next 15%) and C (rest)
"""

from __future__ import annotations

import logging
from typing import Any

from replenishment_engine.analyzers.base_analyzer import BaseAnalyzer
from replenishment_engine.analyzers.validation import ensure_window
from replenishment_engine.models.inventory import (
    ABCClass,
    ABCClassSummary,
    ABCItem,
    ABCSummary,
    Item,
)

logger = logging.getLogger(__name__)

CLASS_A_CEILING = 80.0
CLASS_B_CEILING = 95.0
DEFAULT_ABC_WINDOW_DAYS = 90
# Absorbs float drift in the running cumulative share
_EPSILON = 1e-9


def classify_cumulative(cumulative_percentage: float, total_value: float) -> ABCClass:
    """Class for an item given the cumulative share AFTER including it.

    The item that pushes the cumulative share past a ceiling belongs to the
    next class. Items that moved no value are always C.
    """
    if total_value <= 0:
        return ABCClass.C
    if cumulative_percentage <= CLASS_A_CEILING + _EPSILON:
        return ABCClass.A
    if cumulative_percentage <= CLASS_B_CEILING + _EPSILON:
        return ABCClass.B
    return ABCClass.C


class ABCClassifier(BaseAnalyzer):
    """Partitions catalog items into value classes."""

    analyzer_name = "ABCClassifier"

    def item_value(self, item: Item, window_days: int) -> tuple[int, float]:
        """Issued quantity and value for one item inside the window.

        Issues that precede every priced receipt contribute no value.
        """
        total_issued = 0
        total_value = 0.0
        for issue in self.aggregator.issues_in_window(item.item_id, window_days, self.as_of):
            total_issued += issue.quantity
            price = self.aggregator.price_at(item.item_id, issue.date)
            if price is not None:
                total_value += issue.quantity * price
        return total_issued, total_value

    def classify(self, window_days: int = DEFAULT_ABC_WINDOW_DAYS) -> list[ABCItem]:
        ensure_window(window_days)

        valued = []
        for item in self.snapshot.items:
            total_issued, total_value = self.item_value(item, window_days)
            valued.append((item, total_issued, total_value))
        valued.sort(key=lambda v: (-v[2], v[0].name, v[0].item_id))

        grand_total = 0.0
        for _, _, value in valued:
            grand_total += value

        results: list[ABCItem] = []
        running = 0.0
        for item, total_issued, total_value in valued:
            running += total_value
            if grand_total > 0:
                percentage = total_value / grand_total * 100
                cumulative = running / grand_total * 100
            else:
                percentage = 0.0
                cumulative = 0.0
            results.append(
                ABCItem(
                    item_id=item.item_id,
                    name=item.name,
                    sku=item.sku,
                    category_id=item.category_id,
                    quantity=item.quantity,
                    total_issued=total_issued,
                    total_value=total_value,
                    percentage_value=percentage,
                    cumulative_percentage=cumulative,
                    classification=classify_cumulative(cumulative, total_value),
                )
            )
        return results

    @staticmethod
    def summarize(items: list[ABCItem]) -> ABCSummary:
        def _class_summary(abc_class: ABCClass) -> ABCClassSummary:
            members = [i for i in items if i.classification == abc_class]
            return ABCClassSummary(
                count=len(members),
                value_percentage=sum(i.percentage_value for i in members),
                items=members,
            )

        return ABCSummary(
            class_a=_class_summary(ABCClass.A),
            class_b=_class_summary(ABCClass.B),
            class_c=_class_summary(ABCClass.C),
        )

    def process(
        self, window_days: int = DEFAULT_ABC_WINDOW_DAYS, **kwargs: Any
    ) -> tuple[list[ABCItem], ABCSummary]:
        """Ranked ABC items plus per-class summaries."""
        items = self.classify(window_days)
        summary = self.summarize(items)

        self.log_analysis(
            analysis_type="abc_classification",
            input_data={"item_count": len(self.snapshot.items), "window_days": window_days},
            output_data={
                "class_a": summary.class_a.count,
                "class_b": summary.class_b.count,
                "class_c": summary.class_c.count,
            },
            reasoning=(
                f"ABC split A={summary.class_a.count}, B={summary.class_b.count}, "
                f"C={summary.class_c.count} over {window_days} days."
            ),
        )
        return items, summary
