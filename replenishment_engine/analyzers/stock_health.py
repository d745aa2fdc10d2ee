"""Stock Health Analyzer - stock status classification and stock indicators.

- Labels each item critical / low / ok / excess from its thresholds
- Derives the reorder quantity needed to reach the minimum
- Builds per-item consumption indicators over a trailing window
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from replenishment_engine.analyzers.base_analyzer import BaseAnalyzer
from replenishment_engine.analyzers.validation import InvalidInputError, ensure_window
from replenishment_engine.models.inventory import (
    Item,
    StockIndicator,
    StockIndicatorSummary,
    StockStatus,
)

logger = logging.getLogger(__name__)

# Fraction of the minimum at or below which stock is critical
CRITICAL_RATIO = 0.5
RUNNING_LOW_DAYS = 7
DEFAULT_INDICATOR_WINDOW_DAYS = 30


def classify_stock(
    quantity: int, min_threshold: int, max_threshold: Optional[int] = None
) -> StockStatus:
    """Classifies a stock level against its thresholds.

    The ``min_threshold * 0.5`` boundary belongs to ``critical``.
    """
    if quantity < 0:
        raise InvalidInputError(f"Quantity cannot be negative: {quantity}")
    if min_threshold < 0:
        raise InvalidInputError(f"Minimum threshold cannot be negative: {min_threshold}")

    if quantity <= min_threshold * CRITICAL_RATIO:
        return StockStatus.CRITICAL
    if quantity <= min_threshold:
        return StockStatus.LOW
    if max_threshold is not None and quantity > max_threshold:
        return StockStatus.EXCESS
    return StockStatus.OK


def suggested_reorder_quantity(quantity: int, min_threshold: int) -> int:
    """Units needed to bring stock back up to the minimum."""
    return max(min_threshold - quantity, 0)


class StockHealthAnalyzer(BaseAnalyzer):
    """Computes stock indicators for every catalog item."""

    analyzer_name = "StockHealthAnalyzer"

    def build_indicator(self, item: Item, window_days: int) -> StockIndicator:
        aggregate = self.aggregator.aggregate(item.item_id, window_days, self.as_of)
        avg_daily = aggregate.total_issued / window_days
        days_until_stockout = item.quantity / avg_daily if avg_daily > 0 else None
        turnover = aggregate.total_issued / max(item.quantity, 1)

        return StockIndicator(
            item_id=item.item_id,
            item_name=item.name,
            current_quantity=item.quantity,
            min_threshold=item.min_threshold,
            avg_daily_consumption=avg_daily,
            days_until_stockout=days_until_stockout,
            suggested_quantity=suggested_reorder_quantity(item.quantity, item.min_threshold),
            status=classify_stock(item.quantity, item.min_threshold, item.max_threshold),
            total_received=aggregate.total_received,
            turnover_rate=turnover,
        )

    def calculate_indicators(
        self, window_days: int = DEFAULT_INDICATOR_WINDOW_DAYS
    ) -> list[StockIndicator]:
        ensure_window(window_days)
        return [self.build_indicator(item, window_days) for item in self.snapshot.items]

    def summarize(self, indicators: list[StockIndicator]) -> StockIndicatorSummary:
        counts = {status: 0 for status in StockStatus}
        for indicator in indicators:
            counts[indicator.status] += 1

        running_low = [
            i
            for i in indicators
            if i.days_until_stockout is not None and i.days_until_stockout <= RUNNING_LOW_DAYS
        ]
        running_low.sort(key=lambda i: (i.days_until_stockout, i.item_name, i.item_id))

        avg_turnover = (
            sum(i.turnover_rate for i in indicators) / len(indicators) if indicators else 0.0
        )

        return StockIndicatorSummary(
            ok=counts[StockStatus.OK],
            warning=counts[StockStatus.LOW],
            critical=counts[StockStatus.CRITICAL],
            excess=counts[StockStatus.EXCESS],
            products_running_low=running_low,
            products_needing_reorder=[i for i in indicators if i.suggested_quantity > 0],
            avg_turnover=avg_turnover,
        )

    def process(
        self, window_days: int = DEFAULT_INDICATOR_WINDOW_DAYS, **kwargs: Any
    ) -> tuple[list[StockIndicator], StockIndicatorSummary]:
        """Indicators for every item plus the status summary."""
        indicators = self.calculate_indicators(window_days)
        summary = self.summarize(indicators)

        self.log_analysis(
            analysis_type="stock_indicators",
            input_data={"item_count": len(self.snapshot.items), "window_days": window_days},
            output_data={
                "critical": summary.critical,
                "warning": summary.warning,
                "running_low": [i.item_id for i in summary.products_running_low],
            },
            reasoning=(
                f"{summary.critical} critical and {summary.warning} low items "
                f"in a {window_days}-day window."
            ),
        )
        return indicators, summary
