"""Demand Forecaster - consumption velocity, trend and stockout estimates.

- Average daily consumption over a trailing window
- Trend from the earlier vs. later half of the window
- 7/30/90-day demand forecasts and reorder point
- Days until stockout at the current velocity
"""

from __future__ import annotations

import logging
import math
from datetime import timedelta
from typing import Any, Optional

from replenishment_engine.analyzers.base_analyzer import BaseAnalyzer
from replenishment_engine.analyzers.validation import ensure_window
from replenishment_engine.models.inventory import (
    ConsumptionPeriod,
    ForecastItem,
    ForecastSummary,
    Item,
    Trend,
)

logger = logging.getLogger(__name__)

DEFAULT_FORECAST_WINDOW_DAYS = 90
TREND_TOLERANCE = 0.05
AT_RISK_DAYS = 14
LEAD_TIME_DAYS = 7
HISTORY_WEEKS = 12
# Order-up-to level for items without a maximum threshold
DEFAULT_TARGET_QUANTITY = 100


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def suggested_order_quantity(item: Item) -> int:
    """Units needed to bring the item back up to its maximum threshold."""
    target = item.max_threshold if item.max_threshold is not None else DEFAULT_TARGET_QUANTITY
    return max(target - item.quantity, 0)


def detect_trend(earlier_avg: float, later_avg: float) -> tuple[Trend, float]:
    """Trend direction and percentage change between the two window halves."""
    if later_avg > earlier_avg * (1 + TREND_TOLERANCE):
        trend = Trend.UP
    elif later_avg < earlier_avg * (1 - TREND_TOLERANCE):
        trend = Trend.DOWN
    else:
        trend = Trend.STABLE

    percentage = (later_avg - earlier_avg) / earlier_avg * 100 if earlier_avg > 0 else 0.0
    return trend, percentage


class DemandForecaster(BaseAnalyzer):
    """Forecasts per-item demand from issue history."""

    analyzer_name = "DemandForecaster"

    def consumption_history(self, item_id: str) -> list[ConsumptionPeriod]:
        """Weekly issued quantities for the last 12 weeks, oldest first."""
        history = []
        for week in range(HISTORY_WEEKS - 1, -1, -1):
            start = self.as_of - timedelta(days=7 * (week + 1))
            end = self.as_of - timedelta(days=7 * week)
            quantity = self.aggregator.issued_between(item_id, start, end, include_end=week == 0)
            history.append(ConsumptionPeriod(period_start=start, quantity=quantity))
        return history

    def forecast_item(self, item: Item, window_days: int) -> ForecastItem:
        aggregate = self.aggregator.aggregate(item.item_id, window_days, self.as_of)
        avg_daily = aggregate.total_issued / window_days

        window_start = self.as_of - timedelta(days=window_days)
        midpoint = self.as_of - timedelta(days=window_days / 2)
        half_days = window_days / 2
        earlier = self.aggregator.issued_between(item.item_id, window_start, midpoint)
        later = self.aggregator.issued_between(item.item_id, midpoint, self.as_of, include_end=True)
        trend, trend_percentage = detect_trend(earlier / half_days, later / half_days)

        days_until_stockout: Optional[float] = (
            item.quantity / avg_daily if avg_daily > 0 else None
        )

        return ForecastItem(
            item_id=item.item_id,
            name=item.name,
            sku=item.sku,
            current_quantity=item.quantity,
            avg_daily_consumption=avg_daily,
            avg_weekly_consumption=avg_daily * 7,
            avg_monthly_consumption=avg_daily * 30,
            days_until_stockout=days_until_stockout,
            forecasted_demand_7_days=round_half_up(avg_daily * 7),
            forecasted_demand_30_days=round_half_up(avg_daily * 30),
            forecasted_demand_90_days=round_half_up(avg_daily * 90),
            reorder_point=math.ceil(avg_daily * LEAD_TIME_DAYS) + item.min_threshold,
            suggested_order_quantity=suggested_order_quantity(item),
            trend=trend,
            trend_percentage=trend_percentage,
            consumption_history=self.consumption_history(item.item_id),
        )

    def forecast(self, window_days: int = DEFAULT_FORECAST_WINDOW_DAYS) -> list[ForecastItem]:
        """Forecasts ordered by days until stockout; non-depleting items last."""
        ensure_window(window_days)
        items = [self.forecast_item(item, window_days) for item in self.snapshot.items]
        items.sort(
            key=lambda f: (
                f.days_until_stockout is None,
                f.days_until_stockout if f.days_until_stockout is not None else 0.0,
                f.name,
                f.item_id,
            )
        )
        return items

    @staticmethod
    def summarize(items: list[ForecastItem]) -> ForecastSummary:
        finite = [f.days_until_stockout for f in items if f.days_until_stockout is not None]
        return ForecastSummary(
            total_at_risk=sum(1 for days in finite if days <= AT_RISK_DAYS),
            avg_days_until_stockout=sum(finite) / len(finite) if finite else 0.0,
            total_forecasted_demand_30d=sum(f.forecasted_demand_30_days for f in items),
        )

    def process(
        self, window_days: int = DEFAULT_FORECAST_WINDOW_DAYS, **kwargs: Any
    ) -> tuple[list[ForecastItem], ForecastSummary]:
        items = self.forecast(window_days)
        summary = self.summarize(items)

        self.log_analysis(
            analysis_type="demand_forecast",
            input_data={"item_count": len(self.snapshot.items), "window_days": window_days},
            output_data={
                "total_at_risk": summary.total_at_risk,
                "total_forecasted_demand_30d": summary.total_forecasted_demand_30d,
            },
            reasoning=f"{summary.total_at_risk} items at risk of stockout within {AT_RISK_DAYS} days.",
        )
        return items, summary
