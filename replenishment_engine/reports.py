"""Query entry points of the replenishment engine.

Each call copies the given collections into a fresh snapshot, so results
always reflect the records passed in and nothing is cached between calls.
"""

from __future__ import annotations

from typing import Any, Iterable, Optional

from replenishment_engine.analyzers.abc_classifier import (
    DEFAULT_ABC_WINDOW_DAYS,
    ABCClassifier,
)
from replenishment_engine.analyzers.demand_forecaster import (
    DEFAULT_FORECAST_WINDOW_DAYS,
    DemandForecaster,
)
from replenishment_engine.analyzers.purchase_suggestions import (
    PurchaseSuggestionGenerator,
    accept_suggestion,
)
from replenishment_engine.analyzers.report_filters import apply_filters
from replenishment_engine.analyzers.stock_health import (
    DEFAULT_INDICATOR_WINDOW_DAYS,
    StockHealthAnalyzer,
)
from replenishment_engine.analyzers.validation import build_snapshot, ensure_window
from replenishment_engine.models.inventory import (
    ABCItem,
    ABCSummary,
    ForecastItem,
    ForecastSummary,
    Issue,
    Item,
    PurchaseSuggestion,
    Receipt,
    ReportFilters,
    StockIndicator,
    StockIndicatorSummary,
)

__all__ = [
    "abc_classification",
    "accept_suggestion",
    "demand_forecast",
    "purchase_suggestions",
    "stock_indicators",
]


def stock_indicators(
    catalog: Iterable[Item],
    receipts: Iterable[Receipt],
    issues: Iterable[Issue],
    window_days: int = DEFAULT_INDICATOR_WINDOW_DAYS,
    as_of: Optional[Any] = None,
) -> tuple[list[StockIndicator], StockIndicatorSummary]:
    ensure_window(window_days)
    snapshot = build_snapshot(catalog, receipts, issues)
    return StockHealthAnalyzer(snapshot, as_of=as_of).process(window_days)


def abc_classification(
    catalog: Iterable[Item],
    receipts: Iterable[Receipt],
    issues: Iterable[Issue],
    window_days: int = DEFAULT_ABC_WINDOW_DAYS,
    filters: Optional[ReportFilters] = None,
    as_of: Optional[Any] = None,
) -> tuple[list[ABCItem], ABCSummary]:
    ensure_window(window_days)
    snapshot = apply_filters(build_snapshot(catalog, receipts, issues), filters)
    return ABCClassifier(snapshot, as_of=as_of).process(window_days)


def demand_forecast(
    catalog: Iterable[Item],
    receipts: Iterable[Receipt],
    issues: Iterable[Issue],
    window_days: int = DEFAULT_FORECAST_WINDOW_DAYS,
    filters: Optional[ReportFilters] = None,
    as_of: Optional[Any] = None,
) -> tuple[list[ForecastItem], ForecastSummary]:
    ensure_window(window_days)
    snapshot = apply_filters(build_snapshot(catalog, receipts, issues), filters)
    return DemandForecaster(snapshot, as_of=as_of).process(window_days)


def purchase_suggestions(
    catalog: Iterable[Item],
    receipts: Iterable[Receipt],
) -> list[PurchaseSuggestion]:
    snapshot = build_snapshot(catalog, receipts)
    return PurchaseSuggestionGenerator(snapshot).process()
