from replenishment_engine.models.inventory import (
    ABCClass,
    ABCItem,
    AnalysisRecord,
    ForecastItem,
    InventorySnapshot,
    Issue,
    Item,
    ItemKind,
    PurchaseSuggestion,
    Receipt,
    ReportFilters,
    StockIndicator,
    StockStatus,
    Trend,
    WindowedAggregate,
)

__all__ = [
    "ABCClass",
    "ABCItem",
    "AnalysisRecord",
    "ForecastItem",
    "InventorySnapshot",
    "Issue",
    "Item",
    "ItemKind",
    "PurchaseSuggestion",
    "Receipt",
    "ReportFilters",
    "StockIndicator",
    "StockStatus",
    "Trend",
    "WindowedAggregate",
]
