"""Inventory and replenishment data models."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional


class ItemKind(str, Enum):
    GENERAL = "general"
    PROTECTIVE_EQUIPMENT = "protective_equipment"


class StockStatus(str, Enum):
    CRITICAL = "critical"
    LOW = "low"
    OK = "ok"
    EXCESS = "excess"


class Trend(str, Enum):
    UP = "up"
    DOWN = "down"
    STABLE = "stable"


class ABCClass(str, Enum):
    A = "A"
    B = "B"
    C = "C"


# --- Snapshot records (supplied by the catalog, read-only here) ---


@dataclass(frozen=True)
class Item:
    item_id: str
    name: str
    quantity: int
    min_threshold: int
    max_threshold: Optional[int] = None
    sku: Optional[str] = None
    supplier_id: Optional[str] = None
    category_id: Optional[str] = None
    kind: ItemKind = ItemKind.GENERAL


@dataclass(frozen=True)
class Receipt:
    item_id: str
    date: datetime
    quantity: int
    unit_price: Optional[float] = None
    supplier_id: Optional[str] = None
    receipt_id: Optional[str] = None


@dataclass(frozen=True)
class Issue:
    item_id: str
    date: datetime
    quantity: int


@dataclass(frozen=True)
class InventorySnapshot:
    items: tuple[Item, ...] = ()
    receipts: tuple[Receipt, ...] = ()
    issues: tuple[Issue, ...] = ()
    # Inclusive bounds on measured movements; price history ignores them
    movements_from: Optional[datetime] = None
    movements_until: Optional[datetime] = None


@dataclass(frozen=True)
class ReportFilters:
    category_id: Optional[str] = None
    supplier_id: Optional[str] = None
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None


# --- Derived views ---


@dataclass
class WindowedAggregate:
    item_id: str
    window_days: int
    total_received: int
    total_issued: int
    priced_receipts: list[Receipt] = field(default_factory=list)


@dataclass
class StockIndicator:
    item_id: str
    item_name: str
    current_quantity: int
    min_threshold: int
    avg_daily_consumption: float
    days_until_stockout: Optional[float]
    suggested_quantity: int
    status: StockStatus
    total_received: int = 0
    turnover_rate: float = 0.0


@dataclass
class StockIndicatorSummary:
    ok: int
    warning: int
    critical: int
    excess: int
    products_running_low: list[StockIndicator]
    products_needing_reorder: list[StockIndicator]
    avg_turnover: float


@dataclass
class ABCItem:
    item_id: str
    name: str
    sku: Optional[str]
    category_id: Optional[str]
    quantity: int
    total_issued: int
    total_value: float
    percentage_value: float
    cumulative_percentage: float
    classification: ABCClass


@dataclass
class ABCClassSummary:
    count: int
    value_percentage: float
    items: list[ABCItem]


@dataclass
class ABCSummary:
    class_a: ABCClassSummary
    class_b: ABCClassSummary
    class_c: ABCClassSummary


@dataclass
class ConsumptionPeriod:
    period_start: datetime
    quantity: int


@dataclass
class ForecastItem:
    item_id: str
    name: str
    sku: Optional[str]
    current_quantity: int
    avg_daily_consumption: float
    avg_weekly_consumption: float
    avg_monthly_consumption: float
    days_until_stockout: Optional[float]
    forecasted_demand_7_days: int
    forecasted_demand_30_days: int
    forecasted_demand_90_days: int
    reorder_point: int
    suggested_order_quantity: int
    trend: Trend
    trend_percentage: float
    consumption_history: list[ConsumptionPeriod] = field(default_factory=list)


@dataclass
class ForecastSummary:
    total_at_risk: int
    avg_days_until_stockout: float
    total_forecasted_demand_30d: int


@dataclass
class PurchaseSuggestion:
    kind: ItemKind
    item: Item
    status: StockStatus
    suggested_quantity: int
    last_purchases: list[Receipt] = field(default_factory=list)
    best_price: Optional[float] = None
    best_price_supplier_id: Optional[str] = None


@dataclass
class AnalysisRecord:
    record_id: str
    analyzer_name: str
    analysis_type: str
    input_data: dict
    output_data: dict
    reasoning: str
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
