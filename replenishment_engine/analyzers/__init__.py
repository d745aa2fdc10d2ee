from replenishment_engine.analyzers.abc_classifier import ABCClassifier
from replenishment_engine.analyzers.base_analyzer import BaseAnalyzer
from replenishment_engine.analyzers.demand_forecaster import DemandForecaster
from replenishment_engine.analyzers.movement_aggregator import MovementAggregator
from replenishment_engine.analyzers.purchase_suggestions import PurchaseSuggestionGenerator
from replenishment_engine.analyzers.stock_health import StockHealthAnalyzer
from replenishment_engine.analyzers.validation import InvalidInputError

__all__ = [
    "ABCClassifier",
    "BaseAnalyzer",
    "DemandForecaster",
    "InvalidInputError",
    "MovementAggregator",
    "PurchaseSuggestionGenerator",
    "StockHealthAnalyzer",
]
