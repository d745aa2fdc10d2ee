"""Inventory replenishment and classification engine."""

from replenishment_engine.reports import (
    abc_classification,
    accept_suggestion,
    demand_forecast,
    purchase_suggestions,
    stock_indicators,
)

__all__ = [
    "abc_classification",
    "accept_suggestion",
    "demand_forecast",
    "purchase_suggestions",
    "stock_indicators",
]
