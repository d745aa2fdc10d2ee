"""
Replenishment Analytics MCP Server

Provides tools for stock indicators, ABC classification, demand forecasting and
purchase suggestions. Every call loads a fresh snapshot from DynamoDB.
"""

import json
import logging
from dataclasses import asdict, is_dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional

from mcp.server import Server
from mcp.types import TextContent, Tool

from replenishment_engine import reports
from replenishment_engine.analyzers.validation import InvalidInputError
from replenishment_engine.config import Settings, configure_logging
from replenishment_engine.data_layer.dynamodb_repository import (
    DynamoSnapshotRepository,
    RepositoryError,
)
from replenishment_engine.models.inventory import ReportFilters

logger = logging.getLogger(__name__)

app = Server("replenishment-analytics")

_REPOSITORY: Optional[DynamoSnapshotRepository] = None


def _repository() -> DynamoSnapshotRepository:
    global _REPOSITORY
    if _REPOSITORY is None:
        _REPOSITORY = DynamoSnapshotRepository(Settings.from_env())
    return _REPOSITORY


def _to_json(obj: Any) -> Any:
    if is_dataclass(obj) and not isinstance(obj, type):
        return _to_json(asdict(obj))
    if isinstance(obj, datetime):
        return obj.isoformat()
    if isinstance(obj, dict):
        return {k: _to_json(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_to_json(i) for i in obj]
    return obj


def _result(data):
    return [TextContent(type="text", text=json.dumps(_to_json(data), indent=2, ensure_ascii=False))]


def _filters(arguments: dict) -> Optional[ReportFilters]:
    keys = ("category_id", "supplier_id", "date_from", "date_to")
    if not any(arguments.get(k) for k in keys):
        return None
    return ReportFilters(**{k: arguments.get(k) for k in keys})


_FILTER_PROPERTIES = {
    "window_days": {"type": "integer", "minimum": 1},
    "category_id": {"type": "string", "description": "Optional: only items of this category"},
    "supplier_id": {"type": "string", "description": "Optional: only items linked to this supplier"},
    "date_from": {"type": "string", "description": "Optional ISO date, movements on or after"},
    "date_to": {"type": "string", "description": "Optional ISO date, movements on or before"},
    "as_of": {"type": "string", "description": "Optional ISO timestamp, defaults to now"},
}


@app.list_tools()
async def list_tools() -> List[Tool]:
    return [
        Tool(name="get_stock_indicators", description="Stock status, consumption and days until stockout per item",
             inputSchema={"type": "object", "properties": {
                 "window_days": {"type": "integer", "default": 30, "minimum": 1},
                 "as_of": {"type": "string", "description": "Optional ISO timestamp, defaults to now"},
             }}),
        Tool(name="get_abc_classification", description="Pareto (ABC) classification of items by value issued",
             inputSchema={"type": "object", "properties": _FILTER_PROPERTIES}),
        Tool(name="get_demand_forecast", description="Consumption trend, 30-day demand and stockout forecast per item",
             inputSchema={"type": "object", "properties": _FILTER_PROPERTIES}),
        Tool(name="get_purchase_suggestions", description="Ranked purchase suggestions for critical and low items",
             inputSchema={"type": "object", "properties": {}}),
        Tool(name="accept_purchase_suggestion", description="Record a receipt for an accepted purchase suggestion",
             inputSchema={"type": "object", "properties": {
                 "item_id": {"type": "string"},
                 "quantity": {"type": "integer", "minimum": 1, "description": "Optional, defaults to suggested quantity"},
                 "unit_price": {"type": "number", "minimum": 0, "description": "Optional, defaults to best price"},
                 "supplier_id": {"type": "string", "description": "Optional"},
             }, "required": ["item_id"]}),
    ]


@app.call_tool()
async def call_tool(name: str, arguments: dict) -> List[TextContent]:
    settings = Settings.from_env()
    handlers = {
        "get_stock_indicators": lambda a: get_stock_indicators(
            a.get("window_days", settings.indicator_window_days), a.get("as_of")),
        "get_abc_classification": lambda a: get_abc_classification(
            a.get("window_days", settings.abc_window_days), _filters(a), a.get("as_of")),
        "get_demand_forecast": lambda a: get_demand_forecast(
            a.get("window_days", settings.forecast_window_days), _filters(a), a.get("as_of")),
        "get_purchase_suggestions": lambda a: get_purchase_suggestions(),
        "accept_purchase_suggestion": lambda a: accept_purchase_suggestion(
            a["item_id"], a.get("quantity"), a.get("unit_price"), a.get("supplier_id")),
    }
    handler = handlers.get(name)
    if not handler:
        raise ValueError(f"Unknown tool: {name}")
    return _result(handler(arguments or {}))


# --- Implementation ---

def get_stock_indicators(window_days: int = 30, as_of: Optional[str] = None) -> Dict:
    try:
        snapshot = _repository().load_snapshot()
        items, summary = reports.stock_indicators(
            snapshot.items, snapshot.receipts, snapshot.issues, window_days, as_of=as_of)
        return {"success": True, "window_days": window_days, "count": len(items),
                "summary": summary, "data": items}
    except (InvalidInputError, RepositoryError) as e:
        return {"success": False, "error": str(e), "data": []}


def get_abc_classification(window_days: int = 90, filters: Optional[ReportFilters] = None,
                           as_of: Optional[str] = None) -> Dict:
    try:
        snapshot = _repository().load_snapshot()
        items, summary = reports.abc_classification(
            snapshot.items, snapshot.receipts, snapshot.issues, window_days, filters, as_of=as_of)
        return {"success": True, "window_days": window_days, "count": len(items),
                "summary": summary, "data": items}
    except (InvalidInputError, RepositoryError) as e:
        return {"success": False, "error": str(e), "data": []}


def get_demand_forecast(window_days: int = 90, filters: Optional[ReportFilters] = None,
                        as_of: Optional[str] = None) -> Dict:
    try:
        snapshot = _repository().load_snapshot()
        items, summary = reports.demand_forecast(
            snapshot.items, snapshot.receipts, snapshot.issues, window_days, filters, as_of=as_of)
        return {"success": True, "window_days": window_days, "count": len(items),
                "summary": summary, "data": items}
    except (InvalidInputError, RepositoryError) as e:
        return {"success": False, "error": str(e), "data": []}


def get_purchase_suggestions() -> Dict:
    try:
        snapshot = _repository().load_snapshot()
        suggestions = reports.purchase_suggestions(snapshot.items, snapshot.receipts)
        return {"success": True, "count": len(suggestions), "data": suggestions}
    except (InvalidInputError, RepositoryError) as e:
        return {"success": False, "error": str(e), "data": []}


def accept_purchase_suggestion(item_id: str, quantity: Optional[int] = None,
                               unit_price: Optional[float] = None,
                               supplier_id: Optional[str] = None) -> Dict:
    try:
        repository = _repository()
        snapshot = repository.load_snapshot()
        suggestions = reports.purchase_suggestions(snapshot.items, snapshot.receipts)
        suggestion = next((s for s in suggestions if s.item.item_id == item_id), None)
        if suggestion is None:
            return {"success": False, "error": f"No purchase suggestion for item {item_id}"}

        receipt = reports.accept_suggestion(
            suggestion, repository, quantity=quantity, unit_price=unit_price, supplier_id=supplier_id)
        return {"success": True, "receipt": receipt}
    except (InvalidInputError, RepositoryError) as e:
        return {"success": False, "error": str(e)}


if __name__ == "__main__":
    import asyncio
    from mcp.server.stdio import stdio_server

    configure_logging()

    async def run():
        async with stdio_server() as (read, write):
            await app.run(read, write, app.create_initialization_options())

    asyncio.run(run())
