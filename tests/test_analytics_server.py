"""Replenishment analytics MCP server unit tests."""

import asyncio
import json
from datetime import datetime, timedelta
from unittest.mock import MagicMock

import pytest

from replenishment_engine.analyzers.validation import build_snapshot
from replenishment_engine.data_layer.dynamodb_repository import RepositoryError
from replenishment_engine.mcp_servers import analytics_server
from replenishment_engine.models.inventory import Issue, Item, Receipt

AS_OF = datetime(2025, 6, 30)


def _make_repository() -> MagicMock:
    snapshot = build_snapshot(
        [
            Item("P1", "Gloves", quantity=2, min_threshold=10, supplier_id="S1"),
            Item("P2", "Paper", quantity=40, min_threshold=10),
        ],
        [Receipt("P1", AS_OF - timedelta(days=10), 20, unit_price=3.0, supplier_id="S1")],
        [Issue("P1", AS_OF - timedelta(days=2), 5), Issue("P2", AS_OF - timedelta(days=2), 1)],
    )
    repository = MagicMock()
    repository.load_snapshot.return_value = snapshot
    repository.record_receipt.side_effect = lambda receipt: receipt
    return repository


@pytest.fixture
def repository(monkeypatch):
    repo = _make_repository()
    monkeypatch.setattr(analytics_server, "_repository", lambda: repo)
    return repo


class TestTools:
    def test_stock_indicators(self, repository):
        result = analytics_server.get_stock_indicators(30, as_of=AS_OF.isoformat())
        assert result["success"] is True
        assert result["summary"].critical == 1

    def test_abc_classification(self, repository):
        result = analytics_server.get_abc_classification(90, as_of=AS_OF.isoformat())
        assert result["success"] is True
        assert result["data"][0].item_id == "P1"

    def test_purchase_suggestions(self, repository):
        result = analytics_server.get_purchase_suggestions()
        assert result["count"] == 1
        assert result["data"][0].best_price == 3.0

    def test_accept_purchase_suggestion(self, repository):
        result = analytics_server.accept_purchase_suggestion("P1")
        assert result["success"] is True
        assert result["receipt"].quantity == 8
        repository.record_receipt.assert_called_once()

    def test_accept_without_suggestion(self, repository):
        result = analytics_server.accept_purchase_suggestion("P2")
        assert result["success"] is False

    def test_repository_failure_reported(self, monkeypatch):
        broken = MagicMock()
        broken.load_snapshot.side_effect = RepositoryError("table missing")
        monkeypatch.setattr(analytics_server, "_repository", lambda: broken)
        result = analytics_server.get_demand_forecast()
        assert result == {"success": False, "error": "table missing", "data": []}

    def test_invalid_window_reported(self, repository):
        result = analytics_server.get_demand_forecast(window_days=0)
        assert result["success"] is False


class TestCallTool:
    def test_call_tool_returns_json(self, repository):
        contents = asyncio.run(analytics_server.call_tool(
            "get_demand_forecast", {"window_days": 90, "category_id": None, "as_of": AS_OF.isoformat()}
        ))
        payload = json.loads(contents[0].text)
        assert payload["success"] is True
        assert payload["data"][0]["item_id"] == "P1"
        assert payload["data"][0]["trend"] in ("up", "down", "stable")

    def test_unknown_tool(self, repository):
        with pytest.raises(ValueError):
            asyncio.run(analytics_server.call_tool("drop_tables", {}))

    def test_call_tool_applies_filters(self, monkeypatch):
        snapshot = build_snapshot(
            [
                Item("P1", "Gloves", quantity=20, min_threshold=10, category_id="safety"),
                Item("P2", "Paper", quantity=20, min_threshold=10, category_id="office"),
            ],
            [],
            [
                Issue("P1", AS_OF - timedelta(days=60), 50),
                Issue("P1", AS_OF - timedelta(days=5), 9),
                Issue("P2", AS_OF - timedelta(days=5), 30),
            ],
        )
        repo = MagicMock()
        repo.load_snapshot.return_value = snapshot
        monkeypatch.setattr(analytics_server, "_repository", lambda: repo)

        contents = asyncio.run(analytics_server.call_tool("get_demand_forecast", {
            "window_days": 90,
            "category_id": "safety",
            "date_from": (AS_OF - timedelta(days=30)).isoformat(),
            "as_of": AS_OF.isoformat(),
        }))
        payload = json.loads(contents[0].text)
        assert payload["count"] == 1
        assert payload["data"][0]["item_id"] == "P1"
        assert payload["data"][0]["avg_daily_consumption"] == pytest.approx(9 / 90)
