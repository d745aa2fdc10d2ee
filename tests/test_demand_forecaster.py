"""Demand Forecaster unit tests."""

from datetime import datetime, timedelta

import pytest

from replenishment_engine.analyzers.demand_forecaster import detect_trend, round_half_up
from replenishment_engine.models.inventory import Issue, Item, Trend
from replenishment_engine.reports import demand_forecast

AS_OF = datetime(2025, 6, 30, 18, 0)


def _make_item(item_id="P1", quantity=50, name=None) -> Item:
    return Item(item_id=item_id, name=name or f"Item {item_id}", quantity=quantity, min_threshold=10)


def _daily_issues(item_id: str, per_day, days: int = 90) -> list[Issue]:
    """One issue per day, mid-day, ``per_day(day_index)`` units; index 0 is the most recent."""
    return [
        Issue(item_id, AS_OF - timedelta(days=d, hours=12), per_day(d))
        for d in range(days)
        if per_day(d) > 0
    ]


class TestForecastItem:
    def test_steady_consumption_scenario(self):
        issues = _daily_issues("P1", lambda d: 10)
        items, _ = demand_forecast([_make_item(quantity=50)], [], issues, as_of=AS_OF)
        forecast = items[0]
        assert forecast.avg_daily_consumption == pytest.approx(10.0)
        assert forecast.days_until_stockout == pytest.approx(5.0)
        assert forecast.trend == Trend.STABLE
        assert forecast.trend_percentage == pytest.approx(0.0)
        assert forecast.forecasted_demand_30_days == 300

    def test_rising_consumption(self):
        issues = _daily_issues("P1", lambda d: 4 if d < 45 else 2)
        items, _ = demand_forecast([_make_item()], [], issues, as_of=AS_OF)
        assert items[0].trend == Trend.UP
        assert items[0].trend_percentage == pytest.approx(100.0)

    def test_falling_consumption(self):
        issues = _daily_issues("P1", lambda d: 1 if d < 45 else 4)
        items, _ = demand_forecast([_make_item()], [], issues, as_of=AS_OF)
        assert items[0].trend == Trend.DOWN
        assert items[0].trend_percentage == pytest.approx(-75.0)

    def test_zero_consumption(self):
        items, _ = demand_forecast([_make_item()], [], [], as_of=AS_OF)
        forecast = items[0]
        assert forecast.avg_daily_consumption == 0.0
        assert forecast.days_until_stockout is None
        assert forecast.forecasted_demand_30_days == 0
        assert forecast.trend == Trend.STABLE

    def test_consumption_only_in_later_half(self):
        issues = _daily_issues("P1", lambda d: 3 if d < 45 else 0)
        items, _ = demand_forecast([_make_item()], [], issues, as_of=AS_OF)
        assert items[0].trend == Trend.UP
        assert items[0].trend_percentage == 0.0

    def test_fractional_forecast_rounds_half_up(self):
        # 45 units over 90 days is 0.5/day
        issues = [Issue("P1", AS_OF - timedelta(days=3), 45)]
        items, _ = demand_forecast([_make_item()], [], issues, as_of=AS_OF)
        assert items[0].forecasted_demand_30_days == 15
        assert round_half_up(2.5) == 3
        assert round_half_up(2.4) == 2

    def test_days_until_stockout_stays_fractional(self):
        issues = [Issue("P1", AS_OF - timedelta(days=1), 90 * 3)]
        items, _ = demand_forecast([_make_item(quantity=10)], [], issues, as_of=AS_OF)
        assert items[0].days_until_stockout == pytest.approx(10 / 3)

    def test_weekly_history(self):
        issues = [Issue("P1", AS_OF - timedelta(days=1), 5), Issue("P1", AS_OF - timedelta(days=8), 7)]
        items, _ = demand_forecast([_make_item()], [], issues, as_of=AS_OF)
        history = items[0].consumption_history
        assert len(history) == 12
        assert history[-1].quantity == 5
        assert history[-2].quantity == 7

    def test_suggested_order_quantity_tops_up_to_maximum(self):
        catalog = [
            Item("P1", "Gloves", quantity=30, min_threshold=10, max_threshold=80),
            Item("P2", "Paper", quantity=30, min_threshold=10),
            Item("P3", "Boots", quantity=120, min_threshold=10, max_threshold=80),
        ]
        items, _ = demand_forecast(catalog, [], [], as_of=AS_OF)
        by_id = {f.item_id: f.suggested_order_quantity for f in items}
        assert by_id == {"P1": 50, "P2": 70, "P3": 0}


class TestTrendDetection:
    def test_within_tolerance_is_stable(self):
        assert detect_trend(10.0, 10.4)[0] == Trend.STABLE
        assert detect_trend(10.0, 9.6)[0] == Trend.STABLE

    def test_beyond_tolerance(self):
        assert detect_trend(10.0, 10.6)[0] == Trend.UP
        assert detect_trend(10.0, 9.4)[0] == Trend.DOWN

    def test_both_halves_empty(self):
        assert detect_trend(0.0, 0.0) == (Trend.STABLE, 0.0)


class TestForecastSummary:
    def test_summary_values(self):
        catalog = [
            _make_item("P1", quantity=20),
            _make_item("P2", quantity=300),
            _make_item("P3", quantity=5),
        ]
        issues = _daily_issues("P1", lambda d: 2) + _daily_issues("P2", lambda d: 2)
        items, summary = demand_forecast(catalog, [], issues, as_of=AS_OF)

        assert [i.item_id for i in items] == ["P1", "P2", "P3"]
        assert summary.total_at_risk == 1
        assert summary.avg_days_until_stockout == pytest.approx((10.0 + 150.0) / 2)
        assert summary.total_forecasted_demand_30d == 120

    def test_all_null_average_is_zero(self):
        _, summary = demand_forecast([_make_item("P1"), _make_item("P2")], [], [], as_of=AS_OF)
        assert summary.avg_days_until_stockout == 0.0
        assert summary.total_at_risk == 0

    def test_null_iff_zero_consumption(self):
        catalog = [_make_item("P1"), _make_item("P2", quantity=0)]
        issues = _daily_issues("P2", lambda d: 1 if d % 10 == 0 else 0)
        items, _ = demand_forecast(catalog, [], issues, as_of=AS_OF)
        for forecast in items:
            if forecast.avg_daily_consumption == 0:
                assert forecast.days_until_stockout is None
            else:
                assert forecast.days_until_stockout == pytest.approx(
                    forecast.current_quantity / forecast.avg_daily_consumption
                )

    def test_idempotent(self):
        issues = _daily_issues("P1", lambda d: d % 3)
        first = demand_forecast([_make_item()], [], issues, as_of=AS_OF)
        second = demand_forecast([_make_item()], [], issues, as_of=AS_OF)
        assert first == second
