"""Movement Aggregator unit tests."""

from datetime import datetime, timedelta

import pytest

from replenishment_engine.analyzers.movement_aggregator import MovementAggregator
from replenishment_engine.analyzers.validation import InvalidInputError, build_snapshot
from replenishment_engine.models.inventory import Issue, Item, Receipt

AS_OF = datetime(2025, 6, 30, 12, 0)


def _make_aggregator(receipts=(), issues=()) -> MovementAggregator:
    snapshot = build_snapshot(
        [Item(item_id="P1", name="Gloves", quantity=10, min_threshold=5)], receipts, issues
    )
    return MovementAggregator(snapshot)


class TestWindowedAggregate:
    def test_totals_inside_window(self):
        aggregator = _make_aggregator(
            receipts=[
                Receipt("P1", AS_OF - timedelta(days=3), 20, unit_price=2.5),
                Receipt("P1", AS_OF - timedelta(days=40), 50, unit_price=2.0),
            ],
            issues=[
                Issue("P1", AS_OF - timedelta(days=1), 4),
                Issue("P1", AS_OF - timedelta(days=10), 6),
                Issue("P1", AS_OF - timedelta(days=31), 100),
            ],
        )
        aggregate = aggregator.aggregate("P1", 30, AS_OF)
        assert aggregate.total_issued == 10
        assert aggregate.total_received == 20
        assert [r.unit_price for r in aggregate.priced_receipts] == [2.5]

    def test_window_bounds_are_inclusive(self):
        aggregator = _make_aggregator(
            issues=[
                Issue("P1", AS_OF - timedelta(days=30), 1),
                Issue("P1", AS_OF, 2),
                Issue("P1", AS_OF + timedelta(seconds=1), 50),
            ]
        )
        assert aggregator.aggregate("P1", 30, AS_OF).total_issued == 3

    def test_unpriced_receipts_count_but_are_not_priced(self):
        aggregator = _make_aggregator(
            receipts=[
                Receipt("P1", AS_OF - timedelta(days=2), 5),
                Receipt("P1", AS_OF - timedelta(days=1), 7, unit_price=1.0),
            ]
        )
        aggregate = aggregator.aggregate("P1", 30, AS_OF)
        assert aggregate.total_received == 12
        assert len(aggregate.priced_receipts) == 1

    def test_priced_receipts_newest_first(self):
        aggregator = _make_aggregator(
            receipts=[
                Receipt("P1", AS_OF - timedelta(days=5), 1, unit_price=1.0),
                Receipt("P1", AS_OF - timedelta(days=1), 1, unit_price=3.0),
                Receipt("P1", AS_OF - timedelta(days=3), 1, unit_price=2.0),
            ]
        )
        prices = [r.unit_price for r in aggregator.aggregate("P1", 30, AS_OF).priced_receipts]
        assert prices == [3.0, 2.0, 1.0]

    def test_no_movements_yields_zeros(self):
        aggregate = _make_aggregator().aggregate("P1", 30, AS_OF)
        assert aggregate.total_issued == 0
        assert aggregate.total_received == 0
        assert aggregate.priced_receipts == []

    def test_unknown_item_yields_zeros(self):
        aggregate = _make_aggregator().aggregate("UNKNOWN", 30, AS_OF)
        assert aggregate.total_issued == 0

    def test_non_positive_window_rejected(self):
        with pytest.raises(InvalidInputError):
            _make_aggregator().aggregate("P1", 0, AS_OF)


class TestPriceHistory:
    def test_price_at_uses_latest_receipt_before_moment(self):
        aggregator = _make_aggregator(
            receipts=[
                Receipt("P1", AS_OF - timedelta(days=20), 1, unit_price=1.0),
                Receipt("P1", AS_OF - timedelta(days=10), 1),
                Receipt("P1", AS_OF - timedelta(days=5), 1, unit_price=4.0),
            ]
        )
        assert aggregator.price_at("P1", AS_OF - timedelta(days=30)) is None
        assert aggregator.price_at("P1", AS_OF - timedelta(days=10)) == 1.0
        assert aggregator.price_at("P1", AS_OF - timedelta(days=5)) == 4.0

    def test_recent_priced_receipts_limit(self):
        receipts = [
            Receipt("P1", AS_OF - timedelta(days=d), 1, unit_price=float(d)) for d in range(1, 9)
        ]
        recent = _make_aggregator(receipts=receipts).recent_priced_receipts("P1", limit=5)
        assert [r.unit_price for r in recent] == [1.0, 2.0, 3.0, 4.0, 5.0]

    def test_issued_between_half_open(self):
        aggregator = _make_aggregator(
            issues=[Issue("P1", AS_OF - timedelta(days=2), 3), Issue("P1", AS_OF, 4)]
        )
        start = AS_OF - timedelta(days=2)
        assert aggregator.issued_between("P1", start, AS_OF) == 3
        assert aggregator.issued_between("P1", start, AS_OF, include_end=True) == 7
