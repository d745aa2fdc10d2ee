"""Purchase Suggestion Generator - ranked purchase proposals for under-stocked items.

- Covers general stock items and protective equipment alike
- Attaches recent priced receipts and the best price among them
- Orders critical before low, most depleted first
- Turns an accepted suggestion into a new receipt
"""

from __future__ import annotations

import logging
import uuid
from typing import Any, Optional, Protocol

from replenishment_engine.analyzers.base_analyzer import BaseAnalyzer
from replenishment_engine.analyzers.stock_health import (
    classify_stock,
    suggested_reorder_quantity,
)
from replenishment_engine.analyzers.validation import (
    InvalidInputError,
    InputValidator,
    parse_moment,
    utc_now,
)
from replenishment_engine.models.inventory import (
    ItemKind,
    PurchaseSuggestion,
    Receipt,
    StockStatus,
)

logger = logging.getLogger(__name__)

PURCHASE_HISTORY_LIMIT = 5
_STATUS_ORDER = {StockStatus.CRITICAL: 0, StockStatus.LOW: 1}


class ReceiptRecorder(Protocol):
    def record_receipt(self, receipt: Receipt) -> Receipt: ...


def best_priced_receipt(history: list[Receipt]) -> Optional[Receipt]:
    """Cheapest priced receipt; the most recent one wins a tie."""
    best = None
    for receipt in history:
        if receipt.unit_price is None:
            continue
        if best is None or receipt.unit_price < best.unit_price:
            best = receipt
    return best


class PurchaseSuggestionGenerator(BaseAnalyzer):
    """Builds purchase suggestions for critical and low items."""

    analyzer_name = "PurchaseSuggestionGenerator"

    def generate(self) -> list[PurchaseSuggestion]:
        suggestions: list[PurchaseSuggestion] = []

        for item in self.snapshot.items:
            status = classify_stock(item.quantity, item.min_threshold, item.max_threshold)
            if status not in _STATUS_ORDER:
                continue
            quantity = suggested_reorder_quantity(item.quantity, item.min_threshold)
            if quantity <= 0:
                continue

            history = self.aggregator.recent_priced_receipts(item.item_id, PURCHASE_HISTORY_LIMIT)
            best = best_priced_receipt(history)
            suggestions.append(
                PurchaseSuggestion(
                    kind=item.kind,
                    item=item,
                    status=status,
                    suggested_quantity=quantity,
                    last_purchases=history,
                    best_price=best.unit_price if best else None,
                    best_price_supplier_id=best.supplier_id if best else None,
                )
            )

        suggestions.sort(key=lambda s: (_STATUS_ORDER[s.status], s.item.quantity))
        return suggestions

    def process(self, **kwargs: Any) -> list[PurchaseSuggestion]:
        suggestions = self.generate()
        critical = sum(1 for s in suggestions if s.status == StockStatus.CRITICAL)
        ppe = sum(1 for s in suggestions if s.kind == ItemKind.PROTECTIVE_EQUIPMENT)

        self.log_analysis(
            analysis_type="purchase_suggestions",
            input_data={"item_count": len(self.snapshot.items)},
            output_data={
                "suggestion_count": len(suggestions),
                "critical": critical,
                "item_ids": [s.item.item_id for s in suggestions],
            },
            reasoning=(
                f"{len(suggestions)} purchase suggestions ({critical} critical, "
                f"{ppe} protective equipment)."
            ),
        )
        return suggestions


def accept_suggestion(
    suggestion: PurchaseSuggestion,
    recorder: ReceiptRecorder,
    quantity: Optional[int] = None,
    unit_price: Optional[float] = None,
    supplier_id: Optional[str] = None,
    received_at: Optional[Any] = None,
) -> Receipt:
    """Records the receipt for an accepted suggestion.

    Defaults: the suggested quantity, the best known price and its supplier,
    falling back to the item's linked supplier.
    """
    receipt = Receipt(
        item_id=suggestion.item.item_id,
        date=parse_moment(received_at, "received_at") if received_at is not None else utc_now(),
        quantity=quantity if quantity is not None else suggestion.suggested_quantity,
        unit_price=unit_price if unit_price is not None else suggestion.best_price,
        supplier_id=(
            supplier_id
            or suggestion.best_price_supplier_id
            or suggestion.item.supplier_id
        ),
        receipt_id=str(uuid.uuid4()),
    )
    result = InputValidator().check_receipts([receipt])
    if not result.is_valid:
        raise InvalidInputError("; ".join(result.errors))

    recorded = recorder.record_receipt(receipt)
    logger.info(
        "Purchase accepted: item=%s quantity=%d unit_price=%s supplier=%s",
        receipt.item_id,
        receipt.quantity,
        receipt.unit_price,
        receipt.supplier_id,
    )
    return recorded
