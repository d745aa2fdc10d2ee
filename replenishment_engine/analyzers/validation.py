"""Input validation for inventory snapshots.

Rejects malformed catalog and movement records before any analysis runs:
- Negative quantities and thresholds
- Non-positive movement quantities and negative unit prices
- Non-positive window lengths
- Malformed dates and unknown item kinds
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field, replace
from datetime import date, datetime, timezone
from typing import Any, Iterable, Optional

from replenishment_engine.models.inventory import (
    InventorySnapshot,
    Issue,
    Item,
    ItemKind,
    Receipt,
)

logger = logging.getLogger(__name__)


class InvalidInputError(ValueError):
    """Snapshot or query parameters rejected at the engine boundary."""
    pass


@dataclass
class ValidationResult:
    is_valid: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


def utc_now() -> datetime:
    """Current UTC time as a naive datetime, the engine's reference clock."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def parse_moment(value: Any, field_name: str = "date") -> datetime:
    """Normalizes a datetime, date or ISO 8601 string to a naive UTC datetime."""
    if isinstance(value, datetime):
        moment = value
    elif isinstance(value, date):
        moment = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        try:
            moment = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError as e:
            raise InvalidInputError(f"Invalid {field_name}: {value!r}") from e
    else:
        raise InvalidInputError(f"Invalid {field_name}: {value!r}")

    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc).replace(tzinfo=None)
    return moment


def ensure_window(window_days: Any) -> int:
    """Returns the window length or raises when it is not a positive integer."""
    if isinstance(window_days, bool) or not isinstance(window_days, int) or window_days <= 0:
        raise InvalidInputError(f"Window length must be a positive integer: {window_days!r}")
    return window_days


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


class InputValidator:
    """Validates and normalizes catalog and movement records."""

    # --- Catalog ---

    def check_items(self, items: Iterable[Item]) -> ValidationResult:
        errors = []
        warnings = []
        seen: set[str] = set()
        for item in items:
            label = f"item {item.item_id}"
            if item.item_id in seen:
                warnings.append(f"Duplicate {label}")
            seen.add(item.item_id)
            if not _is_int(item.quantity) or item.quantity < 0:
                errors.append(f"Negative or non-integer quantity for {label}: {item.quantity!r}")
            if not _is_int(item.min_threshold) or item.min_threshold < 0:
                errors.append(f"Invalid minimum threshold for {label}: {item.min_threshold!r}")
            if item.max_threshold is not None and (
                not _is_int(item.max_threshold) or item.max_threshold < 0
            ):
                errors.append(f"Invalid maximum threshold for {label}: {item.max_threshold!r}")
            try:
                ItemKind(item.kind)
            except ValueError:
                errors.append(f"Unknown item kind for {label}: {item.kind!r}")
        return ValidationResult(is_valid=len(errors) == 0, errors=errors, warnings=warnings)

    # --- Movements ---

    def check_receipts(self, receipts: Iterable[Receipt]) -> ValidationResult:
        errors = []
        for receipt in receipts:
            label = f"receipt for item {receipt.item_id}"
            if not _is_int(receipt.quantity) or receipt.quantity <= 0:
                errors.append(f"Receipt quantity must be positive ({label}): {receipt.quantity!r}")
            if receipt.unit_price is not None:
                price = receipt.unit_price
                if isinstance(price, bool) or not isinstance(price, (int, float)) or not math.isfinite(price):
                    errors.append(f"Invalid unit price ({label}): {price!r}")
                elif price < 0:
                    errors.append(f"Negative unit price ({label}): {price!r}")
            errors.extend(self._check_date(receipt.date, label))
        return ValidationResult(is_valid=len(errors) == 0, errors=errors)

    def check_issues(self, issues: Iterable[Issue]) -> ValidationResult:
        errors = []
        for issue in issues:
            label = f"issue for item {issue.item_id}"
            if not _is_int(issue.quantity) or issue.quantity <= 0:
                errors.append(f"Issue quantity must be positive ({label}): {issue.quantity!r}")
            errors.extend(self._check_date(issue.date, label))
        return ValidationResult(is_valid=len(errors) == 0, errors=errors)

    def _check_date(self, value: Any, label: str) -> list[str]:
        try:
            parse_moment(value)
        except InvalidInputError:
            return [f"Malformed date ({label}): {value!r}"]
        return []

    # --- Snapshot ---

    def validate_snapshot(self, snapshot: InventorySnapshot) -> InventorySnapshot:
        """Validates a snapshot and returns a normalized copy.

        Dates become naive UTC datetimes and item kinds become ``ItemKind``
        members. All errors are collected and raised together.
        """
        results = [
            self.check_items(snapshot.items),
            self.check_receipts(snapshot.receipts),
            self.check_issues(snapshot.issues),
        ]
        errors = [error for result in results for error in result.errors]
        if errors:
            raise InvalidInputError("; ".join(errors))
        for warning in results[0].warnings:
            logger.warning("Snapshot warning: %s", warning)

        return replace(
            snapshot,
            items=tuple(
                item if isinstance(item.kind, ItemKind) else replace(item, kind=ItemKind(item.kind))
                for item in snapshot.items
            ),
            receipts=tuple(
                replace(receipt, date=parse_moment(receipt.date)) for receipt in snapshot.receipts
            ),
            issues=tuple(replace(issue, date=parse_moment(issue.date)) for issue in snapshot.issues),
        )


def build_snapshot(
    items: Iterable[Item],
    receipts: Optional[Iterable[Receipt]] = None,
    issues: Optional[Iterable[Issue]] = None,
) -> InventorySnapshot:
    """Copies the caller's collections into a validated, immutable snapshot."""
    snapshot = InventorySnapshot(
        items=tuple(items),
        receipts=tuple(receipts or ()),
        issues=tuple(issues or ()),
    )
    return InputValidator().validate_snapshot(snapshot)
