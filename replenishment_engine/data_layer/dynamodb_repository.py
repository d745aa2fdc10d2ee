"""DynamoDB snapshot repository.

3 tables: Items, Receipts, Issues.
Loads a full, validated snapshot on every call and writes the receipts of
accepted purchase suggestions.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import replace
from decimal import Decimal
from typing import Any, Optional

import boto3
from botocore.exceptions import ClientError

from replenishment_engine.analyzers.validation import (
    InvalidInputError,
    build_snapshot,
    parse_moment,
)
from replenishment_engine.config import Settings
from replenishment_engine.models.inventory import (
    InventorySnapshot,
    Issue,
    Item,
    ItemKind,
    Receipt,
)

logger = logging.getLogger(__name__)


class RepositoryError(Exception):
    """DynamoDB read or write failure."""
    pass


def from_dynamo(obj: Any) -> Any:
    """Converts DynamoDB Decimals back to int/float."""
    if isinstance(obj, Decimal):
        return int(obj) if obj == int(obj) else float(obj)
    if isinstance(obj, dict):
        return {k: from_dynamo(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [from_dynamo(i) for i in obj]
    return obj


def to_dynamo(obj: Any) -> Any:
    """DynamoDB rejects floats; store them as Decimals."""
    if isinstance(obj, float):
        return Decimal(str(obj))
    if isinstance(obj, dict):
        return {k: to_dynamo(v) for k, v in obj.items() if v is not None}
    if isinstance(obj, list):
        return [to_dynamo(i) for i in obj]
    return obj


class DynamoSnapshotRepository:
    """Reads catalog and movement records from DynamoDB."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        dynamodb_resource: Optional[Any] = None,
    ):
        self.settings = settings or Settings.from_env()
        # dependency injection for tests
        self.dynamodb = dynamodb_resource or boto3.resource(
            "dynamodb", region_name=self.settings.region_name
        )
        self.items_table = self.dynamodb.Table(self.settings.items_table)
        self.receipts_table = self.dynamodb.Table(self.settings.receipts_table)
        self.issues_table = self.dynamodb.Table(self.settings.issues_table)

    def _scan_all(self, table: Any) -> list[dict]:
        """Full table scan following LastEvaluatedKey pagination."""
        try:
            resp = table.scan()
            records = list(resp.get("Items", []))
            while "LastEvaluatedKey" in resp:
                resp = table.scan(ExclusiveStartKey=resp["LastEvaluatedKey"])
                records.extend(resp.get("Items", []))
        except ClientError as e:
            logger.error("DynamoDB scan error [%s]: %s", getattr(table, "name", table), e)
            raise RepositoryError(str(e)) from e
        return [from_dynamo(r) for r in records]

    # --- Record mapping ---

    def _to_item(self, record: dict) -> Item:
        try:
            kind = ItemKind(record.get("kind", ItemKind.GENERAL.value))
        except ValueError as e:
            raise InvalidInputError(f"Unknown item kind: {record.get('kind')!r}") from e

        min_threshold = record.get("min_quantity")
        if min_threshold is None:
            min_threshold = (
                self.settings.default_min_threshold_ppe
                if kind == ItemKind.PROTECTIVE_EQUIPMENT
                else self.settings.default_min_threshold_general
            )
            logger.warning(
                "Item %s has no minimum threshold, using default %d",
                record.get("item_id"),
                min_threshold,
            )

        return Item(
            item_id=record["item_id"],
            name=record.get("name", ""),
            quantity=record.get("quantity", 0),
            min_threshold=min_threshold,
            max_threshold=record.get("max_quantity"),
            sku=record.get("sku") or record.get("ca_number"),
            supplier_id=record.get("supplier_id"),
            category_id=record.get("category_id"),
            kind=kind,
        )

    @staticmethod
    def _to_receipt(record: dict) -> Receipt:
        price = record.get("unit_price")
        return Receipt(
            item_id=record["item_id"],
            date=parse_moment(record.get("entry_date"), "entry_date"),
            quantity=record.get("quantity", 0),
            unit_price=float(price) if price is not None else None,
            supplier_id=record.get("supplier_id"),
            receipt_id=record.get("receipt_id"),
        )

    @staticmethod
    def _to_issue(record: dict) -> Issue:
        return Issue(
            item_id=record["item_id"],
            date=parse_moment(record.get("exit_date"), "exit_date"),
            quantity=record.get("quantity", 0),
        )

    # --- Reads ---

    def load_items(self) -> list[Item]:
        return [self._to_item(r) for r in self._scan_all(self.items_table)]

    def load_receipts(self) -> list[Receipt]:
        return [self._to_receipt(r) for r in self._scan_all(self.receipts_table)]

    def load_issues(self) -> list[Issue]:
        return [self._to_issue(r) for r in self._scan_all(self.issues_table)]

    def load_snapshot(self) -> InventorySnapshot:
        """Fresh, validated snapshot of the whole catalog and its movements."""
        snapshot = build_snapshot(self.load_items(), self.load_receipts(), self.load_issues())
        logger.info(
            "Snapshot loaded: %d items, %d receipts, %d issues",
            len(snapshot.items),
            len(snapshot.receipts),
            len(snapshot.issues),
        )
        return snapshot

    # --- Writes ---

    def record_receipt(self, receipt: Receipt) -> Receipt:
        """Stores a new receipt and returns it with its id."""
        if receipt.receipt_id is None:
            receipt = replace(receipt, receipt_id=str(uuid.uuid4()))

        record = {
            "receipt_id": receipt.receipt_id,
            "item_id": receipt.item_id,
            "entry_date": parse_moment(receipt.date).isoformat(),
            "quantity": receipt.quantity,
            "unit_price": receipt.unit_price,
            "total_price": (
                receipt.unit_price * receipt.quantity if receipt.unit_price is not None else None
            ),
            "supplier_id": receipt.supplier_id,
        }
        try:
            self.receipts_table.put_item(Item=to_dynamo(record))
        except ClientError as e:
            logger.error("Receipt write error [%s]: %s", receipt.item_id, e)
            raise RepositoryError(str(e)) from e

        logger.info("Receipt recorded: %s (item %s)", receipt.receipt_id, receipt.item_id)
        return receipt
