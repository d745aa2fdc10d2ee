"""Base class for all snapshot analyzers."""

from __future__ import annotations

import logging
import uuid
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Optional

from replenishment_engine.analyzers.movement_aggregator import MovementAggregator
from replenishment_engine.analyzers.validation import (
    InputValidator,
    parse_moment,
    utc_now,
)
from replenishment_engine.models.inventory import AnalysisRecord, InventorySnapshot

logger = logging.getLogger(__name__)


class BaseAnalyzer(ABC):
    """Analyzer over one immutable inventory snapshot.

    The snapshot is validated and copied on construction; analyzers never
    write back to it. ``as_of`` is fixed per instance so repeated calls give
    identical results.
    """

    analyzer_name = "BaseAnalyzer"

    def __init__(
        self,
        snapshot: InventorySnapshot,
        as_of: Optional[Any] = None,
    ):
        self.snapshot = InputValidator().validate_snapshot(snapshot)
        self.as_of: datetime = parse_moment(as_of, "as_of") if as_of is not None else utc_now()
        self.aggregator = MovementAggregator(self.snapshot)
        self._records: list[AnalysisRecord] = []

        logger.debug(
            "Analyzer ready: %s (items=%d, receipts=%d, issues=%d, as_of=%s)",
            self.analyzer_name,
            len(self.snapshot.items),
            len(self.snapshot.receipts),
            len(self.snapshot.issues),
            self.as_of.isoformat(),
        )

    def log_analysis(
        self,
        analysis_type: str,
        input_data: dict,
        output_data: dict,
        reasoning: str,
    ) -> AnalysisRecord:
        """Keeps an in-memory record of a completed analysis and logs it."""
        record = AnalysisRecord(
            record_id=str(uuid.uuid4()),
            analyzer_name=self.analyzer_name,
            analysis_type=analysis_type,
            input_data=input_data,
            output_data=output_data,
            reasoning=reasoning,
        )
        self._records.append(record)
        logger.info("[%s] %s: %s", self.analyzer_name, analysis_type, reasoning)
        return record

    def get_records(self) -> list[AnalysisRecord]:
        return list(self._records)

    @abstractmethod
    def process(self, *args: Any, **kwargs: Any) -> Any:
        """Runs the analyzer's main computation."""
        ...
