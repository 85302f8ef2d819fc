"""Ordered strategy orchestration shared by all extraction pipelines."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Generic, Sequence, TypeVar

from nutrifacts.core.interfaces import ExtractionStrategy
from nutrifacts.core.models import ExtractionTrace
from nutrifacts.core.trace import TraceRecorder

logger = logging.getLogger(__name__)

T = TypeVar("T")


class StrategyPipeline(Generic[T]):
    """
    Runs strategies in priority order and keeps the first non-empty result.

    Results are never merged across strategies. Strategies are injected, so
    callers can reorder or extend the priority list.
    """

    name = "pipeline"

    def __init__(self, strategies: Sequence[ExtractionStrategy[T]]) -> None:
        self.strategies = list(strategies)

    def extract(self, product: Any) -> tuple[list[T], ExtractionTrace]:
        """
        Run the strategies over one product record.

        Args:
            product: Decoded product record; non-mapping input is treated as empty

        Returns:
            (results, trace) for this invocation only
        """
        record: dict[str, Any] = dict(product) if isinstance(product, Mapping) else {}
        trace = TraceRecorder()
        results: list[T] = []
        winner: str | None = None
        for strategy in self.strategies:
            results = list(strategy.attempt(record, trace))
            if results:
                winner = strategy.label
                logger.debug("%s: %s produced %d result(s)", self.name, winner, len(results))
                break
        else:
            logger.debug("%s: no strategy produced results", self.name)
        return results, trace.build(len(results), strategy=winner)
