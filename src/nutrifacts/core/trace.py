"""Per-invocation diagnostic trace accumulation."""

from __future__ import annotations

from nutrifacts.core.models import ExtractionTrace

NO_METHOD = "No method used"


class TraceRecorder:
    """
    Append-only step log owned by a single pipeline invocation.

    Strategies call `enter` when they commit to a branch and `note` for every
    other decision. The first entered label becomes the trace's method_used.
    """

    def __init__(self) -> None:
        self._steps: list[str] = []
        self._method_used: str | None = None

    def enter(self, label: str) -> None:
        self._steps.append(label)
        if self._method_used is None:
            self._method_used = label

    def note(self, message: str) -> None:
        self._steps.append(message)

    @property
    def steps(self) -> tuple[str, ...]:
        return tuple(self._steps)

    def build(self, result_count: int, strategy: str | None = None) -> ExtractionTrace:
        return ExtractionTrace(
            steps=tuple(self._steps),
            method_used=self._method_used or NO_METHOD,
            result_count=result_count,
            strategy=strategy,
        )
