"""Protocol definitions for extraction strategies."""

from typing import Any, Protocol, TypeVar, runtime_checkable

from nutrifacts.core.trace import TraceRecorder

T_co = TypeVar("T_co", covariant=True)


@runtime_checkable
class ExtractionStrategy(Protocol[T_co]):
    """
    Strategy protocol: one self-contained way of deriving results from a product.

    Each strategy is responsible for:
    - Probing the product for the schema branch it understands
    - Recording what it found (or did not find) in the trace
    - Returning its results, or an empty list when the branch is absent or unusable
    """

    label: str
    """Human-readable name recorded in the trace when the strategy's branch is entered."""

    def attempt(self, product: dict[str, Any], trace: TraceRecorder) -> list[T_co]:
        """
        Try to derive results from the product record.

        Args:
            product: Decoded product record; any branch may be missing or malformed
            trace: Recorder owned by the current pipeline invocation

        Returns:
            Results in display order; an empty list triggers the next strategy.
            Must never raise for malformed input.
        """
        ...
