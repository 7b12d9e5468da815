# src/textchain/engine/spans.py
"""OpenTelemetry span factory for the pipeline engine.

Provides structured span creation for pipeline execution.
Falls back to no-op mode when no tracer is configured.

Span Hierarchy:
    transformation:{transformation_id}
    └── step:{step_type}  (one per step, with index)
"""

from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from opentelemetry.trace import Span, Tracer


class NoOpSpan:
    """No-op span for when tracing is disabled."""

    def set_attribute(self, key: str, value: Any) -> None:
        """No-op."""
        pass

    def set_status(self, status: Any) -> None:
        """No-op."""
        pass

    def record_exception(self, exception: Exception) -> None:
        """No-op."""
        pass

    def is_recording(self) -> bool:
        """Always False for no-op."""
        return False


class SpanFactory:
    """Factory for creating OpenTelemetry spans.

    When no tracer is provided, all span methods return no-op contexts.

    Example:
        factory = SpanFactory(tracer=opentelemetry.trace.get_tracer("textchain"))

        with factory.run_span("tr-001") as span:
            with factory.step_span("step-1", "find_replace", 0) as step_span:
                # Do work
                pass
    """

    # Singleton no-op span to avoid repeated allocations
    _NOOP_SPAN = NoOpSpan()

    def __init__(self, tracer: "Tracer | None" = None) -> None:
        """Initialize with optional tracer.

        Args:
            tracer: OpenTelemetry tracer. If None, spans are no-ops.
        """
        self._tracer = tracer

    @classmethod
    def from_global(cls, enabled: bool) -> "SpanFactory":
        """Build a factory on the global tracer provider, or a no-op one."""
        if not enabled:
            return cls()
        from opentelemetry import trace

        return cls(tracer=trace.get_tracer("textchain"))

    @property
    def enabled(self) -> bool:
        """Whether tracing is enabled."""
        return self._tracer is not None

    @contextmanager
    def run_span(self, transformation_id: str) -> Iterator["Span | NoOpSpan"]:
        """Create a span for one pipeline invocation.

        The run id is not known yet when the span opens; the orchestrator
        sets ``run.id`` once the run row exists.

        Args:
            transformation_id: Transformation being executed

        Yields:
            Span or NoOpSpan if tracing disabled (never None - uniform interface)
        """
        if self._tracer is None:
            yield self._NOOP_SPAN
            return

        with self._tracer.start_as_current_span(f"transformation:{transformation_id}") as span:
            span.set_attribute("transformation.id", transformation_id)
            yield span

    @contextmanager
    def step_span(self, step_id: str, step_type: str, index: int) -> Iterator["Span | NoOpSpan"]:
        """Create a span for one step.

        Args:
            step_id: Step identifier
            step_type: Stored step type tag
            index: Position of the step in the transformation

        Yields:
            Span or NoOpSpan
        """
        if self._tracer is None:
            yield self._NOOP_SPAN
            return

        with self._tracer.start_as_current_span(f"step:{step_type}") as span:
            span.set_attribute("step.id", step_id)
            span.set_attribute("step.type", step_type)
            span.set_attribute("step.index", index)
            yield span
