"""Span helpers for read-through operations."""

from contextlib import AbstractContextManager

from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

AttributeValue = str | int | float | bool


def add_span_attributes(**attributes: AttributeValue) -> None:
    """Add attributes to the current span."""
    span = trace.get_current_span()
    if span and span.is_recording():
        for key, value in attributes.items():
            span.set_attribute(key, value)


def add_span_event(name: str, attributes: dict[str, AttributeValue] | None = None) -> None:
    """Add an event to the current span (e.g. a degraded cache read)."""
    span = trace.get_current_span()
    if span and span.is_recording():
        span.add_event(name, attributes=attributes or {})


class TracedOperation:
    """Context manager running a block inside a span (sync or async).

    The span is made current, so add_span_attributes/add_span_event inside
    the block (and the Redis/SQLAlchemy instrumentation) attach to it.
    """

    def __init__(
        self, operation_name: str, attributes: dict[str, AttributeValue] | None = None
    ) -> None:
        self.operation_name = operation_name
        self.attributes = attributes or {}
        self.tracer = trace.get_tracer(__name__)
        self.span: trace.Span | None = None
        self._span_cm: AbstractContextManager[trace.Span] | None = None

    def __enter__(self) -> "TracedOperation":
        self.span = self.tracer.start_span(self.operation_name)
        for key, value in self.attributes.items():
            self.span.set_attribute(key, value)
        self._span_cm = trace.use_span(
            self.span,
            end_on_exit=True,
            record_exception=False,
            set_status_on_exception=False,
        )
        self._span_cm.__enter__()
        return self

    def __exit__(
        self, exc_type: type | None, exc_val: BaseException | None, exc_tb: object
    ) -> None:
        if self.span is None or self._span_cm is None:
            return
        if exc_type is not None and exc_val is not None:
            self.span.set_status(Status(StatusCode.ERROR, str(exc_val)))
            self.span.record_exception(exc_val)
        else:
            self.span.set_status(Status(StatusCode.OK))
        self._span_cm.__exit__(exc_type, exc_val, exc_tb)

    async def __aenter__(self) -> "TracedOperation":
        return self.__enter__()

    async def __aexit__(
        self,
        exc_type: type | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        self.__exit__(exc_type, exc_val, exc_tb)
