"""Optional OpenTelemetry spans for tool calls and CLI invocations."""

from __future__ import annotations

import logging
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from importlib import import_module
from typing import Any

logger = logging.getLogger("dayone_mcp.telemetry")

trace: Any | None = None
try:
    trace = import_module("opentelemetry.trace")
    _HAS_OTEL = True
except Exception:
    _HAS_OTEL = False

TRACER_NAME = "dayone_mcp"


def _get_tracer() -> Any:
    if _HAS_OTEL and trace is not None:
        return trace.get_tracer(TRACER_NAME)
    return None


def generate_request_id() -> str:
    """Return a UUID4 used to correlate gateway and bridge log lines."""
    return str(uuid.uuid4())


def set_attributes(span: Any, attributes: dict[str, Any]) -> None:
    """Best-effort attribute update; ``span`` may be None."""
    if span is None:
        return
    for key, value in attributes.items():
        try:
            span.set_attribute(key, value)
        except Exception as exc:
            logger.debug("Failed to set span attribute %s: %s", key, exc)


@contextmanager
def trace_span(name: str, attributes: dict[str, Any] | None = None) -> Iterator[Any]:
    """Open a span named ``name`` when OpenTelemetry is installed.

    Yields the span, or None when tracing is unavailable. Tracing failures
    never propagate into the traced code.
    """
    try:
        tracer = _get_tracer()
        span_context = (
            tracer.start_as_current_span(name, attributes=attributes or {})
            if tracer is not None
            else None
        )
        span = span_context.__enter__() if span_context is not None else None
    except Exception as exc:
        logger.debug("Tracing unavailable for %s: %s", name, exc)
        span_context = None
        span = None

    if span_context is None:
        yield None
        return

    try:
        yield span
    except BaseException as exc:
        _close(span_context, name, exc)
        raise
    _close(span_context, name, None)


def _close(span_context: Any, name: str, exc: BaseException | None) -> None:
    try:
        if exc is None:
            span_context.__exit__(None, None, None)
        else:
            span_context.__exit__(type(exc), exc, exc.__traceback__)
    except Exception as exit_exc:
        logger.debug("Failed to close span %s: %s", name, exit_exc)
