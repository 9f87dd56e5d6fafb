"""
Structured logging for fallible.

structlog configuration shared by the strategy registry, the benchmark
runner and the CLI. The combinators in ``fallible.core.sequence`` and
``fallible.core.binding`` never log; they are pure.

Examples:
    >>> from fallible.core.logging import configure_logging, get_logger
    >>> configure_logging(level="INFO", json_format=True)
    >>> logger = get_logger(__name__)
    >>> logger.info("compare_started", strategies=6)

    Timing a step:

    >>> with log_step("bench.loop", size=1000) as timer:
    ...     run()
    ...     timer.add_metric("status", "ok")

Guardrails:
    - No logging inside per-unit loops
    - Start events at DEBUG, end events carry duration_ms

Tags:
    logging, structlog, timing, observability, fallible
"""

from __future__ import annotations

import logging
import sys
import time
import traceback
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any

import structlog
from structlog.types import EventDict, Processor, WrappedLogger


# Store service name for metadata
_SERVICE_NAME = "fallible"


def _add_service_metadata(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Add service-level metadata to all logs."""
    event_dict.setdefault("service.name", _SERVICE_NAME)
    return event_dict


def _elasticsearch_compatible(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Make field names Elasticsearch/ECS compatible."""
    if "timestamp" in event_dict:
        event_dict["@timestamp"] = event_dict.pop("timestamp")
    if "level" in event_dict:
        event_dict["log.level"] = event_dict.pop("level")
    return event_dict


def configure_logging(
    level: str = "INFO",
    json_format: bool | None = None,
    service: str = "fallible",
    add_timestamp: bool = True,
) -> None:
    """Configure structured logging for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        json_format: True for JSON, False for console, None for auto (JSON if not tty)
        service: Service name to include in logs
        add_timestamp: Include ISO timestamp in logs
    """
    global _SERVICE_NAME
    _SERVICE_NAME = service

    if json_format is None:
        json_format = not sys.stderr.isatty()

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        _add_service_metadata,
    ]

    if add_timestamp:
        shared_processors.insert(0, structlog.processors.TimeStamper(fmt="iso"))

    if json_format:
        shared_processors.append(_elasticsearch_compatible)
        renderer: Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=True)

    structlog.configure(
        processors=shared_processors + [renderer],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, level.upper())
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str | None = None) -> Any:
    """Get a structured logger (usually ``get_logger(__name__)``).

    The name is bound lazily as the ``logger_name`` field, so module-level
    loggers pick up whatever ``configure_logging`` sets later.
    """
    if name:
        return structlog.get_logger(name, logger_name=name)
    return structlog.get_logger()


def bind_context(**kwargs: Any) -> None:
    """Bind context to include in all subsequent logs."""
    structlog.contextvars.bind_contextvars(**kwargs)


def unbind_context(*keys: str) -> None:
    """Remove specific keys from logging context."""
    structlog.contextvars.unbind_contextvars(*keys)


def clear_context() -> None:
    """Clear all bound context."""
    structlog.contextvars.clear_contextvars()


class LogContext:
    """Context manager for scoped logging context.

    Example:
        with LogContext(strategy="loop", size=1000):
            logger.info("bench_started")
    """

    def __init__(self, **kwargs: Any):
        self._context = kwargs

    def __enter__(self) -> LogContext:
        bind_context(**self._context)
        return self

    def __exit__(self, *args: Any) -> None:
        unbind_context(*self._context.keys())


# =============================================================================
# Timing
# =============================================================================


def _generate_span_id() -> str:
    """Generate a short span ID (8 hex chars)."""
    return uuid.uuid4().hex[:8]


@dataclass
class TimingResult:
    """Elapsed time and metrics of one timed step."""

    step: str
    span_id: str = field(default_factory=_generate_span_id)
    started_at: float = field(default_factory=time.perf_counter)
    ended_at: float | None = None
    metrics: dict[str, Any] = field(default_factory=dict)

    def stop(self) -> None:
        self.ended_at = time.perf_counter()

    @property
    def duration_ms(self) -> float:
        """Elapsed milliseconds; still running if ``stop`` was not called."""
        end = time.perf_counter() if self.ended_at is None else self.ended_at
        return (end - self.started_at) * 1000

    def add_metric(self, key: str, value: Any) -> TimingResult:
        """Add a metric to include in the end event."""
        self.metrics[key] = value
        return self

    def to_log_dict(self) -> dict[str, Any]:
        return {
            "duration_ms": round(self.duration_ms, 3),
            "span_id": self.span_id,
            **self.metrics,
        }

    def to_error_dict(self, error: BaseException) -> dict[str, Any]:
        return {
            **self.to_log_dict(),
            "status": "error",
            "error_type": type(error).__name__,
            "error_message": str(error),
            "error_stack": traceback.format_exc(),
        }


@contextmanager
def timed_block(step: str = "unnamed") -> Iterator[TimingResult]:
    """
    Time a block without logging.

    Usage:
        with timed_block("sequence") as timer:
            sequence(units)
        print(timer.duration_ms)
    """
    timer = TimingResult(step=step)
    try:
        yield timer
    finally:
        timer.stop()


@contextmanager
def log_step(event: str, log_start: bool = True, level: str = "info", **extra_metrics: Any) -> Iterator[TimingResult]:
    """
    Log step start/end with timing.

    Logs ``<event>.start`` at DEBUG and ``<event>.end`` at ``level`` with
    ``duration_ms``. An exception logs ``<event>.error`` and is re-raised.
    """
    log = get_logger("fallible.timing")
    timer = TimingResult(step=event, metrics=dict(extra_metrics))

    if log_start:
        log.debug(f"{event}.start", span_id=timer.span_id, **extra_metrics)

    try:
        yield timer
    except Exception as e:
        timer.stop()
        log.error(f"{event}.error", **timer.to_error_dict(e))
        raise
    finally:
        timer.stop()

    getattr(log, level)(f"{event}.end", **timer.to_log_dict())


__all__ = [
    "configure_logging",
    "get_logger",
    "bind_context",
    "unbind_context",
    "clear_context",
    "LogContext",
    "TimingResult",
    "timed_block",
    "log_step",
]
