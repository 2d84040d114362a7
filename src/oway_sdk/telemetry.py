"""Logging and tracing for the Oway SDK.

Structured logging goes through structlog with a redaction processor so
credentials never reach a log sink in cleartext. OpenTelemetry spans wrap
token refreshes and HTTP attempts.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Protocol, TextIO, runtime_checkable

import structlog
from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

if TYPE_CHECKING:
    from collections.abc import Generator, Mapping, MutableMapping

    from .config import TelemetryConfig

REDACTED = "[REDACTED]"
SENSITIVE_KEY_FRAGMENTS: tuple[str, ...] = (
    "apikey",
    "token",
    "authorization",
    "password",
    "secret",
)

# Keys structlog adds itself; never treated as sensitive.
_RESERVED_EVENT_KEYS = frozenset({"event", "level", "timestamp", "logger"})

# Module-level tracer and logger
_tracer: trace.Tracer | None = None
_logger: structlog.BoundLogger | None = None


def is_sensitive_key(key: Any) -> bool:
    """Check if a mapping key names a credential.

    Matching is case-insensitive and ignores ``-``/``_`` separators, so
    ``apiKey``, ``api_key`` and ``X-Api-Key`` are all sensitive.
    """
    if not isinstance(key, str):
        return False
    normalized = key.lower().replace("-", "").replace("_", "")
    return any(fragment in normalized for fragment in SENSITIVE_KEY_FRAGMENTS)


def sanitize_for_logging(obj: Any) -> Any:
    """Return a copy of ``obj`` with sensitive values redacted.

    Recurses through mappings, lists and tuples. Non-container values are
    returned unchanged.
    """
    if isinstance(obj, dict):
        return {
            key: REDACTED if is_sensitive_key(key) else sanitize_for_logging(value)
            for key, value in obj.items()
        }
    if isinstance(obj, (list, tuple)):
        return [sanitize_for_logging(item) for item in obj]
    return obj


def redact_sensitive(
    logger: Any, method_name: str, event_dict: MutableMapping[str, Any]
) -> Mapping[str, Any]:
    """structlog processor applying ``sanitize_for_logging`` to every event."""
    for key in list(event_dict):
        if key in _RESERVED_EVENT_KEYS:
            continue
        if is_sensitive_key(key):
            event_dict[key] = REDACTED
        else:
            event_dict[key] = sanitize_for_logging(event_dict[key])
    return event_dict


def get_tracer() -> trace.Tracer:
    """Get or create the SDK tracer."""
    global _tracer
    if _tracer is None:
        _tracer = trace.get_tracer("oway-sdk", "0.1.0")
    return _tracer


def get_logger() -> structlog.BoundLogger:
    """Get or create the SDK structlog logger."""
    global _logger
    if _logger is None:
        _logger = structlog.get_logger("oway-sdk")
    return _logger


def configure_telemetry(config: TelemetryConfig, *, stream: TextIO | None = None) -> None:
    """Configure structlog and the tracer for the SDK.

    Args:
        config: Telemetry configuration.
        stream: Log destination (defaults to stdout).
    """
    global _tracer, _logger

    renderer: Any = (
        structlog.processors.JSONRenderer()
        if config.json_logs
        else structlog.dev.ConsoleRenderer()
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            redact_sensitive,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            _log_level_to_int(config.log_level)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(stream),
        cache_logger_on_first_use=True,
    )

    if not config.enabled:
        _tracer = trace.NoOpTracer()
    else:
        _tracer = trace.get_tracer(config.service_name, "0.1.0")
    _logger = structlog.get_logger(config.service_name)


def _log_level_to_int(level: str) -> int:
    """Convert log level string to integer."""
    levels = {
        "DEBUG": 10,
        "INFO": 20,
        "WARNING": 30,
        "ERROR": 40,
        "CRITICAL": 50,
    }
    return levels.get(level.upper(), 20)


@contextmanager
def trace_operation(
    name: str,
    *,
    attributes: dict[str, Any] | None = None,
) -> Generator[trace.Span, None, None]:
    """Context manager for tracing an operation.

    Args:
        name: Name of the operation.
        attributes: Optional span attributes (``None`` values are skipped).

    Yields:
        The active span.
    """
    tracer = get_tracer()
    with tracer.start_as_current_span(name) as span:
        if attributes:
            for key, value in attributes.items():
                if value is not None:
                    span.set_attribute(key, value)
        try:
            yield span
        except Exception as e:
            span.set_status(Status(StatusCode.ERROR, str(e)))
            span.record_exception(e)
            raise


@runtime_checkable
class LoggerSink(Protocol):
    """Anything a user can plug in as the SDK logger."""

    def debug(self, message: str, **kwargs: Any) -> Any: ...

    def info(self, message: str, **kwargs: Any) -> Any: ...

    def warning(self, message: str, **kwargs: Any) -> Any: ...

    def error(self, message: str, **kwargs: Any) -> Any: ...


class SDKLogger:
    """Structured logger for SDK operations.

    Sanitizes keyword context before it reaches the sink. Debug events are
    dropped unless ``debug`` is enabled. A stdlib ``logging.Logger`` sink
    receives key=value rendered lines.
    """

    def __init__(
        self,
        sink: LoggerSink | None = None,
        *,
        debug: bool = False,
    ) -> None:
        if sink is None:
            sink = get_logger()
        elif isinstance(sink, logging.Logger):
            sink = structlog.wrap_logger(
                sink,
                processors=[
                    redact_sensitive,
                    structlog.processors.KeyValueRenderer(key_order=["event"]),
                ],
                wrapper_class=structlog.BoundLogger,
            )
        self._sink = sink
        self.debug_enabled = debug

    def debug(self, message: str, **kwargs: Any) -> None:
        """Log debug message."""
        if self.debug_enabled:
            self._sink.debug(message, **sanitize_for_logging(kwargs))

    def info(self, message: str, **kwargs: Any) -> None:
        """Log info message."""
        self._sink.info(message, **sanitize_for_logging(kwargs))

    def warning(self, message: str, **kwargs: Any) -> None:
        """Log warning message."""
        self._sink.warning(message, **sanitize_for_logging(kwargs))

    def error(self, message: str, **kwargs: Any) -> None:
        """Log error message."""
        self._sink.error(message, **sanitize_for_logging(kwargs))

    def bind(self, **kwargs: Any) -> SDKLogger:
        """Create a new logger with bound context (structlog sinks only)."""
        bind = getattr(self._sink, "bind", None)
        sink = bind(**sanitize_for_logging(kwargs)) if callable(bind) else self._sink
        return SDKLogger(sink, debug=self.debug_enabled)
