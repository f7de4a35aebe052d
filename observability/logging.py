"""
Armature - Structured Logging with Trace Context

Every bootstrap log line is a structlog event rendered through the stdlib
``armature`` logger. Events raised inside a bootstrap span carry the span's
trace and span ids, so log lines can be lined up with the trace.

Usage:
    from observability.logging import setup_logging, get_logger

    setup_logging(LoggingConfig(level="DEBUG", json_format=True))

    logger = get_logger("armature.core.pipeline")
    logger.info("Invoking extension", extension="placeholderResolver", tier="ordered")
"""
from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass, field
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, List, Optional

import structlog
from opentelemetry import trace
from structlog.types import EventDict, Processor, WrappedLogger

PACKAGE_LOGGER = "armature"

_configured: bool = False


@dataclass
class LoggingConfig:
    """Configuration for structured logging."""

    service_name: str = "armature"
    level: str = field(
        default_factory=lambda: os.getenv("ARMATURE_LOG_LEVEL", "INFO").upper()
    )
    # "json" for log aggregation, anything else renders for a terminal
    json_format: bool = field(
        default_factory=lambda: os.getenv("ARMATURE_LOG_FORMAT", "console").lower() == "json"
    )
    log_to_file: bool = field(
        default_factory=lambda: os.getenv("ARMATURE_LOG_TO_FILE", "false").lower() == "true"
    )
    log_file_path: Path = field(
        default_factory=lambda: Path(os.getenv("ARMATURE_LOG_FILE", "./logs/armature.log"))
    )
    environment: str = field(
        default_factory=lambda: os.getenv("ARMATURE_ENVIRONMENT", "development")
    )


def add_trace_context(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Add the current span's trace and span ids, if a span is recording."""
    span = trace.get_current_span()
    if span.is_recording():
        ctx = span.get_span_context()
        event_dict["trace_id"] = format(ctx.trace_id, "032x")
        event_dict["span_id"] = format(ctx.span_id, "016x")
    return event_dict


def add_service_context(service_name: str, environment: str) -> Processor:
    def processor(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
        event_dict["service"] = service_name
        event_dict["environment"] = environment
        return event_dict

    return processor


def format_exception(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Replace ``exc_info`` with a compact ``{type, message}`` mapping."""
    exc_info = event_dict.pop("exc_info", None)
    if isinstance(exc_info, BaseException):
        exc_type, exc = type(exc_info), exc_info
    elif isinstance(exc_info, tuple) and exc_info[0] is not None:
        exc_type, exc = exc_info[0], exc_info[1]
    elif exc_info:
        exc_type, exc, _ = sys.exc_info()
        if exc_type is None:
            return event_dict
    else:
        return event_dict
    event_dict["exception"] = {"type": exc_type.__name__, "message": str(exc)}
    return event_dict


def setup_logging(config: Optional[LoggingConfig] = None) -> None:
    """
    Configure structlog and the stdlib ``armature`` logger.

    Only the first call has an effect; call ``shutdown_logging()`` first to
    apply a different configuration.
    """
    global _configured

    if _configured:
        return

    config = config or LoggingConfig()

    processors: List[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        add_service_context(config.service_name, config.environment),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        add_trace_context,
        format_exception,
        structlog.processors.UnicodeDecoder(),
    ]
    if config.json_format:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    # Loggers are bound at import time, so they must not cache a configuration.
    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )

    _configure_package_logger(config)
    _configured = True


def _configure_package_logger(config: LoggingConfig) -> None:
    # structlog renders the whole line; handlers only write it out.
    formatter = logging.Formatter("%(message)s")
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stderr)]

    if config.log_to_file:
        config.log_file_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            RotatingFileHandler(config.log_file_path, maxBytes=10 * 1024 * 1024, backupCount=5)
        )

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(getattr(logging, config.level, logging.INFO))
    for handler in package_logger.handlers[:]:
        package_logger.removeHandler(handler)
    for handler in handlers:
        handler.setFormatter(formatter)
        package_logger.addHandler(handler)

    logging.getLogger("opentelemetry").setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structlog logger, configuring logging with defaults on first use."""
    if not _configured:
        setup_logging()

    return structlog.get_logger(name)


def shutdown_logging() -> None:
    """Flush and close the package handlers; the next setup starts afresh."""
    global _configured

    for handler in logging.getLogger(PACKAGE_LOGGER).handlers:
        handler.flush()
        handler.close()

    _configured = False


class LogContext:
    """
    Bind key/value pairs to every log event inside the block.

    Example:
        >>> with LogContext(context_id="ctx-1"):
        ...     logger.info("Refreshing")
    """

    def __init__(self, **kwargs: Any):
        self.context = kwargs

    def __enter__(self) -> "LogContext":
        structlog.contextvars.bind_contextvars(**self.context)
        return self

    def __exit__(self, *args: Any) -> None:
        structlog.contextvars.unbind_contextvars(*self.context.keys())
