"""
Armature - Observability Package

Structured logging and tracing for the container bootstrap.

Components:
- logging: structlog integration with trace context propagation
- tracing: OpenTelemetry spans around bootstrap phases

Usage:
    from observability import setup_observability, get_logger

    setup_observability(
        logging_config=LoggingConfig(level="DEBUG"),
        tracing_config=TracingConfig(enabled=True),
    )
    logger = get_logger("armature.app")
"""
from typing import Optional

from observability.logging import (
    LogContext,
    LoggingConfig,
    get_logger,
    setup_logging,
    shutdown_logging,
)
from observability.tracing import (
    TracingConfig,
    create_span,
    get_tracer,
    get_tracer_provider,
    setup_tracing,
    shutdown_tracing,
)


def setup_observability(
    logging_config: Optional[LoggingConfig] = None,
    tracing_config: Optional[TracingConfig] = None,
) -> None:
    """
    Apply logging and tracing configuration in one call.

    Replaces whatever configuration was active before, including the
    defaults installed on first use of ``get_logger`` or ``create_span``.
    """
    shutdown_observability()
    setup_tracing(tracing_config)
    setup_logging(logging_config)


def shutdown_observability() -> None:
    """Flush spans and log handlers."""
    shutdown_tracing()
    shutdown_logging()


__all__ = [
    # Main setup
    "setup_observability",
    "shutdown_observability",
    # Logging
    "LogContext",
    "LoggingConfig",
    "get_logger",
    "setup_logging",
    "shutdown_logging",
    # Tracing
    "TracingConfig",
    "create_span",
    "get_tracer",
    "get_tracer_provider",
    "setup_tracing",
    "shutdown_tracing",
]
