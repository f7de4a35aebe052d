"""
Armature - Unified Error Handling

Error hierarchy for the container and its bootstrap pipeline.

Features:
- Hierarchical exception classes with context preservation
- Error severity levels for prioritized handling
- Structured error context for debugging
- OpenTelemetry integration for error tracing

Errors raised by extensions themselves are never wrapped: they propagate
unchanged and abort the bootstrap.
"""

from __future__ import annotations

import traceback
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode


class ErrorSeverity(Enum):
    """Error severity levels for prioritized handling."""

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"
    FATAL = "fatal"      # Unrecoverable, bootstrap must abort


@dataclass
class ErrorContext:
    """Structured context for error debugging and tracing."""

    operation: str
    component: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    trace_id: Optional[str] = None
    span_id: Optional[str] = None
    component_name: Optional[str] = None
    phase_name: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    stack_trace: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert context to dictionary for serialization."""
        return {
            "operation": self.operation,
            "component": self.component,
            "timestamp": self.timestamp.isoformat(),
            "trace_id": self.trace_id,
            "span_id": self.span_id,
            "component_name": self.component_name,
            "phase_name": self.phase_name,
            "metadata": self.metadata,
            "stack_trace": self.stack_trace,
        }

    @classmethod
    def from_current_span(
        cls,
        operation: str,
        component: str,
        **kwargs: Any
    ) -> "ErrorContext":
        """Create context from current OpenTelemetry span."""
        span = trace.get_current_span()
        trace_id = None
        span_id = None

        if span and span.is_recording():
            ctx = span.get_span_context()
            if ctx.is_valid:
                trace_id = format(ctx.trace_id, "032x")
                span_id = format(ctx.span_id, "016x")

        return cls(
            operation=operation,
            component=component,
            trace_id=trace_id,
            span_id=span_id,
            stack_trace=traceback.format_exc(),
            **kwargs
        )


class ContainerError(Exception):
    """
    Base exception for all container errors.

    Provides:
    - Structured error context
    - Severity level
    - Chained exception support
    - OpenTelemetry span recording
    """

    default_severity: ErrorSeverity = ErrorSeverity.ERROR
    error_code: str = "CONTAINER_ERROR"

    def __init__(
        self,
        message: str,
        context: Optional[ErrorContext] = None,
        severity: Optional[ErrorSeverity] = None,
        cause: Optional[BaseException] = None,
        suggestions: Optional[List[str]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.context = context
        self.severity = severity or self.default_severity
        self.cause = cause
        self.suggestions = suggestions or []
        self.timestamp = datetime.now(timezone.utc)

        self._record_to_span()

    def _record_to_span(self) -> None:
        """Record exception to current OpenTelemetry span."""
        span = trace.get_current_span()
        if span and span.is_recording():
            span.set_status(Status(StatusCode.ERROR, self.message))
            span.record_exception(self)
            span.set_attribute("error.code", self.error_code)
            span.set_attribute("error.severity", self.severity.value)
            if self.context:
                span.set_attribute("error.component", self.context.component)
                span.set_attribute("error.operation", self.context.operation)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for reports."""
        return {
            "error_code": self.error_code,
            "message": self.message,
            "severity": self.severity.value,
            "suggestions": self.suggestions,
            "timestamp": self.timestamp.isoformat(),
            "context": self.context.to_dict() if self.context else None,
            "cause": str(self.cause) if self.cause else None,
        }

    def __str__(self) -> str:
        parts = [f"[{self.error_code}] {self.message}"]
        if self.context:
            parts.append(f" (component: {self.context.component})")
        if self.cause:
            parts.append(f" [caused by: {self.cause}]")
        return "".join(parts)

    def with_context(self, **kwargs: Any) -> "ContainerError":
        """Add additional context to the error."""
        if self.context:
            self.context.metadata.update(kwargs)
        else:
            self.context = ErrorContext(
                operation="unknown",
                component="unknown",
                metadata=kwargs
            )
        return self


class ComponentNotFoundError(ContainerError):
    """No descriptor is registered under the requested name."""

    error_code = "COMPONENT_NOT_FOUND"

    def __init__(self, name: str, **kwargs: Any):
        super().__init__(f"No component named '{name}' is registered", **kwargs)
        self.name = name


class CapabilityMismatchError(ContainerError):
    """A component does not provide the capability it was requested for."""

    error_code = "CAPABILITY_MISMATCH"
    default_severity = ErrorSeverity.FATAL

    def __init__(
        self,
        name: str,
        required: Any,
        actual_type: Optional[type] = None,
        **kwargs: Any,
    ):
        actual = actual_type.__qualname__ if actual_type is not None else "unknown"
        super().__init__(
            f"Component '{name}' of type [{actual}] does not provide capability {required}",
            **kwargs,
        )
        self.name = name
        self.required = required
        self.actual_type = actual_type


class ComponentCreationError(ContainerError):
    """Constructing or initializing a component failed."""

    error_code = "COMPONENT_CREATION_ERROR"
    default_severity = ErrorSeverity.CRITICAL

    def __init__(self, name: str, message: str, **kwargs: Any):
        super().__init__(f"Error creating component '{name}': {message}", **kwargs)
        self.name = name


class CircularReferenceError(ContainerError):
    """A component was requested while it was still being created."""

    error_code = "CIRCULAR_REFERENCE"
    default_severity = ErrorSeverity.CRITICAL

    def __init__(self, name: str, **kwargs: Any):
        super().__init__(
            f"Component '{name}' is currently in creation: circular reference detected",
            **kwargs,
        )
        self.name = name


class DescriptorConflictError(ContainerError):
    """A descriptor name is already taken and overriding is disallowed."""

    error_code = "DESCRIPTOR_CONFLICT"

    def __init__(self, name: str, **kwargs: Any):
        super().__init__(
            f"Cannot register descriptor '{name}': name already bound and overriding is disabled",
            **kwargs,
        )
        self.name = name


class ContextStateError(ContainerError):
    """Operation is not valid in the container context's current phase."""

    error_code = "CONTEXT_STATE_ERROR"
