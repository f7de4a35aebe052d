"""
Tests for the container error hierarchy.
"""
from core.capabilities import Capability
from core.errors import (
    CapabilityMismatchError,
    ComponentCreationError,
    ComponentNotFoundError,
    ContainerError,
    ContextStateError,
    ErrorContext,
    ErrorSeverity,
)
from tests.support import Greeter


class TestContainerError:

    def test_str_includes_code_and_cause(self):
        cause = ValueError("bad value")

        error = ComponentCreationError("greeter", "constructor failed", cause=cause)

        assert str(error) == (
            "[COMPONENT_CREATION_ERROR] Error creating component 'greeter': "
            "constructor failed [caused by: bad value]"
        )
        assert error.severity is ErrorSeverity.CRITICAL

    def test_to_dict(self):
        error = ComponentNotFoundError(
            "ghost",
            context=ErrorContext(operation="lookup", component="factory"),
            suggestions=["register a descriptor named 'ghost'"],
        )

        data = error.to_dict()

        assert data["error_code"] == "COMPONENT_NOT_FOUND"
        assert data["severity"] == "error"
        assert data["context"]["operation"] == "lookup"
        assert data["suggestions"] == ["register a descriptor named 'ghost'"]
        assert data["cause"] is None

    def test_with_context_creates_context(self):
        error = ContextStateError("not active").with_context(context_id="ctx")

        assert error.context.metadata == {"context_id": "ctx"}

    def test_capability_mismatch_is_fatal(self):
        error = CapabilityMismatchError("greeter", Capability.LIFECYCLE_HOOK, Greeter)

        assert isinstance(error, ContainerError)
        assert error.severity is ErrorSeverity.FATAL
        assert "Greeter" in error.message
