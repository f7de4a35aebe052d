"""
Armature - Core Module

The bootstrap extension pipeline of the container:
- Capability model for extensions (what an extension can do, how it is ordered)
- Ordering service (priority tiers, stable rank sort)
- Definition-mutating extension runner (tiers plus fixpoint)
- Configuration-mutating extension runner (single pass)
- Lifecycle hook registrar, early component checker, listener detection
- Container context driving a full bootstrap

Usage:
    from core import ContainerContext, DefinitionMutatingExtension

    class RegisterAuditing(DefinitionMutatingExtension):
        def mutate_registry(self, registry):
            registry.register_descriptor("audit", ComponentDescriptor(component_type=Audit))

    context = ContainerContext()
    context.add_extension(RegisterAuditing())
    context.refresh()
"""

from core.errors import (
    CapabilityMismatchError,
    CircularReferenceError,
    ComponentCreationError,
    ComponentNotFoundError,
    ContainerError,
    ContextStateError,
    DescriptorConflictError,
    ErrorContext,
    ErrorSeverity,
)
from core.capabilities import (
    LOWEST_PRECEDENCE,
    Capability,
    ConfigurationMutatingExtension,
    DefinitionMutatingExtension,
    LifecycleHook,
    MergedDescriptorHook,
    Ordered,
    PriorityOrdered,
    capabilities_of,
    get_order,
    has_capability,
)
from core.ordering import OrderingCategory, OrderingService, order_comparator
from core.checker import DiagnosticCheckerHook, EarlyComponentReport
from core.listeners import (
    ApplicationListener,
    ContainerEvent,
    ContextClosedEvent,
    ContextRefreshedEvent,
    ListenerDetectorHook,
)
from core.definition_runner import DefinitionExtensionRunner
from core.configuration_runner import ConfigurationExtensionRunner
from core.hook_registrar import LifecycleHookRegistrar
from core.pipeline import (
    ExtensionRunSummary,
    invoke_container_extensions,
    register_lifecycle_hooks,
)
from core.context import ContainerContext, ContextPhase, LifecycleEvent

__all__ = [
    # Errors
    "CapabilityMismatchError",
    "CircularReferenceError",
    "ComponentCreationError",
    "ComponentNotFoundError",
    "ContainerError",
    "ContextStateError",
    "DescriptorConflictError",
    "ErrorContext",
    "ErrorSeverity",
    # Capabilities
    "LOWEST_PRECEDENCE",
    "Capability",
    "ConfigurationMutatingExtension",
    "DefinitionMutatingExtension",
    "LifecycleHook",
    "MergedDescriptorHook",
    "Ordered",
    "PriorityOrdered",
    "capabilities_of",
    "get_order",
    "has_capability",
    # Ordering
    "OrderingCategory",
    "OrderingService",
    "order_comparator",
    # Hooks and events
    "DiagnosticCheckerHook",
    "EarlyComponentReport",
    "ApplicationListener",
    "ContainerEvent",
    "ContextClosedEvent",
    "ContextRefreshedEvent",
    "ListenerDetectorHook",
    # Runners
    "DefinitionExtensionRunner",
    "ConfigurationExtensionRunner",
    "LifecycleHookRegistrar",
    # Entry points
    "ExtensionRunSummary",
    "invoke_container_extensions",
    "register_lifecycle_hooks",
    # Driver
    "ContainerContext",
    "ContextPhase",
    "LifecycleEvent",
]
