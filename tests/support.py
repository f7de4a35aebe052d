"""
Recording extensions and hooks shared by the test suite.

Every class writes what happened to a ``Journal`` so tests can assert on
invocation order across the whole bootstrap.
"""
from typing import Any, Dict, List, Optional, Tuple

from core.capabilities import (
    ConfigurationMutatingExtension,
    DefinitionMutatingExtension,
    LifecycleHook,
    MergedDescriptorHook,
    Ordered,
    PriorityOrdered,
)
from core.listeners import ApplicationListener, ContainerEvent
from di.descriptors import ComponentDescriptor


class Journal:
    """Ordered record of (action, label) entries."""

    def __init__(self) -> None:
        self.entries: List[Tuple[str, str]] = []

    def record(self, action: str, label: str) -> None:
        self.entries.append((action, label))

    def labels(self, action: str) -> List[str]:
        return [label for entry_action, label in self.entries if entry_action == action]


def descriptor(component_type: type, **constructor_args: Any) -> ComponentDescriptor:
    return ComponentDescriptor(component_type=component_type, constructor_args=constructor_args)


# =============================================================================
# DEFINITION-MUTATING EXTENSIONS
# =============================================================================


class RecordingDefinitionExtension(DefinitionMutatingExtension):
    """Registers ``registers`` (name -> descriptor) when invoked."""

    def __init__(
        self,
        journal: Journal,
        label: str,
        registers: Optional[Dict[str, ComponentDescriptor]] = None,
        order: int = 0,
    ) -> None:
        self.journal = journal
        self.label = label
        self.registers = registers or {}
        self.order = order

    def mutate_registry(self, registry: Any) -> None:
        self.journal.record("mutate", self.label)
        for name, registered in self.registers.items():
            registry.register_descriptor(name, registered)

    def apply(self, factory: Any) -> None:
        self.journal.record("apply", self.label)


class PriorityDefinitionExtension(RecordingDefinitionExtension, PriorityOrdered):
    def get_order(self) -> int:
        return self.order


class OrderedDefinitionExtension(RecordingDefinitionExtension, Ordered):
    def get_order(self) -> int:
        return self.order


class FailingDefinitionExtension(DefinitionMutatingExtension):
    def __init__(self, journal: Journal, label: str = "failing") -> None:
        self.journal = journal
        self.label = label

    def mutate_registry(self, registry: Any) -> None:
        self.journal.record("mutate", self.label)
        raise RuntimeError("descriptor source unavailable")


# =============================================================================
# CONFIGURATION-MUTATING EXTENSIONS
# =============================================================================


class RecordingConfigurationExtension(ConfigurationMutatingExtension):
    def __init__(
        self,
        journal: Journal,
        label: str,
        registers: Optional[Dict[str, ComponentDescriptor]] = None,
        order: int = 0,
    ) -> None:
        self.journal = journal
        self.label = label
        self.registers = registers or {}
        self.order = order

    def apply(self, factory: Any) -> None:
        self.journal.record("apply", self.label)
        for name, registered in self.registers.items():
            factory.register_descriptor(name, registered)


class PriorityConfigurationExtension(RecordingConfigurationExtension, PriorityOrdered):
    def get_order(self) -> int:
        return self.order


class OrderedConfigurationExtension(RecordingConfigurationExtension, Ordered):
    def get_order(self) -> int:
        return self.order


class PropertyOverrideExtension(ConfigurationMutatingExtension, Ordered):
    """Overwrites descriptor property values, the way a placeholder resolver would."""

    def __init__(self, overrides: Dict[str, Dict[str, Any]]) -> None:
        self.overrides = overrides

    def get_order(self) -> int:
        return 0

    def apply(self, factory: Any) -> None:
        for name, values in self.overrides.items():
            factory.get_descriptor(name).properties.update(values)


# =============================================================================
# LIFECYCLE HOOKS
# =============================================================================


class RecordingHook(LifecycleHook):
    def __init__(self, journal: Journal, label: str, order: int = 0) -> None:
        self.journal = journal
        self.label = label
        self.order = order

    def before_init(self, component: Any, name: str) -> Any:
        self.journal.record("before", f"{self.label}:{name}")
        return component

    def after_init(self, component: Any, name: str) -> Any:
        self.journal.record("after", f"{self.label}:{name}")
        return component


class PriorityHook(RecordingHook, PriorityOrdered):
    def get_order(self) -> int:
        return self.order


class OrderedHook(RecordingHook, Ordered):
    def get_order(self) -> int:
        return self.order


class RecordingMergedHook(RecordingHook, MergedDescriptorHook):
    def on_merged_descriptor(self, descriptor: Any, component_type: Any, name: str) -> None:
        self.journal.record("merged", f"{self.label}:{name}")


class PriorityMergedHook(RecordingMergedHook, PriorityOrdered):
    def get_order(self) -> int:
        return self.order


class WrappingHook(LifecycleHook):
    """Replaces every component with a wrapper after initialization."""

    def after_init(self, component: Any, name: str) -> Any:
        return Wrapper(component)


class Wrapper:
    def __init__(self, target: Any) -> None:
        self.target = target


# =============================================================================
# APPLICATION COMPONENTS
# =============================================================================


class Greeter:
    def __init__(self, greeting: str = "hello") -> None:
        self.greeting = greeting
        self.initialized = False
        self.closed = False
        self.name: Optional[str] = None

    def start(self) -> None:
        self.initialized = True

    def greet(self) -> str:
        return f"{self.greeting}, {self.name}"

    def close(self) -> None:
        self.closed = True


class EventCollector(ApplicationListener):
    def __init__(self) -> None:
        self.events: List[ContainerEvent] = []

    def on_event(self, event: ContainerEvent) -> None:
        self.events.append(event)
