"""
Armature - Extension Capabilities

Every extension is described by the set of capabilities it provides rather
than by its concrete type. Capabilities are declared nominally by inheriting
from the base classes below and are queried through ``has_capability`` and
``capabilities_of``, which accept either an instance or a class so that the
factory can classify a component without instantiating it.

Capability families:
    Extension roles:   DEFINITION_MUTATING, CONFIGURATION_MUTATING,
                       LIFECYCLE_HOOK, MERGED_DESCRIPTOR_HOOK
    Ordering:          PRIORITY_ORDERED, ORDERED (absence means unordered)

Usage:
    class PlaceholderResolver(ConfigurationMutatingExtension, Ordered):
        def get_order(self) -> int:
            return 10

        def apply(self, factory: IComponentFactory) -> None:
            ...

    has_capability(PlaceholderResolver, Capability.ORDERED)  # True
"""
from __future__ import annotations

import sys
from abc import ABC, abstractmethod
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, FrozenSet, Optional, Type

if TYPE_CHECKING:
    from di.descriptors import ComponentDescriptor
    from di.interfaces import IComponentFactory, IDescriptorRegistry


LOWEST_PRECEDENCE = sys.maxsize


# =============================================================================
# ORDERING CAPABILITIES
# =============================================================================


class Ordered(ABC):
    """An object with a declared numeric rank. Lower ranks run earlier."""

    @abstractmethod
    def get_order(self) -> int:
        ...


class PriorityOrdered(Ordered):
    """
    Marker for ordered objects that run before all plain ``Ordered`` ones.

    Within the priority tier, ``get_order`` still decides the sequence.
    """


# =============================================================================
# EXTENSION ROLES
# =============================================================================


class ConfigurationMutatingExtension(ABC):
    """
    Extension that alters final descriptor values or factory configuration.

    Runs after every descriptor is known and before any application
    component is instantiated.
    """

    @abstractmethod
    def apply(self, factory: "IComponentFactory") -> None:
        ...


class DefinitionMutatingExtension(ConfigurationMutatingExtension):
    """
    Extension that may add, remove or alter descriptors in the registry.

    It may register further extensions of its own kind; those are discovered
    and invoked in the same bootstrap. ``apply`` is called once all
    definition-mutating extensions have run.
    """

    @abstractmethod
    def mutate_registry(self, registry: "IDescriptorRegistry") -> None:
        ...

    def apply(self, factory: "IComponentFactory") -> None:
        pass


class LifecycleHook(ABC):
    """
    Interceptor invoked around the initialization of every component.

    Both callbacks may return a replacement object. Returning ``None`` keeps
    the current component.
    """

    def before_init(self, component: Any, name: str) -> Any:
        return component

    def after_init(self, component: Any, name: str) -> Any:
        return component


class MergedDescriptorHook(LifecycleHook):
    """Lifecycle hook that also inspects the merged descriptor of each component."""

    @abstractmethod
    def on_merged_descriptor(
        self,
        descriptor: "ComponentDescriptor",
        component_type: Optional[type],
        name: str,
    ) -> None:
        ...


# =============================================================================
# CAPABILITY QUERIES
# =============================================================================


class Capability(Enum):
    """Capabilities an extension can provide."""

    DEFINITION_MUTATING = "definition_mutating"
    CONFIGURATION_MUTATING = "configuration_mutating"
    LIFECYCLE_HOOK = "lifecycle_hook"
    MERGED_DESCRIPTOR_HOOK = "merged_descriptor_hook"
    PRIORITY_ORDERED = "priority_ordered"
    ORDERED = "ordered"

    @property
    def base_class(self) -> Type[Any]:
        return _CAPABILITY_BASES[self]


_CAPABILITY_BASES: Dict[Capability, Type[Any]] = {
    Capability.DEFINITION_MUTATING: DefinitionMutatingExtension,
    Capability.CONFIGURATION_MUTATING: ConfigurationMutatingExtension,
    Capability.LIFECYCLE_HOOK: LifecycleHook,
    Capability.MERGED_DESCRIPTOR_HOOK: MergedDescriptorHook,
    Capability.PRIORITY_ORDERED: PriorityOrdered,
    Capability.ORDERED: Ordered,
}


def _as_type(target: Any) -> type:
    return target if isinstance(target, type) else type(target)


def has_capability(target: Any, capability: Capability) -> bool:
    """Check whether an instance or a class provides ``capability``."""
    return issubclass(_as_type(target), capability.base_class)


def capabilities_of(target: Any) -> FrozenSet[Capability]:
    """Return every capability provided by an instance or a class."""
    component_type = _as_type(target)
    return frozenset(
        capability
        for capability, base in _CAPABILITY_BASES.items()
        if issubclass(component_type, base)
    )


def get_order(target: Any) -> int:
    """Declared rank of an ordered instance, ``LOWEST_PRECEDENCE`` otherwise."""
    if isinstance(target, Ordered):
        return target.get_order()
    return LOWEST_PRECEDENCE
