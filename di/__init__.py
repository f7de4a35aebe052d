"""
Armature - Dependency Injection Module

Descriptor model, the factory/registry contracts consumed by the bootstrap
pipeline, and a reference factory implementing both.

Usage:
    from di import ComponentDescriptor, DefaultComponentFactory, ref

    factory = DefaultComponentFactory()
    factory.register_descriptor("repo", ComponentDescriptor(component_type=Repository))
    factory.register_descriptor(
        "service",
        ComponentDescriptor(component_type=Service, constructor_args={"repo": ref("repo")}),
    )
    service = factory.instantiate("service")
"""

from di.descriptors import (
    ComponentDescriptor,
    ComponentReference,
    ComponentRole,
    ComponentScope,
    ref,
)
from di.interfaces import (
    Comparator,
    IComponentFactory,
    IDescriptorRegistry,
)
from di.factory import DefaultComponentFactory

__all__ = [
    # Descriptors
    "ComponentDescriptor",
    "ComponentReference",
    "ComponentRole",
    "ComponentScope",
    "ref",
    # Contracts
    "Comparator",
    "IComponentFactory",
    "IDescriptorRegistry",
    # Reference factory
    "DefaultComponentFactory",
]
