"""
Armature - Component Descriptors

Descriptors are metadata describing how a component is built. They are what
definition-mutating extensions add, alter and remove; the instance itself is
only created later by the factory.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, Callable, Dict, Optional


class ComponentScope(Enum):
    """Component scope options."""

    SINGLETON = "singleton"  # One shared instance per factory
    PROTOTYPE = "prototype"  # New instance on every lookup


class ComponentRole(Enum):
    """What a component is for, used to filter diagnostics."""

    APPLICATION = "application"
    SUPPORT = "support"
    INFRASTRUCTURE = "infrastructure"


@dataclass
class ComponentDescriptor:
    """
    Describes how a component should be created and managed.

    Exactly one of ``component_type``, ``factory`` or ``instance`` drives
    creation. A factory descriptor may still declare ``component_type`` so the
    factory can match it against capabilities without calling the factory.
    """

    component_type: Optional[type] = None
    factory: Optional[Callable[..., Any]] = None
    instance: Optional[Any] = None
    scope: ComponentScope = ComponentScope.SINGLETON
    role: ComponentRole = ComponentRole.APPLICATION
    lazy: bool = False
    abstract: bool = False
    parent_name: Optional[str] = None
    constructor_args: Dict[str, Any] = field(default_factory=dict)
    properties: Dict[str, Any] = field(default_factory=dict)
    init_method: Optional[str] = None
    description: str = ""

    def __post_init__(self) -> None:
        if self.instance is not None and self.component_type is None:
            self.component_type = type(self.instance)

    @property
    def is_singleton(self) -> bool:
        return self.scope == ComponentScope.SINGLETON

    @property
    def is_prototype(self) -> bool:
        return self.scope == ComponentScope.PROTOTYPE

    @property
    def is_infrastructure(self) -> bool:
        return self.role == ComponentRole.INFRASTRUCTURE

    def copy(self) -> "ComponentDescriptor":
        """Independent copy; argument and property maps are not shared."""
        clone = copy.copy(self)
        clone.constructor_args = dict(self.constructor_args)
        clone.properties = dict(self.properties)
        return clone

    def merged_with(self, child: "ComponentDescriptor") -> "ComponentDescriptor":
        """
        Overlay ``child`` on this (parent) descriptor.

        Creation settings the child declares win, argument and property maps
        are merged key by key, and the result is never abstract and has no
        parent.
        """
        merged = self.copy()
        defaults = ComponentDescriptor()
        for f in fields(ComponentDescriptor):
            if f.name in ("constructor_args", "properties", "abstract", "parent_name"):
                continue
            value = getattr(child, f.name)
            if value != getattr(defaults, f.name):
                setattr(merged, f.name, value)
        merged.constructor_args.update(child.constructor_args)
        merged.properties.update(child.properties)
        merged.scope = child.scope
        merged.role = child.role
        merged.lazy = child.lazy
        merged.abstract = False
        merged.parent_name = None
        return merged


@dataclass(frozen=True)
class ComponentReference:
    """Placeholder for another component, resolved by name at creation time."""

    name: str


def ref(name: str) -> ComponentReference:
    """Reference the component registered under ``name``."""
    return ComponentReference(name)
