"""
Armature - Default Component Factory

Reference implementation of both the component factory and the descriptor
registry consumed by the bootstrap pipeline.

Features:
- Ordered descriptor registry with optional overriding
- Parent/child descriptor merging with a cached merged view
- Capability lookup and type-level matching without instantiation
- Singleton and prototype scopes
- Lifecycle hook chain applied to every created component
- Circular reference detection (detected, never resolved)

Usage:
    factory = DefaultComponentFactory()
    factory.register_descriptor(
        "greeter", ComponentDescriptor(component_type=Greeter, properties={"name": "x"})
    )
    greeter = factory.instantiate("greeter")
"""

from __future__ import annotations

import threading
from typing import Any, Dict, List, Optional, Set, Tuple

from core.capabilities import Capability, LifecycleHook, has_capability
from core.errors import (
    CapabilityMismatchError,
    CircularReferenceError,
    ComponentCreationError,
    ComponentNotFoundError,
    ContainerError,
    DescriptorConflictError,
    ErrorContext,
)
from di.descriptors import ComponentDescriptor, ComponentReference
from di.interfaces import Comparator
from observability.logging import get_logger

logger = get_logger("armature.di.factory")


class DefaultComponentFactory:
    """
    Component factory and descriptor registry in one object.

    Descriptors keep their registration order, which is also the order
    ``lookup_by_capability`` reports names in. The registry may be mutated
    while a caller iterates a previously returned name list.
    """

    def __init__(self, allow_descriptor_overriding: bool = True) -> None:
        self._descriptors: Dict[str, ComponentDescriptor] = {}
        self._merged: Dict[str, ComponentDescriptor] = {}
        self._singletons: Dict[str, Any] = {}
        self._creation_order: List[str] = []
        self._hooks: List[LifecycleHook] = []
        self._comparator: Optional[Comparator] = None
        self._lock = threading.RLock()
        self._in_creation: Set[str] = set()
        self.allow_descriptor_overriding = allow_descriptor_overriding

    # -------------------------------------------------------------------------
    # Descriptor registry
    # -------------------------------------------------------------------------

    def register_descriptor(self, name: str, descriptor: ComponentDescriptor) -> None:
        """Register ``descriptor`` under ``name``."""
        if name in self._descriptors:
            if not self.allow_descriptor_overriding:
                raise DescriptorConflictError(name)
            logger.debug("Overriding descriptor", component=name)
            self._reset_component(name)
        self._descriptors[name] = descriptor

    def register_singleton(self, name: str, instance: Any) -> None:
        """Register an existing object; lifecycle hooks are not applied to it."""
        self.register_descriptor(name, ComponentDescriptor(instance=instance))

    def remove_descriptor(self, name: str) -> None:
        if name not in self._descriptors:
            raise ComponentNotFoundError(name)
        del self._descriptors[name]
        self._reset_component(name)

    def get_descriptor(self, name: str) -> ComponentDescriptor:
        try:
            return self._descriptors[name]
        except KeyError:
            raise ComponentNotFoundError(name) from None

    def contains_descriptor(self, name: str) -> bool:
        return name in self._descriptors

    def descriptor_names(self) -> List[str]:
        return list(self._descriptors)

    @property
    def descriptor_count(self) -> int:
        return len(self._descriptors)

    def _reset_component(self, name: str) -> None:
        self._merged.clear()
        if name in self._singletons:
            del self._singletons[name]
            self._creation_order.remove(name)

    # -------------------------------------------------------------------------
    # Merged descriptors
    # -------------------------------------------------------------------------

    def get_merged_descriptor(self, name: str) -> ComponentDescriptor:
        """Descriptor with its parent chain applied, cached until invalidated."""
        merged = self._merged.get(name)
        if merged is None:
            merged = self._merge(name, set())
            self._merged[name] = merged
        return merged

    def _merge(self, name: str, seen: Set[str]) -> ComponentDescriptor:
        if name in seen:
            raise ContainerError(f"Descriptor '{name}' has a cyclic parent chain")
        seen.add(name)
        descriptor = self.get_descriptor(name)
        if descriptor.parent_name is None:
            return descriptor.copy()
        parent = self._merge(descriptor.parent_name, seen)
        return parent.merged_with(descriptor)

    def invalidate_merged_metadata_cache(self) -> None:
        """Drop merged descriptors so descriptor edits become visible."""
        self._merged.clear()

    # -------------------------------------------------------------------------
    # Capability lookup
    # -------------------------------------------------------------------------

    def predict_type(self, name: str) -> Optional[type]:
        """Component type as far as it is known without creating the component."""
        if name in self._singletons:
            return type(self._singletons[name])
        return self.get_merged_descriptor(name).component_type

    def lookup_by_capability(
        self,
        capability: Capability,
        include_non_singletons: bool = True,
        allow_eager_init: bool = True,
    ) -> List[str]:
        """
        Names of all components providing ``capability``.

        Abstract descriptors never match. With ``allow_eager_init`` disabled,
        a singleton whose type is only known from its factory is skipped
        instead of being created to find out.
        """
        names = []
        for name in self.descriptor_names():
            merged = self.get_merged_descriptor(name)
            if merged.abstract:
                continue
            if not include_non_singletons and not merged.is_singleton:
                continue
            component_type = self.predict_type(name)
            if component_type is None:
                if not (allow_eager_init and merged.is_singleton):
                    continue
                component_type = type(self.instantiate(name))
            if has_capability(component_type, capability):
                names.append(name)
        return names

    def is_assignable_to(self, name: str, capability: Capability) -> bool:
        component_type = self.predict_type(name)
        if component_type is None:
            return False
        return has_capability(component_type, capability)

    # -------------------------------------------------------------------------
    # Instantiation
    # -------------------------------------------------------------------------

    def instantiate(self, name: str, expected_capability: Optional[Capability] = None) -> Any:
        """Get the singleton or create a new component for ``name``."""
        merged = self.get_merged_descriptor(name)
        if merged.abstract:
            raise ComponentCreationError(name, "descriptor is abstract")

        if merged.is_singleton:
            with self._lock:
                if name not in self._singletons:
                    component = self._create_guarded(name, merged)
                    self._singletons[name] = component
                    self._creation_order.append(name)
                component = self._singletons[name]
        else:
            component = self._create_guarded(name, merged)

        if expected_capability is not None and not has_capability(component, expected_capability):
            raise CapabilityMismatchError(name, expected_capability, type(component))
        return component

    def _create_guarded(self, name: str, merged: ComponentDescriptor) -> Any:
        if name in self._in_creation:
            raise CircularReferenceError(name)
        self._in_creation.add(name)
        try:
            return self._create_component(name, merged)
        finally:
            self._in_creation.discard(name)

    def _create_component(self, name: str, merged: ComponentDescriptor) -> Any:
        if merged.instance is not None:
            return merged.instance

        args = {key: self._resolve_value(value) for key, value in merged.constructor_args.items()}
        try:
            if merged.factory is not None:
                component = merged.factory(**args)
            elif merged.component_type is not None:
                component = merged.component_type(**args)
            else:
                raise ComponentCreationError(name, "no type, factory or instance declared")
        except ContainerError:
            raise
        except Exception as e:
            raise ComponentCreationError(
                name,
                str(e),
                cause=e,
                context=ErrorContext.from_current_span("instantiate", "factory", component_name=name),
            ) from e

        for hook in self._hooks:
            if has_capability(hook, Capability.MERGED_DESCRIPTOR_HOOK):
                hook.on_merged_descriptor(merged, type(component), name)

        for key, value in merged.properties.items():
            setattr(component, key, self._resolve_value(value))

        component = self._apply_hooks(component, name, "before_init")
        if merged.init_method:
            try:
                getattr(component, merged.init_method)()
            except Exception as e:
                raise ComponentCreationError(
                    name, f"init method '{merged.init_method}' failed: {e}", cause=e
                ) from e
        component = self._apply_hooks(component, name, "after_init")
        logger.debug("Created component", component=name, type=type(component).__qualname__)
        return component

    def _apply_hooks(self, component: Any, name: str, callback: str) -> Any:
        current = component
        for hook in list(self._hooks):
            result = getattr(hook, callback)(current, name)
            if result is not None:
                current = result
        return current

    def _resolve_value(self, value: Any) -> Any:
        if isinstance(value, ComponentReference):
            return self.instantiate(value.name)
        return value

    def preinstantiate_singletons(self) -> List[str]:
        """Create every non-lazy, non-abstract singleton; return their names."""
        created = []
        for name in self.descriptor_names():
            merged = self.get_merged_descriptor(name)
            if merged.abstract or merged.lazy or not merged.is_singleton:
                continue
            self.instantiate(name)
            created.append(name)
        return created

    def contains_singleton(self, name: str) -> bool:
        return name in self._singletons

    @property
    def singleton_names(self) -> Tuple[str, ...]:
        return tuple(self._creation_order)

    def destroy_singletons(self) -> None:
        """
        Dispose singletons in reverse creation order.

        Objects registered as ready-made instances are owned by whoever
        registered them and are only forgotten, never disposed. A failing
        destroy method is logged and the remaining singletons still go.
        """
        for name in reversed(self._creation_order):
            instance = self._singletons[name]
            registered = self._descriptors.get(name)
            if registered is not None and registered.instance is not None:
                continue
            try:
                if hasattr(instance, "dispose"):
                    instance.dispose()
                elif hasattr(instance, "close"):
                    instance.close()
            except Exception:
                logger.warning("Destroy method failed", component=name, exc_info=True)
        self._singletons.clear()
        self._creation_order.clear()

    # -------------------------------------------------------------------------
    # Lifecycle hook chain
    # -------------------------------------------------------------------------

    def add_lifecycle_hook(self, hook: LifecycleHook) -> None:
        """Append ``hook``; a hook already in the chain moves to the end."""
        if hook in self._hooks:
            self._hooks.remove(hook)
        self._hooks.append(hook)

    def current_lifecycle_hook_count(self) -> int:
        return len(self._hooks)

    @property
    def lifecycle_hooks(self) -> Tuple[LifecycleHook, ...]:
        return tuple(self._hooks)

    def set_dependency_comparator(self, comparator: Optional[Comparator]) -> None:
        self._comparator = comparator

    def dependency_aware_comparator(self) -> Optional[Comparator]:
        return self._comparator
