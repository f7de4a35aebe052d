"""
Armature - Factory and Registry Interfaces

Small, focused contracts the bootstrap pipeline consumes. The pipeline never
owns the factory or the registry: it receives a reference for the duration of
one bootstrap.
"""
from __future__ import annotations

from typing import (
    TYPE_CHECKING,
    Any,
    Callable,
    List,
    Optional,
    Protocol,
    runtime_checkable,
)

if TYPE_CHECKING:
    from core.capabilities import Capability
    from di.descriptors import ComponentDescriptor

Comparator = Callable[[Any, Any], int]


@runtime_checkable
class IComponentFactory(Protocol):
    """Component lookup, instantiation and lifecycle hook chain."""

    def lookup_by_capability(
        self,
        capability: "Capability",
        include_non_singletons: bool = True,
        allow_eager_init: bool = True,
    ) -> List[str]:
        """Names of components providing ``capability``, in registration order."""
        ...

    def is_assignable_to(self, name: str, capability: "Capability") -> bool:
        """Type-level capability check that never instantiates."""
        ...

    def instantiate(self, name: str, expected_capability: Optional["Capability"] = None) -> Any:
        """Get or create the named component."""
        ...

    def add_lifecycle_hook(self, hook: Any) -> None:
        """Append ``hook`` to the chain, moving it to the end if already present."""
        ...

    def current_lifecycle_hook_count(self) -> int:
        ...

    def invalidate_merged_metadata_cache(self) -> None:
        ...

    def dependency_aware_comparator(self) -> Optional[Comparator]:
        ...

    def contains_descriptor(self, name: str) -> bool:
        ...

    def get_descriptor(self, name: str) -> "ComponentDescriptor":
        ...


@runtime_checkable
class IDescriptorRegistry(Protocol):
    """Mutable store of component descriptors."""

    def register_descriptor(self, name: str, descriptor: "ComponentDescriptor") -> None:
        ...

    def remove_descriptor(self, name: str) -> None:
        ...

    def get_descriptor(self, name: str) -> "ComponentDescriptor":
        ...

    def contains_descriptor(self, name: str) -> bool:
        ...

    def descriptor_names(self) -> List[str]:
        ...
