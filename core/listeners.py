"""
Armature - Container Events and Listener Detection

Components that implement ``ApplicationListener`` are picked up automatically
once they are fully initialized. The detector is a lifecycle hook that is
always moved to the very end of the hook chain, so it sees the final object
(including proxies or wrappers substituted by earlier hooks).
"""
from __future__ import annotations

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, Optional, Protocol

from core.capabilities import MergedDescriptorHook
from observability.logging import get_logger

if TYPE_CHECKING:
    from di.descriptors import ComponentDescriptor

logger = get_logger("armature.core.listeners")


@dataclass(frozen=True)
class ContainerEvent:
    """Base class of events published by a container context."""

    source: Any
    timestamp: float = field(default_factory=time.time)


@dataclass(frozen=True)
class ContextRefreshedEvent(ContainerEvent):
    """Published once refresh has completed."""


@dataclass(frozen=True)
class ContextClosedEvent(ContainerEvent):
    """Published when the context is closing, before singletons are destroyed."""


class ApplicationListener(ABC):
    """Receives every event published by the context it is registered with."""

    @abstractmethod
    def on_event(self, event: ContainerEvent) -> None:
        ...


class ListenerRegistry(Protocol):
    """What the detector needs from a container context."""

    def add_listener(self, listener: ApplicationListener) -> None:
        ...


class ListenerDetectorHook(MergedDescriptorHook):
    """
    Registers singleton listener components with the container context.

    Two detectors for the same context compare equal, so adding a fresh one
    to a chain that already holds one replaces it at the end of the chain.
    """

    def __init__(self, context: ListenerRegistry) -> None:
        self._context = context
        self._singleton_names: Dict[str, bool] = {}

    def on_merged_descriptor(
        self,
        descriptor: "ComponentDescriptor",
        component_type: Optional[type],
        name: str,
    ) -> None:
        if component_type is not None and issubclass(component_type, ApplicationListener):
            self._singleton_names[name] = descriptor.is_singleton

    def after_init(self, component: Any, name: str) -> Any:
        if isinstance(component, ApplicationListener):
            singleton = self._singleton_names.get(name)
            if singleton:
                self._context.add_listener(component)
            elif singleton is False:
                logger.warning(
                    "Listener component is not a singleton and will not receive events",
                    component=name,
                )
                self._singleton_names.pop(name, None)
        return component

    def __eq__(self, other: object) -> bool:
        return isinstance(other, ListenerDetectorHook) and other._context is self._context

    def __hash__(self) -> int:
        return hash(id(self._context))
