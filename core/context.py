"""
Armature - Container Context

The bootstrap driver: owns a component factory, collects externally supplied
extensions, and runs the bootstrap pipeline on ``refresh()``.

Lifecycle:
    CREATED -> REFRESHING -> ACTIVE -> CLOSED
    (FAILED when any refresh step raises; the error is re-raised)

Usage:
    context = ContainerContext()
    context.register("greeter", ComponentDescriptor(component_type=Greeter))
    context.add_extension(PlaceholderResolver({"greeting": "hello"}))
    with context:
        greeter = context.get_component("greeter")
"""
from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional, TypeVar, Union
from uuid import UUID, uuid4

from config import Config, ContainerConfig, get_config
from core.capabilities import ConfigurationMutatingExtension
from core.checker import DiagnosticCheckerHook
from core.errors import ContainerError, ContextStateError
from core.listeners import (
    ApplicationListener,
    ContainerEvent,
    ContextClosedEvent,
    ContextRefreshedEvent,
    ListenerDetectorHook,
)
from core.pipeline import (
    ExtensionRunSummary,
    invoke_container_extensions,
    register_lifecycle_hooks,
)
from di.descriptors import ComponentDescriptor, ComponentRole
from di.interfaces import IDescriptorRegistry
from observability.logging import LogContext, get_logger
from observability.tracing import create_span

if TYPE_CHECKING:
    from di.interfaces import IComponentFactory

logger = get_logger("armature.core.context")

T = TypeVar("T")

CONTEXT_COMPONENT_NAME = "containerContext"


class ContextPhase(Enum):
    """Container context lifecycle phases."""
    CREATED = "created"
    REFRESHING = "refreshing"
    ACTIVE = "active"
    CLOSED = "closed"
    FAILED = "failed"


@dataclass(frozen=True)
class LifecycleEvent:
    """Immutable record of one bootstrap step."""
    event_id: UUID
    timestamp: float
    phase: ContextPhase
    component: str
    success: bool
    duration_ms: float
    error: Optional[str] = None
    error_type: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def success_event(
        cls,
        phase: ContextPhase,
        component: str,
        duration_ms: float,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> "LifecycleEvent":
        """Factory for successful lifecycle events."""
        return cls(
            event_id=uuid4(),
            timestamp=time.time(),
            phase=phase,
            component=component,
            success=True,
            duration_ms=duration_ms,
            metadata=metadata or {},
        )

    @classmethod
    def failure_event(
        cls,
        phase: ContextPhase,
        component: str,
        error: BaseException,
        duration_ms: float = 0,
    ) -> "LifecycleEvent":
        """Factory for failed lifecycle events."""
        return cls(
            event_id=uuid4(),
            timestamp=time.time(),
            phase=phase,
            component=component,
            success=False,
            duration_ms=duration_ms,
            error=str(error),
            error_type=type(error).__name__,
        )


class ContainerContext:
    """
    Bootstrap driver around a component factory.

    Responsibilities:
        - Collect externally supplied extensions
        - Run definition and configuration extensions
        - Register lifecycle hooks
        - Pre-instantiate singletons
        - Multicast container events to listener components
    """

    def __init__(
        self,
        factory: Optional["IComponentFactory"] = None,
        config: Union[Config, ContainerConfig, None] = None,
        context_id: Optional[str] = None,
    ):
        # A full Config also carries logging and tracing, applied here.
        if isinstance(config, Config):
            config.setup_observability()
            config = config.container
        self._config = config or get_config().container
        if factory is None:
            from di.factory import DefaultComponentFactory

            factory = DefaultComponentFactory(
                allow_descriptor_overriding=self._config.allow_descriptor_overriding
            )
        self._factory = factory
        self._phase = ContextPhase.CREATED
        self._extensions: List[ConfigurationMutatingExtension] = []
        self._listeners: List[ApplicationListener] = []
        self._lifecycle_events: List[LifecycleEvent] = []
        self._context_id = context_id or uuid4().hex[:12]
        self.checker: Optional[DiagnosticCheckerHook] = None
        self.extension_summary: Optional[ExtensionRunSummary] = None

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def factory(self) -> "IComponentFactory":
        return self._factory

    @property
    def phase(self) -> ContextPhase:
        return self._phase

    @property
    def context_id(self) -> str:
        return self._context_id

    @property
    def is_active(self) -> bool:
        return self._phase == ContextPhase.ACTIVE

    @property
    def extensions(self) -> List[ConfigurationMutatingExtension]:
        return list(self._extensions)

    @property
    def listeners(self) -> List[ApplicationListener]:
        return list(self._listeners)

    # -------------------------------------------------------------------------
    # Registration
    # -------------------------------------------------------------------------

    def add_extension(self, extension: ConfigurationMutatingExtension) -> "ContainerContext":
        """Supply an extension instance directly; it runs before registered ones."""
        self._require_phase(ContextPhase.CREATED, "add extensions")
        self._extensions.append(extension)
        return self

    def register(self, name: str, descriptor: ComponentDescriptor) -> "ContainerContext":
        """Register a descriptor with the underlying registry."""
        if not isinstance(self._factory, IDescriptorRegistry):
            raise ContextStateError("The context's factory does not accept descriptors")
        self._factory.register_descriptor(name, descriptor)
        return self

    def add_listener(self, listener: ApplicationListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def remove_listener(self, listener: ApplicationListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def refresh(self) -> "ContainerContext":
        """Run the full bootstrap. A context can be refreshed only once."""
        self._require_phase(ContextPhase.CREATED, "refresh")
        self._phase = ContextPhase.REFRESHING
        start = time.time()

        with LogContext(context_id=self._context_id):
            logger.info("Refreshing container context", supplied_extensions=len(self._extensions))
            try:
                self._run_step("prepare_factory", self._prepare_factory)
                self.extension_summary = self._run_step(
                    "container_extensions",
                    lambda: invoke_container_extensions(self._factory, self._extensions),
                )
                self.checker = self._run_step(
                    "lifecycle_hooks",
                    lambda: register_lifecycle_hooks(
                        self._factory,
                        self,
                        report_early_components=self._config.report_early_components,
                    ),
                )
                if self._config.preinstantiate_singletons:
                    self._run_step("singletons", self._preinstantiate_singletons)
                self.publish_event(ContextRefreshedEvent(source=self))
            except Exception:
                self._phase = ContextPhase.FAILED
                logger.error("Container context refresh failed", exc_info=True)
                raise

            self._phase = ContextPhase.ACTIVE
            logger.info(
                "Container context refreshed",
                duration_ms=round((time.time() - start) * 1000, 2),
                lifecycle_hooks=self._factory.current_lifecycle_hook_count(),
            )
        return self

    def _prepare_factory(self) -> None:
        if isinstance(self._factory, IDescriptorRegistry) and not self._factory.contains_descriptor(
            CONTEXT_COMPONENT_NAME
        ):
            self._factory.register_descriptor(
                CONTEXT_COMPONENT_NAME,
                ComponentDescriptor(instance=self, role=ComponentRole.INFRASTRUCTURE),
            )
        # Detect listeners created while extensions run; moved to the chain end later.
        self._factory.add_lifecycle_hook(ListenerDetectorHook(self))

    def _preinstantiate_singletons(self) -> List[str]:
        with create_span("bootstrap.singletons") as span:
            created = self._factory.preinstantiate_singletons()
            span.set_attribute("singletons.created", len(created))
        return created

    def _run_step(self, component: str, step: Callable[[], T]) -> T:
        start = time.time()
        try:
            result = step()
        except Exception as e:
            self._record_event(
                LifecycleEvent.failure_event(
                    phase=self._phase,
                    component=component,
                    error=e,
                    duration_ms=(time.time() - start) * 1000,
                )
            )
            if isinstance(e, ContainerError):
                e.with_context(context_id=self._context_id, step=component)
            raise
        self._record_event(
            LifecycleEvent.success_event(
                phase=self._phase,
                component=component,
                duration_ms=(time.time() - start) * 1000,
            )
        )
        return result

    def publish_event(self, event: ContainerEvent) -> None:
        """Deliver ``event`` to every registered listener, in registration order."""
        for listener in list(self._listeners):
            listener.on_event(event)

    def get_component(self, name: str) -> Any:
        self._require_phase(ContextPhase.ACTIVE, "look up components")
        return self._factory.instantiate(name)

    def close(self) -> None:
        """
        Publish the close event and destroy singletons. Safe to call twice.

        A listener failing on the close event is logged and does not stop
        singleton destruction. The context ends up CLOSED whatever happens.
        """
        if self._phase in (ContextPhase.CLOSED, ContextPhase.CREATED):
            self._phase = ContextPhase.CLOSED
            return
        try:
            if self._phase == ContextPhase.ACTIVE:
                try:
                    self.publish_event(ContextClosedEvent(source=self))
                except Exception:
                    logger.warning("Listener failed on context close", exc_info=True)
            destroy = getattr(self._factory, "destroy_singletons", None)
            if destroy is not None:
                self._run_step("destroy_singletons", destroy)
        finally:
            self._listeners.clear()
            self._phase = ContextPhase.CLOSED
            logger.info("Container context closed", context_id=self._context_id)

    def __enter__(self) -> "ContainerContext":
        if self._phase == ContextPhase.CREATED:
            self.refresh()
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def _require_phase(self, phase: ContextPhase, action: str) -> None:
        if self._phase != phase:
            raise ContextStateError(
                f"Cannot {action} while context is {self._phase.value}; expected {phase.value}"
            )

    def _record_event(self, event: LifecycleEvent) -> None:
        self._lifecycle_events.append(event)

        if event.success:
            logger.debug("Bootstrap step completed", step=event.component, duration_ms=event.duration_ms)
        else:
            logger.warning("Bootstrap step failed", step=event.component, error=event.error)

    def get_lifecycle_report(self) -> Dict[str, Any]:
        """Report of every recorded bootstrap step."""
        return {
            "context_id": self._context_id,
            "phase": self._phase.value,
            "events": [
                {
                    "event_id": str(e.event_id),
                    "timestamp": e.timestamp,
                    "phase": e.phase.value,
                    "component": e.component,
                    "success": e.success,
                    "duration_ms": e.duration_ms,
                    "error": e.error,
                    "error_type": e.error_type,
                }
                for e in self._lifecycle_events
            ],
            "total_events": len(self._lifecycle_events),
            "failed_events": sum(1 for e in self._lifecycle_events if not e.success),
            "listeners": len(self._listeners),
            "early_components": [r.component_name for r in self.checker.reports] if self.checker else [],
        }
