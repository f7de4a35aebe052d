"""
Armature - Bootstrap Extension Pipeline

The two entry points a container bootstrap driver calls, in this order:

    invoke_container_extensions(factory, supplied)   # descriptors, then configuration
    register_lifecycle_hooks(factory, context)       # hook chain for instance creation

Each phase runs in its own tracing span. Errors raised by extensions are
propagated unchanged; there is no partial-result recovery.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Sequence, Set

from core.capabilities import ConfigurationMutatingExtension
from core.checker import DiagnosticCheckerHook
from core.configuration_runner import ConfigurationExtensionRunner
from core.definition_runner import DefinitionExtensionRunner
from core.hook_registrar import LifecycleHookRegistrar
from core.listeners import ListenerRegistry
from core.ordering import OrderingService
from di.interfaces import IDescriptorRegistry
from observability.logging import get_logger
from observability.tracing import create_span

if TYPE_CHECKING:
    from di.interfaces import IComponentFactory

logger = get_logger("armature.core.pipeline")


@dataclass
class ExtensionRunSummary:
    """What a call to ``invoke_container_extensions`` did."""

    processed: Set[str] = field(default_factory=set)
    definition_invoked: int = 0
    configuration_invoked: int = 0
    fixpoint_passes: int = 0


def invoke_container_extensions(
    factory: "IComponentFactory",
    supplied: Sequence[ConfigurationMutatingExtension] = (),
) -> ExtensionRunSummary:
    """
    Run definition-mutating and then configuration-mutating extensions.

    ``supplied`` are extension instances handed over by the caller rather than
    registered as descriptors; they run first, in the given order.
    """
    summary = ExtensionRunSummary()
    ordering = OrderingService(factory)

    with create_span("bootstrap.definition_extensions") as span:
        if isinstance(factory, IDescriptorRegistry):
            runner = DefinitionExtensionRunner(factory, ordering, summary.processed)
            runner.run(factory, supplied)
            summary.definition_invoked = len(runner.invoked)
            summary.fixpoint_passes = runner.passes
        else:
            # Without a registry only the configuration callbacks apply.
            for extension in supplied:
                extension.apply(factory)
        span.set_attribute("extensions.invoked", summary.definition_invoked)
        span.set_attribute("extensions.fixpoint_passes", summary.fixpoint_passes)

    with create_span("bootstrap.configuration_extensions") as span:
        config_runner = ConfigurationExtensionRunner(factory, ordering)
        config_runner.run(summary.processed)
        summary.configuration_invoked = len(config_runner.invoked)
        span.set_attribute("extensions.invoked", summary.configuration_invoked)

    logger.info(
        "Container extensions invoked",
        definition=summary.definition_invoked,
        configuration=summary.configuration_invoked,
        supplied=len(supplied),
    )
    return summary


def register_lifecycle_hooks(
    factory: "IComponentFactory",
    context: ListenerRegistry,
    report_early_components: bool = True,
) -> DiagnosticCheckerHook:
    """Register every lifecycle hook; returns the checker installed for this bootstrap."""
    with create_span("bootstrap.lifecycle_hooks") as span:
        registrar = LifecycleHookRegistrar(
            factory, report_early_components=report_early_components
        )
        checker = registrar.register(context)
        span.set_attribute("hooks.count", factory.current_lifecycle_hook_count())
        span.set_attribute("hooks.internal", len(registrar.internal))
    return checker
