"""
Armature - Lifecycle Hook Registration

Discovers registered lifecycle hooks, orders them by priority tier and adds
them to the factory's hook chain. Hooks that also inspect merged descriptors
are registered a second time after all tiers, and a listener detector built
from the container context always closes the chain.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Dict, List, Optional, Sequence

from core.capabilities import Capability, LifecycleHook, has_capability
from core.checker import DiagnosticCheckerHook
from core.listeners import ListenerDetectorHook, ListenerRegistry
from core.ordering import OrderingCategory, OrderingService
from observability.logging import get_logger

if TYPE_CHECKING:
    from di.interfaces import IComponentFactory

logger = get_logger("armature.core.hook_registrar")


class LifecycleHookRegistrar:
    """One-shot registration of every lifecycle hook known to a factory."""

    def __init__(
        self,
        factory: "IComponentFactory",
        ordering: Optional[OrderingService] = None,
        report_early_components: bool = True,
    ) -> None:
        self._factory = factory
        self._ordering = ordering or OrderingService(factory)
        self._report_early_components = report_early_components
        self.checker: Optional[DiagnosticCheckerHook] = None
        self.internal: List[LifecycleHook] = []

    def register(self, container_context: ListenerRegistry) -> DiagnosticCheckerHook:
        factory = self._factory
        names = factory.lookup_by_capability(
            Capability.LIFECYCLE_HOOK, include_non_singletons=True, allow_eager_init=False
        )

        target = factory.current_lifecycle_hook_count() + 1 + len(names)
        self.checker = DiagnosticCheckerHook(
            factory, target, log_reports=self._report_early_components
        )
        factory.add_lifecycle_hook(self.checker)

        tiers: Dict[OrderingCategory, List[str]] = {category: [] for category in OrderingCategory}
        for name in names:
            tiers[self._ordering.classify_name(name)].append(name)

        for category in OrderingCategory:
            hooks = [self._materialize(name) for name in tiers[category]]
            if category is not OrderingCategory.PLAIN:
                self._ordering.sort(hooks)
            self._add_all(hooks)
            logger.debug("Registered lifecycle hook tier", tier=category.value, hooks=tiers[category])

        # Re-register internal hooks so they follow every tier.
        self._ordering.sort(self.internal)
        self._add_all(self.internal)

        factory.add_lifecycle_hook(ListenerDetectorHook(container_context))
        logger.debug(
            "Lifecycle hooks registered",
            discovered=len(names),
            internal=len(self.internal),
            chain_length=factory.current_lifecycle_hook_count(),
        )
        return self.checker

    def _materialize(self, name: str) -> LifecycleHook:
        hook = self._factory.instantiate(name, Capability.LIFECYCLE_HOOK)
        if has_capability(hook, Capability.MERGED_DESCRIPTOR_HOOK):
            self.internal.append(hook)
        return hook

    def _add_all(self, hooks: Sequence[LifecycleHook]) -> None:
        for hook in hooks:
            self._factory.add_lifecycle_hook(hook)
