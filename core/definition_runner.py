"""
Armature - Definition-Mutating Extension Runner

Runs every definition-mutating extension exactly once, in three priority
tiers followed by a fixpoint pass that picks up extensions registered by
earlier ones. Once the registry stops growing, the configuration callback of
every invoked extension runs, followed by the caller's plain extensions.

Lookups never allow eager initialization: application components must stay
uncreated until all descriptors are final.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, List, Optional, Sequence, Set

from core.capabilities import (
    Capability,
    ConfigurationMutatingExtension,
    DefinitionMutatingExtension,
    has_capability,
)
from core.ordering import OrderingService
from observability.logging import get_logger

if TYPE_CHECKING:
    from di.interfaces import IComponentFactory, IDescriptorRegistry

logger = get_logger("armature.core.definition_runner")


class DefinitionExtensionRunner:
    """
    Invokes definition-mutating extensions against a registry.

    ``processed`` collects the names of registered extensions invoked by this
    runner. Pass the same set on to the configuration runner so no extension
    is applied twice in one bootstrap.
    """

    def __init__(
        self,
        factory: "IComponentFactory",
        ordering: Optional[OrderingService] = None,
        processed: Optional[Set[str]] = None,
    ) -> None:
        self._factory = factory
        self._ordering = ordering or OrderingService(factory)
        self.processed: Set[str] = processed if processed is not None else set()
        self.invoked: List[DefinitionMutatingExtension] = []
        self.passes: int = 0

    def run(
        self,
        registry: "IDescriptorRegistry",
        externally_supplied: Sequence[ConfigurationMutatingExtension],
    ) -> None:
        plain: List[ConfigurationMutatingExtension] = []
        for extension in externally_supplied:
            if has_capability(extension, Capability.DEFINITION_MUTATING):
                self._mutate(extension, registry, type(extension).__qualname__)
                self.invoked.append(extension)
            else:
                plain.append(extension)

        priority = self._collect(
            lambda name: self._factory.is_assignable_to(name, Capability.PRIORITY_ORDERED)
        )
        self._invoke_tier("priority_ordered", priority, registry)

        ordered = self._collect(
            lambda name: self._factory.is_assignable_to(name, Capability.ORDERED)
        )
        self._invoke_tier("ordered", ordered, registry)

        # Invoke the rest until no further ones appear.
        while True:
            remaining = self._collect(lambda name: True)
            if not remaining:
                break
            self.passes += 1
            self._invoke_tier("remaining", remaining, registry)

        logger.debug(
            "Definition-mutating extensions finished",
            invoked=len(self.invoked),
            fixpoint_passes=self.passes,
        )
        self._apply(self.invoked)
        self._apply(plain)

    def _collect(self, predicate: Callable[[str], bool]) -> List[Any]:
        """Materialize unprocessed matching extensions, marking each as processed."""
        names = self._factory.lookup_by_capability(
            Capability.DEFINITION_MUTATING, include_non_singletons=True, allow_eager_init=False
        )
        current = []
        for name in names:
            if name in self.processed or not predicate(name):
                continue
            self.processed.add(name)
            current.append((name, self._factory.instantiate(name, Capability.DEFINITION_MUTATING)))
        return current

    def _invoke_tier(self, tier: str, current: List[Any], registry: "IDescriptorRegistry") -> None:
        if not current:
            return
        # Sort instances, keeping each paired with its registry name.
        by_identity = {id(extension): name for name, extension in current}
        extensions = self._ordering.sort([extension for _, extension in current])
        logger.debug(
            "Invoking definition-mutating tier",
            tier=tier,
            extensions=[by_identity[id(e)] for e in extensions],
        )
        for extension in extensions:
            self._mutate(extension, registry, by_identity[id(extension)])
            self.invoked.append(extension)

    def _mutate(self, extension: DefinitionMutatingExtension, registry: "IDescriptorRegistry", label: str) -> None:
        try:
            extension.mutate_registry(registry)
        except Exception:
            logger.error("Definition-mutating extension failed", extension=label, exc_info=True)
            raise

    def _apply(self, extensions: Sequence[ConfigurationMutatingExtension]) -> None:
        for extension in extensions:
            try:
                extension.apply(self._factory)
            except Exception:
                logger.error(
                    "Configuration callback failed",
                    extension=type(extension).__qualname__,
                    exc_info=True,
                )
                raise
