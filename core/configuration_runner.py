"""
Armature - Configuration-Mutating Extension Runner

Single pass over the registered configuration-mutating extensions that the
definition runner has not already handled. A configuration-mutating
extension that only appears because another one registered it during this
pass is never invoked.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, AbstractSet, Dict, List, Optional

from core.capabilities import Capability, ConfigurationMutatingExtension
from core.ordering import OrderingCategory, OrderingService
from observability.logging import get_logger

if TYPE_CHECKING:
    from di.interfaces import IComponentFactory

logger = get_logger("armature.core.configuration_runner")


class ConfigurationExtensionRunner:
    """Invokes ``apply(factory)`` tier by tier, then drops merged metadata."""

    def __init__(
        self,
        factory: "IComponentFactory",
        ordering: Optional[OrderingService] = None,
    ) -> None:
        self._factory = factory
        self._ordering = ordering or OrderingService(factory)
        self.invoked: List[ConfigurationMutatingExtension] = []

    def run(self, processed: AbstractSet[str] = frozenset()) -> None:
        names = self._factory.lookup_by_capability(
            Capability.CONFIGURATION_MUTATING, include_non_singletons=True, allow_eager_init=False
        )

        tiers: Dict[OrderingCategory, List[str]] = {category: [] for category in OrderingCategory}
        for name in names:
            if name in processed:
                continue
            tiers[self._ordering.classify_name(name)].append(name)

        for category in OrderingCategory:
            extensions = [
                self._factory.instantiate(name, Capability.CONFIGURATION_MUTATING)
                for name in tiers[category]
            ]
            if category is not OrderingCategory.PLAIN:
                self._ordering.sort(extensions)
            if extensions:
                logger.debug(
                    "Invoking configuration-mutating tier",
                    tier=category.value,
                    extensions=tiers[category],
                )
            for extension in extensions:
                self._invoke(extension)

        # Extensions may have altered descriptor values.
        self._factory.invalidate_merged_metadata_cache()

    def _invoke(self, extension: ConfigurationMutatingExtension) -> None:
        try:
            extension.apply(self._factory)
        except Exception:
            logger.error(
                "Configuration-mutating extension failed",
                extension=type(extension).__qualname__,
                exc_info=True,
            )
            raise
        self.invoked.append(extension)
