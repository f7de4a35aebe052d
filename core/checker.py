"""
Armature - Early Component Checker

Lifecycle hook that reports components created while the hook chain is still
being assembled. Such components miss the hooks registered after them (for
example, they will not be wrapped by a proxying hook).
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, List

from core.capabilities import Capability, LifecycleHook, has_capability
from observability.logging import get_logger

if TYPE_CHECKING:
    from di.interfaces import IComponentFactory

logger = get_logger("armature.core.checker")


@dataclass(frozen=True)
class EarlyComponentReport:
    """A component that was not processed by every lifecycle hook."""

    component_name: str
    component_type: str


class DiagnosticCheckerHook(LifecycleHook):
    """Purely observational: both callbacks return the component unchanged."""

    def __init__(
        self,
        factory: "IComponentFactory",
        target_hook_count: int,
        log_reports: bool = True,
    ) -> None:
        self._factory = factory
        self.target_hook_count = target_hook_count
        self.log_reports = log_reports
        self.reports: List[EarlyComponentReport] = []

    def after_init(self, component: Any, name: str) -> Any:
        if (
            not has_capability(component, Capability.LIFECYCLE_HOOK)
            and not self._is_infrastructure(name)
            and self._factory.current_lifecycle_hook_count() < self.target_hook_count
        ):
            report = EarlyComponentReport(
                component_name=name,
                component_type=f"{type(component).__module__}.{type(component).__qualname__}",
            )
            self.reports.append(report)
            if self.log_reports:
                logger.info(
                    "Component is not eligible for getting processed by all lifecycle hooks",
                    component=report.component_name,
                    type=report.component_type,
                )
        return component

    def _is_infrastructure(self, name: str) -> bool:
        if name and self._factory.contains_descriptor(name):
            return self._factory.get_descriptor(name).is_infrastructure
        return False
