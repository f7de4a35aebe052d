"""
Armature - Extension Ordering

Classifies extensions into priority tiers and sorts them within a tier.
"""
from __future__ import annotations

import functools
from enum import Enum
from typing import TYPE_CHECKING, Any, List, Optional, TypeVar

from core.capabilities import Capability, get_order, has_capability

if TYPE_CHECKING:
    from di.interfaces import Comparator, IComponentFactory

T = TypeVar("T")


class OrderingCategory(Enum):
    """Priority tier an extension belongs to. Earlier members run first."""

    PRIORITY_ORDERED = "priority_ordered"
    ORDERED = "ordered"
    PLAIN = "plain"


def order_comparator(left: Any, right: Any) -> int:
    """
    Default comparator.

    Priority-ordered objects come before everything else, then declared rank
    ascending. Objects without a rank compare as lowest precedence.
    """
    left_priority = has_capability(left, Capability.PRIORITY_ORDERED)
    right_priority = has_capability(right, Capability.PRIORITY_ORDERED)
    if left_priority and not right_priority:
        return -1
    if right_priority and not left_priority:
        return 1
    left_order = get_order(left)
    right_order = get_order(right)
    return (left_order > right_order) - (left_order < right_order)


class OrderingService:
    """
    Tier classification and sorting bound to one factory.

    The factory may supply a dependency-aware comparator that replaces the
    default one for every sort.
    """

    def __init__(self, factory: Optional["IComponentFactory"] = None) -> None:
        self._factory = factory

    @staticmethod
    def classify(extension: Any) -> OrderingCategory:
        """Tier of an extension instance or class."""
        if has_capability(extension, Capability.PRIORITY_ORDERED):
            return OrderingCategory.PRIORITY_ORDERED
        if has_capability(extension, Capability.ORDERED):
            return OrderingCategory.ORDERED
        return OrderingCategory.PLAIN

    def classify_name(self, name: str) -> OrderingCategory:
        """Tier of a registered extension, decided without instantiating it."""
        if self._factory.is_assignable_to(name, Capability.PRIORITY_ORDERED):
            return OrderingCategory.PRIORITY_ORDERED
        if self._factory.is_assignable_to(name, Capability.ORDERED):
            return OrderingCategory.ORDERED
        return OrderingCategory.PLAIN

    def comparator(self) -> "Comparator":
        custom = None
        if self._factory is not None:
            custom = self._factory.dependency_aware_comparator()
        return custom or order_comparator

    def sort(self, extensions: List[T]) -> List[T]:
        """Sort in place (stable) and return the same list."""
        if len(extensions) <= 1:
            return extensions
        extensions.sort(key=functools.cmp_to_key(self.comparator()))
        return extensions
