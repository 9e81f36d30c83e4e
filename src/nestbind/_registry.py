from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Union


if TYPE_CHECKING:
    from collections.abc import Callable

    from ._container import Container


@dataclass(frozen=True)
class InstanceMapping:
    instance: object


@dataclass(frozen=True)
class FactoryMapping:
    factory: Callable[[Container], object]


@dataclass(frozen=True)
class SubtypeMapping:
    subtype: type


Mapping = Union[InstanceMapping, FactoryMapping, SubtypeMapping]


@dataclass
class TypeRegistry:
    """Per-container storage: singleton instances and type mappings.

    Not thread-safe on its own; the owning container guards it with its lock.
    """

    instances: dict[Any, object] = field(default_factory=dict)
    mappings: dict[Any, Mapping] = field(default_factory=dict)

    def __contains__(self, token: object) -> bool:
        return token in self.instances or token in self.mappings

    def registered_types(self) -> frozenset[Any]:
        return frozenset(self.instances) | frozenset(self.mappings)

    def discard(self, token: Any) -> bool:
        """Drop both the mapping and the cached instance; return whether anything was removed."""
        removed = token in self
        self.instances.pop(token, None)
        self.mappings.pop(token, None)
        return removed

    def clear(self) -> None:
        self.instances.clear()
        self.mappings.clear()
