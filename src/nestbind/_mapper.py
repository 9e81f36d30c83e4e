from __future__ import annotations

import inspect
import logging
from typing import TYPE_CHECKING, Any

from ._errors import ContainerError, describe_token
from ._registry import FactoryMapping, InstanceMapping, SubtypeMapping
from ._typecheck import is_instance, is_subtype


if TYPE_CHECKING:
    from collections.abc import Callable
    from contextlib import AbstractContextManager

    from ._container import Container
    from ._registry import Mapping, TypeRegistry


logger = logging.getLogger(__name__)


def _require(value: object, name: str) -> None:
    if value is None:
        raise ContainerError.null_argument(name)


class Mapper:
    """Validates mappings and installs them into one container node."""

    def __init__(
        self,
        node: Container,
        registry: TypeRegistry,
        locked: Callable[[], AbstractContextManager[None]],
    ) -> None:
        self._node = node
        self._registry = registry
        self._locked = locked

    def map_instance(self, token: Any, instance: object) -> None:
        _require(token, "type")
        _require(instance, "instance")

        # Non-type tokens (like strings) cannot be validated.
        if inspect.isclass(token) and not is_instance(instance, token):
            raise ContainerError.not_an_instance_of_type(token, instance)

        self._install(token, InstanceMapping(instance))

    def map_factory(self, token: Any, factory: Callable[[Container], object]) -> None:
        _require(token, "type")
        _require(factory, "factory")

        if not callable(factory):
            msg = f"Factory for {describe_token(token)} must be callable, got {type(factory).__name__}"
            raise TypeError(msg)

        self._install(token, FactoryMapping(factory))

    def map_type(self, token: Any, subtype: Any) -> None:
        _require(token, "type")
        _require(subtype, "subtype")

        if not (inspect.isclass(token) and inspect.isclass(subtype)):
            raise ContainerError.not_a_subtype(token, subtype)

        if subtype is token or not is_subtype(subtype, token):
            raise ContainerError.not_a_subtype(token, subtype)

        with self._locked():
            # `subtype` may link on to another mapping on this node, in which
            # case it does not need to be instantiable itself.
            if not self._links_on(self._registry.mappings.get(subtype), token):
                self._node.descriptors.describe(subtype)

            self._install(token, SubtypeMapping(subtype))

    def _links_on(self, mapping: Mapping | None, token: type) -> bool:
        if mapping is None:
            return False

        if isinstance(mapping, SubtypeMapping):
            return is_subtype(mapping.subtype, token)

        return True

    def _install(self, token: Any, mapping: Mapping) -> None:
        with self._locked():
            # `has` also sees the children, so a mapping can't shadow one made below.
            if self._node.has(token):
                raise ContainerError.mapping_already_exists(token)

            self._registry.mappings[token] = mapping

        logger.debug("Mapped %s to %s", describe_token(token), type(mapping).__name__)
