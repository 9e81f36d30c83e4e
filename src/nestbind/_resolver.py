from __future__ import annotations

import inspect
import logging
from contextlib import contextmanager
from contextvars import ContextVar
from typing import TYPE_CHECKING, Any

from ._errors import ContainerError, describe_token
from ._registry import FactoryMapping, InstanceMapping
from ._typecheck import is_instance


if TYPE_CHECKING:
    from collections.abc import Callable, Iterator
    from contextlib import AbstractContextManager

    from ._container import Container
    from ._descriptors import Dependency
    from ._registry import Mapping, TypeRegistry


logger = logging.getLogger(__name__)

# Tokens currently being resolved on this call stack, outermost first.
_in_progress: ContextVar[tuple[Any, ...]] = ContextVar("nestbind_in_progress", default=())

_MISSING = object()


@contextmanager
def _resolving(token: Any) -> Iterator[None]:
    chain = _in_progress.get()
    if token in chain:
        raise ContainerError.circular_dependency((*chain, token))

    reset_token = _in_progress.set((*chain, token))
    try:
        yield
    finally:
        _in_progress.reset(reset_token)


class Resolver:
    """Produces instances for one container node.

    Resolution order:
    1. singleton cached on this node
    2. mapping on this node (the result is cached here)
    3. the same lookup on each ancestor, nearest first (cached on the ancestor)
    4. automatic construction on this node (cached here).
    """

    def __init__(
        self,
        node: Container,
        registry: TypeRegistry,
        locked: Callable[[], AbstractContextManager[None]],
    ) -> None:
        self._node = node
        self._registry = registry
        self._locked = locked

    def get(self, token: Any) -> object:
        with self._locked(), _resolving(token):
            instance = self.lookup(token)
            if instance is not _MISSING:
                return instance

            if not inspect.isclass(token):
                raise ContainerError.type_not_registered(token)

            instance = self.construct(token)
            self._registry.instances[token] = instance
            return instance

    def create(self, token: Any) -> object:
        with self._locked(), _resolving(token):
            return self.construct(token)

    def lookup(self, token: Any) -> object:
        """Find or produce `token` on this node or its ancestors; `_MISSING` when nobody maps it."""
        instance = self._lookup_local(token)
        if instance is not _MISSING:
            return instance

        parent = self._node.parent
        if parent is None:
            return _MISSING

        return parent._resolver.lookup(token)  # noqa: SLF001

    def is_known(self, token: Any) -> bool:
        """Whether this node or an ancestor holds an instance or mapping for `token`."""
        node: Container | None = self._node
        while node is not None:
            if node._resolver._holds(token):  # noqa: SLF001
                return True
            node = node.parent
        return False

    def construct(self, token: Any) -> object:
        """Build a fresh `token` from its constructor, resolving dependencies on this node."""
        descriptor = self._node.descriptors.describe(token)

        arguments: dict[str, Any] = {}
        for dep in descriptor.dependencies:
            if self._is_injectable(dep):
                arguments[dep.name] = self._node.get(dep.annotation)
            elif not dep.has_default:
                ann_repr = describe_token(dep.annotation)
                msg = f"cannot satisfy constructor parameter '{dep.name}' (annotation: {ann_repr})"
                raise ContainerError.type_not_instantiable(token, msg)

        logger.debug("Constructing %s with %s", describe_token(token), sorted(arguments))
        return descriptor.invoke(arguments)

    def _holds(self, token: Any) -> bool:
        with self._locked():
            return token in self._registry

    def _lookup_local(self, token: Any) -> object:
        with self._locked():
            if token in self._registry.instances:
                return self._registry.instances[token]

            mapping = self._registry.mappings.get(token)
            if mapping is None:
                return _MISSING

            instance = self._produce(token, mapping)
            self._registry.instances[token] = instance
            return instance

    def _produce(self, token: Any, mapping: Mapping) -> object:
        if isinstance(mapping, InstanceMapping):
            return mapping.instance

        if isinstance(mapping, FactoryMapping):
            instance = mapping.factory(self._node)
            if instance is None or (inspect.isclass(token) and not is_instance(instance, token)):
                raise ContainerError.factory_incorrect_result(token, instance)
            return instance

        # subtype mapping: follow it as a regular request on this node
        return self._node.get(mapping.subtype)

    def _is_injectable(self, dep: Dependency) -> bool:
        ann = dep.annotation
        if ann is inspect.Parameter.empty:
            return False

        if inspect.isclass(ann) and getattr(ann, "__module__", "") != "builtins":
            return True

        try:
            return self.is_known(ann)
        except TypeError:
            # unhashable annotation
            return False
