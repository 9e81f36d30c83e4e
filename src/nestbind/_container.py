from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Protocol, TypeVar, cast, overload

from ._descriptors import SignatureDescriptors
from ._errors import ContainerError, describe_token
from ._mapper import Mapper
from ._registry import TypeRegistry
from ._resolver import Resolver


logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

    from ._descriptors import DescriptorProvider

    T = TypeVar("T")


class ContainerProtocol(Protocol):
    """What objects can rely on when they declare a dependency on the container."""

    def get(self, token: Any) -> Any: ...

    def create(self, token: Any) -> Any: ...

    def has(self, token: Any) -> bool: ...

    def map_instance(self, token: Any, instance: object) -> None: ...

    def map_factory(self, token: Any, factory: Callable[[Container], object]) -> None: ...

    def map_type(self, token: type, subtype: type) -> None: ...

    def remove(self, token: Any) -> None: ...

    def reset(self) -> None: ...


class Container:
    """Hierarchical DI container.

    - map instances, factories or subtypes to types
    - resolve with constructor injection, one instance per type and container
    - fall back to the parent container for anything not mapped locally
    - `has`, `remove` and `reset` also reach the children.

    Example:
      container = Container()
      container.map_type(Repository, SqlRepository)
      service = container.get(Service)

    """

    def __init__(self, *, descriptors: DescriptorProvider | None = None) -> None:
        # shared by every container of the hierarchy; replaced by the parent's on attach
        self._tree_lock = threading.RLock()
        self._registry = TypeRegistry()
        self._parent: Container | None = None
        self._children: list[Container] = []
        self._descriptors: DescriptorProvider = descriptors or SignatureDescriptors()
        self._resolver = Resolver(self, self._registry, self._locked)
        self._mapper = Mapper(self, self._registry, self._locked)
        self._bootstrap()

    @property
    def parent(self) -> Container | None:
        return self._parent

    @property
    def children(self) -> tuple[Container, ...]:
        with self._locked():
            return tuple(self._children)

    @property
    def descriptors(self) -> DescriptorProvider:
        return self._descriptors

    @overload
    def get(self, token: type[T]) -> T: ...

    @overload
    def get(self, token: Any) -> object: ...

    def get(self, token: Any) -> object:
        """Return the shared instance for `token`, creating and caching it on first request.

        Looks in this container, then in its ancestors; when nobody maps the
        type, it is constructed here by resolving its constructor parameters.
        """
        if token is None:
            raise ContainerError.null_argument("type")

        return self._resolver.get(token)

    @overload
    def create(self, token: type[T]) -> T: ...

    @overload
    def create(self, token: Any) -> object: ...

    def create(self, token: Any) -> object:
        """Construct a new instance of `token`, ignoring mappings for it. Never cached."""
        if token is None:
            raise ContainerError.null_argument("type")

        return self._resolver.create(token)

    def has(self, token: Any) -> bool:
        """Whether this container or one of its descendants has an instance or mapping for `token`."""
        if token is None:
            return False

        with self._locked():
            return token in self._registry or any(child.has(token) for child in self._children)

    def map_instance(self, token: Any, instance: object) -> None:
        """Map `token` to a pre-built instance."""
        self._mapper.map_instance(token, instance)

    def map_factory(self, token: Any, factory: Callable[[Container], object]) -> None:
        """Map `token` to a factory, called once with this container on first request.

        Example:
          container.map_factory(Database, lambda c: Database(c.get(Settings).dsn))

        """
        self._mapper.map_factory(token, factory)

    def map_type(self, token: type, subtype: type) -> None:
        """Map `token` to a strict subtype, resolved (or constructed) whenever `token` is requested."""
        self._mapper.map_type(token, subtype)

    def remove(self, token: Any) -> None:
        """Remove the mapping and instance for `token` here and in every descendant."""
        if token is None:
            raise ContainerError.null_argument("type")

        with self._locked():
            # children first
            for child in self._children:
                child.remove(token)

            removed = self._registry.discard(token)

        if removed:
            logger.debug("Removed %s", describe_token(token))

    def reset(self) -> None:
        """Clear all mappings and instances, here and in every descendant.

        The container stays usable afterwards and still resolves itself.
        """
        with self._locked():
            for child in self._children:
                child.reset()

            self._registry.clear()
            self._bootstrap()

        logger.debug("Container %#x reset", id(self))

    def add_child(self, child: Container) -> None:
        """Attach `child`; it resolves through this container for anything it doesn't map itself.

        From then on `child` and its descendants share this hierarchy's lock.
        """
        if child is None:
            raise ContainerError.null_argument("child")

        if _default is not None and child is _default:
            raise ContainerError.child_cannot_be_default()

        # Two separate hierarchies are locked here, so attaching is serialized
        # process-wide to keep concurrent add_child calls from locking them in
        # opposite orders.
        with _attach_lock, self._locked(), child._locked():  # noqa: SLF001
            node: Container | None = self
            while node is not None:
                if node is child:
                    raise ContainerError.cyclic_hierarchy()
                node = node._parent  # noqa: SLF001

            if child._parent is not None:  # noqa: SLF001
                raise ContainerError.child_already_attached()

            for token in child._registry.mappings:  # noqa: SLF001
                if self.has(token):
                    raise ContainerError.mapping_already_exists(token)

            for member in child._subtree():  # noqa: SLF001
                member._tree_lock = self._tree_lock  # noqa: SLF001
            child._parent = self  # noqa: SLF001
            self._children.append(child)

        logger.debug("Container %#x added as child of %#x", id(child), id(self))

    def create_child(self) -> Container:
        """Create a container that falls back to this one, sharing its descriptor provider."""
        child = type(self)(descriptors=self._descriptors)
        self.add_child(child)
        return child

    @contextmanager
    def _locked(self) -> Iterator[None]:
        # The lock can be swapped by add_child while we wait for it; retry on the new one.
        while True:
            lock = self._tree_lock
            lock.acquire()
            if lock is self._tree_lock:
                break
            lock.release()

        try:
            yield
        finally:
            lock.release()

    def _subtree(self) -> Iterator[Container]:
        yield self
        for child in self._children:
            yield from child._subtree()  # noqa: SLF001

    def _bootstrap(self) -> None:
        # the container resolves itself, so objects can depend on it
        instances = self._registry.instances
        instances[Container] = self
        instances[ContainerProtocol] = self
        instances[type(self)] = self


_attach_lock = threading.Lock()

_default: Container | None = None
_default_lock = threading.Lock()


def get_default() -> Container:
    """Process-wide container, created on first access."""
    global _default  # noqa: PLW0603

    if _default is None:
        with _default_lock:
            if _default is None:
                _default = Container()
                logger.debug("Created default container %#x", id(_default))

    return cast("Container", _default)


def clear_default() -> None:
    """Forget the process-wide container; the next `get_default()` creates a new one."""
    global _default  # noqa: PLW0603

    with _default_lock:
        _default = None
