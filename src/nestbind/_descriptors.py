"""Constructor descriptions used for automatic construction.

The resolver never inspects classes itself; it asks a `DescriptorProvider` for
a `TypeDescriptor` that lists the constructor's dependencies and knows how to
call it. `SignatureDescriptors` reads them from ``__init__`` signatures and
type hints, `RegisteredDescriptors` takes them from explicit registrations.
"""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol, get_type_hints

from ._errors import ContainerError
from ._typecheck import is_abstract, is_protocol


if TYPE_CHECKING:
    from collections.abc import Callable, Mapping


logger = logging.getLogger(__name__)

_VARIADIC = (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)


@dataclass(frozen=True)
class Dependency:
    """A constructor parameter.

    Attributes:
        name: Parameter name.
        annotation: The token to resolve, or ``inspect.Parameter.empty``.
        kind: The ``inspect.Parameter`` kind.
        default: Default value, or ``inspect.Parameter.empty``.
    """

    name: str
    annotation: Any
    kind: inspect._ParameterKind = inspect.Parameter.POSITIONAL_OR_KEYWORD
    default: Any = inspect.Parameter.empty

    @property
    def has_default(self) -> bool:
        return self.default is not inspect.Parameter.empty


@dataclass(frozen=True)
class TypeDescriptor:
    cls: type
    dependencies: tuple[Dependency, ...]
    constructor: Callable[..., object]

    def invoke(self, arguments: Mapping[str, Any]) -> object:
        """Call the constructor; dependencies missing from `arguments` fall back to their defaults."""
        args: list[Any] = []
        kwargs: dict[str, Any] = {}

        for dep in self.dependencies:
            if dep.name not in arguments:
                continue
            if dep.kind is inspect.Parameter.POSITIONAL_ONLY:
                args.append(arguments[dep.name])
            else:
                kwargs[dep.name] = arguments[dep.name]

        return self.constructor(*args, **kwargs)


class DescriptorProvider(Protocol):
    def describe(self, cls: type) -> TypeDescriptor:
        """Describe how to construct `cls`; raise ContainerError(TYPE_NOT_INSTANTIABLE) if it cannot be."""
        ...


def _check_constructible(cls: Any) -> None:
    if not inspect.isclass(cls):
        raise ContainerError.type_not_instantiable(cls, "not a class")
    if is_protocol(cls):
        raise ContainerError.type_not_instantiable(cls, "protocols cannot be instantiated")
    if is_abstract(cls):
        raise ContainerError.type_not_instantiable(cls, "abstract class")


class SignatureDescriptors:
    """Describe classes by reading their ``__init__`` signature and type hints."""

    def describe(self, cls: type) -> TypeDescriptor:
        _check_constructible(cls)

        try:
            sig = inspect.signature(cls)
        except ValueError:
            # some builtins and C extension types expose no signature
            return TypeDescriptor(cls, (), cls)
        except TypeError as e:
            raise ContainerError.type_not_instantiable(cls, f"no usable constructor ({e})") from e

        hints = self._annotations(cls)
        dependencies = []

        for name, p in sig.parameters.items():
            if p.kind in _VARIADIC:
                continue

            annotation = hints.get(name, inspect.Parameter.empty)
            if annotation is inspect.Parameter.empty and p.default is inspect.Parameter.empty:
                msg = f"constructor parameter '{name}' has neither a type annotation nor a default"
                raise ContainerError.type_not_instantiable(cls, msg)

            dependencies.append(Dependency(name, annotation, p.kind, p.default))

        return TypeDescriptor(cls, tuple(dependencies), cls)

    def _annotations(self, cls: type) -> dict[str, Any]:
        """Resolved ``__init__`` annotations. On an unresolvable forward reference only the string ones are dropped."""
        init = inspect.getattr_static(cls, "__init__")
        try:
            return get_type_hints(init)
        except TypeError:
            return {}
        except NameError as exc:
            logger.warning("Cannot resolve %r in %s.__init__ annotations", exc.name, cls.__qualname__)
            raw = getattr(init, "__annotations__", {})
            return {name: ann for name, ann in raw.items() if not isinstance(ann, str)}


class RegisteredDescriptors:
    """Descriptors registered by hand, for classes whose constructors should not be inspected.

    Example:
      descriptors = RegisteredDescriptors(fallback=SignatureDescriptors())
      descriptors.register(Service, Repository, Clock)
      container = Container(descriptors=descriptors)

    """

    def __init__(self, fallback: DescriptorProvider | None = None) -> None:
        self._descriptors: dict[type, TypeDescriptor] = {}
        self._fallback = fallback

    def register(
        self,
        cls: type,
        *dependency_types: Any,
        constructor: Callable[..., object] | None = None,
    ) -> None:
        """Register `cls` as built by `constructor` (default: the class itself) from positional dependencies."""
        _check_constructible(cls)
        dependencies = tuple(
            Dependency(f"arg{i}", token, inspect.Parameter.POSITIONAL_ONLY) for i, token in enumerate(dependency_types)
        )
        self._descriptors[cls] = TypeDescriptor(cls, dependencies, constructor or cls)

    def describe(self, cls: type) -> TypeDescriptor:
        descriptor = self._descriptors.get(cls)
        if descriptor is not None:
            return descriptor

        if self._fallback is None:
            raise ContainerError.type_not_instantiable(cls, "no descriptor registered")

        return self._fallback.describe(cls)

