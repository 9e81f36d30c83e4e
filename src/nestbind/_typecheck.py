"""Nominal and structural "is-a" checks used when validating mappings.

Plain classes and ABCs are checked with ``issubclass``/``isinstance``. Protocol
tokens are matched nominally through the MRO first and, failing that, by a
structural comparison of their methods.
"""

from __future__ import annotations

import inspect
import typing
from typing import Any


if hasattr(typing, "is_protocol"):
    # https://docs.python.org/3/library/typing.html#typing.is_protocol
    def is_protocol(tp: object) -> bool:
        return inspect.isclass(tp) and typing.is_protocol(tp)

else:

    def is_protocol(tp: object) -> bool:
        """Detect whether 'tp' is a typing.Protocol class (not a class implementing one)."""
        return inspect.isclass(tp) and bool(getattr(tp, "_is_protocol", False))


def is_runtime_checkable_protocol(tp: object) -> bool:
    if not is_protocol(tp):
        return False

    try:
        isinstance(None, tp)  # type: ignore[arg-type]
    except TypeError:
        return False
    else:
        return True


def is_abstract(cls: type) -> bool:
    """True for Protocols and ABCs with unimplemented abstract methods."""
    return is_protocol(cls) or inspect.isabstract(cls)


def is_subtype(subtype: type, cls: type) -> bool:
    """Whether `subtype` is `cls` or implements it (strictness is the caller's concern)."""
    if not is_protocol(cls):
        return issubclass(subtype, cls)

    if cls in getattr(subtype, "__mro__", ()):
        return True

    return conforms(cls, subtype)


def is_instance(instance: object, cls: type) -> bool:
    if not is_protocol(cls):
        return isinstance(instance, cls)

    if not is_subtype(type(instance), cls):
        return False

    # runtime checkable protocols also see instance attributes
    return not is_runtime_checkable_protocol(cls) or isinstance(instance, cls)


def conforms(proto: type, impl: type) -> bool:
    """Structural match of `impl` against the methods `proto` declares.

    Each public protocol method must exist on `impl` and be callable with the
    positional arguments the protocol requires. Annotated return types must
    be compatible. Data members are left to ``isinstance``.
    """
    declared = {name: attr for name, attr in vars(proto).items() if inspect.isfunction(attr)}
    return all(
        _method_conforms(attr, getattr(impl, name, None)) for name, attr in declared.items() if not name.startswith("_")
    )


def _method_conforms(declared: Any, provided: Any) -> bool:
    if not callable(provided):
        return False

    try:
        expected, actual = inspect.signature(declared), inspect.signature(provided)
    except (TypeError, ValueError):
        return False

    accepted, required = _positional_range(actual)
    passed = _positional_range(expected)[1]
    if not required <= passed <= accepted:
        return False

    return _returns_compatible(expected.return_annotation, actual.return_annotation)


def _positional_range(sig: inspect.Signature) -> tuple[float, int]:
    """How many positional arguments `sig` accepts at most, and how many it requires."""
    accepted: float = 0
    required = 0
    for p in sig.parameters.values():
        if p.name == "self":
            continue
        if p.kind is inspect.Parameter.VAR_POSITIONAL:
            accepted = float("inf")
        elif p.kind in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD):
            accepted += 1
            required += p.default is inspect.Parameter.empty
    return accepted, required


def _returns_compatible(expected: object, actual: object) -> bool:
    unchecked = (inspect.Signature.empty, Any)
    if expected in unchecked or actual in unchecked or expected == actual:
        return True

    # only plain classes are covariant; anything else has to match exactly
    return isinstance(expected, type) and isinstance(actual, type) and issubclass(actual, expected)
