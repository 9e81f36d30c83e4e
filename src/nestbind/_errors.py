from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorKind(Enum):
    NULL_ARGUMENT = "null_argument"
    MAPPING_ALREADY_EXISTS = "mapping_already_exists"
    NOT_AN_INSTANCE_OF_TYPE = "not_an_instance_of_type"
    NOT_A_SUBTYPE = "not_a_subtype"
    TYPE_NOT_INSTANTIABLE = "type_not_instantiable"
    TYPE_NOT_REGISTERED = "type_not_registered"
    CIRCULAR_DEPENDENCY = "circular_dependency"
    CYCLIC_HIERARCHY = "cyclic_hierarchy"
    CHILD_CANNOT_BE_DEFAULT = "child_cannot_be_default"
    CHILD_ALREADY_ATTACHED = "child_already_attached"
    FACTORY_INCORRECT_RESULT = "factory_incorrect_result"


def describe_token(token: Any) -> str:
    """Human readable name for a token: the class name for types, ``repr`` otherwise."""
    return getattr(token, "__qualname__", None) or repr(token)


class ContainerError(RuntimeError):
    """Raised for every failed container operation.

    The ``kind`` attribute tells the failures apart; ``token`` is the offending
    type identifier (if any) and ``chain`` holds the resolution chain for
    circular dependencies.
    """

    def __init__(self, kind: ErrorKind, msg: str, *, token: Any = None, chain: tuple[Any, ...] = ()) -> None:
        super().__init__(msg)
        self.kind = kind
        self.token = token
        self.chain = chain

    @classmethod
    def null_argument(cls, name: str) -> ContainerError:
        msg = f"Argument '{name}' must not be None"
        return cls(ErrorKind.NULL_ARGUMENT, msg)

    @classmethod
    def mapping_already_exists(cls, token: Any) -> ContainerError:
        msg = f"A mapping or instance for {describe_token(token)} already exists"
        return cls(ErrorKind.MAPPING_ALREADY_EXISTS, msg, token=token)

    @classmethod
    def not_an_instance_of_type(cls, token: Any, instance: object) -> ContainerError:
        msg = f"Instance of {type(instance).__qualname__} is not an instance of {describe_token(token)}"
        return cls(ErrorKind.NOT_AN_INSTANCE_OF_TYPE, msg, token=token)

    @classmethod
    def not_a_subtype(cls, token: Any, subtype: Any) -> ContainerError:
        msg = f"{describe_token(subtype)} is not a strict subtype of {describe_token(token)}"
        return cls(ErrorKind.NOT_A_SUBTYPE, msg, token=token)

    @classmethod
    def type_not_instantiable(cls, token: Any, reason: str) -> ContainerError:
        msg = f"Cannot instantiate {describe_token(token)}: {reason}"
        return cls(ErrorKind.TYPE_NOT_INSTANTIABLE, msg, token=token)

    @classmethod
    def type_not_registered(cls, token: Any) -> ContainerError:
        msg = f"No mapping found for token: {describe_token(token)}"
        return cls(ErrorKind.TYPE_NOT_REGISTERED, msg, token=token)

    @classmethod
    def circular_dependency(cls, chain: tuple[Any, ...]) -> ContainerError:
        msg = f"Circular dependency detected: {' -> '.join(describe_token(t) for t in chain)}"
        return cls(ErrorKind.CIRCULAR_DEPENDENCY, msg, token=chain[-1], chain=chain)

    @classmethod
    def cyclic_hierarchy(cls) -> ContainerError:
        msg = "Container cannot be added as a child of itself or of one of its descendants"
        return cls(ErrorKind.CYCLIC_HIERARCHY, msg)

    @classmethod
    def child_cannot_be_default(cls) -> ContainerError:
        msg = "The default container cannot be added as a child"
        return cls(ErrorKind.CHILD_CANNOT_BE_DEFAULT, msg)

    @classmethod
    def child_already_attached(cls) -> ContainerError:
        msg = "Container is already the child of another container"
        return cls(ErrorKind.CHILD_ALREADY_ATTACHED, msg)

    @classmethod
    def factory_incorrect_result(cls, token: Any, result: object) -> ContainerError:
        msg = (
            f"Factory for {describe_token(token)} returned {type(result).__qualname__}, "
            f"which is not an instance of {describe_token(token)}"
        )
        return cls(ErrorKind.FACTORY_INCORRECT_RESULT, msg, token=token)
