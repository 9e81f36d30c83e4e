"""Hierarchical dependency injection container.

Types are mapped to pre-built instances, factories or subtypes, and resolved
with constructor injection. Every container keeps one instance per type, and
containers can be nested: a child resolves through its parent for anything it
does not map itself.

Exports:
- `Container`: a container node with `get`, `create`, `has`, the `map_*`
  methods, `remove`, `reset` and `add_child`.
- `ContainerError` / `ErrorKind`: the single exception type and its failure kinds.
- `get_default` / `clear_default`: the process-wide container.
- `SignatureDescriptors` / `RegisteredDescriptors`: ways to describe how a
  class is constructed.
"""

from ._container import Container, ContainerProtocol, clear_default, get_default
from ._descriptors import (
    Dependency,
    DescriptorProvider,
    RegisteredDescriptors,
    SignatureDescriptors,
    TypeDescriptor,
)
from ._errors import ContainerError, ErrorKind
from ._registry import FactoryMapping, InstanceMapping, SubtypeMapping, TypeRegistry


__all__ = [
    "Container",
    "ContainerError",
    "ContainerProtocol",
    "Dependency",
    "DescriptorProvider",
    "ErrorKind",
    "FactoryMapping",
    "InstanceMapping",
    "RegisteredDescriptors",
    "SignatureDescriptors",
    "SubtypeMapping",
    "TypeDescriptor",
    "TypeRegistry",
    "clear_default",
    "get_default",
]
