"""Metadata types shared by the explorers and the metadata providers.

Type references are resolved once, when a provider reads them, into one of
three variants:

    Primitive(kind)     -> a primitive schema type name ("string", "integer", ...)
    Composite(handle)   -> a model class that expands into a definition
    Reference(name)     -> a definition that is referenced but not built

The explorers never inspect raw Python types; they only see these variants
and call the MetadataProvider protocol.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Callable, Protocol, Union, runtime_checkable

DEFINITIONS_PREFIX = "#/definitions/"


@dataclass(frozen=True)
class Primitive:
    """A primitive type, carried by its (possibly capitalized) name."""

    kind: str


@dataclass(frozen=True)
class Composite:
    """A model class whose marked properties expand into a definition."""

    handle: type

    @property
    def name(self) -> str:
        return self.handle.__name__


@dataclass(frozen=True)
class Reference:
    """A named definition that is pointed at without being expanded."""

    name: str


TypeRef = Union[Primitive, Composite, Reference]

# Reflected parameters of this type carry no usable shape and are dropped.
UNTYPED = Primitive("object")


class RouteParamtype(IntEnum):
    """Numeric codes of route argument bindings."""

    REQUEST = 0
    RESPONSE = 1
    NEXT = 2
    BODY = 3
    QUERY = 4
    PARAM = 5
    HEADERS = 6
    SESSION = 7
    FILE = 8
    FILES = 9


@dataclass(frozen=True)
class RouteArgBinding:
    """Binding of one positional handler argument to a request location.

    Attributes:
        index: Position of the argument in the handler's parameter types.
        data: Explicit name (e.g. the query key), or None for whole-location
            bindings such as an entire request body.
    """

    index: int
    data: str | None = None


def route_arg_key(paramtype: RouteParamtype | int, index: int) -> str:
    """Build the ``"<code>:<index>"`` key used in route argument mappings."""
    return f"{int(paramtype)}:{index}"


def definition_path(name: str) -> str:
    return f"{DEFINITIONS_PREFIX}{name}"


def type_name_of(value: Any) -> str | None:
    """Return the raw type name of a TypeRef, class, or string."""
    if value is None:
        return None
    if isinstance(value, Primitive):
        return value.kind
    if isinstance(value, (Composite, Reference)):
        return value.name
    if isinstance(value, type):
        return value.__name__
    if isinstance(value, str):
        return value
    return None


@runtime_checkable
class MetadataProvider(Protocol):
    """Capability for reading declared metadata at runtime.

    Handlers are view functions or class-based view methods. Handles are
    model classes. Every type returned by a provider is already a TypeRef.

    Argument types are element types: a ``list[int]`` argument is typed
    ``integer``, and get_param_metadata() reports ``isArray`` (plus
    ``arrayDepth`` for nested arrays) and ``enum`` for each argument.
    """

    def get_param_types(self, handler: Callable[..., Any]) -> list[TypeRef | None]: ...

    def get_param_metadata(self, handler: Callable[..., Any]) -> list[dict[str, Any]]: ...

    def get_route_args_metadata(self, handler: Callable[..., Any]) -> dict[str, RouteArgBinding]: ...

    def get_model_properties(self, handle: type) -> list[str]: ...

    def get_property_metadata(self, handle: type, name: str) -> dict[str, Any] | None: ...

    def get_explicit_parameters(self, handler: Callable[..., Any]) -> list[dict[str, Any]] | None: ...
