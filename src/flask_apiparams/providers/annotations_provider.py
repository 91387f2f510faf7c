"""Metadata provider reading type hints and ``Annotated`` markers.

Handler argument types and route bindings come from the handler's
signature::

    def update(user_id: Annotated[int, Param("id")], body: Annotated[User, Body()]): ...

Model properties are class annotations carrying an ``ApiProperty`` marker.
What the annotation itself implies is used as a baseline and the marker's
explicit fields win:

    Optional[T] / T | None  -> required: False
    list[T] / set[T]        -> isArray: True, type T
    list[list[T]]           -> isArray: True, arrayDepth: 2, type T
    Enum subclass           -> enum: the Enum class
    Literal["a", "b"]       -> enum: ["a", "b"]
"""

from __future__ import annotations

import enum
import inspect
import logging
import types
import typing
from typing import Any, Callable, Literal, Union

from flask_apiparams.decorators import API_PARAMETERS_ATTR, ApiProperty, RouteArg
from flask_apiparams.explorers.types import get_enum_type, get_enum_values
from flask_apiparams.metadata import (
    DEFINITIONS_PREFIX,
    UNTYPED,
    Composite,
    Primitive,
    Reference,
    RouteArgBinding,
    TypeRef,
    route_arg_key,
)
from flask_apiparams.providers._constants import PRIMITIVE_TYPE_MAP, SKIP_PARAM_NAMES

logger = logging.getLogger("flask_apiparams")

_ARRAY_ORIGINS = (list, tuple, set, frozenset)

# Argument metadata carried onto reflected parameters; Optional[...] does
# not make a bound argument optional.
_PARAM_SHAPE_KEYS = ("isArray", "arrayDepth", "enum")


def resolve_type_ref(value: Any) -> TypeRef | None:
    """Resolve a declared type (class, name, or TypeRef) into a TypeRef."""
    if value is None:
        return None
    if isinstance(value, (Primitive, Composite, Reference)):
        return value
    if value is typing.Any or value is inspect.Parameter.empty:
        return UNTYPED
    if isinstance(value, str):
        if value.startswith(DEFINITIONS_PREFIX):
            return Reference(value[len(DEFINITIONS_PREFIX):])
        return Primitive(value)
    origin = typing.get_origin(value)
    if origin is not None:
        # dict[str, int] -> dict, Annotated/Union leftovers -> untyped
        return resolve_type_ref(origin) if isinstance(origin, type) else UNTYPED
    if isinstance(value, type) and issubclass(value, enum.Enum):
        return Primitive(get_enum_type(get_enum_values(value)))
    if value in PRIMITIVE_TYPE_MAP:
        return Primitive(PRIMITIVE_TYPE_MAP[value])
    if isinstance(value, type):
        return Composite(value)
    return UNTYPED


def split_annotated(hint: Any) -> tuple[Any, tuple[Any, ...]]:
    """Split ``Annotated[T, *markers]`` into ``(T, markers)``."""
    if typing.get_origin(hint) is typing.Annotated:
        base, *markers = typing.get_args(hint)
        return base, tuple(markers)
    return hint, ()


def describe_hint(hint: Any) -> dict[str, Any]:
    """Derive raw property metadata from a type hint.

    The returned ``type`` is unresolved (a class or name); callers resolve
    it with ``resolve_type_ref()`` after applying explicit overrides.
    """
    hint, _ = split_annotated(hint)
    metadata: dict[str, Any] = {}

    origin = typing.get_origin(hint)
    if origin is Union or isinstance(hint, types.UnionType):
        args = typing.get_args(hint)
        non_none = [a for a in args if a is not type(None)]
        if type(None) in args:
            metadata["required"] = False
        hint = non_none[0] if len(non_none) == 1 else typing.Any
        hint, _ = split_annotated(hint)
        origin = typing.get_origin(hint)

    depth = 0
    while origin in _ARRAY_ORIGINS or hint in _ARRAY_ORIGINS:
        args = [a for a in typing.get_args(hint) if a is not Ellipsis]
        depth += 1
        hint = args[0] if args else typing.Any
        hint, _ = split_annotated(hint)
        origin = typing.get_origin(hint)
    if depth:
        metadata["isArray"] = True
    if depth > 1:
        metadata["arrayDepth"] = depth

    if origin is Literal:
        metadata["enum"] = list(typing.get_args(hint))
        hint = None
    elif isinstance(hint, type) and issubclass(hint, enum.Enum):
        metadata["enum"] = hint

    metadata["type"] = hint
    return metadata


def finalize_metadata(metadata: dict[str, Any]) -> dict[str, Any]:
    """Resolve the ``type`` key and drop unset values."""
    resolved = {k: v for k, v in metadata.items() if v is not None}
    if "type" in resolved:
        resolved["type"] = resolve_type_ref(resolved["type"])
    return resolved


def _find_marker(markers: tuple[Any, ...], kind: type) -> Any:
    for marker in markers:
        if isinstance(marker, kind):
            return marker
    return None


class AnnotationsMetadataProvider:
    """Reads handler and model metadata from type hints and markers."""

    def _signature_hints(self, handler: Callable[..., Any]) -> list[Any]:
        sig = inspect.signature(handler)
        hints = typing.get_type_hints(handler, include_extras=True)
        result = []
        for name, param in sig.parameters.items():
            if name in SKIP_PARAM_NAMES:
                continue
            if param.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
                continue
            result.append(hints.get(name, inspect.Parameter.empty))
        return result

    def _describe_params(self, handler: Callable[..., Any]) -> list[dict[str, Any]]:
        return [describe_hint(hint) for hint in self._signature_hints(handler)]

    def get_param_types(self, handler: Callable[..., Any]) -> list[TypeRef | None]:
        return [resolve_type_ref(described["type"]) for described in self._describe_params(handler)]

    def get_param_metadata(self, handler: Callable[..., Any]) -> list[dict[str, Any]]:
        """Array and enum shape of each argument, aligned with get_param_types()."""
        return [
            {k: described[k] for k in _PARAM_SHAPE_KEYS if described.get(k) is not None}
            for described in self._describe_params(handler)
        ]

    def get_route_args_metadata(self, handler: Callable[..., Any]) -> dict[str, RouteArgBinding]:
        bindings: dict[str, RouteArgBinding] = {}
        for index, hint in enumerate(self._signature_hints(handler)):
            _, markers = split_annotated(hint)
            marker = _find_marker(markers, RouteArg)
            if marker is not None:
                bindings[route_arg_key(marker.paramtype, index)] = RouteArgBinding(index, marker.name)
        return bindings

    def _property_hints(self, handle: type) -> dict[str, Any]:
        return typing.get_type_hints(handle, include_extras=True)

    def get_model_properties(self, handle: type) -> list[str]:
        props = []
        for name, hint in self._property_hints(handle).items():
            _, markers = split_annotated(hint)
            if _find_marker(markers, ApiProperty) is not None:
                props.append(f":{name}")
        return props

    def get_property_metadata(self, handle: type, name: str) -> dict[str, Any] | None:
        hint = self._property_hints(handle).get(name)
        if hint is None:
            return None
        _, markers = split_annotated(hint)
        metadata = describe_hint(hint)
        marker = _find_marker(markers, ApiProperty)
        if marker is not None:
            metadata.update(marker.to_metadata())
        return finalize_metadata(metadata)

    def get_explicit_parameters(self, handler: Callable[..., Any]) -> list[dict[str, Any]] | None:
        declared = getattr(handler, API_PARAMETERS_ATTR, None)
        if declared is None:
            return None
        return [finalize_metadata(dict(param)) for param in declared]
