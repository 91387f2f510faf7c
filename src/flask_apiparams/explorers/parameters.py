"""Endpoint parameter exploration.

``explore_api_parameters()`` derives the OpenAPI 2 ``parameters`` list of a
single endpoint handler:

1. Read the explicit parameter overrides and the reflected parameters
   (argument types paired with their route bindings).
2. Expand unnamed non-body reflected parameters into one parameter per
   model property.
3. Merge explicit overrides over reflected parameters with the same name,
   then union both sets on ``(name, in)``.
4. Turn body parameters into definition references, or into individual
   formData fields when the endpoint already has formData parameters.
5. Normalize every parameter's type into the schema vocabulary.

Definitions built along the way are registered into the caller's
DefinitionRegistry.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from flask_apiparams.explorers.models import (
    DefinitionRegistry,
    explore_model_definition,
    explore_model_properties,
)
from flask_apiparams.explorers.types import get_enum_type, get_enum_values, map_type_name, nest_array_items
from flask_apiparams.metadata import (
    UNTYPED,
    Composite,
    MetadataProvider,
    Reference,
    RouteParamtype,
    definition_path,
    type_name_of,
)

logger = logging.getLogger("flask_apiparams")

UNBOUND_LOCATION = "_"

# Keys describing a bound argument itself, never its model's properties
_SHAPE_KEYS = ("isArray", "arrayDepth", "enum")

_LOCATIONS: dict[int, str] = {
    RouteParamtype.BODY: "body",
    RouteParamtype.PARAM: "path",
    RouteParamtype.QUERY: "query",
    RouteParamtype.HEADERS: "header",
}


def _handler_name(handler: Callable[..., Any]) -> str:
    return getattr(handler, "__qualname__", getattr(handler, "__name__", repr(handler)))


def map_param_location(key: str) -> str:
    """Map a ``"<code>:<index>"`` binding key to a parameter location."""
    code = key.split(":")[0]
    try:
        return _LOCATIONS.get(int(code), UNBOUND_LOCATION)
    except ValueError:
        return UNBOUND_LOCATION


def explore_reflected_parameters(
    provider: MetadataProvider,
    handler: Callable[..., Any],
) -> list[dict[str, Any]] | None:
    """Derive parameters from the handler's argument types and bindings.

    Every bound argument becomes a required parameter at its location,
    carrying the argument's array and enum shape. Arguments bound to no
    supported location, and named body arguments, are left out.

    Returns:
        The reflected parameters, or None if there are none.
    """
    types = provider.get_param_types(handler) or []
    shapes = provider.get_param_metadata(handler) or []
    bindings = provider.get_route_args_metadata(handler) or {}

    parameters: list[dict[str, Any]] = []
    for key, binding in bindings.items():
        location = map_param_location(key)
        if location == UNBOUND_LOCATION or (binding.data and location == "body"):
            continue
        param: dict[str, Any] = {
            "type": types[binding.index] if binding.index < len(types) else None,
            "required": True,
            "in": location,
        }
        if binding.index < len(shapes):
            param.update(shapes[binding.index])
        if binding.data:
            param["name"] = binding.data
        parameters.append(param)

    return parameters or None


def _is_body(param: dict[str, Any]) -> bool:
    return param.get("in") == "body"


def _expand_model_properties(
    provider: MetadataProvider,
    param: dict[str, Any],
    location: str | None = None,
) -> list[dict[str, Any]]:
    type_ref = param.get("type")
    if not isinstance(type_ref, Composite):
        return []
    base = {k: v for k, v in param.items() if k not in ("name", "type", "schema", *_SHAPE_KEYS)}
    expanded = []
    for key in explore_model_properties(provider, type_ref):
        metadata = provider.get_property_metadata(type_ref.handle, key) or {}
        prop_param = {**base, **metadata, "name": key}
        if location is not None:
            prop_param["in"] = location
        expanded.append(prop_param)
    return expanded


def transform_model_to_properties(
    provider: MetadataProvider,
    reflected: list[dict[str, Any]],
) -> list[dict[str, Any]]:
    """Expand reflected parameters into named parameters.

    Untyped parameters are dropped, unless they are arrays. Named
    parameters are kept. An unnamed body parameter is named after its
    type. Other unnamed parameters (e.g. a whole query string bound to a
    model) become one parameter per model property.
    """
    result: list[dict[str, Any]] = []
    for param in reflected:
        if not param or (param.get("type") == UNTYPED and not param.get("isArray")):
            continue
        if param.get("name"):
            result.append(param)
        elif _is_body(param):
            result.append({**param, "name": type_name_of(param.get("type"))})
        else:
            result.extend(_expand_model_properties(provider, param))
    return result


def _find_by_name(parameters: list[dict[str, Any]], name: Any) -> dict[str, Any]:
    for param in parameters:
        if param.get("name") == name:
            return param
    return {}


def _same_parameter(a: dict[str, Any], b: dict[str, Any]) -> bool:
    return a.get("name") == b.get("name") and a.get("in") == b.get("in")


def _union(parameters: list[dict[str, Any]]) -> list[dict[str, Any]]:
    result: list[dict[str, Any]] = []
    for param in parameters:
        if not any(_same_parameter(param, kept) for kept in result):
            result.append(param)
    return result


def merge_parameters(
    reflected: list[dict[str, Any]],
    explicit: list[dict[str, Any]] | None,
) -> list[dict[str, Any]]:
    """Merge explicit overrides over reflected parameters, then union them.

    Reflected parameters sharing ``(name, in)`` collapse into the first
    occurrence. Overrides are matched to reflected parameters by name and
    win on conflicting keys. Overrides without a reflected counterpart on
    ``(name, in)`` are appended unchanged.
    """
    reflected = _union(reflected)
    if explicit is None:
        return reflected

    merged = [{**param, **_find_by_name(explicit, param.get("name"))} for param in reflected]
    for override in explicit:
        if not any(_same_parameter(param, override) for param in merged):
            merged.append(override)
    return merged


def contains_form_data(parameters: list[dict[str, Any]]) -> bool:
    return any(param.get("in") == "formData" for param in parameters)


def resolve_form_data(provider: MetadataProvider, param: dict[str, Any]) -> list[dict[str, Any]]:
    """Flatten a model-typed body parameter into individual formData fields."""
    return _expand_model_properties(provider, param, location="formData")


def map_models_to_definitions(
    provider: MetadataProvider,
    parameters: list[dict[str, Any]],
    definitions: DefinitionRegistry,
) -> list[dict[str, Any]]:
    """Point model-typed body parameters at their definitions.

    When the endpoint has any formData parameter, model-typed body
    parameters are flattened into formData fields instead.
    """
    form_data = contains_form_data(parameters)
    result: list[dict[str, Any]] = []

    for param in parameters:
        type_ref = param.get("type")
        if not _is_body(param) or "schema" in param or not isinstance(type_ref, (Composite, Reference)):
            result.append(param)
            continue

        if form_data and isinstance(type_ref, Composite):
            result.extend(resolve_form_data(provider, param))
            continue

        if isinstance(type_ref, Composite):
            model_name = explore_model_definition(provider, type_ref, definitions)
        else:
            model_name = type_ref.name

        schema: dict[str, Any] = {"$ref": definition_path(model_name)}
        if param.get("isArray"):
            schema = {"type": "array", "items": nest_array_items(schema, param.get("arrayDepth", 1))}
        result.append({**param, "name": param.get("name") or model_name, "schema": schema})

    return result


def map_parameters_types(parameters: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Normalize parameter types into the schema vocabulary.

    Parameters carrying a schema lose their ``type``. Others get their type
    name mapped, enum values resolved, and array parameters rewritten to
    ``{"type": "array", "items": {...}}``. ``None`` values are dropped.
    """
    result: list[dict[str, Any]] = []
    for param in parameters:
        if "schema" in param or "$ref" in param:
            kept = {k: v for k, v in param.items() if k not in ("type", "isArray", "arrayDepth")}
            result.append({k: v for k, v in kept.items() if v is not None})
            continue

        schema_type = map_type_name(type_name_of(param.get("type")))
        enum_values = get_enum_values(param["enum"]) if param.get("enum") is not None else None
        if not schema_type and enum_values:
            schema_type = get_enum_type(enum_values)

        normalized = {k: v for k, v in param.items() if k not in ("type", *_SHAPE_KEYS) and v is not None}
        if not param.get("isArray"):
            if schema_type:
                normalized["type"] = schema_type
            if enum_values is not None:
                normalized["enum"] = enum_values
            result.append(normalized)
            continue

        items: dict[str, Any] = {"type": schema_type} if schema_type else {}
        if enum_values is not None:
            items["enum"] = enum_values
        normalized["type"] = "array"
        normalized["items"] = nest_array_items(items, param.get("arrayDepth", 1))
        result.append(normalized)
    return result


def explore_api_parameters(
    definitions: DefinitionRegistry,
    provider: MetadataProvider,
    handler: Callable[..., Any],
) -> dict[str, list[dict[str, Any]]] | None:
    """Derive the ``parameters`` fragment of one endpoint handler.

    Args:
        definitions: Registry receiving every definition built for the
            endpoint's body models.
        provider: Metadata provider for the handler and its models.
        handler: The view function or class-based view method.

    Returns:
        ``{"parameters": [...]}``, or None when the endpoint documents no
        parameters.
    """
    explicit = provider.get_explicit_parameters(handler)
    reflected = explore_reflected_parameters(provider, handler)
    if explicit is None and reflected is None:
        logger.debug("No parameter metadata for %s", _handler_name(handler))
        return None

    expanded = transform_model_to_properties(provider, reflected or [])
    merged = merge_parameters(expanded, explicit)
    with_definitions = map_models_to_definitions(provider, merged, definitions)
    parameters = map_parameters_types(with_definitions)

    logger.debug("Explored %d parameters for %s", len(parameters), _handler_name(handler))
    return {"parameters": parameters} if parameters else None
