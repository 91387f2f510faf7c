"""Model property exploration and recursive definition building.

A model class opts properties into schema exposure through its metadata
provider, which reports them as identifiers prefixed with ":". Each model
reached from an endpoint is expanded into an object definition and stored
in a DefinitionRegistry; nested models are expanded recursively and
referenced with ``#/definitions/<name>``.

Self-referencing models are supported: a model that is already being
expanded further up the recursion is referenced immediately instead of
being expanded again.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import Any

from flask_apiparams.explorers.types import get_enum_type, get_enum_values, map_type_name, nest_array_items
from flask_apiparams.metadata import (
    Composite,
    MetadataProvider,
    Reference,
    definition_path,
    type_name_of,
)

logger = logging.getLogger("flask_apiparams")

MODEL_PROPERTY_PREFIX = ":"

VALID_CONFLICT_POLICIES = ("error", "overwrite")

# Keys that never survive into an allOf constraint block
_REF_STRIPPED_KEYS = ("type", "isArray", "arrayDepth", "collectionFormat", "required")


class DefinitionConflictError(ValueError):
    """Two different models produced different definitions under one name."""


class DefinitionRegistry:
    """Named schema definitions collected during one document build.

    Definitions are keyed by name and remember the class that produced
    them. Re-registering a name for the same class overwrites it. A
    different class registering an identical shape is a no-op; a different
    shape is resolved by the conflict policy ("error" raises
    DefinitionConflictError, "overwrite" replaces it and logs a warning).
    """

    def __init__(self, on_conflict: str = "error") -> None:
        if on_conflict not in VALID_CONFLICT_POLICIES:
            choices = ", ".join(VALID_CONFLICT_POLICIES)
            raise ValueError(f"on_conflict must be one of: {choices}. Got: '{on_conflict}'")
        self.on_conflict = on_conflict
        self._definitions: dict[str, dict[str, Any]] = {}
        self._owners: dict[str, Any] = {}

    def register(self, name: str, definition: dict[str, Any], owner: Any = None) -> None:
        existing = self._definitions.get(name)
        if existing is not None and self._owners.get(name) is not owner:
            if existing == definition:
                return
            if self.on_conflict == "error":
                raise DefinitionConflictError(
                    f"Definition '{name}' is already registered by {self._owners.get(name)!r} "
                    f"with a different shape than {owner!r}"
                )
            logger.warning("Overwriting definition '%s' registered by %r", name, self._owners.get(name))
        self._definitions[name] = definition
        self._owners[name] = owner
        logger.debug("Registered definition: %s", name)

    def get(self, name: str) -> dict[str, Any] | None:
        return self._definitions.get(name)

    def as_dict(self) -> dict[str, dict[str, Any]]:
        return dict(self._definitions)

    def to_list(self) -> list[dict[str, dict[str, Any]]]:
        """Export as a list of single-entry ``{name: definition}`` dicts."""
        return [{name: definition} for name, definition in self._definitions.items()]

    def __contains__(self, name: object) -> bool:
        return name in self._definitions

    def __iter__(self) -> Iterator[str]:
        return iter(self._definitions)

    def __len__(self) -> int:
        return len(self._definitions)


def explore_model_properties(provider: MetadataProvider, handle: Any) -> list[str]:
    """List the public names of the properties a model exposes.

    Args:
        provider: Metadata provider to read marked identifiers from.
        handle: A model class or a Composite TypeRef. Anything else has no
            properties.

    Returns:
        Property names with the ":" marker stripped, in declaration order.
    """
    if isinstance(handle, Composite):
        handle = handle.handle
    if not isinstance(handle, type):
        return []

    names: list[str] = []
    for prop in provider.get_model_properties(handle) or []:
        if not isinstance(prop, str) or not prop.startswith(MODEL_PROPERTY_PREFIX):
            continue
        name = prop[len(MODEL_PROPERTY_PREFIX):]
        if callable(getattr(handle, name, None)):
            continue
        names.append(name)
    return names


def _to_array_property(metadata: dict[str, Any], key: str, items: dict[str, Any]) -> dict[str, Any]:
    items = dict(items)
    if metadata.get("enum") is not None:
        items["enum"] = metadata["enum"]
    prop = {k: v for k, v in metadata.items() if k not in ("enum", "arrayDepth")}
    prop.update(name=key, type="array", items=nest_array_items(items, metadata.get("arrayDepth", 1)))
    return prop


def _explore_property(
    provider: MetadataProvider,
    handle: type,
    key: str,
    definitions: DefinitionRegistry,
    in_progress: set[type],
) -> dict[str, Any]:
    metadata = dict(provider.get_property_metadata(handle, key) or {})
    if metadata.get("enum") is not None:
        metadata["enum"] = get_enum_values(metadata["enum"])

    type_ref = metadata.get("type")
    if isinstance(type_ref, (Composite, Reference)):
        if isinstance(type_ref, Reference) or type_ref.handle in in_progress:
            nested_name = type_ref.name
        else:
            nested_name = _explore_model_definition(provider, type_ref.handle, definitions, in_progress)
        ref = definition_path(nested_name)

        if metadata.get("isArray"):
            return _to_array_property(metadata, key, {"$ref": ref})

        stripped = {k: v for k, v in metadata.items() if k not in _REF_STRIPPED_KEYS}
        if not stripped:
            return {"name": key, "required": metadata.get("required"), "$ref": ref}
        return {
            "name": key,
            "required": metadata.get("required"),
            "title": nested_name,
            "allOf": [{"$ref": ref}, stripped],
        }

    schema_type = map_type_name(type_name_of(type_ref))
    item_type = get_enum_type(metadata["enum"]) if metadata.get("enum") else schema_type

    if metadata.get("isArray"):
        return _to_array_property(metadata, key, {"type": item_type} if item_type else {})

    prop = {**metadata, "name": key}
    if item_type:
        prop["type"] = item_type
    else:
        prop.pop("type", None)
    return prop


def _explore_model_definition(
    provider: MetadataProvider,
    handle: type,
    definitions: DefinitionRegistry,
    in_progress: set[type],
) -> str:
    in_progress.add(handle)
    try:
        properties = [
            _explore_property(provider, handle, key, definitions, in_progress)
            for key in explore_model_properties(provider, handle)
        ]
    finally:
        in_progress.discard(handle)

    definition: dict[str, Any] = {
        "type": "object",
        "properties": {
            prop["name"]: {k: v for k, v in prop.items() if k not in ("name", "isArray", "required")}
            for prop in properties
        },
    }
    required = [prop["name"] for prop in properties if prop.get("required") is not False]
    if required:
        definition["required"] = required

    name = handle.__name__
    definitions.register(name, definition, owner=handle)
    return name


def explore_model_definition(
    provider: MetadataProvider,
    handle: Any,
    definitions: DefinitionRegistry,
) -> str:
    """Build the definition of a model and of every model it references.

    Args:
        provider: Metadata provider for model properties.
        handle: The model class (or a Composite TypeRef wrapping it).
        definitions: Registry receiving the built definitions.

    Returns:
        The definition name, usable with ``definition_path()``.
    """
    if isinstance(handle, Composite):
        handle = handle.handle
    return _explore_model_definition(provider, handle, definitions, set())
