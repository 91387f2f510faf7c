"""Type name and enum helpers used by the definition and parameter explorers."""

from __future__ import annotations

import enum
from collections.abc import Mapping
from typing import Any


def map_type_name(name: Any) -> str:
    """Map a native type name onto the schema primitive vocabulary.

    Capitalized primitive names ("String", "Number") become their
    lower-case schema names. Absent or non-string input maps to "".
    """
    if not name or not isinstance(name, str):
        return ""
    return name[0].lower() + name[1:]


def get_enum_values(value: Any) -> list[Any]:
    """Resolve an enum declaration into an ordered list of unique values.

    Accepts a list/tuple of literals, an ``enum.Enum`` subclass, or a
    key -> value mapping. For mappings, reverse-lookup aliases (both
    ``A -> 1`` and ``1 -> A`` present) contribute a single value.
    """
    if isinstance(value, (list, tuple)):
        return list(value)
    if isinstance(value, type) and issubclass(value, enum.Enum):
        return [member.value for member in value]
    if not isinstance(value, Mapping):
        return []

    values: list[Any] = []
    seen: set[str] = set()
    for key, item in value.items():
        # keys and values are compared by their string form
        if str(item) in seen or str(key) in seen:
            continue
        values.append(item)
        seen.add(str(item))
    return values


def get_enum_type(values: list[Any]) -> str:
    """Return "string" if any enum value is textual, otherwise "number"."""
    if any(isinstance(v, str) for v in values):
        return "string"
    return "number"


def nest_array_items(items: dict[str, Any], depth: int = 1) -> dict[str, Any]:
    """Wrap an element schema for arrays nested ``depth`` levels deep.

    The result is the ``items`` value of the outermost array, so depth 1
    returns ``items`` unchanged.
    """
    for _ in range(max(depth, 1) - 1):
        items = {"type": "array", "items": items}
    return items
