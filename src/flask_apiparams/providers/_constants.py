"""Shared constants for metadata providers."""

from __future__ import annotations

import datetime
import uuid
from typing import Any

from werkzeug.datastructures import FileStorage

# Python type to primitive schema type name.
# Classes missing from this table are treated as models.
PRIMITIVE_TYPE_MAP: dict[Any, str] = {
    str: "string",
    int: "integer",
    float: "number",
    bool: "boolean",
    bytes: "string",
    list: "array",
    tuple: "array",
    dict: "object",
    object: "object",
    datetime.datetime: "string",
    datetime.date: "string",
    uuid.UUID: "string",
    FileStorage: "file",
}

# Handler parameters that never bind to a request value
SKIP_PARAM_NAMES = frozenset({"self", "cls"})
