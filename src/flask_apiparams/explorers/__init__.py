"""Explorers that turn provider metadata into parameters and definitions."""

from __future__ import annotations

from flask_apiparams.explorers.models import (
    DefinitionConflictError,
    DefinitionRegistry,
    explore_model_definition,
    explore_model_properties,
)
from flask_apiparams.explorers.parameters import (
    explore_api_parameters,
    explore_reflected_parameters,
    map_parameters_types,
)
from flask_apiparams.explorers.types import get_enum_type, get_enum_values, map_type_name

__all__ = [
    "DefinitionConflictError",
    "DefinitionRegistry",
    "explore_api_parameters",
    "explore_model_definition",
    "explore_model_properties",
    "explore_reflected_parameters",
    "get_enum_type",
    "get_enum_values",
    "map_parameters_types",
    "map_type_name",
]
