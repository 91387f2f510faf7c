"""APIPARAMS_* settings resolution and validation.

Reads all APIPARAMS_* settings from Flask's app.config, applies defaults,
validates types and values, and exposes a frozen dataclass for internal use.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from flask import Flask

# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------
DEFAULT_METADATA_PROVIDER = "pydantic"
DEFAULT_DEFINITION_CONFLICT = "error"
DEFAULT_OUTPUT_FORMAT = "json"

# ---------------------------------------------------------------------------
# Valid choices
# ---------------------------------------------------------------------------
VALID_METADATA_PROVIDERS = ("pydantic", "annotations")
VALID_DEFINITION_CONFLICTS = ("error", "overwrite")
VALID_OUTPUT_FORMATS = ("json", "yaml")


@dataclass(frozen=True)
class ApiParamsSettings:
    """Validated APIPARAMS_* settings.

    All fields are immutable after validation. Created by load_settings().
    """

    metadata_provider: str
    definition_conflict: str
    include: str | None
    exclude: str | None
    output_format: str


def _load_pattern(app: Flask, key: str) -> str | None:
    pattern = app.config.get(key, None)
    if pattern is None:
        return None
    if not isinstance(pattern, str):
        actual = type(pattern).__name__
        raise ValueError(f"{key} must be a regex string. Got: {actual}")
    try:
        re.compile(pattern)
    except re.error as e:
        raise ValueError(f"{key} must be a valid regex. Got: '{pattern}' ({e})")
    return pattern


def load_settings(app: Flask) -> ApiParamsSettings:
    """Read and validate APIPARAMS_* settings from app.config.

    Each Flask config key is ``APIPARAMS_`` + uppercase field name
    (e.g. ``APIPARAMS_METADATA_PROVIDER``). ``None`` values fall back to
    defaults.

    Args:
        app: Flask application instance.

    Returns:
        Validated, frozen ApiParamsSettings dataclass.

    Raises:
        ValueError: If any setting is invalid.
    """
    # --- metadata_provider ---
    metadata_provider = app.config.get("APIPARAMS_METADATA_PROVIDER", DEFAULT_METADATA_PROVIDER)
    if metadata_provider is None:
        metadata_provider = DEFAULT_METADATA_PROVIDER
    if metadata_provider not in VALID_METADATA_PROVIDERS:
        choices = ", ".join(VALID_METADATA_PROVIDERS)
        raise ValueError(
            f"APIPARAMS_METADATA_PROVIDER must be one of: {choices}." f" Got: '{metadata_provider}'"
        )

    # --- definition_conflict ---
    definition_conflict = app.config.get("APIPARAMS_DEFINITION_CONFLICT", DEFAULT_DEFINITION_CONFLICT)
    if definition_conflict is None:
        definition_conflict = DEFAULT_DEFINITION_CONFLICT
    if definition_conflict not in VALID_DEFINITION_CONFLICTS:
        choices = ", ".join(VALID_DEFINITION_CONFLICTS)
        raise ValueError(
            f"APIPARAMS_DEFINITION_CONFLICT must be one of: {choices}." f" Got: '{definition_conflict}'"
        )

    # --- include / exclude ---
    include = _load_pattern(app, "APIPARAMS_INCLUDE")
    exclude = _load_pattern(app, "APIPARAMS_EXCLUDE")

    # --- output_format ---
    output_format = app.config.get("APIPARAMS_OUTPUT_FORMAT", DEFAULT_OUTPUT_FORMAT)
    if output_format is None:
        output_format = DEFAULT_OUTPUT_FORMAT
    if output_format not in VALID_OUTPUT_FORMATS:
        choices = ", ".join(VALID_OUTPUT_FORMATS)
        raise ValueError(f"APIPARAMS_OUTPUT_FORMAT must be one of: {choices}." f" Got: '{output_format}'")

    return ApiParamsSettings(
        metadata_provider=metadata_provider,
        definition_conflict=definition_conflict,
        include=include,
        exclude=exclude,
        output_format=output_format,
    )
