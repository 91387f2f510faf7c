"""Metadata provider exposing pydantic model fields as model properties.

Every field of a ``pydantic.BaseModel`` subclass is a schema property; no
``ApiProperty`` marker is needed. Field information maps onto property
metadata:

    FieldInfo.is_required()     -> required
    description / title         -> description / title
    examples                    -> examples
    json_schema_extra (dict)    -> copied as extra keys
    ApiProperty in metadata     -> explicit overrides (highest priority)

Classes that are not pydantic models, and all handler metadata, fall back
to AnnotationsMetadataProvider.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import BaseModel

from flask_apiparams.decorators import ApiProperty
from flask_apiparams.providers.annotations_provider import (
    AnnotationsMetadataProvider,
    describe_hint,
    finalize_metadata,
)

logger = logging.getLogger("flask_apiparams")

_COPIED_FIELD_ATTRS = ("description", "title", "examples")

_JSON_SCALARS = (str, int, float, bool)


def _is_pydantic_model(handle: Any) -> bool:
    return isinstance(handle, type) and issubclass(handle, BaseModel)


class PydanticMetadataProvider(AnnotationsMetadataProvider):
    """Annotations provider that also understands pydantic models."""

    def get_model_properties(self, handle: type) -> list[str]:
        if not _is_pydantic_model(handle):
            return super().get_model_properties(handle)
        return [f":{name}" for name in handle.model_fields]

    def get_property_metadata(self, handle: type, name: str) -> dict[str, Any] | None:
        if not _is_pydantic_model(handle):
            return super().get_property_metadata(handle, name)

        field = handle.model_fields.get(name)
        if field is None:
            return None

        metadata = describe_hint(field.annotation)
        metadata["required"] = field.is_required()

        for attr in _COPIED_FIELD_ATTRS:
            value = getattr(field, attr, None)
            if value is not None:
                metadata[attr] = value

        if not field.is_required() and isinstance(field.default, _JSON_SCALARS):
            metadata["default"] = field.default

        if isinstance(field.json_schema_extra, dict):
            metadata.update(field.json_schema_extra)

        for marker in field.metadata:
            if isinstance(marker, ApiProperty):
                metadata.update(marker.to_metadata())

        return finalize_metadata(metadata)
