"""Metadata provider subpackage for flask-apiparams.

Provides get_provider() for selecting the metadata provider by name:
    "pydantic"     -> PydanticMetadataProvider (pydantic models + annotations)
    "annotations"  -> AnnotationsMetadataProvider (type hints + markers only)
"""

from __future__ import annotations

import logging

from flask_apiparams.metadata import MetadataProvider
from flask_apiparams.providers.annotations_provider import AnnotationsMetadataProvider
from flask_apiparams.providers.pydantic_provider import PydanticMetadataProvider

logger = logging.getLogger("flask_apiparams")

_PROVIDER_REGISTRY: dict[str, type] = {
    "annotations": AnnotationsMetadataProvider,
    "pydantic": PydanticMetadataProvider,
}


def get_provider(name: str) -> MetadataProvider:
    """Return a metadata provider instance for the given name.

    Raises:
        ValueError: If name is unknown.
    """
    if name not in _PROVIDER_REGISTRY:
        raise ValueError(f"Unknown metadata provider: {name!r}")
    logger.debug("Using metadata provider: %s", name)
    return _PROVIDER_REGISTRY[name]()


__all__ = [
    "AnnotationsMetadataProvider",
    "PydanticMetadataProvider",
    "get_provider",
]
