"""flask-apiparams: OpenAPI 2 parameters and definitions from Flask view metadata."""

__version__ = "0.1.0"

from flask_apiparams.extension import ApiParams

from flask_apiparams.decorators import (
    ApiProperty,
    Body,
    Headers,
    Param,
    Query,
    Req,
    api_implicit_body,
    api_implicit_file,
    api_implicit_header,
    api_implicit_query,
    api_parameter,
)
from flask_apiparams.explorers import (
    DefinitionConflictError,
    DefinitionRegistry,
    explore_api_parameters,
    explore_model_definition,
)
from flask_apiparams.metadata import Composite, MetadataProvider, Primitive, Reference

__all__ = [
    "ApiParams",
    "__version__",
    "ApiProperty",
    "Body",
    "Headers",
    "Param",
    "Query",
    "Req",
    "api_implicit_body",
    "api_implicit_file",
    "api_implicit_header",
    "api_implicit_query",
    "api_parameter",
    "DefinitionConflictError",
    "DefinitionRegistry",
    "explore_api_parameters",
    "explore_model_definition",
    "Composite",
    "MetadataProvider",
    "Primitive",
    "Reference",
]
