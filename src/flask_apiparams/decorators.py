"""Declaration markers and decorators.

Route arguments are bound with ``typing.Annotated`` markers::

    def create_user(
        org: Annotated[str, Param("org")],
        body: Annotated[User, Body()],
    ): ...

Model properties opt into schema exposure with ``ApiProperty``::

    class User:
        id: Annotated[int, ApiProperty()]
        nickname: Annotated[str | None, ApiProperty(description="Display name")]

Explicit parameter overrides are attached with ``api_parameter`` and the
``api_implicit_*`` shortcuts. They are stored on the handler in
``__api_parameters__`` in source order.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, TypeVar

from flask_apiparams.metadata import RouteParamtype

F = TypeVar("F", bound=Callable[..., Any])

API_PARAMETERS_ATTR = "__api_parameters__"


@dataclass(frozen=True)
class RouteArg:
    """Base marker binding a handler argument to a request location."""

    paramtype: RouteParamtype
    name: str | None = None


class Body(RouteArg):
    def __init__(self, name: str | None = None) -> None:
        super().__init__(RouteParamtype.BODY, name)


class Query(RouteArg):
    def __init__(self, name: str | None = None) -> None:
        super().__init__(RouteParamtype.QUERY, name)


class Param(RouteArg):
    """Path parameter (a URL rule variable)."""

    def __init__(self, name: str | None = None) -> None:
        super().__init__(RouteParamtype.PARAM, name)


class Headers(RouteArg):
    def __init__(self, name: str | None = None) -> None:
        super().__init__(RouteParamtype.HEADERS, name)


class Req(RouteArg):
    """The raw request object; never documented as a parameter."""

    def __init__(self) -> None:
        super().__init__(RouteParamtype.REQUEST, None)


class ApiProperty:
    """Marks a model attribute as a schema property.

    Fields left as None are inferred from the attribute's annotation.
    Extra keyword arguments (description, example, minimum, ...) are
    copied into the emitted property schema.
    """

    def __init__(
        self,
        type: Any = None,
        required: bool | None = None,
        is_array: bool | None = None,
        enum: Any = None,
        collection_format: str | None = None,
        **extra: Any,
    ) -> None:
        self.type = type
        self.required = required
        self.is_array = is_array
        self.enum = enum
        self.collection_format = collection_format
        self.extra = dict(extra)

    def __repr__(self) -> str:
        return f"ApiProperty({self.to_metadata()!r})"

    def to_metadata(self) -> dict[str, Any]:
        """Return the explicitly set fields as property metadata keys."""
        metadata: dict[str, Any] = {}
        if self.type is not None:
            metadata["type"] = self.type
        if self.required is not None:
            metadata["required"] = self.required
        if self.is_array is not None:
            metadata["isArray"] = self.is_array
        if self.enum is not None:
            metadata["enum"] = self.enum
        if self.collection_format is not None:
            metadata["collectionFormat"] = self.collection_format
        metadata.update({k: v for k, v in self.extra.items() if v is not None})
        return metadata


def api_parameter(
    name: str,
    in_: str,
    *,
    type: Any = None,
    required: bool | None = None,
    is_array: bool | None = None,
    enum: Any = None,
    collection_format: str | None = None,
    **extra: Any,
) -> Callable[[F], F]:
    """Attach an explicit parameter override to a handler.

    Keys left as None are not recorded, so they never override reflected
    values.
    """
    param: dict[str, Any] = {"name": name, "in": in_}
    for key, value in (
        ("type", type),
        ("required", required),
        ("isArray", is_array),
        ("enum", enum),
        ("collectionFormat", collection_format),
    ):
        if value is not None:
            param[key] = value
    param.update({k: v for k, v in extra.items() if v is not None})

    def decorator(func: F) -> F:
        existing = func.__dict__.get(API_PARAMETERS_ATTR, [])
        # decorators apply bottom-up; prepend to keep source order
        setattr(func, API_PARAMETERS_ATTR, [param, *existing])
        return func

    return decorator


def api_implicit_query(name: str, **kwargs: Any) -> Callable[[F], F]:
    return api_parameter(name, "query", **kwargs)


def api_implicit_header(name: str, **kwargs: Any) -> Callable[[F], F]:
    return api_parameter(name, "header", **kwargs)


def api_implicit_body(name: str, **kwargs: Any) -> Callable[[F], F]:
    return api_parameter(name, "body", **kwargs)


def api_implicit_file(name: str, **kwargs: Any) -> Callable[[F], F]:
    """Declare a multipart file field; the endpoint becomes a form endpoint."""
    kwargs.setdefault("type", "file")
    return api_parameter(name, "formData", **kwargs)
