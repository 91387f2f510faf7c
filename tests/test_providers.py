"""Tests for providers - annotations and pydantic metadata providers."""

from __future__ import annotations

import datetime
import uuid
from typing import Annotated, Any, Literal

import pytest
from flask.views import MethodView
from pydantic import BaseModel, Field
from werkzeug.datastructures import FileStorage

from flask_apiparams import ApiProperty, Body, Query, api_implicit_query
from flask_apiparams.explorers import DefinitionRegistry, explore_model_definition
from flask_apiparams.metadata import (
    UNTYPED,
    Composite,
    MetadataProvider,
    Primitive,
    Reference,
    RouteArgBinding,
)
from flask_apiparams.providers import (
    AnnotationsMetadataProvider,
    PydanticMetadataProvider,
    get_provider,
)
from flask_apiparams.providers.annotations_provider import describe_hint, resolve_type_ref
from tests import _models
from tests._models import Color, Customer, Priority, User, VipCustomer


class Owner(BaseModel):
    email: str


class Pet(BaseModel):
    name: str = Field(description="Pet name")
    age: int | None = None
    kind: Literal["cat", "dog"] = "cat"
    owner: Owner
    tags: list[str] = Field(default_factory=list, json_schema_extra={"uniqueItems": True})
    weight: Annotated[float, ApiProperty(minimum=0)] = 1.0


class PetView(MethodView):
    def get(self, pet_id: Annotated[int, Query("id")]):
        return {}

    @api_implicit_query("dry_run", type=bool, required=False)
    def post(self, body: Annotated[Pet, Body()]):
        return {}


def _mixed_signature(a: int, *args: Any, b: Annotated[str, Query("b")], **kwargs: Any):
    return None


def _unannotated(a, b: Annotated[str, Query("b")]):
    return None


# ---------------------------------------------------------------------------
# resolve_type_ref / describe_hint
# ---------------------------------------------------------------------------


class TestResolveTypeRef:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (str, Primitive("string")),
            (int, Primitive("integer")),
            (float, Primitive("number")),
            (bool, Primitive("boolean")),
            (list, Primitive("array")),
            (dict, UNTYPED),
            (object, UNTYPED),
            (Any, UNTYPED),
            (datetime.datetime, Primitive("string")),
            (uuid.UUID, Primitive("string")),
            (FileStorage, Primitive("file")),
            (dict[str, int], UNTYPED),
            (Color, Primitive("string")),
            (Priority, Primitive("number")),
            (User, Composite(User)),
            ("String", Primitive("String")),
            ("#/definitions/Thing", Reference("Thing")),
        ],
    )
    def test_resolution(self, value, expected):
        assert resolve_type_ref(value) == expected

    def test_none(self):
        assert resolve_type_ref(None) is None

    def test_type_ref_passthrough(self):
        ref = Reference("X")
        assert resolve_type_ref(ref) is ref


class TestDescribeHint:
    def test_optional(self):
        assert describe_hint(int | None) == {"required": False, "type": int}

    def test_list(self):
        assert describe_hint(list[User]) == {"isArray": True, "type": User}

    def test_optional_list_of_enum(self):
        assert describe_hint(list[Color] | None) == {
            "required": False,
            "isArray": True,
            "enum": Color,
            "type": Color,
        }

    def test_nested_list(self):
        assert describe_hint(list[list[int]]) == {"isArray": True, "arrayDepth": 2, "type": int}

    def test_bare_list(self):
        assert describe_hint(list) == {"isArray": True, "type": Any}

    def test_literal(self):
        assert describe_hint(Literal["a", "b"]) == {"enum": ["a", "b"], "type": None}

    def test_annotated_stripped(self):
        assert describe_hint(Annotated[str, ApiProperty()]) == {"type": str}


# ---------------------------------------------------------------------------
# AnnotationsMetadataProvider
# ---------------------------------------------------------------------------


class TestAnnotationsProvider:
    def test_satisfies_protocol(self, provider):
        assert isinstance(provider, MetadataProvider)

    def test_method_skips_self(self, provider):
        assert provider.get_param_types(PetView.get) == [Primitive("integer")]
        assert provider.get_route_args_metadata(PetView.get) == {"4:0": RouteArgBinding(0, "id")}

    def test_var_args_skipped(self, provider):
        assert provider.get_param_types(_mixed_signature) == [Primitive("integer"), Primitive("string")]
        assert provider.get_route_args_metadata(_mixed_signature) == {"4:1": RouteArgBinding(1, "b")}

    def test_unannotated_is_untyped(self, provider):
        assert provider.get_param_types(_unannotated) == [UNTYPED, Primitive("string")]

    def test_list_argument_is_array(self, provider):
        def handler(ids: list[int]):
            return ids

        assert provider.get_param_types(handler) == [Primitive("integer")]
        assert provider.get_param_metadata(handler) == [{"isArray": True}]

    def test_param_metadata_shapes(self, provider):
        assert provider.get_param_metadata(_models.list_by_color) == [
            {"enum": Color},
            {"isArray": True, "enum": Color},
        ]
        assert provider.get_param_metadata(_models.list_by_matrix) == [{"isArray": True, "arrayDepth": 2}]
        assert provider.get_param_metadata(_models.get_user) == [{}, {}, {}]

    def test_optional_argument_stays_required(self, provider):
        def handler(q: Annotated[int | None, Query("q")]):
            return q

        assert provider.get_param_types(handler) == [Primitive("integer")]
        assert provider.get_param_metadata(handler) == [{}]

    def test_literal_argument(self, provider):
        assert provider.get_param_types(_models.list_by_level) == [None]
        assert provider.get_param_metadata(_models.list_by_level) == [{"enum": ["gold", "silver"]}]

    def test_array_body_element_type(self, provider):
        assert provider.get_param_types(_models.bulk_update_pages) == [Composite(_models.Paging)]

    def test_model_properties_marked(self, provider):
        assert provider.get_model_properties(User) == [":id", ":name"]
        assert ":level" in provider.get_model_properties(VipCustomer)

    def test_property_metadata(self, provider):
        assert provider.get_property_metadata(Customer, "nickname") == {
            "type": Primitive("string"),
            "required": False,
            "example": "bob",
        }
        assert provider.get_property_metadata(Customer, "missing") is None

    def test_explicit_parameters_resolved(self, provider):
        assert provider.get_explicit_parameters(PetView.post) == [
            {"name": "dry_run", "in": "query", "type": Primitive("boolean"), "required": False},
        ]
        assert provider.get_explicit_parameters(PetView.get) is None


# ---------------------------------------------------------------------------
# PydanticMetadataProvider
# ---------------------------------------------------------------------------


class TestPydanticProvider:
    def test_all_fields_exposed(self, pydantic_provider):
        assert pydantic_provider.get_model_properties(Pet) == [
            ":name",
            ":age",
            ":kind",
            ":owner",
            ":tags",
            ":weight",
        ]

    def test_field_metadata(self, pydantic_provider):
        assert pydantic_provider.get_property_metadata(Pet, "name") == {
            "type": Primitive("string"),
            "required": True,
            "description": "Pet name",
        }
        assert pydantic_provider.get_property_metadata(Pet, "age") == {
            "type": Primitive("integer"),
            "required": False,
        }

    def test_marker_in_field_metadata(self, pydantic_provider):
        weight = pydantic_provider.get_property_metadata(Pet, "weight")
        assert weight["minimum"] == 0
        assert weight["default"] == 1.0

    def test_falls_back_for_plain_classes(self, pydantic_provider):
        assert pydantic_provider.get_model_properties(User) == [":id", ":name"]
        assert pydantic_provider.get_property_metadata(User, "id") == {"type": Primitive("number")}

    def test_definition(self, pydantic_provider):
        definitions = DefinitionRegistry()
        explore_model_definition(pydantic_provider, Pet, definitions)

        assert definitions.get("Owner") == {
            "type": "object",
            "properties": {"email": {"type": "string"}},
            "required": ["email"],
        }
        pet = definitions.get("Pet")
        assert pet["properties"]["kind"] == {"type": "string", "enum": ["cat", "dog"], "default": "cat"}
        assert pet["properties"]["owner"] == {"$ref": "#/definitions/Owner"}
        assert pet["properties"]["tags"] == {"type": "array", "items": {"type": "string"}, "uniqueItems": True}
        assert pet["required"] == ["name", "owner"]


class TestGetProvider:
    def test_known(self):
        assert isinstance(get_provider("annotations"), AnnotationsMetadataProvider)
        assert isinstance(get_provider("pydantic"), PydanticMetadataProvider)

    def test_unknown(self):
        with pytest.raises(ValueError, match="Unknown metadata provider"):
            get_provider("marshmallow")
