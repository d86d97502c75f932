import pytest

from rpcspec.domain.models import MethodDescriptor, ParameterDescriptor, TypeTag
from rpcspec.openapi.schema import request_schema, response_schema, security_schemes, synthesize


@pytest.mark.parametrize(
    "tag,expected",
    [
        (TypeTag.INTEGER, {"type": "integer", "format": "int64"}),
        (TypeTag.FLOAT, {"type": "number", "format": "double"}),
        (TypeTag.TEXT, {"type": "string"}),
        (TypeTag.BOOLEAN, {"type": "boolean"}),
        (TypeTag.TIMESTAMP, {"type": "string", "format": "date-time"}),
        (TypeTag.UUID, {"type": "string", "format": "uuid"}),
        (TypeTag.MAPPING, {"type": "object", "additionalProperties": True}),
        (TypeTag.SEQUENCE, {"type": "array", "items": {"type": "object"}}),
    ],
)
def test_synthesize_base_types(tag, expected):
    assert synthesize(tag, nullable=False) == expected


def test_synthesize_opaque_object_keeps_type_name():
    assert synthesize(TypeTag.OBJECT, False, "UserProfile") == {
        "type": "object",
        "description": "Type: UserProfile",
    }
    assert synthesize(TypeTag.OBJECT, False)["description"] == "Type: object"


@pytest.mark.parametrize("tag", list(TypeTag))
def test_nullable_wraps_with_one_of_and_flag(tag):
    schema = synthesize(tag, nullable=True)
    assert schema["nullable"] is True
    assert len(schema["oneOf"]) == 2
    assert schema["oneOf"][0] == synthesize(tag, nullable=False)
    assert schema["oneOf"][1] == {"type": "null"}


def test_synthesize_returns_fresh_objects():
    a = synthesize(TypeTag.SEQUENCE, False)
    a["items"]["type"] = "string"
    assert synthesize(TypeTag.SEQUENCE, False)["items"] == {"type": "object"}


def test_request_schema_method_first_then_params_in_order():
    method = MethodDescriptor(
        name="updateProfile",
        parameters={
            "id": ParameterDescriptor(type_tag=TypeTag.INTEGER),
            "bio": ParameterDescriptor(type_tag=TypeTag.TEXT, nullable=True),
            "age": ParameterDescriptor(type_tag=TypeTag.INTEGER),
        },
    )
    schema = request_schema(method)

    assert list(schema["properties"]) == ["method", "id", "bio", "age"]
    assert schema["required"] == ["method", "id", "age"]
    assert schema["properties"]["method"]["enum"] == ["updateProfile"]
    assert schema["properties"]["bio"] == {
        "oneOf": [{"type": "string"}, {"type": "null"}],
        "nullable": True,
    }


def test_response_schema_login_shape():
    resp = response_schema(is_login=True)
    media = resp["content"]["application/json"]
    assert media["schema"]["required"] == ["keyId", "key"]
    assert set(media["schema"]["properties"]) == {"keyId", "key", "userInfo"}
    assert media["example"]["key"]


def test_response_schema_generic():
    resp = response_schema(is_login=False)
    assert resp["content"]["application/json"]["schema"] == {"type": "object"}


def test_security_schemes_bearer():
    bearer = security_schemes()["bearerAuth"]
    assert bearer["type"] == "http"
    assert bearer["scheme"] == "bearer"
    assert bearer["bearerFormat"] == "JWT"
    assert "Bearer <token>" in bearer["description"]
