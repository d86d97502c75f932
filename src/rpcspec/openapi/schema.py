from __future__ import annotations

import copy
from typing import Any

from rpcspec.domain.models import MethodDescriptor, ParameterDescriptor, TypeTag

Schema = dict[str, Any]

BEARER_DESCRIPTION = (
    "Bearer token authentication. "
    "To obtain a token:\n"
    "1. Call the login endpoint (/emailIdp/login) with your email and password\n"
    '2. Copy the "key" value from the response\n'
    '3. Click "Authorize" above and paste the token, '
    "or use it in the Authorization header as: Bearer <token>"
)

_BASE_SCHEMAS: dict[TypeTag, Schema] = {
    TypeTag.INTEGER: {"type": "integer", "format": "int64"},
    TypeTag.FLOAT: {"type": "number", "format": "double"},
    TypeTag.TEXT: {"type": "string"},
    TypeTag.BOOLEAN: {"type": "boolean"},
    TypeTag.TIMESTAMP: {"type": "string", "format": "date-time"},
    TypeTag.UUID: {"type": "string", "format": "uuid"},
    TypeTag.MAPPING: {"type": "object", "additionalProperties": True},
    TypeTag.SEQUENCE: {"type": "array", "items": {"type": "object"}},
}


def synthesize(type_tag: TypeTag, nullable: bool, type_name: str = "") -> Schema:
    """
    Map a parameter type to a JSON schema fragment.

    Unknown / custom types fall back to an object carrying the original type
    name. Nullable parameters get both the `oneOf` null alternative and the
    OpenAPI 3.0 `nullable` flag.
    """
    base = _BASE_SCHEMAS.get(type_tag)
    if base is None:
        schema: Schema = {
            "type": "object",
            "description": f"Type: {type_name or type_tag.value}",
        }
    else:
        # fresh copy per call; generated documents never share nodes
        schema = copy.deepcopy(base)

    if nullable:
        return {"oneOf": [schema, {"type": "null"}], "nullable": True}
    return schema


def parameter_schema(param: ParameterDescriptor) -> Schema:
    return synthesize(param.type_tag, param.nullable, param.type_name)


def method_property(method_name: str) -> Schema:
    return {
        "type": "string",
        "enum": [method_name],
        "description": "The method name to call on the endpoint",
        "example": method_name,
    }


def request_schema(method: MethodDescriptor) -> Schema:
    properties: Schema = {"method": method_property(method.name)}
    required = ["method"]

    for pname, param in method.parameters.items():
        properties[pname] = parameter_schema(param)
        if not param.nullable:
            required.append(pname)

    return {"type": "object", "properties": properties, "required": required}


def response_schema(is_login: bool) -> Schema:
    if not is_login:
        return {
            "description": "Successful response",
            "content": {"application/json": {"schema": {"type": "object"}}},
        }

    return {
        "description": (
            "Authentication successful. Returns an AuthSuccess object "
            "containing the session token."
        ),
        "content": {
            "application/json": {
                "schema": {
                    "type": "object",
                    "properties": {
                        "keyId": {"type": "string", "description": "Key ID for the session"},
                        "key": {
                            "type": "string",
                            "description": "Session key (use this as Bearer token)",
                        },
                        "userInfo": {"type": "object", "description": "User information"},
                    },
                    "required": ["keyId", "key"],
                },
                "example": {
                    "keyId": "session-key-id",
                    "key": "your-bearer-token-here",
                    "userInfo": {"id": 1, "userName": "user@example.com"},
                },
            }
        },
    }


def security_schemes() -> Schema:
    return {
        "bearerAuth": {
            "type": "http",
            "scheme": "bearer",
            "bearerFormat": "JWT",
            "description": BEARER_DESCRIPTION,
        }
    }
