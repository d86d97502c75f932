from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterator

from rpcspec.classify.naming import classify_verb, is_auth_exempt, to_display_label
from rpcspec.domain.models import DocumentMeta, EndpointDescriptor, MethodDescriptor
from rpcspec.errors import GenerationError
from rpcspec.openapi.schema import request_schema, response_schema, security_schemes
from rpcspec.registry.snapshot import EndpointRegistry
from rpcspec.render.text import to_json, to_yaml
from rpcspec.utils.logging import scoped_timer

logger = logging.getLogger(__name__)

OPENAPI_VERSION = "3.0.3"
RPC_HTTP_METHOD = "POST"

Document = dict[str, Any]


@dataclass(frozen=True)
class OperationEntry:
    path: str
    verb: str  # lowercase, as used in the paths map
    operation: dict[str, Any]


def operation_id(endpoint_name: str, method_name: str) -> str:
    return f"{endpoint_name}_{method_name}"


def operation_path(endpoint_name: str, method_name: str) -> str:
    return f"/{endpoint_name}/{method_name}"


def _description(endpoint_name: str, method_name: str, verb: str, is_login: bool) -> str:
    if is_login:
        return (
            "Login with email and password to obtain an authentication token. "
            'The response contains a "key" field which is your bearer token. '
            'Use this token in the "Authorize" button above or as a Bearer token '
            "in the Authorization header.\n\n"
            f"Note: the RPC transport uses POST internally for all calls. "
            f"The HTTP method shown ({verb}) is semantic."
        )
    return (
        f"Note: the RPC transport uses POST internally for all calls to /{endpoint_name} "
        f'with {{"method": "{method_name}", ...params}} in the body. '
        f"The HTTP method shown ({verb}) is semantic for REST-like documentation."
    )


def build_operation(endpoint: EndpointDescriptor, method: MethodDescriptor) -> tuple[str, dict[str, Any]]:
    """Return (verb, operation) for a single registry method."""
    verb = classify_verb(method.name)
    is_login = method.name == "login"
    secured = endpoint.requires_authentication and not is_auth_exempt(endpoint.name, method.name)

    media: dict[str, Any] = {"schema": request_schema(method)}
    if is_login and "email" in method.parameters and "password" in method.parameters:
        media["example"] = {"email": "user@example.com", "password": "your-password"}

    operation: dict[str, Any] = {
        "operationId": operation_id(endpoint.name, method.name),
        "summary": to_display_label(method.name),
        "tags": [endpoint.name],
        "parameters": [],
        "description": _description(endpoint.name, method.name, verb, is_login),
        "requestBody": {"required": True, "content": {"application/json": media}},
        "responses": {
            "200": response_schema(is_login),
            "400": {"description": "Bad request"},
            "401": {"description": "Unauthorized"},
            "500": {"description": "Internal server error"},
        },
        # where the call really goes; used to undo the REST-shaped paths
        "x-rpc-endpoint": f"/{endpoint.name}",
        "x-rpc-method": method.name,
        "x-rpc-http-method": RPC_HTTP_METHOD,
    }
    if secured:
        operation["security"] = [{"bearerAuth": []}]
    return verb, operation


def generate(registry: EndpointRegistry, meta: DocumentMeta) -> Document:
    """
    Build an OpenAPI 3.0.3 document from a registry snapshot.

    Pure and deterministic: the registry is only read, every call returns a
    freshly allocated document. Raises GenerationError if two methods map to
    the same operationId or (path, verb) pair.
    """
    paths: dict[str, dict[str, Any]] = {}
    seen_ids: dict[str, str] = {}

    with scoped_timer(logger, "openapi.generate") as timing:
        for endpoint in registry:
            for method in endpoint.methods:
                path = operation_path(endpoint.name, method.name)
                verb, operation = build_operation(endpoint, method)

                op_id = operation["operationId"]
                if op_id in seen_ids:
                    raise GenerationError(
                        f"operationId {op_id!r} produced by both {seen_ids[op_id]} and {path}"
                    )
                seen_ids[op_id] = path

                slot = paths.setdefault(path, {})
                key = verb.lower()
                if key in slot:
                    raise GenerationError(f"Duplicate operation {verb} {path}")
                slot[key] = operation

        timing["paths"] = len(paths)
        timing["operations"] = len(seen_ids)

    info: dict[str, Any] = {"title": meta.title, "version": meta.version}
    if meta.description is not None:
        info["description"] = meta.description

    doc: Document = {"openapi": OPENAPI_VERSION, "info": info}
    if meta.server_url is not None:
        doc["servers"] = [{"url": meta.server_url, "description": "API Server"}]
    doc["paths"] = paths
    doc["components"] = {"schemas": {}, "securitySchemes": security_schemes()}
    return doc


def iter_operations(doc: Document) -> Iterator[OperationEntry]:
    for path, ops in doc.get("paths", {}).items():
        for verb, operation in ops.items():
            yield OperationEntry(path=path, verb=verb, operation=operation)


class OpenApiGenerator:
    """Convenience wrapper binding a registry snapshot to document metadata."""

    def __init__(self, registry: EndpointRegistry, meta: DocumentMeta | None = None):
        self.registry = registry
        self.meta = meta or DocumentMeta()

    def generate(self) -> Document:
        return generate(self.registry, self.meta)

    def to_json(self, pretty: bool = True) -> str:
        return to_json(self.generate(), pretty=pretty)

    def to_yaml(self) -> str:
        return to_yaml(self.generate())

    def operations(self) -> list[OperationEntry]:
        return list(iter_operations(self.generate()))
