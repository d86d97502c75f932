from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any, Iterable, Iterator, Mapping, Optional

from pydantic import ValidationError

from rpcspec.domain.models import EndpointDescriptor, MethodDescriptor, ParameterDescriptor
from rpcspec.errors import RegistryError
from rpcspec.registry.types import parse_type


def _sha1_hex(text: str) -> str:
    return hashlib.sha1(text.encode("utf-8")).hexdigest()


class EndpointRegistry:
    """Immutable, ordered snapshot of the endpoints a document is built from.

    Invariants checked at construction:
    - endpoint names are unique
    - method names are unique within an endpoint, compared case-insensitively
      (two methods differing only by case are rejected, never merged)
    """

    def __init__(self, endpoints: Iterable[EndpointDescriptor] = ()):
        items = tuple(endpoints)
        seen: set[str] = set()
        for ep in items:
            if ep.name in seen:
                raise RegistryError(f"Duplicate endpoint name: {ep.name!r}")
            seen.add(ep.name)
            _check_method_names(ep)
        self._endpoints = items

    def __iter__(self) -> Iterator[EndpointDescriptor]:
        return iter(self._endpoints)

    def __len__(self) -> int:
        return len(self._endpoints)

    def get(self, name: str) -> Optional[EndpointDescriptor]:
        for ep in self._endpoints:
            if ep.name == name:
                return ep
        return None

    @property
    def fingerprint(self) -> str:
        """Stable content hash; changes whenever any descriptor changes."""
        payload = [ep.model_dump(mode="json") for ep in self._endpoints]
        return _sha1_hex(json.dumps(payload, separators=(",", ":")))

    # ----------------------------
    # Manifest loading
    # ----------------------------

    @classmethod
    def from_manifest(cls, data: Mapping[str, Any]) -> "EndpointRegistry":
        """
        Build a registry from a JSON-style manifest:

            {"endpoints": [{"name": "user", "requiresAuthentication": true,
                            "methods": [{"name": "getUser",
                                         "parameters": {"id": {"type": "int"}}}]}]}

        Parameter types may be TypeTag values or source type names
        (`String?`, `List<User>`, `Optional[int]`, ...).
        """
        if not isinstance(data, Mapping):
            raise RegistryError("Manifest must be a JSON object")
        raw_endpoints = data.get("endpoints", [])
        if not isinstance(raw_endpoints, list):
            raise RegistryError("Manifest 'endpoints' must be a list")

        endpoints = [_endpoint_from_raw(raw) for raw in raw_endpoints]
        return cls(endpoints)

    @classmethod
    def load(cls, path: Path) -> "EndpointRegistry":
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise RegistryError(f"Cannot read manifest {path}: {exc}") from exc
        return cls.from_manifest(data)


def _check_method_names(ep: EndpointDescriptor) -> None:
    seen: dict[str, str] = {}
    for m in ep.methods:
        key = m.name.lower()
        if key in seen:
            raise RegistryError(
                f"Endpoint {ep.name!r} declares both {seen[key]!r} and {m.name!r}; "
                "method names must be unique (case-insensitive)"
            )
        seen[key] = m.name


def _endpoint_from_raw(raw: Any) -> EndpointDescriptor:
    if not isinstance(raw, Mapping):
        raise RegistryError("Each endpoint entry must be an object")

    raw_methods = raw.get("methods", [])
    if not isinstance(raw_methods, list):
        raise RegistryError(f"Endpoint {raw.get('name')!r}: 'methods' must be a list")

    requires_auth = raw.get("requiresAuthentication", raw.get("requires_authentication", False))
    try:
        return EndpointDescriptor(
            name=raw.get("name", ""),
            requires_authentication=bool(requires_auth),
            methods=tuple(_method_from_raw(m) for m in raw_methods),
        )
    except ValidationError as exc:
        raise RegistryError(f"Invalid endpoint {raw.get('name')!r}: {exc}") from exc


def _method_from_raw(raw: Any) -> MethodDescriptor:
    if not isinstance(raw, Mapping):
        raise RegistryError("Each method entry must be an object")

    raw_params = raw.get("parameters")
    if raw_params is None:
        raw_params = {}
    if not isinstance(raw_params, Mapping):
        raise RegistryError(f"Method {raw.get('name')!r}: 'parameters' must be an object")

    params: dict[str, ParameterDescriptor] = {}
    for pname, pdesc in raw_params.items():
        params[str(pname)] = _param_from_raw(pdesc)

    try:
        return MethodDescriptor(name=raw.get("name", ""), parameters=params)
    except ValidationError as exc:
        raise RegistryError(f"Invalid method {raw.get('name')!r}: {exc}") from exc


def _param_from_raw(raw: Any) -> ParameterDescriptor:
    # shorthand: "id": "int"
    if isinstance(raw, str):
        raw = {"type": raw}
    if not isinstance(raw, Mapping):
        raise RegistryError("Each parameter must be a type string or an object")

    type_name = str(raw.get("type", "") or "")
    tag, nullable, name = parse_type(type_name)
    if raw.get("nullable"):
        nullable = True
    return ParameterDescriptor(type_tag=tag, nullable=nullable, type_name=name)
