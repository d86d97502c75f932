from __future__ import annotations

import logging
from typing import Literal, Optional
from urllib.parse import urlsplit

from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import HTMLResponse, JSONResponse, Response
from starlette.routing import Route

from rpcspec.openapi.generator import generate
from rpcspec.registry.snapshot import EndpointRegistry
from rpcspec.render.console import render_console_html
from rpcspec.render.text import to_json, to_yaml
from rpcspec.utils.config import Settings

logger = logging.getLogger(__name__)

DocFormat = Literal["console", "json", "yaml"]

YAML_MEDIA_TYPE = "application/yaml"


def resolve_format(value: Optional[str]) -> DocFormat:
    """`json` and `yaml` select text output; anything else gets the console."""
    if value == "json":
        return "json"
    if value == "yaml":
        return "yaml"
    return "console"


def api_server_url(request_url: str, api_port: int) -> str:
    """Same scheme and host as the docs request, on the RPC transport's port."""
    parts = urlsplit(request_url)
    host = parts.hostname or "localhost"
    if ":" in host:
        host = f"[{host}]"
    return f"{parts.scheme or 'http'}://{host}:{api_port}"


def render_document(registry: EndpointRegistry, settings: Settings, fmt: DocFormat, server_url: str) -> Response:
    # regenerated on every request; the registry snapshot is immutable
    doc = generate(registry, settings.meta(server_url=server_url))
    if fmt == "json":
        return Response(to_json(doc, pretty=True), media_type="application/json")
    if fmt == "yaml":
        return Response(to_yaml(doc), media_type=YAML_MEDIA_TYPE)
    return HTMLResponse(render_console_html(doc))


def docs_route(registry: EndpointRegistry, settings: Settings, path: str = "/openapi") -> Route:
    async def openapi_docs(request: Request) -> Response:
        fmt = resolve_format(request.query_params.get("format"))
        server_url = api_server_url(str(request.url), settings.api_port)
        logger.debug("docs.request", extra={"format": fmt, "server_url": server_url})
        return render_document(registry, settings, fmt, server_url)

    return Route(path, openapi_docs, methods=["GET"])


def build_docs_app(registry: EndpointRegistry, settings: Settings | None = None) -> Starlette:
    settings = settings or Settings.from_env()

    async def health(request: Request) -> JSONResponse:
        return JSONResponse(
            {"ok": True, "endpoints": len(registry), "registry": registry.fingerprint}
        )

    return Starlette(
        routes=[
            docs_route(registry, settings),
            Route("/health", health, methods=["GET"]),
        ]
    )
