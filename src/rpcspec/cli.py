from __future__ import annotations

from dataclasses import replace
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from rpcspec.domain.models import DocumentMeta
from rpcspec.errors import RpcSpecError
from rpcspec.openapi.generator import OpenApiGenerator
from rpcspec.registry.snapshot import EndpointRegistry
from rpcspec.utils.config import Settings
from rpcspec.utils.logging import configure_root


app = typer.Typer(no_args_is_help=True, add_completion=False)

console = Console()
err_console = Console(stderr=True)


def _load_registry(manifest: str) -> EndpointRegistry:
    manifest_path = Path(manifest).expanduser().resolve()
    if not manifest_path.is_file():
        raise typer.BadParameter(f"Manifest does not exist: {manifest_path}")
    try:
        return EndpointRegistry.load(manifest_path)
    except RpcSpecError as exc:
        raise typer.BadParameter(str(exc)) from exc


@app.callback()
def main_callback() -> None:
    configure_root(Settings.from_env().log_level)


@app.command()
def generate(
    manifest: str = typer.Argument(..., help="Path to the endpoint manifest (JSON)"),
    format: str = typer.Option("json", help="Output format: json|yaml"),
    compact: bool = typer.Option(False, help="Compact JSON (ignored for yaml)"),
    title: Optional[str] = typer.Option(None, help="Document title"),
    version: Optional[str] = typer.Option(None, help="Document version"),
    description: Optional[str] = typer.Option(None, help="Document description"),
    server_url: Optional[str] = typer.Option(None, help="Server URL advertised in the document"),
    out: Optional[str] = typer.Option(None, help="Output path (default: print to stdout)"),
) -> None:
    fmt = format.lower().strip()
    if fmt not in ("json", "yaml"):
        raise typer.BadParameter("format must be one of: json, yaml")

    registry = _load_registry(manifest)
    settings = Settings.from_env()
    meta = DocumentMeta(
        title=title or settings.title,
        version=version or settings.version,
        description=description if description is not None else settings.description,
        server_url=server_url,
    )
    generator = OpenApiGenerator(registry, meta)

    try:
        text = generator.to_yaml() if fmt == "yaml" else generator.to_json(pretty=not compact)
    except RpcSpecError as exc:
        err_console.print(f"[bold red]error[/bold red]: {exc}")
        raise typer.Exit(code=1)

    if out:
        out_path = Path(out).expanduser()
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_text(text, encoding="utf-8")
        console.print(f"[bold green]Wrote[/bold green] {fmt} document to: {out_path}")
    else:
        # plain stdout: the document must stay machine-readable
        typer.echo(text)


@app.command()
def routes(
    manifest: str = typer.Argument(..., help="Path to the endpoint manifest (JSON)"),
) -> None:
    registry = _load_registry(manifest)
    try:
        entries = OpenApiGenerator(registry).operations()
    except RpcSpecError as exc:
        err_console.print(f"[bold red]error[/bold red]: {exc}")
        raise typer.Exit(code=1)

    console.print(f"[bold]Endpoints:[/bold] {len(registry)}")
    console.print(f"[bold]Operations:[/bold] {len(entries)}")

    table = Table(show_header=True, header_style="bold")
    table.add_column("VERB", no_wrap=True)
    table.add_column("PATH")
    table.add_column("OPERATION")
    table.add_column("AUTH", no_wrap=True)

    for e in entries:
        table.add_row(
            e.verb.upper(),
            e.path,
            e.operation["operationId"],
            "bearer" if "security" in e.operation else "-",
        )

    console.print(table)


@app.command()
def serve(
    manifest: str = typer.Argument(..., help="Path to the endpoint manifest (JSON)"),
    host: Optional[str] = typer.Option(None, help="Bind host (default: RPCSPEC_DOCS_HOST)"),
    port: Optional[int] = typer.Option(None, help="Bind port (default: RPCSPEC_DOCS_PORT)"),
    api_port: Optional[int] = typer.Option(None, help="RPC transport port the console calls"),
) -> None:
    import uvicorn

    from rpcspec.web.routes import build_docs_app

    registry = _load_registry(manifest)
    settings = Settings.from_env()
    if api_port is not None:
        settings = replace(settings, api_port=api_port)

    bind_host = host or settings.docs_host
    bind_port = port or settings.docs_port
    console.print(
        f"[bold green]rpcspec[/bold green] serving {len(registry)} endpoints on "
        f"http://{bind_host}:{bind_port}/openapi (RPC port {settings.api_port})"
    )
    uvicorn.run(build_docs_app(registry, settings), host=bind_host, port=bind_port)


@app.command()
def ping() -> None:
    console.print("pong")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
