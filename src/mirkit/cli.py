"""
mirkit command-line interface.

Commands:
- validate: check a document against the authoring contract
- canonical: print the canonical IR and its diagnostics
- export: compile a document into a React bundle
- render: print the live view tree of a document
- route: match a path against a route manifest
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from mirkit import __version__
from mirkit.codegen.export import export_document, write_bundle
from mirkit.config import load_config
from mirkit.core.canonical_ir import normalize
from mirkit.core.documents import load_document
from mirkit.core.errors import MirError
from mirkit.core.routing import match_route_manifest
from mirkit.core.validator import validate_mir_document
from mirkit.runtime.logging import setup_logging
from mirkit.runtime.renderer import render_document
from mirkit.specs.bundle import BundleType
from mirkit.specs.diagnostics import Diagnostic
from mirkit.specs.routes import RouteManifest

console = Console()
err_console = Console(stderr=True)

app = typer.Typer(
    help="mirkit - validate, render and compile MIR UI documents",
    no_args_is_help=True,
)

SEVERITY_STYLES = {"error": "red", "warning": "yellow", "info": "dim"}


def version_callback(value: bool) -> None:
    if value:
        typer.echo(f"mirkit {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging"),
    log_dir: Path | None = typer.Option(None, "--log-dir", help="Also write JSONL logs to this directory"),
    version: bool | None = typer.Option(
        None,
        "--version",
        callback=version_callback,
        is_eager=True,
        help="Show version",
    ),
) -> None:
    """mirkit CLI main callback for global options."""
    setup_logging(level=logging.DEBUG if verbose else logging.WARNING, log_dir=log_dir)


def _fail(message: str) -> typer.Exit:
    err_console.print(f"[red]Error:[/red] {message}")
    return typer.Exit(code=1)


def _diagnostics_table(diagnostics: list[Diagnostic], title: str = "Diagnostics") -> Table:
    table = Table(title=title)
    table.add_column("Severity")
    table.add_column("Code", style="cyan")
    table.add_column("Path")
    table.add_column("Message")
    for diagnostic in diagnostics:
        severity = diagnostic.severity.value
        style = SEVERITY_STYLES.get(severity, "")
        table.add_row(f"[{style}]{severity}[/{style}]", diagnostic.code, diagnostic.path or "-", diagnostic.message)
    return table


def parse_param(raw: str) -> tuple[str, object]:
    """Parse a `key=value` option; the value is read as JSON when possible."""
    key, sep, value = raw.partition("=")
    if not sep or not key.strip():
        raise typer.BadParameter(f"Expected key=value, got '{raw}'")
    try:
        return key.strip(), json.loads(value)
    except json.JSONDecodeError:
        return key.strip(), value


@app.command()
def validate(
    document: Path = typer.Argument(..., help="MIR document (JSON)"),  # noqa: B008
) -> None:
    """
    Validate a document against the authoring contract.

    Exits with code 1 when any issue is found.
    """
    try:
        doc = load_document(document)
    except MirError as e:
        raise _fail(str(e)) from e

    result = validate_mir_document(doc)
    if not result.issues:
        console.print(f"[green]OK[/green] {document} (version {result.document.version})")
        return

    table = Table(title=f"Issues in {document.name}")
    table.add_column("Code", style="cyan")
    table.add_column("Path")
    table.add_column("Message")
    for issue in result.issues:
        table.add_row(issue.code, issue.path, issue.message)
    console.print(table)
    console.print(f"[red]{len(result.issues)} issue(s)[/red]")
    raise typer.Exit(code=1)


@app.command()
def canonical(
    document: Path = typer.Argument(..., help="MIR document (JSON)"),  # noqa: B008
) -> None:
    """Print the canonical IR as JSON; diagnostics go to stderr."""
    try:
        doc = load_document(document)
    except MirError as e:
        raise _fail(str(e)) from e

    result = normalize(doc)
    typer.echo(result.document.model_dump_json(indent=2, by_alias=True, exclude_none=True))
    if result.diagnostics:
        err_console.print(_diagnostics_table(result.diagnostics))


@app.command()
def export(
    document: Path = typer.Argument(..., help="MIR document (JSON)"),  # noqa: B008
    bundle_type: BundleType | None = typer.Option(
        None, "--type", "-t", help="Bundle type (default from config: project)"
    ),
    output: Path | None = typer.Option(
        None, "--output", "-o", help="Write files to this directory"
    ),
    config_path: Path | None = typer.Option(
        None, "--config", "-c", help="mirkit.toml (default: search current directory)"
    ),
    name: str | None = typer.Option(None, "--name", "-n", help="Component name"),
) -> None:
    """
    Compile a document into a React bundle.

    Examples:
        mirkit export page.json                  # List bundle files
        mirkit export page.json -o build/app     # Write a Vite project
        mirkit export page.json -t component     # Single component module
    """
    try:
        config = load_config(config_path)
        doc = load_document(document)
        bundle = export_document(
            doc,
            bundle_type or config.codegen.export_type,
            config.compile_options(component_name=name),
        )
        written = write_bundle(bundle, output) if output else []
    except MirError as e:
        raise _fail(str(e)) from e

    if bundle.diagnostics:
        err_console.print(_diagnostics_table(bundle.diagnostics))

    if output:
        console.print(f"[green]Wrote {len(written)} files[/green] to {output}")
        return

    table = Table(title=f"{bundle.type.value} bundle")
    table.add_column("Path", style="cyan")
    table.add_column("Language")
    table.add_column("Bytes", justify="right")
    for file in bundle.files:
        marker = " (entry)" if file.path == bundle.entry_file_path else ""
        table.add_row(f"{file.path}{marker}", file.language, str(len(file.content.encode())))
    console.print(table)


@app.command()
def render(
    document: Path = typer.Argument(..., help="MIR document (JSON)"),  # noqa: B008
    param: list[str] = typer.Option(  # noqa: B008
        [], "--param", "-p", help="Parameter override as key=value (repeatable)"
    ),
    path: str = typer.Option("/", "--path", help="Current route path"),
    preview: bool = typer.Option(False, "--preview", help="Use mock data scopes"),
    config_path: Path | None = typer.Option(None, "--config", "-c", help="mirkit.toml"),
) -> None:
    """Render a document and print the view tree as JSON."""
    params = dict(parse_param(raw) for raw in param)
    try:
        config = load_config(config_path)
        doc = load_document(document)
    except MirError as e:
        raise _fail(str(e)) from e

    result = render_document(
        doc, params=params, current_path=path, preview=preview, **config.render_options()
    )
    typer.echo(json.dumps(result.tree.to_dict(), indent=2, ensure_ascii=False, default=str))
    if result.diagnostics:
        err_console.print(_diagnostics_table(result.diagnostics))


@app.command()
def route(
    manifest: Path = typer.Argument(..., help="Route manifest (JSON)"),  # noqa: B008
    path: str = typer.Argument(..., help="Path to match, e.g. /users/42"),
    partial: bool = typer.Option(False, "--partial", help="Allow an unmatched remainder"),
) -> None:
    """Match a path against a route manifest."""
    try:
        route_manifest = RouteManifest.model_validate(json.loads(manifest.read_text(encoding="utf-8")))
    except (OSError, ValueError) as e:
        raise _fail(f"Cannot load manifest {manifest}: {e}") from e

    match = match_route_manifest(route_manifest, path, allow_partial=partial)
    if match is None:
        console.print(f"[yellow]No route matches[/yellow] {path}")
        raise typer.Exit(code=1)

    table = Table(title=f"Route match for {path}")
    table.add_column("Route", style="cyan")
    table.add_column("Segment")
    table.add_column("Layout")
    table.add_column("Page")
    for node in match.chain:
        table.add_row(
            node.id,
            "(index)" if node.index else (node.segment or "-"),
            node.layout_doc_id or "-",
            node.page_doc_id or "-",
        )
    console.print(table)
    for key, value in match.params.items():
        console.print(f"  [bold]{key}[/bold] = {value}")
    if match.remainder:
        console.print(f"Remainder: {match.remainder_path}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
