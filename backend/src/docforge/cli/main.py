"""docforge CLI entry point."""

import json
import logging
from pathlib import Path

import click

from docforge.config import Settings
from docforge.errors import ApiError
from docforge.hooks import import_listener_modules, load_listener_bindings
from docforge.ordering import normalize_order_by, order_by


@click.group()
@click.option("--verbose", "-v", is_flag=True, default=False, help="Enable debug logging.")
def cli(verbose: bool):
    """docforge — listener-driven document API CLI."""
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING)


@cli.command()
@click.option("--host", default="127.0.0.1", show_default=True)
@click.option("--port", default=None, type=int, help="Defaults to DOCFORGE_PORT or 8000.")
@click.option("--reload", is_flag=True, default=False, help="Reload on code changes.")
def serve(host: str, port: int | None, reload: bool):
    """Run the API server."""
    import uvicorn

    uvicorn.run(
        "docforge.api:create_app",
        factory=True,
        host=host,
        port=port or Settings.from_env().port,
        reload=reload,
        log_level="debug" if reload else "info",
    )


def _with_default_direction(spec, direction: int):
    """Give bare field names in a list spec the requested direction."""
    if not isinstance(spec, list):
        return spec
    result = []
    for entry in spec:
        if isinstance(entry, str):
            entry = [entry, direction]
        elif isinstance(entry, list) and len(entry) == 1:
            entry = [entry[0], direction]
        result.append(entry)
    return result


@cli.command("sort")
@click.argument("source", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--orderby",
    required=True,
    help='Sort specification as JSON, e.g. \'{"age": -1}\' or \'["name"]\'.',
)
@click.option(
    "--default-direction",
    type=click.Choice(["1", "-1"]),
    default="1",
    show_default=True,
    help="Direction for fields listed without one (1 ascending, -1 descending).",
)
def sort_documents(source: Path, orderby: str, default_direction: str):
    """Order a JSON array of documents and print the result."""
    try:
        spec = json.loads(orderby)
    except json.JSONDecodeError as e:
        raise click.BadParameter(f"not valid JSON: {e}", param_hint="--orderby")

    try:
        order = normalize_order_by(_with_default_direction(spec, int(default_direction)))
    except ApiError as e:
        raise click.BadParameter(e.message, param_hint="--orderby")

    documents = json.loads(source.read_text())
    if not isinstance(documents, list):
        click.echo("Error: source must contain a JSON array of documents", err=True)
        raise SystemExit(1)

    click.echo(json.dumps(order_by(documents, order), indent=2))


@cli.command()
@click.argument("bindings", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--module",
    "-m",
    "modules",
    multiple=True,
    help="Module to import first so its @listener functions are catalogued.",
)
def listeners(bindings: Path, modules: tuple[str, ...]):
    """Show the listeners a bindings file resolves to."""
    try:
        import_listener_modules(modules)
        registry = load_listener_bindings(bindings)
    except (ImportError, ValueError) as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(1)

    if not registry:
        click.echo("No listeners resolved.")
        return

    for event in registry:
        click.echo(click.style(event, bold=True))
        for entry in registry[event]:
            scope = ", ".join(sorted(entry.collections)) if entry.collections else "*"
            click.echo(f"  {entry.name}  [{scope}]")
