"""
entigen command-line interface.

Commands:
    build     Compile a DSL file and write the generated package
    check     Compile only and summarise the model
    inspect   Show entities, fields and references
    backends  List available backends
"""

import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from ._version import get_version
from .core import ir
from .core.compiler import compile_file
from .core.errors import BackendError, CompileError, ConfigError
from .core.manifest import DEFAULT_BACKEND, DEFAULT_OUTPUT, MANIFEST_NAME, load_manifest
from .stacks import get_backend, get_registry
from .stacks.base.backend import generate
from .stacks.base.utils import snake

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="entigen",
    help="Compile entity schemas and generate CRUD storage layers.",
    add_completion=False,
    no_args_is_help=True,
)
console = Console()


def version_callback(value: bool) -> None:
    if value:
        typer.echo(f"entigen version {get_version()}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: bool = typer.Option(
        False,
        "--version",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _compile(source: Path, name: str | None) -> ir.Model:
    """Compile or exit with status 1, printing the error."""
    try:
        return compile_file(source, name)
    except CompileError as e:
        typer.echo(f"Compile error: {e}", err=True)
        raise typer.Exit(code=1)
    except OSError as e:
        typer.echo(f"Error: cannot read {source}: {e.strerror or e}", err=True)
        raise typer.Exit(code=1)


@app.command()
def build(
    source: str | None = typer.Argument(None, help="DSL file (default: from entigen.toml)"),
    backend: str | None = typer.Option(None, "--backend", "-b", help="Backend name"),
    output: str | None = typer.Option(None, "--output", "-o", help="Output directory"),
    name: str | None = typer.Option(None, "--name", "-n", help="Model name"),
    manifest: str = typer.Option(MANIFEST_NAME, "--manifest", "-m", help="Path to entigen.toml"),
) -> None:
    """
    Compile a DSL file and write the generated package.

    Without SOURCE, the source, backend and output come from the manifest;
    options override manifest values.
    """
    if source is not None:
        source_path = Path(source)
        backend_name = backend or DEFAULT_BACKEND
        output_dir = Path(output or DEFAULT_OUTPUT)
        model_name = name
    else:
        try:
            mf = load_manifest(Path(manifest))
        except ConfigError as e:
            typer.echo(f"Error: {e}", err=True)
            raise typer.Exit(code=1)
        source_path = mf.source
        backend_name = backend or mf.backend
        output_dir = Path(output) if output else mf.output
        model_name = name or mf.name

    try:
        stack = get_backend(backend_name)
    except BackendError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    model = _compile(source_path, model_name)
    result = generate(model, stack)

    package_dir = output_dir / snake(model.name)
    logger.debug("writing %s artifacts to %s", len(result.artifacts), package_dir)
    written = result.write(package_dir)

    for warning in result.warnings:
        console.print(f"[yellow]warning:[/yellow] {warning}")
    for error in result.errors:
        console.print(f"[red]error:[/red] {error}")

    console.print(
        f"Generated {len(written)} files for {model.name} "
        f"({stack.name} backend) in {package_dir}"
    )
    if not result.success:
        raise typer.Exit(code=1)


@app.command()
def check(
    source: str = typer.Argument(..., help="DSL file"),
) -> None:
    """Compile a DSL file and summarise the model."""
    model = _compile(Path(source), None)

    table = Table(title=f"{model.name}")
    table.add_column("Entity")
    table.add_column("Kind")
    table.add_column("Parent")
    table.add_column("Fields", justify="right")
    for entity in model.entities:
        kind = "abstract" if entity.is_abstract else "concrete"
        table.add_row(entity.name, kind, entity.parent or "", str(len(entity.fields)))
    console.print(table)
    console.print(
        f"[green]OK[/green] {len(model.entities)} entities, {len(model.enums)} enums"
    )


@app.command()
def inspect(
    source: str = typer.Argument(..., help="DSL file"),
    entity: str | None = typer.Option(None, "--entity", "-e", help="Inspect a specific entity"),
) -> None:
    """Show entity fields, output declarations and references."""
    model = _compile(Path(source), None)

    entities = model.entities
    if entity is not None:
        found = model.get_entity(entity)
        if found is None:
            typer.echo(f"Error: unknown entity {entity}", err=True)
            raise typer.Exit(code=1)
        entities = [found]

    for item in entities:
        title = item.name if item.parent is None else f"{item.name} : {item.parent}"
        table = Table(title=title)
        table.add_column("Field")
        table.add_column("Type")
        table.add_column("Output")
        table.add_column("Flags")
        for f in model.all_fields(item):
            table.add_row(
                f.name if f.owner == item.name else f"{f.owner}.{f.name}",
                f.type,
                f"{f.decl.name}: {f.decl.type}",
                ", ".join(f.flags.names),
            )
        console.print(table)

        for reference in model.references_to(item):
            accessor = reference.accessor if reference.navigable else "(not navigable)"
            console.print(
                f"  referenced by {reference.source}.{reference.field} -> {accessor}"
            )

    for enum in model.enums:
        members = ", ".join(f"{m.name}={m.value}" for m in enum.members)
        console.print(f"enum {enum.name} {{ {members} }}")


@app.command()
def backends() -> None:
    """List available backends."""
    registry = get_registry()

    table = Table(title="Backends")
    table.add_column("Name")
    table.add_column("Description")
    for backend_name in registry.list_backends():
        capabilities = registry.get(backend_name).get_capabilities()
        table.add_row(backend_name, capabilities.description)
    console.print(table)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
