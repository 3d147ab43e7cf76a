"""Command line interface for inspecting mapping declarations."""

import importlib
import logging
from typing import Annotated, Any

import typer
from rich.console import Console
from rich.table import Table

from fluentmap.config import get_settings
from fluentmap.exceptions import FluentMapError
from fluentmap.logging_config import setup_logging
from fluentmap.mapping import PropertyMapSource

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="fluentmap",
    help="Inspect entity-to-column mapping declarations.",
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="markdown",
)


def _is_mapping(obj: Any) -> bool:
    # The protocol check only looks for attributes, which a mapping class also has.
    return isinstance(obj, PropertyMapSource) and not isinstance(obj, type)


def load_mapping(target: str) -> PropertyMapSource:
    """
    Import a mapping given as ``package.module:attribute``.

    The attribute may be a finished mapping or a zero-argument callable
    returning one. Importing the module runs its mapping declarations, so
    declaration errors surface here.

    Raises:
        ValueError: If ``target`` is not in ``module:attribute`` form.
        TypeError: If the attribute is not a mapping.

    """
    module_name, sep, attr_path = target.partition(":")
    if not sep or not module_name or not attr_path:
        raise ValueError(f"Target '{target}' must look like 'package.module:attribute'.")

    obj: Any = importlib.import_module(module_name)
    for part in attr_path.split("."):
        obj = getattr(obj, part)

    if not _is_mapping(obj) and callable(obj):
        logger.debug("Calling %s to build the mapping", target)
        obj = obj()
    if not _is_mapping(obj):
        raise TypeError(f"'{target}' is not an entity mapping.")
    return obj


def _yes(flag: bool) -> str:
    return "yes" if flag else ""


def _print_mapping_table(console: Console, mapping: PropertyMapSource) -> None:
    """Print the property mappings of an entity type using rich."""
    table = Table(title=f"{mapping.entity_type.__name__} mapping")
    table.add_column("Property", style="cyan", no_wrap=True)
    table.add_column("Column", style="magenta", no_wrap=True)
    table.add_column("Key", justify="center", style="green")
    table.add_column("No insert", justify="center", style="yellow")
    table.add_column("No update", justify="center", style="yellow")
    table.add_column("No select", justify="center", style="yellow")

    for property_map in mapping.property_maps:
        table.add_row(
            property_map.property_name,
            property_map.column_name,
            _yes(property_map.is_key),
            _yes(property_map.insert_ignored),
            _yes(property_map.update_ignored),
            _yes(property_map.select_ignored),
        )

    console.print(table)


@app.command(name="inspect")
def cli_inspect(
    target: Annotated[
        str,
        typer.Argument(help="The mapping to show, as `package.module:attribute`."),
    ],
):
    """Show the property-to-column mappings declared for an entity type."""
    try:
        mapping = load_mapping(target)
    except FluentMapError as e:
        typer.secho(f"Error: invalid mapping declaration in '{target}': {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1) from e
    except (ImportError, AttributeError, ValueError, TypeError) as e:
        typer.secho(f"Error: could not load '{target}': {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1) from e

    if not mapping.property_maps:
        typer.secho(f"No properties are mapped for {mapping.entity_type.__name__}.", fg=typer.colors.YELLOW)
        return

    _print_mapping_table(Console(), mapping)


@app.command(name="settings")
def cli_settings():
    """Show the effective fluentmap settings."""
    for name, value in get_settings().model_dump().items():
        typer.echo(f"{name} = {value!r}")


@app.callback()
def main_callback(
    log_level: Annotated[
        str | None,
        typer.Option(
            "--log-level",
            "-l",
            help="Logging level for fluentmap (defaults to the configured `log_level`).",
        ),
    ] = None,
):
    """Inspect entity-to-column mapping declarations."""
    setup_logging(log_level or get_settings().log_level)


if __name__ == "__main__":
    app()
