"""
Command-Line Interface

CLI commands for inspecting and maintaining settings configurations.

Commands:
    pitz check   - Validate definitions, structure references and relevance cycles
    pitz tree    - Show dependents per setting and the dependency order
    pitz values  - Show persisted values next to defaults
    pitz reset   - Reset one or all settings through the store pipeline

TARGET is a "module:attribute" path to a SettingsConfiguration, a builder,
or a zero-argument callable returning either.

Usage:
    # Check a configuration
    pitz check myapp.settings:CONFIG

    # Inspect persisted values using a config file
    pitz --config pitz.toml values myapp.settings:CONFIG

    # Reset a single key
    pitz reset myapp.settings:build_config --key audio.volume
"""

from __future__ import annotations

import asyncio
import importlib
import logging
import os
import sys
from pathlib import Path
from typing import Any, Optional

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from pitz.assembly import check_configuration, resolve_controllers, validate_definition
from pitz.config import PitzConfig
from pitz.errors import DefinitionError, PitzError
from pitz.relevance import RelevanceEngine
from pitz.storage import create_storage
from pitz.store import SettingsStore
from pitz.types import SettingsConfiguration

__all__ = ["main", "app"]

app = typer.Typer(
    name="pitz",
    help="Typed application settings with conditional relevance",
    no_args_is_help=True,
)
console = Console()


@app.callback()
def _configure(
    ctx: typer.Context,
    config: Optional[Path] = typer.Option(
        None,
        "--config", "-c",
        help="TOML configuration file",
        exists=True,
        dir_okay=False,
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose", "-v",
        help="Enable debug logging",
    ),
) -> None:
    """Load configuration shared by all commands."""
    pitz_config = PitzConfig.from_file(config) if config else PitzConfig()
    if verbose or pitz_config.debug:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
    ctx.obj = pitz_config


def load_configuration(target: str) -> SettingsConfiguration:
    """
    Resolve a "module:attribute" path to a SettingsConfiguration.

    Raises:
        typer.BadParameter: If the path cannot be imported or does not
            produce a configuration
    """
    module_name, _, attribute = target.partition(":")
    if not module_name or not attribute:
        raise typer.BadParameter(f"Expected MODULE:ATTRIBUTE, got {target!r}")

    # Allow targets relative to the working directory
    if os.getcwd() not in sys.path:
        sys.path.insert(0, os.getcwd())

    try:
        obj: Any = importlib.import_module(module_name)
    except ImportError as e:
        raise typer.BadParameter(f"Cannot import {module_name}: {e}") from e

    for part in attribute.split("."):
        try:
            obj = getattr(obj, part)
        except AttributeError as e:
            raise typer.BadParameter(f"{module_name} has no attribute {attribute}") from e

    if isinstance(obj, type) or (callable(obj) and not hasattr(obj, "build")):
        obj = obj()
    if not isinstance(obj, SettingsConfiguration) and hasattr(obj, "build"):
        obj = obj.build()
    if not isinstance(obj, SettingsConfiguration):
        raise typer.BadParameter(f"{target} is a {type(obj).__name__}, not a settings configuration")
    return obj


def _load_or_exit(target: str) -> SettingsConfiguration:
    try:
        return load_configuration(target)
    except DefinitionError as e:
        console.print(f"[red]Invalid configuration:[/] {e}")
        raise typer.Exit(code=1) from e


@app.command()
def check(
    target: str = typer.Argument(..., help="module:attribute of the configuration"),
) -> None:
    """Validate definitions, structure references and relevance cycles."""
    configuration = _load_or_exit(target)

    problems: list[str] = []
    for definition in configuration.definitions:
        try:
            validate_definition(definition)
        except DefinitionError as e:
            problems.append(str(e))

    diagnostics = check_configuration(configuration)
    relevance = RelevanceEngine.validate_relevance_tree(
        configuration.structure, configuration.definitions
    )
    problems.extend(relevance.errors)

    table = Table(title=f"Configuration: {target}")
    table.add_column("Check", style="cyan")
    table.add_column("Result")

    table.add_row("Definitions", str(len(configuration.definitions)))
    table.add_row("Structure keys", str(len(configuration.structure.keys())))
    table.add_row(
        "Missing definitions",
        f"[yellow]{', '.join(diagnostics.missing)}[/]" if diagnostics.missing else "[green]none[/]",
    )
    table.add_row(
        "Unused definitions",
        f"[yellow]{', '.join(diagnostics.unused)}[/]" if diagnostics.unused else "[green]none[/]",
    )
    table.add_row(
        "Relevance cycles",
        f"[red]{len(relevance.cycles)}[/]" if relevance.cycles else "[green]none[/]",
    )
    console.print(table)

    if problems:
        console.print()
        console.print(Panel("\n".join(f"- {p}" for p in problems), title="Errors", border_style="red"))
        raise typer.Exit(code=1)

    console.print("\n[green]Configuration is valid[/]")


@app.command()
def tree(
    target: str = typer.Argument(..., help="module:attribute of the configuration"),
) -> None:
    """Show which settings depend on each setting, and the dependency order."""
    configuration = _load_or_exit(target)
    structure, definitions = configuration.structure, configuration.definitions

    table = Table(title="Relevance Dependencies")
    table.add_column("Setting", style="cyan")
    table.add_column("Dependents")

    for key, dependents in RelevanceEngine.get_relevance_tree(structure, definitions).items():
        table.add_row(key, ", ".join(dependents) if dependents else "[dim]-[/]")

    console.print(table)
    order = RelevanceEngine.get_dependency_order(structure, definitions)
    console.print(f"\n[bold]Dependency order:[/] {', '.join(order)}")


@app.command()
def values(
    ctx: typer.Context,
    target: str = typer.Argument(..., help="module:attribute of the configuration"),
) -> None:
    """Show persisted values next to their defaults (read-only)."""
    configuration = _load_or_exit(target)
    pitz_config: PitzConfig = ctx.obj

    async def _run() -> dict[str, Any]:
        storage = create_storage(pitz_config)
        if storage is None:
            return {}
        async with storage:
            return {d.key: await storage.get(d.key) for d in configuration.definitions}

    try:
        stored = asyncio.run(_run())
    except PitzError as e:
        console.print(f"[red]Failed to read storage:[/] {e}")
        raise typer.Exit(code=1) from e

    effective = {
        d.key: stored[d.key] if stored.get(d.key) is not None else d.default_value
        for d in configuration.definitions
    }
    relevant = RelevanceEngine.batch_evaluate(
        effective, configuration.structure, configuration.definitions, effective
    )

    table = Table(title=f"Values ({pitz_config.storage_backend} storage)")
    table.add_column("Setting", style="cyan")
    table.add_column("Stored", style="green")
    table.add_column("Default", style="dim")
    table.add_column("Relevant", justify="center")

    for definition in configuration.definitions:
        value = stored.get(definition.key)
        table.add_row(
            definition.key,
            repr(value) if value is not None else "[dim]-[/]",
            repr(definition.default_value),
            "yes" if relevant[definition.key] else "[yellow]no[/]",
        )

    console.print(table)


@app.command()
def reset(
    ctx: typer.Context,
    target: str = typer.Argument(..., help="module:attribute of the configuration"),
    key: Optional[str] = typer.Option(
        None,
        "--key", "-k",
        help="Reset only this setting",
    ),
) -> None:
    """Reset one or all settings to their defaults."""
    configuration = _load_or_exit(target)
    pitz_config: PitzConfig = ctx.obj

    if key is not None and configuration.definition_for(key) is None:
        console.print(f"[red]Unknown setting: {key}[/]")
        raise typer.Exit(code=1)

    async def _run() -> None:
        store = SettingsStore.from_config(pitz_config)
        try:
            await store.initialize(resolve_controllers(configuration))
            if key is not None:
                await store.reset_to_default(key)
            else:
                await store.reset_all_to_defaults()
        finally:
            await store.close()

    try:
        asyncio.run(_run())
    except PitzError as e:
        console.print(f"[red]Reset failed:[/] {e}")
        raise typer.Exit(code=1) from e

    if key is not None:
        console.print(f"[green]Reset {key} to default[/]")
    else:
        console.print(f"[green]Reset {len(configuration.definitions)} settings to defaults[/]")


def main() -> None:
    """Entry point for the CLI."""
    load_dotenv()
    app()
