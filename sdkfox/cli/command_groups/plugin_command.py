"""Plugin command group: load a plugin directory and exercise its hooks."""

from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from sdkfox import __version__
from sdkfox.config.access import get_config
from sdkfox.plugins.core.types import Package, PackageInfo, RuntimeEnvContext
from sdkfox.plugins.hooks import HOOKS
from sdkfox.plugins.manager import create_plugin
from sdkfox.plugins.wrapper import PluginWrapper
from sdkfox.utils.exceptions import NoResultProvided, format_error


@contextmanager
def _open_plugin(console: Console, plugin_dir: Path) -> Iterator[PluginWrapper]:
    env_ctx = RuntimeEnvContext(user_config=get_config(), runtime_version=__version__)
    try:
        wrapper = create_plugin(plugin_dir, env_ctx)
    except Exception as exc:
        console.print(f"[red]{escape(format_error(exc))}[/red]")
        raise typer.Exit(1)
    try:
        yield wrapper
    except typer.Exit:
        raise
    except Exception as exc:
        console.print(f"[red]{escape(format_error(exc))}[/red]")
        raise typer.Exit(1)
    finally:
        wrapper.close()


def _metadata_table(wrapper: PluginWrapper) -> Table:
    meta = wrapper.metadata
    table = Table(title=f"Plugin {wrapper.label()}")
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    rows = [
        ("name", meta.name),
        ("version", meta.version),
        ("description", meta.description),
        ("homepage", meta.homepage),
        ("license", meta.license),
        ("minRuntimeVersion", meta.min_runtime_version),
        ("updateUrl", meta.update_url),
        ("manifestUrl", meta.manifest_url),
        ("legacyFilenames", ", ".join(meta.legacy_filenames)),
    ]
    for key, value in rows:
        table.add_row(key, escape(value or "-"))
    return table


def _hooks_table(wrapper: PluginWrapper) -> Table:
    table = Table(title="Hooks")
    table.add_column("Hook", style="cyan")
    table.add_column("File")
    table.add_column("Required")
    table.add_column("Status")
    for hook in HOOKS:
        present = wrapper.has_hook(hook.name)
        table.add_row(
            hook.name,
            f"{hook.filename}.lua",
            "yes" if hook.required else "no",
            "[green]ok[/green]" if present else "[dim]missing[/dim]",
        )
    return table


def register_plugin_commands(app: typer.Typer, console: Console) -> None:
    """Register plugin command group."""
    plugin_app = typer.Typer(help="Inspect and exercise Lua plugins")
    app.add_typer(plugin_app, name="plugin")

    @plugin_app.command("info")
    def plugin_info(plugin_dir: Path = typer.Argument(..., help="Plugin directory")) -> None:
        with _open_plugin(console, plugin_dir) as wrapper:
            console.print(_metadata_table(wrapper))
            console.print(_hooks_table(wrapper))
            wrapper.show_notes(console)

    @plugin_app.command("available")
    def plugin_available(
        plugin_dir: Path = typer.Argument(..., help="Plugin directory"),
        args: Optional[List[str]] = typer.Argument(None, help="Extra arguments passed to Available"),
    ) -> None:
        with _open_plugin(console, plugin_dir) as wrapper:
            packages = wrapper.available(args or [])
            table = Table(title=f"Available {wrapper.name} ({len(packages)})")
            table.add_column("Version", style="cyan")
            table.add_column("Note")
            table.add_column("Additions")
            for package in packages:
                table.add_row(
                    package.main.version,
                    escape(package.main.note),
                    ", ".join(addition.label() for addition in package.additions),
                )
            console.print(table)

    @plugin_app.command("env")
    def plugin_env(
        plugin_dir: Path = typer.Argument(..., help="Plugin directory"),
        version: str = typer.Argument(..., help="SDK version"),
        install_path: Path = typer.Argument(..., help="Where the SDK is installed"),
    ) -> None:
        with _open_plugin(console, plugin_dir) as wrapper:
            package = Package(main=PackageInfo(name=wrapper.name, version=version, path=str(install_path)))
            try:
                envs = wrapper.env_keys(package)
            except NoResultProvided as exc:
                console.print(f"[yellow]{escape(exc.message)}[/yellow]")
                raise typer.Exit(1)
            table = Table(title=f"Environment for {package.label()}")
            table.add_column("Key", style="cyan")
            table.add_column("Value")
            for key, value in envs.variables.items():
                table.add_row(key, escape(value))
            for path in envs.paths:
                table.add_row("PATH", escape(path))
            console.print(table)
