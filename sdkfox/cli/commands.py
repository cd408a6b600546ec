"""CLI commands for sdkfox.

Only plugin diagnostics live here; SDK install/use commands are provided by
the lifecycle layer that drives the plugin wrapper.
"""

import typer
from rich.console import Console

from sdkfox import __logo__, __version__
from sdkfox.cli.command_groups.plugin_command import register_plugin_commands
from sdkfox.cli.shared.logging_utils import configure_cli_logging

app = typer.Typer(
    name="sdkfox",
    help=f"{__logo__} sdkfox - SDK version manager driven by Lua plugins",
    no_args_is_help=True,
)

console = Console()


def version_callback(value: bool):
    if value:
        console.print(f"{__logo__} sdkfox v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None, "--version", "-v", callback=version_callback, is_eager=True
    ),
    debug: bool = typer.Option(False, "--debug", help="Print the plugin bridge trace"),
):
    """sdkfox - SDK version manager."""
    configure_cli_logging(debug)


register_plugin_commands(app, console)


if __name__ == "__main__":
    app()
