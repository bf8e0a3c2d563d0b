"""Jinoca CLI — command line interface."""

import click
from jinoca import __version__
from .shared import console


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="jinoca")
@click.pass_context
def cli(ctx):
    """Jinoca — WhatsApp persona bot 💋"""
    if ctx.invoked_subcommand is None:
        _show_help()


def _show_help():
    """Show all available commands."""
    console.print(f"[bold]Jinoca v{__version__}[/bold] — WhatsApp persona bot\n")

    commands = [
        ("start", "Start the bot and its status page"),
        ("status", "Show the connection status of a running bot"),
        ("prompt", "Show the persona prompt and fixed replies"),
    ]
    for name, desc in commands:
        console.print(f"  [bold]jinoca {name:10s}[/bold] {desc}")
    console.print()
    console.print("[dim]Run 'jinoca <command> --help' for details on a specific command.[/dim]")


# Import all command modules (registers commands onto cli group)
from . import cmd_start  # noqa: E402, F401
from . import cmd_status  # noqa: E402, F401
from . import cmd_prompt  # noqa: E402, F401
