"""Start command."""

import asyncio
import click

from . import cli
from .shared import console


@cli.command()
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.option("--port", type=int, default=None, help="Status page port (overrides PORT)")
@click.option("--history", type=int, default=None, help="Prior messages sent as context (0 = off)")
def start(debug, port, history):
    """Start Jinoca (WhatsApp bridge + status page)."""
    from jinoca.config import load_settings
    from jinoca.main import configure_logging, run

    settings = load_settings()
    overrides = {}
    if debug:
        overrides["debug"] = True
    if port is not None:
        overrides["port"] = port
    if history is not None:
        if history < 0:
            raise click.BadParameter("must be 0 or more", param_hint="--history")
        overrides["history_limit"] = history
    if overrides:
        settings = settings.model_copy(update=overrides)

    configure_logging(settings.log_file, settings.debug)
    console.print(f"[bold magenta]Starting Jinoca...[/bold magenta] status page on port {settings.port}")
    asyncio.run(run(settings))
