"""Status command."""

import click
import httpx
from rich.table import Table

from . import cli
from .shared import console, status_url

_PHASE_STYLE = {
    "connected": "green",
    "awaiting_scan": "yellow",
    "starting": "yellow",
    "disconnected": "yellow",
    "fatal_error": "red",
}


@cli.command()
@click.option("--url", default="http://localhost:3000", show_default=True, help="Address of the running bot")
def status(url):
    """Show the connection status of a running Jinoca."""
    endpoint = status_url(url)
    try:
        resp = httpx.get(endpoint, timeout=10)
        resp.raise_for_status()
        data = resp.json()
    except httpx.HTTPError as e:
        console.print(f"[red]Could not reach {endpoint}: {e}[/red]")
        raise SystemExit(1)

    phase = data.get("phase", "unknown")
    style = _PHASE_STYLE.get(phase, "white")

    table = Table(title="Jinoca Status", show_header=False, padding=(0, 2))
    table.add_column("Key", style="bold")
    table.add_column("Value")
    table.add_row("Endpoint", endpoint)
    table.add_row("Phase", f"[{style}]{phase}[/{style}]")
    table.add_row("Message", str(data.get("status", "")))
    table.add_row("Authenticated", "[green]yes[/green]" if data.get("isAuthenticated") else "[red]no[/red]")
    table.add_row("QR pending", "yes" if data.get("qr") else "no")
    console.print(table)

    if data.get("qr"):
        console.print(f"[dim]Open {endpoint[:-len('/status')]}/ in a browser to scan the QR code.[/dim]")
