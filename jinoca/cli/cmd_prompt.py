"""Prompt command."""

from rich.panel import Panel
from rich.table import Table

from . import cli
from .shared import console


@cli.command()
def prompt():
    """Show the persona prompt and the fixed replies."""
    from jinoca import persona

    console.print(Panel(persona.SYSTEM_PROMPT, title=f"{persona.PERSONA_NAME} — system prompt"))

    table = Table(title="Fixed replies", show_header=True)
    table.add_column("When", style="bold")
    table.add_column("Reply")
    table.add_row("Completion failed", persona.COMPLETION_FALLBACK)
    table.add_row("'image' without prompt", persona.IMAGE_PROMPT_REQUEST)
    table.add_row("Image requested", persona.IMAGE_ACK)
    table.add_row("Image caption", persona.IMAGE_CAPTION)
    table.add_row("Image failed", persona.IMAGE_FALLBACK)
    table.add_row("Unexpected error", persona.APOLOGY)
    console.print(table)
