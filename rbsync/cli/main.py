"""CLI entrypoint that wires subcommands into a Typer app."""

import typer

from .commands.scan import scan
from .commands.sync import sync

app = typer.Typer(
    add_completion=False,
    help="Cut a feature branch from the default branch across every repository under a folder.",
)


app.command("sync", help="Fetch default branches and create/push a feature branch everywhere")(sync)
app.command("scan", help="List repositories under a folder")(scan)
