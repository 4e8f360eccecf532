"""CLI: list the repositories a sync would touch."""

from __future__ import annotations

import typer

from ...config.log import configure_logging
from ...config.settings import get_settings
from ...core.scanner import find_repositories


def scan(
    root: str | None = typer.Argument(None, help="Folder to scan for repositories"),
    depth: int | None = typer.Option(None, "--depth", min=0, help="Max folder depth to scan"),
    include_nested: bool | None = typer.Option(
        None, "--include-nested/--no-include-nested", help="Also scan inside repositories (submodules)"
    ),
    verbose: int = typer.Option(0, "--verbose", "-v", count=True, help="More logging (-vv for debug)"),
):
    """Print every repository root found under ROOT."""
    s = get_settings()
    configure_logging(verbose, s.log_level)
    repos = find_repositories(
        root or s.default_root,
        max_depth=s.max_depth if depth is None else depth,
        include_nested=s.include_nested if include_nested is None else include_nested,
    )
    for d in repos:
        typer.echo(d)
    typer.echo(f"Found {len(repos)} repositories.", err=True)
