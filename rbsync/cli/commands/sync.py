"""CLI: cut a feature branch across every repository under a folder."""

from __future__ import annotations

import typer

from ...config.log import configure_logging
from ...config.settings import get_settings
from ...core.git_client import GitClient
from ...core.types import OutcomeStatus, Strategy, SyncOutcome
from ...core.utils import split_globs
from ...services.batch import BatchInterrupted, run_batch, summarize


def _echo_outcome(o: SyncOutcome) -> None:
    if o.status is OutcomeStatus.ok:
        typer.echo(f"[ok] {o.name}: {o.detail}")
    elif o.status is OutcomeStatus.cancelled:
        typer.secho(f"[cancelled] {o.name}", err=True)
    else:
        typer.secho(f"[fail] {o.name}: {o.detail}", err=True)


def sync(
    root: str | None = typer.Argument(None, help="Folder to scan for repositories"),
    branch: str | None = typer.Option(None, "--branch", "-b", help="Feature branch name"),
    strategy: Strategy | None = typer.Option(
        None, "--strategy", case_sensitive=False,
        help="branch: create ref without checkout; switch: check it out in the working tree",
    ),
    depth: int | None = typer.Option(None, "--depth", min=0, help="Max folder depth to scan"),
    include_nested: bool | None = typer.Option(
        None, "--include-nested/--no-include-nested", help="Also scan inside repositories (submodules)"
    ),
    jobs: int | None = typer.Option(None, "--jobs", "-j", min=1, help="Parallel jobs (default: CPU count)"),
    only: str | None = typer.Option(None, "--only", help="Comma-separated repo name globs to include"),
    exclude: str | None = typer.Option(None, "--exclude", help="Comma-separated repo name globs to exclude"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Log mutating git commands instead of running them"),
    repair_head: bool | None = typer.Option(
        None, "--repair-head/--no-repair-head", help="Run 'git remote set-head --auto' when <remote>/HEAD is missing"
    ),
    strict: bool = typer.Option(False, "--strict", help="Exit 1 if any repository failed"),
    verbose: int = typer.Option(0, "--verbose", "-v", count=True, help="More logging (-vv for debug)"),
):
    """
    Fetch each repository's default branch and put a feature branch on top of it.
    Examples:
      rbsync sync ~/src -b feature/JIRA-42
      rbsync sync ~/src -b feature/JIRA-42 --strategy switch --only 'svc-*'
      rbsync sync --dry-run -v
    """
    s = get_settings()
    configure_logging(verbose, s.log_level)
    git = GitClient(s.git_executable, timeout=s.git_timeout_sec, dry_run=dry_run)
    _root = root or s.default_root
    _branch = branch or s.default_branch

    typer.echo(f"Syncing '{_branch}' across repositories under '{_root}'...")
    reported: set[str] = set()

    def _report(o: SyncOutcome) -> None:
        reported.add(o.repo)
        _echo_outcome(o)

    try:
        outcomes = run_batch(
            _root,
            _branch,
            strategy=strategy or s.strategy,
            max_depth=s.max_depth if depth is None else depth,
            include_nested=s.include_nested if include_nested is None else include_nested,
            jobs=jobs or s.jobs,
            only_globs=split_globs(only),
            exclude_globs=split_globs(exclude),
            git=git,
            repair_head=s.repair_remote_head if repair_head is None else repair_head,
            on_outcome=_report,
        )
        exit_code = 0
    except BatchInterrupted as e:
        outcomes = e.outcomes
        exit_code = 130

    if not outcomes:
        typer.echo("No repositories found.")
        raise typer.Exit(code=0)

    for o in outcomes:
        if o.repo not in reported:
            _echo_outcome(o)

    counts = summarize(outcomes)
    typer.echo(
        f"Done. ok={counts[OutcomeStatus.ok]}, failed={counts[OutcomeStatus.failed]}, "
        f"cancelled={counts[OutcomeStatus.cancelled]}."
    )
    if exit_code == 0 and strict and counts[OutcomeStatus.ok] != len(outcomes):
        exit_code = 1
    raise typer.Exit(code=exit_code)
