"""Service: discover repositories under a root and synchronize each one in parallel."""

from __future__ import annotations

import logging
import os
import threading
from collections import Counter
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Callable, Iterable

from ..core.constants import DEFAULT_MAX_DEPTH
from ..core.git_client import GitClient
from ..core.scanner import find_repositories
from ..core.types import OutcomeStatus, Strategy, SyncOutcome
from ..core.utils import matches_any_glob
from .sync import synchronize

logger = logging.getLogger(__name__)

OutcomeCallback = Callable[[SyncOutcome], None]


def filter_repositories(
    repos: Iterable[str], only_globs: list[str], exclude_globs: list[str]
) -> list[str]:
    # Filter by globs against folder basename
    filtered: list[str] = []
    for d in repos:
        name = os.path.basename(d.rstrip(os.sep))
        if only_globs and not matches_any_glob(name, only_globs):
            continue
        if exclude_globs and matches_any_glob(name, exclude_globs):
            continue
        filtered.append(d)
    return filtered


def default_jobs() -> int:
    return os.cpu_count() or 1


def _sync_one(
    git: GitClient,
    repo: str,
    branch: str,
    strategy: Strategy,
    repair_head: bool,
) -> SyncOutcome:
    try:
        return synchronize(git, repo, branch, strategy, repair_head=repair_head)
    except Exception as e:
        logger.exception("%s: unexpected failure", repo)
        return SyncOutcome(repo, OutcomeStatus.failed, f"{type(e).__name__}: {e}")


def run_batch(
    root: str,
    branch: str,
    *,
    strategy: Strategy = Strategy.branch,
    max_depth: int = DEFAULT_MAX_DEPTH,
    include_nested: bool = False,
    jobs: int | None = None,
    only_globs: list[str] | None = None,
    exclude_globs: list[str] | None = None,
    git: GitClient | None = None,
    repair_head: bool = False,
    on_outcome: OutcomeCallback | None = None,
) -> list[SyncOutcome]:
    """Synchronize every repository under root onto ``branch``.

    One unit of work per repository; a failure in one never affects the
    others. Returns only once every unit has finished, in discovery order.
    On KeyboardInterrupt, running git processes are killed, unfinished units
    are reported as cancelled and the interrupt is re-raised as
    :class:`BatchInterrupted` carrying the outcomes.
    """
    repos = filter_repositories(
        find_repositories(root, max_depth=max_depth, include_nested=include_nested),
        only_globs or [],
        exclude_globs or [],
    )
    if not repos:
        return []

    git = git or GitClient()
    workers = max(1, jobs or default_jobs())
    logger.info("synchronizing %d repositories (jobs=%d, strategy=%s)", len(repos), workers, Strategy(strategy).value)

    results: dict[str, SyncOutcome] = {}
    lock = threading.Lock()

    def _record(repo: str, fut: Future) -> None:
        if fut.cancelled():
            return
        outcome = fut.result()
        with lock:
            results[repo] = outcome
        if on_outcome is not None:
            on_outcome(outcome)

    pool = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="rbsync")
    interrupted = False
    try:
        futures = {}
        for d in repos:
            fut = pool.submit(_sync_one, git, d, branch, Strategy(strategy), repair_head)
            fut.add_done_callback(lambda f, d=d: _record(d, f))
            futures[fut] = d
        pending = set(futures)
        while pending:
            _done, pending = wait(pending, timeout=0.5)
    except KeyboardInterrupt:
        interrupted = True
        git.cancel_event.set()
        logger.warning("interrupted; cancelling %d pending repositories", len(repos) - len(results))
    finally:
        pool.shutdown(wait=True, cancel_futures=True)

    outcomes = [
        results.get(d) or SyncOutcome(d, OutcomeStatus.cancelled, "cancelled")
        for d in repos
    ]
    if interrupted:
        raise BatchInterrupted(outcomes)
    return outcomes


class BatchInterrupted(KeyboardInterrupt):
    """Raised by run_batch after an interrupt, once every worker has stopped."""

    def __init__(self, outcomes: list[SyncOutcome]):
        super().__init__("batch interrupted")
        self.outcomes = outcomes


def summarize(outcomes: Iterable[SyncOutcome]) -> Counter:
    counts: Counter = Counter({s: 0 for s in OutcomeStatus})
    for o in outcomes:
        counts[o.status] += 1
    return counts
