"""Service: put one repository onto a feature branch cut from its remote default branch."""

from __future__ import annotations

import logging

from ..core.constants import STASH_MESSAGE
from ..core.errors import CommandExecutionFailed, FastForwardRequired, SyncCancelled, SyncError
from ..core.git_client import GitClient
from ..core.remote import resolve_default_branch
from ..core.types import OutcomeStatus, Strategy, SyncOutcome

logger = logging.getLogger(__name__)


def branch_without_checkout(
    git: GitClient, repo: str, branch: str, *, repair_head: bool = False
) -> list[str]:
    """Create ``branch`` at ``<remote>/<default>`` if missing and push it. Safe to re-run."""
    actions: list[str] = []
    target = resolve_default_branch(git, repo, repair_head=repair_head)
    git.run(repo, ["fetch", target.remote, target.branch])
    actions.append(f"fetched {target.ref}")

    if git.local_branch_exists(repo, branch):
        actions.append(f"{branch} exists")
    else:
        git.run(repo, ["branch", "--no-track", branch, target.tracking_ref])
        actions.append(f"created {branch} from {target.ref}")

    git.run(repo, ["push", "--set-upstream", target.remote, f"{branch}:{branch}"])
    actions.append(f"pushed to {target.remote}/{branch}")
    return actions


def switch_in_place(
    git: GitClient, repo: str, branch: str, *, repair_head: bool = False
) -> list[str]:
    """Update the default branch by fast-forward, then switch the working tree to ``branch``.

    Uncommitted work is stashed (untracked files included) and left in the
    stash; restoring it is up to the user.
    """
    actions: list[str] = []
    target = resolve_default_branch(git, repo, repair_head=repair_head)
    git.run(repo, ["fetch", target.remote, target.branch])
    actions.append(f"fetched {target.ref}")

    # Refuse before touching the working tree.
    have_default = git.local_branch_exists(repo, target.branch)
    local_ref = f"refs/heads/{target.branch}"
    if (
        have_default
        and not git.is_ancestor(repo, local_ref, target.tracking_ref)
        and not git.is_ancestor(repo, target.tracking_ref, local_ref)
    ):
        raise FastForwardRequired(repo, target.branch, target.ref)

    if git.status_has_changes(repo):
        git.run(repo, [
            "stash", "push", "--include-untracked",
            "-m", STASH_MESSAGE.format(branch=branch),
        ])
        actions.append("stashed local changes")
        logger.warning("%s: local changes stashed, not restored", repo)

    if have_default:
        git.run(repo, ["switch", target.branch])
    else:
        git.run(repo, ["switch", "--track", "-c", target.branch, target.tracking_ref])
    try:
        git.run(repo, ["merge", "--ff-only", target.tracking_ref])
    except CommandExecutionFailed as e:
        raise FastForwardRequired(repo, target.branch, target.ref) from e
    actions.append(f"{target.branch} up to date with {target.ref}")

    if git.local_branch_exists(repo, branch):
        git.run(repo, ["switch", branch])
        actions.append(f"switched to {branch}")
    else:
        git.run(repo, ["switch", "-c", branch])
        actions.append(f"created {branch}")

    git.run(repo, ["push", "--set-upstream", target.remote, branch])
    actions.append(f"pushed to {target.remote}/{branch}")
    return actions


STRATEGIES = {
    Strategy.branch: branch_without_checkout,
    Strategy.switch: switch_in_place,
}


def synchronize(
    git: GitClient,
    repo: str,
    branch: str,
    strategy: Strategy = Strategy.branch,
    *,
    repair_head: bool = False,
) -> SyncOutcome:
    """Run one strategy against one repository and report how it went.

    SyncError becomes a failed (or cancelled) outcome; anything else, such as
    git missing from PATH, propagates to the caller.
    """
    try:
        git.run(repo, ["check-ref-format", "--branch", branch])
        actions = STRATEGIES[Strategy(strategy)](git, repo, branch, repair_head=repair_head)
    except SyncCancelled as e:
        return SyncOutcome(repo, OutcomeStatus.cancelled, "cancelled", command=e.command)
    except SyncError as e:
        logger.info("%s: %s", repo, e)
        return SyncOutcome(repo, OutcomeStatus.failed, str(e), command=getattr(e, "command", None))
    return SyncOutcome(repo, OutcomeStatus.ok, "; ".join(actions), actions=actions)
