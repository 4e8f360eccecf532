"""Default-branch resolution: which remote to use and what its HEAD points at."""

from __future__ import annotations

import logging

from .errors import AmbiguousHeadReference, CommandExecutionFailed, NoRemoteConfigured
from .git_client import GitClient
from .types import RemoteDescriptor

logger = logging.getLogger(__name__)


def parse_head_ref(ref: str) -> str:
    """Branch part of ``<remote>/<branch>``; a ref without ``/`` is taken whole."""
    _remote, sep, branch = ref.partition("/")
    return branch if sep else ref


def resolve_default_branch(git: GitClient, repo: str, *, repair_head: bool = False) -> RemoteDescriptor:
    """Return the first configured remote and the branch its HEAD advertises.

    Needs ``refs/remotes/<remote>/HEAD`` to exist (set by clone). With
    ``repair_head`` a missing reference is re-detected once via
    ``git remote set-head <remote> --auto``.
    """
    remotes = git.remotes(repo)
    if not remotes:
        raise NoRemoteConfigured(repo)
    remote = remotes[0]

    try:
        ref = _head_ref(git, repo, remote)
    except CommandExecutionFailed as e:
        if not repair_head:
            raise AmbiguousHeadReference(repo, remote, e.stderr) from e
        logger.info("%s: %s/HEAD missing, asking remote", repo, remote)
        try:
            git.run(repo, ["remote", "set-head", remote, "--auto"])
            ref = _head_ref(git, repo, remote)
        except CommandExecutionFailed as e2:
            raise AmbiguousHeadReference(repo, remote, e2.stderr) from e2

    return RemoteDescriptor(remote=remote, branch=parse_head_ref(ref))


def _head_ref(git: GitClient, repo: str, remote: str) -> str:
    # full refname; a local branch named like the remote one would make --short ambiguous
    ref = git.run(repo, ["symbolic-ref", f"refs/remotes/{remote}/HEAD"])
    return ref.removeprefix("refs/remotes/")
