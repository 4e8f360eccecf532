"""Per-repository failures raised while synchronizing."""

from __future__ import annotations

import shlex


class SyncError(Exception):
    """Base class; carries the repository the failure belongs to."""

    def __init__(self, repo: str, message: str):
        super().__init__(message)
        self.repo = repo
        self.message = message

    def __str__(self) -> str:
        return self.message


class NoRemoteConfigured(SyncError):
    def __init__(self, repo: str):
        super().__init__(repo, "no remotes configured")


class AmbiguousHeadReference(SyncError):
    def __init__(self, repo: str, remote: str, stderr: str = ""):
        msg = f"cannot resolve {remote}/HEAD (try: git remote set-head {remote} --auto)"
        if stderr:
            msg += f": {stderr}"
        super().__init__(repo, msg)
        self.remote = remote


class FastForwardRequired(SyncError):
    def __init__(self, repo: str, branch: str, upstream: str):
        super().__init__(repo, f"{branch} has diverged from {upstream}; fast-forward impossible")
        self.branch = branch
        self.upstream = upstream


class CommandExecutionFailed(SyncError):
    """A git command exited non-zero (or timed out, exit_code -1)."""

    def __init__(self, repo: str, command: list[str], exit_code: int, stderr: str):
        self.command = list(command)
        self.exit_code = exit_code
        self.stderr = stderr
        cmdline = " ".join(shlex.quote(c) for c in self.command)
        msg = f"{cmdline} -> exit {exit_code}"
        if stderr:
            msg += f": {stderr}"
        super().__init__(repo, msg)

    @property
    def cwd(self) -> str:
        return self.repo


class SyncCancelled(SyncError):
    def __init__(self, repo: str, command: list[str] | None = None):
        super().__init__(repo, "cancelled")
        self.command = list(command) if command else None
