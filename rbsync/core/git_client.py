"""Small helpers for running Git commands against a single repository."""

from __future__ import annotations

import logging
import os
import shlex
import subprocess
import threading
import time
from dataclasses import dataclass

from .constants import GIT_POLL_SEC, GIT_TIMEOUT_SEC
from .errors import CommandExecutionFailed, SyncCancelled

logger = logging.getLogger(__name__)

# Subcommands that change refs or the working tree, or talk to a remote.
MUTATING = frozenset({"fetch", "stash", "switch", "merge", "branch", "push"})


def is_mutating(args: list[str]) -> bool:
    if not args:
        return False
    return args[0] in MUTATING or args[:2] == ["remote", "set-head"]


@dataclass(frozen=True)
class GitResult:
    stdout: str
    exit_code: int
    stderr: str


class GitClient:
    def __init__(
        self,
        executable: str = "git",
        *,
        timeout: float = GIT_TIMEOUT_SEC,
        cancel_event: threading.Event | None = None,
        dry_run: bool = False,
    ):
        self.executable = executable
        self.timeout = timeout
        self.cancel_event = cancel_event or threading.Event()
        self.dry_run = dry_run
        self._env = os.environ.copy()
        # no interactive credential prompts; fail fast instead of hanging a worker
        self._env["GIT_TERMINAL_PROMPT"] = "0"

    # ---------- process helpers ----------
    def execute(self, cwd: str, args: list[str]) -> GitResult:
        """Run ``git <args>`` in cwd and wait for it, honouring timeout and cancellation.

        Output is fully buffered and trimmed of trailing whitespace. A timeout
        yields exit code -1. Failing to spawn git at all raises OSError.
        """
        cmd = [self.executable, *args]
        if self.cancel_event.is_set():
            raise SyncCancelled(cwd, cmd)
        logger.debug("%s: %s", cwd, " ".join(shlex.quote(c) for c in cmd))

        proc = subprocess.Popen(
            cmd,
            cwd=cwd,
            env=self._env,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            errors="replace",
        )
        deadline = time.monotonic() + self.timeout
        while True:
            try:
                out, err = proc.communicate(timeout=GIT_POLL_SEC)
                break
            except subprocess.TimeoutExpired:
                if self.cancel_event.is_set():
                    proc.kill()
                    proc.communicate()
                    raise SyncCancelled(cwd, cmd) from None
                if time.monotonic() >= deadline:
                    proc.kill()
                    out, err = proc.communicate()
                    return GitResult(
                        (out or "").rstrip(),
                        -1,
                        f"timed out after {self.timeout:g}s",
                    )
        return GitResult((out or "").rstrip(), proc.returncode, (err or "").rstrip())

    def run(self, cwd: str, args: list[str]) -> str:
        """Run a git command and return stdout; non-zero exit raises CommandExecutionFailed."""
        if self.dry_run and is_mutating(args):
            name = os.path.basename(cwd.rstrip(os.sep))
            logger.info("[dry-run] %s: %s", name, " ".join(shlex.quote(c) for c in [self.executable, *args]))
            return ""
        result = self.execute(cwd, args)
        if result.exit_code != 0:
            raise CommandExecutionFailed(cwd, [self.executable, *args], result.exit_code, result.stderr)
        return result.stdout

    def succeeds(self, cwd: str, args: list[str]) -> bool:
        return self.execute(cwd, args).exit_code == 0

    # ---------- per-repo probes ----------
    def remotes(self, repo_dir: str) -> list[str]:
        out = self.run(repo_dir, ["remote"])
        return [line.strip() for line in out.splitlines() if line.strip()]

    def status_has_changes(self, repo_dir: str) -> bool:
        return bool(self.run(repo_dir, ["status", "--porcelain"]).strip())

    def current_branch(self, repo_dir: str) -> str | None:
        result = self.execute(repo_dir, ["symbolic-ref", "--quiet", "--short", "HEAD"])
        return result.stdout if result.exit_code == 0 else None

    def local_branch_exists(self, repo_dir: str, branch: str) -> bool:
        return self.succeeds(repo_dir, ["rev-parse", "--verify", "--quiet", f"refs/heads/{branch}"])

    def is_ancestor(self, repo_dir: str, ancestor: str, descendant: str) -> bool:
        """True if ancestor can be fast-forwarded to descendant."""
        args = ["merge-base", "--is-ancestor", ancestor, descendant]
        result = self.execute(repo_dir, args)
        if result.exit_code == 0:
            return True
        if result.exit_code == 1:
            return False
        raise CommandExecutionFailed(repo_dir, [self.executable, *args], result.exit_code, result.stderr)
