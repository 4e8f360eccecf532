"""Shared fixtures: throwaway git remotes and clones built with the real git binary."""

import subprocess
from pathlib import Path

import pytest


def git(cwd, *args: str) -> str:
    """Run git in cwd, fail the test on error, return trimmed stdout."""
    result = subprocess.run(
        ["git", *args], cwd=str(cwd), capture_output=True, text=True, check=True
    )
    return result.stdout.strip()


def commit_file(repo: Path, name: str, content: str, message: str) -> None:
    (repo / name).write_text(content)
    git(repo, "add", name)
    git(repo, "commit", "-m", message)


def make_repo(path: Path) -> Path:
    """A git repo with one commit on main and no remotes."""
    path.mkdir(parents=True, exist_ok=True)
    git(path, "init", "-b", "main")
    commit_file(path, "README.md", "# test\n", "Initial commit")
    return path


@pytest.fixture(autouse=True)
def isolated_git_env(tmp_path, monkeypatch):
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("GIT_AUTHOR_NAME", "Test User")
    monkeypatch.setenv("GIT_AUTHOR_EMAIL", "test@test.com")
    monkeypatch.setenv("GIT_COMMITTER_NAME", "Test User")
    monkeypatch.setenv("GIT_COMMITTER_EMAIL", "test@test.com")
    for key in (
        "RBSYNC_DEFAULT_ROOT", "RBSYNC_DEFAULT_BRANCH", "RBSYNC_MAX_DEPTH", "RBSYNC_STRATEGY",
        "RBSYNC_JOBS", "RBSYNC_INCLUDE_NESTED", "RBSYNC_REPAIR_REMOTE_HEAD", "RBSYNC_LOG_LEVEL",
    ):
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def origin(tmp_path) -> Path:
    """Bare remote whose HEAD is main, with one commit."""
    bare = tmp_path / "origin.git"
    git(tmp_path, "init", "--bare", "-b", "main", str(bare))
    seed = make_repo(tmp_path / "seed")
    git(seed, "remote", "add", "origin", str(bare))
    git(seed, "push", "origin", "main")
    return bare


@pytest.fixture
def clone(tmp_path, origin):
    """Factory: clone origin into tmp_path/work/<name>."""

    def _clone(name: str = "app", source: Path | None = None) -> Path:
        dest = tmp_path / "work" / name
        dest.parent.mkdir(parents=True, exist_ok=True)
        git(tmp_path, "clone", str(source or origin), str(dest))
        return dest

    return _clone
