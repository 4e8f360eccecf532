"""Tests for the parallel batch orchestrator."""

import os
import threading
import time

import pytest

from rbsync.core.git_client import GitClient
from rbsync.core.types import OutcomeStatus, Strategy, SyncOutcome
from rbsync.services import batch
from rbsync.services.batch import BatchInterrupted, filter_repositories, run_batch, summarize

from conftest import git, make_repo


def _fake_repos(base, names):
    paths = []
    for name in names:
        path = os.path.join(str(base), name)
        os.makedirs(os.path.join(path, ".git"))
        paths.append(path)
    return paths


def test_failures_are_isolated(tmp_path, monkeypatch):
    names = [f"repo{i:02d}" for i in range(10)]
    _fake_repos(tmp_path, names)
    failing = {"repo02", "repo05"}
    exploding = {"repo08"}
    finished = []

    def fake_sync(git, repo, branch, strategy, repair_head=False):
        name = os.path.basename(repo)
        time.sleep(0.01)
        finished.append(name)
        if name in exploding:
            raise RuntimeError("boom")
        if name in failing:
            return SyncOutcome(repo, OutcomeStatus.failed, "push rejected")
        return SyncOutcome(repo, OutcomeStatus.ok, "created")

    monkeypatch.setattr(batch, "synchronize", fake_sync)
    outcomes = run_batch(str(tmp_path), "feature/x", jobs=4)

    assert len(finished) == 10
    assert [os.path.basename(o.repo) for o in outcomes] == names
    counts = summarize(outcomes)
    assert counts[OutcomeStatus.ok] == 7
    assert counts[OutcomeStatus.failed] == 3
    assert counts[OutcomeStatus.cancelled] == 0
    boom = next(o for o in outcomes if o.name == "repo08")
    assert "RuntimeError: boom" in boom.detail


def test_pool_is_bounded(tmp_path, monkeypatch):
    _fake_repos(tmp_path, [f"r{i}" for i in range(8)])
    lock = threading.Lock()
    running = 0
    peak = 0

    def fake_sync(git, repo, branch, strategy, repair_head=False):
        nonlocal running, peak
        with lock:
            running += 1
            peak = max(peak, running)
        time.sleep(0.05)
        with lock:
            running -= 1
        return SyncOutcome(repo, OutcomeStatus.ok)

    monkeypatch.setattr(batch, "synchronize", fake_sync)
    outcomes = run_batch(str(tmp_path), "feature/x", jobs=2)
    assert len(outcomes) == 8
    assert 1 <= peak <= 2


def test_on_outcome_sees_every_unit(tmp_path, monkeypatch):
    _fake_repos(tmp_path, ["a", "b", "c"])
    monkeypatch.setattr(
        batch, "synchronize",
        lambda git, repo, branch, strategy, repair_head=False: SyncOutcome(repo, OutcomeStatus.ok),
    )
    seen = []
    run_batch(str(tmp_path), "feature/x", on_outcome=lambda o: seen.append(o.name))
    assert sorted(seen) == ["a", "b", "c"]


def test_empty_root(tmp_path):
    assert run_batch(str(tmp_path), "feature/x") == []
    assert run_batch("", "feature/x") == []


def test_filters(tmp_path):
    repos = _fake_repos(tmp_path, ["svc-a", "svc-b", "web"])
    assert filter_repositories(repos, ["svc-*"], []) == repos[:2]
    assert filter_repositories(repos, [], ["svc-b"]) == [repos[0], repos[2]]
    assert filter_repositories(repos, [], []) == repos


def test_interrupt_cancels_remaining_units(tmp_path, monkeypatch):
    _fake_repos(tmp_path, [f"r{i}" for i in range(5)])
    client = GitClient()

    def fake_sync(git, repo, branch, strategy, repair_head=False):
        git.cancel_event.wait(5)
        return SyncOutcome(repo, OutcomeStatus.cancelled, "cancelled")

    def interrupted_wait(fs, timeout=None):
        raise KeyboardInterrupt

    monkeypatch.setattr(batch, "synchronize", fake_sync)
    monkeypatch.setattr(batch, "wait", interrupted_wait)
    start = time.monotonic()
    with pytest.raises(BatchInterrupted) as excinfo:
        run_batch(str(tmp_path), "feature/x", jobs=2, git=client)
    assert time.monotonic() - start < 5
    assert client.cancel_event.is_set()
    outcomes = excinfo.value.outcomes
    assert len(outcomes) == 5
    assert all(o.status is OutcomeStatus.cancelled for o in outcomes)


def test_real_repositories_end_to_end(tmp_path, origin):
    work = tmp_path / "work"
    for name in ("one", "two"):
        git(tmp_path, "clone", str(origin), str(work / name))
    make_repo(work / "no-remote")

    outcomes = run_batch(str(work), "feature/batch", strategy=Strategy.branch, jobs=2)

    by_name = {o.name: o for o in outcomes}
    assert by_name["one"].ok and by_name["two"].ok
    assert by_name["no-remote"].status is OutcomeStatus.failed
    assert git(origin, "rev-parse", "refs/heads/feature/batch")
