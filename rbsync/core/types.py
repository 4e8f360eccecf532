"""Small types and Enums used by rbsync."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from enum import Enum


class Strategy(str, Enum):
    """How a feature branch is materialized in each repository."""

    branch = "branch"  # create the ref without checking it out
    switch = "switch"  # switch the working tree onto the feature branch


class OutcomeStatus(str, Enum):
    ok = "ok"
    failed = "failed"
    cancelled = "cancelled"


@dataclass(frozen=True)
class RemoteDescriptor:
    remote: str
    branch: str

    @property
    def ref(self) -> str:
        return f"{self.remote}/{self.branch}"

    @property
    def tracking_ref(self) -> str:
        return f"refs/remotes/{self.remote}/{self.branch}"


@dataclass
class SyncOutcome:
    """Result of one repository's synchronization attempt."""

    repo: str
    status: OutcomeStatus
    detail: str = ""
    command: list[str] | None = None
    actions: list[str] = field(default_factory=list)

    @property
    def name(self) -> str:
        return os.path.basename(self.repo.rstrip(os.sep)) or self.repo

    @property
    def ok(self) -> bool:
        return self.status is OutcomeStatus.ok
