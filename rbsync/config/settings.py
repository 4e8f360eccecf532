from __future__ import annotations

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..core.constants import (
    DEFAULT_BRANCH,
    DEFAULT_MAX_DEPTH,
    DEFAULT_ROOT,
    DEFAULT_STRATEGY,
    GIT_TIMEOUT_SEC,
)
from ..core.types import Strategy

# Load .env once, early
load_dotenv()


class Settings(BaseSettings):
    """Application config (RBSYNC_* env or .env)."""

    model_config = SettingsConfigDict(env_prefix="RBSYNC_", env_file=None, extra="ignore")

    default_root: str = Field(default=DEFAULT_ROOT)
    default_branch: str = Field(default=DEFAULT_BRANCH)
    max_depth: int = Field(default=DEFAULT_MAX_DEPTH, ge=0)
    include_nested: bool = False
    jobs: int | None = Field(default=None, ge=1)
    strategy: Strategy = Strategy(DEFAULT_STRATEGY)
    git_executable: str = "git"
    git_timeout_sec: float = Field(default=GIT_TIMEOUT_SEC, gt=0)
    repair_remote_head: bool = False
    log_level: str = "WARNING"


def get_settings() -> Settings:
    # simple constructor; env is re-read on every call
    return Settings()
