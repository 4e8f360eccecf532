"""Module holding constants used across rbsync."""

DEFAULT_ROOT = "."
DEFAULT_BRANCH = "feature/sync"  # placeholder; override with --branch
DEFAULT_MAX_DEPTH = 2
DEFAULT_STRATEGY = "branch"  # branch|switch
GIT_MARKER = ".git"
PRUNED_DIR_NAMES = frozenset({"node_modules"})  # compared case-insensitively
GIT_TIMEOUT_SEC = 600
GIT_POLL_SEC = 0.1
STASH_MESSAGE = "rbsync: auto-stash before switching to {branch}"
