"""Lightweight helpers for batch orchestration (repo name globs)."""
from __future__ import annotations

import fnmatch
from typing import Sequence


def matches_any_glob(name: str, patterns: Sequence[str]) -> bool:
    if not patterns:
        return True  # no filters = match all
    return any(fnmatch.fnmatchcase(name, pat) for pat in patterns)


def split_globs(value: str | None) -> list[str]:
    """Turn a comma-separated CLI value into a list of globs."""
    if not value:
        return []
    return [p.strip() for p in value.split(",") if p.strip()]
