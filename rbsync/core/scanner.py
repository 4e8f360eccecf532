"""Repo discovery: find git repository roots under a directory."""

from __future__ import annotations

import logging
import os

from .constants import DEFAULT_MAX_DEPTH, GIT_MARKER, PRUNED_DIR_NAMES

logger = logging.getLogger(__name__)


def _path_key(path: str) -> str:
    return os.path.normcase(path).casefold()


def find_repositories(
    root: str,
    max_depth: int = DEFAULT_MAX_DEPTH,
    include_nested: bool = False,
) -> list[str]:
    """Find every directory under root (root included) that has a ``.git`` directory.

    Directories at exactly ``max_depth`` are checked but not expanded.
    ``node_modules`` is never entered. Once a directory is a repository its
    children are only scanned when ``include_nested`` is set (submodules).
    A ``.git`` *file* (gitlink) does not make a root.

    Returns absolute paths sorted case-insensitively, with no two paths equal
    under case-insensitive comparison. A blank or missing root gives [].
    """
    if not root or not root.strip():
        return []
    root = os.path.abspath(os.path.expanduser(root))
    if not os.path.isdir(root):
        return []

    repos: dict[str, str] = {}
    visited: set[str] = set()
    frontier: list[tuple[str, int]] = [(root, 0)]

    while frontier:
        path, depth = frontier.pop()
        key = os.path.realpath(path)
        if key in visited:
            continue
        visited.add(key)

        try:
            with os.scandir(path) as it:
                entries = list(it)
        except OSError as e:  # permission denied, vanished, I/O fault
            logger.debug("skipping %s: %s", path, e)
            continue

        is_repo = False
        subdirs: list[str] = []
        for entry in entries:
            try:
                if not entry.is_dir(follow_symlinks=False):
                    continue
            except OSError:
                continue
            if entry.name == GIT_MARKER:
                is_repo = True
            elif entry.name.casefold() not in PRUNED_DIR_NAMES:
                subdirs.append(entry.path)

        if is_repo:
            repos.setdefault(_path_key(path), path)
            if not include_nested:
                continue
        if depth >= max_depth:
            continue
        for d in reversed(sorted(subdirs)):
            frontier.append((d, depth + 1))

    return sorted(repos.values(), key=str.casefold)
