"""Map a GitHubContext onto a file in a working copy."""

from __future__ import annotations

import os
import re
from collections.abc import Iterable
from pathlib import Path

from .context import GitHubContext
from .logging import get_logger

logger = get_logger(__name__)

DEFAULT_BRANCHES = ("main", "master")

TREEISH_COMMIT_RE = re.compile(r"(?P<commit>[0-9a-f]{40})(?:/(?P<tree>.+))?")

# Never searched for blobs
SKIPPED_DIRS = frozenset({".git"})


def _treeish_branch_re(default_branches: Iterable[str]) -> re.Pattern[str]:
    names = "|".join(re.escape(b) for b in default_branches)
    return re.compile(rf"(?P<branch>{names})(?:/(?P<tree>.+))?")


def _join_tree(tree: str | None, blob_name: str) -> Path:
    parts = [p for p in (tree or "").split("/") if p]
    return Path(*parts, blob_name)


def resolve_path(
    context: GitHubContext,
    default_branches: Iterable[str] = DEFAULT_BRANCHES,
) -> Path | None:
    """Resolve a context to a path relative to the repository root.

    Only two treeish shapes are recognized without asking git: a full
    40-character commit hash and a default branch name, each optionally
    followed by "/<tree path>".

    Args:
        context: Context with treeish_path and blob_name.
        default_branches: Branch names treated as the checked-out revision.

    Returns:
        Relative path to the blob, or None if the treeish can't be split
        cheaply (callers fall back to a filename search).
    """
    treeish = context.treeish_path
    blob_name = context.blob_name
    if treeish is None or blob_name is None:
        return None

    match = TREEISH_COMMIT_RE.fullmatch(treeish)
    if match:
        return _join_tree(match.group("tree"), blob_name)

    branches = tuple(default_branches)
    if branches:
        match = _treeish_branch_re(branches).fullmatch(treeish)
        if match:
            return _join_tree(match.group("tree"), blob_name)

    return None


def find_file_by_name(root: Path, file_name: str) -> Path | None:
    """Search recursively for a file by name.

    Directory entries are visited in sorted order, files before
    subdirectories, so the result is stable for a given tree.

    Returns:
        Path to the first match, or None.
    """
    for dirpath, dirnames, filenames in os.walk(root, onerror=_raise):
        dirnames[:] = sorted(d for d in dirnames if d not in SKIPPED_DIRS)
        if file_name in filenames:
            found = Path(dirpath) / file_name
            if found.is_file():
                return found

    logger.debug("paths.not_found", root=str(root), file_name=file_name)
    return None


def _raise(error: OSError) -> None:
    raise error
