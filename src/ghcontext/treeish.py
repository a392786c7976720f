"""Split an ambiguous "revision/path" string into git lookup candidates.

A branch name may itself contain slashes, so "feature/x/src/main.py" cannot
be split into revision and path without asking git. Instead every possible
split is offered, and the object store decides which one exists.
"""

from __future__ import annotations

from collections.abc import Iterator


def to_treeish(treeish_path: str) -> Iterator[str]:
    """Yield candidate git expressions for a "revision/path" string.

    The string itself comes first, then "revision:path" for each slash from
    left to right.

    Example:
        >>> list(to_treeish("a/b/c"))
        ['a/b/c', 'a:b/c', 'a/b:c']
    """
    yield treeish_path

    index = treeish_path.find("/", 1)
    while index != -1:
        yield f"{treeish_path[:index]}:{treeish_path[index + 1:]}"
        index = treeish_path.find("/", index + 1)
