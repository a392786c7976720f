"""Extract a GitHubContext from a browser window title.

Browser titles are free text, so each view GitHub renders gets its own
grammar. Every grammar must match the whole title, accepts an optional
leading "GitHub - " and requires the " - <browser name>" suffix that the
browser appends. Grammars are tried from most to least specific because
several of them share the same "owner/repo" prefix.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any

from .context import GitHubContext
from .logging import get_logger

logger = get_logger(__name__)

OWNER = r"(?P<owner>[a-zA-Z0-9][a-zA-Z0-9_-]*)"
# Allows "_" for legacy logins that still contain it
REPO = r"(?P<repo>(?:\w|\.|-)+)"
REPO_PREFIX = r"(?:\w|\.|-)+"
BRANCH_SEGMENT_START = r"[^./ ~^:?*\[\\]"
BRANCH_SEGMENT_REST = r"[^/ ~^:?*\[\\]*"
BRANCH = (
    rf"(?P<branch>{BRANCH_SEGMENT_START}{BRANCH_SEGMENT_REST}"
    rf"(?:/{BRANCH_SEGMENT_START}{BRANCH_SEGMENT_REST})*)"
)
PULL = r"(?P<pull>[0-9]+)"
ISSUE = r"(?P<issue>[0-9]+)"

GITHUB_PREFIX = r"(?:GitHub - )?"
GITHUB_SUFFIX = r"(?: · GitHub)?"
WINDOW_SUFFIX = r" - .+"


def _title_re(body: str, *, github_suffix: bool = True) -> re.Pattern[str]:
    suffix = GITHUB_SUFFIX if github_suffix else ""
    return re.compile(f"{GITHUB_PREFIX}{body}{suffix}{WINDOW_SUFFIX}")


WINDOW_TITLE_BLOB_RE = _title_re(
    rf"(?:{REPO_PREFIX}/)?(?P<blob_name>[^ /]+) at {BRANCH} · {OWNER}/{REPO}"
)
WINDOW_TITLE_TREE_RE = _title_re(
    rf"{REPO_PREFIX}/(?P<tree>[^ ]+) at {BRANCH} · {OWNER}/{REPO}"
)
WINDOW_TITLE_REPOSITORY_RE = _title_re(
    rf"{OWNER}/{REPO}(?:: .*)?", github_suffix=False
)
WINDOW_TITLE_BRANCH_RE = _title_re(
    rf"{OWNER}/{REPO} at {BRANCH}", github_suffix=False
)
WINDOW_TITLE_BRANCHES_RE = _title_re(rf"Branches · {OWNER}/{REPO}")
WINDOW_TITLE_PULL_REQUEST_RE = _title_re(
    rf".+ · Pull Request #{PULL} · {OWNER}/{REPO}"
)
WINDOW_TITLE_ISSUE_RE = _title_re(rf".+ · Issue #{ISSUE} · {OWNER}/{REPO}")


def parse_number(text: str) -> int:
    """Parse a captured number, treating anything unparsable as 0.

    A grammar match alone identifies the view, so a bad number never turns
    a match into a failed extraction.
    """
    try:
        return int(text)
    except ValueError:
        return 0


def _repository_fields(match: re.Match[str]) -> dict[str, Any]:
    return {"owner": match.group("owner"), "repository_name": match.group("repo")}


def _blob_fields(match: re.Match[str]) -> dict[str, Any]:
    return {
        **_repository_fields(match),
        "branch_name": match.group("branch"),
        "blob_name": match.group("blob_name"),
    }


def _tree_fields(match: re.Match[str]) -> dict[str, Any]:
    branch = match.group("branch")
    return {
        **_repository_fields(match),
        "branch_name": branch,
        "treeish_path": f"{branch}/{match.group('tree')}",
    }


def _branch_fields(match: re.Match[str]) -> dict[str, Any]:
    return {**_repository_fields(match), "branch_name": match.group("branch")}


def _pull_request_fields(match: re.Match[str]) -> dict[str, Any]:
    return {
        **_repository_fields(match),
        "pull_request": parse_number(match.group("pull")),
    }


def _issue_fields(match: re.Match[str]) -> dict[str, Any]:
    return {**_repository_fields(match), "issue": parse_number(match.group("issue"))}


@dataclass(frozen=True)
class TitleGrammar:
    """A window title grammar and the fields it yields."""

    name: str
    pattern: re.Pattern[str]
    fields: Callable[[re.Match[str]], dict[str, Any]]

    def match(self, title: str) -> GitHubContext | None:
        match = self.pattern.fullmatch(title)
        if not match:
            return None
        return GitHubContext(**self.fields(match))


# Order matters: first match wins
WINDOW_TITLE_GRAMMARS: tuple[TitleGrammar, ...] = (
    TitleGrammar("blob", WINDOW_TITLE_BLOB_RE, _blob_fields),
    TitleGrammar("tree", WINDOW_TITLE_TREE_RE, _tree_fields),
    TitleGrammar("repository", WINDOW_TITLE_REPOSITORY_RE, _repository_fields),
    TitleGrammar("branch", WINDOW_TITLE_BRANCH_RE, _branch_fields),
    TitleGrammar("branches", WINDOW_TITLE_BRANCHES_RE, _repository_fields),
    TitleGrammar("pull_request", WINDOW_TITLE_PULL_REQUEST_RE, _pull_request_fields),
    TitleGrammar("issue", WINDOW_TITLE_ISSUE_RE, _issue_fields),
)


def find_context_from_window_title(window_title: str) -> GitHubContext | None:
    """Match a window title against each known GitHub view.

    Returns:
        The context for the first grammar that matches, or None.
    """
    for grammar in WINDOW_TITLE_GRAMMARS:
        context = grammar.match(window_title)
        if context is not None:
            logger.debug("window_title.matched", grammar=grammar.name, title=window_title)
            return context
    return None


def find_context_from_titles(titles: Iterable[str]) -> GitHubContext | None:
    """Return the context of the first recognizable title.

    Titles are pulled one at a time; nothing after the first match is read.
    """
    for title in titles:
        context = find_context_from_window_title(title)
        if context is not None:
            return context
    return None
