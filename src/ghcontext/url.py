"""Extract a GitHubContext from a pasted web address."""

from __future__ import annotations

import re

import httpx

from .context import GitHubContext
from .logging import get_logger

logger = get_logger(__name__)

URL_LINE_RE = re.compile(r"#L(?P<line>[0-9]+)(?:-L(?P<line_end>[0-9]+))?$")
URL_BLOB_RE = re.compile(
    r"blob/(?P<treeish>[^/]+(?:/[^/]+)*)/(?P<blob_name>[^/#?]+)"
)
DIGITS_RE = re.compile(r"[0-9]+")

PULL_SEGMENT = "pull/"
ISSUE_SEGMENT = "issues/"


def _parse_address(url: str) -> httpx.URL | None:
    try:
        address = httpx.URL(url)
    except httpx.InvalidURL:
        return None

    if address.scheme not in ("http", "https") or not address.host:
        return None
    return address


def find_line(subpath: str) -> tuple[int | None, int | None]:
    """Find a trailing "#L10" or "#L10-L20" fragment.

    Returns:
        (line, line_end); line_end is None when the fragment names one line.
    """
    match = URL_LINE_RE.search(subpath)
    if not match:
        return None, None

    line_end = match.group("line_end")
    try:
        return int(match.group("line")), int(line_end) if line_end else None
    except ValueError:
        return None, None


def find_number(subpath: str, segment: str) -> int | None:
    """Find the number following a fixed path segment like "pull/".

    Only the first path segment after the prefix is considered, so
    "pull/42/files#discussion" yields 42.
    """
    if not subpath.startswith(segment):
        return None

    rest = re.split(r"[#?]", subpath[len(segment):], maxsplit=1)[0]
    number = rest.split("/", 1)[0]
    if not DIGITS_RE.fullmatch(number):
        return None
    try:
        return int(number)
    except ValueError:
        return None


def find_context_from_url(url: str) -> GitHubContext | None:
    """Extract owner, repository, line range, pull request and blob from a URL.

    Args:
        url: Text that should be an http(s) address.

    Returns:
        A GitHubContext, or None if the text is not an http(s) address.
    """
    url = url.strip()
    address = _parse_address(url)
    if address is None:
        return None

    segments = [s for s in address.path.split("/") if s]
    owner = segments[0] if segments else None
    repository_name = segments[1] if len(segments) > 1 else None
    if repository_name and repository_name.endswith(".git"):
        repository_name = repository_name[: -len(".git")]

    fields: dict[str, object] = {
        "host": address.host,
        "owner": owner,
        "repository_name": repository_name,
    }

    if owner is None or not repository_name:
        logger.debug("url.no_repository", host=address.host)
        return GitHubContext(**fields)  # type: ignore[arg-type]

    prefix = f"https://{address.host}/{owner}/{repository_name}/"
    if not url.lower().startswith(prefix.lower()):
        return GitHubContext(**fields)  # type: ignore[arg-type]

    subpath = url[len(prefix):]

    fields["line"], fields["line_end"] = find_line(subpath)
    fields["pull_request"] = find_number(subpath, PULL_SEGMENT)
    fields["issue"] = find_number(subpath, ISSUE_SEGMENT)

    match = URL_BLOB_RE.search(subpath)
    if match:
        fields["treeish_path"] = match.group("treeish")
        fields["blob_name"] = match.group("blob_name")

    context = GitHubContext(**fields)  # type: ignore[arg-type]
    logger.debug("url.parsed", url=url, **context.to_dict())
    return context
