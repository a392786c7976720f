"""Repository context extracted from URLs and window titles."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

DEFAULT_HOST = "github.com"


@dataclass(frozen=True)
class GitHubContext:
    """A location within a hosted repository.

    Every field is optional. Extractors populate only the fields their
    grammar captured; the resolvers decide what the combination means.
    """

    host: str | None = None
    owner: str | None = None
    repository_name: str | None = None
    branch_name: str | None = None
    treeish_path: str | None = None
    blob_name: str | None = None
    line: int | None = None
    line_end: int | None = None
    pull_request: int | None = None
    issue: int | None = None

    def repository_url(self, default_host: str = DEFAULT_HOST) -> str:
        """Return the canonical repository address.

        Returns:
            A string like "https://github.com/octocat/Hello-World".
        """
        host = self.host or default_host
        return f"https://{host}/{self.owner}/{self.repository_name}"

    def line_range(self) -> tuple[int, int] | None:
        """Return the inclusive 1-based line range, if a line is known."""
        if self.line is None:
            return None
        line_end = self.line_end if self.line_end is not None else self.line
        return self.line, line_end

    def to_dict(self) -> dict[str, Any]:
        """Return only the populated fields."""
        return {k: v for k, v in asdict(self).items() if v is not None}
