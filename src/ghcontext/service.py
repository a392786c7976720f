"""Find GitHub contexts on the desktop and resolve them in a working copy."""

from __future__ import annotations

import errno
from collections.abc import Iterator
from dataclasses import dataclass
from itertools import chain
from pathlib import Path

from .context import GitHubContext
from .desktop import (
    ClipboardSource,
    CommandClipboard,
    CommandEditor,
    Editor,
    WindowEnumerator,
    WmctrlWindowEnumerator,
)
from .logging import get_logger
from .paths import find_file_by_name, resolve_path
from .settings import ContextSettings
from .treeish import to_treeish
from .url import find_context_from_url
from .utils.git import GitObject, GitObjectStore
from .window_title import find_context_from_titles, find_context_from_window_title

logger = get_logger(__name__)


@dataclass(frozen=True)
class FileLocation:
    """A file in the working copy and the lines a context points at."""

    path: Path
    line: int | None = None
    line_end: int | None = None

    def format(self) -> str:
        """Format as "path", "path:10" or "path:10-20"."""
        if self.line is None:
            return str(self.path)
        if self.line_end is None or self.line_end == self.line:
            return f"{self.path}:{self.line}"
        return f"{self.path}:{self.line}-{self.line_end}"


class GitHubContextService:
    """Entry point tying the extractors to the desktop and the working copy.

    Collaborators default to the command-backed implementations configured
    in settings; pass fakes to use the service without a desktop.
    """

    def __init__(
        self,
        settings: ContextSettings | None = None,
        *,
        clipboard: ClipboardSource | None = None,
        windows: WindowEnumerator | None = None,
        editor: Editor | None = None,
    ) -> None:
        self.settings = settings or ContextSettings()
        self._clipboard = clipboard
        self._windows = windows
        self._editor = editor

    @property
    def clipboard(self) -> ClipboardSource:
        if self._clipboard is None:
            self._clipboard = CommandClipboard(self.settings.clipboard_command)
        return self._clipboard

    @property
    def windows(self) -> WindowEnumerator:
        if self._windows is None:
            self._windows = WmctrlWindowEnumerator(self.settings.window_list_command)
        return self._windows

    @property
    def editor(self) -> Editor:
        if self._editor is None:
            self._editor = CommandEditor(self.settings.editor_command)
        return self._editor

    def find_context_from_url(self, url: str) -> GitHubContext | None:
        return find_context_from_url(url)

    def find_context_from_window_title(self, window_title: str) -> GitHubContext | None:
        return find_context_from_window_title(window_title)

    def find_context_from_clipboard(self) -> GitHubContext | None:
        """Extract a context from the URL currently on the clipboard."""
        return find_context_from_url(self.clipboard.get_text())

    def find_window_titles(self) -> Iterator[str]:
        """Lazily list titles of every configured browser window class."""
        return chain.from_iterable(
            self.windows.list_titles(class_name)
            for class_name in self.settings.browser_window_classes
        )

    def find_context_from_browser(self) -> GitHubContext | None:
        """Extract a context from the first browser window showing GitHub."""
        context = find_context_from_titles(self.find_window_titles())
        if context is None:
            logger.debug("browser.no_context", classes=self.settings.browser_window_classes)
        return context

    def to_repository_url(self, context: GitHubContext) -> str:
        return context.repository_url(default_host=self.settings.default_host)

    def resolve_path(self, context: GitHubContext) -> Path | None:
        return resolve_path(context, self.settings.default_branches)

    def find_file(self, repository_dir: Path, context: GitHubContext) -> FileLocation | None:
        """Locate the blob a context points at inside a working copy.

        When the treeish names a full commit or a default branch, the file
        must exist at exactly that path. Otherwise the first file with the
        blob's name is used.

        Returns:
            The file and line range, or None if there is no such file.
        """
        file_name = context.blob_name
        if file_name is None:
            return None

        resolved_path = self.resolve_path(context)
        if resolved_path is not None:
            full_path = repository_dir / resolved_path
            if not _is_within(full_path, repository_dir):
                logger.debug("file.outside_repository", path=str(full_path))
                return None
            if not _is_existing_file(full_path):
                logger.debug("file.resolved_missing", path=str(full_path))
                return None
        else:
            found = find_file_by_name(repository_dir, file_name)
            if found is None:
                return None
            full_path = found

        line_range = context.line_range()
        if line_range is None:
            return FileLocation(path=full_path)
        return FileLocation(path=full_path, line=line_range[0], line_end=line_range[1])

    def try_open_file(self, repository_dir: Path, context: GitHubContext) -> bool:
        """Open the blob in the editor and select its line range.

        Returns:
            False if the file could not be found.
        """
        location = self.find_file(repository_dir, context)
        if location is None:
            return False

        view = self.editor.open_file(location.path)

        if location.line is not None:
            line = location.line
            line_end = location.line_end if location.line_end is not None else line
            width = _line_width(location.path, line_end)
            self.editor.select_and_center(view, line - 1, line_end - 1, width)

        return True

    def resolve_git_object(
        self, repository_dir: Path, context: GitHubContext
    ) -> GitObject | None:
        """Find the git object a context points at.

        Each candidate split of the treeish path is looked up in turn; the
        first one git can resolve wins.

        Raises:
            GitError: If repository_dir is not a git repository.
        """
        path = context.treeish_path or context.branch_name
        if path is None:
            return None
        if context.blob_name is not None:
            path = f"{path}/{context.blob_name}"

        with GitObjectStore(repository_dir, timeout=self.settings.git_timeout) as store:
            for treeish in to_treeish(path):
                git_object = store.resolve(treeish)
                if git_object is not None:
                    logger.debug("git.object.resolved", expression=treeish, sha=git_object.sha)
                    return git_object

        logger.debug("git.object.not_found", path=path)
        return None


def _is_within(path: Path, root: Path) -> bool:
    return path.resolve().is_relative_to(root.resolve())


def _is_existing_file(path: Path) -> bool:
    """Like Path.is_file, but a name the filesystem cannot hold is simply absent."""
    try:
        return path.is_file()
    except OSError as e:
        if e.errno == errno.ENAMETOOLONG:
            return False
        raise


def _line_width(path: Path, line: int) -> int:
    """Return the character width of a 1-based line, or 0 past the end."""
    with open(path, encoding="utf-8", errors="replace") as f:
        for number, text in enumerate(f, start=1):
            if number == line:
                return len(text.rstrip("\r\n"))
    return 0
