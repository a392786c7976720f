"""Desktop collaborators: clipboard, browser windows and the editor.

The context service only depends on the protocols below. The command-backed
implementations shell out to whatever tool the user configured, so they
stay out of the core and are replaced by fakes in tests.
"""

from __future__ import annotations

import subprocess
from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol

from .logging import get_logger

logger = get_logger(__name__)


class DesktopError(Exception):
    """A desktop helper command failed."""

    pass


class ClipboardSource(Protocol):
    def get_text(self) -> str: ...


class WindowEnumerator(Protocol):
    def list_titles(self, class_name: str) -> Iterator[str]: ...


class Editor(Protocol):
    def open_file(self, path: Path) -> Any: ...

    def select_and_center(
        self, view: Any, line_start: int, line_end: int, line_end_width: int
    ) -> None: ...


def _run_command(cmd: Sequence[str], timeout: float) -> subprocess.CompletedProcess[str]:
    logger.debug("desktop.run", cmd=list(cmd))
    try:
        result = subprocess.run(
            list(cmd),
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except FileNotFoundError as e:
        raise DesktopError(f"{cmd[0]} not found on PATH") from e
    except subprocess.TimeoutExpired as e:
        raise DesktopError(f"{cmd[0]} timed out after {timeout}s") from e

    if result.returncode != 0:
        raise DesktopError(
            f"{cmd[0]} failed: {result.stderr.strip() or result.returncode}"
        )
    return result


class CommandClipboard:
    """Read the clipboard by running a command such as `xclip -o`."""

    def __init__(self, command: Sequence[str], *, timeout: float = 5.0) -> None:
        if not command:
            raise ValueError("clipboard command cannot be empty")
        self.command = list(command)
        self.timeout = timeout

    def get_text(self) -> str:
        return _run_command(self.command, self.timeout).stdout


class WmctrlWindowEnumerator:
    """List top-level window titles using `wmctrl -lx`.

    Each output line is "<id> <desktop> <instance.Class> <host> <title>".
    A window matches when class_name equals either half of its WM_CLASS,
    ignoring case.
    """

    def __init__(
        self, command: Sequence[str] = ("wmctrl", "-lx"), *, timeout: float = 5.0
    ) -> None:
        self.command = list(command)
        self.timeout = timeout

    def list_titles(self, class_name: str) -> Iterator[str]:
        wanted = class_name.lower()
        output = _run_command(self.command, self.timeout).stdout
        for line in output.splitlines():
            parts = line.split(None, 4)
            if len(parts) < 5:
                continue
            wm_class = parts[2].lower()
            if wanted == wm_class or wanted in wm_class.split("."):
                yield parts[4]


@dataclass(frozen=True)
class EditorView:
    """Handle for a file opened by CommandEditor."""

    path: Path


class CommandEditor:
    """Open files with an editor command template.

    Arguments may contain {path}, {line} and {line_end} placeholders,
    e.g. ["code", "--goto", "{path}:{line}"]. Lines are 1-based in the
    command. Selection reopens the file at the requested line, which suits
    editors that reuse an existing window.
    """

    def __init__(self, command: Sequence[str], *, timeout: float = 30.0) -> None:
        if not command:
            raise ValueError("editor command cannot be empty")
        self.command = list(command)
        self.timeout = timeout

    def _launch(self, path: Path, line: int, line_end: int) -> None:
        cmd = [
            arg.format(path=str(path), line=line, line_end=line_end)
            for arg in self.command
        ]
        _run_command(cmd, self.timeout)
        logger.info("editor.opened", path=str(path), line=line, line_end=line_end)

    def open_file(self, path: Path) -> EditorView:
        self._launch(path, 1, 1)
        return EditorView(path=path)

    def select_and_center(
        self, view: EditorView, line_start: int, line_end: int, line_end_width: int
    ) -> None:
        self._launch(view.path, line_start + 1, line_end + 1)
