"""Git utility functions for working with repositories."""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from pathlib import Path
from types import TracebackType

from ..logging import get_logger

logger = get_logger(__name__)

UNRESOLVED_MARKERS = ("missing", "ambiguous")


class GitError(Exception):
    """Error from a git operation."""

    def __init__(self, message: str, returncode: int = 1, stderr: str = "") -> None:
        super().__init__(message)
        self.returncode = returncode
        self.stderr = stderr


def run_git(
    *args: str,
    cwd: Path | None = None,
    timeout: float = 60.0,
    check: bool = True,
) -> subprocess.CompletedProcess[str]:
    """Run a git command and return the result.

    Args:
        *args: Git command arguments (without 'git' prefix).
        cwd: Working directory for the command.
        timeout: Command timeout in seconds.
        check: If True, raise GitError on non-zero exit.

    Returns:
        CompletedProcess with stdout/stderr.

    Raises:
        GitError: If check=True and command fails.
    """
    cmd = ["git", *args]
    logger.debug("git.run", cmd=cmd, cwd=str(cwd) if cwd else None)

    result = subprocess.run(
        cmd,
        cwd=cwd,
        capture_output=True,
        text=True,
        timeout=timeout,
    )

    if check and result.returncode != 0:
        raise GitError(
            f"git {args[0]} failed: {result.stderr.strip() or result.stdout.strip()}",
            returncode=result.returncode,
            stderr=result.stderr,
        )

    return result


def is_git_repo(path: Path) -> bool:
    """Check if a path is the root of a git working copy."""
    git_dir = path / ".git"
    return git_dir.exists()


def get_toplevel(cwd: Path, timeout: float = 60.0) -> Path:
    """Get the root of the working copy containing cwd.

    Raises:
        GitError: If cwd is not inside a git working copy.
    """
    result = run_git("rev-parse", "--show-toplevel", cwd=cwd, timeout=timeout)
    return Path(result.stdout.strip())


@dataclass(frozen=True)
class GitObject:
    """An object found in the git object store."""

    sha: str
    type: str
    size: int
    expression: str


class GitObjectStore:
    """Resolve revision expressions against a repository's object store.

    Holds one `git cat-file --batch-check` process for the lifetime of the
    store, so trying many candidate expressions costs one process. Use as a
    context manager:

        with GitObjectStore(repo_dir) as store:
            obj = store.resolve("main:README.md")
    """

    def __init__(self, repository_dir: Path, *, timeout: float = 60.0) -> None:
        self.repository_dir = repository_dir
        self.timeout = timeout
        self._process: subprocess.Popen[str] | None = None

    def open(self) -> GitObjectStore:
        """Start the batch process.

        Raises:
            GitError: If repository_dir is not a git repository.
        """
        if self._process is not None:
            return self

        run_git("rev-parse", "--git-dir", cwd=self.repository_dir, timeout=self.timeout)
        self._process = subprocess.Popen(
            ["git", "cat-file", "--batch-check"],
            cwd=self.repository_dir,
            stdin=subprocess.PIPE,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            encoding="utf-8",
        )
        logger.debug("git.store.opened", repository=str(self.repository_dir))
        return self

    def close(self) -> None:
        process = self._process
        if process is None:
            return
        self._process = None

        if process.stdin:
            process.stdin.close()
        try:
            process.wait(timeout=self.timeout)
        except subprocess.TimeoutExpired:
            process.kill()
            process.wait()
        finally:
            if process.stdout:
                process.stdout.close()
            if process.stderr:
                process.stderr.close()
        logger.debug("git.store.closed", repository=str(self.repository_dir))

    def __enter__(self) -> GitObjectStore:
        return self.open()

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def resolve(self, expression: str) -> GitObject | None:
        """Look up a "revision" or "revision:path" expression.

        Returns:
            The object, or None if git reports it missing or ambiguous.

        Raises:
            GitError: If the store is not open or the batch process died.
        """
        # ":/text" and ":0:path" are commit-message and index lookups
        if not expression or "\n" in expression or expression.startswith(":"):
            return None

        process = self._process
        if process is None or process.stdin is None or process.stdout is None:
            raise GitError("object store is not open")

        try:
            process.stdin.write(expression + "\n")
            process.stdin.flush()
        except BrokenPipeError as e:
            raise GitError("git cat-file exited unexpectedly") from e

        line = process.stdout.readline()
        if not line:
            stderr = process.stderr.read() if process.stderr else ""
            raise GitError(
                f"git cat-file exited unexpectedly: {stderr.strip()}",
                returncode=process.poll() or 1,
                stderr=stderr,
            )

        line = line.rstrip("\n")
        if line.rsplit(" ", 1)[-1] in UNRESOLVED_MARKERS:
            return None

        sha, object_type, size = line.split(" ")
        return GitObject(sha=sha, type=object_type, size=int(size), expression=expression)
