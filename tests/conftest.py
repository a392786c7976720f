import subprocess
import sys
from pathlib import Path

import pytest
import structlog

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))


@pytest.fixture(autouse=True)
def reset_structlog():
    """Reset structlog configuration before each test to avoid caching issues."""
    structlog.reset_defaults()
    yield
    structlog.reset_defaults()


def _git(repo_path: Path, *args: str) -> str:
    result = subprocess.run(
        ["git", *args],
        cwd=repo_path,
        capture_output=True,
        text=True,
        check=True,
    )
    return result.stdout.strip()


@pytest.fixture
def git_repo(tmp_path: Path) -> Path:
    """Create a git repository with a nested branch name.

    Layout on "main":
        README.md
        src/lib/main.rs
        docs/main.rs

    Branch "feature/x" adds src/feature.txt.
    """
    repo_path = tmp_path / "test-repo"
    repo_path.mkdir()

    _git(repo_path, "init", "--initial-branch=main")
    _git(repo_path, "config", "user.email", "test@test.com")
    _git(repo_path, "config", "user.name", "Test User")

    (repo_path / "README.md").write_text("# Test\n")
    (repo_path / "src" / "lib").mkdir(parents=True)
    (repo_path / "src" / "lib" / "main.rs").write_text("fn main() {\n    run();\n}\n")
    (repo_path / "docs").mkdir()
    (repo_path / "docs" / "main.rs").write_text("// docs\n")
    _git(repo_path, "add", ".")
    _git(repo_path, "commit", "-m", "Initial commit")

    _git(repo_path, "checkout", "-b", "feature/x")
    (repo_path / "src" / "feature.txt").write_text("feature\n")
    _git(repo_path, "add", ".")
    _git(repo_path, "commit", "-m", "Feature commit")
    _git(repo_path, "checkout", "main")

    return repo_path


@pytest.fixture
def head_sha(git_repo: Path) -> str:
    return _git(git_repo, "rev-parse", "main")
