"""Tests for ghcontext.paths module."""

from __future__ import annotations

from pathlib import Path

import pytest

from ghcontext.context import GitHubContext
from ghcontext.paths import find_file_by_name, resolve_path

COMMIT = "0123456789abcdef0123456789abcdef01234567"


class TestResolvePath:
    """Tests for resolve_path function."""

    def test_commit_with_tree(self) -> None:
        ctx = GitHubContext(treeish_path=f"{COMMIT}/src/lib", blob_name="main.rs")
        assert resolve_path(ctx) == Path("src/lib/main.rs")

    def test_commit_without_tree(self) -> None:
        ctx = GitHubContext(treeish_path=COMMIT, blob_name="README.md")
        assert resolve_path(ctx) == Path("README.md")

    def test_default_branch_with_tree(self) -> None:
        ctx = GitHubContext(treeish_path="main/docs", blob_name="index.md")
        assert resolve_path(ctx) == Path("docs/index.md")

    def test_master_is_a_default_branch(self) -> None:
        ctx = GitHubContext(treeish_path="master", blob_name="index.md")
        assert resolve_path(ctx) == Path("index.md")

    def test_other_branch_is_unresolved(self) -> None:
        ctx = GitHubContext(treeish_path="feature-x", blob_name="main.rs")
        assert resolve_path(ctx) is None

    def test_branch_prefix_is_not_enough(self) -> None:
        ctx = GitHubContext(treeish_path="mainline/src", blob_name="main.rs")
        assert resolve_path(ctx) is None

    def test_uppercase_hash_is_unresolved(self) -> None:
        ctx = GitHubContext(treeish_path=COMMIT.upper(), blob_name="main.rs")
        assert resolve_path(ctx) is None

    def test_short_hash_is_unresolved(self) -> None:
        ctx = GitHubContext(treeish_path=COMMIT[:39], blob_name="main.rs")
        assert resolve_path(ctx) is None

    def test_custom_default_branches(self) -> None:
        ctx = GitHubContext(treeish_path="develop/src", blob_name="a.py")
        assert resolve_path(ctx, ["develop"]) == Path("src/a.py")
        assert resolve_path(ctx) is None

    def test_no_default_branches(self) -> None:
        ctx = GitHubContext(treeish_path="main/src", blob_name="a.py")
        assert resolve_path(ctx, []) is None

    @pytest.mark.parametrize(
        "ctx",
        [
            GitHubContext(blob_name="a.py"),
            GitHubContext(treeish_path="main"),
            GitHubContext(),
        ],
    )
    def test_requires_treeish_and_blob(self, ctx: GitHubContext) -> None:
        assert resolve_path(ctx) is None


class TestFindFileByName:
    """Tests for find_file_by_name function."""

    def test_finds_nested_file(self, tmp_path: Path) -> None:
        (tmp_path / "a" / "b").mkdir(parents=True)
        (tmp_path / "a" / "b" / "target.txt").write_text("x")
        assert find_file_by_name(tmp_path, "target.txt") == tmp_path / "a" / "b" / "target.txt"

    def test_missing(self, tmp_path: Path) -> None:
        (tmp_path / "other.txt").write_text("x")
        assert find_file_by_name(tmp_path, "target.txt") is None

    def test_files_before_subdirectories(self, tmp_path: Path) -> None:
        (tmp_path / "a").mkdir()
        (tmp_path / "a" / "dup.txt").write_text("nested")
        (tmp_path / "dup.txt").write_text("top")
        assert find_file_by_name(tmp_path, "dup.txt") == tmp_path / "dup.txt"

    def test_sorted_subdirectories(self, tmp_path: Path) -> None:
        for name in ("zeta", "alpha", "mid"):
            (tmp_path / name).mkdir()
            (tmp_path / name / "dup.txt").write_text(name)

        first = find_file_by_name(tmp_path, "dup.txt")
        assert first == tmp_path / "alpha" / "dup.txt"
        assert find_file_by_name(tmp_path, "dup.txt") == first

    def test_skips_git_directory(self, tmp_path: Path) -> None:
        (tmp_path / ".git").mkdir()
        (tmp_path / ".git" / "HEAD").write_text("ref: refs/heads/main\n")
        assert find_file_by_name(tmp_path, "HEAD") is None

    def test_directory_with_same_name_is_ignored(self, tmp_path: Path) -> None:
        (tmp_path / "target.txt").mkdir()
        assert find_file_by_name(tmp_path, "target.txt") is None

    def test_missing_root_raises(self, tmp_path: Path) -> None:
        with pytest.raises(OSError):
            find_file_by_name(tmp_path / "nope", "a.txt")
