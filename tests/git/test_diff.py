"""Tests for the git revision diff provider."""

from __future__ import annotations

import shutil
import subprocess
from pathlib import Path

import pytest

from tfmodwatch.errors import RevisionError
from tfmodwatch.git.diff import RevisionDiff

_HASH_A = "a" * 40
_HASH_B = "b" * 40


def test_changed_files_reports_both_sides_of_a_rename(tmp_path: Path) -> None:
    calls: list[tuple[list[str], Path]] = []

    def runner(args, cwd, capture_output=False):  # type: ignore[no-untyped-def]
        calls.append((list(args), Path(cwd)))
        if args[:2] == ["git", "rev-parse"]:
            return {"HEAD^^{commit}": f"{_HASH_A}\n", "HEAD^{commit}": f"{_HASH_B}\n"}[args[-1]]
        if args[:2] == ["git", "diff"]:
            return "modules/vpc/main.tf\0modules/net/old.tf\0modules/net/new.tf\0"
        return ""

    diff = RevisionDiff(runner=runner)
    files = diff.changed_files(str(tmp_path), "HEAD^", "HEAD")

    assert files == frozenset(
        {
            str(tmp_path / "modules" / "vpc" / "main.tf"),
            str(tmp_path / "modules" / "net" / "old.tf"),
            str(tmp_path / "modules" / "net" / "new.tf"),
        }
    )
    assert calls[-1][0] == ["git", "diff", "--name-only", "--no-renames", "-z", _HASH_A, _HASH_B]
    assert calls[-1][1] == tmp_path


def test_changed_files_keeps_newlines_inside_names(tmp_path: Path) -> None:
    def runner(args, cwd, capture_output=False):  # type: ignore[no-untyped-def]
        if args[:2] == ["git", "diff"]:
            return "docs/odd\nname.tf\0main.tf\0"
        return ""

    files = RevisionDiff(runner=runner).changed_files(str(tmp_path), _HASH_A, _HASH_B)

    assert files == frozenset(
        {
            str(tmp_path / "docs" / "odd\nname.tf"),
            str(tmp_path / "main.tf"),
        }
    )


def test_resolve_revision_returns_full_hash_without_git(tmp_path: Path) -> None:
    def runner(args, cwd, capture_output=False):  # type: ignore[no-untyped-def]
        raise AssertionError("git should not be invoked for a full hash")

    assert RevisionDiff(runner=runner).resolve_revision(str(tmp_path), _HASH_A) == _HASH_A


def test_resolve_revision_wraps_git_failures(tmp_path: Path) -> None:
    def runner(args, cwd, capture_output=False):  # type: ignore[no-untyped-def]
        raise subprocess.CalledProcessError(1, list(args), output="", stderr="")

    with pytest.raises(RevisionError) as excinfo:
        RevisionDiff(runner=runner).resolve_revision(str(tmp_path), "no-such-branch")

    assert "no-such-branch" in str(excinfo.value)


def test_find_repository_root_uses_show_toplevel(tmp_path: Path) -> None:
    def runner(args, cwd, capture_output=False):  # type: ignore[no-untyped-def]
        assert args == ["git", "rev-parse", "--show-toplevel"]
        return f"{tmp_path}\n"

    assert RevisionDiff(runner=runner).find_repository_root(str(tmp_path / "sub")) == str(tmp_path)


def _git(repo: Path, *args: str) -> str:
    completed = subprocess.run(
        ["git", "-c", "user.name=tester", "-c", "user.email=tester@example.com", *args],
        cwd=str(repo),
        check=True,
        text=True,
        capture_output=True,
    )
    return completed.stdout


@pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")
def test_changed_files_against_real_repository(tmp_path: Path) -> None:
    repo = tmp_path / "repo"
    (repo / "modules" / "vpc").mkdir(parents=True)
    (repo / "modules" / "vpc" / "main.tf").write_text("# v1\n", encoding="utf-8")
    (repo / "modules" / "vpc" / "old.tf").write_text("# renamed later\n", encoding="utf-8")
    (repo / "untouched.tf").write_text("# same\n", encoding="utf-8")
    _git(repo, "init", "--quiet")
    _git(repo, "add", ".")
    _git(repo, "commit", "--quiet", "-m", "initial")

    (repo / "modules" / "vpc" / "main.tf").write_text("# v2\n", encoding="utf-8")
    _git(repo, "mv", "modules/vpc/old.tf", "modules/vpc/new.tf")
    _git(repo, "commit", "--quiet", "-am", "update")

    diff = RevisionDiff()
    files = diff.changed_files(str(repo), "HEAD^", "HEAD")

    vpc = repo / "modules" / "vpc"
    assert files == frozenset(
        {str(vpc / "main.tf"), str(vpc / "old.tf"), str(vpc / "new.tf")}
    )
    head = _git(repo, "rev-parse", "HEAD").strip()
    assert diff.resolve_revision(str(repo), "HEAD") == head

    with pytest.raises(RevisionError):
        diff.resolve_revision(str(repo), "does-not-exist")
