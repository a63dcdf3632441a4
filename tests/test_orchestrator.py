"""Tests for tfmodwatch.orchestrator."""

from __future__ import annotations

from pathlib import Path
from typing import FrozenSet

import pytest

from tests._fixtures.repo_builder import RepoBuilder
from tfmodwatch.git.diff import RevisionDiff
from tfmodwatch.orchestrator import AnalysisRequest, Orchestrator


class StubRevisionDiff(RevisionDiff):
    """Returns canned changed files and records the requested revisions."""

    def __init__(self, root: Path, files: FrozenSet[str]) -> None:
        super().__init__(runner=self._fail)
        self.root = root
        self.files = files
        self.calls: list[tuple[str, str, str]] = []

    def changed_files(self, repo_path: str, before: str, after: str) -> FrozenSet[str]:
        self.calls.append((repo_path, before, after))
        return self.files

    def find_repository_root(self, start: str | None = None) -> str:
        return str(self.root)

    @staticmethod
    def _fail(args, cwd, capture_output=False):  # type: ignore[no-untyped-def]
        raise AssertionError(f"unexpected git call: {args}")


def test_run_with_explicit_changed_files(sample_repo: RepoBuilder) -> None:
    orchestrator = Orchestrator()
    request = AnalysisRequest(
        root_module_dirs=[str(sample_repo.path("environments"))],
        changed_files=[str(sample_repo.path("modules/common/common-1/main.tf"))],
        base_path=str(sample_repo.path()),
    )

    assert orchestrator.run(request) == ["environments/org/common/dev"]


def test_run_defaults_base_path_to_working_directory(
    sample_repo: RepoBuilder, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.chdir(sample_repo.path("environments"))
    request = AnalysisRequest(
        root_module_dirs=["."],
        changed_files=["../modules/common/common-2/main.tf"],
    )

    assert sorted(Orchestrator().run(request)) == ["org/common/dev", "org/service-1/dev"]


def test_run_uses_revision_diff_and_repository_root(sample_repo: RepoBuilder) -> None:
    diff = StubRevisionDiff(
        sample_repo.path(),
        frozenset({str(sample_repo.path("modules/service/service-1/main.tf"))}),
    )
    request = AnalysisRequest(
        root_module_dirs=[str(sample_repo.path("environments"))],
        before_commit="origin/main",
    )

    assert Orchestrator(revision_diff=diff).run(request) == ["environments/org/service-1/dev"]
    assert diff.calls == [(str(sample_repo.path()), "origin/main", "HEAD")]


def test_run_with_configured_repository_root(sample_repo: RepoBuilder) -> None:
    diff = StubRevisionDiff(Path("/unused"), frozenset())
    request = AnalysisRequest(
        root_module_dirs=[str(sample_repo.path("environments"))],
        git_repository_root=str(sample_repo.path()),
        base_path=str(sample_repo.path("environments")),
    )

    assert Orchestrator(revision_diff=diff).run(request) == []
    assert diff.calls == [(str(sample_repo.path()), "HEAD^", "HEAD")]


def test_run_rejects_missing_base_path(sample_repo: RepoBuilder) -> None:
    request = AnalysisRequest(
        root_module_dirs=[str(sample_repo.path("environments"))],
        changed_files=[str(sample_repo.path("modules/common/common-1/main.tf"))],
        base_path=str(sample_repo.path("nope")),
    )

    with pytest.raises(FileNotFoundError):
        Orchestrator().run(request)


def test_run_rejects_missing_repository_root(tmp_path: Path) -> None:
    request = AnalysisRequest(
        root_module_dirs=[str(tmp_path)],
        git_repository_root=str(tmp_path / "missing"),
    )

    with pytest.raises(FileNotFoundError):
        Orchestrator(revision_diff=StubRevisionDiff(tmp_path, frozenset())).run(request)
