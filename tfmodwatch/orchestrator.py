"""Pipeline orchestration: changed files -> root modules -> affected modules."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import FrozenSet, List, Optional, Sequence

from .analyzer import analyze_root_modules
from .discovery import find_root_modules
from .git.diff import RevisionDiff
from .logging import get_logger
from .paths import normalize_path

DEFAULT_BEFORE_COMMIT = "HEAD^"
DEFAULT_AFTER_COMMIT = "HEAD"


@dataclass
class AnalysisRequest:
    """Inputs for a single analysis run."""

    root_module_dirs: Sequence[str]
    changed_files: Optional[Sequence[str]] = None
    before_commit: str = DEFAULT_BEFORE_COMMIT
    after_commit: str = DEFAULT_AFTER_COMMIT
    git_repository_root: Optional[str] = None
    base_path: Optional[str] = None
    exclude_paths: Sequence[str] = field(default_factory=list)


class Orchestrator:
    """Resolves changed files, discovers root modules and runs the analyzer."""

    def __init__(self, revision_diff: RevisionDiff | None = None) -> None:
        self.revision_diff = revision_diff or RevisionDiff()
        self.logger = get_logger("orchestrator")

    def run(self, request: AnalysisRequest) -> List[str]:
        """Return affected root modules relative to the effective base path."""
        base_path = request.base_path
        if base_path and not os.path.exists(base_path):
            raise FileNotFoundError(f"base-path does not exist: {base_path}")

        if request.changed_files:
            self.logger.info("Using %d provided changed files", len(request.changed_files))
            changed_files = frozenset(normalize_path(path) for path in request.changed_files)
            if not base_path:
                base_path = str(Path.cwd())
                self.logger.info("Using current working directory as base path: %s", base_path)
        else:
            repo_root = self._resolve_repository_root(request.git_repository_root)
            changed_files = self._search_changed_files(
                repo_root, request.before_commit, request.after_commit
            )
            if not base_path:
                base_path = repo_root
                self.logger.info("Using git repository root as base path: %s", base_path)

        self.logger.info("Found %d changed files", len(changed_files))
        self.logger.debug("Changed files: %s", ", ".join(sorted(changed_files)))

        root_modules = self._discover(request.root_module_dirs, request.exclude_paths)

        self.logger.info("Analyzing %d root modules", len(root_modules))
        updated = analyze_root_modules(root_modules, changed_files, base_path, logger=self.logger)
        self.logger.info("Analysis complete: %d updated root modules", len(updated))
        return updated

    # ------------------------------------------------------------------
    # Internals

    def _resolve_repository_root(self, configured: Optional[str]) -> str:
        if configured:
            if not os.path.exists(configured):
                raise FileNotFoundError(f"git-repository-root-path does not exist: {configured}")
            return normalize_path(configured)
        self.logger.debug("git repository root not specified, detecting it from the working directory")
        repo_root = self.revision_diff.find_repository_root()
        self.logger.info("Using auto-detected git repository root: %s", repo_root)
        return repo_root

    def _search_changed_files(self, repo_root: str, before: str, after: str) -> FrozenSet[str]:
        self.logger.info("Getting changed files between %s and %s", before, after)
        return self.revision_diff.changed_files(repo_root, before, after)

    def _discover(self, search_dirs: Sequence[str], exclude_paths: Sequence[str]) -> List[str]:
        found: List[str] = []
        for directory in search_dirs:
            self.logger.info("Searching for root modules in %s", directory)
            modules = find_root_modules(directory, exclude_paths, logger=self.logger)
            if not modules:
                self.logger.warning("No root modules found in %s", directory)
                continue
            self.logger.info("Found %d root modules in %s", len(modules), directory)
            found.extend(modules)
        return found


__all__ = ["AnalysisRequest", "DEFAULT_AFTER_COMMIT", "DEFAULT_BEFORE_COMMIT", "Orchestrator"]
