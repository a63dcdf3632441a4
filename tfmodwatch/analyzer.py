"""Change propagation across Terraform module references.

A module is *updated* when a changed file sits directly inside its directory,
or when any module it references through a local ``source`` is updated. The
reference graph is discovered lazily: declaration files are parsed only when
the traversal reaches a module, and every finished verdict is memoized so a
module shared by many parents is analyzed once per :class:`ChangeAnalyzer`.
"""

from __future__ import annotations

import logging
import os
from typing import Callable, Dict, FrozenSet, Iterable, List, Set

from .errors import AnalysisError, ExtractionError
from .logging import get_logger
from .models import Verdict, VerdictReason
from .paths import convert_to_relative_path, normalize_path
from .stores import VerdictCache
from .terraform import find_child_modules

ChildExtractor = Callable[[str], List[str]]


class ChangeAnalyzer:
    """Decides whether modules are affected by a fixed set of changed files."""

    def __init__(
        self,
        changed_files: Iterable[str],
        logger: logging.Logger | None = None,
        extractor: ChildExtractor | None = None,
    ) -> None:
        self.logger = logger or get_logger("analyzer")
        self._changed_files: FrozenSet[str] = frozenset(
            normalize_path(path) for path in changed_files
        )
        self._extractor = extractor or find_child_modules
        self._cache = VerdictCache()
        # Modules whose analysis has started but not finished; guards against cycles.
        self._in_flight: Set[str] = set()
        # False verdicts that still depend on in-flight modules, in completion order.
        self._provisional: Dict[str, FrozenSet[str]] = {}

    @property
    def changed_files(self) -> FrozenSet[str]:
        return self._changed_files

    def is_module_updated(self, module_dir: str) -> bool:
        """Return True when ``module_dir`` is directly or transitively updated."""
        return self.explain(module_dir).updated

    def explain(self, module_dir: str) -> Verdict:
        """Return the tagged verdict for ``module_dir``."""
        try:
            return self._analyze(normalize_path(module_dir))
        finally:
            self._provisional.clear()

    def get_analysis_cache(self) -> Dict[str, bool]:
        """Return a copy of the memoized verdicts keyed by absolute module path."""
        return self._cache.snapshot()

    def clear_cache(self) -> None:
        self._cache.clear()
        self._provisional.clear()

    # ------------------------------------------------------------------
    # Internals

    def _analyze(self, module_dir: str) -> Verdict:
        cached = self._cache.get(module_dir)
        if cached is not None:
            self.logger.debug("Cache hit for %s (updated=%s)", module_dir, cached)
            return Verdict(module=module_dir, updated=cached, reason=VerdictReason.CACHED)

        assumed = self._provisional.get(module_dir)
        if assumed is not None:
            self.logger.debug("Reusing provisional verdict for %s", module_dir)
            return Verdict(
                module=module_dir,
                updated=False,
                reason=VerdictReason.CACHED,
                pending=assumed,
            )

        if module_dir in self._in_flight:
            self.logger.warning("Module reference cycle reaches %s again", module_dir)
            return Verdict(
                module=module_dir,
                updated=False,
                reason=VerdictReason.CYCLE,
                pending=frozenset({module_dir}),
            )

        self.logger.debug("Analyzing module %s", module_dir)

        if not self._exists(module_dir):
            self.logger.warning("Module directory does not exist: %s", module_dir)
            return self._record(
                Verdict(module=module_dir, updated=False, reason=VerdictReason.MISSING)
            )

        if self._has_direct_changes(module_dir):
            self.logger.debug("Module %s has direct file changes", module_dir)
            return self._record(
                Verdict(module=module_dir, updated=True, reason=VerdictReason.DIRECT_CHANGE)
            )

        try:
            children = self._extractor(module_dir)
        except ExtractionError as exc:
            # An unparsable module is assumed unaffected so the rest of the run continues.
            self.logger.warning("Failed to find child modules of %s: %s", module_dir, exc)
            return self._record(
                Verdict(module=module_dir, updated=False, reason=VerdictReason.EXTRACTION_FAILED)
            )

        self.logger.debug("Module %s references %d child modules", module_dir, len(children))

        pending: Set[str] = set()
        mark = len(self._provisional)
        self._in_flight.add(module_dir)
        try:
            for child in children:
                child_verdict = self._analyze(normalize_path(child))
                if child_verdict.updated:
                    self.logger.debug(
                        "Module %s is updated through child %s", module_dir, child_verdict.module
                    )
                    # Every in-flight ancestor is now updated too, so assumptions about them are void.
                    self._discard_provisional(mark)
                    return self._record(
                        Verdict(
                            module=module_dir,
                            updated=True,
                            reason=VerdictReason.CHILD_CHANGE,
                            via=child_verdict.module,
                        )
                    )
                pending.update(child_verdict.pending)
        finally:
            self._in_flight.discard(module_dir)

        pending.discard(module_dir)
        self.logger.debug("Module %s is not updated", module_dir)
        verdict = Verdict(
            module=module_dir,
            updated=False,
            reason=VerdictReason.UNCHANGED,
            pending=frozenset(pending),
        )
        self._settle_provisional(verdict, mark)
        return self._record(verdict)

    def _record(self, verdict: Verdict) -> Verdict:
        if verdict.provisional:
            # Depends on an ancestor that is still being analyzed; held until that ancestor finishes.
            self.logger.debug(
                "Holding provisional verdict for %s (pending: %s)",
                verdict.module,
                ", ".join(sorted(verdict.pending)),
            )
            self._provisional[verdict.module] = verdict.pending
            return verdict
        self._cache.store(verdict.module, verdict.updated)
        return verdict

    def _provisional_since(self, mark: int) -> List[str]:
        return list(self._provisional)[mark:]

    def _discard_provisional(self, mark: int) -> None:
        for module in self._provisional_since(mark):
            del self._provisional[module]

    def _settle_provisional(self, verdict: Verdict, mark: int) -> None:
        """Resolve the provisional verdicts collected beneath ``verdict.module``.

        When the finished module is itself final, every provisional verdict
        recorded beneath it assumed only modules that have now finished
        unchanged, so they become final ``False`` verdicts. Otherwise the
        finished module is replaced in their pending sets by its own pending
        ancestors.
        """
        finished = verdict.module
        for module in self._provisional_since(mark):
            assumed = self._provisional[module]
            if not verdict.provisional:
                del self._provisional[module]
                self.logger.debug("Provisional verdict for %s is final", module)
                self._cache.store(module, False)
            elif finished in assumed:
                self._provisional[module] = (assumed - {finished}) | verdict.pending

    @staticmethod
    def _exists(module_dir: str) -> bool:
        try:
            os.stat(module_dir)
        except (FileNotFoundError, NotADirectoryError):
            return False
        except OSError as exc:
            raise AnalysisError(f"failed to stat module directory {module_dir}: {exc}") from exc
        return True

    def _has_direct_changes(self, module_dir: str) -> bool:
        """Return True when a changed file sits directly inside ``module_dir``."""
        try:
            with os.scandir(module_dir) as entries:
                for entry in entries:
                    if entry.is_dir(follow_symlinks=False):
                        continue
                    file_path = normalize_path(os.path.join(module_dir, entry.name))
                    if file_path in self._changed_files:
                        self.logger.debug("Found changed file %s in %s", file_path, module_dir)
                        return True
        except OSError as exc:
            raise AnalysisError(f"failed to read directory {module_dir}: {exc}") from exc
        return False


def analyze_root_modules(
    root_module_dirs: Iterable[str],
    changed_files: Iterable[str],
    base_path: str,
    logger: logging.Logger | None = None,
) -> List[str]:
    """Return the updated root modules as paths relative to ``base_path``.

    A single analyzer is shared by every root so common child modules are
    analyzed once. Any error aborts the whole batch.
    """
    logger = logger or get_logger("analyzer")
    engine = ChangeAnalyzer(changed_files, logger=logger)
    absolute_base = normalize_path(base_path)

    updated_modules: List[str] = []
    for module_dir in root_module_dirs:
        if not engine.is_module_updated(module_dir):
            continue
        relative = convert_to_relative_path(absolute_base, normalize_path(module_dir))
        logger.info("Root module %s is updated", relative or ".")
        updated_modules.append(relative)
    return updated_modules


__all__ = ["ChangeAnalyzer", "ChildExtractor", "analyze_root_modules"]
