"""Memoized module verdicts for a single analysis run."""

from __future__ import annotations

from typing import Dict, Optional

from ..paths import normalize_path


class VerdictCache:
    """Stores the affected/unaffected verdict keyed by canonical module path.

    Keys are normalized on every access so that ``a/./b`` and ``/cwd/a/b`` hit
    the same entry. A verdict is written once per path; the changed-file set is
    fixed for the lifetime of the owning analyzer, so entries never go stale.
    """

    def __init__(self) -> None:
        self._entries: Dict[str, bool] = {}

    def get(self, module_dir: str) -> Optional[bool]:
        return self._entries.get(normalize_path(module_dir))

    def store(self, module_dir: str, updated: bool) -> None:
        self._entries[normalize_path(module_dir)] = updated

    def clear(self) -> None:
        self._entries.clear()

    def snapshot(self) -> Dict[str, bool]:
        """Return a copy of the cached verdicts."""
        return dict(self._entries)

    def __contains__(self, module_dir: object) -> bool:
        if not isinstance(module_dir, str):
            return False
        return normalize_path(module_dir) in self._entries

    def __len__(self) -> int:
        return len(self._entries)


__all__ = ["VerdictCache"]
