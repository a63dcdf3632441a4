"""Changed-file discovery between two git revisions."""

from __future__ import annotations

import os
import re
import subprocess
from pathlib import Path
from typing import Callable, FrozenSet, Iterable, Set

from ..errors import RevisionError

_FULL_HASH = re.compile(r"^[0-9a-f]{40}$")


class RevisionDiff:
    """Lists files that differ between two revisions of a repository."""

    def __init__(self, runner: Callable[..., str] | None = None) -> None:
        self._runner = runner or self._default_runner

    def changed_files(self, repo_path: str, before: str, after: str) -> FrozenSet[str]:
        """Return absolute paths changed between ``before`` and ``after``.

        Renames are reported as a deletion plus an addition so both the old and
        the new location are included.
        """
        repo = Path(repo_path).expanduser().absolute()
        before_hash = self.resolve_revision(str(repo), before)
        after_hash = self.resolve_revision(str(repo), after)

        output = self._run(
            ["git", "diff", "--name-only", "--no-renames", "-z", before_hash, after_hash],
            cwd=repo,
        )
        files: Set[str] = set()
        for name in output.split("\0"):
            if not name:
                continue
            files.add(os.path.normpath(os.path.join(str(repo), name)))
        return frozenset(files)

    def resolve_revision(self, repo_path: str, ref: str) -> str:
        """Resolve a hash, branch, tag or ``HEAD^``-style reference to a commit hash."""
        if _FULL_HASH.match(ref):
            return ref
        output = self._run(
            ["git", "rev-parse", "--verify", "--quiet", f"{ref}^{{commit}}"],
            cwd=Path(repo_path),
        )
        resolved = output.strip()
        if not resolved:
            raise RevisionError(f"failed to resolve revision {ref}")
        return resolved

    def find_repository_root(self, start: str | None = None) -> str:
        """Return the top-level directory of the repository containing ``start``."""
        cwd = Path(start) if start else Path.cwd()
        output = self._run(["git", "rev-parse", "--show-toplevel"], cwd=cwd)
        root = output.strip()
        if not root:
            raise RevisionError(f"{cwd} is not inside a git repository")
        return os.path.normpath(root)

    def _run(self, args: Iterable[str], *, cwd: Path) -> str:
        args = list(args)
        try:
            return self._runner(args, cwd=cwd, capture_output=True)
        except subprocess.CalledProcessError as exc:
            detail = (exc.stderr or "").strip() or f"exit status {exc.returncode}"
            raise RevisionError(f"`{' '.join(args)}` failed: {detail}") from exc
        except OSError as exc:
            raise RevisionError(f"failed to run git in {cwd}: {exc}") from exc

    @staticmethod
    def _default_runner(
        args: Iterable[str],
        *,
        cwd: Path,
        capture_output: bool = False,
    ) -> str:
        completed = subprocess.run(
            list(args),
            cwd=str(cwd),
            check=True,
            text=True,
            capture_output=capture_output,
        )
        return completed.stdout if capture_output else ""


__all__ = ["RevisionDiff"]
