"""Discovery of Terraform root modules below search directories."""

from __future__ import annotations

import logging
import os
from fnmatch import fnmatchcase
from pathlib import Path
from typing import List, Sequence

from .logging import get_logger
from .terraform.parser import DECLARATION_SUFFIX

_EXCLUDED_DIRS = {
    ".git",
    ".terraform",
    ".terragrunt-cache",
}


def contains_terraform_files(directory: str) -> bool:
    """Return True when ``directory`` holds at least one ``*.tf`` file."""
    with os.scandir(directory) as entries:
        for entry in entries:
            if not entry.is_dir(follow_symlinks=False) and entry.name.endswith(DECLARATION_SUFFIX):
                return True
    return False


def find_root_modules(
    search_dir: str,
    exclude_patterns: Sequence[str] = (),
    logger: logging.Logger | None = None,
) -> List[str]:
    """Return every directory below ``search_dir`` (inclusive) holding ``*.tf`` files.

    Directories are visited top-down in name order. Unreadable paths are logged
    and skipped rather than failing the search.
    """
    logger = logger or get_logger("discovery")
    root = Path(search_dir)
    root_modules: List[str] = []

    def _on_error(exc: OSError) -> None:
        logger.warning("Failed to access path %s: %s", exc.filename, exc)

    for dirpath, dirnames, _ in os.walk(root, onerror=_on_error):
        current = Path(dirpath)
        rel_dir = current.relative_to(root).as_posix() if current != root else ""

        kept = []
        for name in sorted(dirnames):
            if name in _EXCLUDED_DIRS:
                continue
            rel_path = f"{rel_dir}/{name}" if rel_dir else name
            if _is_excluded(rel_path, name, exclude_patterns):
                logger.debug("Skipping excluded directory %s", rel_path)
                continue
            kept.append(name)
        dirnames[:] = kept

        try:
            has_terraform = contains_terraform_files(dirpath)
        except OSError as exc:
            logger.warning("Failed to check for Terraform files in %s: %s", dirpath, exc)
            continue

        if has_terraform:
            logger.debug("Found root module %s", dirpath)
            root_modules.append(str(current))

    return root_modules


def _is_excluded(rel_path: str, name: str, patterns: Sequence[str]) -> bool:
    for pattern in patterns:
        pattern = pattern.rstrip("/")
        if not pattern:
            continue
        if fnmatchcase(rel_path, pattern) or fnmatchcase(name, pattern):
            return True
        if pattern.startswith("**/") and fnmatchcase(name, pattern[3:]):
            return True
    return False


__all__ = ["contains_terraform_files", "find_root_modules"]
