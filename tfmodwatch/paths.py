"""Path normalization helpers used for cache keys and output."""

from __future__ import annotations

import os
from typing import Union

from .errors import InvalidArgumentError, PathResolutionError

PathLike = Union[str, "os.PathLike[str]"]


def normalize_path(path: PathLike) -> str:
    """Return ``path`` as an absolute, lexically cleaned string.

    Symlinks are not resolved; two spellings of the same directory compare
    equal only when they clean to the same string.
    """
    raw = os.fspath(path)
    try:
        return os.path.abspath(raw)
    except OSError as exc:
        # os.getcwd() fails when the working directory has been removed.
        raise PathResolutionError(f"Failed to get absolute path for {raw}: {exc}") from exc


def convert_to_relative_path(base_path: str, path: str) -> str:
    """Return ``path`` relative to ``base_path``.

    Both arguments must already be absolute. Paths under ``base_path`` lose the
    shared prefix, the base itself maps to ``""`` and anything else falls back
    to a relative path that may ascend (``../other``).
    """
    if not os.path.isabs(base_path):
        raise InvalidArgumentError(f"base path {base_path} is not absolute")
    if not os.path.isabs(path):
        raise InvalidArgumentError(f"path {path} is not absolute")

    base = os.path.normpath(base_path)
    target = os.path.normpath(path)
    if target == base:
        return ""

    prefix = base if base.endswith(os.sep) else base + os.sep
    if target.startswith(prefix):
        return target[len(prefix) :]

    try:
        return os.path.relpath(target, base)
    except ValueError as exc:
        # Windows paths on different drives have no relative form.
        raise InvalidArgumentError(
            f"failed to compute relative path from {base} to {target}: {exc}"
        ) from exc


__all__ = ["convert_to_relative_path", "normalize_path"]
