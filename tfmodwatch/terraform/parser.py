"""Extract local child-module references from Terraform declaration files."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Iterable, List, Optional

import hcl2

from ..errors import ExtractionError
from ..models import ModuleInfo

DECLARATION_SUFFIX = ".tf"


def find_child_modules(module_dir: str) -> List[str]:
    """Return local directories referenced by ``module`` blocks in ``module_dir``.

    Sources are returned in declaration order (files sorted by name, blocks in
    file order) with duplicates preserved. Absolute sources and sources that do
    not exist on disk relative to ``module_dir`` (registry, git, http...) are
    dropped.
    """
    children: List[str] = []
    for tf_file in find_terraform_files(module_dir):
        for source in extract_module_sources(tf_file):
            if os.path.isabs(source):
                continue
            if not os.path.exists(os.path.join(module_dir, source)):
                continue
            children.append(resolve_module_path(module_dir, source))
    return children


def find_terraform_files(directory: str) -> List[str]:
    """Return ``*.tf`` files directly inside ``directory``, sorted by name."""
    try:
        entries = sorted(os.scandir(directory), key=lambda entry: entry.name)
    except OSError as exc:
        raise ExtractionError(f"failed to read directory {directory}: {exc}") from exc

    files: List[str] = []
    for entry in entries:
        if entry.is_dir(follow_symlinks=False):
            continue
        if entry.name.endswith(DECLARATION_SUFFIX):
            files.append(os.path.join(directory, entry.name))
    return files


def extract_module_sources(tf_file: str) -> List[str]:
    """Return the literal ``source`` of every ``module`` block in ``tf_file``."""
    try:
        text = Path(tf_file).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ExtractionError(f"failed to read {tf_file}: {exc}") from exc

    try:
        document = hcl2.loads(text)
    except Exception as exc:  # hcl2 surfaces lark parse errors of several types
        raise ExtractionError(f"failed to parse {tf_file}: {exc}") from exc

    sources: List[str] = []
    for body in _module_bodies(document.get("module")):
        literal = _string_literal(body.get("source"))
        if literal is not None:
            sources.append(literal)
    return sources


def resolve_module_path(module_dir: str, source: str) -> str:
    """Join ``source`` onto ``module_dir`` and clean ``.``/``..`` segments."""
    return os.path.normpath(os.path.join(module_dir, source))


def describe_module(module_dir: str) -> ModuleInfo:
    """Return the declaration files that make ``module_dir`` a module."""
    return ModuleInfo(path=module_dir, declaration_files=find_terraform_files(module_dir))


def _module_bodies(blocks: Any) -> Iterable[dict]:
    # python-hcl2 renders `module "name" { ... }` as [{"name": {...}}, ...]
    if not isinstance(blocks, list):
        return
    for block in blocks:
        if not isinstance(block, dict):
            continue
        for body in block.values():
            if isinstance(body, dict):
                yield body


def _string_literal(value: Any) -> Optional[str]:
    if isinstance(value, list) and len(value) == 1:
        value = value[0]
    if not isinstance(value, str):
        return None
    if len(value) >= 2 and value.startswith('"') and value.endswith('"'):
        value = value[1:-1]
    if "${" in value:
        return None
    return value


__all__ = [
    "DECLARATION_SUFFIX",
    "describe_module",
    "extract_module_sources",
    "find_child_modules",
    "find_terraform_files",
    "resolve_module_path",
]
