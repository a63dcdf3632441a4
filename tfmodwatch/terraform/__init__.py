"""Terraform declaration parsing."""

from .parser import (
    describe_module,
    extract_module_sources,
    find_child_modules,
    find_terraform_files,
    resolve_module_path,
)

__all__ = [
    "describe_module",
    "extract_module_sources",
    "find_child_modules",
    "find_terraform_files",
    "resolve_module_path",
]
