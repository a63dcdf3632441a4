"""Git integration for computing changed files."""

from .diff import RevisionDiff

__all__ = ["RevisionDiff"]
