"""Exception hierarchy shared across tfmodwatch components."""

from __future__ import annotations


class TfModWatchError(RuntimeError):
    """Base class for errors raised by tfmodwatch."""


class PathResolutionError(TfModWatchError):
    """Raised when a path cannot be made absolute."""


class InvalidArgumentError(TfModWatchError, ValueError):
    """Raised when a caller violates a precondition, e.g. passes a relative path."""


class ExtractionError(TfModWatchError):
    """Raised when declaration files of a module cannot be read or parsed."""


class AnalysisError(TfModWatchError):
    """Raised when an existing module directory cannot be inspected."""


class RevisionError(TfModWatchError):
    """Raised when git cannot resolve revisions or compute a diff."""


__all__ = [
    "AnalysisError",
    "ExtractionError",
    "InvalidArgumentError",
    "PathResolutionError",
    "RevisionError",
    "TfModWatchError",
]
