"""Core data models shared across tfmodwatch components."""

from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, List, Optional


class VerdictReason(str, Enum):
    """Why a module received its verdict."""

    CACHED = "cached"
    MISSING = "missing"
    DIRECT_CHANGE = "direct_change"
    CHILD_CHANGE = "child_change"
    EXTRACTION_FAILED = "extraction_failed"
    UNCHANGED = "unchanged"
    CYCLE = "cycle"


@dataclass(frozen=True)
class Verdict:
    """Outcome of analyzing a single module directory."""

    module: str
    updated: bool
    reason: VerdictReason
    via: Optional[str] = None
    # In-flight ancestors this verdict assumed to be unchanged.
    pending: FrozenSet[str] = field(default_factory=frozenset)

    @property
    def provisional(self) -> bool:
        return not self.updated and bool(self.pending)


@dataclass
class ModuleInfo:
    """Declaration files found directly inside a module directory."""

    path: str
    declaration_files: List[str]

    @property
    def file_count(self) -> int:
        return len(self.declaration_files)
