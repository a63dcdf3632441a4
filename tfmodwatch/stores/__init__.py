"""In-memory stores used during analysis."""

from .verdict_cache import VerdictCache

__all__ = ["VerdictCache"]
