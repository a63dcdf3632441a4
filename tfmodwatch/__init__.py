"""Detect Terraform root modules affected by changed files."""

from .analyzer import ChangeAnalyzer, analyze_root_modules
from .models import Verdict, VerdictReason
from .paths import convert_to_relative_path, normalize_path

__all__ = [
    "ChangeAnalyzer",
    "Verdict",
    "VerdictReason",
    "analyze_root_modules",
    "convert_to_relative_path",
    "normalize_path",
]
