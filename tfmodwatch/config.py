"""Configuration loading for tfmodwatch (.tfmodwatch.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

from .errors import TfModWatchError

CONFIG_FILENAME = ".tfmodwatch.yml"


class ConfigError(TfModWatchError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class GitConfig:
    """Revision settings used when no explicit changed files are given."""

    repository_root: Optional[Path] = None
    before_commit: Optional[str] = None
    after_commit: Optional[str] = None


@dataclass
class WatchConfig:
    """Represents the settings defined in .tfmodwatch.yml."""

    root: Path
    root_module_dirs: List[Path] = field(default_factory=list)
    base_path: Optional[Path] = None
    log_level: Optional[str] = None
    log_file: Optional[Path] = None
    exclude_paths: List[str] = field(default_factory=list)
    git: GitConfig = field(default_factory=GitConfig)


def load_config(config_path: Path, *, required: bool = False) -> WatchConfig:
    """Load configuration from disk; a missing file yields defaults unless ``required``.

    Relative paths in the file are resolved against the directory holding it.
    """
    config_file = _resolve_config_path(config_path)
    root = config_file.parent

    if not config_file.exists():
        if required:
            raise ConfigError(f"Configuration file not found: {config_file}")
        return WatchConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{config_file.name} must contain a mapping at the root")

    git_data = _as_dict(data.get("git"))
    git = GitConfig(
        repository_root=_as_path(root, git_data.get("repository_root")),
        before_commit=_as_str(git_data.get("before_commit")),
        after_commit=_as_str(git_data.get("after_commit")),
    )

    return WatchConfig(
        root=root,
        root_module_dirs=[root / item for item in _as_str_list(data.get("root_module_dirs"))],
        base_path=_as_path(root, data.get("base_path")),
        log_level=_as_str(data.get("log_level")),
        log_file=_as_path(root, data.get("log_file")),
        exclude_paths=_as_str_list(data.get("exclude_paths")),
        git=git,
    )


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser().absolute()
    if config_path.is_dir():
        return config_path / CONFIG_FILENAME
    return config_path


def _read_config(path: Path) -> Dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Failed to read {path}: {exc}") from exc
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded if loaded is not None else {}


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_path(root: Path, value: Any) -> Optional[Path]:
    text = _as_str(value)
    if not text:
        return None
    return root / Path(text).expanduser()


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []


__all__ = ["CONFIG_FILENAME", "ConfigError", "GitConfig", "WatchConfig", "load_config"]
