"""CLI entrypoint for tfmodwatch."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from .config import CONFIG_FILENAME, WatchConfig, load_config
from .errors import TfModWatchError
from .logging import configure_logging
from .orchestrator import (
    DEFAULT_AFTER_COMMIT,
    DEFAULT_BEFORE_COMMIT,
    AnalysisRequest,
    Orchestrator,
)

_LOG_LEVELS = ("debug", "info", "warning", "error")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tfmodwatch",
        description=(
            "Report Terraform root modules affected by changed files, either listed "
            "explicitly or taken from a git diff."
        ),
    )
    parser.add_argument(
        "--changed-file",
        dest="changed_files",
        action="append",
        default=[],
        metavar="PATH",
        help="Changed file path (repeatable). Excludes the git revision options.",
    )
    parser.add_argument(
        "--before-commit",
        default=None,
        help=f"Old commit hash or reference (default: {DEFAULT_BEFORE_COMMIT}).",
    )
    parser.add_argument(
        "--after-commit",
        default=None,
        help=f"New commit hash or reference (default: {DEFAULT_AFTER_COMMIT}).",
    )
    parser.add_argument(
        "--git-repository-root-path",
        default=None,
        help="Git repository root (default: auto-detected from the working directory).",
    )
    parser.add_argument(
        "--root-module-dir",
        dest="root_module_dirs",
        action="append",
        default=[],
        metavar="DIR",
        help="Directory searched recursively for root modules (repeatable).",
    )
    parser.add_argument(
        "--base-path",
        default=None,
        help="Base path for relative output paths (default: git root, or cwd with --changed-file).",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help=f"Path to a configuration file (default: ./{CONFIG_FILENAME} when present).",
    )
    parser.add_argument(
        "--log-level",
        choices=_LOG_LEVELS,
        default=None,
        help="Log level for diagnostics on stderr (default: error).",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write diagnostics to this file.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=False,
        help="Shortcut for --log-level debug.",
    )
    return parser


def _build_request(
    parser: argparse.ArgumentParser, args: argparse.Namespace, config: WatchConfig
) -> AnalysisRequest:
    git_flags = (args.before_commit, args.after_commit, args.git_repository_root_path)
    if args.changed_files and any(flag is not None for flag in git_flags):
        parser.error(
            "--changed-file cannot be combined with --before-commit, --after-commit "
            "or --git-repository-root-path"
        )

    root_module_dirs = list(args.root_module_dirs) or [str(path) for path in config.root_module_dirs]
    if not root_module_dirs:
        parser.error("at least one --root-module-dir is required")

    base_path = args.base_path or (str(config.base_path) if config.base_path else None)

    if args.changed_files:
        return AnalysisRequest(
            root_module_dirs=root_module_dirs,
            changed_files=list(args.changed_files),
            base_path=base_path,
            exclude_paths=list(config.exclude_paths),
        )

    repository_root = args.git_repository_root_path or (
        str(config.git.repository_root) if config.git.repository_root else None
    )
    return AnalysisRequest(
        root_module_dirs=root_module_dirs,
        before_commit=args.before_commit or config.git.before_commit or DEFAULT_BEFORE_COMMIT,
        after_commit=args.after_commit or config.git.after_commit or DEFAULT_AFTER_COMMIT,
        git_repository_root=repository_root,
        base_path=base_path,
        exclude_paths=list(config.exclude_paths),
    )


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for tfmodwatch."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    try:
        if args.config is not None:
            config = load_config(args.config, required=True)
        else:
            config = load_config(Path.cwd())
    except TfModWatchError as exc:
        parser.exit(1, f"tfmodwatch: {exc}\n")

    try:
        configure_logging(
            level=args.log_level or config.log_level or "error",
            verbose=bool(args.verbose),
            log_file=args.log_file or config.log_file,
        )
    except OSError as exc:
        parser.exit(1, f"tfmodwatch: failed to open log file: {exc}\n")

    request = _build_request(parser, args, config)

    try:
        updated = Orchestrator().run(request)
    except (TfModWatchError, OSError) as exc:
        parser.exit(1, f"tfmodwatch: analysis failed: {exc}\nRun with --verbose for more details.\n")

    print(json.dumps(updated))


if __name__ == "__main__":
    main(sys.argv[1:])
