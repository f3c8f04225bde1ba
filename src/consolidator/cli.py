"""
CLI entrypoint for the consolidator package.
"""
import argparse
import logging
import sys
from pathlib import Path

from . import __version__
from .core import (
    ConfigFileError,
    ConsolidatorError,
    collect_files,
    filter_binary_projects,
    load_extra_patterns,
    validate_root,
)
from .discovery import STRATEGIES, discover_projects, get_strategy
from .ignore import IgnoreRuleSetBuilder

try:
    from colorama import Fore, Style, init as colorama_init  # type: ignore
    colorama_init()
    COLORAMA_AVAILABLE = True
except ImportError:
    COLORAMA_AVAILABLE = False


def _say(msg: str, colour: str = "") -> None:
    if COLORAMA_AVAILABLE and colour:
        print(getattr(Fore, colour) + msg + Style.RESET_ALL)
    else:
        print(msg)


def _rel(path: Path, root: Path) -> str:
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return path.as_posix()


def _parse_args(argv=None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="consolidate",
        description="List the files of a codebase that would be consolidated for an LLM.",
    )
    p.add_argument("root", nargs="?", type=Path, default=Path("."), help="Project root dir")
    p.add_argument(
        "-e",
        "--exclude",
        action="append",
        default=[],
        metavar="PATTERN",
        help="Extra glob pattern to exclude (repeatable)",
    )
    p.add_argument(
        "-i",
        "--include",
        action="append",
        default=[],
        metavar="PATTERN",
        help="Glob pattern to include even if ignored (repeatable)",
    )
    p.add_argument(
        "--config",
        type=Path,
        help="Path to a file with extra ignore patterns (one per line)",
    )
    p.add_argument(
        "--split-by",
        metavar="STRATEGY",
        help=f"Group files into projects ({', '.join(STRATEGIES)})",
    )
    p.add_argument(
        "--include-binary",
        action="store_true",
        help="Keep files detected as binary",
    )
    p.add_argument("-v", "--verbose", action="store_true", help="Verbose logging")
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return p.parse_args(argv)


def main(argv=None) -> None:
    try:
        ns = _parse_args(argv)
        if ns.verbose:
            logging.basicConfig(format="%(levelname)s %(name)s: %(message)s")
            logging.getLogger("consolidator").setLevel(logging.DEBUG)

        root = validate_root(ns.root)
        strategy = get_strategy(ns.split_by) if ns.split_by else None

        excludes = list(ns.exclude)
        if ns.config:
            try:
                excludes.extend(load_extra_patterns(ns.config.resolve()))
                if ns.verbose:
                    _say(f"[consolidate] Loaded extra patterns from {ns.config}")
            except ConfigFileError as e:
                print(f"Error: {e}", file=sys.stderr)
                sys.exit(1)

        if ns.verbose:
            _say(f"[consolidate] Scanning {root} …")

        rules = (
            IgnoreRuleSetBuilder(root)
            .add_patterns(excludes)
            .add_include_patterns(ns.include)
            .build()
        )

        if strategy is None:
            files = collect_files(root, rules, include_binary=ns.include_binary)
            if not files:
                _say("[consolidate] No files found after applying filters.", "YELLOW")
                return
            for f in files:
                print(_rel(f, root))
            if ns.verbose:
                _say(f"[consolidate] {len(files)} files selected.", "GREEN")
            return

        projects = discover_projects(root, rules, strategy)
        if not ns.include_binary:
            projects = filter_binary_projects(projects)
        if not projects:
            _say(f"[consolidate] No {strategy.name} projects found.", "YELLOW")
            return
        for name in sorted(projects):
            files = projects[name]
            _say(f"{name} ({len(files)} files)", "CYAN")
            for f in files:
                print(f"    {_rel(f, root)}")
        if ns.verbose:
            total = sum(len(files) for files in projects.values())
            _say(
                f"[consolidate] {len(projects)} projects, {total} files.",
                "GREEN",
            )

    except (ConsolidatorError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except KeyboardInterrupt:
        print("\nCancelled.", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        print(f"Unexpected error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
