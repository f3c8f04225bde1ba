"""
Core file-selection helpers for the consolidator package.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING, Dict, Iterable, Iterator, List

if TYPE_CHECKING:  # pragma: no cover
    from .ignore import IgnoreRuleSet

logger = logging.getLogger(__name__)

# Exceptions
class ConsolidatorError(Exception): ...
class InvalidRootError(ConsolidatorError): ...
class ConfigFileError(ConsolidatorError): ...
class UnknownStrategyError(ConsolidatorError): ...
class InvalidPatternError(ConsolidatorError): ...

# Bytes inspected when sniffing for binary content
BINARY_SNIFF_BYTES = 1024


def _raise(err: OSError) -> None:
    raise err


# Directory walking
def iter_files(directory: Path) -> Iterator[Path]:
    """Yield every file below *directory*, walking names in sorted order.

    Unlike :meth:`Path.rglob`, a directory that cannot be listed raises
    :class:`OSError` instead of being skipped.
    """
    for dirpath, dirnames, filenames in os.walk(directory, onerror=_raise):
        dirnames.sort()
        base = Path(dirpath)
        for name in sorted(filenames):
            yield base / name


# Config file handling
def load_extra_patterns(config_path: Path) -> List[str]:
    """Read newline-separated exclude patterns from *config_path*."""
    if not config_path.exists():
        raise ConfigFileError(f"Config file '{config_path}' does not exist")
    if not config_path.is_file():
        raise ConfigFileError(f"'{config_path}' is not a file")
    try:
        with config_path.open("r", encoding="utf-8") as fh:
            return [
                ln.strip()
                for ln in fh
                if ln.strip() and not ln.lstrip().startswith("#")
            ]
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigFileError(f"Could not read config file '{config_path}': {e}")


# File-scanning helpers
def validate_root(root: Path) -> Path:
    """Return *root* resolved, or raise :class:`InvalidRootError`."""
    try:
        root = root.resolve()
    except (OSError, RuntimeError) as e:
        raise InvalidRootError(f"Could not resolve root path '{root}': {e}")
    if not root.exists():
        raise InvalidRootError(f"Root directory '{root}' does not exist")
    if not root.is_dir():
        raise InvalidRootError(f"Root path '{root}' is not a directory")
    return root


def scan_files(root: Path) -> List[Path]:
    return sorted(iter_files(validate_root(root)))


def filter_files(paths: Iterable[Path], rules: "IgnoreRuleSet") -> List[Path]:
    """Keep the paths *rules* does not ignore."""
    kept: List[Path] = []
    for p in paths:
        if rules.is_ignored(p):
            logger.debug("Ignoring file: %s", p)
            continue
        kept.append(p)
    return kept


# Binary sniffing
def _is_binary(data: bytes) -> bool:
    return b"\0" in data


def is_binary_file(path: Path, bytes_to_read: int = BINARY_SNIFF_BYTES) -> bool:
    """Return ``True`` if the first *bytes_to_read* bytes hold a NUL byte.

    Files that cannot be read count as binary.
    """
    try:
        with open(path, "rb") as fh:
            return _is_binary(fh.read(bytes_to_read))
    except OSError as e:
        logger.debug("Could not sniff %s, treating as binary: %s", path, e)
        return True


def drop_binary_files(paths: Iterable[Path]) -> List[Path]:
    kept: List[Path] = []
    for p in paths:
        if is_binary_file(p):
            logger.debug("Skipping binary file: %s", p)
            continue
        kept.append(p)
    return kept


def filter_binary_projects(projects: Dict[str, List[Path]]) -> Dict[str, List[Path]]:
    """Return a copy of *projects* with binary files removed from each list."""
    return {name: drop_binary_files(files) for name, files in projects.items()}


def collect_files(
    root: Path,
    rules: "IgnoreRuleSet",
    include_binary: bool = False,
) -> List[Path]:
    """Scan *root* and keep the files that survive *rules* and binary sniffing."""
    kept = filter_files(scan_files(root), rules)
    if not include_binary:
        kept = drop_binary_files(kept)
    return kept
