"""
Gitignore-style ignore rules.

An :class:`IgnoreRuleSet` answers one question: should a path under the root
be left out? It combines four pattern sources:

* the built-in defaults (VCS metadata, IDE folders, build output),
* every ``.gitignore`` found anywhere below the root,
* user exclude patterns,
* user include patterns, which win over all of the above.

Nested ``.gitignore`` files are not scoped to their own directory; their
patterns join one global list. ``!`` negation and backslash escapes get no
special treatment.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterable, List, Sequence, Tuple, Union

from .core import iter_files
from .matcher import PatternMatcher, normalize_path

logger = logging.getLogger(__name__)

PathLike = Union[str, "os.PathLike[str]"]

GITIGNORE_NAME = ".gitignore"

DEFAULT_EXCLUDE_PATTERNS: Tuple[str, ...] = (
    "**/.git/**",
    "**/.vs/**",
    "**/.vscode/**",
    "**/bin/**",
    "**/obj/**",
)


def parse_gitignore_lines(lines: Iterable[str]) -> List[str]:
    """Turn raw ``.gitignore`` lines into root-relative glob patterns.

    ``/logs`` is anchored to the root (``logs``); anything else may match
    at any depth (``*.log`` becomes ``**/*.log``).
    """
    patterns: List[str] = []
    for raw in lines:
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        patterns.append(line[1:] if line.startswith("/") else f"**/{line}")
    return patterns


def find_gitignore_files(root: Path) -> List[Path]:
    # ignored directories are searched too
    return [p for p in iter_files(root) if p.name == GITIGNORE_NAME]


def load_gitignore_patterns(root: Path) -> List[str]:
    patterns: List[str] = []
    for gitignore in find_gitignore_files(root):
        # dangling symlinks are listed by the walk but have nothing to read
        if not gitignore.is_file():
            logger.debug("Skipping unreadable .gitignore entry: %s", gitignore)
            continue
        logger.debug("Loading .gitignore file: %s", gitignore)
        text = gitignore.read_text(encoding="utf-8", errors="replace")
        patterns.extend(parse_gitignore_lines(text.splitlines()))
    return patterns


class IgnoreRuleSet:
    """Immutable include/exclude decision for paths below ``root``.

    Build one with :class:`IgnoreRuleSetBuilder` or :meth:`from_root`.
    """

    def __init__(
        self,
        root: PathLike,
        default_patterns: Sequence[str] = DEFAULT_EXCLUDE_PATTERNS,
        gitignore_patterns: Sequence[str] = (),
        exclude_patterns: Sequence[str] = (),
        include_patterns: Sequence[str] = (),
    ) -> None:
        self._root = Path(root).resolve()
        self._default_patterns = tuple(default_patterns)
        self._gitignore_patterns = tuple(gitignore_patterns)
        self._exclude_patterns = tuple(exclude_patterns)
        self._include_patterns = tuple(include_patterns)

        self._include = PatternMatcher(self._include_patterns)
        self._exclude = PatternMatcher(
            self._default_patterns + self._gitignore_patterns + self._exclude_patterns
        )

    @classmethod
    def from_root(
        cls,
        root: PathLike,
        exclude: Iterable[str] = (),
        include: Iterable[str] = (),
        default_patterns: Sequence[str] = DEFAULT_EXCLUDE_PATTERNS,
    ) -> "IgnoreRuleSet":
        """Load every ``.gitignore`` under *root* and add the user patterns."""
        return (
            IgnoreRuleSetBuilder(root, default_patterns=default_patterns)
            .add_patterns(exclude)
            .add_include_patterns(include)
            .build()
        )

    @property
    def root(self) -> Path:
        return self._root

    @property
    def default_patterns(self) -> Tuple[str, ...]:
        return self._default_patterns

    @property
    def gitignore_patterns(self) -> Tuple[str, ...]:
        return self._gitignore_patterns

    @property
    def exclude_patterns(self) -> Tuple[str, ...]:
        return self._exclude_patterns

    @property
    def include_patterns(self) -> Tuple[str, ...]:
        return self._include_patterns

    def relative_path(self, path: PathLike) -> str:
        """Slash-separated form of *path* relative to the root.

        Relative inputs are taken to be relative to the root already.
        """
        p = Path(path)
        if not p.is_absolute():
            p = self._root / p
        return normalize_path(os.path.relpath(p, self._root))

    def is_ignored(self, path: PathLike) -> bool:
        rel = self.relative_path(path)
        # an explicit include beats every exclude
        if self._include.matches(rel):
            return False
        return self._exclude.matches(rel)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(root={str(self._root)!r}, "
            f"excludes={len(self._exclude.patterns)}, "
            f"includes={len(self._include_patterns)})"
        )


class IgnoreRuleSetBuilder:
    """Collects patterns for an :class:`IgnoreRuleSet`.

    Defaults and ``.gitignore`` patterns are loaded when the builder is
    created; ``.gitignore`` edits made afterwards are not picked up.
    """

    def __init__(
        self,
        root: PathLike,
        default_patterns: Sequence[str] = DEFAULT_EXCLUDE_PATTERNS,
    ) -> None:
        self.root = Path(root).resolve()
        self.default_patterns: List[str] = list(default_patterns)
        self.gitignore_patterns: List[str] = load_gitignore_patterns(self.root)
        self.exclude_patterns: List[str] = []
        self.include_patterns: List[str] = []

    def add_patterns(self, patterns: Iterable[str]) -> "IgnoreRuleSetBuilder":
        """Append user exclude patterns."""
        self.exclude_patterns.extend(patterns)
        return self

    def add_include_patterns(self, patterns: Iterable[str]) -> "IgnoreRuleSetBuilder":
        """Append patterns that override every exclusion."""
        self.include_patterns.extend(patterns)
        return self

    def build(self) -> IgnoreRuleSet:
        return IgnoreRuleSet(
            self.root,
            default_patterns=self.default_patterns,
            gitignore_patterns=self.gitignore_patterns,
            exclude_patterns=self.exclude_patterns,
            include_patterns=self.include_patterns,
        )
