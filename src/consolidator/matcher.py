"""
Glob matching of relative paths against a set of patterns.
"""

from __future__ import annotations

from typing import Iterable, Tuple

import pathspec  # type: ignore

from .core import InvalidPatternError


def normalize_path(path: str) -> str:
    """Return *path* with forward slashes and no leading ``./``."""
    rel = path.replace("\\", "/")
    while rel.startswith("./"):
        rel = rel[2:]
    return rel


class PatternMatcher:
    """Match relative paths against glob patterns, ignoring case.

    ``*`` matches inside one path segment, ``**`` spans any number of
    segments (zero included) and ``?`` matches a single character.
    Patterns are anchored at the root, so ``src/*.py`` only matches
    directly inside ``src``. A pattern naming a directory also matches
    everything beneath it.
    """

    def __init__(self, patterns: Iterable[str] = ()) -> None:
        self._patterns: Tuple[str, ...] = tuple(p for p in patterns if p)
        # gitignore syntax floats slash-less patterns to any depth; the
        # leading "/" pins every pattern to the root instead.
        try:
            self._spec = pathspec.GitIgnoreSpec.from_lines(
                ["/" + p.lower().lstrip("/") for p in self._patterns]
            )
        except ValueError as e:
            raise InvalidPatternError(f"Invalid glob pattern: {e}") from e

    @property
    def patterns(self) -> Tuple[str, ...]:
        return self._patterns

    def __bool__(self) -> bool:
        return bool(self._patterns)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({list(self._patterns)!r})"

    def matches(self, relative_path: str) -> bool:
        if not self._patterns:
            return False
        return self._spec.match_file(normalize_path(relative_path).lower())


def matches(relative_path: str, patterns: Iterable[str]) -> bool:
    """One-shot form of :meth:`PatternMatcher.matches`."""
    return PatternMatcher(patterns).matches(relative_path)
