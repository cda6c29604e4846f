"""Ignore pattern matching for sync operations.

Patterns are glob-style:

- ``*`` matches anything except ``/``
- ``**`` matches across directory levels
- ``?`` matches one character except ``/``
- ``[abc]`` / ``[!abc]`` match character classes
- ``{css,js}`` matches alternatives

A pattern without a slash usually targets a base name (``*.log``); a
pattern with slashes is anchored at the sync root (``assets/cache/*``).
The matcher itself does not distinguish the two: callers pass both the
relative path and the base name of an entry as candidates.
"""

import logging
import posixpath
import re
from collections.abc import Iterable, Sequence
from typing import Optional

from ..config import CONFIG_FILE_NAME

logger = logging.getLogger(__name__)

BASE_IGNORES: tuple[str, ...] = (
    ".DS_Store",
    ".git",
    ".gitignore",
    ".hg",
    ".svn",
    "bower_components",
    "node_modules",
    CONFIG_FILE_NAME,
    "temp",
    "Thumbs.db",
    "tmp",
)


def _normalize(value: str) -> str:
    value = value.strip().replace("\\", "/")
    while value.startswith("./"):
        value = value[2:]
    if len(value) > 1:
        value = value.rstrip("/")
    return value


def _translate(pattern: str) -> str:
    """Translate a glob pattern into a regular expression."""
    i, n = 0, len(pattern)
    out: list[str] = []
    in_braces = False

    while i < n:
        c = pattern[i]
        if c == "*":
            if pattern[i : i + 2] == "**":
                i += 2
                if pattern[i : i + 1] == "/":
                    # "**/" also matches zero directories
                    out.append("(?:.*/)?")
                    i += 1
                else:
                    out.append(".*")
                continue
            out.append("[^/]*")
        elif c == "?":
            out.append("[^/]")
        elif c == "[":
            end = pattern.find("]", i + 1)
            if end == -1:
                out.append(re.escape(c))
            else:
                body = pattern[i + 1 : end]
                if body.startswith("!"):
                    body = "^" + body[1:]
                out.append(f"[{body.replace(chr(92), chr(92) * 2)}]")
                i = end
        elif c == "{" and not in_braces and "}" in pattern[i:]:
            in_braces = True
            out.append("(?:")
        elif c == "," and in_braces:
            out.append("|")
        elif c == "}" and in_braces:
            in_braces = False
            out.append(")")
        else:
            out.append(re.escape(c))
        i += 1

    return "".join(out)


class IgnoreRule:
    """A single compiled ignore pattern."""

    def __init__(self, pattern: str, source: str = "config", literal: bool = False):
        """Initialize an ignore rule.

        Args:
            pattern: Glob pattern
            source: Where the pattern came from ("builtin" or "config")
            literal: Match the pattern as a plain path, without glob syntax
        """
        self.pattern = _normalize(pattern)
        self.source = source
        self._regex: Optional[re.Pattern[str]] = None
        if self.pattern:
            self._regex = re.compile(
                re.escape(self.pattern) if literal else _translate(self.pattern)
            )

    def matches(self, candidate: str) -> bool:
        if self._regex is None:
            return False
        return self._regex.fullmatch(_normalize(candidate)) is not None

    def __repr__(self) -> str:
        return f"IgnoreRule({self.pattern!r}, source={self.source!r})"


class IgnoreMatcher:
    """Decides whether paths are excluded from sync.

    Combines the built-in ignores with user patterns from the config.
    There is no negation and no precedence: any matching rule ignores.

    Examples:
        >>> matcher = IgnoreMatcher(["*.scss"])
        >>> matcher.is_ignored(["./styles/main.scss", "main.scss"])
        True
        >>> matcher.is_ignored(["./node_modules", "node_modules"])
        True
        >>> matcher.is_ignored(["./index.html", "index.html"])
        False
    """

    def __init__(
        self,
        patterns: Optional[Iterable[str]] = None,
        config_file: Optional[str] = None,
    ):
        """Initialize the matcher.

        Args:
            patterns: User patterns from the config
            config_file: Config file path relative to the sync root, ignored
                like the built-in names when it is not ``sync.json``
        """
        builtins = [IgnoreRule(p, source="builtin") for p in BASE_IGNORES]
        if config_file and _normalize(config_file) != CONFIG_FILE_NAME:
            builtins.append(IgnoreRule(config_file, source="builtin", literal=True))
        self.rules: tuple[IgnoreRule, ...] = tuple(
            builtins + [IgnoreRule(p) for p in (patterns or [])]
        )

    @property
    def patterns(self) -> list[str]:
        return [rule.pattern for rule in self.rules]

    def is_ignored(self, candidates: Sequence[str]) -> bool:
        """Return True if any candidate matches any rule."""
        for candidate in candidates:
            for rule in self.rules:
                if rule.matches(candidate):
                    logger.debug(f"Ignoring {candidate} (rule {rule.pattern!r})")
                    return True
        return False


def path_candidates(path: str, include_ancestors: bool = False) -> list[str]:
    """Build the candidate list for matching a relative path.

    Args:
        path: Local-namespace path such as ``./assets/app.js``
        include_ancestors: Also include every ancestor directory path and name,
            so files inside an ignored directory are ignored too

    Returns:
        The path, its base name and, optionally, its ancestors
    """
    candidates = [path, posixpath.basename(path)]
    if include_ancestors:
        parent = posixpath.dirname(path)
        while parent and parent not in (".", "/"):
            candidates.extend([parent, posixpath.basename(parent)])
            parent = posixpath.dirname(parent)
    return candidates
