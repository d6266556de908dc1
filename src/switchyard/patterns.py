"""
Route pattern compilation for Switchyard.

A pattern is a path template where a few token literals stand for fixed
regular-expression fragments:

    :string   letters only
    :number   digits only
    :alpha    letters, digits, hyphen and underscore

Everything else in the pattern is used as a regular expression verbatim.
Literal characters are NOT escaped, so ``.``, ``+``, ``(`` and friends keep
their regex meaning: ``/file.json`` also matches ``/file-json``. Routes that
need a literal metacharacter must escape it themselves (``/file\\.json``).
"""

import re
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Pattern

from switchyard.exceptions import PatternError

# Token literal -> regex fragment
PATTERN_TOKENS: dict[str, str] = {
    ":string": r"[a-zA-Z]+",
    ":number": r"[0-9]+",
    ":alpha": r"[a-zA-Z0-9-_]+",
}

# Longest token first so a token that prefixes another never shadows it
_TOKEN_PATTERN: Pattern[str] = re.compile(
    r"(?P<open>\()?(?P<token>"
    + "|".join(re.escape(t) for t in sorted(PATTERN_TOKENS, key=len, reverse=True))
    + r")(?P<close>\))?"
)


def normalize_pattern(pattern: str) -> str:
    """Trim slashes on both ends and enforce a single leading slash."""
    return "/" + pattern.strip("/")


def _expand_token(match: re.Match[str]) -> str:
    fragment = PATTERN_TOKENS[match.group("token")]
    opened = match.group("open") or ""
    closed = match.group("close") or ""
    if opened or closed:
        # Token sits at a group boundary the author wrote: keep their group
        return f"{opened}{fragment}{closed}"
    return f"({fragment})"


def expand_tokens(pattern: str) -> str:
    """
    Replace every token literal with its regex fragment in one pass.

    A token the author already put at a group boundary (``(:number)`` or
    ``(:string|:number)``) is left inside that group. A bare token is
    wrapped in its own capture group so its value reaches the handler.
    """
    return _TOKEN_PATTERN.sub(_expand_token, pattern)


@dataclass(frozen=True, slots=True)
class CompiledPattern:
    """An anchored, compiled route pattern."""

    pattern: str
    regex: str
    _compiled: re.Pattern[str] = field(repr=False, compare=False)

    @property
    def group_count(self) -> int:
        return self._compiled.groups

    def match(self, path: str) -> list[str] | None:
        """
        Match ``path`` against the whole pattern.

        Returns the capture groups left to right, or ``None`` when the path
        does not match. The full match is not included. Groups that did not
        participate become ``""``, except at the tail where they are dropped
        so handlers can fall back to their own defaults.
        """
        match = self._compiled.match(path)
        if match is None:
            return None

        groups = list(match.groups())
        while groups and groups[-1] is None:
            groups.pop()
        return ["" if value is None else value for value in groups]


@lru_cache(maxsize=1024)
def compile_pattern(pattern: str) -> CompiledPattern:
    """
    Compile a (normalized) route pattern into an anchored matcher.

    Raises:
        PatternError: If the expanded pattern is not a valid regex.
    """
    regex = f"^{expand_tokens(pattern)}$"
    try:
        compiled = re.compile(regex)
    except re.error as exc:
        raise PatternError(pattern, str(exc)) from exc
    return CompiledPattern(pattern=pattern, regex=regex, _compiled=compiled)
