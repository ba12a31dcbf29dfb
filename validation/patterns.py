"""Glob matching of file names against disallowed patterns."""

import os
import re
from functools import lru_cache
from typing import Iterable, Optional, Pattern


@lru_cache(maxsize=256)
def compile_pattern(pattern: str) -> Pattern[str]:
    """
    Translate a glob into an anchored regular expression.

    Only ``*`` (any run of characters) and ``?`` (one character) are special;
    everything else, brackets included, is matched literally.
    """
    parts = []
    for char in pattern:
        if char == "*":
            parts.append(".*")
        elif char == "?":
            parts.append(".")
        else:
            parts.append(re.escape(char))
    return re.compile("".join(parts), re.DOTALL)


def match_pattern(filename: str, patterns: Iterable[str]) -> Optional[str]:
    """Return the first pattern (in sorted order) matching the base name of ``filename``."""
    name = os.path.basename(filename)
    for pattern in sorted(patterns):
        if compile_pattern(pattern).fullmatch(name):
            return pattern
    return None


def matches(filename: str, patterns: Iterable[str]) -> bool:
    """Case-sensitive whole-name match of ``filename`` against any pattern."""
    return match_pattern(filename, patterns) is not None
