"""Compile absolute globs into matchers using gitwildmatch semantics."""

from __future__ import annotations

import re
from functools import lru_cache

from pathspec.patterns.gitwildmatch import (
    GitWildMatchPattern,
    GitWildMatchPatternError,
)

from raptar.constants import DOUBLE_STAR
from raptar.errors import InvalidPatternError
from raptar.rules.models import GlobMatcher

# No file name can contain NUL, so a glob and a path both ending in this
# segment can only match each other, never a descendant of the path.
_TERMINAL_SEGMENT = "/\0"


@lru_cache(maxsize=4096)
def compile_glob(glob: str) -> GlobMatcher:
    """Return a matcher that accepts exactly the paths ``glob`` names.

    gitwildmatch lets a pattern also match everything below a matching
    path. Globs ending in ``/**`` want exactly that; every other glob gets
    a terminal segment so only the path itself can match. The regex
    produced by pathspec is anchored without the leading ``/``;
    :meth:`GlobMatcher.matches` strips it from candidate paths.
    """
    suffix = "" if glob.endswith(f"/{DOUBLE_STAR}") else _TERMINAL_SEGMENT
    try:
        regex, include = GitWildMatchPattern.pattern_to_regex(f"{glob}{suffix}")
    except GitWildMatchPatternError as exc:
        raise InvalidPatternError(glob, str(exc)) from exc
    if regex is None or include is not True:
        raise InvalidPatternError(glob, "not a matchable glob")
    try:
        compiled = re.compile(regex)
    except re.error as exc:
        raise InvalidPatternError(glob, str(exc)) from exc
    return GlobMatcher(glob=glob, regex=compiled, suffix=suffix)
