"""Turn one gitignore-style pattern line into an anchored, analyzed pattern."""

from __future__ import annotations

from pathlib import Path
from typing import Iterator

from raptar.constants import DOUBLE_STAR, GLOB_SPECIAL_CHARS
from raptar.errors import InvalidPatternError
from raptar.rules.models import Action, AnalyzedPattern, Bucket


_ESCAPE_CHAR = "\\"
_ESCAPABLE = GLOB_SPECIAL_CHARS + _ESCAPE_CHAR


def is_pattern_line(text: str) -> bool:
    stripped = text.strip()
    return bool(stripped) and not stripped.startswith("#")


def split_negation(text: str, action: Action) -> tuple[str, Action]:
    """Strip a leading ``!`` and flip the nominal action accordingly."""
    text = text.strip()
    if text.startswith("!"):
        return text[1:], action.flipped()
    return text, action


def escape_glob(text: str) -> str:
    return "".join(f"{_ESCAPE_CHAR}{ch}" if ch in _ESCAPABLE else ch for ch in text)


def unescape_glob(text: str) -> str:
    chars: list[str] = []
    escaped = False
    for ch in text:
        if escaped:
            chars.append(ch)
            escaped = False
        elif ch == _ESCAPE_CHAR:
            escaped = True
        else:
            chars.append(ch)
    return "".join(chars)


def _unescaped(text: str) -> Iterator[tuple[int, str]]:
    index = 0
    while index < len(text):
        ch = text[index]
        if ch == _ESCAPE_CHAR:
            index += 2
            continue
        yield index, ch
        index += 1


def find_unescaped(text: str, token: str) -> int:
    for index, _ in _unescaped(text):
        if text.startswith(token, index):
            return index
    return -1


def count_wildcards(text: str) -> int:
    """Weigh wildcards: ``*`` 1, ``**`` 2, ``?`` 1, each ``[...]`` class 1."""
    count = 0
    skip_until = -1
    for index, ch in _unescaped(text):
        if index < skip_until:
            continue
        if ch == "*":
            if text.startswith(DOUBLE_STAR, index):
                count += 2
                skip_until = index + 2
            else:
                count += 1
        elif ch == "?":
            count += 1
        elif ch == "[":
            count += 1
            close = text.find("]", index + 2)
            if close != -1:
                skip_until = close + 1
    return count


def find_activation_path(glob: str) -> Path:
    """Deepest directory of ``glob`` that is fixed before any wildcard."""
    prefix = glob
    for index, ch in _unescaped(glob):
        if ch in GLOB_SPECIAL_CHARS:
            prefix = glob[:index]
            break
    cut = prefix.rfind("/")
    if cut <= 0:
        return Path("/")
    return Path(unescape_glob(prefix[:cut]))


def _classify(
    wildcard_count: int,
    is_dir: bool,
    rooted: bool,
    double_star_depth: int | None,
) -> Bucket:
    if wildcard_count == 0 and not is_dir:
        return Bucket.EXPLICIT_PATH
    if wildcard_count > 0 and double_star_depth is None and rooted and not is_dir:
        return Bucket.WILDCARD_FILENAME
    if double_star_depth is not None and rooted and double_star_depth > 0:
        return Bucket.DEEP_DOUBLE_STAR
    return Bucket.UNIVERSAL


def analyze_pattern(text: str, defining_dir: Path) -> AnalyzedPattern:
    """Anchor one pattern (negation already stripped) to ``defining_dir``."""
    original = text.strip()
    pattern = original

    is_dir = False
    if pattern.endswith("/"):
        pattern = pattern.rstrip("/")
        is_dir = True
    elif pattern.endswith("/" + DOUBLE_STAR):
        is_dir = True

    rooted = "/" in pattern
    if pattern.startswith("/"):
        pattern = pattern[1:]
    if not pattern:
        raise InvalidPatternError(original, "empty pattern")

    double_star_index = find_unescaped(pattern, DOUBLE_STAR)
    double_star_depth = (
        pattern[:double_star_index].count("/") if double_star_index != -1 else None
    )
    wildcard_count = count_wildcards(pattern)
    path_depth = len([segment for segment in pattern.split("/") if segment])

    body = pattern if rooted else f"{DOUBLE_STAR}/{pattern}"
    if is_dir and not body.endswith("/" + DOUBLE_STAR):
        body = f"{body}/{DOUBLE_STAR}"
    base = escape_glob(defining_dir.as_posix()).rstrip("/")
    absolute_glob = f"{base}/{body}"

    return AnalyzedPattern(
        original=original,
        absolute_glob=absolute_glob,
        bucket=_classify(wildcard_count, is_dir, rooted, double_star_depth),
        path_depth=path_depth,
        double_star_depth=double_star_depth,
        wildcard_count=wildcard_count,
        has_recursive_wildcard=double_star_depth is not None or not rooted or is_dir,
        activation_path=find_activation_path(absolute_glob),
        is_directory_pattern=is_dir,
        rooted=rooted,
    )
