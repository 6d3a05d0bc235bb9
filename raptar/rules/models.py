"""Rule data models."""

from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from enum import Enum, IntEnum
from pathlib import Path


class Action(str, Enum):
    INCLUDE = "include"
    EXCLUDE = "exclude"

    def flipped(self) -> "Action":
        return Action.INCLUDE if self == Action.EXCLUDE else Action.EXCLUDE

    @property
    def sign(self) -> str:
        return "+" if self == Action.INCLUDE else "-"


class Bucket(IntEnum):
    """Specificity class, shown in verbose output only.

    Match resolution never looks at it: precedence is the sequence number.
    """

    EXPLICIT_PATH = 0
    WILDCARD_FILENAME = 1
    DEEP_DOUBLE_STAR = 2
    UNIVERSAL = 3

    @property
    def label(self) -> str:
        return self.name.lower().replace("_", "-")


@dataclass(frozen=True)
class RuleOrigin:
    source: str
    line: int | None = None

    def __str__(self) -> str:
        if self.line is None:
            return self.source
        return f"{self.source}:{self.line}"


@dataclass(frozen=True)
class RawRule:
    text: str
    action: Action
    origin: RuleOrigin
    defining_dir: Path


@dataclass(frozen=True)
class AnalyzedPattern:
    original: str
    absolute_glob: str
    bucket: Bucket
    path_depth: int
    double_star_depth: int | None
    wildcard_count: int
    has_recursive_wildcard: bool
    activation_path: Path
    is_directory_pattern: bool
    rooted: bool


@dataclass(frozen=True)
class GlobMatcher:
    glob: str
    regex: re.Pattern[str] = field(compare=False, repr=False)
    suffix: str = ""

    def matches(self, path: Path) -> bool:
        candidate = f"{path.as_posix().lstrip('/')}{self.suffix}"
        return self.regex.match(candidate) is not None


@dataclass(frozen=True)
class IndexedRule:
    absolute_glob: str
    matcher: GlobMatcher
    action: Action
    origin: RuleOrigin
    pattern: AnalyzedPattern
    sequence: int

    def matches(self, path: Path) -> bool:
        return self.matcher.matches(path)

    def with_matcher(self, matcher: GlobMatcher) -> "IndexedRule":
        return replace(self, absolute_glob=matcher.glob, matcher=matcher)


@dataclass(frozen=True)
class RuleMatch:
    action: Action
    origin: RuleOrigin
    rule: IndexedRule

    @property
    def description(self) -> str:
        return str(self.origin)


@dataclass
class DirectoryRules:
    rules: list[IndexedRule] = field(default_factory=list)
    has_include: bool = False

    @classmethod
    def from_rules(cls, rules: list[IndexedRule]) -> "DirectoryRules":
        ordered = sorted(rules, key=lambda rule: rule.sequence)
        return cls(
            rules=ordered,
            has_include=any(rule.action == Action.INCLUDE for rule in ordered),
        )
