"""Per-directory index of anchored rules with lazy re-anchoring."""

from __future__ import annotations

import logging
from pathlib import Path

from raptar.constants import DOUBLE_STAR
from raptar.errors import InvalidPatternError
from raptar.rules.compilers import compile_glob
from raptar.rules.models import (
    Action,
    DirectoryRules,
    IndexedRule,
    RawRule,
    RuleMatch,
    RuleOrigin,
)
from raptar.rules.parser import (
    analyze_pattern,
    escape_glob,
    find_unescaped,
    is_pattern_line,
    split_negation,
)
from raptar.utils import are_related, is_under

logger = logging.getLogger(__name__)

_DOUBLE_STAR_SEGMENT = f"/{DOUBLE_STAR}/"


class RuleIndex:
    """Owns every rule of a run and answers per-path include/exclude queries.

    Rules are added in precedence order (lowest first), then :meth:`build`
    propagates them into a directory cache. Lookups for directories missing
    from the cache re-anchor the nearest cached ancestor's rules and store
    the result, so each directory is computed at most once.
    """

    def __init__(self, root: Path) -> None:
        self._root = root
        self._rules: list[IndexedRule] = []
        self._cache: dict[Path, DirectoryRules] = {}
        self._next_sequence = 0
        self._loaded_ignore_files: set[Path] = set()

    @property
    def root(self) -> Path:
        return self._root

    @property
    def rules(self) -> list[IndexedRule]:
        return list(self._rules)

    @property
    def loaded_ignore_files(self) -> frozenset[Path]:
        return frozenset(self._loaded_ignore_files)

    def mark_loaded(self, path: Path) -> None:
        self._loaded_ignore_files.add(path)

    def is_loaded(self, path: Path) -> bool:
        return path in self._loaded_ignore_files

    def add_rule(
        self,
        text: str,
        action: Action,
        origin: RuleOrigin,
        defining_dir: Path,
    ) -> IndexedRule | None:
        """Analyze, compile and append one pattern.

        Returns ``None`` for blank lines, comments and patterns that cannot
        reach the archive root. Raises :class:`InvalidPatternError` for
        malformed globs; the caller decides whether to skip them.
        """
        if not is_pattern_line(text):
            return None
        body, action = split_negation(text, action)
        pattern = analyze_pattern(body, defining_dir)
        if not are_related(self._root, pattern.activation_path):
            logger.debug("Skipping unreachable pattern %s (%s)", body, origin)
            return None

        matcher = compile_glob(pattern.absolute_glob)
        rule = IndexedRule(
            absolute_glob=pattern.absolute_glob,
            matcher=matcher,
            action=action,
            origin=origin,
            pattern=pattern,
            sequence=self._next_sequence,
        )
        self._next_sequence += 1
        self._rules.append(rule)
        return rule

    def add_raw(self, raw: RawRule) -> IndexedRule | None:
        return self.add_rule(raw.text, raw.action, raw.origin, raw.defining_dir)

    def build(self) -> None:
        registered: dict[Path, dict[int, IndexedRule]] = {self._root: {}}

        for rule in self._rules:
            anchor = rule.pattern.activation_path
            if not is_under(anchor, self._root):
                anchor = self._root
            for directory in (anchor, *anchor.parents):
                registered.setdefault(directory, {})[rule.sequence] = rule
                if directory == self._root:
                    break

        propagated: dict[Path, dict[int, IndexedRule]] = {}
        for directory in sorted(registered, key=lambda item: len(item.parts)):
            merged = dict(registered[directory])
            for ancestor in directory.parents:
                for rule in registered.get(ancestor, {}).values():
                    if rule.sequence in merged:
                        continue
                    if rule.pattern.has_recursive_wildcard or is_under(
                        directory, rule.pattern.activation_path
                    ):
                        merged[rule.sequence] = rule
                if ancestor == self._root:
                    break
            propagated[directory] = merged

        self._cache = {
            directory: DirectoryRules.from_rules(list(rules.values()))
            for directory, rules in propagated.items()
        }
        logger.debug(
            "Indexed %d rules across %d directories", len(self._rules), len(self._cache)
        )

    def get_rules_for(self, directory: Path) -> DirectoryRules:
        cached = self._cache.get(directory)
        if cached is not None:
            return cached

        ancestor_rules = self._nearest_cached(directory)
        rules: list[IndexedRule] = []
        for rule in ancestor_rules.rules:
            reanchored = self.reanchor(rule, directory)
            if reanchored is not None:
                rules.append(reanchored)
        entry = DirectoryRules.from_rules(rules)
        self._cache[directory] = entry
        return entry

    def find_match(self, path: Path) -> RuleMatch | None:
        """Resolve the action for ``path``: highest sequence number wins."""
        for rule in reversed(self.get_rules_for(path.parent).rules):
            if rule.matches(path):
                return RuleMatch(action=rule.action, origin=rule.origin, rule=rule)
        return None

    def has_include_rules(self, directory: Path) -> bool:
        return self.get_rules_for(directory).has_include

    @staticmethod
    def reanchor(rule: IndexedRule, directory: Path) -> IndexedRule | None:
        """Adapt ``rule`` for lookups in ``directory``, or drop it."""
        pattern = rule.pattern
        activation = pattern.activation_path
        if not are_related(directory, activation):
            return None
        if pattern.is_directory_pattern:
            return rule
        if not pattern.has_recursive_wildcard:
            return rule if is_under(directory, activation) else None
        if is_under(activation, directory):
            return rule
        return _rewrite_prefix(rule, directory)

    def compat_warnings(self) -> list[str]:
        """Describe include rules that git itself would not honor.

        Git never re-includes a path whose parent directory is excluded, so
        ``build/`` followed by ``!build/keep.txt`` behaves differently there.
        """
        warnings: list[str] = []
        directory_excludes = [
            rule
            for rule in self._rules
            if rule.action == Action.EXCLUDE and rule.pattern.is_directory_pattern
        ]
        for include in self._rules:
            if include.action != Action.INCLUDE:
                continue
            for exclude in directory_excludes:
                if exclude.sequence > include.sequence:
                    break
                if _excludes_parent_of(exclude, include, self._root):
                    suggestion = exclude.pattern.original.rstrip("/")
                    if suggestion.endswith(f"/{DOUBLE_STAR}"):
                        suggestion = suggestion[: -len(DOUBLE_STAR) - 1]
                    warnings.append(
                        f"gitignore-compat: '{include.pattern.original}' ({include.origin}) "
                        f"re-includes a path inside '{exclude.pattern.original}' "
                        f"({exclude.origin}); git keeps it excluded. "
                        f"Use '{suggestion}/*' to match git."
                    )
                    break
        return warnings

    def _nearest_cached(self, directory: Path) -> DirectoryRules:
        for ancestor in directory.parents:
            cached = self._cache.get(ancestor)
            if cached is not None:
                return cached
        return DirectoryRules()


def _rewrite_prefix(rule: IndexedRule, directory: Path) -> IndexedRule:
    """Replace the fixed prefix before ``/**/`` with ``directory``.

    Only a literal prefix followed by a single trailing segment is rewritten;
    any other shape already matches correctly from its original anchor.
    """
    glob = rule.absolute_glob
    split_at = find_unescaped(glob, _DOUBLE_STAR_SEGMENT)
    if split_at == -1:
        return rule
    prefix = glob[:split_at]
    tail = glob[split_at + len(_DOUBLE_STAR_SEGMENT) :]
    if find_unescaped(prefix, "*") != -1 or find_unescaped(prefix, "?") != -1:
        return rule
    if find_unescaped(prefix, "[") != -1 or "/" in tail:
        return rule

    base = escape_glob(directory.as_posix()).rstrip("/")
    new_glob = f"{base}{_DOUBLE_STAR_SEGMENT}{tail}"
    try:
        return rule.with_matcher(compile_glob(new_glob))
    except InvalidPatternError:
        return rule


def _excludes_parent_of(exclude: IndexedRule, include: IndexedRule, root: Path) -> bool:
    directory_glob = exclude.absolute_glob[: -len(DOUBLE_STAR) - 1]
    try:
        matcher = compile_glob(directory_glob)
    except InvalidPatternError:
        return False
    candidate = include.pattern.activation_path
    while is_under(candidate, root) and candidate != root:
        if matcher.matches(candidate):
            return True
        candidate = candidate.parent
    return False
