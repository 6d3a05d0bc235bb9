"""Load rules from every source in precedence order."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

from raptar.config.models import RaptarConfig
from raptar.constants import (
    ORIGIN_ALWAYS_EXCLUDE,
    ORIGIN_ALWAYS_INCLUDE,
    ORIGIN_CLI_EXCLUDE,
    ORIGIN_CLI_INCLUDE,
    ROOT_IGNORE_FILENAMES,
)
from raptar.ecosystems import EcosystemRepository
from raptar.errors import InvalidPatternError, UnknownEcosystemError
from raptar.rules.index import RuleIndex
from raptar.rules.models import Action, RawRule, RuleOrigin
from raptar.utils import dotted_name

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RuleSourceOptions:
    with_exclude: tuple[str, ...] = ()
    with_include: tuple[str, ...] = ()
    with_ignorefiles: tuple[str, ...] = ()
    without_ignorefiles: tuple[str, ...] = ()
    skip_ignore_files: bool = False
    without_exclude_always: bool = False
    without_include_always: bool = False
    ecosystems: tuple[str, ...] = ()


@dataclass(frozen=True)
class IgnoreFileSearch:
    found: list[Path] = field(default_factory=list)
    not_found: list[str] = field(default_factory=list)


def find_ignore_files(
    root: Path, names: Iterable[str], cwd: Path | None = None
) -> IgnoreFileSearch:
    """Locate ignore files by name.

    Absolute paths are used as given. Names containing ``/`` are tried
    relative to the working directory, then to ``root``. Bare names are
    looked up in ``root``, with a leading dot added when the plain name is
    missing (``dockerignore`` finds ``.dockerignore``).
    """
    cwd = cwd or Path.cwd()
    found: list[Path] = []
    not_found: list[str] = []
    for name in names:
        requested = Path(name).expanduser()
        if requested.is_absolute():
            candidates = [requested]
        elif "/" in name:
            candidates = [cwd / requested, root / requested]
        else:
            candidates = [root / name, root / dotted_name(name)]

        match = next((path for path in candidates if path.is_file()), None)
        if match is None:
            not_found.append(name)
        else:
            found.append(match)
    return IgnoreFileSearch(found=found, not_found=not_found)


def read_raw_rules(path: Path, defining_dir: Path, source: str) -> list[RawRule]:
    """Read ``path`` into one :class:`RawRule` per line, in file order."""
    text = path.read_text(encoding="utf-8", errors="replace")
    return [
        RawRule(
            text=line,
            action=Action.EXCLUDE,
            origin=RuleOrigin(source=source, line=line_number),
            defining_dir=defining_dir,
        )
        for line_number, line in enumerate(text.splitlines(), start=1)
    ]


def _add_raw_rules(index: RuleIndex, raw_rules: Iterable[RawRule]) -> int:
    added = 0
    for raw in raw_rules:
        try:
            rule = index.add_raw(raw)
        except InvalidPatternError as exc:
            logger.warning("%s: %s, skipping", raw.origin, exc)
            continue
        if rule is not None:
            added += 1
    return added


def parse_ignore_file(
    index: RuleIndex,
    path: Path,
    defining_dir: Path | None = None,
    source: str | None = None,
) -> int:
    """Add every pattern line of ``path``; returns how many rules were kept."""
    label = source or str(path)
    raw_rules = read_raw_rules(path, defining_dir or path.absolute().parent, label)
    added = _add_raw_rules(index, raw_rules)
    index.mark_loaded(path.resolve())
    logger.debug("Loaded %d rules from %s", added, label)
    return added


def add_patterns(
    index: RuleIndex,
    patterns: Iterable[str],
    action: Action,
    source: str,
) -> int:
    raw_rules = [
        RawRule(
            text=pattern,
            action=action,
            origin=RuleOrigin(source),
            defining_dir=index.root,
        )
        for pattern in patterns
    ]
    return _add_raw_rules(index, raw_rules)


def _is_disabled(path: Path, options: RuleSourceOptions) -> bool:
    disabled = {dotted_name(name) for name in options.without_ignorefiles}
    return dotted_name(path.name) in disabled


def _load_files(
    index: RuleIndex, paths: Iterable[Path], options: RuleSourceOptions
) -> None:
    for path in paths:
        if _is_disabled(path, options):
            logger.info("Skipping ignore file %s", path)
            continue
        parse_ignore_file(index, path)


def build_rule_index(
    root: Path,
    options: RuleSourceOptions,
    config: RaptarConfig,
    ecosystems: EcosystemRepository | None = None,
    cwd: Path | None = None,
) -> RuleIndex:
    """Build the index for ``root`` from all sources, lowest precedence first.

    Order: ecosystem templates, root ``.gitignore``/``.ignore``, configured
    ignore files, CLI ignore files, configured always-exclude, configured
    always-include, CLI excludes, CLI includes.
    """
    index = RuleIndex(root)

    if options.ecosystems:
        repository = ecosystems or EcosystemRepository()
        for name in options.ecosystems:
            try:
                ecosystem = repository.get(name)
            except UnknownEcosystemError as exc:
                logger.warning("%s", exc)
                continue
            logger.info("Using %s ecosystem template", ecosystem.name)
            parse_ignore_file(
                index,
                ecosystem.path,
                defining_dir=root,
                source=f"ecosystem:{ecosystem.name}",
            )

    if not options.skip_ignore_files:
        root_files = [
            root / name for name in ROOT_IGNORE_FILENAMES if (root / name).is_file()
        ]
        _load_files(index, root_files, options)

        configured = find_ignore_files(root, config.ignore.use_files, cwd=cwd)
        for name in configured.not_found:
            logger.warning("Configured ignore file not found: %s", name)
        _load_files(index, configured.found, options)

    requested = find_ignore_files(root, options.with_ignorefiles, cwd=cwd)
    for name in requested.not_found:
        logger.warning("Ignore file not found: %s", name)
    _load_files(index, requested.found, options)

    if not options.without_exclude_always:
        add_patterns(
            index, config.ignore.always_exclude, Action.EXCLUDE, ORIGIN_ALWAYS_EXCLUDE
        )
    if not options.without_include_always:
        add_patterns(
            index, config.ignore.always_include, Action.INCLUDE, ORIGIN_ALWAYS_INCLUDE
        )
    add_patterns(index, options.with_exclude, Action.EXCLUDE, ORIGIN_CLI_EXCLUDE)
    add_patterns(index, options.with_include, Action.INCLUDE, ORIGIN_CLI_INCLUDE)

    index.build()
    for warning in index.compat_warnings():
        logger.warning("%s", warning)
    return index
