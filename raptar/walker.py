"""Depth-first directory walk driven by the rule index."""

from __future__ import annotations

import logging
import os
import stat
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from raptar.constants import ROOT_IGNORE_FILENAMES
from raptar.errors import WalkError
from raptar.rules.index import RuleIndex
from raptar.rules.models import Action

logger = logging.getLogger(__name__)


class EntryKind(str, Enum):
    FILE = "file"
    DIRECTORY = "directory"
    SYMLINK = "symlink"


@dataclass(frozen=True)
class FileEntry:
    path: Path
    relative_path: Path
    size: int
    kind: EntryKind
    link_target: Path | None
    mode: int
    uid: int
    gid: int
    mtime: int

    @property
    def is_symlink(self) -> bool:
        return self.kind == EntryKind.SYMLINK


@dataclass(frozen=True)
class ExcludedFile:
    relative_path: Path
    origin: str


@dataclass(frozen=True)
class WalkOptions:
    dereference: bool = False
    reproducible: bool = False


@dataclass
class WalkResult:
    entries: list[FileEntry] = field(default_factory=list)
    excluded: list[ExcludedFile] = field(default_factory=list)

    @property
    def total_size(self) -> int:
        return sum(entry.size for entry in self.entries)

    @property
    def symlink_count(self) -> int:
        return sum(1 for entry in self.entries if entry.is_symlink)

    def without(self, path: Path) -> "WalkResult":
        return WalkResult(
            entries=[entry for entry in self.entries if entry.path != path],
            excluded=list(self.excluded),
        )


class Walker:
    def __init__(self, root: Path, index: RuleIndex, options: WalkOptions) -> None:
        self._root = root
        self._index = index
        self._options = options
        self._result = WalkResult()

    def walk(self) -> WalkResult:
        self._result = WalkResult()
        root_stat = self._root.stat()
        self._walk_directory(
            self._root,
            ancestors=frozenset({(root_stat.st_dev, root_stat.st_ino)}),
        )
        return self._result

    def _walk_directory(
        self,
        directory: Path,
        ancestors: frozenset[tuple[int, int]],
    ) -> None:
        """Visit ``directory``'s children in sorted order.

        An excluded directory is still entered when it holds include rules;
        its unmatched children are included by default like anywhere else.
        """
        try:
            children = sorted(directory.iterdir())
        except OSError as exc:
            raise WalkError(directory, exc.strerror or str(exc)) from exc

        for child in children:
            relative = self._relative(child)
            self._warn_nested_ignore_file(child, relative)

            try:
                link_stat = child.lstat()
            except OSError as exc:
                raise WalkError(child, exc.strerror or str(exc)) from exc
            entry_stat, is_link = self._resolve_stat(child, link_stat)
            is_dir = stat.S_ISDIR(entry_stat.st_mode) and not is_link

            match = self._index.find_match(child)
            if match is not None and match.action == Action.EXCLUDE:
                self._result.excluded.append(
                    ExcludedFile(relative_path=relative, origin=match.description)
                )
                if is_dir and self._index.has_include_rules(child):
                    self._descend(child, relative, entry_stat, ancestors)
                continue

            if is_dir:
                self._descend(child, relative, entry_stat, ancestors)
            elif is_link or stat.S_ISREG(entry_stat.st_mode):
                self._result.entries.append(
                    self._create_entry(child, relative, entry_stat, is_link)
                )
            else:
                logger.warning("Skipping special file: %s", relative)

    def _descend(
        self,
        directory: Path,
        relative: Path,
        entry_stat: os.stat_result,
        ancestors: frozenset[tuple[int, int]],
    ) -> None:
        key = (entry_stat.st_dev, entry_stat.st_ino)
        if key in ancestors:
            logger.warning("Skipping symlink loop: %s", relative)
            return
        self._walk_directory(directory, ancestors | {key})

    def _resolve_stat(
        self, path: Path, link_stat: os.stat_result
    ) -> tuple[os.stat_result, bool]:
        is_link = stat.S_ISLNK(link_stat.st_mode)
        if not is_link or not self._options.dereference:
            return link_stat, is_link
        try:
            return path.stat(), False
        except OSError:
            logger.info("Broken symlink kept as link: %s", path)
            return link_stat, True

    def _relative(self, path: Path) -> Path:
        try:
            return path.relative_to(self._root)
        except ValueError as exc:
            raise WalkError(path, "cannot compute path relative to archive root") from exc

    def _create_entry(
        self,
        path: Path,
        relative: Path,
        entry_stat: os.stat_result,
        is_link: bool,
    ) -> FileEntry:
        link_target = Path(os.readlink(path)) if is_link else None
        return FileEntry(
            path=path,
            relative_path=relative,
            size=0 if is_link else entry_stat.st_size,
            kind=EntryKind.SYMLINK if is_link else EntryKind.FILE,
            link_target=link_target,
            mode=stat.S_IMODE(entry_stat.st_mode),
            uid=entry_stat.st_uid,
            gid=entry_stat.st_gid,
            mtime=0 if self._options.reproducible else int(entry_stat.st_mtime),
        )

    def _warn_nested_ignore_file(self, path: Path, relative: Path) -> None:
        if path.name not in ROOT_IGNORE_FILENAMES or path.parent == self._root:
            return
        if path.is_file() and not self._index.is_loaded(path.resolve()):
            logger.warning("Nested ignore file not processed: %s", relative)


def collect_files(root: Path, index: RuleIndex, options: WalkOptions) -> WalkResult:
    """Walk ``root`` and return included entries plus exclusion records."""
    result = Walker(root.resolve(), index, options).walk()
    if options.reproducible:
        result.entries.sort(key=lambda entry: entry.relative_path)
        result.excluded.sort(key=lambda item: item.relative_path)
    return result
