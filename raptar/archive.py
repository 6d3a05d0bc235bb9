"""Serialize walk results into tar and zip containers."""

from __future__ import annotations

import bz2
import grp
import gzip
import pwd
import shutil
import stat
import tarfile
import time
import zipfile
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import (
    BinaryIO,
    Callable,
    ContextManager,
    Iterable,
    Iterator,
    Optional,
    Protocol,
)

import zstandard

from raptar.constants import BZIP2_LEVEL, ZIP_EPOCH, ZSTD_LEVEL
from raptar.errors import ArchiveError
from raptar.walker import EntryKind, FileEntry


ProgressCallback = Callable[[FileEntry], None]
Compressor = Callable[[BinaryIO, "ArchiveOptions"], ContextManager[BinaryIO]]


class ArchiveFormat(str, Enum):
    TAR = "tar"
    TAR_GZ = "tar.gz"
    TAR_BZ2 = "tar.bz2"
    TAR_ZST = "tar.zst"
    ZIP = "zip"

    @property
    def extension(self) -> str:
        return self.value

    @classmethod
    def parse(cls, value: str) -> "ArchiveFormat":
        normalized = value.strip().lower()
        return FORMAT_ALIASES.get(normalized) or cls(normalized)


FORMAT_ALIASES: dict[str, ArchiveFormat] = {
    "tgz": ArchiveFormat.TAR_GZ,
    "tbz2": ArchiveFormat.TAR_BZ2,
    "tzst": ArchiveFormat.TAR_ZST,
}

FORMAT_CHOICES: list[str] = [fmt.value for fmt in ArchiveFormat] + list(FORMAT_ALIASES)


@dataclass(frozen=True)
class ArchiveOptions:
    reproducible: bool = False
    preserve_owner: bool = False


class ArchiveWriter(Protocol):
    def write(
        self,
        stream: BinaryIO,
        entries: Iterable[FileEntry],
        options: ArchiveOptions,
        progress: Optional[ProgressCallback] = None,
    ) -> None: ...


def _owner_names(uid: int, gid: int) -> tuple[str, str]:
    try:
        user = pwd.getpwuid(uid).pw_name
    except KeyError:
        user = ""
    try:
        group = grp.getgrgid(gid).gr_name
    except KeyError:
        group = ""
    return user, group


def build_tar_info(entry: FileEntry, options: ArchiveOptions) -> tarfile.TarInfo:
    info = tarfile.TarInfo(entry.relative_path.as_posix())
    info.mode = entry.mode
    info.mtime = 0 if options.reproducible else entry.mtime
    info.uid = 0
    info.gid = 0
    info.uname = ""
    info.gname = ""
    if options.preserve_owner and not options.reproducible:
        info.uid = entry.uid
        info.gid = entry.gid
        info.uname, info.gname = _owner_names(entry.uid, entry.gid)

    if entry.kind == EntryKind.SYMLINK:
        info.type = tarfile.SYMTYPE
        info.linkname = str(entry.link_target)
        info.size = 0
    else:
        info.type = tarfile.REGTYPE
        info.size = entry.size
    return info


class TarWriter:
    def __init__(
        self,
        compressor: Optional[Compressor] = None,
    ) -> None:
        self._compressor = compressor

    def write(
        self,
        stream: BinaryIO,
        entries: Iterable[FileEntry],
        options: ArchiveOptions,
        progress: Optional[ProgressCallback] = None,
    ) -> None:
        if self._compressor is None:
            self._write_tar(stream, entries, options, progress)
            return
        with self._compressor(stream, options) as compressed:
            self._write_tar(compressed, entries, options, progress)

    @staticmethod
    def _write_tar(
        stream: BinaryIO,
        entries: Iterable[FileEntry],
        options: ArchiveOptions,
        progress: Optional[ProgressCallback],
    ) -> None:
        with tarfile.open(fileobj=stream, mode="w|", format=tarfile.GNU_FORMAT) as archive:
            for entry in entries:
                if entry.kind == EntryKind.DIRECTORY:
                    continue
                info = build_tar_info(entry, options)
                if entry.kind == EntryKind.SYMLINK:
                    archive.addfile(info)
                else:
                    with entry.path.open("rb") as handle:
                        archive.addfile(info, handle)
                if progress is not None:
                    progress(entry)


@contextmanager
def gzip_stream(stream: BinaryIO, options: ArchiveOptions) -> Iterator[BinaryIO]:
    with gzip.GzipFile(
        filename="",
        mode="wb",
        fileobj=stream,
        compresslevel=6,
        mtime=0 if options.reproducible else None,
    ) as compressed:
        yield compressed  # type: ignore[misc]


@contextmanager
def bzip2_stream(stream: BinaryIO, options: ArchiveOptions) -> Iterator[BinaryIO]:
    with bz2.BZ2File(stream, mode="wb", compresslevel=BZIP2_LEVEL) as compressed:
        yield compressed  # type: ignore[misc]


@contextmanager
def zstd_stream(stream: BinaryIO, options: ArchiveOptions) -> Iterator[BinaryIO]:
    compressor = zstandard.ZstdCompressor(level=ZSTD_LEVEL)
    with compressor.stream_writer(stream, closefd=False) as compressed:
        yield compressed  # type: ignore[misc]


def zip_date_time(mtime: int) -> tuple[int, int, int, int, int, int]:
    date_time = time.localtime(mtime)[:6]
    if date_time[0] < ZIP_EPOCH[0]:
        return ZIP_EPOCH
    return date_time  # type: ignore[return-value]


class ZipWriter:
    def write(
        self,
        stream: BinaryIO,
        entries: Iterable[FileEntry],
        options: ArchiveOptions,
        progress: Optional[ProgressCallback] = None,
    ) -> None:
        with zipfile.ZipFile(stream, mode="w", compression=zipfile.ZIP_DEFLATED) as archive:
            for entry in entries:
                if entry.kind == EntryKind.DIRECTORY:
                    continue
                date_time = ZIP_EPOCH if options.reproducible else zip_date_time(entry.mtime)
                info = zipfile.ZipInfo(entry.relative_path.as_posix(), date_time=date_time)
                info.compress_type = zipfile.ZIP_DEFLATED
                info.create_system = 3
                if entry.kind == EntryKind.SYMLINK:
                    info.external_attr = (stat.S_IFLNK | 0o777) << 16
                    archive.writestr(info, str(entry.link_target))
                else:
                    info.external_attr = (stat.S_IFREG | (entry.mode & 0o7777)) << 16
                    info.file_size = entry.size
                    with entry.path.open("rb") as source, archive.open(info, "w") as target:
                        shutil.copyfileobj(source, target)
                if progress is not None:
                    progress(entry)


class ArchiveBuilder:
    def __init__(self) -> None:
        self.writers: dict[ArchiveFormat, ArchiveWriter] = {
            ArchiveFormat.TAR: TarWriter(),
            ArchiveFormat.TAR_GZ: TarWriter(gzip_stream),
            ArchiveFormat.TAR_BZ2: TarWriter(bzip2_stream),
            ArchiveFormat.TAR_ZST: TarWriter(zstd_stream),
            ArchiveFormat.ZIP: ZipWriter(),
        }

    def create(
        self,
        output: Path,
        entries: Iterable[FileEntry],
        fmt: ArchiveFormat,
        options: ArchiveOptions,
        progress: Optional[ProgressCallback] = None,
    ) -> Path:
        writer = self.writers[fmt]
        try:
            with output.open("wb") as raw:
                writer.write(raw, entries, options, progress)
        except (OSError, tarfile.TarError, zipfile.LargeZipFile) as exc:
            raise ArchiveError(output, str(exc)) from exc
        return output


def create_archive(
    output: Path,
    entries: Iterable[FileEntry],
    fmt: ArchiveFormat,
    options: ArchiveOptions,
    progress: Optional[ProgressCallback] = None,
) -> Path:
    return ArchiveBuilder().create(output, entries, fmt, options, progress)


def default_output_path(root: Path, fmt: ArchiveFormat, fallback: str) -> Path:
    name = root.name or fallback
    return Path(f"{name}.{fmt.extension}")
