"""Tests for the directory walker."""

import logging
import os
from pathlib import Path

import pytest

from raptar.config.models import IgnoreSettings, RaptarConfig
from raptar.errors import WalkError
from raptar.rules.sources import RuleSourceOptions, build_rule_index
from raptar.walker import EntryKind, WalkOptions, collect_files


def _walk(
    root: Path,
    options: RuleSourceOptions | None = None,
    walk_options: WalkOptions | None = None,
    always_exclude: list[str] | None = None,
):
    config = RaptarConfig(
        ignore=IgnoreSettings(
            always_exclude=[".git/**"] if always_exclude is None else always_exclude
        )
    )
    index = build_rule_index(root, options or RuleSourceOptions(), config)
    return collect_files(root, index, walk_options or WalkOptions())


def _names(result) -> list[str]:
    return [entry.relative_path.as_posix() for entry in result.entries]


def _excluded(result) -> list[str]:
    return [item.relative_path.as_posix() for item in result.excluded]


def test_default_inclusion_and_sorted_order(project: Path, make_files) -> None:
    make_files(project, "b.txt", "a.txt", "src/main.rs", ".hidden")
    assert _names(_walk(project)) == [".hidden", "a.txt", "b.txt", "src/main.rs"]


def test_gitignore_and_negation(project: Path, make_files) -> None:
    make_files(project, "debug.log", "important.log", "main.py")
    (project / ".gitignore").write_text("*.log\n!important.log\n", encoding="utf-8")

    result = _walk(project)

    assert _names(result) == [".gitignore", "important.log", "main.py"]
    assert _excluded(result) == ["debug.log"]
    assert result.excluded[0].origin.endswith(".gitignore:1")


def test_version_control_dir_does_not_leak_into_siblings(
    project: Path, make_files
) -> None:
    make_files(project, ".git/HEAD", ".git/objects/ab/cd", "src/main.rs")
    result = _walk(project)
    assert _names(result) == ["src/main.rs"]
    assert _excluded(result) == [".git/HEAD", ".git/objects"]


def test_excluded_directory_is_pruned(project: Path, make_files) -> None:
    make_files(project, "node_modules/pkg/index.js", "app.js")
    (project / ".gitignore").write_text("node_modules\n", encoding="utf-8")
    result = _walk(project)
    assert _names(result) == [".gitignore", "app.js"]
    assert _excluded(result) == ["node_modules"]


def test_directory_only_pattern(project: Path, make_files) -> None:
    make_files(project, "build/out.o", "build/sub/x.o", "builder.txt", "src/build.rs")
    (project / ".gitignore").write_text("build/\n", encoding="utf-8")
    result = _walk(project)
    assert _names(result) == [".gitignore", "builder.txt", "src/build.rs"]
    assert "build/out.o" in _excluded(result)


def test_recursive_wildcard_pattern(project: Path, make_files) -> None:
    make_files(
        project,
        "src/test_main.py",
        "src/utils/test_util.py",
        "src/deep/nested/test_deep.py",
        "src/main.py",
        "tests/test_main.py",
    )
    result = _walk(project, RuleSourceOptions(with_exclude=("src/**/test_*.py",)))
    assert _names(result) == ["src/main.py", "tests/test_main.py"]


def test_negated_file_inside_excluded_directory(project: Path, make_files) -> None:
    make_files(project, "build/keep.txt", "build/other.o", "build/sub/x.o", "main.c")
    (project / ".gitignore").write_text("/build\n!build/keep.txt\n", encoding="utf-8")

    result = _walk(project)

    assert _names(result) == [
        ".gitignore",
        "build/keep.txt",
        "build/other.o",
        "build/sub/x.o",
        "main.c",
    ]
    assert _excluded(result) == ["build"]


def test_contents_pattern_allows_negation(project: Path, make_files) -> None:
    make_files(project, "build/important.txt", "build/other.txt")
    (project / ".gitignore").write_text(
        "build/*\n!build/important.txt\n", encoding="utf-8"
    )
    result = _walk(project)
    assert _names(result) == [".gitignore", "build/important.txt"]


def test_include_on_directory_does_not_force_contents(
    project: Path, make_files
) -> None:
    make_files(project, "docs/a.md", "docs/b.log")
    result = _walk(
        project, RuleSourceOptions(with_exclude=("*.log",), with_include=("docs",))
    )
    assert _names(result) == ["docs/a.md"]


def test_deep_nesting(project: Path) -> None:
    deep = project.joinpath(*[f"d{level}" for level in range(50)])
    deep.mkdir(parents=True)
    (deep / "leaf.txt").write_text("x", encoding="utf-8")
    (deep / "leaf.log").write_text("x", encoding="utf-8")
    result = _walk(project, RuleSourceOptions(with_exclude=("*.log",)))
    assert len(result.entries) == 1
    assert result.entries[0].relative_path.name == "leaf.txt"


def test_many_single_star_segments(project: Path, make_files) -> None:
    make_files(project, "a/b/c/d/e/f/g.txt", "a/b/c/d/e/g.txt")
    result = _walk(project, RuleSourceOptions(with_exclude=("*/*/*/*/*/*/*.txt",)))
    assert _names(result) == ["a/b/c/d/e/g.txt"]


def test_unusual_patterns_do_not_break_the_walk(project: Path, make_files) -> None:
    make_files(project, "file[.txt", "a.txt")
    (project / ".gitignore").write_text("***\n/\n**/\n[\n", encoding="utf-8")
    _walk(project)


def test_symlink_is_recorded_with_target(project: Path, make_files) -> None:
    make_files(project, "target.txt", content="hello")
    (project / "link.txt").symlink_to("target.txt")

    result = _walk(project)

    link = next(
        entry for entry in result.entries if entry.relative_path.name == "link.txt"
    )
    assert link.kind == EntryKind.SYMLINK
    assert link.link_target == Path("target.txt")
    assert link.size == 0
    assert result.symlink_count == 1


def test_broken_symlink_is_kept(project: Path) -> None:
    (project / "dangling").symlink_to("missing.txt")
    for dereference in (False, True):
        result = _walk(project, walk_options=WalkOptions(dereference=dereference))
        assert [entry.kind for entry in result.entries] == [EntryKind.SYMLINK]


def test_dereference_follows_links(project: Path, make_files) -> None:
    make_files(project, "real/data.txt", content="hello")
    (project / "alias").symlink_to("real")
    (project / "file-link").symlink_to("real/data.txt")

    result = _walk(project, walk_options=WalkOptions(dereference=True))

    assert _names(result) == ["alias/data.txt", "file-link", "real/data.txt"]
    assert all(entry.kind == EntryKind.FILE for entry in result.entries)
    assert result.entries[1].size == 5


def test_symlink_loop_does_not_hang(project: Path, caplog) -> None:
    (project / "a").mkdir()
    (project / "a" / "loop").symlink_to("..")

    plain = _walk(project)
    assert _names(plain) == ["a/loop"]

    with caplog.at_level(logging.WARNING):
        followed = _walk(project, walk_options=WalkOptions(dereference=True))
    assert _names(followed) == []
    assert "symlink loop" in caplog.text


def test_nested_ignore_file_is_reported_not_applied(
    project: Path, make_files, caplog
) -> None:
    make_files(project, "sub/a.txt")
    (project / "sub" / ".gitignore").write_text("*.txt\n", encoding="utf-8")

    with caplog.at_level(logging.WARNING):
        result = _walk(project)

    assert "sub/a.txt" in _names(result)
    assert "Nested ignore file not processed: sub/.gitignore" in caplog.text


def test_reproducible_zeroes_mtime(project: Path, make_files) -> None:
    make_files(project, "a.txt")
    plain = _walk(project)
    assert plain.entries[0].mtime != 0

    reproducible = _walk(project, walk_options=WalkOptions(reproducible=True))
    assert reproducible.entries[0].mtime == 0


def test_entry_metadata(project: Path, make_files) -> None:
    make_files(project, "run.sh", content="#!/bin/sh\n")
    (project / "run.sh").chmod(0o755)
    entry = _walk(project).entries[0]
    assert entry.kind == EntryKind.FILE
    assert entry.mode == 0o755
    assert entry.size == len("#!/bin/sh\n")
    assert entry.path == project / "run.sh"
    assert entry.uid == os.getuid()


@pytest.mark.skipif(os.geteuid() == 0, reason="root can read any directory")
def test_unreadable_directory_is_fatal(project: Path, make_files) -> None:
    make_files(project, "locked/secret.txt")
    locked = project / "locked"
    locked.chmod(0o000)
    try:
        with pytest.raises(WalkError):
            _walk(project)
    finally:
        locked.chmod(0o755)
