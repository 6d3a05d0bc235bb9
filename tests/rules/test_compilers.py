"""Tests for glob compilation."""

from pathlib import Path

from raptar.rules.compilers import compile_glob


def test_universal_glob_matches_any_depth() -> None:
    matcher = compile_glob("/r/**/*.log")
    assert matcher.matches(Path("/r/a.log"))
    assert matcher.matches(Path("/r/x/y/a.log"))
    assert not matcher.matches(Path("/r/a.txt"))
    assert not matcher.matches(Path("/other/a.log"))


def test_match_is_exact_not_prefix() -> None:
    matcher = compile_glob("/r/build")
    assert matcher.matches(Path("/r/build"))
    assert not matcher.matches(Path("/r/build/out.o"))
    assert not matcher.matches(Path("/r/sub/build"))


def test_recursive_glob_does_not_match_descendants() -> None:
    matcher = compile_glob("/r/**/foo")
    assert matcher.matches(Path("/r/foo"))
    assert matcher.matches(Path("/r/a/b/foo"))
    assert not matcher.matches(Path("/r/foo/x"))
    assert not matcher.matches(Path("/r/a/foo/b/c"))


def test_wildcard_glob_does_not_match_inside_matching_directory() -> None:
    matcher = compile_glob("/r/**/*.log")
    assert matcher.matches(Path("/r/logs.log/today.log"))
    assert not matcher.matches(Path("/r/logs.log/today.txt"))


def test_directory_glob_matches_contents_only() -> None:
    matcher = compile_glob("/r/**/build/**")
    assert matcher.matches(Path("/r/build/out.o"))
    assert matcher.matches(Path("/r/src/build/deep/out.o"))
    assert not matcher.matches(Path("/r/build"))
    assert not matcher.matches(Path("/r/builder.txt"))
    assert not matcher.matches(Path("/r/src/build.rs"))


def test_single_star_does_not_cross_separators() -> None:
    matcher = compile_glob("/r/docs/*.md")
    assert matcher.matches(Path("/r/docs/a.md"))
    assert not matcher.matches(Path("/r/docs/sub/a.md"))


def test_question_mark_and_classes() -> None:
    assert compile_glob("/r/**/file?.txt").matches(Path("/r/file1.txt"))
    assert not compile_glob("/r/**/file?.txt").matches(Path("/r/file12.txt"))
    assert compile_glob("/r/**/file[abc].txt").matches(Path("/r/filea.txt"))
    assert not compile_glob("/r/**/file[abc].txt").matches(Path("/r/filed.txt"))
    assert compile_glob("/r/**/file[!abc].txt").matches(Path("/r/filed.txt"))
    assert not compile_glob("/r/**/file[!abc].txt").matches(Path("/r/filea.txt"))


def test_escaped_star_matches_literally() -> None:
    matcher = compile_glob(r"/r/**/file\*.txt")
    assert matcher.matches(Path("/r/file*.txt"))
    assert not matcher.matches(Path("/r/fileX.txt"))


def test_matching_is_case_sensitive() -> None:
    matcher = compile_glob("/r/**/*.LOG")
    assert matcher.matches(Path("/r/a.LOG"))
    assert not matcher.matches(Path("/r/a.log"))


def test_compiled_matchers_are_cached() -> None:
    assert compile_glob("/r/**/*.tmp") is compile_glob("/r/**/*.tmp")
