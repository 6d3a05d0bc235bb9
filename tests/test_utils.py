import logging
from pathlib import Path

import pytest

from raptar.logger_config import resolve_level, setup_logging
from raptar.utils import are_related, compact_home_path, dotted_name, format_size, is_under


@pytest.mark.parametrize(
    "size, expected",
    [(0, "0 B"), (1023, "1023 B"), (1024, "1.0 KiB"), (1536, "1.5 KiB"), (5 * 1024**2, "5.0 MiB")],
)
def test_format_size(size: int, expected: str) -> None:
    assert format_size(size) == expected


def test_is_under_is_lexical() -> None:
    assert is_under(Path("/a/b/c"), Path("/a"))
    assert is_under(Path("/a"), Path("/a"))
    assert not is_under(Path("/ab"), Path("/a"))
    assert are_related(Path("/a"), Path("/a/b"))
    assert not are_related(Path("/a/b"), Path("/a/c"))


def test_compact_home_path(tmp_path: Path) -> None:
    home = Path.home()
    assert compact_home_path(home) == "~"
    assert compact_home_path(home / ".config" / "raptar") == "~/.config/raptar"
    assert compact_home_path("/etc/hosts") == "/etc/hosts"


def test_dotted_name() -> None:
    assert dotted_name("gitignore") == ".gitignore"
    assert dotted_name(".ignore") == ".ignore"


def test_resolve_level() -> None:
    assert resolve_level() == logging.WARNING
    assert resolve_level(verbose=True) == logging.INFO
    assert resolve_level(verbose=True, quiet=True) == logging.ERROR


def test_setup_logging_replaces_handlers() -> None:
    first = setup_logging()
    second = setup_logging(quiet=True)

    assert first is second
    assert len(second.handlers) == 1
    assert second.level == logging.ERROR
