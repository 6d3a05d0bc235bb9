from pathlib import Path

import click
import pytest

from raptar.config.models import RaptarConfig
from raptar.config.repository import CONFIG_TEMPLATE, ConfigRepository, resolve_editor
from raptar.constants import DEFAULT_ALWAYS_EXCLUDE
from raptar.errors import (
    ConfigExistsError,
    ConfigWriteError,
    InvalidConfigFormatError,
    InvalidConfigSchemaError,
)


def test_missing_config_yields_defaults(config_root: Path) -> None:
    repository = ConfigRepository()

    assert repository.root == config_root
    assert not repository.exists()
    config = repository.load()
    assert config == RaptarConfig()
    assert config.ignore.always_exclude == list(DEFAULT_ALWAYS_EXCLUDE)
    assert config.defaults.format is None


def test_load_reads_ignore_and_defaults(write_config) -> None:
    write_config(
        """
[ignore]
use = [".dockerignore"]
always_exclude = ["*.tmp"]
always_include = ["keep.log"]

[defaults]
format = "zip"
reproducible = true
"""
    )

    config = ConfigRepository().load()

    assert config.ignore.use_files == [".dockerignore"]
    assert config.ignore.always_exclude == ["*.tmp"]
    assert config.ignore.always_include == ["keep.log"]
    assert config.defaults.format == "zip"
    assert config.defaults.reproducible is True
    assert config.defaults.dereference is False


def test_empty_always_exclude_disables_defaults(write_config) -> None:
    write_config("[ignore]\nalways_exclude = []\n")

    assert ConfigRepository().load().ignore.always_exclude == []


def test_invalid_toml_raises(write_config) -> None:
    path = write_config("[ignore\nuse = 1\n")

    with pytest.raises(InvalidConfigFormatError) as exc_info:
        ConfigRepository().load()

    assert exc_info.value.path == path
    assert "Invalid TOML format" in str(exc_info.value)


@pytest.mark.parametrize(
    "text, fragment",
    [
        ("[defaults]\nformat = \"rar\"\n", "defaults.format"),
        ("[ignore]\nuse = \".dockerignore\"\n", "ignore.use"),
        ("[extra]\nvalue = 1\n", "Additional properties"),
    ],
)
def test_schema_violation_raises(write_config, text: str, fragment: str) -> None:
    write_config(text)

    with pytest.raises(InvalidConfigSchemaError) as exc_info:
        ConfigRepository().load()

    assert fragment in str(exc_info.value)


def test_init_writes_template_once(config_root: Path) -> None:
    repository = ConfigRepository()

    path = repository.init()

    assert path == config_root / "config.toml"
    assert path.read_text(encoding="utf-8") == CONFIG_TEMPLATE
    assert ".git/**" in repository.load().ignore.always_exclude
    with pytest.raises(ConfigExistsError):
        repository.init()


def test_edit_creates_file_and_opens_editor(
    config_root: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    calls: list[dict] = []
    monkeypatch.setenv("EDITOR", "nano")
    monkeypatch.setattr(click, "edit", lambda **kwargs: calls.append(kwargs))

    path = ConfigRepository().edit()

    assert path.exists()
    assert calls == [{"filename": str(path), "editor": "nano"}]


def test_resolve_editor_falls_back(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("EDITOR", raising=False)
    monkeypatch.setenv("VISUAL", "code -w")
    assert resolve_editor() == "code -w"

    monkeypatch.delenv("VISUAL")
    assert resolve_editor() == "vi"


def test_init_reports_unwritable_location(tmp_path: Path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory", encoding="utf-8")
    repository = ConfigRepository(blocker / "raptar")

    with pytest.raises(ConfigWriteError) as exc_info:
        repository.init()

    assert exc_info.value.path == blocker / "raptar" / "config.toml"
