import json
import os
import tomllib
from pathlib import Path
from typing import Any

import click
from jsonschema import Draft202012Validator

from raptar.config.models import RaptarConfig
from raptar.constants import CONFIG_DIRNAME, CONFIG_FILENAME, ECOSYSTEMS_DIRNAME
from raptar.errors import (
    ConfigExistsError,
    ConfigWriteError,
    InvalidConfigFormatError,
    InvalidConfigSchemaError,
)


CONFIG_TEMPLATE = """\
# raptar configuration
# Location: ~/.config/raptar/config.toml

[ignore]
# Additional ignore files to honor by default (any gitignore-format file)
# use = [".dockerignore", ".npmignore"]

# Patterns to ALWAYS exclude, regardless of other ignore files.
# Uses gitignore syntax. Use ** to match directory contents.
# Disable per run with --without-exclude-always
always_exclude = [
    # Version control internals
    ".git/**",
    ".hg/**",
    ".svn/**",

    # IDE/Editor directories
    ".idea/**",
    ".vscode/**",
    "*.swp",

    # OS files
    ".DS_Store",
    "Thumbs.db",

    # Common build artifacts (uncomment if desired)
    # "node_modules/**",
    # "__pycache__/**",
    # "*.pyc",
    # "dist/**",
    # "build/**",
]

# Patterns to ALWAYS include, overriding always_exclude and ignore files.
# CLI --with-include still takes priority.
# always_include = ["important.log", "dist/release.tar.gz"]

[defaults]
# Default output format (tar, tar.gz, tar.bz2, tar.zst, zip)
# format = "tar.gz"

# Always create reproducible archives
# reproducible = false

# Follow symlinks by default
# dereference = false

# Preserve file ownership by default
# preserve_owner = false
"""

DEFAULT_EDITOR = "vi"


def format_schema_error(error: Any) -> str:
    path = ".".join([str(part) for part in error.path])
    return f"{error.message} at {path}" if path else str(error.message)


def resolve_editor() -> str:
    return os.environ.get("EDITOR") or os.environ.get("VISUAL") or DEFAULT_EDITOR


class ConfigRepository:
    def __init__(self, root: Path | None = None) -> None:
        self._root = root or (Path.home() / ".config" / CONFIG_DIRNAME)
        self._validator: Draft202012Validator | None = None

    @property
    def root(self) -> Path:
        return self._root

    @property
    def config_path(self) -> Path:
        return self.root / CONFIG_FILENAME

    @property
    def ecosystems_dir(self) -> Path:
        return self.root / ECOSYSTEMS_DIRNAME

    @property
    def schema_path(self) -> Path:
        return Path(__file__).resolve().parent / "schema.json"

    def exists(self) -> bool:
        return self.config_path.exists()

    def load_payload(self) -> dict[str, Any]:
        if not self.config_path.exists() or self.config_path.stat().st_size == 0:
            return {}
        try:
            payload = tomllib.loads(self.config_path.read_text(encoding="utf-8"))
        except (tomllib.TOMLDecodeError, UnicodeDecodeError) as exc:
            raise InvalidConfigFormatError(self.config_path, str(exc)) from exc

        error = next(iter(self.validator.iter_errors(payload)), None)
        if error is not None:
            raise InvalidConfigSchemaError(self.config_path, format_schema_error(error))
        return payload

    def load(self) -> RaptarConfig:
        return RaptarConfig.from_payload(self.load_payload())

    @property
    def validator(self) -> Draft202012Validator:
        if self._validator is None:
            schema = json.loads(self.schema_path.read_text(encoding="utf-8"))
            self._validator = Draft202012Validator(schema)
        return self._validator

    def init(self) -> Path:
        if self.config_path.exists():
            raise ConfigExistsError(self.config_path)
        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
            self.config_path.write_text(CONFIG_TEMPLATE, encoding="utf-8")
        except OSError as exc:
            raise ConfigWriteError(self.config_path, exc.strerror or str(exc)) from exc
        return self.config_path

    def edit(self) -> Path:
        if not self.config_path.exists():
            self.init()
        click.edit(filename=str(self.config_path), editor=resolve_editor())
        return self.config_path
