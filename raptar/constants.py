from typing import Final


APP_NAME: Final[str] = "raptar"
CONFIG_DIRNAME: Final[str] = "raptar"
CONFIG_FILENAME: Final[str] = "config.toml"
ECOSYSTEMS_DIRNAME: Final[str] = "ecosystems"

GITIGNORE_FILENAME: Final[str] = ".gitignore"
IGNORE_FILENAME: Final[str] = ".ignore"

# Loaded from the archive root, in this order.
ROOT_IGNORE_FILENAMES: Final[tuple[str, ...]] = (
    GITIGNORE_FILENAME,
    IGNORE_FILENAME,
)

DEFAULT_ALWAYS_EXCLUDE: Final[tuple[str, ...]] = (
    ".git/**",
    ".hg/**",
    ".svn/**",
)

DEFAULT_ARCHIVE_NAME: Final[str] = "archive"

ORIGIN_ALWAYS_EXCLUDE: Final[str] = "config always_exclude"
ORIGIN_ALWAYS_INCLUDE: Final[str] = "config always_include"
ORIGIN_CLI_EXCLUDE: Final[str] = "--with-exclude"
ORIGIN_CLI_INCLUDE: Final[str] = "--with-include"

GLOB_SPECIAL_CHARS: Final[str] = "*?["
DOUBLE_STAR: Final[str] = "**"

ZSTD_LEVEL: Final[int] = 3
BZIP2_LEVEL: Final[int] = 9
ZIP_EPOCH: Final[tuple[int, int, int, int, int, int]] = (1980, 1, 1, 0, 0, 0)
