from pathlib import Path


class RaptarError(Exception):
    """Base user-facing application error."""


class RaptarFileError(RaptarError):
    def __init__(self, path: Path, message: str) -> None:
        self.path = path
        self.message = message
        super().__init__(f"{message}: {path}")


class InvalidPatternError(RaptarError):
    def __init__(self, pattern: str, detail: str) -> None:
        self.pattern = pattern
        self.detail = detail
        super().__init__(f"Invalid pattern '{pattern}' ({detail})")


class WalkError(RaptarFileError):
    def __init__(self, path: Path, detail: str) -> None:
        self.detail = detail
        super().__init__(path=path, message=f"Failed to read directory ({detail})")


class InvalidConfigFormatError(RaptarFileError):
    def __init__(self, path: Path, detail: str) -> None:
        self.detail = detail
        super().__init__(path=path, message=f"Invalid TOML format ({detail})")


class InvalidConfigSchemaError(RaptarFileError):
    def __init__(self, path: Path, detail: str) -> None:
        self.detail = detail
        super().__init__(path=path, message=f"Invalid config schema ({detail})")


class ConfigExistsError(RaptarFileError):
    def __init__(self, path: Path) -> None:
        super().__init__(path=path, message="Config file already exists")


class ConfigWriteError(RaptarFileError):
    def __init__(self, path: Path, detail: str) -> None:
        self.detail = detail
        super().__init__(path=path, message=f"Failed to write config file ({detail})")


class ArchiveError(RaptarFileError):
    def __init__(self, path: Path, detail: str) -> None:
        self.detail = detail
        super().__init__(path=path, message=f"Failed to write archive ({detail})")


class UnknownEcosystemError(RaptarError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(
            f"Unknown ecosystem: {name}. Run 'raptar ecosystems list' to see available options."
        )
