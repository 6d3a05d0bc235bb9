"""Config data models."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from raptar.constants import DEFAULT_ALWAYS_EXCLUDE


@dataclass(frozen=True)
class IgnoreSettings:
    use_files: list[str] = field(default_factory=list)
    always_exclude: list[str] = field(
        default_factory=lambda: list(DEFAULT_ALWAYS_EXCLUDE)
    )
    always_include: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class DefaultSettings:
    format: str | None = None
    reproducible: bool = False
    dereference: bool = False
    preserve_owner: bool = False


@dataclass(frozen=True)
class RaptarConfig:
    ignore: IgnoreSettings = field(default_factory=IgnoreSettings)
    defaults: DefaultSettings = field(default_factory=DefaultSettings)

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "RaptarConfig":
        ignore = payload.get("ignore", {})
        defaults = payload.get("defaults", {})
        fallback = IgnoreSettings()
        return cls(
            ignore=IgnoreSettings(
                use_files=list(ignore.get("use", [])),
                always_exclude=list(
                    ignore.get("always_exclude", fallback.always_exclude)
                ),
                always_include=list(ignore.get("always_include", [])),
            ),
            defaults=DefaultSettings(
                format=defaults.get("format"),
                reproducible=bool(defaults.get("reproducible", False)),
                dereference=bool(defaults.get("dereference", False)),
                preserve_owner=bool(defaults.get("preserve_owner", False)),
            ),
        )
