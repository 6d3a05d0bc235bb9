"""Bundled and user-provided gitignore templates per language ecosystem."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import yaml

from raptar.errors import UnknownEcosystemError

TEMPLATE_SUFFIX = ".gitignore"


@dataclass(frozen=True)
class Ecosystem:
    name: str
    path: Path
    bundled: bool = True

    def read_lines(self) -> list[str]:
        return self.path.read_text(encoding="utf-8").splitlines()


@dataclass(frozen=True)
class EcosystemManifest:
    source: str = ""
    downloaded: str = ""
    templates: dict[str, str] = field(default_factory=dict)


class EcosystemRepository:
    def __init__(self, user_dir: Path | None = None) -> None:
        self._bundled_dir = Path(__file__).resolve().parent
        self._user_dir = user_dir
        self._manifest: EcosystemManifest | None = None

    @property
    def templates_dir(self) -> Path:
        return self._bundled_dir / "templates"

    @property
    def manifest_path(self) -> Path:
        return self._bundled_dir / "manifest.yaml"

    def manifest(self) -> EcosystemManifest:
        if self._manifest is None:
            raw = yaml.safe_load(self.manifest_path.read_text(encoding="utf-8")) or {}
            templates = raw.get("templates", {})
            if not isinstance(templates, dict):
                templates = {}
            self._manifest = EcosystemManifest(
                source=str(raw.get("source", "")),
                downloaded=str(raw.get("downloaded", "")),
                templates={str(k): str(v) for k, v in templates.items()},
            )
        return self._manifest

    def list_ecosystems(self) -> list[Ecosystem]:
        found: dict[str, Ecosystem] = {}
        for name, filename in self.manifest().templates.items():
            found[name.lower()] = Ecosystem(name=name, path=self.templates_dir / filename)
        for ecosystem in self._user_templates():
            found[ecosystem.name.lower()] = ecosystem
        return sorted(found.values(), key=lambda item: item.name.lower())

    def names(self) -> list[str]:
        return [ecosystem.name for ecosystem in self.list_ecosystems()]

    def get(self, name: str) -> Ecosystem:
        wanted = name.lower()
        for ecosystem in self.list_ecosystems():
            if ecosystem.name.lower() == wanted:
                return ecosystem
        raise UnknownEcosystemError(name)

    def _user_templates(self) -> list[Ecosystem]:
        if self._user_dir is None or not self._user_dir.is_dir():
            return []
        templates: list[Ecosystem] = []
        for child in sorted(self._user_dir.iterdir()):
            if not child.is_file() or not child.name.endswith(TEMPLATE_SUFFIX):
                continue
            name = child.name[: -len(TEMPLATE_SUFFIX)]
            if name:
                templates.append(Ecosystem(name=name, path=child, bundled=False))
        return templates
