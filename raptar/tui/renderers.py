from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from rich.console import Console
from rich.progress import BarColumn, MofNCompleteColumn, Progress, TextColumn
from rich.text import Text

from raptar.archive import ProgressCallback
from raptar.config.models import RaptarConfig
from raptar.ecosystems import Ecosystem, EcosystemManifest
from raptar.rules.models import IndexedRule
from raptar.tui.enums import UIStyle
from raptar.tui.sections import UISection
from raptar.tui.tables import ConfigTable, EcosystemTable, PreviewTable, RulesTable
from raptar.utils import compact_home_path, format_size
from raptar.walker import FileEntry, WalkResult


class ArchiveConsoleUI:
    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def _line(self, text: Text | str) -> None:
        self.console.print(text, soft_wrap=True, highlight=False, markup=False)

    def render_scanning(self) -> None:
        self._line("Scanning files...")

    def render_preview(
        self, result: WalkResult, show_size: bool = False, verbose: bool = False
    ) -> None:
        self._line(Text("Files to be archived:", style=f"bold {UIStyle.GREEN.value}"))
        self._line("")
        for entry in result.entries:
            self._line(PreviewTable.entry_line(entry, show_size))
        self._line("")
        self._line(
            PreviewTable.summary_line(
                len(result.entries), result.symlink_count, result.total_size
            )
        )

        if verbose and result.excluded:
            self._line("")
            self._line(Text("Files excluded:", style=f"bold {UIStyle.YELLOW.value}"))
            for item in result.excluded:
                self._line(PreviewTable.excluded_line(item))

    def render_rules(self, rules: list[IndexedRule], root: Path) -> None:
        if not rules:
            self.console.print(
                UISection.note("rules", "No ignore rules loaded.", style=UIStyle.DIM.value)
            )
            return
        self.console.print(
            UISection.wrap(
                "rules",
                RulesTable.rules_table(rules, root),
                style=UIStyle.BLUE.value,
                subtitle="last matching rule wins",
            )
        )

    def render_no_files(self) -> None:
        self._line(Text("No files to archive!", style=UIStyle.YELLOW.value))

    def render_output_excluded(self, output: Path) -> None:
        self._line(f"Excluding output file from archive: {output}")

    def render_defaults_notice(self) -> None:
        self._line("Running with defaults. Use 'raptar config edit' to customize.")

    def render_creating(self, output: Path, count: int) -> None:
        self._line(f"Creating {output} with {count} files...")

    def render_done(self, input_size: int, output_size: int) -> None:
        ratio = (output_size / input_size) * 100 if input_size > 0 else 100.0
        self._line(
            f"Done! {format_size(input_size)} -> {format_size(output_size)} "
            f"({ratio:.1f}% of original)"
        )

    @contextmanager
    def progress(self, total: int) -> Iterator[ProgressCallback]:
        with Progress(
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            console=self.console,
            transient=True,
        ) as bar:
            task = bar.add_task("Archiving", total=total)

            def advance(entry: FileEntry) -> None:
                bar.update(task, advance=1)

            yield advance

    def render_config(
        self, config: RaptarConfig, config_path: Path, exists: bool
    ) -> None:
        location = compact_home_path(config_path)
        if not exists:
            location = f"{location} (not created, run 'raptar config init')"
        self.console.print(
            UISection.wrap(
                "raptar configuration",
                ConfigTable.settings_table(config),
                style=UIStyle.BLUE.value,
            )
        )
        self._line(f"Config file: {location}")
        self.console.print(
            UISection.note(
                "usage",
                "Honor another ignore file:\n"
                "  raptar archive --with-ignorefile .dockerignore\n"
                "Exclude extra patterns:\n"
                "  raptar archive --with-exclude '*.bak' --with-exclude 'node_modules/**'\n"
                "Re-include a file:\n"
                "  raptar archive --with-exclude '*.log' --with-include 'important.log'",
                style=UIStyle.DIM.value,
            )
        )

    def render_config_saved(self, path: Path, verb: str) -> None:
        self._line(f"{verb}: {compact_home_path(path)}")

    def render_ecosystems(
        self, items: list[Ecosystem], manifest: EcosystemManifest
    ) -> None:
        if not items:
            self.console.print(
                UISection.note(
                    "ecosystems",
                    "No ecosystem templates available.",
                    style=UIStyle.YELLOW.value,
                )
            )
            return
        subtitle = None
        if manifest.downloaded:
            subtitle = f"downloaded {manifest.downloaded}"
        self.console.print(
            UISection.wrap(
                "ecosystems",
                EcosystemTable.ecosystems_table(items),
                style=UIStyle.BLUE.value,
                subtitle=subtitle,
            )
        )
        self._line("Usage: raptar archive --with-ecosystem <name>")
