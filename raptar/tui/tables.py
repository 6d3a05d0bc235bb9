from pathlib import Path

from rich.table import Column, Table
from rich.text import Text

from raptar.config.models import RaptarConfig
from raptar.ecosystems import Ecosystem
from raptar.rules.models import IndexedRule
from raptar.tui.enums import ACTION_STYLE, UIStyle
from raptar.utils import compact_home_path, format_size
from raptar.walker import ExcludedFile, FileEntry


def display_source(source: str, root: Path) -> str:
    path = Path(source)
    if path.is_absolute():
        try:
            return path.relative_to(root).as_posix()
        except ValueError:
            return compact_home_path(path)
    return source


class PreviewTable:
    @staticmethod
    def entry_line(entry: FileEntry, show_size: bool) -> Text:
        line = Text("  ")
        if show_size:
            size = "link" if entry.is_symlink else format_size(entry.size)
            line.append(f"{size:>10} ", style=UIStyle.DIM.value)
        line.append(entry.relative_path.as_posix())
        if entry.link_target is not None:
            line.append(f" -> {entry.link_target}", style=UIStyle.CYAN.value)
        return line

    @staticmethod
    def excluded_line(item: ExcludedFile) -> Text:
        line = Text("  ")
        line.append(item.relative_path.as_posix(), style=UIStyle.DIM.value)
        line.append(f" ({item.origin})", style=UIStyle.DIM.value)
        return line

    @staticmethod
    def summary_line(count: int, symlinks: int, total_size: int) -> Text:
        line = Text("Summary: ", style="bold")
        line.append(f"{count} files ({symlinks} symlinks), {format_size(total_size)} total")
        return line


class RulesTable:
    @staticmethod
    def rules_table(rules: list[IndexedRule], root: Path) -> Table:
        table = Table(
            Column(header="Source", overflow="fold"),
            Column(header="Line", justify="right", width=5),
            Column(header="Rule", overflow="fold"),
            Column(header="Kind", width=18),
            expand=True,
            header_style="bold",
        )
        previous_source: str | None = None
        for rule in rules:
            source = display_source(rule.origin.source, root)
            style = ACTION_STYLE[rule.action]
            pattern = Text(f"{rule.action.sign} ", style=style)
            pattern.append(rule.pattern.original)
            table.add_row(
                source if source != previous_source else "",
                "" if rule.origin.line is None else str(rule.origin.line),
                pattern,
                rule.pattern.bucket.label,
            )
            previous_source = source
        return table


class ConfigTable:
    @staticmethod
    def settings_table(config: RaptarConfig) -> Table:
        table = Table.grid(padding=(0, 2))
        table.add_column(style="bold")
        table.add_column(overflow="fold")
        table.add_row("ignore.use", ", ".join(config.ignore.use_files) or "(none)")
        table.add_row(
            "ignore.always_exclude", "\n".join(config.ignore.always_exclude) or "(none)"
        )
        table.add_row(
            "ignore.always_include", "\n".join(config.ignore.always_include) or "(none)"
        )
        table.add_row("defaults.format", config.defaults.format or "tar.gz")
        table.add_row("defaults.reproducible", str(config.defaults.reproducible).lower())
        table.add_row("defaults.dereference", str(config.defaults.dereference).lower())
        table.add_row(
            "defaults.preserve_owner", str(config.defaults.preserve_owner).lower()
        )
        return table


class EcosystemTable:
    @staticmethod
    def ecosystems_table(items: list[Ecosystem]) -> Table:
        table = Table(
            Column(header="Ecosystem"),
            Column(header="Origin"),
            expand=False,
            header_style="bold",
        )
        for item in items:
            table.add_row(item.name, "bundled" if item.bundled else "user")
        return table
