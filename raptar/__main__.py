from pathlib import Path

import click
from rich.console import Console

from raptar import __version__
from raptar.archive import (
    FORMAT_CHOICES,
    ArchiveFormat,
    ArchiveOptions,
    create_archive,
    default_output_path,
)
from raptar.config import ConfigRepository, RaptarConfig
from raptar.constants import APP_NAME, DEFAULT_ARCHIVE_NAME
from raptar.ecosystems import EcosystemRepository
from raptar.errors import RaptarError
from raptar.logger_config import setup_logging
from raptar.rules.sources import RuleSourceOptions, build_rule_index
from raptar.tui import ArchiveConsoleUI
from raptar.walker import WalkOptions, WalkResult, collect_files


def _load_config(repository: ConfigRepository) -> RaptarConfig:
    try:
        return repository.load()
    except RaptarError as exc:
        raise click.ClickException(str(exc))


def _resolve_format(value: str | None, config: RaptarConfig) -> ArchiveFormat:
    fallback = config.defaults.format or ArchiveFormat.TAR_GZ.value
    return ArchiveFormat.parse(value or fallback)


def _exclude_output(
    result: WalkResult, output: Path, ui: ArchiveConsoleUI, quiet: bool
) -> WalkResult:
    trimmed = result.without(output.resolve())
    if len(trimmed.entries) < len(result.entries) and not quiet:
        ui.render_output_excluded(output)
    return trimmed


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(__version__, prog_name=APP_NAME)
def cli() -> None:
    """Archive directories while honoring gitignore-style rules."""


@cli.command(help="Create an archive of PATH, or preview what it would contain.")
@click.argument(
    "path",
    required=False,
    default=".",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
)
@click.option("-o", "--output", type=click.Path(dir_okay=False, path_type=Path))
@click.option(
    "-f",
    "--format",
    "fmt",
    type=click.Choice(FORMAT_CHOICES, case_sensitive=False),
    default=None,
    help="Archive format (default: tar.gz or the configured default).",
)
@click.option("-p", "--preview", is_flag=True, help="List files without archiving.")
@click.option("-s", "--size", is_flag=True, help="Show file sizes in the listing.")
@click.option(
    "--with-exclude", multiple=True, metavar="PATTERN", help="Extra exclude pattern."
)
@click.option(
    "--with-include", multiple=True, metavar="PATTERN", help="Force-include pattern."
)
@click.option(
    "--with-ignorefile", multiple=True, metavar="FILE", help="Extra ignore file."
)
@click.option(
    "--without-ignorefile",
    multiple=True,
    metavar="NAME",
    help="Skip one ignore file by name.",
)
@click.option(
    "--without-ignorefiles",
    is_flag=True,
    help="Skip the root and configured ignore files.",
)
@click.option(
    "--without-exclude-always", is_flag=True, help="Skip configured always_exclude."
)
@click.option(
    "--without-include-always", is_flag=True, help="Skip configured always_include."
)
@click.option(
    "--with-ecosystem",
    multiple=True,
    metavar="NAME",
    help="Apply a bundled gitignore template.",
)
@click.option("--dereference", is_flag=True, help="Follow symlinks.")
@click.option(
    "--preserve-owner", is_flag=True, help="Keep file uid/gid in tar archives."
)
@click.option(
    "-r", "--reproducible", is_flag=True, help="Zero timestamps and ownership."
)
@click.option("-q", "--quiet", is_flag=True, help="Only print errors.")
@click.option("-v", "--verbose", is_flag=True, help="Show rules and excluded files.")
def archive(
    path: Path,
    output: Path | None,
    fmt: str | None,
    preview: bool,
    size: bool,
    with_exclude: tuple[str, ...],
    with_include: tuple[str, ...],
    with_ignorefile: tuple[str, ...],
    without_ignorefile: tuple[str, ...],
    without_ignorefiles: bool,
    without_exclude_always: bool,
    without_include_always: bool,
    with_ecosystem: tuple[str, ...],
    dereference: bool,
    preserve_owner: bool,
    reproducible: bool,
    quiet: bool,
    verbose: bool,
) -> None:
    setup_logging(verbose=verbose, quiet=quiet)
    ui = ArchiveConsoleUI(Console())
    repository = ConfigRepository()
    config = _load_config(repository)

    if not quiet and not preview and not repository.exists():
        ui.render_defaults_notice()

    reproducible = reproducible or config.defaults.reproducible
    dereference = dereference or config.defaults.dereference
    preserve_owner = preserve_owner or config.defaults.preserve_owner
    archive_format = _resolve_format(fmt, config)

    root = path.resolve()
    output_path = output or default_output_path(
        root, archive_format, DEFAULT_ARCHIVE_NAME
    )

    if not quiet:
        ui.render_scanning()

    sources = RuleSourceOptions(
        with_exclude=with_exclude,
        with_include=with_include,
        with_ignorefiles=with_ignorefile,
        without_ignorefiles=without_ignorefile,
        skip_ignore_files=without_ignorefiles,
        without_exclude_always=without_exclude_always,
        without_include_always=without_include_always,
        ecosystems=with_ecosystem,
    )
    try:
        index = build_rule_index(
            root, sources, config, EcosystemRepository(repository.ecosystems_dir)
        )
        if verbose:
            ui.render_rules(index.rules, root)
        result = collect_files(
            root, index, WalkOptions(dereference=dereference, reproducible=reproducible)
        )
    except RaptarError as exc:
        raise click.ClickException(f"Fatal: {exc}")

    if not preview:
        result = _exclude_output(result, output_path, ui, quiet)

    if not result.entries:
        ui.render_no_files()
        return

    if preview or size:
        ui.render_preview(result, show_size=size, verbose=verbose)
        if preview:
            return

    if not quiet:
        ui.render_creating(output_path, len(result.entries))

    options = ArchiveOptions(reproducible=reproducible, preserve_owner=preserve_owner)
    try:
        if quiet or verbose:
            create_archive(output_path, result.entries, archive_format, options)
        else:
            with ui.progress(len(result.entries)) as advance:
                create_archive(
                    output_path, result.entries, archive_format, options, advance
                )
    except RaptarError as exc:
        raise click.ClickException(str(exc))

    if not quiet:
        ui.render_done(result.total_size, output_path.stat().st_size)


@cli.group("config", help="Show, create or edit the config file.")
def config_group() -> None:
    pass


@config_group.command("show", help="Show the effective configuration.")
def config_show() -> None:
    ui = ArchiveConsoleUI(Console())
    repository = ConfigRepository()
    config = _load_config(repository)
    ui.render_config(config, repository.config_path, repository.exists())


@config_group.command("init", help="Write a commented default config file.")
def config_init() -> None:
    ui = ArchiveConsoleUI(Console())
    repository = ConfigRepository()
    try:
        path = repository.init()
    except RaptarError as exc:
        raise click.ClickException(str(exc))
    ui.render_config_saved(path, "Created config file")


@config_group.command("edit", help="Open the config file in $EDITOR.")
def config_edit() -> None:
    ui = ArchiveConsoleUI(Console())
    repository = ConfigRepository()
    try:
        path = repository.edit()
    except RaptarError as exc:
        raise click.ClickException(str(exc))
    ui.render_config_saved(path, "Opened")


@cli.group("ecosystems", help="Browse bundled gitignore templates.")
def ecosystems_group() -> None:
    pass


@ecosystems_group.command("list", help="List available ecosystem templates.")
def ecosystems_list() -> None:
    ui = ArchiveConsoleUI(Console())
    repository = EcosystemRepository(ConfigRepository().ecosystems_dir)
    ui.render_ecosystems(repository.list_ecosystems(), repository.manifest())


def main() -> int:
    try:
        cli(standalone_mode=False)
    except click.exceptions.Exit as exc:
        code = exc.exit_code
        return code if isinstance(code, int) else 1
    except click.ClickException as exc:
        exc.show()
        return exc.exit_code
    except click.exceptions.Abort:
        click.echo("Aborted!", err=True)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
