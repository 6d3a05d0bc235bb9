import logging

from rich.console import Console
from rich.logging import RichHandler

from raptar.constants import APP_NAME


def resolve_level(verbose: bool = False, quiet: bool = False) -> int:
    if quiet:
        return logging.ERROR
    if verbose:
        return logging.INFO
    return logging.WARNING


def setup_logging(verbose: bool = False, quiet: bool = False) -> logging.Logger:
    """Configure the application logger to write through rich on stderr.

    Safe to call more than once: previously installed handlers are replaced.
    """
    level = resolve_level(verbose=verbose, quiet=quiet)
    logger = logging.getLogger(APP_NAME)
    logger.setLevel(level)

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()

    handler = RichHandler(
        console=Console(stderr=True),
        show_time=False,
        show_path=False,
        markup=False,
        rich_tracebacks=False,
    )
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    return logger
