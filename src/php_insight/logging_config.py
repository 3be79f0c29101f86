"""
Logging configuration for PHP Insight.

Routes all package logging through a rich handler on stderr so that report
output on stdout stays machine-readable. An optional log file keeps a plain
text record of a run, including the remediation intents of ``--fix``.
"""

import logging
from pathlib import Path
from typing import Optional, Union

from rich.console import Console
from rich.logging import RichHandler

PACKAGE_LOGGER = "php_insight"

LOG_FILE_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def console_level(verbose: bool = False, quiet: bool = False) -> int:
    """DEBUG when verbose, ERROR when quiet (quiet wins), WARNING otherwise."""
    if quiet:
        return logging.ERROR
    if verbose:
        return logging.DEBUG
    return logging.WARNING


def setup_logging(
    verbose: bool = False, quiet: bool = False, log_file: Optional[Union[str, Path]] = None
) -> logging.Logger:
    """
    Install the stderr handler and, when ``log_file`` is given, a file handler.

    The file records INFO and above even when the console only shows
    warnings, so a ``--fix`` run leaves its list of intended changes behind.

    Returns:
        The php_insight package logger
    """
    stderr_level = console_level(verbose, quiet)
    stderr_handler = RichHandler(
        console=Console(stderr=True),
        rich_tracebacks=True,
        tracebacks_show_locals=verbose,
        markup=False,
        show_time=True,
        show_path=verbose,
    )
    stderr_handler.setLevel(stderr_level)
    handlers: list[logging.Handler] = [stderr_handler]

    level = stderr_level
    if log_file is not None:
        level = min(stderr_level, logging.INFO)
        file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(LOG_FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        handlers.append(file_handler)

    # force=True so repeated CLI invocations in one process pick up new levels
    logging.basicConfig(level=level, format="%(message)s", datefmt="[%X]", handlers=handlers, force=True)

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)
    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Logger namespaced under ``php_insight`` (the package logger for None)."""
    if name is None:
        return logging.getLogger(PACKAGE_LOGGER)
    if not name.startswith(PACKAGE_LOGGER):
        name = f"{PACKAGE_LOGGER}.{name}"
    return logging.getLogger(name)
