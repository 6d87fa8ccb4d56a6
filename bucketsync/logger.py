# bucketsync Logging
# Diagnostic logging through Rich on stderr, optionally mirrored to a file

import logging
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "bucketsync"
FILE_FORMAT = "%(asctime)s %(levelname)-8s %(threadName)s %(name)s: %(message)s"


def setup_logging(
    *,
    verbose: bool = False,
    log_file: Optional[str] = None,
    console: Optional[Console] = None,
) -> logging.Logger:
    """
    Configure the ``bucketsync`` logger hierarchy.

    Warnings and errors always reach stderr; debug detail only with
    ``verbose``. Calling this again replaces the previous handlers.

    Args:
        verbose: Show debug messages on the console.
        log_file: Optional path of a log file that receives everything
            from INFO upwards (DEBUG when verbose).
        console: Rich console to log to (default: a new stderr console).

    Returns:
        The configured package logger.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG)
    logger.propagate = False

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    rich_handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        show_time=verbose,
        markup=False,
    )
    rich_handler.setLevel(logging.DEBUG if verbose else logging.WARNING)
    rich_handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(rich_handler)

    if log_file:
        path = Path(log_file).expanduser()
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(path, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
        logger.addHandler(file_handler)

    return logger
