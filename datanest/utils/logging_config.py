"""Logging setup for datanest.

Library modules only create loggers; handlers are installed by
applications (the CLI calls ``setup_logging``).
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

LOG_FORMAT = "%(name)s: %(message)s"


def setup_logging(level: int = logging.WARNING) -> logging.Logger:
    """Configure concise logging for the ``datanest`` logger namespace.

    Records go to stderr through rich, so they never mix with command
    output on stdout.

    Args:
        level: Level for datanest loggers.

    Returns:
        The package logger.
    """
    logger = logging.getLogger("datanest")
    logger.setLevel(level)

    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        handler = RichHandler(
            console=Console(stderr=True),
            show_time=False,
            show_path=False,
        )
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)

    # h5py logs nothing useful at our levels
    logging.getLogger("h5py").setLevel(logging.ERROR)
    return logger
