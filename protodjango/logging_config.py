"""Logging setup shared by the generator modules.

Modules call ``get_logger(__name__)``; only the CLI calls
``setup_logging`` to attach a handler.
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "protodjango"


def get_logger(name: str) -> logging.Logger:
    """Return a logger namespaced under the package logger."""
    if name == LOGGER_NAME or name.startswith(LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{LOGGER_NAME}.{name}")


def setup_logging(verbose: bool = False) -> logging.Logger:
    """Attach a rich stderr handler to the package logger.

    Calling it again replaces the previous handler instead of stacking.
    """
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        show_time=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    return logger
