# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

import logging
import os

from rich.console import Console
from rich.logging import RichHandler

from .config import CFG


def is_debug_mode() -> bool:
    """Return True if crs runs in debug mode."""
    return os.environ.get(CFG.env_vars.debug_mode) is not None


def get_logger(name: str, show_time: bool = False) -> logging.Logger:
    """
    Return a crs logger writing into stderr through rich.

    The execution log of a job goes to stdout, so diagnostics never
    interleave with the output of the executed commands. In debug mode,
    every record also shows time and the module that emitted it.
    Repeated calls for the same name do not attach additional handlers.
    """
    debug_mode = is_debug_mode()
    level = logging.DEBUG if debug_mode else logging.INFO

    logger = logging.getLogger(name)
    logger.setLevel(level)
    if logger.handlers:
        return logger

    handler = RichHandler(
        console=Console(stderr=True),
        level=level,
        rich_tracebacks=True,
        show_path=debug_mode,
        show_time=show_time or debug_mode,
        log_time_format=CFG.date_formats.standard,
        tracebacks_width=None,
        tracebacks_code_width=None,
    )
    logger.addHandler(handler)
    logger.propagate = False

    return logger
