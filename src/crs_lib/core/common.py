# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
General utility functions for the crs library.

This module provides helpers for YAML output and for inspecting
filesystem permissions of paths handled by the execution engine.
"""

import os
import stat
from functools import lru_cache

import yaml

from .logger import get_logger

logger = get_logger(__name__)


@lru_cache(maxsize=1)
def load_yaml_dumper() -> type[yaml.Dumper]:
    """Return the fastest available YAML dumper (CDumper if possible)."""
    try:
        from yaml import CDumper as Dumper  # type: ignore[attr-defined]

        logger.debug("Loaded YAML CDumper.")
    except ImportError:
        from yaml import Dumper

        logger.debug("Loaded default YAML dumper.")
    return Dumper


def is_executable(path: str) -> bool:
    """Return True if `path` is a regular file the current user may execute."""
    return os.path.isfile(path) and os.access(path, os.X_OK)


def is_readable(path: str) -> bool:
    """Return True if `path` exists and the current user may read it."""
    return os.path.exists(path) and os.access(path, os.R_OK)


def is_writable_dir(directory: str) -> bool:
    """
    Return True if files can be created in `directory`.

    A directory with the sticky bit set is considered writable.
    """
    if os.access(directory, os.W_OK):
        return True

    try:
        return bool(os.stat(directory).st_mode & stat.S_ISVTX)
    except OSError:
        return False
