# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Core implementation of the crs job-execution engine.

This package turns tracker XML job descriptions into a sequence of shell
invocations. It resolves typed file references, builds safely quoted command
lines, runs them while capturing their output, and stages output files so
that partially written results never replace final ones.
"""

from .crs import __version__, cli

__all__ = [
    "__version__",
    "cli",
    "command",
    "core",
    "execute",
    "job",
    "process",
    "properties",
    "resolve",
    "stage",
]
