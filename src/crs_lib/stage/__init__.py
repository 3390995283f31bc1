# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Staging of task outputs.

This module defines `OutputStaging`, the per-task transaction that
redirects output files to unique temporary names and later commits them
into place or rolls them back.
"""

from .staging import OutputStaging

__all__ = [
    "OutputStaging",
]
