# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Resolution of file references used in crs tasks.

This module classifies file references by their role (executable, input,
config, output), checks them against the filesystem, and provides the
ASCII transliteration used as a fallback when looking up input files.
"""

from .file_type import FileType
from .resolver import FileResolver
from .transliterator import asciify, asciify_name

__all__ = [
    "FileResolver",
    "FileType",
    "asciify",
    "asciify_name",
]
