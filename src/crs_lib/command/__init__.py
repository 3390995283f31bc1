# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Construction of shell command lines from task options.
"""

from .builder import CommandBuilder, quote_argument, replace_quotes

__all__ = [
    "CommandBuilder",
    "quote_argument",
    "replace_quotes",
]
