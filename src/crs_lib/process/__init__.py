# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Execution of command lines and capturing of their output.

This module defines `ProcessRunner`, which runs a command through the
shell in a configurable encoding, and `ExecutionLog`, the ordered record of
everything an execution engine reported.
"""

from .log import ExecutionLog
from .runner import ProcessRunner

__all__ = [
    "ExecutionLog",
    "ProcessRunner",
]
