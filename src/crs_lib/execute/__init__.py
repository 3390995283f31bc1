# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Execution of crs jobs.

This module defines the `Executor` class, which selects the tasks of a job
by type and executes them one after another: it builds each command line,
runs it, verifies the produced outputs, and commits or rolls back the
staged output files. Execution stops at the first failed task.
"""

from .executor import Executor
from .report import ExecutionReport, TaskResult

__all__ = [
    "ExecutionReport",
    "Executor",
    "TaskResult",
]
