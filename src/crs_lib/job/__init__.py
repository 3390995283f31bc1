# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Job descriptions executed by crs.

This module defines the immutable job model (job, task groups, tasks and
their options) and its loading from tracker XML job files.
"""

from .job import Job, Option, Task, TaskGroup

__all__ = [
    "Job",
    "Option",
    "Task",
    "TaskGroup",
]
