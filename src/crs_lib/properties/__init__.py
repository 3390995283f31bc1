# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
State enumerations for crs jobs and tasks.

This module collects the states a job and its individual tasks pass
through while being executed by the crs engine.
"""

from .states import JobState, TaskState

__all__ = [
    "JobState",
    "TaskState",
]
