# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

from enum import Enum


class TaskState(Enum):
    """
    State of a single task of a job.

    A task starts as PENDING, becomes RUNNING once its command is built,
    and ends either COMMITTED (outputs renamed into place) or
    ROLLED_BACK (staged outputs deleted).
    """

    PENDING = 1
    RUNNING = 2
    COMMITTED = 3
    ROLLED_BACK = 4

    def __str__(self) -> str:
        """
        Return the lowercase string representation of the enum variant.

        Returns:
            str: The name of the state in lowercase.
        """
        return self.name.lower()


class JobState(Enum):
    """
    State of the whole job execution.
    """

    PENDING = 1
    RUNNING = 2
    ALL_COMMITTED = 3
    ABORTED = 4

    def __str__(self) -> str:
        return self.name.lower()
