# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Records of executed crs tasks.

`TaskResult` describes the outcome of a single task, `ExecutionReport`
collects the results of one execution of a job and exports them into a
YAML file, so that the outcome can be inspected after the engine exits.
"""

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

import yaml

from crs_lib.core.common import load_yaml_dumper
from crs_lib.core.config import CFG
from crs_lib.core.error import CRSError
from crs_lib.core.logger import get_logger
from crs_lib.properties.states import JobState, TaskState

logger = get_logger(__name__)

Dumper: type[yaml.Dumper] = load_yaml_dumper()


@dataclass
class TaskResult:
    """
    Outcome of a single task.
    """

    # Position of the task among the selected tasks (starting from 1).
    index: int
    # Type of the task.
    task_type: str
    # State of the task.
    state: TaskState = TaskState.PENDING
    # Command line executed for the task.
    command: str | None = None
    # Exit code of the command.
    exit_code: int | None = None
    # Real paths of outputs the command did not produce.
    missing_outputs: list[str] = field(default_factory=list)
    # Real paths of outputs renamed into place.
    committed_outputs: list[str] = field(default_factory=list)

    def toDict(self) -> dict[str, object]:
        """Return the result as a dict containing only basic types."""
        return {
            "index": self.index,
            "type": self.task_type,
            "state": str(self.state),
            "command": self.command,
            "exit_code": self.exit_code,
            "missing_outputs": list(self.missing_outputs),
            "committed_outputs": list(self.committed_outputs),
        }


@dataclass
class ExecutionReport:
    """
    Results of one execution of a job.
    """

    # Type of the tasks that were selected for execution.
    task_filter: str
    # Number of selected tasks.
    selected: int = 0
    # State of the execution.
    job_state: JobState = JobState.PENDING
    # Time the execution started.
    start_time: datetime | None = None
    # Time the execution finished.
    completion_time: datetime | None = None
    # Results of the tasks that were started.
    tasks: list[TaskResult] = field(default_factory=list)

    def toDict(self) -> dict[str, object]:
        """Return the report as a dict containing only basic types."""
        return {
            "filter": self.task_filter,
            "selected": self.selected,
            "job_state": str(self.job_state),
            "start_time": _format_time(self.start_time),
            "completion_time": _format_time(self.completion_time),
            "tasks": [task.toDict() for task in self.tasks],
        }

    def toFile(self, file: Path) -> None:
        """
        Export the report to a YAML file.

        Raises:
            CRSError: If the file cannot be written.
        """
        logger.debug(f"Writing execution report into '{file}'.")
        try:
            with file.open("w", encoding="utf-8") as output:
                yaml.dump(
                    self.toDict(),
                    output,
                    Dumper=Dumper,
                    default_flow_style=False,
                    sort_keys=False,
                    allow_unicode=True,
                )
        except OSError as e:
            raise CRSError(f"Cannot write execution report '{file}': {e}.") from e


def _format_time(time: datetime | None) -> str | None:
    return time.strftime(CFG.date_formats.standard) if time else None
