# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

from datetime import datetime
from pathlib import Path
from typing import Self, TextIO

from crs_lib.command import CommandBuilder
from crs_lib.core.config import CFG
from crs_lib.core.error import CRSError, CRSFatalError, CRSJobLoadError, CRSTaskError
from crs_lib.core.logger import get_logger
from crs_lib.job import Job, Task
from crs_lib.process import ExecutionLog, ProcessRunner
from crs_lib.properties.states import JobState, TaskState
from crs_lib.resolve import FileResolver
from crs_lib.stage import OutputStaging

from .report import ExecutionReport, TaskResult

logger = get_logger(__name__, show_time=True)


class Executor:
    """
    Executes the tasks of a crs job one after another.

    For every selected task, the Executor:
      - Builds the command line, staging output files under temporary names
      - Runs the command and captures its output
      - Checks that the command produced all of its output files
      - Renames the outputs into place on success or deletes them on failure

    The execution stops at the first failed task. Outputs of the tasks
    that succeeded before it are kept.
    """

    def __init__(self, job: Job, stream: TextIO | None = None):
        """
        Initialize a new Executor for a loaded job.

        Args:
            job (Job): The job to execute.
            stream (TextIO | None): Stream the execution log is mirrored to.
                Defaults to the standard output.
        """
        self._job = job
        self._log = ExecutionLog(stream)
        self._runner = ProcessRunner(self._log)
        self._filter: str | None = None
        self._report: ExecutionReport | None = None

    @classmethod
    def fromSource(
        cls, source: str | Path | None, stream: TextIO | None = None
    ) -> Self | None:
        """
        Create an Executor from a string containing job XML or a path to a job file.

        Args:
            source (str | Path | None): The job XML or path to it.
            stream (TextIO | None): Stream the execution log is mirrored to.

        Returns:
            Executor | None: The Executor or None if the job could not be loaded.

        Raises:
            CRSFatalError: If no job is provided.
        """
        try:
            job = Job.fromSource(source)
        except CRSJobLoadError as e:
            logger.error(e)
            return None

        return cls(job, stream)

    @property
    def job(self) -> Job:
        """The job executed by this Executor."""
        return self._job

    def execute(self, task_filter: str | None = None) -> bool:
        """
        Execute all tasks of the job with the given type.

        Args:
            task_filter (str | None): Type of the tasks to execute.
                Defaults to the configured filter ('encoding').

        Returns:
            bool: True if all selected tasks succeeded (or none was selected),
                False if a task failed.

        Raises:
            CRSFatalError: If the job cannot be executed in the current environment.
        """
        if task_filter is None:
            task_filter = CFG.executor.default_filter
        self._filter = task_filter
        tasks = self._job.tasksOfType(self._filter)
        logger.debug(f"Selected {len(tasks)} task(s) of type '{self._filter}'.")

        self._report = ExecutionReport(
            self._filter,
            selected=len(tasks),
            job_state=JobState.RUNNING,
            start_time=datetime.now(),
        )

        try:
            for index, task in enumerate(tasks, start=1):
                result = TaskResult(index, task.type)
                self._report.tasks.append(result)
                self._executeTask(task, result, len(tasks))
        except CRSTaskError as e:
            logger.error(e)
            self._finishReport(JobState.ABORTED)
            return False
        except BaseException:
            self._finishReport(JobState.ABORTED)
            raise

        self._finishReport(JobState.ALL_COMMITTED)
        return True

    def getOutput(self) -> list[str]:
        """
        Return the informational output of the Executor and the output
        of the executed commands in the order it was emitted.
        """
        return self._log.lines()

    def getResults(self) -> list[TaskResult]:
        """
        Return the results of the tasks started by the last execution.
        """
        return list(self._report.tasks) if self._report else []

    def writeReport(self, file: Path) -> None:
        """
        Write the report of the last execution into a YAML file.

        Raises:
            CRSError: If the job has not been executed yet
                or the file cannot be written.
        """
        if not self._report:
            raise CRSError("The job has not been executed yet.")

        self._report.toFile(file)

    def _executeTask(self, task: Task, result: TaskResult, total: int) -> None:
        """
        Build, run, and commit or roll back a single task.

        Raises:
            CRSTaskError: If the task failed. Its staged outputs are deleted.
            CRSFatalError: If the task cannot be executed or its outputs cannot
                be renamed into place. Outputs which were not renamed are deleted.

        Any other exception also deletes the staged outputs before propagating.
        """
        staging = OutputStaging(self._log)
        builder = CommandBuilder(FileResolver(staging))
        result.state = TaskState.RUNNING

        try:
            result.command = builder.build(task.options)
            self._log.print(f"now executing task {result.index} of {total}")
            successful, _ = self._runner.run(result.command, task.encoding)
            result.exit_code = self._runner.exit_code
        except BaseException:
            self._rollback(staging, result)
            raise

        # the command may claim success without producing its outputs
        if successful:
            for real in staging.missing():
                self._log.print(f"output file missing: {real}")
                result.missing_outputs.append(real)
                successful = False

        if not successful:
            self._rollback(staging, result)
            raise CRSTaskError(f"Task {result.index} of {total} ('{task.type}') failed.")

        try:
            staging.commit()
        except CRSFatalError:
            # outputs renamed before the failure stay in place
            result.state = TaskState.ROLLED_BACK
            raise
        finally:
            result.committed_outputs = list(staging.committed)
        result.state = TaskState.COMMITTED

    def _rollback(self, staging: OutputStaging, result: TaskResult) -> None:
        staging.rollback()
        result.state = TaskState.ROLLED_BACK

    def _finishReport(self, state: JobState) -> None:
        assert self._report is not None
        self._report.job_state = state
        self._report.completion_time = datetime.now()
