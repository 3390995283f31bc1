# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab


import sys
from pathlib import Path
from typing import NoReturn

import click
from click_help_colors import HelpColorsCommand
from click_option_group import optgroup

from crs_lib.core.config import CFG
from crs_lib.core.error import CRSError, CRSFatalError
from crs_lib.core.logger import get_logger

from .executor import Executor

logger = get_logger(__name__)


@click.command(
    short_help="Execute the tasks of a job file.",
    help=f"""
Execute the tasks of a tracker XML job file.

{click.style("JOBFILE", fg="green")}   Path to the XML job file.

Output files are written under temporary names and only renamed into place
once their task succeeds. Execution stops at the first failed task.

Example: `{CFG.binary_name} run job.xml --type remux --report report.yaml`
""",
    cls=HelpColorsCommand,
    help_options_color="bright_blue",
)
@click.argument(
    "jobfile",
    type=click.Path(exists=False, dir_okay=False, path_type=Path),
    metavar=click.style("JOBFILE", fg="green"),
)
@optgroup.group(f"{click.style('Execution settings', fg='yellow')}")
@optgroup.option(
    "--type",
    "-t",
    "task_type",
    type=str,
    default=None,
    help=f"Type of the tasks to execute. Defaults to '{CFG.executor.default_filter}'.",
)
@optgroup.group(f"{click.style('Reporting', fg='yellow')}")
@optgroup.option(
    "--report",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write a YAML report of the executed tasks into this file.",
)
def run(jobfile: Path, task_type: str | None, report: Path | None) -> NoReturn:
    """
    Load a job file and execute its tasks.

    Exits:
        0 if all selected tasks succeeded,
        1 if a task failed,
        91 if the job file could not be loaded or the report could not be written,
        92 if the job or the environment is unusable,
        99 on an unexpected error.
    """
    try:
        executor = Executor.fromSource(jobfile)
        if executor is None:
            raise CRSError(f"Unable to load job file '{jobfile}'.")

        successful = executor.execute(task_type)

        if report:
            executor.writeReport(report)

        if not successful:
            logger.error("Job execution failed.")
            sys.exit(CFG.exit_codes.task_failed)

        logger.info("All tasks executed successfully.")
        sys.exit(0)
    except CRSFatalError as e:
        logger.error(f"Fatal error: {e}")
        sys.exit(e.exit_code)
    except CRSError as e:
        logger.error(e)
        sys.exit(e.exit_code)
    except Exception as e:
        logger.critical(e, exc_info=True, stack_info=True)
        sys.exit(CFG.exit_codes.unexpected_error)
