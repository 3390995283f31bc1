# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Exception types used throughout crs.

This module separates recoverable errors (a job file that cannot be loaded,
a task that failed) from fatal errors which signal that the job description
or the environment it is executed in is unusable. Each exception carries an
associated exit code used by crs commands to report failures consistently.
"""

from crs_lib.core.config import CFG


class CRSError(Exception):
    """Common exception type for all recoverable crs errors."""

    exit_code = CFG.exit_codes.default


class CRSJobLoadError(CRSError):
    """Raised when a job description cannot be read or parsed."""

    pass


class CRSTaskError(CRSError):
    """
    Raised when a task of the job fails.

    A task fails if its command exits with a non-zero code or if it
    claims success but does not produce all of its output files.
    """

    exit_code = CFG.exit_codes.task_failed


class CRSFatalError(Exception):
    """
    Raised when the job description or the execution environment is unusable.

    Should never be caught by the execution engine itself.
    """

    exit_code = CFG.exit_codes.fatal
