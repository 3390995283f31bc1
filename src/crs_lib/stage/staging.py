# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

import os
import random

from crs_lib.core.config import CFG
from crs_lib.core.error import CRSFatalError
from crs_lib.core.logger import get_logger
from crs_lib.process.log import ExecutionLog

logger = get_logger(__name__)


class OutputStaging:
    """
    Staging transaction for the output files of a single task.

    While the command of a task is being built, each output file is mapped
    to a unique temporary name which the command writes to instead. After
    the command finishes, the transaction is either committed (temporary
    files are renamed to their real names) or rolled back (temporary files
    are deleted). A transaction can only be finished once.

    Attributes:
        log (ExecutionLog): Log receiving the commit and rollback messages.
    """

    def __init__(self, log: ExecutionLog):
        self.log = log
        # real output path -> staged temporary path
        self._staged: dict[str, str] = {}
        # real paths renamed into place by commit
        self.committed: list[str] = []
        self._finished = False

    def __contains__(self, real: str) -> bool:
        return real in self._staged

    def __len__(self) -> int:
        return len(self._staged)

    def get(self, real: str) -> str | None:
        """
        Return the temporary path staged for `real`, or None if it is not staged.
        """
        return self._staged.get(real)

    def items(self) -> list[tuple[str, str]]:
        """Return (real, temporary) pairs in the order they were staged."""
        return list(self._staged.items())

    def stage(self, real: str) -> str:
        """
        Map `real` to a temporary path which does not exist yet.

        Staging an already staged path returns its existing temporary path.

        Args:
            real (str): The final path of the output file.

        Returns:
            str: The temporary path the output should be written to.

        Raises:
            CRSFatalError: If the transaction is already finished or if no
                unused temporary name could be generated.
        """
        self._ensureOpen()
        if (temp := self._staged.get(real)) is not None:
            return temp

        for _ in range(CFG.resolver.temp_name_attempts):
            temp = f"{real}.{random.randint(0, CFG.resolver.temp_suffix_max)}"
            if not os.path.lexists(temp):
                logger.debug(f"Staging output '{real}' as '{temp}'.")
                self._staged[real] = temp
                return temp

        raise CRSFatalError("Unable to produce random tempname!")

    def missing(self) -> list[str]:
        """
        Return the real paths whose temporary files do not exist.
        """
        return [real for real, temp in self._staged.items() if not os.path.exists(temp)]

    def commit(self) -> None:
        """
        Rename all temporary files to their real names.

        An existing file at the real path is replaced. If a temporary file
        cannot be renamed, it and all temporary files not renamed yet are
        deleted. Files renamed before the failure stay in place.

        Raises:
            CRSFatalError: If a temporary file cannot be renamed.
        """
        self._ensureOpen()
        self._finished = True

        for real, temp in self.items():
            self.log.print(f"renaming '{temp}' to '{real}'")
            try:
                os.replace(temp, real)
            except OSError as e:
                self._discard()
                raise CRSFatalError(f"Cannot rename '{temp}' to '{real}': {e}") from e
            del self._staged[real]
            self.committed.append(real)

    def rollback(self) -> None:
        """
        Delete all temporary files of the transaction.

        Temporary files which were never created are skipped.

        Raises:
            CRSFatalError: If an existing temporary file cannot be deleted.
        """
        self._ensureOpen()
        self._finished = True
        self._discard()

    def _discard(self) -> None:
        for real, temp in self.items():
            self.log.print(f"deleting '{temp}'")
            try:
                os.unlink(temp)
            except FileNotFoundError:
                logger.debug(f"Temporary file '{temp}' for '{real}' was never created.")
            except OSError as e:
                raise CRSFatalError(f"Cannot delete '{temp}': {e}") from e
            del self._staged[real]

    def _ensureOpen(self) -> None:
        if self._finished:
            raise CRSFatalError("Output staging has already been finished.")
