# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

import os
import shutil

from crs_lib.core.common import is_executable, is_readable, is_writable_dir
from crs_lib.core.error import CRSFatalError
from crs_lib.core.logger import get_logger
from crs_lib.stage import OutputStaging

from .file_type import FileType
from .transliterator import asciify_name

logger = get_logger(__name__)


class FileResolver:
    """
    Resolves file references of task options according to their role.

    Executables are looked up in the search path, input and config files
    must be readable, and output files are redirected to temporary names
    registered in the task's staging transaction.

    All failures are fatal: they mean that the job cannot be executed
    in the current environment.
    """

    def __init__(self, staging: OutputStaging):
        """
        Initialize the resolver.

        Args:
            staging (OutputStaging): Staging transaction of the task being built.
        """
        self._staging = staging
        self._log = staging.log

    def resolve(self, name: str, filetype: str | FileType) -> str:
        """
        Resolve a file reference.

        Args:
            name (str): The file name as given in the job.
            filetype (str | FileType): Role of the file ('exe', 'in', 'cfg' or 'out').

        Returns:
            str: The path to use on the command line.

        Raises:
            CRSFatalError: If the file cannot be resolved.
        """
        if not isinstance(filetype, FileType):
            filetype = FileType.fromStr(filetype)

        if filetype == FileType.EXE:
            return self._resolveExecutable(name)

        # all other files must be given with absolute paths
        if not os.path.isabs(name):
            raise CRSFatalError(f"Non-absolute filename given: '{name}'!")

        if filetype.mustExist():
            return self._resolveInput(name)

        return self._resolveOutput(name)

    def _resolveExecutable(self, name: str) -> str:
        if is_executable(name):
            return name

        if (path := shutil.which(name)) is None:
            raise CRSFatalError(f"Executable {name} cannot be found!")
        if not is_executable(path):
            raise CRSFatalError(f"Executable {name} is not executable!")

        logger.debug(f"Executable '{name}' found at '{path}'.")
        return name

    def _resolveInput(self, name: str) -> str:
        if is_readable(name):
            return name

        # the file may be produced by an earlier option of the same command
        if (temp := self._staging.get(name)) is not None:
            logger.debug(f"Input file '{name}' is produced by this task as '{temp}'.")
            return temp

        # the file may have been stored under an ASCII-fied name
        ascii_name = asciify_name(name)
        if is_readable(ascii_name):
            logger.debug(f"Input file '{name}' found as '{ascii_name}'.")
            return ascii_name

        raise CRSFatalError(f"Fatal: File {ascii_name} is missing!")

    def _resolveOutput(self, name: str) -> str:
        # output files must not exist; if they do, they are deleted
        if os.path.lexists(name):
            self._log.print(f"Output file exists: '{name}', deleting file.")
            try:
                os.unlink(name)
            except OSError as e:
                logger.debug(f"Deleting '{name}' failed: {e}.")
            if os.path.lexists(name):
                raise CRSFatalError(f"Cannot delete '{name}'!")

        output_dir = os.path.dirname(name)
        if not os.path.isdir(output_dir):
            self._log.print(
                f"Output path '{output_dir}' does not exist, trying to create"
            )
            try:
                os.makedirs(output_dir, exist_ok=True)
            except OSError as e:
                logger.debug(f"Creating '{output_dir}' failed: {e}.")
            if not os.path.isdir(output_dir):
                raise CRSFatalError(f"Cannot create directory '{output_dir}'!")

        if not is_writable_dir(output_dir):
            raise CRSFatalError(f"Output path '{output_dir}' is not writable!")

        return self._staging.stage(name)
