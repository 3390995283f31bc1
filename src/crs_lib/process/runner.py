# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

import codecs
import subprocess

from crs_lib.core.config import CFG
from crs_lib.core.error import CRSFatalError
from crs_lib.core.logger import get_logger

from .log import ExecutionLog

logger = get_logger(__name__, show_time=True)


class ProcessRunner:
    """
    Executes command lines through the shell and captures their output.

    Standard output and standard error of the command are merged, decoded
    line by line, mirrored to the log's output stream, and recorded in the
    execution log.
    """

    def __init__(self, log: ExecutionLog, shell: str | None = None):
        """
        Initialize the runner.

        Args:
            log (ExecutionLog): Log receiving messages and the command output.
            shell (str | None): Shell used to interpret the command lines.
                Defaults to the configured shell.
        """
        self._log = log
        self._shell = shell or CFG.runner.shell
        # exit code of the last executed command
        self.exit_code: int | None = None

    def run(self, command: str, encoding: str | None = None) -> tuple[bool, list[str]]:
        """
        Execute a command line and wait for it to finish.

        The command is encoded into `encoding` before it is passed to the shell,
        so that non-ASCII arguments reach programs expecting a specific
        encoding even if the locale of the host differs. The output of the
        command is decoded using the same encoding.

        Args:
            command (str): The command line to execute.
            encoding (str | None): Encoding used for the command and its output.
                Defaults to the configured encoding (UTF-8).

        Returns:
            tuple[bool, list[str]]: Whether the command exited with zero
                and the captured output lines.

        Raises:
            CRSFatalError: If the encoding is unusable or the shell cannot be started.
        """
        self.exit_code = None
        encoding = encoding or CFG.runner.default_encoding
        try:
            codecs.lookup(encoding)
        except LookupError as e:
            raise CRSFatalError(f"Unknown command encoding '{encoding}'.") from e

        self._log.print(f"running: \n{command}\n\n")

        try:
            encoded = command.encode(encoding)
        except UnicodeEncodeError as e:
            raise CRSFatalError(
                f"Command cannot be encoded using '{encoding}': {e}"
            ) from e

        logger.debug(f"Executing command using '{self._shell}' in '{encoding}'.")
        try:
            process = subprocess.Popen(
                [self._shell, "-c", encoded],
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
            )
        except OSError as e:
            raise CRSFatalError(f"Cannot execute command: {e}") from e

        lines = []
        assert process.stdout is not None
        try:
            with process.stdout:
                for raw in process.stdout:
                    line = raw.decode(encoding, errors="replace")
                    self._log.mirror(line)

                    line = line.removesuffix("\n")
                    lines.append(line)
                    self._log.append(line)
        except BaseException:
            logger.debug(f"Killing command with PID {process.pid}.")
            process.kill()
            raise
        finally:
            self.exit_code = process.wait()

        if self.exit_code != 0:
            self._log.print(f"Task exited with code {self.exit_code}")
            return False, lines

        return True, lines
