# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

import os
import re
from collections.abc import Iterable

from crs_lib.core.logger import get_logger
from crs_lib.job import Option
from crs_lib.resolve import FileResolver

logger = get_logger(__name__)

# characters which require an argument to be enclosed in double quotes
_NEEDS_QUOTING = re.compile(r"[ \[\]\(\)]")


def replace_quotes(text: str, posix: bool | None = None) -> str:
    """
    Neutralize double quotes in a command-line argument.

    On a POSIX shell, the quotes are escaped with a backslash. Otherwise,
    they are removed.

    Args:
        text (str): The argument.
        posix (bool | None): Whether the target shell is a POSIX shell.
            Detected from the current platform if not provided.

    Returns:
        str: The argument with neutralized double quotes.
    """
    if posix is None:
        posix = os.name == "posix"

    if posix:
        return text.replace('"', '\\"')
    return text.replace('"', "")


def quote_argument(text: str, posix: bool | None = None) -> str:
    """
    Make a single argument safe for the shell.

    Arguments containing spaces, brackets or parentheses are enclosed in
    double quotes with embedded double quotes neutralized and '$' escaped.
    Other arguments only get their double quotes neutralized.
    """
    if _NEEDS_QUOTING.search(text):
        if '"' in text:
            text = replace_quotes(text, posix)
        text = text.replace("$", "\\$")
        return f'"{text}"'

    if '"' in text:
        return replace_quotes(text, posix)
    return text


class CommandBuilder:
    """
    Converts the ordered options of a task into a single shell command line.

    File references are resolved using the provided FileResolver which
    also registers the task's output files in its staging transaction.
    """

    def __init__(self, resolver: FileResolver, posix: bool | None = None):
        """
        Initialize the builder.

        Args:
            resolver (FileResolver): Resolver for options with a file type.
            posix (bool | None): Whether the command targets a POSIX shell.
                Detected from the current platform if not provided.
        """
        self._resolver = resolver
        self._posix = posix

    def build(self, options: Iterable[Option | str]) -> str:
        """
        Build the command line from the options.

        Args:
            options (Iterable[Option | str]): The options of the task in order.
                A plain string is treated as a literal argument.

        Returns:
            str: The command line.

        Raises:
            CRSFatalError: If a file reference cannot be resolved.
        """
        cmd = ""

        for option in options:
            if isinstance(option, str):
                option = Option(option)

            text = option.content
            if option.filetype:
                # resolved paths are always quoted
                text = self._resolver.resolve(option.content, option.filetype)
            elif option.isVerbatim():
                # trusted content, injected as is
                cmd += f" {text} "
                continue

            part = quote_argument(text, self._posix)
            if cmd.endswith("="):
                cmd += part
            else:
                cmd += f" {part}"

        cmd = cmd.removeprefix(" ")
        logger.debug(f"Built command: {cmd}")
        return cmd
