# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Enumeration of the roles a file reference can have in a crs task.
"""

from enum import Enum
from typing import Self

from crs_lib.core.error import CRSFatalError


class FileType(Enum):
    """
    Role of a file referenced by a task option.
    """

    EXE = "exe"
    IN = "in"
    CFG = "cfg"
    OUT = "out"

    def __str__(self):
        return self.value

    @classmethod
    def fromStr(cls, s: str) -> Self:
        """
        Convert a string to the corresponding FileType enum variant.

        Args:
            s (str): String representation of the file type, as used in job files.

        Returns:
            FileType variant.

        Raises:
            CRSFatalError if the string corresponds to no FileType.
        """
        try:
            return cls(s)
        except ValueError:
            raise CRSFatalError(f"Unknown file type in jobfile: {s}")

    def mustExist(self) -> bool:
        """Return True if files of this type are read by the command."""
        return self in (FileType.IN, FileType.CFG)
