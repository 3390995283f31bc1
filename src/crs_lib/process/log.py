# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

import sys
from collections.abc import Iterator
from typing import TextIO


class ExecutionLog:
    """
    Append-only record of everything an execution engine reported.

    Informational messages of the engine are interleaved with the captured
    output of the executed commands in the order they were emitted.
    Every informational message is also mirrored to standard output.
    """

    def __init__(self, stream: TextIO | None = None):
        """
        Initialize an empty log.

        Args:
            stream (TextIO | None): Stream the messages are mirrored to.
                Defaults to the standard output at the time of writing.
        """
        self._lines: list[str] = []
        self._stream = stream

    @property
    def stream(self) -> TextIO:
        """Stream the log is mirrored to."""
        return self._stream or sys.stdout

    def print(self, text: str) -> None:
        """
        Record an informational message and mirror it to the output stream.
        """
        self._lines.append(text)
        self.mirror(f"{text}\n")

    def mirror(self, text: str) -> None:
        """
        Write text to the output stream without recording it.

        Characters the stream cannot encode are replaced.
        """
        stream = self.stream
        if encoding := getattr(stream, "encoding", None):
            text = text.encode(encoding, errors="replace").decode(encoding)
        stream.write(text)
        stream.flush()

    def append(self, line: str) -> None:
        """
        Record a line without mirroring it.

        Used for captured command output which is mirrored by the caller
        exactly as it was received.
        """
        self._lines.append(line)

    def lines(self) -> list[str]:
        """Return a snapshot of all recorded lines."""
        return list(self._lines)

    def __len__(self) -> int:
        return len(self._lines)

    def __iter__(self) -> Iterator[str]:
        return iter(self.lines())
