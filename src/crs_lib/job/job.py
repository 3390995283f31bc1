# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Structured representation of crs job descriptions.

This module defines the immutable `Job`, `TaskGroup`, `Task`, and `Option`
dataclasses and loads them from the XML job files produced by the tracker.
A job file contains any number of `<tasks>` groups, each holding ordered
`<task>` elements, which in turn hold ordered `<option>` elements:

    <job>
      <tasks>
        <task type="encoding" encoding="UTF-8">
          <option filetype="exe">ffmpeg</option>
          <option>-i</option>
          <option filetype="in">/video/in.ts</option>
          <option filetype="out">/video/out.mp4</option>
        </task>
      </tasks>
    </job>

The XML is parsed with defusedxml so that hostile documents (entity
expansion, external entities) are rejected instead of being processed.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Self
from xml.etree.ElementTree import Element

from defusedxml import DefusedXmlException, ElementTree

from crs_lib.core.error import CRSFatalError, CRSJobLoadError
from crs_lib.core.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class Option:
    """
    A single positional argument of a task's command line.

    An option without `filetype` and `quoted` is a plain literal argument.
    """

    # Value of the argument.
    content: str
    # Role of a file reference ('exe', 'in', 'cfg', 'out') or None.
    filetype: str | None = None
    # Quoting flag; 'no' injects a plain argument verbatim.
    quoted: str | None = None

    def isVerbatim(self) -> bool:
        """
        Return True if the option is a plain argument to be injected without
        quoting or escaping. File references are always quoted.
        """
        return self.quoted == "no" and not self.filetype

    @classmethod
    def fromElement(cls, element: Element) -> Self:
        """
        Create an Option from an `<option>` XML element.
        """
        return cls(
            content=element.text or "",
            filetype=element.get("filetype") or None,
            quoted=element.get("quoted"),
        )


@dataclass(frozen=True)
class Task:
    """
    One command execution unit of a job.
    """

    # Tag used to select tasks for execution (e.g. 'encoding').
    type: str
    # Ordered options forming the command line.
    options: tuple[Option, ...] = ()
    # Encoding used when invoking the command and decoding its output.
    encoding: str | None = None

    @classmethod
    def fromElement(cls, element: Element) -> Self:
        """
        Create a Task from a `<task>` XML element.

        Raises:
            CRSJobLoadError: If the task has no type.
        """
        if not (task_type := element.get("type")):
            raise CRSJobLoadError("Task without a 'type' attribute found in the job.")

        return cls(
            type=task_type,
            options=tuple(Option.fromElement(o) for o in element.findall("option")),
            encoding=element.get("encoding") or None,
        )


@dataclass(frozen=True)
class TaskGroup:
    """
    An ordered group of tasks (a `<tasks>` element).
    """

    tasks: tuple[Task, ...] = ()


@dataclass(frozen=True)
class Job:
    """
    Dataclass storing a complete crs job description.
    """

    groups: tuple[TaskGroup, ...] = ()

    def allTasks(self) -> list[Task]:
        """Return all tasks of the job flattened in execution order."""
        return [task for group in self.groups for task in group.tasks]

    def tasksOfType(self, task_type: str) -> list[Task]:
        """Return all tasks of the job with the given type in execution order."""
        return [task for task in self.allTasks() if task.type == task_type]

    @classmethod
    def fromSource(cls, source: str | Path | None) -> Self:
        """
        Load a job either from a string containing XML or from a path to an XML file.

        A string is considered to be an XML document if it starts with '<'
        (leading whitespace is ignored). Otherwise, it is treated as a path.

        Raises:
            CRSFatalError: If no source is provided.
            CRSJobLoadError: If the job cannot be read or parsed.
        """
        if source is None or (isinstance(source, str) and not source.strip()):
            raise CRSFatalError("You need to supply a job!")

        if isinstance(source, str) and source.lstrip().startswith("<"):
            return cls.fromString(source.lstrip())

        return cls.fromFile(Path(source))

    @classmethod
    def fromFile(cls, file: Path) -> Self:
        """
        Load a job from an XML file.

        Raises:
            CRSJobLoadError: If the file does not exist, cannot be read or parsed.
        """
        logger.debug(f"Loading job from '{file}'.")
        if not file.is_file():
            raise CRSJobLoadError(f"Job file '{file}' does not exist.")

        try:
            text = file.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise CRSJobLoadError(f"Could not read job file '{file}': {e}.") from e

        return cls.fromString(text)

    @classmethod
    def fromString(cls, text: str) -> Self:
        """
        Load a job from a string containing an XML document.

        Raises:
            CRSJobLoadError: If the document cannot be parsed.
        """
        try:
            root = ElementTree.fromstring(text)
        except (ElementTree.ParseError, DefusedXmlException) as e:
            raise CRSJobLoadError(f"Could not parse the job: {e}.") from e

        return cls._fromRoot(root)

    @classmethod
    def _fromRoot(cls, root: Element) -> Self:
        groups = tuple(
            TaskGroup(tuple(Task.fromElement(t) for t in group.findall("task")))
            for group in root.findall("tasks")
        )
        logger.debug(
            f"Loaded job with {sum(len(g.tasks) for g in groups)} task(s) in {len(groups)} group(s)."
        )
        return cls(groups)
