# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

import io
import os
from pathlib import Path
from unittest.mock import patch

import pytest
import yaml

from crs_lib.core.error import CRSError, CRSFatalError
from crs_lib.execute.executor import CFG, Executor
from crs_lib.job import Job, Option, Task, TaskGroup
from crs_lib.properties.states import TaskState


def _job(*tasks: Task) -> Job:
    return Job((TaskGroup(tuple(tasks)),))


def _writer(
    out: str, text: str = "data", exit_code: int = 0, task_type: str = "encoding"
) -> Task:
    """Task writing `text` into the output file `out` and exiting with `exit_code`."""
    return Task(
        task_type,
        (
            Option("sh", filetype="exe"),
            Option("-c"),
            Option(f'printf {text} > "$0"; exit {exit_code}'),
            Option(out, filetype="out"),
        ),
    )


def _executor(job: Job) -> Executor:
    return Executor(job, stream=io.StringIO())


def _leftovers(directory, name):
    return [p for p in directory.iterdir() if p.name.startswith(f"{name}.")]


def test_execute_single_task_commits_output(tmp_path):
    out = tmp_path / "out1.mp4"
    executor = _executor(_job(_writer(str(out), "final")))

    assert executor.execute("encoding") is True

    assert out.read_text() == "final"
    assert _leftovers(tmp_path, "out1.mp4") == []
    assert "now executing task 1 of 1" in executor.getOutput()
    assert any(line.startswith("renaming ") for line in executor.getOutput())


def test_execute_second_task_fails(tmp_path):
    out1 = tmp_path / "out1.mp4"
    out2 = tmp_path / "out2.mp4"
    executor = _executor(
        _job(_writer(str(out1), "first"), _writer(str(out2), "second", exit_code=1))
    )

    assert executor.execute("encoding") is False

    # outputs of the first task stay committed
    assert out1.read_text() == "first"
    # nothing of the failed task survives
    assert not out2.exists()
    assert _leftovers(tmp_path, "out2.mp4") == []

    output = executor.getOutput()
    assert "now executing task 2 of 2" in output
    assert "Task exited with code 1" in output
    assert any(line.startswith("deleting ") for line in output)

    results = executor.getResults()
    assert [r.state for r in results] == [TaskState.COMMITTED, TaskState.ROLLED_BACK]
    assert [r.exit_code for r in results] == [0, 1]


def test_execute_stops_at_first_failure(tmp_path):
    never = tmp_path / "never.mp4"
    executor = _executor(
        _job(
            Task("encoding", (Option("false"),)),
            _writer(str(never)),
        )
    )

    assert executor.execute() is False

    assert not never.exists()
    assert "now executing task 2 of 2" not in executor.getOutput()
    assert len(executor.getResults()) == 1


def test_execute_missing_output_fails_task(tmp_path):
    out = tmp_path / "promised.mp4"
    executor = _executor(
        _job(Task("encoding", (Option("true"), Option(str(out), filetype="out"))))
    )

    assert executor.execute() is False

    assert not out.exists()
    assert _leftovers(tmp_path, "promised.mp4") == []
    assert f"output file missing: {out}" in executor.getOutput()
    assert executor.getResults()[0].missing_outputs == [str(out)]


def test_execute_replaces_existing_output(tmp_path):
    out = tmp_path / "out.mp4"
    out.write_text("stale")
    executor = _executor(_job(_writer(str(out), "fresh")))

    assert executor.execute() is True

    assert out.read_text() == "fresh"
    assert f"Output file exists: '{out}', deleting file." in executor.getOutput()


def test_execute_output_consumed_within_same_command(tmp_path):
    intermediate = tmp_path / "intermediate.wav"
    final = tmp_path / "final.mp4"
    task = Task(
        "encoding",
        (
            Option("sh", filetype="exe"),
            Option("-c"),
            Option('printf audio > "$0" && cp "$1" "$2"'),
            Option(str(intermediate), filetype="out"),
            Option(str(intermediate), filetype="in"),
            Option(str(final), filetype="out"),
        ),
    )
    executor = _executor(_job(task))

    assert executor.execute() is True

    assert intermediate.read_text() == "audio"
    assert final.read_text() == "audio"


def test_execute_input_with_space_is_quoted(tmp_path):
    source = tmp_path / "in file.ts"
    source.write_text("video")
    out = tmp_path / "out.ts"
    task = Task(
        "encoding",
        (
            Option("cp", filetype="exe"),
            Option(str(source), filetype="in"),
            Option(str(out), filetype="out"),
        ),
    )
    executor = _executor(_job(task))

    assert executor.execute() is True

    assert out.read_text() == "video"
    assert executor.getResults()[0].command.startswith(f'cp "{source}" ')


def test_execute_input_marked_verbatim_is_still_quoted(tmp_path):
    source = tmp_path / "in file.ts"
    source.write_text("video")
    out = tmp_path / "out.ts"
    task = Task(
        "encoding",
        (
            Option("cp", filetype="exe"),
            Option(str(source), filetype="in", quoted="no"),
            Option(str(out), filetype="out"),
        ),
    )
    executor = _executor(_job(task))

    assert executor.execute() is True

    assert out.read_text() == "video"
    assert _leftovers(tmp_path, "out.ts") == []


def test_execute_filters_by_type(tmp_path):
    encoded = tmp_path / "encoded.mp4"
    remuxed = tmp_path / "remuxed.mkv"
    executor = _executor(
        _job(_writer(str(encoded)), _writer(str(remuxed), task_type="remux"))
    )

    assert executor.execute("remux") is True

    assert remuxed.exists()
    assert not encoded.exists()
    assert "now executing task 1 of 1" in executor.getOutput()


def test_execute_default_filter_is_encoding(tmp_path):
    encoded = tmp_path / "encoded.mp4"
    remuxed = tmp_path / "remuxed.mkv"
    executor = _executor(
        _job(_writer(str(remuxed), task_type="remux"), _writer(str(encoded)))
    )

    assert CFG.executor.default_filter == "encoding"
    assert executor.execute() is True

    assert encoded.exists()
    assert not remuxed.exists()


def test_execute_empty_selection_succeeds():
    executor = _executor(_job(Task("remux", (Option("false"),))))

    assert executor.execute("encoding") is True
    assert executor.getOutput() == []
    assert executor.getResults() == []


def test_execute_tasks_across_groups_in_order(tmp_path):
    log_file = tmp_path / "order.txt"
    first = Task("encoding", (Option(f"echo 1 >> {log_file}", quoted="no"),))
    second = Task("encoding", (Option(f"echo 2 >> {log_file}", quoted="no"),))
    job = Job((TaskGroup((first,)), TaskGroup((second,))))
    executor = _executor(job)

    assert executor.execute() is True
    assert log_file.read_text() == "1\n2\n"


def test_execute_uses_task_encoding(tmp_path):
    executor = _executor(
        _job(Task("encoding", (Option("echo"), Option("Köln")), encoding="ISO-8859-1"))
    )

    with patch.object(executor._runner, "run", return_value=(True, [])) as mock_run:
        assert executor.execute() is True

    mock_run.assert_called_once_with("echo Köln", "ISO-8859-1")


def test_execute_fatal_error_rolls_back_and_propagates(tmp_path):
    out = tmp_path / "out.mp4"
    task = Task(
        "encoding",
        (
            Option("sh", filetype="exe"),
            Option(str(out), filetype="out"),
            Option("relative/in.ts", filetype="in"),
        ),
    )
    executor = _executor(_job(task))

    with pytest.raises(CRSFatalError, match="Non-absolute filename"):
        executor.execute()

    assert _leftovers(tmp_path, "out.mp4") == []
    assert executor.getResults()[0].state == TaskState.ROLLED_BACK


def test_execute_unknown_file_type_is_fatal():
    executor = _executor(_job(Task("encoding", (Option("/x", filetype="dir"),))))

    with pytest.raises(CRSFatalError, match="Unknown file type"):
        executor.execute()


def test_execute_output_unencodable_by_stream(tmp_path):
    out = tmp_path / "out.mp4"
    task = Task(
        "encoding",
        (
            Option("sh", filetype="exe"),
            Option("-c"),
            Option('printf x > "$0"; printf "caf\\303\\251\\n"'),
            Option(str(out), filetype="out"),
        ),
    )
    buffer = io.BytesIO()
    executor = Executor(_job(task), stream=io.TextIOWrapper(buffer, encoding="ascii"))

    assert executor.execute() is True

    assert out.read_text() == "x"
    assert _leftovers(tmp_path, "out.mp4") == []
    assert "café" in executor.getOutput()
    assert b"caf?\n" in buffer.getvalue()


def test_execute_unexpected_error_rolls_back_and_propagates(tmp_path):
    out = tmp_path / "out.mp4"
    executor = _executor(
        _job(Task("encoding", (Option("true"), Option(str(out), filetype="out"))))
    )

    def run(command, _encoding):
        # the command wrote its output before the failure
        Path(command.split()[-1]).write_text("partial")
        raise RuntimeError("interrupted")

    with (
        patch.object(executor._runner, "run", side_effect=run),
        pytest.raises(RuntimeError, match="interrupted"),
    ):
        executor.execute()

    assert list(tmp_path.iterdir()) == []
    assert executor.getResults()[0].state == TaskState.ROLLED_BACK

    report = tmp_path / "report.yaml"
    executor.writeReport(report)
    assert yaml.safe_load(report.read_text())["job_state"] == "aborted"


def test_execute_commit_failure_leaves_no_temp_files(tmp_path):
    first = tmp_path / "a.mp4"
    second = tmp_path / "b.mp4"
    task = Task(
        "encoding",
        (
            Option("sh", filetype="exe"),
            Option("-c"),
            Option('printf a > "$0"; printf b > "$1"'),
            Option(str(first), filetype="out"),
            Option(str(second), filetype="out"),
        ),
    )
    executor = _executor(_job(task))

    real_replace = os.replace

    def replace(src, dst):
        if dst == str(second):
            raise PermissionError("denied")
        real_replace(src, dst)

    with (
        patch("crs_lib.stage.staging.os.replace", side_effect=replace),
        pytest.raises(CRSFatalError, match="Cannot rename"),
    ):
        executor.execute()

    assert sorted(p.name for p in tmp_path.iterdir()) == ["a.mp4"]
    result = executor.getResults()[0]
    assert result.state == TaskState.ROLLED_BACK
    assert result.committed_outputs == [str(first)]


def test_execute_empty_filter_is_not_replaced_by_default(tmp_path):
    out = tmp_path / "out.mp4"
    executor = _executor(_job(_writer(str(out))))

    assert executor.execute("") is True

    assert not out.exists()
    assert executor.getResults() == []

    report = tmp_path / "report.yaml"
    executor.writeReport(report)
    assert yaml.safe_load(report.read_text())["filter"] == ""


def test_get_output_is_snapshot(tmp_path):
    executor = _executor(_job(Task("encoding", (Option("true"),))))
    executor.execute()

    output = executor.getOutput()
    output.clear()

    assert executor.getOutput() != []


def test_from_source_string():
    executor = Executor.fromSource(
        '<job><tasks><task type="encoding"><option>true</option></task></tasks></job>',
        stream=io.StringIO(),
    )

    assert executor is not None
    assert executor.getOutput() == []
    assert executor.execute() is True


def test_from_source_path(tmp_path):
    file = tmp_path / "job.xml"
    file.write_text(
        '<job><tasks><task type="remux"><option>true</option></task></tasks></job>'
    )

    executor = Executor.fromSource(str(file))

    assert executor is not None
    assert [t.type for t in executor.job.allTasks()] == ["remux"]


def test_from_source_unparsable_returns_none():
    assert Executor.fromSource("<job><tasks></job>") is None


def test_from_source_missing_file_returns_none(tmp_path):
    assert Executor.fromSource(tmp_path / "missing.xml") is None


def test_from_source_without_job_is_fatal():
    with pytest.raises(CRSFatalError, match="You need to supply a job"):
        Executor.fromSource(None)


def test_write_report(tmp_path):
    out = tmp_path / "out.mp4"
    report = tmp_path / "report.yaml"
    executor = _executor(_job(_writer(str(out))))
    executor.execute()

    executor.writeReport(report)

    data = yaml.safe_load(report.read_text())
    assert data["filter"] == "encoding"
    assert data["selected"] == 1
    assert data["job_state"] == "all_committed"
    assert data["tasks"][0]["state"] == "committed"
    assert data["tasks"][0]["committed_outputs"] == [str(out)]


def test_write_report_before_execution_raises(tmp_path):
    executor = _executor(_job())

    with pytest.raises(CRSError, match="not been executed"):
        executor.writeReport(tmp_path / "report.yaml")
