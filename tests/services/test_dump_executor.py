import subprocess

import pytest

from backupagent.errors import ExecutionError
from backupagent.models import DumpCommand
from backupagent.services.dump_executor import DumpExecutor


class DummyLogger:
    def info(self, *_args, **_kwargs):
        return None

    def debug(self, *_args, **_kwargs):
        return None


class FakeRunner:
    def __init__(self, output=b"-- dump\n", fail=False):
        self.output = output
        self.fail = fail
        self.calls = []

    def run(self, cmd, stdout=None, env=None, display=None):
        self.calls.append({"cmd": cmd, "env": env, "display": display})
        stdout.write(self.output)
        if self.fail:
            raise ExecutionError("mysqldump exited with status 2.", returncode=2)
        return subprocess.CompletedProcess(cmd, 0)


def test_execute_writes_artifact_and_returns_its_path(tmp_path):
    runner = FakeRunner()
    executor = DumpExecutor(command_runner=runner, logger=DummyLogger())
    target = tmp_path / "backup.sql"
    command = DumpCommand(args=("pg_dump", "app"), output_path=str(target), env={"PGPASSWORD": "x"})

    path = executor.execute(command)

    assert path == str(target)
    assert target.read_bytes() == b"-- dump\n"
    assert runner.calls[0]["cmd"] == ["pg_dump", "app"]
    assert runner.calls[0]["env"] == {"PGPASSWORD": "x"}


def test_execute_removes_partial_artifact_on_failure(tmp_path):
    executor = DumpExecutor(command_runner=FakeRunner(fail=True), logger=DummyLogger())
    target = tmp_path / "backup.sql"

    with pytest.raises(ExecutionError, match="status 2"):
        executor.execute(DumpCommand(args=("mysqldump", "app"), output_path=str(target)))

    assert not target.exists()


def test_execute_fails_when_output_directory_is_missing(tmp_path):
    runner = FakeRunner()
    executor = DumpExecutor(command_runner=runner, logger=DummyLogger())
    target = tmp_path / "missing" / "backup.sql"

    with pytest.raises(ExecutionError, match="Cannot write backup artifact"):
        executor.execute(DumpCommand(args=("mysqldump", "app"), output_path=str(target)))

    assert runner.calls == []


def test_execute_removes_partial_file_when_spawn_rejects_arguments(tmp_path):
    class RejectingRunner:
        def run(self, cmd, stdout=None, env=None, display=None):
            stdout.write(b"-- partial")
            raise ValueError("embedded null byte")

    executor = DumpExecutor(command_runner=RejectingRunner(), logger=DummyLogger())
    target = tmp_path / "backup.sql"
    command = DumpCommand(args=("mysqldump", "app\x00"), output_path=str(target))

    with pytest.raises(ValueError, match="embedded null byte"):
        executor.execute(command)

    assert not target.exists()
