"""Dump execution: runs the built command into the reserved artifact path."""

import os

from backupagent.errors import ExecutionError
from backupagent.errors_catalog import actionable_error
from backupagent.models import DumpCommand


class DumpExecutor:
    """Runs a :class:`DumpCommand` with stdout redirected to its output path."""

    def __init__(self, command_runner, logger):
        self.command_runner = command_runner
        self.logger = logger

    def execute(self, command: DumpCommand) -> str:
        self.logger.info("Running dump: %s", command)

        try:
            file_obj = open(command.output_path, "wb")
        except OSError as exc:
            raise ExecutionError(
                actionable_error("artifact_unwritable", path=command.output_path, reason=exc),
                cause=exc,
            ) from exc

        try:
            with file_obj:
                self.command_runner.run(
                    list(command.args),
                    stdout=file_obj,
                    env=command.env,
                    display=str(command),
                )
        except Exception:
            self._discard_partial(command.output_path)
            raise

        return command.output_path

    def _discard_partial(self, path: str):
        try:
            os.remove(path)
        except OSError:
            pass
        else:
            self.logger.debug("Removed incomplete artifact: %s", path)
