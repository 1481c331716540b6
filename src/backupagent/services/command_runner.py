"""Subprocess execution service for backupagent."""

import os
import subprocess
from typing import IO, List, Mapping, Optional

from backupagent.errors import ExecutionError
from backupagent.errors_catalog import actionable_error


class CommandRunner:
    """Runs external commands with consistent error handling.

    The dump is a single blocking step: no timeout and no retry are applied
    here, the next scheduled run is the only retry mechanism.
    """

    def __init__(self, logger):
        self.logger = logger

    def run(
        self,
        cmd: List[str],
        stdout: Optional[IO] = None,
        env: Optional[Mapping[str, str]] = None,
        display: Optional[str] = None,
    ) -> subprocess.CompletedProcess:
        cmd_str = display or " ".join(cmd)
        self.logger.debug("Executing: %s", cmd_str)

        child_env = None
        if env:
            child_env = dict(os.environ)
            child_env.update(env)

        try:
            result = subprocess.run(
                cmd,
                stdout=stdout if stdout is not None else subprocess.PIPE,
                stderr=subprocess.PIPE,
                env=child_env,
            )
        except FileNotFoundError as exc:
            raise ExecutionError(
                actionable_error("dump_tool_not_found", binary=cmd[0]), cause=exc
            ) from exc
        except OSError as exc:
            raise ExecutionError(f"Failed to execute command: {cmd_str}. {exc}", cause=exc) from exc

        stderr = (result.stderr or b"").decode("utf-8", errors="replace").strip()
        if stderr:
            self.logger.debug("Command stderr: %s", stderr)

        if result.returncode == 0:
            return result

        message = actionable_error("dump_failed", tool=cmd[0], returncode=result.returncode)
        if stderr:
            message = f"{message}\n{stderr}"

        raise ExecutionError(
            message,
            cause=subprocess.CalledProcessError(result.returncode, cmd_str, stderr=stderr),
            returncode=result.returncode,
            stderr=stderr,
        )
