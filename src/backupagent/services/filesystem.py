"""Filesystem helpers for backupagent."""

import logging
import os
import sys
from typing import Iterable

from rich.console import Console

from backupagent.constants import DIR_MODE
from backupagent.errors import BackupAgentError


class FileSystemService:
    """Encapsulates startup directory side effects."""

    def __init__(self, logger: logging.Logger, console: Console):
        self.logger = logger
        self.console = console

    def set_permissions(self, path: str, mode: int):
        if sys.platform == "win32":
            return

        try:
            os.chmod(path, mode)
        except Exception as exc:
            self.logger.warning("Could not set permissions on %s: %s", path, exc)

    def ensure_dir(self, path: str):
        existed = os.path.isdir(path)
        try:
            os.makedirs(path, exist_ok=True)
        except OSError as exc:
            raise BackupAgentError(f"Could not create directory {path}: {exc}") from exc

        if not existed:
            self.set_permissions(path, DIR_MODE)
            self.logger.debug("Created directory: %s", path)

    def prepare_directories(self, paths: Iterable[str]):
        for path in paths:
            self.ensure_dir(path)
