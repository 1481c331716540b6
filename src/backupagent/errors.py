"""Domain errors for backupagent."""

from typing import Optional


class BackupAgentError(RuntimeError):
    """Base class for every error raised by the backup agent."""


class ConfigurationError(BackupAgentError):
    """Raised when settings are missing or invalid. Fatal at startup."""


class ExecutionError(BackupAgentError):
    """Raised when the dump process cannot be spawned or exits non-zero."""

    def __init__(
        self,
        message: str,
        cause: Optional[BaseException] = None,
        returncode: Optional[int] = None,
        stderr: Optional[str] = None,
    ):
        super().__init__(message)
        self.cause = cause
        self.returncode = returncode
        self.stderr = stderr


class UploadError(BackupAgentError):
    """Raised when the artifact cannot be placed in object storage."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


class BackupError(BackupAgentError):
    """Raised to the scheduling caller when a backup run fails."""

    def __init__(self, message: str, cause: BaseException):
        super().__init__(message)
        self.cause = cause
