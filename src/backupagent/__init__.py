"""
backupagent - Scheduled MySQL/PostgreSQL dump agent with S3 upload and chat notifications
"""

__version__ = "0.1.0"

from .core import BackupOrchestrator
from .errors import BackupError, ConfigurationError, ExecutionError, UploadError

__all__ = [
    "BackupOrchestrator",
    "BackupError",
    "ConfigurationError",
    "ExecutionError",
    "UploadError",
]
