"""Immutable runtime settings for backupagent."""

from dataclasses import dataclass
from typing import Optional

from .models import EngineConfig


@dataclass(frozen=True)
class BackupSettings:
    output_dir: str = "./backups"
    filename_prefix: str = "backup"
    retention_days: int = 7
    schedule: str = "0 0 * * *"


@dataclass(frozen=True)
class S3Settings:
    enabled: bool = False
    bucket: str = ""
    region: str = "us-east-1"
    access_key_id: str = ""
    secret_access_key: str = ""
    path: str = "backups/"
    endpoint_url: Optional[str] = None


@dataclass(frozen=True)
class LoggingSettings:
    dir: str = "./logs"
    level: str = "info"
    max_files: int = 7


@dataclass(frozen=True)
class SlackSettings:
    enabled: bool = False
    webhook_url: str = ""


@dataclass(frozen=True)
class GoogleChatSettings:
    enabled: bool = False
    webhook_url: str = ""
    thread_key: Optional[str] = None


@dataclass(frozen=True)
class NotificationSettings:
    enabled: bool = True
    success: bool = True
    error: bool = True
    slack: SlackSettings = SlackSettings()
    google_chat: GoogleChatSettings = GoogleChatSettings()


@dataclass(frozen=True)
class Settings:
    """Everything the agent reads, built once at startup and passed explicitly."""

    database_type: str
    mysql: EngineConfig
    postgresql: EngineConfig
    backup: BackupSettings = BackupSettings()
    s3: S3Settings = S3Settings()
    logging: LoggingSettings = LoggingSettings()
    notification: NotificationSettings = NotificationSettings()
