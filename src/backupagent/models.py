"""Shared domain models for backupagent."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Optional, Tuple, Union

from .constants import MODE_CONTAINERIZED


@dataclass(frozen=True)
class MySQLDumpOptions:
    """mysqldump flags. Each boolean maps to at most one CLI token."""

    compress: bool = True
    add_drop_table: bool = True
    add_locks: bool = True
    extended_insert: bool = True
    complete_insert: bool = False
    create_options: bool = True
    disable_keys: bool = True
    set_charset: bool = True
    delayed_insert: bool = False
    replace: bool = False
    ignore_table: str = ""
    additional_options: str = "--single-transaction --quick --lock-tables=false"


@dataclass(frozen=True)
class PostgresDumpOptions:
    """pg_dump flags. ``compress`` has no pg_dump token in plain-text output."""

    compress: bool = True
    schema_only: bool = False
    data_only: bool = False
    no_owner: bool = True
    no_privileges: bool = True
    no_tablespaces: bool = True
    ignore_table: str = ""
    additional_options: str = "--clean --if-exists"


DumpOptions = Union[MySQLDumpOptions, PostgresDumpOptions]


@dataclass(frozen=True)
class EngineConfig:
    """Connection and dump settings for one database engine."""

    host: str
    port: int
    user: str
    password: str
    database: str
    execution_mode: str
    container_name: Optional[str]
    dump_options: DumpOptions

    @property
    def containerized(self) -> bool:
        return self.execution_mode == MODE_CONTAINERIZED


@dataclass(frozen=True)
class DumpCommand:
    """Argument vector plus the file its standard output is redirected to."""

    args: Tuple[str, ...]
    output_path: str
    env: Dict[str, str] = field(default_factory=dict)
    display: str = ""

    def __str__(self) -> str:
        return self.display or " ".join(self.args)


@dataclass(frozen=True)
class BackupArtifact:
    path: str
    created_at: datetime


@dataclass(frozen=True)
class BackupResult:
    success: bool
    artifact: Optional[BackupArtifact] = None
    error: Optional[BaseException] = None


@dataclass(frozen=True)
class NotificationMessage:
    title: str
    body: str
    error: Optional[str] = None
    artifact_path: Optional[str] = None

    @property
    def is_failure(self) -> bool:
        return self.error is not None
