"""Configuration loader for backupagent.

Values are merged in this order (later wins): built-in defaults, the YAML
config file, the ``.env`` file, then the process environment. YAML keys are the
environment variable names in lower case (``mysql_host``, ``s3_enabled`` ...).
"""

import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml
from dotenv import dotenv_values

from backupagent.constants import (
    ENGINE_MYSQL,
    ENGINE_POSTGRESQL,
    MODE_CONTAINERIZED,
    MODE_LOCAL,
    SUPPORTED_ENGINES,
)
from backupagent.errors import ConfigurationError
from backupagent.errors_catalog import actionable_error
from backupagent.models import EngineConfig, MySQLDumpOptions, PostgresDumpOptions
from backupagent.scheduler import build_trigger
from backupagent.settings import (
    BackupSettings,
    GoogleChatSettings,
    LoggingSettings,
    NotificationSettings,
    S3Settings,
    Settings,
    SlackSettings,
)

_MYSQL_FLAG_KEYS = {
    "compress": "MYSQL_DUMP_COMPRESS",
    "add_drop_table": "MYSQL_DUMP_ADD_DROP_TABLE",
    "add_locks": "MYSQL_DUMP_ADD_LOCKS",
    "extended_insert": "MYSQL_DUMP_EXTENDED_INSERT",
    "complete_insert": "MYSQL_DUMP_COMPLETE_INSERT",
    "create_options": "MYSQL_DUMP_CREATE_OPTIONS",
    "disable_keys": "MYSQL_DUMP_DISABLE_KEYS",
    "set_charset": "MYSQL_DUMP_SET_CHARSET",
    "delayed_insert": "MYSQL_DUMP_DELAYED_INSERT",
    "replace": "MYSQL_DUMP_REPLACE",
}

_POSTGRES_FLAG_KEYS = {
    "compress": "POSTGRES_DUMP_COMPRESS",
    "schema_only": "POSTGRES_DUMP_SCHEMA_ONLY",
    "data_only": "POSTGRES_DUMP_DATA_ONLY",
    "no_owner": "POSTGRES_DUMP_NO_OWNER",
    "no_privileges": "POSTGRES_DUMP_NO_PRIVILEGES",
    "no_tablespaces": "POSTGRES_DUMP_NO_TABLESPACES",
}


class ConfigLoader:
    """Builds the immutable :class:`Settings` value used by every component."""

    SUPPORTED_KEYS = {
        "DATABASE_TYPE",
        "MYSQL_HOST",
        "MYSQL_PORT",
        "MYSQL_USER",
        "MYSQL_PASSWORD",
        "MYSQL_DATABASE",
        "MYSQL_USE_DOCKER",
        "MYSQL_DOCKER_CONTAINER",
        "MYSQL_DUMP_IGNORE_TABLE",
        "MYSQL_DUMP_OPTIONS",
        "POSTGRES_HOST",
        "POSTGRES_PORT",
        "POSTGRES_USER",
        "POSTGRES_PASSWORD",
        "POSTGRES_DATABASE",
        "POSTGRES_USE_DOCKER",
        "POSTGRES_DOCKER_CONTAINER",
        "POSTGRES_DUMP_IGNORE_TABLE",
        "POSTGRES_DUMP_OPTIONS",
        "BACKUP_OUTPUT_DIR",
        "BACKUP_FILENAME_PREFIX",
        "BACKUP_RETENTION_DAYS",
        "BACKUP_SCHEDULE",
        "S3_ENABLED",
        "S3_BUCKET",
        "S3_REGION",
        "S3_ACCESS_KEY_ID",
        "S3_SECRET_ACCESS_KEY",
        "S3_PATH",
        "S3_ENDPOINT_URL",
        "LOG_DIR",
        "LOG_LEVEL",
        "LOG_MAX_FILES",
        "NOTIFICATION_ENABLED",
        "NOTIFICATION_SUCCESS",
        "NOTIFICATION_ERROR",
        "NOTIFICATION_SLACK_ENABLED",
        "NOTIFICATION_SLACK_WEBHOOK_URL",
        "NOTIFICATION_GOOGLE_CHAT_ENABLED",
        "NOTIFICATION_GOOGLE_CHAT_WEBHOOK_URL",
        "NOTIFICATION_GOOGLE_CHAT_THREAD_KEY",
    } | set(_MYSQL_FLAG_KEYS.values()) | set(_POSTGRES_FLAG_KEYS.values())

    def __init__(self, environ: Optional[Mapping[str, str]] = None):
        self.environ = os.environ if environ is None else environ

    def load_file(self, config_path: Optional[str]) -> Dict[str, Any]:
        if not config_path:
            return {}

        path = Path(config_path)
        if not path.exists():
            raise ConfigurationError(f"Config file not found: {config_path}")

        try:
            parsed = yaml.safe_load(path.read_text(encoding="utf-8"))
        except (yaml.YAMLError, OSError) as exc:
            raise ConfigurationError(f"Invalid config file '{config_path}': {exc}") from exc

        if parsed is None:
            return {}
        if not isinstance(parsed, dict):
            raise ConfigurationError("Config file must contain a YAML mapping at the root.")

        normalized = {str(key).upper(): value for key, value in parsed.items()}
        unknown = sorted(set(normalized.keys()) - self.SUPPORTED_KEYS)
        if unknown:
            unknown_list = ", ".join(key.lower() for key in unknown)
            raise ConfigurationError(f"Unknown configuration keys: {unknown_list}")

        return normalized

    def load(self, config_path: Optional[str] = None, env_file: Optional[str] = None) -> Settings:
        values: Dict[str, str] = {}

        for key, value in self.load_file(config_path).items():
            if value is not None:
                values[key] = str(value)

        env_path = Path(env_file) if env_file else Path.cwd() / ".env"
        if env_file and not env_path.exists():
            raise ConfigurationError(f"Env file not found: {env_file}")
        if env_path.exists():
            values.update({k: v for k, v in dotenv_values(env_path).items() if v is not None})

        values.update(self.environ)

        settings = self.build_settings(values)
        self.validate(settings)
        return settings

    def build_settings(self, values: Mapping[str, str]) -> Settings:
        reader = _ValueReader(values)

        mysql = EngineConfig(
            host=reader.text("MYSQL_HOST", "localhost"),
            port=reader.integer("MYSQL_PORT", 3306),
            user=reader.text("MYSQL_USER", "root"),
            password=reader.text("MYSQL_PASSWORD", ""),
            database=reader.text("MYSQL_DATABASE", ""),
            execution_mode=_mode(reader.flag("MYSQL_USE_DOCKER", False)),
            container_name=reader.text("MYSQL_DOCKER_CONTAINER", "mysql-container"),
            dump_options=MySQLDumpOptions(
                ignore_table=reader.text("MYSQL_DUMP_IGNORE_TABLE", ""),
                additional_options=reader.text(
                    "MYSQL_DUMP_OPTIONS", MySQLDumpOptions.additional_options
                ),
                **{
                    name: reader.flag(key, getattr(MySQLDumpOptions, name))
                    for name, key in _MYSQL_FLAG_KEYS.items()
                },
            ),
        )

        postgresql = EngineConfig(
            host=reader.text("POSTGRES_HOST", "localhost"),
            port=reader.integer("POSTGRES_PORT", 5432),
            user=reader.text("POSTGRES_USER", "postgres"),
            password=reader.text("POSTGRES_PASSWORD", ""),
            database=reader.text("POSTGRES_DATABASE", ""),
            execution_mode=_mode(reader.flag("POSTGRES_USE_DOCKER", False)),
            container_name=reader.text("POSTGRES_DOCKER_CONTAINER", "postgres-container"),
            dump_options=PostgresDumpOptions(
                ignore_table=reader.text("POSTGRES_DUMP_IGNORE_TABLE", ""),
                additional_options=reader.text(
                    "POSTGRES_DUMP_OPTIONS", PostgresDumpOptions.additional_options
                ),
                **{
                    name: reader.flag(key, getattr(PostgresDumpOptions, name))
                    for name, key in _POSTGRES_FLAG_KEYS.items()
                },
            ),
        )

        return Settings(
            database_type=reader.text("DATABASE_TYPE", ENGINE_MYSQL).strip().lower(),
            mysql=mysql,
            postgresql=postgresql,
            backup=BackupSettings(
                output_dir=reader.text("BACKUP_OUTPUT_DIR", "./backups"),
                filename_prefix=reader.text("BACKUP_FILENAME_PREFIX", "backup"),
                retention_days=reader.integer("BACKUP_RETENTION_DAYS", 7),
                schedule=reader.text("BACKUP_SCHEDULE", "0 0 * * *"),
            ),
            s3=S3Settings(
                enabled=reader.flag("S3_ENABLED", False),
                bucket=reader.text("S3_BUCKET", ""),
                region=reader.text("S3_REGION", "us-east-1"),
                access_key_id=reader.text("S3_ACCESS_KEY_ID", ""),
                secret_access_key=reader.text("S3_SECRET_ACCESS_KEY", ""),
                path=reader.text("S3_PATH", "backups/"),
                endpoint_url=reader.text("S3_ENDPOINT_URL", "") or None,
            ),
            logging=LoggingSettings(
                dir=reader.text("LOG_DIR", "./logs"),
                level=reader.text("LOG_LEVEL", "info"),
                max_files=reader.integer("LOG_MAX_FILES", 7),
            ),
            notification=NotificationSettings(
                enabled=reader.flag("NOTIFICATION_ENABLED", True),
                success=reader.flag("NOTIFICATION_SUCCESS", True),
                error=reader.flag("NOTIFICATION_ERROR", True),
                slack=SlackSettings(
                    enabled=reader.flag("NOTIFICATION_SLACK_ENABLED", False),
                    webhook_url=reader.text("NOTIFICATION_SLACK_WEBHOOK_URL", ""),
                ),
                google_chat=GoogleChatSettings(
                    enabled=reader.flag("NOTIFICATION_GOOGLE_CHAT_ENABLED", False),
                    webhook_url=reader.text("NOTIFICATION_GOOGLE_CHAT_WEBHOOK_URL", ""),
                    thread_key=reader.text("NOTIFICATION_GOOGLE_CHAT_THREAD_KEY", "") or None,
                ),
            ),
        )

    def validate(self, settings: Settings):
        if settings.database_type not in SUPPORTED_ENGINES:
            raise ConfigurationError(
                actionable_error("unsupported_engine", engine=settings.database_type)
            )

        if settings.database_type == ENGINE_POSTGRESQL:
            engine_config, prefix = settings.postgresql, "POSTGRES"
        else:
            engine_config, prefix = settings.mysql, "MYSQL"

        required = [("database", f"{prefix}_DATABASE")]
        if engine_config.containerized:
            required.append(("container_name", f"{prefix}_DOCKER_CONTAINER"))
            context = f"{settings.database_type} in containerized mode"
        else:
            required.extend([("host", f"{prefix}_HOST"), ("user", f"{prefix}_USER")])
            context = f"{settings.database_type} in local mode"

        for attribute, name in required:
            if not (getattr(engine_config, attribute) or "").strip():
                raise ConfigurationError(actionable_error("missing_setting", name=name, context=context))

        if settings.s3.enabled and not settings.s3.bucket.strip():
            raise ConfigurationError(
                actionable_error("missing_setting", name="S3_BUCKET", context="S3 uploads")
            )

        try:
            build_trigger(settings.backup.schedule)
        except ValueError as exc:
            raise ConfigurationError(
                f"BACKUP_SCHEDULE must be a valid five-field cron expression, "
                f"got: {settings.backup.schedule!r} ({exc})"
            ) from exc


class _ValueReader:
    def __init__(self, values: Mapping[str, str]):
        self.values = values

    def text(self, key: str, default: str) -> str:
        value = self.values.get(key)
        if value is None or str(value) == "":
            return default
        return str(value)

    def flag(self, key: str, default: bool) -> bool:
        value = self.values.get(key)
        if value is None or value == "":
            return default
        return str(value).strip().lower() == "true"

    def integer(self, key: str, default: int) -> int:
        value = self.values.get(key)
        if value is None or str(value).strip() == "":
            return default
        try:
            return int(str(value).strip())
        except ValueError as exc:
            raise ConfigurationError(f"{key} must be an integer, got: {value!r}") from exc


def _mode(use_docker: bool) -> str:
    return MODE_CONTAINERIZED if use_docker else MODE_LOCAL
