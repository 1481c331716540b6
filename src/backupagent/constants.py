"""Shared constants for backupagent."""

MODE_LOCAL = "local"
MODE_CONTAINERIZED = "containerized"
EXECUTION_MODES = (MODE_LOCAL, MODE_CONTAINERIZED)

ENGINE_MYSQL = "mysql"
ENGINE_POSTGRESQL = "postgresql"
SUPPORTED_ENGINES = (ENGINE_MYSQL, ENGINE_POSTGRESQL)

ARTIFACT_EXTENSION = ".sql"
DIR_MODE = 0o755

DEFAULT_CONFIG_FILE = ".backupagent.yml"
LOG_FILE_NAME = "backup.log"
PASSWORD_MASK = "****"
