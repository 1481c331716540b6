"""Dump command construction per database engine and execution mode."""

import shlex
from typing import List, Tuple

from backupagent.constants import ENGINE_MYSQL, ENGINE_POSTGRESQL, PASSWORD_MASK
from backupagent.models import DumpCommand, EngineConfig, MySQLDumpOptions, PostgresDumpOptions
from backupagent.settings import Settings


def _option_tokens(additional_options: str) -> List[str]:
    return shlex.split(additional_options or "")


class EngineStrategy:
    """What differs between engines: the dump command, the name and the config."""

    name = ""
    display_name = ""
    dump_binary = ""

    def engine_config(self, settings: Settings) -> EngineConfig:
        raise NotImplementedError

    def option_flags(self, config: EngineConfig) -> List[str]:
        raise NotImplementedError

    def local_prefix(self, config: EngineConfig) -> Tuple[List[str], List[int]]:
        """Leading tokens for local mode and the indexes holding secrets."""
        raise NotImplementedError

    def container_prefix(self, config: EngineConfig) -> Tuple[List[str], List[int]]:
        raise NotImplementedError

    def child_env(self, config: EngineConfig) -> dict:
        return {}

    def build_command(self, config: EngineConfig, artifact_path: str) -> DumpCommand:
        if config.containerized:
            prefix, secret_indexes = self.container_prefix(config)
            env = {}
        else:
            prefix, secret_indexes = self.local_prefix(config)
            env = self.child_env(config)

        args = prefix + self.option_flags(config) + [config.database]
        display_args = list(args)
        for index in secret_indexes:
            display_args[index] = _mask(display_args[index])

        display = " ".join(shlex.quote(arg) for arg in display_args) + f" > {artifact_path}"
        return DumpCommand(args=tuple(args), output_path=artifact_path, env=env, display=display)


class MySQLEngine(EngineStrategy):
    name = ENGINE_MYSQL
    display_name = "MySQL"
    dump_binary = "mysqldump"

    FLAGS = (
        ("compress", "--compress"),
        ("add_drop_table", "--add-drop-table"),
        ("add_locks", "--add-locks"),
        ("extended_insert", "--extended-insert"),
        ("complete_insert", "--complete-insert"),
        ("create_options", "--create-options"),
        ("disable_keys", "--disable-keys"),
        ("set_charset", "--set-charset"),
        ("delayed_insert", "--delayed-insert"),
        ("replace", "--replace"),
    )

    def engine_config(self, settings: Settings) -> EngineConfig:
        return settings.mysql

    def option_flags(self, config: EngineConfig) -> List[str]:
        options: MySQLDumpOptions = config.dump_options
        flags = [flag for attribute, flag in self.FLAGS if getattr(options, attribute)]
        if options.ignore_table:
            flags.append(f"--ignore-table={config.database}.{options.ignore_table}")
        flags.extend(_option_tokens(options.additional_options))
        return flags

    def _credentials(self, config: EngineConfig) -> List[str]:
        tokens = [f"-u{config.user}"]
        if config.password:
            tokens.append(f"-p{config.password}")
        return tokens

    def local_prefix(self, config: EngineConfig) -> Tuple[List[str], List[int]]:
        tokens = [self.dump_binary, f"-h{config.host}", f"-P{config.port}"] + self._credentials(config)
        return tokens, ([4] if config.password else [])

    def container_prefix(self, config: EngineConfig) -> Tuple[List[str], List[int]]:
        tokens = ["docker", "exec", config.container_name, self.dump_binary] + self._credentials(config)
        return tokens, ([5] if config.password else [])


class PostgresEngine(EngineStrategy):
    name = ENGINE_POSTGRESQL
    display_name = "PostgreSQL"
    dump_binary = "pg_dump"

    FLAGS = (
        ("schema_only", "--schema-only"),
        ("data_only", "--data-only"),
        ("no_owner", "--no-owner"),
        ("no_privileges", "--no-privileges"),
        ("no_tablespaces", "--no-tablespaces"),
    )

    def engine_config(self, settings: Settings) -> EngineConfig:
        return settings.postgresql

    def option_flags(self, config: EngineConfig) -> List[str]:
        options: PostgresDumpOptions = config.dump_options
        flags = [flag for attribute, flag in self.FLAGS if getattr(options, attribute)]
        if options.ignore_table:
            flags.append(f"--exclude-table={options.ignore_table}")
        flags.extend(_option_tokens(options.additional_options))
        return flags

    def local_prefix(self, config: EngineConfig) -> Tuple[List[str], List[int]]:
        return [self.dump_binary, f"-h{config.host}", f"-p{config.port}", f"-U{config.user}"], []

    def container_prefix(self, config: EngineConfig) -> Tuple[List[str], List[int]]:
        return ["docker", "exec", config.container_name, self.dump_binary, f"-U{config.user}"], []

    def child_env(self, config: EngineConfig) -> dict:
        return {"PGPASSWORD": config.password}


ENGINES = {
    ENGINE_MYSQL: MySQLEngine,
    ENGINE_POSTGRESQL: PostgresEngine,
}


def engine_for(database_type: str) -> EngineStrategy:
    try:
        return ENGINES[database_type]()
    except KeyError:
        raise ValueError(f"Unsupported database type: {database_type}") from None


def _mask(token: str) -> str:
    # keep the short flag (``-p``) and hide the inline secret
    return token[:2] + PASSWORD_MASK
