import logging
import os
from logging.handlers import TimedRotatingFileHandler

import click
from rich.logging import RichHandler

from .constants import DEFAULT_CONFIG_FILE, LOG_FILE_NAME
from .core import BackupOrchestrator, console
from .errors import BackupAgentError, BackupError
from .scheduler import BackupScheduler
from .services.config_loader import ConfigLoader
from .services.filesystem import FileSystemService

logging.basicConfig(
    level="INFO",
    format="%(message)s",
    datefmt="[%X]",
    handlers=[RichHandler(rich_tracebacks=True, show_level=False, show_path=False)],
)


def _configure_logging(logger, level_name: str, log_file: str, max_files: int, verbose: bool):
    level = logging.DEBUG if verbose else getattr(logging, level_name.upper(), logging.INFO)
    logging.getLogger().setLevel(level)
    logger.setLevel(level)

    file_handler = TimedRotatingFileHandler(
        log_file, when="midnight", backupCount=max_files, encoding="utf-8"
    )
    file_handler.setLevel(level)
    file_handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(message)s"))
    logger.addHandler(file_handler)


@click.command()
@click.option(
    "--config",
    required=False,
    type=click.Path(),
    help=f"Path to a YAML configuration file. Defaults to {DEFAULT_CONFIG_FILE} if present.",
)
@click.option(
    "--env-file",
    required=False,
    type=click.Path(),
    help="Path to a .env file. Defaults to .env in the working directory if present.",
)
@click.option("--once", is_flag=True, default=False, help="Run a single backup and exit.")
@click.option("--verbose", is_flag=True, default=False, help="Enable verbose logging")
@click.option("--log-file", type=click.Path(), help="Path to log file (default: LOG_DIR/backup.log)")
def main(config, env_file, once, verbose, log_file):
    """Dump a MySQL or PostgreSQL database on a cron schedule."""
    logger = logging.getLogger("backupagent")

    resolved_config = config
    if resolved_config is None:
        default_config_path = os.path.join(os.getcwd(), DEFAULT_CONFIG_FILE)
        if os.path.exists(default_config_path):
            resolved_config = default_config_path

    try:
        settings = ConfigLoader().load(resolved_config, env_file=env_file)
        FileSystemService(logger=logger, console=console).prepare_directories(
            [settings.backup.output_dir, settings.logging.dir]
        )
    except BackupAgentError as exc:
        raise click.ClickException(str(exc)) from exc

    _configure_logging(
        logger,
        level_name=settings.logging.level,
        log_file=log_file or os.path.join(settings.logging.dir, LOG_FILE_NAME),
        max_files=settings.logging.max_files,
        verbose=verbose,
    )

    orchestrator = BackupOrchestrator(settings)

    if once:
        try:
            orchestrator.perform_backup()
        except BackupError:
            raise SystemExit(1)
        raise SystemExit(0)

    BackupScheduler(orchestrator, settings.backup.schedule).start()


if __name__ == "__main__":
    main()
