import logging
from typing import Optional

from rich.console import Console

from .errors import BackupAgentError, BackupError
from .models import BackupArtifact, BackupResult, NotificationMessage
from .services.artifact_namer import ArtifactNamer
from .services.command_runner import CommandRunner
from .services.dump_command import EngineStrategy, engine_for
from .services.dump_executor import DumpExecutor
from .services.notification import Notifier
from .services.upload import S3UploadGateway
from .settings import Settings

console = Console()
logger = logging.getLogger("backupagent")


class BackupOrchestrator:
    """Runs one backup: dump, then optional upload, then notification.

    The same orchestrator serves every engine; the :class:`EngineStrategy`
    supplies the dump command, the display name and the engine settings.
    Nothing is stored between runs, so overlapping calls only share the
    read-only settings and the stateless collaborators.
    """

    def __init__(
        self,
        settings: Settings,
        engine: Optional[EngineStrategy] = None,
        command_runner=None,
        upload_gateway=None,
        notifier=None,
        namer: Optional[ArtifactNamer] = None,
    ):
        self.settings = settings
        self.engine = engine or engine_for(settings.database_type)
        self.engine_config = self.engine.engine_config(settings)

        self.command_runner = command_runner or CommandRunner(logger=logger)
        self.dump_executor = DumpExecutor(command_runner=self.command_runner, logger=logger)
        self.upload_gateway = upload_gateway or S3UploadGateway(settings.s3, logger=logger)
        self.notifier = notifier or Notifier(settings.notification, logger=logger)
        self.namer = namer or ArtifactNamer()

    @property
    def display_name(self) -> str:
        return self.engine.display_name

    def build_success_message(self, artifact: BackupArtifact) -> NotificationMessage:
        return NotificationMessage(
            title=f"{self.display_name} Backup Successful",
            body=(
                "Database backup completed successfully.\n"
                f"Database: {self.engine_config.database}\n"
                f"Path: {artifact.path}"
            ),
            artifact_path=artifact.path,
        )

    def build_failure_message(self, error: BaseException) -> NotificationMessage:
        return NotificationMessage(
            title=f"{self.display_name} Backup Failed",
            body=f"Database backup failed.\nDatabase: {self.engine_config.database}",
            error=str(error) or error.__class__.__name__,
        )

    def _notify(self, message: NotificationMessage):
        try:
            self.notifier.notify(message)
        except Exception as exc:
            logger.error("Failed to send notification: %s", exc)

    def _dump(self, artifact: BackupArtifact) -> str:
        command = self.engine.build_command(self.engine_config, artifact.path)
        return self.dump_executor.execute(command)

    def perform_backup(self) -> BackupResult:
        logger.info("Starting %s database backup", self.display_name)

        artifact = self.namer.next_artifact(
            self.settings.backup.output_dir,
            self.settings.backup.filename_prefix,
        )

        try:
            self._dump(artifact)
            logger.info("Backup completed successfully: %s", artifact.path)

            if self.settings.s3.enabled:
                self.upload_gateway.upload(artifact.path)
                logger.info("Backup uploaded to S3 successfully")

        except BackupAgentError as exc:
            console.print(f"[bold red]Backup failed:[/bold red] {exc}")
            logger.error("Backup process failed: %s", exc)
            self._notify(self.build_failure_message(exc))
            raise BackupError(f"{self.display_name} backup failed: {exc}", cause=exc) from exc
        except Exception as exc:
            console.print(f"[bold red]Unexpected error:[/bold red] {exc}")
            logger.exception("Unexpected error during backup")
            self._notify(self.build_failure_message(exc))
            raise BackupError(f"{self.display_name} backup failed: {exc}", cause=exc) from exc

        console.print(f"[bold green]Backup complete:[/bold green] {artifact.path}")
        self._notify(self.build_success_message(artifact))
        return BackupResult(success=True, artifact=artifact)
