"""Backup artifact path generation."""

import os
from datetime import datetime, timezone
from typing import Callable

from backupagent.constants import ARTIFACT_EXTENSION
from backupagent.models import BackupArtifact


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_timestamp(moment: datetime) -> str:
    """ISO-8601 UTC timestamp with ``:`` and ``.`` replaced by ``-``."""
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    millis = moment.microsecond // 1000
    return f"{moment:%Y-%m-%dT%H-%M-%S}-{millis:03d}Z"


class ArtifactNamer:
    """Reserves a timestamped path for the next dump. Performs no I/O."""

    def __init__(self, clock: Callable[[], datetime] = _utc_now):
        self.clock = clock

    def next_artifact(self, output_dir: str, filename_prefix: str) -> BackupArtifact:
        created_at = self.clock()
        filename = f"{filename_prefix}-{format_timestamp(created_at)}{ARTIFACT_EXTENSION}"
        return BackupArtifact(path=os.path.join(output_dir, filename), created_at=created_at)

    def next_artifact_path(self, output_dir: str, filename_prefix: str) -> str:
        return self.next_artifact(output_dir, filename_prefix).path
