import os
from datetime import datetime, timedelta, timezone

from backupagent.services.artifact_namer import ArtifactNamer, format_timestamp


def _fixed_clock(moment):
    return lambda: moment


def test_artifact_path_embeds_filesystem_safe_timestamp():
    namer = ArtifactNamer(clock=_fixed_clock(datetime(2024, 1, 1, tzinfo=timezone.utc)))

    path = namer.next_artifact_path("/var/backups", "backup")

    assert path == os.path.join("/var/backups", "backup-2024-01-01T00-00-00-000Z.sql")
    assert ":" not in os.path.basename(path)


def test_artifact_records_creation_time():
    moment = datetime(2024, 5, 17, 13, 45, 9, 250000, tzinfo=timezone.utc)
    namer = ArtifactNamer(clock=_fixed_clock(moment))

    artifact = namer.next_artifact("out", "nightly")

    assert artifact.created_at == moment
    assert artifact.path.endswith("nightly-2024-05-17T13-45-09-250Z.sql")


def test_paths_differ_when_timestamps_are_a_second_apart():
    start = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
    moments = iter([start, start + timedelta(seconds=1)])
    namer = ArtifactNamer(clock=lambda: next(moments))

    first = namer.next_artifact_path("out", "backup")
    second = namer.next_artifact_path("out", "backup")

    assert first != second


def test_format_timestamp_converts_to_utc():
    moment = datetime(2024, 1, 1, 2, 30, tzinfo=timezone(timedelta(hours=2)))

    assert format_timestamp(moment) == "2024-01-01T00-30-00-000Z"


def test_naming_does_not_touch_missing_directories(tmp_path):
    missing = tmp_path / "does-not-exist"
    namer = ArtifactNamer()

    path = namer.next_artifact_path(str(missing), "backup")

    assert path.startswith(str(missing))
    assert not missing.exists()
