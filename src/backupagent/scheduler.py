"""Cron-driven trigger that calls the orchestrator on a schedule."""

import logging
import re
import signal

from apscheduler.schedulers.blocking import BlockingScheduler
from apscheduler.triggers.cron import CronTrigger

from .errors import BackupError

logger = logging.getLogger("backupagent")


CRONTAB_DAY_NAMES = ("sun", "mon", "tue", "wed", "thu", "fri", "sat")


def crontab_day_of_week(field: str) -> str:
    """Translate crontab day numbers (0 and 7 are Sunday) into day names.

    APScheduler counts 0 as Monday, so numbers are never passed through.
    Parts already written with names are kept as they are.
    """
    if field == "*":
        return field

    parts = []
    for part in field.split(","):
        base, _, step = part.partition("/")
        if base == "*":
            start, end = 0, 6
        elif re.fullmatch(r"\d+-\d+", base):
            start, end = (int(value) for value in base.split("-"))
        elif re.fullmatch(r"\d+", base):
            start = end = int(base)
        else:
            parts.append(part)
            continue

        if end > 7 or start > end:
            raise ValueError(f"Invalid day of week: {part!r}")

        for day in range(start, end + 1, int(step) if step else 1):
            name = CRONTAB_DAY_NAMES[day % 7]
            if name not in parts:
                parts.append(name)

    return ",".join(parts)


def build_trigger(schedule: str) -> CronTrigger:
    minute, hour, day, month, day_of_week = schedule.split()
    return CronTrigger(
        minute=minute,
        hour=hour,
        day=day,
        month=month,
        day_of_week=crontab_day_of_week(day_of_week),
    )


class BackupScheduler:
    """Runs one backup eagerly, then on every cron tick until stopped."""

    JOB_ID = "backup_job"

    def __init__(self, orchestrator, schedule: str, scheduler=None):
        self.orchestrator = orchestrator
        self.schedule = schedule
        self.scheduler = scheduler or BlockingScheduler()
        self.shutdown_requested = False

    def run_backup_job(self) -> bool:
        try:
            self.orchestrator.perform_backup()
        except BackupError as exc:
            logger.error("Scheduled backup failed: %s", exc)
            return False
        return True

    def setup(self):
        self.scheduler.add_job(
            self.run_backup_job,
            trigger=build_trigger(self.schedule),
            id=self.JOB_ID,
            name="Scheduled Backup",
            misfire_grace_time=3600,
        )
        logger.info("Backup scheduled: %s", self.schedule)

    def handle_shutdown(self, signum, frame):
        logger.info("Received signal %s, shutting down scheduler...", signum)
        self.shutdown_requested = True
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)

    def start(self):
        signal.signal(signal.SIGTERM, self.handle_shutdown)
        signal.signal(signal.SIGINT, self.handle_shutdown)

        self.setup()
        self.run_backup_job()
        if self.shutdown_requested:
            logger.info("Shutdown requested, not starting scheduler")
            return

        logger.info("%s backup service started successfully", self.orchestrator.display_name)
        try:
            self.scheduler.start()
        except (KeyboardInterrupt, SystemExit):
            pass
        logger.info("Backup service stopped")
