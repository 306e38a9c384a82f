"""
APScheduler entry points for the daily generation run.
"""
from __future__ import annotations

import logging

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.schedulers.blocking import BlockingScheduler

from dailynews.errors import DailyNewsError

logger = logging.getLogger(__name__)

JOB_ID = "daily_generation"


def run_daily_generation(services) -> None:
    try:
        run = services.article_generator().run()
    except DailyNewsError as exc:
        logger.error("Scheduled generation did not start: %s", exc)
        return
    logger.info(
        "Scheduled generation for %s: %s generated, %s skipped, %s failed",
        run.date,
        run.generated_count,
        run.skipped_count,
        run.failed_count,
    )


def build_scheduler(services, blocking: bool = True):
    scheduler_cls = BlockingScheduler if blocking else BackgroundScheduler
    scheduler = scheduler_cls(timezone="UTC")
    scheduler.add_job(
        run_daily_generation,
        "cron",
        args=[services],
        hour=services.settings.schedule_hour_utc,
        minute=0,
        id=JOB_ID,
        max_instances=1,
        coalesce=True,
        misfire_grace_time=3600,
    )
    return scheduler


def run_scheduler(services) -> None:
    scheduler = build_scheduler(services, blocking=True)
    logger.info("Daily generation scheduled at %02d:00 UTC", services.settings.schedule_hour_utc)
    try:
        scheduler.start()
    except (KeyboardInterrupt, SystemExit):
        logger.info("Scheduler stopped")
