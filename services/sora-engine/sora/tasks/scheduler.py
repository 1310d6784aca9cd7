"""Background scheduler for the daily study re-assessment."""

import logging

from apscheduler.schedulers.background import BackgroundScheduler

from sora.config import get_settings

logger = logging.getLogger(__name__)

_scheduler: BackgroundScheduler | None = None


def _run_scheduled_reassessment():
    """Run re-assessment as a scheduled job."""
    logger.info("Scheduled re-assessment triggered")
    from sora.services.reassessment import run_reassessment, try_start_job

    if not try_start_job():
        logger.info("Re-assessment already running, skipping scheduled run")
        return
    run_reassessment()


def start_scheduler():
    """Start the background re-assessment scheduler."""
    global _scheduler
    settings = get_settings()

    if not settings.reassessment_enabled:
        logger.info("Re-assessment scheduler disabled")
        return

    _scheduler = BackgroundScheduler()
    _scheduler.add_job(
        _run_scheduled_reassessment,
        "cron",
        hour=settings.reassessment_schedule_hour,
        minute=0,
        id="daily_reassessment",
        name="Daily Study Re-assessment",
        replace_existing=True,
    )
    _scheduler.start()
    logger.info(
        "Scheduler started: daily re-assessment at %02d:00",
        settings.reassessment_schedule_hour,
    )


def stop_scheduler():
    """Stop the background scheduler."""
    global _scheduler
    if _scheduler:
        _scheduler.shutdown(wait=False)
        _scheduler = None
        logger.info("Scheduler stopped")
