"""Dedicated APScheduler worker process."""
from __future__ import annotations

import logging
import signal
import threading

from apscheduler.schedulers.background import BackgroundScheduler

from app.core.config import settings
from app.core.context import request_context
from app.core.logging import configure_logging
from app.db.deps import close_store, get_store
from app.services.job_runner import HIERARCHY_REPAIR_JOB, run_hierarchy_repair

logger = logging.getLogger(__name__)


def main() -> None:
    configure_logging(log_level=settings.log_level)
    logger.info("Scheduler worker starting (enabled=%s)", settings.scheduler_enabled)

    scheduler = BackgroundScheduler(timezone=settings.scheduler_timezone)

    if settings.scheduler_enabled:
        register_jobs(scheduler)
        scheduler.start()
        if settings.jobs_run_on_startup:
            logger.info("Running hierarchy repair once on startup")
            run_repair_job()
    else:
        logger.warning("Scheduler disabled via config; worker will idle")

    stop_event = threading.Event()

    def shutdown(signum, frame):  # pragma: no cover - signal handler
        logger.info("Scheduler worker shutting down (signal=%s)", signum)
        if scheduler.running:
            scheduler.shutdown(wait=False)
        close_store()
        stop_event.set()

    signal.signal(signal.SIGINT, shutdown)
    signal.signal(signal.SIGTERM, shutdown)

    try:
        stop_event.wait()
    except KeyboardInterrupt:  # pragma: no cover - manual stop
        shutdown(signal.SIGINT, None)


def register_jobs(scheduler: BackgroundScheduler) -> None:
    scheduler.add_job(
        run_repair_job,
        trigger="cron",
        hour=settings.repair_job_hour,
        minute=settings.repair_job_minute,
        id=HIERARCHY_REPAIR_JOB,
        replace_existing=True,
    )
    logger.info(
        "Registered %s job (daily at %02d:%02d %s)",
        HIERARCHY_REPAIR_JOB,
        settings.repair_job_hour,
        settings.repair_job_minute,
        settings.scheduler_timezone,
    )


def run_repair_job() -> None:
    with request_context(f"job-{HIERARCHY_REPAIR_JOB}"):
        try:
            result = run_hierarchy_repair(get_store())
        except Exception:  # pragma: no cover - keep the scheduler alive
            logger.exception("Hierarchy repair job failed")
            return
    logger.info("Hierarchy repair job complete (changed=%s)", result.changed)


if __name__ == "__main__":  # pragma: no cover - manual launch
    main()
