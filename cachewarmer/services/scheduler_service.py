import logging
from typing import Any, Callable, Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

logger = logging.getLogger(__name__)

JOB_ID = "warm:schedule"


def _parse_schedule(schedule: Any):
    """Return an APScheduler CronTrigger from a cron schedule string.

    Accepts cron strings like '0 */6 * * *' (crontab format).
    Returns None if schedule is missing or cannot be parsed.
    """
    if schedule is None or (isinstance(schedule, str) and schedule.strip() == ""):
        return None
    if isinstance(schedule, str):
        try:
            return CronTrigger.from_crontab(schedule.strip())
        except Exception:
            logger.exception("Error parsing cron schedule: %s", schedule)
            return None
    logger.warning("Unsupported schedule format: %s (only cron strings supported)", type(schedule))
    return None


class SchedulerService:
    """Runs a full warming chain on a cron schedule inside the server process.

    `run_chain` is any zero-argument callable; in production it drives the
    automation profile in-process until the chain reports done.
    """

    def __init__(self, schedule: Optional[str], run_chain: Callable[[], Any]):
        self.schedule = schedule
        self.run_chain = run_chain
        self._sched: Optional[BackgroundScheduler] = None

    def start(self) -> bool:
        if self._sched is not None:
            return True
        trigger = _parse_schedule(self.schedule)
        if trigger is None:
            logger.debug("No warm schedule configured; scheduler not started")
            return False
        self._sched = BackgroundScheduler()
        self._sched.add_job(
            self._execute,
            trigger=trigger,
            id=JOB_ID,
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )
        self._sched.start()
        logger.info("Scheduler started with schedule %r", self.schedule)
        return True

    def shutdown(self, wait: bool = True):
        if not self._sched:
            return
        try:
            self._sched.shutdown(wait=wait)
            logger.info("Scheduler shut down")
        finally:
            self._sched = None

    def _execute(self):
        logger.info("Scheduled warming chain starting")
        try:
            result = self.run_chain()
            logger.info("Scheduled warming chain finished: %s", getattr(result, "status", result))
        except Exception:
            logger.exception("Scheduled warming chain failed")
