"""
APScheduler Service
Runs the daily guest reminder sweep in the background
"""
import logging
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger
from app.config import settings
from app.services.email_service import get_email_service
from app.services.google_sheets import get_row_store
from app.services.reservation_service import run_reminder_sweep

logger = logging.getLogger(__name__)


class SchedulerService:
    """Service to manage background scheduler tasks"""

    def __init__(self, store_factory=get_row_store, email_factory=get_email_service):
        self.store_factory = store_factory
        self.email_factory = email_factory
        self.scheduler = BackgroundScheduler(timezone=settings.timezone)
        self._setup_jobs()

    def _setup_jobs(self):
        """Setup all background jobs"""
        # Reminders match exact day counts, so one run per day
        self.scheduler.add_job(
            self._send_guest_reminders,
            CronTrigger(hour=settings.reminder_hour, minute=0, timezone=settings.timezone),
            id="guest_reminders",
            name="Send guest reminder emails",
            replace_existing=True
        )

    def _send_guest_reminders(self):
        """
        Send reminder emails for bookings whose check-in is exactly one of
        the reminder thresholds away. Errors are logged, never raised into
        the scheduler thread.
        """
        try:
            summary = run_reminder_sweep(self.store_factory(), self.email_factory())
            failed = [r["booking_id"] for r in summary["results"] if not r["success"]]
            if failed:
                logger.warning("Reminder sweep failed for bookings: %s", ", ".join(failed))
            return summary
        except Exception:
            logger.exception("Error in guest reminders job")
            return None

    def start(self):
        """Start the scheduler"""
        if not self.scheduler.running:
            self.scheduler.start()
            logger.info("Scheduler started")

    def stop(self):
        """Stop the scheduler"""
        if self.scheduler.running:
            self.scheduler.shutdown()
            logger.info("Scheduler stopped")


# Global scheduler instance
_scheduler_service = None


def get_scheduler() -> SchedulerService:
    """Get or create scheduler instance"""
    global _scheduler_service
    if _scheduler_service is None:
        _scheduler_service = SchedulerService()
    return _scheduler_service


def start_scheduler():
    """Start the background scheduler"""
    scheduler = get_scheduler()
    scheduler.start()


def stop_scheduler():
    """Stop the background scheduler"""
    scheduler = get_scheduler()
    scheduler.stop()
