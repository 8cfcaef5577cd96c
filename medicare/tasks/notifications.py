import logging
from celery import shared_task

logger = logging.getLogger(__name__)


@shared_task(bind=True, max_retries=3, default_retry_delay=60)
def send_reminder_alert_task(self, reminder: dict, fire_at: str) -> None:
    """Show a medication reminder. Delivery is local and best effort: it is logged."""
    instructions = reminder.get("instructions")
    logger.info(
        "[Reminder] %s: take %s of %s%s",
        fire_at,
        reminder.get("dosage"),
        reminder.get("medicineName"),
        f" ({instructions})" if instructions else "",
    )
