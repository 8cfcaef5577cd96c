import logging
from typing import Optional

from kombu.exceptions import OperationalError

from medicare.tasks.notifications import send_reminder_alert_task

logger = logging.getLogger(__name__)


class NotificationError(Exception):
    pass


class CeleryNotificationService:
    """Local reminder alerts queued as Celery tasks.

    Permission stands in for the user's consent to alerts; it is decided by
    configuration and asked for at most once per process.
    """

    def __init__(self, enabled: bool = True):
        self.enabled = enabled
        self._granted: Optional[bool] = None

    @property
    def permission(self) -> str:
        if self._granted is None:
            return "default"
        return "granted" if self._granted else "denied"

    def request_permission(self) -> bool:
        if self._granted is None:
            self._granted = bool(self.enabled)
            logger.info("Notification permission %s", self.permission)
        return self._granted

    def alert(self, reminder, fire_at) -> None:
        try:
            send_reminder_alert_task.delay(reminder.to_json(), fire_at.isoformat())
        except OperationalError as e:
            raise NotificationError(f"Could not queue reminder alert: {e}") from e
