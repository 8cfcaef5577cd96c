"""Medication reminders: storage, validation and best-effort local alerts."""
import datetime as dt
import logging
from typing import Any, Callable, List, Optional, Tuple

from pydantic import ValidationError as SchemaError

from medicare.metrics import REMINDERS_CREATED, REMINDER_ALERTS
from .errors import ValidationError
from .notifications import NotificationError
from .records import (
    DEFAULT_DURATION_DAYS,
    Frequency,
    Reminder,
    new_reminder_id,
    utcnow,
)
from .storage import REMINDERS_KEY, Storage, load_entries

logger = logging.getLogger(__name__)

MINUTES_PER_DAY = 24 * 60


def _filled(value) -> bool:
    return value is not None and str(value).strip() != ""


def _parse_frequency(value) -> Frequency:
    if isinstance(value, Frequency):
        return value
    try:
        return Frequency(str(value).strip().lower())
    except ValueError:
        raise ValidationError(f"Unknown frequency: {value}", fields=["frequency"])


def _parse_time(value) -> dt.time:
    if isinstance(value, dt.time):
        return value.replace(second=0, microsecond=0)
    try:
        return dt.datetime.strptime(str(value).strip(), "%H:%M").time()
    except ValueError:
        raise ValidationError("Reminder time must be HH:MM", fields=["time"])


def _duration(value) -> int:
    if value is None or str(value).strip() == "":
        return DEFAULT_DURATION_DAYS
    try:
        days = int(value)
    except (TypeError, ValueError):
        raise ValidationError("Duration must be a whole number of days", fields=["duration_days"])
    return days if days > 0 else DEFAULT_DURATION_DAYS


def _local_date(moment: dt.datetime) -> dt.date:
    if moment.tzinfo is not None:
        moment = moment.astimezone()
    return moment.date()


class ReminderScheduler:
    def __init__(self, storage: Storage, notifier, clock: Callable[[], dt.datetime] = utcnow):
        self._storage = storage
        self._notifier = notifier
        self._clock = clock
        self._reminders: List[Reminder] = []
        self._unreadable: List[Any] = []
        self._permission: Optional[bool] = None

    def load(self) -> None:
        self._reminders = []
        self._unreadable = []
        for entry in load_entries(self._storage, REMINDERS_KEY):
            try:
                self._reminders.append(Reminder.model_validate(entry))
            except (SchemaError, TypeError) as e:
                logger.warning("Skipping unreadable stored reminder: %s", e)
                self._unreadable.append(entry)

    def list(self) -> List[Reminder]:
        return list(self._reminders)

    def get(self, reminder_id) -> Optional[Reminder]:
        return next((r for r in self._reminders if str(r.id) == str(reminder_id)), None)

    def create(self, medicine_name, dosage, frequency, time, duration_days=None, instructions=None) -> Reminder:
        required = (
            ("medicine_name", medicine_name),
            ("dosage", dosage),
            ("frequency", frequency),
            ("time", time),
        )
        missing = [name for name, value in required if not _filled(value)]
        if missing:
            raise ValidationError("Please fill all required fields!", fields=missing)

        reminder = Reminder(
            id=new_reminder_id(),
            medicine_name=str(medicine_name).strip(),
            dosage=str(dosage).strip(),
            frequency=_parse_frequency(frequency),
            time=_parse_time(time),
            duration_days=_duration(duration_days),
            instructions=(instructions or "").strip(),
            created_at=self._clock(),
        )
        self._save(self._reminders + [reminder])
        REMINDERS_CREATED.inc()
        logger.info("Reminder set for %s at %s", reminder.medicine_name, reminder.time.strftime("%H:%M"))
        self.request_notification_permission()
        return reminder

    def delete(self, reminder_id) -> None:
        self._unreadable = [
            entry for entry in self._unreadable
            if not (isinstance(entry, dict) and str(entry.get("id")) == str(reminder_id))
        ]
        self._save([r for r in self._reminders if str(r.id) != str(reminder_id)])

    def request_notification_permission(self) -> bool:
        """Ask once per session; the answer (or a failure, read as a denial) is kept."""
        if self._permission is None:
            try:
                self._permission = bool(self._notifier.request_permission())
            except NotificationError as e:
                logger.warning("Notification permission request failed: %s", e)
                self._permission = False
            if not self._permission:
                logger.info("Notifications not permitted; reminders will not alert")
        return self._permission

    @staticmethod
    def schedule_for(reminder: Reminder) -> List[dt.time]:
        """Times of day for each dose, first dose first, spaced evenly over 24h."""
        doses = reminder.frequency.doses_per_day
        first = reminder.time.hour * 60 + reminder.time.minute
        step = MINUTES_PER_DAY // doses
        times = []
        for n in range(doses):
            minutes = (first + n * step) % MINUTES_PER_DAY
            times.append(dt.time(minutes // 60, minutes % 60))
        return times

    def due(self, start: dt.datetime, end: dt.datetime) -> List[Tuple[Reminder, dt.datetime]]:
        """Doses falling in ``[start, end)``; both bounds are naive local times."""
        found = []
        for reminder in self._reminders:
            if not reminder.is_active:
                continue
            first_day = _local_date(reminder.created_at)
            last_day = first_day + dt.timedelta(days=reminder.duration_days - 1)
            times = self.schedule_for(reminder)
            day = start.date()
            while day <= end.date():
                if first_day <= day <= last_day:
                    for t in times:
                        fire_at = dt.datetime.combine(day, t)
                        if start <= fire_at < end:
                            found.append((reminder, fire_at))
                day += dt.timedelta(days=1)
        found.sort(key=lambda pair: pair[1])
        return found

    def dispatch_due(self, start: dt.datetime, end: dt.datetime) -> int:
        if not self.request_notification_permission():
            return 0
        sent = 0
        for reminder, fire_at in self.due(start, end):
            try:
                self._notifier.alert(reminder, fire_at)
            except NotificationError as e:
                logger.warning("Reminder alert for %s dropped: %s", reminder.medicine_name, e)
                continue
            REMINDER_ALERTS.inc()
            sent += 1
        return sent

    def _save(self, reminders: List[Reminder]) -> None:
        self._storage.set(REMINDERS_KEY, [r.to_json() for r in reminders] + self._unreadable)
        self._reminders = reminders
