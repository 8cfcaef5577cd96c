import datetime as dt

import pytest

from medicare.services.errors import ValidationError
from medicare.services.notifications import NotificationError
from medicare.services.records import Frequency
from medicare.services.reminders import ReminderScheduler
from medicare.services.storage import REMINDERS_KEY, MemoryStorage
from tests.conftest import FakeNotifier

CREATED = dt.datetime(2024, 1, 10, 7, 45)


def _scheduler(storage=None, notifier=None):
    scheduler = ReminderScheduler(storage or MemoryStorage(), notifier or FakeNotifier(), clock=lambda: CREATED)
    scheduler.load()
    return scheduler


def test_create_persists_with_defaults():
    storage = MemoryStorage()
    scheduler = _scheduler(storage)
    reminder = scheduler.create("Paracetamol", "1 tablet", "twice", "08:00")
    assert reminder.duration_days == 7
    assert reminder.is_active
    assert reminder.instructions == ""
    stored = storage.get(REMINDERS_KEY)[0]
    assert stored["medicineName"] == "Paracetamol"
    assert stored["time"] == "08:00"
    assert stored["frequency"] == "twice"
    assert stored["duration"] == 7
    assert stored["isActive"] is True


def test_missing_time_rejected_and_store_unchanged():
    storage = MemoryStorage()
    scheduler = _scheduler(storage)
    with pytest.raises(ValidationError) as exc:
        scheduler.create("Paracetamol", "1 tablet", "once", "")
    assert exc.value.message == "Please fill all required fields!"
    assert exc.value.fields == ["time"]
    assert storage.raw(REMINDERS_KEY) is None
    assert scheduler.list() == []


@pytest.mark.parametrize("value", ["25:00", "8am", "08-00"])
def test_bad_time_rejected(value):
    with pytest.raises(ValidationError) as exc:
        _scheduler().create("Paracetamol", "1 tablet", "once", value)
    assert exc.value.fields == ["time"]


def test_unknown_frequency_rejected():
    with pytest.raises(ValidationError) as exc:
        _scheduler().create("Paracetamol", "1 tablet", "hourly", "08:00")
    assert exc.value.fields == ["frequency"]


@pytest.mark.parametrize("given,expected", [(None, 7), ("", 7), ("14", 14), (0, 7), (-3, 7), (30, 30)])
def test_duration_defaults(given, expected):
    reminder = _scheduler().create("Paracetamol", "1 tablet", "once", "08:00", duration_days=given)
    assert reminder.duration_days == expected


def test_non_numeric_duration_rejected():
    with pytest.raises(ValidationError) as exc:
        _scheduler().create("Paracetamol", "1 tablet", "once", "08:00", duration_days="a week")
    assert exc.value.fields == ["duration_days"]


def test_permission_asked_once_per_session():
    notifier = FakeNotifier(grant=False)
    scheduler = _scheduler(notifier=notifier)
    scheduler.create("Paracetamol", "1 tablet", "once", "08:00")
    scheduler.create("Cetirizine", "1 tablet", "once", "21:00")
    assert notifier.asked == 1
    assert len(scheduler.list()) == 2


def test_permission_failure_counts_as_denied():
    class Broken(FakeNotifier):
        def request_permission(self):
            raise NotificationError("no broker")

    scheduler = _scheduler(notifier=Broken())
    scheduler.create("Paracetamol", "1 tablet", "once", "08:00")
    assert scheduler.request_notification_permission() is False


def test_delete_unknown_id_rewrites_same_list():
    storage = MemoryStorage()
    scheduler = _scheduler(storage)
    kept = scheduler.create("Paracetamol", "1 tablet", "once", "08:00")
    scheduler.delete("nope")
    assert [r["id"] for r in storage.get(REMINDERS_KEY)] == [kept.id]
    scheduler.delete(kept.id)
    assert storage.get(REMINDERS_KEY) == []


@pytest.mark.parametrize("frequency,expected", [
    (Frequency.ONCE, ["08:00"]),
    (Frequency.TWICE, ["08:00", "20:00"]),
    (Frequency.THRICE, ["08:00", "16:00", "00:00"]),
    (Frequency.FOUR, ["08:00", "14:00", "20:00", "02:00"]),
])
def test_schedule_spreads_doses_over_the_day(frequency, expected):
    reminder = _scheduler().create("Paracetamol", "1 tablet", frequency, "08:00")
    assert [t.strftime("%H:%M") for t in ReminderScheduler.schedule_for(reminder)] == expected


def test_due_respects_duration_window():
    scheduler = _scheduler()
    scheduler.create("Paracetamol", "1 tablet", "twice", "08:00", duration_days=3)
    due = scheduler.due(dt.datetime(2024, 1, 9), dt.datetime(2024, 1, 15))
    assert [fire_at for _, fire_at in due] == [
        dt.datetime(2024, 1, 10, 8, 0),
        dt.datetime(2024, 1, 10, 20, 0),
        dt.datetime(2024, 1, 11, 8, 0),
        dt.datetime(2024, 1, 11, 20, 0),
        dt.datetime(2024, 1, 12, 8, 0),
        dt.datetime(2024, 1, 12, 20, 0),
    ]


def test_dispatch_due_alerts_each_dose():
    notifier = FakeNotifier()
    scheduler = _scheduler(notifier=notifier)
    scheduler.create("Paracetamol", "1 tablet", "once", "08:00")
    sent = scheduler.dispatch_due(dt.datetime(2024, 1, 11, 7, 55), dt.datetime(2024, 1, 11, 8, 10))
    assert sent == 1
    assert notifier.alerts == [("Paracetamol", dt.datetime(2024, 1, 11, 8, 0))]


def test_dispatch_skipped_when_denied():
    notifier = FakeNotifier(grant=False)
    scheduler = _scheduler(notifier=notifier)
    scheduler.create("Paracetamol", "1 tablet", "once", "08:00")
    assert scheduler.dispatch_due(dt.datetime(2024, 1, 11), dt.datetime(2024, 1, 12)) == 0
    assert notifier.alerts == []


def test_unreadable_stored_reminders_start_empty():
    storage = MemoryStorage({REMINDERS_KEY: [{"id": "x", "medicineName": "Paracetamol"}]})
    assert _scheduler(storage).list() == []


def _stored_reminder(reminder_id, **overrides):
    entry = {
        "id": reminder_id,
        "medicineName": "Paracetamol",
        "dosage": "1 tablet",
        "frequency": "once",
        "time": "08:00",
        "duration": 7,
        "instructions": "",
        "createdAt": CREATED.isoformat(),
        "isActive": True,
    }
    entry.update(overrides)
    return entry


def test_zero_duration_in_storage_reads_as_default():
    storage = MemoryStorage({REMINDERS_KEY: [_stored_reminder(1), _stored_reminder(2, duration="0")]})
    scheduler = _scheduler(storage)
    assert [r.duration_days for r in scheduler.list()] == [7, 7]
    scheduler.create("Cetirizine", "1 tablet", "once", "21:00")
    assert [r["id"] for r in storage.get(REMINDERS_KEY)][:2] == [1, 2]


def test_unreadable_stored_reminder_kept_on_write():
    broken = _stored_reminder(2, frequency="hourly")
    storage = MemoryStorage({REMINDERS_KEY: [_stored_reminder(1), broken]})
    scheduler = _scheduler(storage)
    assert [r.id for r in scheduler.list()] == [1]
    created = scheduler.create("Cetirizine", "1 tablet", "once", "21:00")
    ids = [r["id"] for r in storage.get(REMINDERS_KEY)]
    assert sorted(map(str, ids)) == sorted(["1", "2", created.id])
    scheduler.delete(2)
    assert 2 not in [r["id"] for r in storage.get(REMINDERS_KEY)]
