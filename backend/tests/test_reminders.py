"""
Tests for reminders and their recurrence.
"""

from datetime import datetime, timedelta, timezone

import pytest

from notesapp.core.exceptions import NotFoundError, ValidationError
from notesapp.core.repository import parse_timestamp
from notesapp.features.reminders.recurrence import Recurrence, add_months, compute_next_occurrence
from notesapp.features.reminders.schemas import ReminderCreate, ReminderStatus, ReminderUpdate
from notesapp.features.reminders.service import RemindersService


def _utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


def _in(**delta) -> datetime:
    return datetime.now(timezone.utc) + timedelta(**delta)


@pytest.fixture
def reminders(db, user_id):
    return RemindersService(db, user_id)


# -- recurrence --

class TestComputeNextOccurrence:
    @pytest.mark.parametrize("pattern, expected", [
        ("daily", _utc(2024, 3, 11, 9)),
        ("weekly", _utc(2024, 3, 17, 9)),
        ("biweekly", _utc(2024, 3, 24, 9)),
        ("monthly", _utc(2024, 4, 10, 9)),
        ("yearly", _utc(2025, 3, 10, 9)),
    ])
    def test_patterns(self, pattern, expected):
        assert compute_next_occurrence(_utc(2024, 3, 10, 9), pattern) == expected

    def test_none_and_unknown_have_no_successor(self):
        due = _utc(2024, 3, 10)
        assert compute_next_occurrence(due, Recurrence.NONE) is None
        assert compute_next_occurrence(due, "hourly") is None
        assert compute_next_occurrence(due, None) is None

    def test_monthly_clamps_to_month_end(self):
        assert compute_next_occurrence(_utc(2023, 1, 31), "monthly") == _utc(2023, 2, 28)
        assert compute_next_occurrence(_utc(2024, 1, 31), "monthly") == _utc(2024, 2, 29)

    def test_yearly_from_leap_day(self):
        assert compute_next_occurrence(_utc(2024, 2, 29), "yearly") == _utc(2025, 2, 28)

    def test_december_rolls_into_next_year(self):
        assert add_months(_utc(2024, 12, 15, 8, 30), 1) == _utc(2025, 1, 15, 8, 30)


# -- service --

class TestCreateAndUpdate:
    def test_create(self, reminders):
        reminder = reminders.create_reminder(ReminderCreate(title="Call", due_at=_in(days=1)))
        assert reminder["status"] == "pending"
        assert reminder["recurrence"] == "none"
        assert reminder["notification_methods"] == ["app"]

    def test_due_date_must_be_future(self, reminders):
        with pytest.raises(ValidationError):
            reminders.create_reminder(ReminderCreate(due_at=_in(minutes=-1)))

    def test_naive_due_date_is_utc(self):
        data = ReminderCreate(due_at=datetime(2030, 1, 1, 9))
        assert data.due_at.tzinfo == timezone.utc

    def test_note_must_be_owned_and_live(self, reminders, notes, make_note):
        with pytest.raises(NotFoundError):
            reminders.create_reminder(ReminderCreate(due_at=_in(days=1), note_id="missing"))
        note = make_note()
        notes.soft_delete(note["id"])
        with pytest.raises(NotFoundError):
            reminders.create_reminder(ReminderCreate(due_at=_in(days=1), note_id=note["id"]))

    def test_attached_note_is_embedded(self, reminders, make_note):
        note = make_note(title="Attached")
        reminder = reminders.create_reminder(ReminderCreate(due_at=_in(days=1), note_id=note["id"]))
        assert reminders.get_reminder(reminder["id"])["note"]["title"] == "Attached"
        assert [r["id"] for r in reminders.for_note(note["id"])] == [reminder["id"]]

    def test_update(self, reminders):
        reminder = reminders.create_reminder(ReminderCreate(title="a", due_at=_in(days=1)))
        updated = reminders.update_reminder(reminder["id"], ReminderUpdate(title="b", recurrence=Recurrence.WEEKLY))
        assert (updated["title"], updated["recurrence"]) == ("b", "weekly")
        with pytest.raises(ValidationError):
            reminders.update_reminder(reminder["id"], ReminderUpdate())
        with pytest.raises(ValidationError):
            reminders.update_reminder(reminder["id"], ReminderUpdate(due_at=_in(days=-1)))

    def test_delete(self, reminders):
        reminder = reminders.create_reminder(ReminderCreate(due_at=_in(days=1)))
        reminders.delete_reminder(reminder["id"])
        with pytest.raises(NotFoundError):
            reminders.get_reminder(reminder["id"])


class TestComplete:
    def test_one_off_has_no_successor(self, db, reminders):
        reminder = reminders.create_reminder(ReminderCreate(due_at=_in(days=1)))
        result = reminders.complete(reminder["id"])
        assert result["reminder"]["status"] == "completed"
        assert result["reminder"]["completed_at"] is not None
        assert result["next_reminder"] is None
        assert len(db.rows("reminders")) == 1

    def test_daily_spawns_one_successor(self, db, reminders):
        due = _in(days=1)
        reminder = reminders.create_reminder(
            ReminderCreate(title="Standup", due_at=due, recurrence=Recurrence.DAILY)
        )
        successor = reminders.complete(reminder["id"])["next_reminder"]
        assert successor["status"] == "pending"
        assert successor["title"] == "Standup"
        assert successor["recurrence"] == "daily"
        assert parse_timestamp(successor["due_at"]) == due + timedelta(days=1)
        assert len(db.rows("reminders")) == 2

    def test_completing_twice_is_noop(self, db, reminders):
        reminder = reminders.create_reminder(ReminderCreate(due_at=_in(days=1), recurrence=Recurrence.WEEKLY))
        reminders.complete(reminder["id"])
        again = reminders.complete(reminder["id"])
        assert again["next_reminder"] is None
        assert len(db.rows("reminders")) == 2

    def test_lost_race_creates_no_successor(self, db, reminders, monkeypatch):
        reminder = reminders.create_reminder(ReminderCreate(due_at=_in(days=1), recurrence=Recurrence.DAILY))
        stale = dict(reminder)
        db.row("reminders", reminder["id"])["status"] = "completed"
        monkeypatch.setattr(reminders.reminders, "get", lambda _id: dict(stale))
        assert reminders.complete(reminder["id"])["next_reminder"] is None
        assert len(db.rows("reminders")) == 1


class TestSnoozeAndListing:
    def test_snooze_reopens(self, reminders):
        reminder = reminders.create_reminder(ReminderCreate(due_at=_in(days=1)))
        reminders.complete(reminder["id"])
        before = datetime.now(timezone.utc)
        snoozed = reminders.snooze(reminder["id"], minutes=30)
        assert snoozed["status"] == "pending"
        assert snoozed["completed_at"] is None
        due = parse_timestamp(snoozed["due_at"])
        assert before + timedelta(minutes=29) < due <= datetime.now(timezone.utc) + timedelta(minutes=30)

    def test_upcoming_window(self, db, reminders):
        soon = reminders.create_reminder(ReminderCreate(title="soon", due_at=_in(days=2)))
        reminders.create_reminder(ReminderCreate(title="later", due_at=_in(days=10)))
        done = reminders.create_reminder(ReminderCreate(title="done", due_at=_in(days=1)))
        reminders.complete(done["id"])
        overdue = reminders.create_reminder(ReminderCreate(title="overdue", due_at=_in(days=1)))
        db.row("reminders", overdue["id"])["due_at"] = _in(hours=-1).isoformat()

        assert [r["id"] for r in reminders.upcoming()] == [soon["id"]]
        assert [r["title"] for r in reminders.list_reminders(upcoming=True)] == ["soon", "later"]

    def test_list_by_status_in_due_order(self, reminders):
        late = reminders.create_reminder(ReminderCreate(title="late", due_at=_in(days=3)))
        early = reminders.create_reminder(ReminderCreate(title="early", due_at=_in(days=1)))
        assert [r["id"] for r in reminders.list_reminders()] == [early["id"], late["id"]]
        reminders.complete(early["id"])
        pending = reminders.list_reminders(status=ReminderStatus.PENDING)
        assert [r["id"] for r in pending] == [late["id"]]

    def test_other_user_sees_nothing(self, db, reminders, other_user_id):
        reminder = reminders.create_reminder(ReminderCreate(due_at=_in(days=1)))
        bob = RemindersService(db, other_user_id)
        assert bob.list_reminders() == []
        with pytest.raises(NotFoundError):
            bob.complete(reminder["id"])
