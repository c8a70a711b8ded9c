"""
Tests for the trash purge job and its scheduling.
"""

import logging
from datetime import timezone

from apscheduler.schedulers.background import BackgroundScheduler

from notesapp.background import scheduler as scheduler_module
from notesapp.background.trash_cleanup import purge_expired_trash
from notesapp.features.notes.schemas import NoteCreate, NoteStatus
from notesapp.features.notes.service import NotesService

from conftest import add_user, days_ago


def _trash(notes, db, note_id, age_days):
    notes.soft_delete(note_id)
    db.row("notes", note_id)["trashed_at"] = days_ago(age_days)


class TestPurgeExpiredTrash:
    def test_only_old_trash_is_deleted(self, db, notes, make_note, list_ids):
        old = make_note(title="old")
        recent = make_note(title="recent")
        alive = make_note(title="alive")
        _trash(notes, db, old["id"], 31)
        _trash(notes, db, recent["id"], 29)

        assert purge_expired_trash(db, cutoff_days=30) == 1
        remaining = {r["id"] for r in db.rows("notes")}
        assert remaining == {recent["id"], alive["id"]}
        assert list_ids(view=NoteStatus.TRASHED) == [recent["id"]]

    def test_second_run_deletes_nothing(self, db, notes, make_note):
        note = make_note()
        _trash(notes, db, note["id"], 40)
        assert purge_expired_trash(db, cutoff_days=30) == 1
        assert purge_expired_trash(db, cutoff_days=30) == 0

    def test_restored_note_survives(self, db, notes, make_note):
        note = make_note()
        _trash(notes, db, note["id"], 40)
        notes.restore(note["id"])
        assert purge_expired_trash(db, cutoff_days=30) == 0
        assert notes.get_note(note["id"])["status"] == "active"

    def test_crosses_owners(self, db, notes, make_note):
        bob = NotesService(db, add_user(db, name="Bob", email="bob@example.com"))
        theirs = bob.create_note(NoteCreate(title="bob", content="x"))
        mine = make_note()
        _trash(bob, db, theirs["id"], 45)
        _trash(notes, db, mine["id"], 45)
        assert purge_expired_trash(db, cutoff_days=30) == 2

    def test_uses_configured_retention(self, db, notes, make_note):
        note = make_note()
        _trash(notes, db, note["id"], 29)
        assert purge_expired_trash(db) == 0
        db.row("notes", note["id"])["trashed_at"] = days_ago(31)
        assert purge_expired_trash(db) == 1


class TestScheduler:
    def test_job_registered_on_interval(self, monkeypatch):
        test_sched = BackgroundScheduler(timezone=timezone.utc)
        monkeypatch.setattr(scheduler_module, "scheduler", test_sched)

        scheduler_module.init_scheduler()
        try:
            jobs = test_sched.get_jobs()
            assert [j.id for j in jobs] == [scheduler_module.TRASH_PURGE_JOB]
            assert jobs[0].trigger.interval.total_seconds() == 24 * 3600
        finally:
            scheduler_module.shutdown_scheduler()
        assert not test_sched.running

    def test_failed_run_is_logged(self, monkeypatch, caplog):
        def boom():
            raise RuntimeError("store unavailable")

        monkeypatch.setattr(scheduler_module, "purge_expired_trash", boom)
        with caplog.at_level(logging.ERROR):
            scheduler_module.run_trash_purge()
        assert "Trash purge failed" in caplog.text
