"""Tests for the teacher session flow: persist, patch, evaluate, notify."""

import asyncio
from datetime import datetime

import pytest

from gradebook.errors import (
    InvalidDate,
    InvalidNumber,
    InvalidStudent,
    NotFound,
    NotifierFailure,
    StoreFailure,
)
from gradebook.models import Band
from gradebook.notifier import LogNotifier
from gradebook.service import GradebookSession
from gradebook.store import InMemoryRecordStore


class FailingStore(InMemoryRecordStore):
    """Store whose writes fail."""

    async def insert(self, name, grade):
        raise StoreFailure("insert rejected")

    async def update_grade(self, student_id, grade):
        raise ConnectionError("network down")


class FailingNotifier:
    """Notifier that rejects one tag and accepts the rest."""

    def __init__(self, failing_tag):
        self.failing_tag = failing_tag
        self.delivered = []

    async def schedule_notification(self, payload):
        if payload['tag'] == self.failing_tag:
            raise NotifierFailure("permission denied")
        self.delivered.append(payload)


def run(coro):
    return asyncio.run(coro)


def make_session(records, store_cls=InMemoryRecordStore, notifier=None, clock=None):
    notifier = notifier or LogNotifier()
    session = GradebookSession(store=store_cls(records), notifier=notifier, clock=clock)
    run(session.load())
    return session, notifier


def test_load_seeds_average():
    session, notifier = make_session([
        {'id': "a", 'name': "Ada", 'grade': 90},
        {'id': "b", 'name': "Ben", 'grade': "70"},
    ])

    assert [s.id for s in session.roster.students] == ["a", "b"]
    assert session.tracker.current == 80
    assert session.tracker.previous is None
    assert notifier.delivered == []


def test_load_empty_store():
    session, _ = make_session([])
    assert len(session.roster) == 0
    assert session.class_average() is None
    assert not session.tracker.seeded


def test_load_malformed_record():
    session = GradebookSession(
        store=InMemoryRecordStore([{'id': "a", 'name': "  ", 'grade': 50}]),
        notifier=LogNotifier(),
    )
    with pytest.raises(StoreFailure):
        run(session.load())


def test_update_grade_end_to_end():
    """One student at 60 moved to 95 with default thresholds."""
    session, notifier = make_session([{'id': 1, 'name': "Ada", 'grade': 60}])

    event = run(session.update_grade("1", 95))

    assert event.band == Band.A_PLUS
    assert event.grade_intent.title == "Outstanding"
    assert event.class_average == 95
    assert event.average_intent is not None
    assert event.average_intent.data['delta'] == "35.0"
    assert event.delivered == 2
    assert {p['tag'] for p in notifier.delivered} == {"grades", "average"}

    # Store and cache agree
    stored = run(session.store.fetch_all())
    assert stored[0]['grade'] == 95
    assert session.roster.get("1").grade == 95


def test_update_grade_small_average_change():
    session, notifier = make_session([
        {'id': "a", 'name': "Ada", 'grade': 80},
        {'id': "b", 'name': "Ben", 'grade': 80},
    ])

    event = run(session.update_grade("a", "86"))

    assert event.band == Band.B_PLUS
    assert event.class_average == 83
    assert event.average_intent is None
    assert len(notifier.delivered) == 1


def test_update_grade_uses_current_thresholds():
    session, _ = make_session([{'id': "a", 'name': "Ada", 'grade': 50}])
    session.set_threshold('APlus', '97.5')

    event = run(session.update_grade("a", 95))
    assert event.band == Band.B_PLUS


def test_update_grade_invalid_number():
    session, notifier = make_session([{'id': "a", 'name': "Ada", 'grade': 50}])

    with pytest.raises(InvalidNumber):
        run(session.update_grade("a", "ninety"))

    assert session.roster.get("a").grade == 50
    assert notifier.delivered == []


def test_update_grade_unknown_student():
    session, notifier = make_session([{'id': "a", 'name': "Ada", 'grade': 50}])

    with pytest.raises(NotFound):
        run(session.update_grade("zzz", 90))

    assert notifier.delivered == []


def test_update_grade_store_failure_changes_nothing():
    """A failed persist leaves the cache, average and notifier untouched."""
    session, notifier = make_session([{'id': "a", 'name': "Ada", 'grade': 50}], store_cls=FailingStore)

    with pytest.raises(StoreFailure):
        run(session.update_grade("a", 99))

    assert session.roster.get("a").grade == 50
    assert session.tracker.current == 50
    assert notifier.delivered == []


def test_notifier_failure_keeps_grade_change():
    notifier = FailingNotifier(failing_tag="grades")
    session, _ = make_session([{'id': "a", 'name': "Ada", 'grade': 50}], notifier=notifier)

    event = run(session.update_grade("a", 95))

    assert session.roster.get("a").grade == 95
    assert event.delivered == 1
    assert [p['tag'] for p in notifier.delivered] == ["average"]


def test_add_student():
    session, notifier = make_session([{'id': "a", 'name': "Ada", 'grade': 90}])

    event = run(session.add_student(" Ben ", "70"))

    assert event.student.name == "Ben"
    assert event.student.grade == 70
    assert event.band == Band.C_PLUS
    assert session.roster.students[-1].id == event.student.id
    assert event.class_average == 80
    assert event.average_intent is not None
    assert event.average_intent.data['delta'] == "10.0"
    assert len(run(session.store.fetch_all())) == 2


def test_add_first_student_seeds_baseline():
    session, notifier = make_session([])

    event = run(session.add_student("Ada", 40))

    assert event.class_average == 40
    assert event.average_intent is None
    assert event.grade_intent.title == "Grade updated"
    assert len(notifier.delivered) == 1


def test_add_student_requires_both_fields():
    session, _ = make_session([])

    with pytest.raises(InvalidStudent):
        run(session.add_student("", "80"))
    with pytest.raises(InvalidNumber):
        run(session.add_student("Ada", ""))

    assert len(session.roster) == 0
    assert run(session.store.fetch_all()) == []


def test_add_student_store_failure():
    session, notifier = make_session([], store_cls=FailingStore)

    with pytest.raises(StoreFailure):
        run(session.add_student("Ada", "80"))

    assert len(session.roster) == 0
    assert notifier.delivered == []


def test_schedule_reminder():
    session, notifier = make_session([], clock=lambda: datetime(2024, 11, 1, 8, 0))

    intent = run(session.schedule_reminder("11/11/2024"))

    assert intent.fire_at == datetime(2024, 11, 10, 9, 0)
    assert notifier.delivered[0]['fireAt'] == "2024-11-10T09:00:00"
    assert notifier.delivered[0]['tag'] == "reminders"


def test_schedule_reminder_invalid_date():
    session, notifier = make_session([])

    with pytest.raises(InvalidDate):
        run(session.schedule_reminder("31/12/2024"))

    assert notifier.delivered == []


def test_seed_record_with_falsy_id_keeps_it():
    store = InMemoryRecordStore([{'id': 0, 'name': "Ada", 'grade': 88}])
    records = run(store.fetch_all())
    assert records[0]['id'] == "0"


class ReloadingStore(InMemoryRecordStore):
    """Store whose update lands while the roster is reloaded empty."""

    session = None

    async def update_grade(self, student_id, grade):
        await super().update_grade(student_id, grade)
        self.session.roster.load([])


def test_student_dropped_during_update(caplog):
    """Student removed from the roster mid-update raises NotFound and logs the split."""
    session, notifier = make_session([{'id': "a", 'name': "Ada", 'grade': 50}], store_cls=ReloadingStore)
    session.store.session = session

    with caplog.at_level("ERROR", logger="gradebook.service"):
        with pytest.raises(NotFound):
            run(session.update_grade("a", 90))

    assert "left the roster" in caplog.text
    assert run(session.store.fetch_all())[0]['grade'] == 90
    assert notifier.delivered == []
