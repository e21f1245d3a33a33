from __future__ import annotations

import pytest
from sqlalchemy import func, select

from models.timetable import Timetable
from models.timetable_slot import TimetableSlot
from schemas.timetable import SlotCreate
from services import timetable_service
from services.errors import SlotConflictError
from services.term_service import resolve_active_term
from services.timetable_service import assign_slot, find_conflicts, get_or_create_timetable


def test_find_conflicts_is_empty_for_a_free_period(db, seed):
    cls = seed.school_class()
    term_id = resolve_active_term(db).term_id

    assert find_conflicts(db, term_id=term_id, day_of_week=1, period=1, class_id=cls) == []


def test_assign_slot_writes_term_onto_slot(db, seed):
    cls = seed.school_class()
    subject = seed.subject("MATH")

    slot = assign_slot(db, SlotCreate(class_id=cls, day_of_week=1, period=1, subject_id=subject))

    timetable = db.get(Timetable, slot.timetable_id)
    assert slot.term_id == timetable.term_id == resolve_active_term(db).term_id
    assert timetable.class_id == cls


def test_store_constraint_backs_up_the_detector(db, seed, monkeypatch):
    cls = seed.school_class()
    subject = seed.subject("MATH")
    first = assign_slot(db, SlotCreate(class_id=cls, day_of_week=1, period=1, subject_id=subject))

    real = timetable_service.find_conflicts
    calls = {"n": 0}

    def stale_then_real(*args, **kwargs):
        # The first check misses the concurrent write, as in a detect-then-write race.
        calls["n"] += 1
        if calls["n"] == 1:
            return []
        return real(*args, **kwargs)

    monkeypatch.setattr(timetable_service, "find_conflicts", stale_then_real)

    with pytest.raises(SlotConflictError) as exc_info:
        assign_slot(db, SlotCreate(class_id=cls, day_of_week=1, period=1, subject_id=subject))

    assert [c.id for c in exc_info.value.conflicts] == [first.id]
    assert db.execute(select(func.count()).select_from(TimetableSlot)).scalar_one() == 1


def test_store_constraint_rejects_teacher_double_booking(db, seed, monkeypatch):
    subject = seed.subject("ENG")
    teacher = seed.teacher("T-1")
    class_a = seed.school_class("A")
    class_b = seed.school_class("B")
    assign_slot(db, SlotCreate(class_id=class_a, day_of_week=2, period=3, subject_id=subject, teacher_id=teacher))

    real = timetable_service.find_conflicts
    calls = {"n": 0}

    def stale_then_real(*args, **kwargs):
        calls["n"] += 1
        return [] if calls["n"] == 1 else real(*args, **kwargs)

    monkeypatch.setattr(timetable_service, "find_conflicts", stale_then_real)

    with pytest.raises(SlotConflictError) as exc_info:
        assign_slot(db, SlotCreate(class_id=class_b, day_of_week=2, period=3, subject_id=subject, teacher_id=teacher))

    assert exc_info.value.conflicts[0].reasons == ["TEACHER"]


def test_store_constraint_rejects_room_double_booking(db, seed, monkeypatch):
    subject = seed.subject("CHEM")
    room = seed.room("LAB-1")
    class_a = seed.school_class("A")
    class_b = seed.school_class("B")
    booked = assign_slot(db, SlotCreate(class_id=class_a, day_of_week=4, period=2, subject_id=subject, room_id=room))

    real = timetable_service.find_conflicts
    calls = {"n": 0}

    def stale_then_real(*args, **kwargs):
        calls["n"] += 1
        return [] if calls["n"] == 1 else real(*args, **kwargs)

    monkeypatch.setattr(timetable_service, "find_conflicts", stale_then_real)

    with pytest.raises(SlotConflictError) as exc_info:
        assign_slot(db, SlotCreate(class_id=class_b, day_of_week=4, period=2, subject_id=subject, room_id=room))

    assert [c.id for c in exc_info.value.conflicts] == [booked.id]
    assert exc_info.value.conflicts[0].reasons == ["ROOM"]
    assert db.execute(select(func.count()).select_from(TimetableSlot)).scalar_one() == 1


def test_get_or_create_timetable_recovers_from_first_access_race(db, seed, monkeypatch):
    cls = seed.school_class()
    term_id = resolve_active_term(db).term_id
    existing = get_or_create_timetable(db, class_id=cls, term_id=term_id)

    real = timetable_service._find_timetable
    calls = {"n": 0}

    def miss_once(*args, **kwargs):
        # Simulates a concurrent creator committing between our lookup and insert.
        calls["n"] += 1
        return None if calls["n"] == 1 else real(*args, **kwargs)

    monkeypatch.setattr(timetable_service, "_find_timetable", miss_once)

    again = get_or_create_timetable(db, class_id=cls, term_id=term_id)

    assert again.id == existing.id
    assert db.execute(select(func.count()).select_from(Timetable)).scalar_one() == 1
