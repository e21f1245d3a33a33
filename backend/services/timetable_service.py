from __future__ import annotations

import logging
import uuid

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from models.room import Room
from models.school_class import SchoolClass
from models.subject import Subject
from models.teacher import Teacher
from models.term import Term
from models.timetable import Timetable
from models.timetable_slot import TimetableSlot
from schemas.timetable import (
    SlotConflictOut,
    SlotCreate,
    SlotDetailOut,
    SlotRoomOut,
    SlotSubjectOut,
    SlotTeacherOut,
    TimetableOut,
)
from services.errors import EntityNotFoundError, SlotConflictError
from services.term_service import resolve_active_term


logger = logging.getLogger(__name__)

CONFLICT_CLASS = "CLASS"
CONFLICT_TEACHER = "TEACHER"
CONFLICT_ROOM = "ROOM"


def _require(db: Session, model, obj_id: uuid.UUID, code: str):
    obj = db.get(model, obj_id)
    if obj is None:
        raise EntityNotFoundError(code)
    return obj


def resolve_term_id(db: Session, term_id: uuid.UUID | None) -> uuid.UUID:
    if term_id is None:
        return resolve_active_term(db).term_id
    _require(db, Term, term_id, "TERM_NOT_FOUND")
    return term_id


def _find_timetable(db: Session, class_id: uuid.UUID, term_id: uuid.UUID) -> Timetable | None:
    q = select(Timetable).where(Timetable.class_id == class_id).where(Timetable.term_id == term_id)
    return db.execute(q.limit(1)).scalars().first()


def get_or_create_timetable(db: Session, *, class_id: uuid.UUID, term_id: uuid.UUID) -> Timetable:
    """Return the timetable for (class, term), creating and committing it on first access."""

    timetable = _find_timetable(db, class_id, term_id)
    if timetable is not None:
        return timetable

    timetable = Timetable(class_id=class_id, term_id=term_id)
    db.add(timetable)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        # Lost a first-access race; the unique (class_id, term_id) row now exists.
        timetable = _find_timetable(db, class_id, term_id)
        if timetable is None:
            raise
        return timetable

    logger.info("Created timetable id=%s class_id=%s term_id=%s", timetable.id, class_id, term_id)
    return timetable


def _slot_detail_query():
    return (
        select(
            TimetableSlot.id.label("id"),
            TimetableSlot.timetable_id.label("timetable_id"),
            TimetableSlot.day_of_week.label("day_of_week"),
            TimetableSlot.period.label("period"),
            TimetableSlot.teacher_id.label("teacher_id"),
            TimetableSlot.room_id.label("room_id"),
            Timetable.class_id.label("class_id"),
            SchoolClass.name.label("class_name"),
            Subject.id.label("subject_id"),
            Subject.code.label("subject_code"),
            Subject.name.label("subject_name"),
            Teacher.code.label("teacher_code"),
            Teacher.full_name.label("teacher_name"),
            Room.code.label("room_code"),
            Room.name.label("room_name"),
        )
        .select_from(TimetableSlot)
        .join(Timetable, Timetable.id == TimetableSlot.timetable_id)
        .join(SchoolClass, SchoolClass.id == Timetable.class_id)
        .join(Subject, Subject.id == TimetableSlot.subject_id)
        .outerjoin(Teacher, Teacher.id == TimetableSlot.teacher_id)
        .outerjoin(Room, Room.id == TimetableSlot.room_id)
    )


def _detail_fields(r) -> dict:
    return {
        "id": r.id,
        "day_of_week": int(r.day_of_week),
        "period": int(r.period),
        "subject": SlotSubjectOut(id=r.subject_id, code=str(r.subject_code), name=str(r.subject_name)),
        "teacher": (
            SlotTeacherOut(id=r.teacher_id, code=str(r.teacher_code), full_name=str(r.teacher_name))
            if r.teacher_id is not None
            else None
        ),
        "room": SlotRoomOut(id=r.room_id, code=str(r.room_code), name=str(r.room_name)) if r.room_id is not None else None,
    }


def find_conflicts(
    db: Session,
    *,
    term_id: uuid.UUID,
    day_of_week: int,
    period: int,
    class_id: uuid.UUID,
    teacher_id: uuid.UUID | None = None,
    room_id: uuid.UUID | None = None,
) -> list[SlotConflictOut]:
    """Return every slot in the term that a proposed (day, period) slot would collide with.

    A slot collides when it shares the day and period and also shares the class,
    the (non-null) teacher, or the (non-null) room. All matches are returned; no
    conflict type takes priority over another.
    """

    shared = [Timetable.class_id == class_id]
    if teacher_id is not None:
        shared.append(TimetableSlot.teacher_id == teacher_id)
    if room_id is not None:
        shared.append(TimetableSlot.room_id == room_id)

    q = (
        _slot_detail_query()
        .where(Timetable.term_id == term_id)
        .where(TimetableSlot.day_of_week == int(day_of_week))
        .where(TimetableSlot.period == int(period))
        .where(or_(*shared))
        .order_by(TimetableSlot.created_at.asc(), TimetableSlot.id.asc())
    )

    out: list[SlotConflictOut] = []
    for r in db.execute(q).all():
        reasons: list[str] = []
        if r.class_id == class_id:
            reasons.append(CONFLICT_CLASS)
        if teacher_id is not None and r.teacher_id == teacher_id:
            reasons.append(CONFLICT_TEACHER)
        if room_id is not None and r.room_id == room_id:
            reasons.append(CONFLICT_ROOM)
        out.append(
            SlotConflictOut(
                **_detail_fields(r),
                timetable_id=r.timetable_id,
                class_id=r.class_id,
                class_name=str(r.class_name),
                reasons=reasons,
            )
        )
    return out


def create_slot(
    db: Session,
    *,
    timetable: Timetable,
    day_of_week: int,
    period: int,
    subject_id: uuid.UUID,
    teacher_id: uuid.UUID | None = None,
    room_id: uuid.UUID | None = None,
) -> TimetableSlot:
    """Stage a new slot unconditionally; the caller runs find_conflicts first and commits."""

    slot = TimetableSlot(
        timetable_id=timetable.id,
        term_id=timetable.term_id,
        day_of_week=int(day_of_week),
        period=int(period),
        subject_id=subject_id,
        teacher_id=teacher_id,
        room_id=room_id,
    )
    db.add(slot)
    db.flush()
    return slot


def assign_slot(db: Session, payload: SlotCreate) -> TimetableSlot:
    """Resolve term, get the class timetable, reject on conflict, else create the slot.

    Raises SlotConflictError carrying every colliding slot, or EntityNotFoundError
    when a referenced row is missing.
    """

    _require(db, SchoolClass, payload.class_id, "CLASS_NOT_FOUND")
    _require(db, Subject, payload.subject_id, "SUBJECT_NOT_FOUND")
    if payload.teacher_id is not None:
        _require(db, Teacher, payload.teacher_id, "TEACHER_NOT_FOUND")
    if payload.room_id is not None:
        _require(db, Room, payload.room_id, "ROOM_NOT_FOUND")
    term_id = resolve_term_id(db, payload.term_id)

    timetable = get_or_create_timetable(db, class_id=payload.class_id, term_id=term_id)

    proposed = dict(
        term_id=term_id,
        day_of_week=payload.day_of_week,
        period=payload.period,
        class_id=payload.class_id,
        teacher_id=payload.teacher_id,
        room_id=payload.room_id,
    )
    conflicts = find_conflicts(db, **proposed)
    if conflicts:
        logger.warning(
            "Slot rejected class_id=%s term_id=%s day=%d period=%d conflicts=%d",
            payload.class_id,
            term_id,
            payload.day_of_week,
            payload.period,
            len(conflicts),
        )
        raise SlotConflictError(conflicts)

    try:
        slot = create_slot(
            db,
            timetable=timetable,
            day_of_week=payload.day_of_week,
            period=payload.period,
            subject_id=payload.subject_id,
            teacher_id=payload.teacher_id,
            room_id=payload.room_id,
        )
        db.commit()
    except IntegrityError:
        db.rollback()
        # A concurrent request booked the same class/teacher/room between the
        # check and the insert; the unique constraints rejected ours.
        conflicts = find_conflicts(db, **proposed)
        if not conflicts:
            raise
        logger.warning(
            "Slot rejected by store constraint class_id=%s term_id=%s day=%d period=%d conflicts=%d",
            payload.class_id,
            term_id,
            payload.day_of_week,
            payload.period,
            len(conflicts),
        )
        raise SlotConflictError(conflicts)

    db.refresh(slot)
    logger.info(
        "Created slot id=%s timetable_id=%s day=%d period=%d",
        slot.id,
        slot.timetable_id,
        slot.day_of_week,
        slot.period,
    )
    return slot


def load_timetable(db: Session, *, class_id: uuid.UUID, term_id: uuid.UUID | None = None) -> TimetableOut:
    _require(db, SchoolClass, class_id, "CLASS_NOT_FOUND")
    resolved_term_id = resolve_term_id(db, term_id)
    timetable = get_or_create_timetable(db, class_id=class_id, term_id=resolved_term_id)

    q = (
        _slot_detail_query()
        .where(TimetableSlot.timetable_id == timetable.id)
        .order_by(TimetableSlot.day_of_week.asc(), TimetableSlot.period.asc())
    )
    slots = [SlotDetailOut(**_detail_fields(r)) for r in db.execute(q).all()]
    return TimetableOut(id=timetable.id, class_id=timetable.class_id, term_id=timetable.term_id, slots=slots)
