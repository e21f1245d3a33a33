from __future__ import annotations

import uuid

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Integer, UniqueConstraint, Uuid
from sqlalchemy.sql import func

from models.base import Base


class TimetableSlot(Base):
    __tablename__ = "timetable_slots"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    timetable_id = Column(Uuid, ForeignKey("timetables.id", ondelete="CASCADE"), nullable=False, index=True)
    # Copy of timetables.term_id so teacher/room double-booking can be a table constraint.
    term_id = Column(Uuid, ForeignKey("terms.id", ondelete="CASCADE"), nullable=False)
    day_of_week = Column(Integer, nullable=False)
    period = Column(Integer, nullable=False)
    subject_id = Column(Uuid, ForeignKey("subjects.id", ondelete="RESTRICT"), nullable=False)
    teacher_id = Column(Uuid, ForeignKey("teachers.id", ondelete="SET NULL"), nullable=True)
    room_id = Column(Uuid, ForeignKey("rooms.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (
        CheckConstraint("day_of_week >= 1 and day_of_week <= 7", name="ck_timetable_slots_day"),
        CheckConstraint("period >= 1", name="ck_timetable_slots_period"),
        # NULL teacher/room never collide (NULLs are distinct in unique constraints).
        UniqueConstraint("timetable_id", "day_of_week", "period", name="uq_timetable_slots_class_day_period"),
        UniqueConstraint("term_id", "day_of_week", "period", "teacher_id", name="uq_timetable_slots_teacher_day_period"),
        UniqueConstraint("term_id", "day_of_week", "period", "room_id", name="uq_timetable_slots_room_day_period"),
    )
