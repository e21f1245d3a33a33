from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, Field


class SlotCreate(BaseModel):
    term_id: uuid.UUID | None = None
    class_id: uuid.UUID
    day_of_week: int = Field(strict=True, ge=1, le=7)
    period: int = Field(strict=True, ge=1)
    subject_id: uuid.UUID
    teacher_id: uuid.UUID | None = None
    room_id: uuid.UUID | None = None


class SlotOut(BaseModel):
    id: uuid.UUID
    timetable_id: uuid.UUID
    term_id: uuid.UUID
    day_of_week: int
    period: int
    subject_id: uuid.UUID
    teacher_id: uuid.UUID | None = None
    room_id: uuid.UUID | None = None
    created_at: datetime

    class Config:
        from_attributes = True


class SlotSubjectOut(BaseModel):
    id: uuid.UUID
    code: str
    name: str


class SlotTeacherOut(BaseModel):
    id: uuid.UUID
    code: str
    full_name: str


class SlotRoomOut(BaseModel):
    id: uuid.UUID
    code: str
    name: str


class SlotDetailOut(BaseModel):
    id: uuid.UUID
    day_of_week: int
    period: int
    subject: SlotSubjectOut
    teacher: SlotTeacherOut | None = None
    room: SlotRoomOut | None = None


class TimetableOut(BaseModel):
    id: uuid.UUID
    class_id: uuid.UUID
    term_id: uuid.UUID
    slots: list[SlotDetailOut] = Field(default_factory=list)


class SlotConflictOut(SlotDetailOut):
    timetable_id: uuid.UUID
    class_id: uuid.UUID
    class_name: str
    # Which of CLASS / TEACHER / ROOM collide with the proposed slot.
    reasons: list[str]


class SlotConflictResponse(BaseModel):
    message: str
    conflicts: list[SlotConflictOut]
