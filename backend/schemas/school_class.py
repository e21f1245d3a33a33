from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, Field


class SchoolClassCreate(BaseModel):
    name: str = Field(min_length=1)
    level: str | None = None
    branch: str | None = None


class SchoolClassOut(SchoolClassCreate):
    id: uuid.UUID
    created_at: datetime

    class Config:
        from_attributes = True


class SectionCreate(BaseModel):
    class_id: uuid.UUID
    name: str = Field(min_length=1)


class SectionOut(BaseModel):
    id: uuid.UUID
    class_id: uuid.UUID
    name: str

    class Config:
        from_attributes = True


class ClassSubjectAssign(BaseModel):
    class_id: uuid.UUID
    subject_id: uuid.UUID
    # Omit to leave the subject without an assigned teacher.
    teacher_id: uuid.UUID | None = None


class ClassSubjectOut(BaseModel):
    id: uuid.UUID
    class_id: uuid.UUID
    subject_id: uuid.UUID
    subject_code: str
    subject_name: str
    teacher_id: uuid.UUID | None = None
    teacher_name: str | None = None


class SchoolClassDetailOut(SchoolClassOut):
    sections: list[SectionOut] = Field(default_factory=list)
    subjects: list[ClassSubjectOut] = Field(default_factory=list)
    enrollment_count: int = 0
