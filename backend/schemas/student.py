from __future__ import annotations

import uuid
from datetime import date, datetime

from pydantic import BaseModel, Field, field_validator


class StudentUpdate(BaseModel):
    first_name: str | None = Field(default=None, min_length=1)
    last_name: str | None = Field(default=None, min_length=1)
    gender: str | None = Field(default=None, min_length=1)
    dob: date | None = None
    address: str | None = None
    status: str | None = None
    # Enrolls into this class for the active term when set.
    class_id: uuid.UUID | None = None
    section_id: uuid.UUID | None = None

    @field_validator("status")
    @classmethod
    def _normalize_status(cls, v: str | None) -> str | None:
        if v is None:
            return None
        return v.strip().lower() or None


class StudentCreate(StudentUpdate):
    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    gender: str = Field(min_length=1)
    status: str | None = "active"


class EnrollRequest(BaseModel):
    class_id: uuid.UUID
    section_id: uuid.UUID | None = None


class EnrollmentOut(BaseModel):
    id: uuid.UUID
    student_id: uuid.UUID
    class_id: uuid.UUID
    section_id: uuid.UUID | None = None
    academic_year_id: uuid.UUID
    term_id: uuid.UUID
    created_at: datetime

    class Config:
        from_attributes = True


class StudentOut(BaseModel):
    id: uuid.UUID
    student_code: str
    first_name: str
    last_name: str
    gender: str
    dob: date | None = None
    address: str | None = None
    status: str
    created_at: datetime

    class Config:
        from_attributes = True


class StudentDetailOut(StudentOut):
    enrollments: list[EnrollmentOut] = Field(default_factory=list)


class StudentPage(BaseModel):
    data: list[StudentOut]
    total: int
    page: int
    page_size: int


class StudentSummary(BaseModel):
    total: int
    active: int
    graduated: int
    new_this_year: int
