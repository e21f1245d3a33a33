from __future__ import annotations

import uuid
from datetime import date, datetime

from pydantic import BaseModel, Field, model_validator


class _DateRange(BaseModel):
    start_date: date
    end_date: date

    @model_validator(mode="after")
    def _check_range(self):
        if self.start_date > self.end_date:
            raise ValueError("start_date must not be after end_date")
        return self


class AcademicYearCreate(_DateRange):
    name: str = Field(min_length=1, max_length=100)
    is_active: bool = False


class AcademicYearOut(BaseModel):
    id: uuid.UUID
    name: str
    start_date: date
    end_date: date
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True


class TermCreate(_DateRange):
    academic_year_id: uuid.UUID
    name: str = Field(min_length=1, max_length=100)


class TermOut(BaseModel):
    id: uuid.UUID
    academic_year_id: uuid.UUID
    name: str
    start_date: date
    end_date: date
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True


class ActiveTermOut(BaseModel):
    academic_year_id: uuid.UUID
    term_id: uuid.UUID
