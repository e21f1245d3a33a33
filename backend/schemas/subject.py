from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, Field


class SubjectBase(BaseModel):
    code: str = Field(min_length=1)
    name: str = Field(min_length=1)
    department: str | None = None


class SubjectCreate(SubjectBase):
    pass


class SubjectUpdate(BaseModel):
    code: str | None = None
    name: str | None = None
    department: str | None = None


class SubjectOut(SubjectBase):
    id: uuid.UUID
    created_at: datetime

    class Config:
        from_attributes = True
