from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, Field


class TeacherCreate(BaseModel):
    # Generated as STF-<yy>-<NNNNNN> when omitted.
    code: str | None = None
    full_name: str = Field(min_length=1)
    email: str | None = Field(default=None, max_length=255)
    department: str | None = None
    is_active: bool = True


class TeacherOut(BaseModel):
    id: uuid.UUID
    code: str
    full_name: str
    email: str | None = None
    department: str | None = None
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True
