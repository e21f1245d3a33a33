from __future__ import annotations

import uuid
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field


AudienceType = Literal["All", "Class", "Section", "Role"]


class AnnouncementCreate(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    content: str = Field(min_length=1)
    audience_type: AudienceType = "All"
    audience_id: uuid.UUID | None = None


class AnnouncementAuthorOut(BaseModel):
    id: uuid.UUID
    name: str


class AnnouncementOut(BaseModel):
    id: uuid.UUID
    title: str
    content: str
    audience_type: str
    audience_id: uuid.UUID | None = None
    created_by: AnnouncementAuthorOut | None = None
    created_at: datetime
