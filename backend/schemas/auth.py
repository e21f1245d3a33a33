from __future__ import annotations

import uuid
from datetime import datetime
from typing import Literal, get_args

from pydantic import BaseModel, Field


RoleName = Literal[
    "Super Admin",
    "School Admin",
    "Academic Officer",
    "Finance Officer",
    "HR Officer",
    "Teacher",
    "Student",
    "Parent/Guardian",
    "Librarian",
    "Accountant",
]

ALLOWED_ROLES: tuple[str, ...] = get_args(RoleName)


class RegisterRequest(BaseModel):
    name: str = Field(min_length=2, max_length=200)
    email: str = Field(min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    password: str = Field(min_length=8, max_length=256)
    role: RoleName = "Super Admin"


class LoginRequest(BaseModel):
    email: str = Field(min_length=3, max_length=255)
    password: str = Field(min_length=6, max_length=256)


class RefreshRequest(BaseModel):
    refresh_token: str = Field(min_length=10)


class TokenPair(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class UserOut(BaseModel):
    id: uuid.UUID
    name: str
    email: str
    roles: list[str]
    is_super_admin: bool
    is_active: bool
    created_at: datetime


class AuthResponse(TokenPair):
    user: UserOut
