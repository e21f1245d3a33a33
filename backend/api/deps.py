from __future__ import annotations

import uuid

from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy.orm import Session

from core.database import get_db
from core.security import ACCESS_TOKEN_TYPE, decode_token
from models.user import User
from services.user_service import get_role_names


bearer_scheme = HTTPBearer(auto_error=False)

ADMIN_ROLES = ("Super Admin", "School Admin")
ACADEMIC_ROLES = ADMIN_ROLES + ("Academic Officer",)
TEACHING_ROLES = ACADEMIC_ROLES + ("Teacher",)


def get_current_user(
    request: Request,
    creds: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    cached = getattr(request.state, "current_user", None)
    if isinstance(cached, User):
        return cached

    if creds is None or not creds.credentials:
        raise HTTPException(status_code=401, detail="NOT_AUTHENTICATED")
    try:
        payload = decode_token(creds.credentials)
    except JWTError:
        raise HTTPException(status_code=401, detail="INVALID_TOKEN")

    if payload.get("type") != ACCESS_TOKEN_TYPE:
        raise HTTPException(status_code=401, detail="INVALID_TOKEN")

    try:
        user_uuid = uuid.UUID(str(payload.get("sub")))
    except ValueError:
        raise HTTPException(status_code=401, detail="INVALID_TOKEN")

    user = db.get(User, user_uuid)
    if user is None:
        raise HTTPException(status_code=401, detail="INVALID_TOKEN")
    if not user.is_active:
        raise HTTPException(status_code=403, detail="USER_DISABLED")

    # Roles are read from the store so revocations apply before the token expires.
    request.state.current_user = user
    request.state.roles = get_role_names(db, user.id)
    request.state.auth_payload = payload
    return user


def require_roles(*roles: str):
    """Dependency factory: the current user must hold at least one of `roles`."""

    allowed = {r.lower() for r in roles}

    def _require(
        request: Request,
        current_user: User = Depends(get_current_user),
    ) -> User:
        held = getattr(request.state, "roles", None) or []
        if not any(str(r).lower() in allowed for r in held):
            raise HTTPException(status_code=403, detail="NOT_AUTHORIZED")
        return current_user

    return _require


require_school_admin = require_roles(*ADMIN_ROLES)
require_academic_staff = require_roles(*ACADEMIC_ROLES)
require_teaching_staff = require_roles(*TEACHING_ROLES)
