from __future__ import annotations

import logging
import time
import uuid
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request
from jose import JWTError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from api.deps import get_current_user
from core.config import settings
from core.database import get_db
from core.security import (
    REFRESH_TOKEN_TYPE,
    create_access_token,
    create_refresh_token,
    decode_refresh_token,
    hash_password,
    verify_password,
)
from models.user import User
from schemas.auth import AuthResponse, LoginRequest, RefreshRequest, RegisterRequest, TokenPair, UserOut
from services.user_service import assign_role, get_role_names, get_user_by_email, to_user_out


router = APIRouter()

logger = logging.getLogger(__name__)


# Simple in-memory rate limiting for login.
# NOTE: In multi-worker deployments this is per-worker.
_LOGIN_WINDOW_SECONDS = 60
_LOGIN_MAX_ATTEMPTS_PER_KEY = 12
_login_attempts: dict[str, list[float]] = {}


def _rate_limit_key(request: Request, email: str) -> str:
    ip = request.client.host if request.client else "unknown"
    return f"{ip}:{email.lower().strip()}"


def _enforce_login_rate_limit(request: Request, email: str) -> None:
    key = _rate_limit_key(request, email)
    now = time.time()
    history = [t for t in _login_attempts.get(key, []) if now - t < _LOGIN_WINDOW_SECONDS]
    history.append(now)
    _login_attempts[key] = history
    if len(history) > _LOGIN_MAX_ATTEMPTS_PER_KEY:
        raise HTTPException(status_code=429, detail="RATE_LIMITED")


def _issue_tokens(user: User, roles: list[str]) -> dict[str, str]:
    return {
        "access_token": create_access_token(user_id=str(user.id), email=user.email, roles=roles),
        "refresh_token": create_refresh_token(user_id=str(user.id), email=user.email, roles=roles),
    }


@router.post("/register", response_model=AuthResponse, status_code=201)
def register(
    payload: RegisterRequest,
    request: Request,
    db: Session = Depends(get_db),
) -> AuthResponse:
    if settings.is_production and not settings.allow_register:
        raise HTTPException(status_code=403, detail="REGISTRATION_DISABLED")

    email = payload.email.strip().lower()
    _enforce_login_rate_limit(request, email)
    ip = request.client.host if request.client else "unknown"

    if get_user_by_email(db, email) is not None:
        logger.warning("Register rejected (email taken) ip=%s email=%r", ip, email)
        raise HTTPException(status_code=409, detail="EMAIL_TAKEN")

    user = User(name=payload.name.strip(), email=email, password_hash=hash_password(payload.password), is_active=True)
    db.add(user)
    try:
        db.flush()
        assign_role(db, user, payload.role)
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.warning("Register rejected (integrity error) ip=%s email=%r", ip, email)
        raise HTTPException(status_code=409, detail="EMAIL_TAKEN")
    db.refresh(user)

    roles = get_role_names(db, user.id)
    logger.info("Register success ip=%s email=%r roles=%s", ip, email, roles)
    return AuthResponse(user=to_user_out(user, roles), **_issue_tokens(user, roles))


@router.post("/login", response_model=AuthResponse)
def login(
    payload: LoginRequest,
    request: Request,
    db: Session = Depends(get_db),
) -> AuthResponse:
    email = payload.email.strip().lower()
    _enforce_login_rate_limit(request, email)
    ip = request.client.host if request.client else "unknown"

    user = get_user_by_email(db, email)
    if user is None:
        logger.warning("Login failed (unknown user) ip=%s email=%r", ip, email)
        raise HTTPException(status_code=401, detail="INVALID_CREDENTIALS")
    if not verify_password(payload.password, user.password_hash):
        logger.warning("Login failed (bad password) ip=%s email=%r", ip, email)
        raise HTTPException(status_code=401, detail="INVALID_CREDENTIALS")
    if not user.is_active:
        logger.warning("Login failed (disabled user) ip=%s email=%r", ip, email)
        raise HTTPException(status_code=403, detail="USER_DISABLED")

    roles = get_role_names(db, user.id)
    return AuthResponse(user=to_user_out(user, roles), **_issue_tokens(user, roles))


@router.post("/refresh", response_model=TokenPair)
def refresh(
    payload: RefreshRequest,
    db: Session = Depends(get_db),
) -> TokenPair:
    try:
        claims = decode_refresh_token(payload.refresh_token)
        user_id = uuid.UUID(str(claims.get("sub")))
    except (JWTError, ValueError):
        raise HTTPException(status_code=401, detail="INVALID_REFRESH_TOKEN")
    if claims.get("type") != REFRESH_TOKEN_TYPE:
        raise HTTPException(status_code=401, detail="INVALID_REFRESH_TOKEN")

    user = db.get(User, user_id)
    if user is None or not user.is_active:
        raise HTTPException(status_code=401, detail="INVALID_REFRESH_TOKEN")

    return TokenPair(**_issue_tokens(user, get_role_names(db, user.id)))


@router.get("/me", response_model=UserOut)
def me(
    request: Request,
    current_user: User = Depends(get_current_user),
) -> UserOut:
    return to_user_out(current_user, list(getattr(request.state, "roles", [])))


@router.post("/logout")
def logout(_user: User = Depends(get_current_user)) -> dict[str, Any]:
    # Stateless JWT: the client drops its tokens.
    return {"ok": True}
