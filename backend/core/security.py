from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

import bcrypt
from jose import jwt

from core.config import settings


ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


def hash_password(password: str) -> str:
    hashed = bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=12))
    return hashed.decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed stored hash.
        return False


def _encode(*, user_id: str, email: str, roles: list[str], token_type: str, minutes: int, secret: str) -> str:
    now = datetime.now(timezone.utc)
    payload: dict[str, Any] = {
        "sub": user_id,
        "email": email,
        "roles": list(roles),
        "type": token_type,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(minutes=int(minutes))).timestamp()),
    }
    return jwt.encode(payload, secret, algorithm=settings.jwt_algorithm)


def create_access_token(*, user_id: str, email: str, roles: list[str]) -> str:
    return _encode(
        user_id=user_id,
        email=email,
        roles=roles,
        token_type=ACCESS_TOKEN_TYPE,
        minutes=settings.access_token_expire_minutes,
        secret=settings.jwt_secret_key,
    )


def create_refresh_token(*, user_id: str, email: str, roles: list[str]) -> str:
    return _encode(
        user_id=user_id,
        email=email,
        roles=roles,
        token_type=REFRESH_TOKEN_TYPE,
        minutes=settings.refresh_token_expire_minutes,
        secret=settings.refresh_secret,
    )


def decode_token(token: str) -> dict[str, Any]:
    return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])


def decode_refresh_token(token: str) -> dict[str, Any]:
    return jwt.decode(token, settings.refresh_secret, algorithms=[settings.jwt_algorithm])
