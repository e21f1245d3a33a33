from __future__ import annotations

import uuid

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from models.user import Role, User, UserRole
from schemas.auth import ALLOWED_ROLES, UserOut


SUPER_ADMIN_ROLE = "Super Admin"


def get_user_by_email(db: Session, email: str) -> User | None:
    q = select(User).where(func.lower(User.email) == func.lower(email.strip()))
    return db.execute(q).scalar_one_or_none()


def get_role_names(db: Session, user_id: uuid.UUID) -> list[str]:
    q = (
        select(Role.name)
        .select_from(UserRole)
        .join(Role, Role.id == UserRole.role_id)
        .where(UserRole.user_id == user_id)
        .order_by(Role.name.asc())
    )
    return [str(name) for name in db.execute(q).scalars().all()]


def ensure_role(db: Session, name: str) -> Role:
    role = db.execute(select(Role).where(Role.name == name)).scalar_one_or_none()
    if role is None:
        role = Role(name=name)
        db.add(role)
        db.flush()
    return role


def ensure_default_roles(db: Session) -> None:
    for name in ALLOWED_ROLES:
        ensure_role(db, name)


def assign_role(db: Session, user: User, role_name: str) -> None:
    role = ensure_role(db, role_name)
    exists = db.execute(
        select(UserRole).where(UserRole.user_id == user.id).where(UserRole.role_id == role.id)
    ).first()
    if exists is None:
        db.add(UserRole(user_id=user.id, role_id=role.id))
        db.flush()


def to_user_out(user: User, roles: list[str]) -> UserOut:
    return UserOut(
        id=user.id,
        name=user.name,
        email=user.email,
        roles=roles,
        is_super_admin=SUPER_ADMIN_ROLE in roles,
        is_active=bool(user.is_active),
        created_at=user.created_at,
    )
