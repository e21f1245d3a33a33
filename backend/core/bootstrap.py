from __future__ import annotations

import logging

from sqlalchemy.orm import Session

import models  # noqa: F401  (registers every table on Base.metadata)
from core.config import settings
from core.database import ENGINE, SessionLocal
from core.security import hash_password
from models.base import Base
from models.user import User
from services.user_service import SUPER_ADMIN_ROLE, assign_role, ensure_default_roles, get_user_by_email


logger = logging.getLogger(__name__)


def _seed_admin_if_configured(db: Session) -> None:
    email = settings.seed_admin_email
    password = settings.seed_admin_password
    if not email or not password:
        return

    if get_user_by_email(db, email) is not None:
        return

    user = User(name="Administrator", email=email, password_hash=hash_password(password), is_active=True)
    db.add(user)
    db.flush()
    assign_role(db, user, SUPER_ADMIN_ROLE)

    logger.warning(
        "Seeded initial admin user from env (email=%r). Change the password after first login.",
        email,
    )


def bootstrap() -> None:
    """Startup bootstrap.

    - Creates missing tables when AUTO_CREATE_SCHEMA is on.
    - Ensures the built-in roles exist.
    - Optionally seeds a Super Admin if SEED_ADMIN_EMAIL + SEED_ADMIN_PASSWORD are set.

    Safe to run on every startup.
    """

    if settings.auto_create_schema:
        Base.metadata.create_all(bind=ENGINE)

    with SessionLocal() as db:
        ensure_default_roles(db)
        _seed_admin_if_configured(db)
        db.commit()
