from __future__ import annotations

import os

# Settings and the engine are built at import time, so configure them first.
os.environ["DATABASE_URL"] = "sqlite+pysqlite:///:memory:"
os.environ["JWT_SECRET_KEY"] = "test-access-secret"
os.environ["JWT_REFRESH_SECRET_KEY"] = "test-refresh-secret"
os.environ["ENVIRONMENT"] = "test"
os.environ["AUTO_CREATE_SCHEMA"] = "true"

import uuid  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

import models  # noqa: E402,F401
from api.routes import auth as auth_routes  # noqa: E402
from core.database import ENGINE, SessionLocal  # noqa: E402
from main import app  # noqa: E402
from models.base import Base  # noqa: E402
from models.room import Room  # noqa: E402
from models.school_class import SchoolClass  # noqa: E402
from models.subject import Subject  # noqa: E402
from models.teacher import Teacher  # noqa: E402


@pytest.fixture(autouse=True)
def _fresh_schema():
    Base.metadata.create_all(bind=ENGINE)
    auth_routes._login_attempts.clear()
    yield
    Base.metadata.drop_all(bind=ENGINE)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


def _register(client: TestClient, *, email: str, role: str, password: str = "s3cret-pass") -> dict:
    resp = client.post(
        "/api/auth/register",
        json={"name": "Test User", "email": email, "password": password, "role": role},
    )
    assert resp.status_code == 201, resp.text
    return resp.json()


@pytest.fixture
def register(client: TestClient):
    def _do(*, email: str, role: str, password: str = "s3cret-pass") -> dict:
        return _register(client, email=email, role=role, password=password)

    return _do


@pytest.fixture
def auth_headers(client: TestClient) -> dict[str, str]:
    body = _register(client, email="officer@school.test", role="Academic Officer")
    return {"Authorization": f"Bearer {body['access_token']}"}


class Seeder:
    """Inserts reference rows directly and commits each one."""

    def _add(self, obj):
        with SessionLocal() as s:
            s.add(obj)
            s.commit()
            return obj.id

    def school_class(self, name: str = "Grade 5") -> uuid.UUID:
        return self._add(SchoolClass(name=name))

    def subject(self, code: str, name: str | None = None) -> uuid.UUID:
        return self._add(Subject(code=code, name=name or code))

    def teacher(self, code: str, full_name: str | None = None) -> uuid.UUID:
        return self._add(Teacher(code=code, full_name=full_name or code))

    def room(self, code: str) -> uuid.UUID:
        return self._add(Room(code=code, name=f"Room {code}"))


@pytest.fixture
def seed() -> Seeder:
    return Seeder()
