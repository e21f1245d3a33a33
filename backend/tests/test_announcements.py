from __future__ import annotations

import uuid
from datetime import datetime, timezone

from models.announcement import Announcement


def test_create_records_author_and_defaults_to_everyone(client, auth_headers):
    resp = client.post(
        "/api/announcements/",
        json={"title": " Sports day ", "content": "Friday, 10am."},
        headers=auth_headers,
    )
    assert resp.status_code == 201
    body = resp.json()
    assert body["title"] == "Sports day"
    assert body["audience_type"] == "All"
    assert body["audience_id"] is None
    assert body["created_by"]["name"] == "Test User"


def test_targeted_announcement_needs_an_audience(client, auth_headers, seed):
    cls = seed.school_class()

    missing = client.post(
        "/api/announcements/",
        json={"title": "Trip", "content": "Bring lunch", "audience_type": "Class"},
        headers=auth_headers,
    )
    assert missing.status_code == 400
    assert missing.json()["detail"] == "AUDIENCE_ID_REQUIRED"

    ok = client.post(
        "/api/announcements/",
        json={"title": "Trip", "content": "Bring lunch", "audience_type": "Class", "audience_id": str(cls)},
        headers=auth_headers,
    )
    assert ok.status_code == 201
    assert ok.json()["audience_id"] == str(cls)

    bad_type = client.post(
        "/api/announcements/",
        json={"title": "x", "content": "y", "audience_type": "Planet"},
        headers=auth_headers,
    )
    assert bad_type.status_code == 422


def test_list_is_newest_first(client, auth_headers, db):
    db.add_all(
        [
            Announcement(title="Older", content="a", created_at=datetime(2026, 1, 5, tzinfo=timezone.utc)),
            Announcement(title="Newer", content="b", created_at=datetime(2026, 2, 5, tzinfo=timezone.utc)),
        ]
    )
    db.commit()

    listed = client.get("/api/announcements/", headers=auth_headers).json()
    assert [a["title"] for a in listed] == ["Newer", "Older"]
    assert listed[0]["created_by"] is None


def test_teachers_can_post_and_delete(client, register):
    token = register(email="teacher@school.test", role="Teacher")["access_token"]
    headers = {"Authorization": f"Bearer {token}"}

    created = client.post("/api/announcements/", json={"title": "Quiz", "content": "Chapter 3"}, headers=headers)
    assert created.status_code == 201

    assert client.delete(f"/api/announcements/{created.json()['id']}", headers=headers).status_code == 200
    assert client.get("/api/announcements/", headers=headers).json() == []

    missing = client.delete(f"/api/announcements/{uuid.uuid4()}", headers=headers)
    assert missing.status_code == 404
    assert missing.json()["detail"] == "ANNOUNCEMENT_NOT_FOUND"


def test_students_cannot_use_announcements(client, register):
    token = register(email="pupil@school.test", role="Student")["access_token"]
    resp = client.get("/api/announcements/", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 403
