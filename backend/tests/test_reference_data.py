from __future__ import annotations

import uuid
from datetime import date

from models.student import Student
from models.teacher import Teacher
from services.codes import next_staff_code, next_student_code


def test_subject_codes_are_unique(client, auth_headers):
    first = client.post("/api/subjects/", json={"code": "MATH", "name": "Mathematics"}, headers=auth_headers)
    assert first.status_code == 201

    dup = client.post("/api/subjects/", json={"code": " MATH ", "name": "Maths again"}, headers=auth_headers)
    assert dup.status_code == 409
    assert dup.json()["detail"] == "SUBJECT_CODE_ALREADY_EXISTS"


def test_subject_update_and_delete(client, auth_headers):
    subject = client.post("/api/subjects/", json={"code": "PHY", "name": "Physics"}, headers=auth_headers).json()

    patched = client.patch(f"/api/subjects/{subject['id']}", json={"department": "Science"}, headers=auth_headers)
    assert patched.status_code == 200
    assert patched.json()["department"] == "Science"
    assert patched.json()["code"] == "PHY"

    assert client.delete(f"/api/subjects/{subject['id']}", headers=auth_headers).status_code == 204
    assert client.delete(f"/api/subjects/{subject['id']}", headers=auth_headers).status_code == 404


def test_subject_in_use_cannot_be_deleted(client, auth_headers, seed):
    cls = seed.school_class()
    subject = client.post("/api/subjects/", json={"code": "BIO", "name": "Biology"}, headers=auth_headers).json()
    created = client.post(
        "/api/timetable/slots",
        json={"class_id": str(cls), "day_of_week": 1, "period": 1, "subject_id": subject["id"]},
        headers=auth_headers,
    )
    assert created.status_code == 201

    resp = client.delete(f"/api/subjects/{subject['id']}", headers=auth_headers)
    assert resp.status_code == 409
    assert resp.json()["detail"] == "SUBJECT_IN_USE"


def test_rooms_create_list_and_duplicate(client, auth_headers):
    assert client.post("/api/rooms/", json={"code": "R1", "name": "Room 1", "capacity": 30}, headers=auth_headers).status_code == 201
    dup = client.post("/api/rooms/", json={"code": "R1", "name": "Other"}, headers=auth_headers)
    assert dup.status_code == 409

    rooms = client.get("/api/rooms/", headers=auth_headers).json()
    assert [r["code"] for r in rooms] == ["R1"]
    assert rooms[0]["capacity"] == 30


def test_classes_create_and_list(client, auth_headers):
    resp = client.post("/api/classes/", json={"name": " Grade 7 ", "level": "7", "branch": ""}, headers=auth_headers)
    assert resp.status_code == 201
    assert resp.json()["name"] == "Grade 7"
    assert resp.json()["branch"] is None

    names = [c["name"] for c in client.get("/api/classes/", headers=auth_headers).json()]
    assert names == ["Grade 7"]


def test_teacher_codes_are_generated_sequentially(client, auth_headers):
    prefix = f"STF-{date.today().year % 100:02d}-"

    first = client.post("/api/teachers/", json={"full_name": "Grace Hopper"}, headers=auth_headers)
    second = client.post("/api/teachers/", json={"full_name": "Alan Turing"}, headers=auth_headers)

    assert first.status_code == second.status_code == 201
    assert first.json()["code"] == f"{prefix}000001"
    assert second.json()["code"] == f"{prefix}000002"


def test_explicit_teacher_code_collision_is_conflict(client, auth_headers):
    assert client.post("/api/teachers/", json={"code": "T-1", "full_name": "One"}, headers=auth_headers).status_code == 201
    dup = client.post("/api/teachers/", json={"code": "T-1", "full_name": "Two"}, headers=auth_headers)
    assert dup.status_code == 409
    assert dup.json()["detail"] == "TEACHER_CODE_ALREADY_EXISTS"


def test_next_staff_code_continues_from_highest_in_year(db):
    db.add_all(
        [
            Teacher(code="STF-25-000041", full_name="Old"),
            Teacher(code="STF-26-000007", full_name="A"),
            Teacher(code="STF-26-000003", full_name="B"),
            Teacher(code="MANUAL-1", full_name="C"),
        ]
    )
    db.commit()

    assert next_staff_code(db, today=date(2026, 5, 1)) == "STF-26-000008"
    assert next_staff_code(db, today=date(2027, 1, 1)) == "STF-27-000001"


def test_academic_year_and_term_management(client, auth_headers):
    year = client.post(
        "/api/academic/years",
        json={"name": "2031", "start_date": "2031-01-01", "end_date": "2031-12-31", "is_active": True},
        headers=auth_headers,
    )
    assert year.status_code == 201
    year_id = year.json()["id"]
    assert year.json()["is_active"] is True

    outside = client.post(
        "/api/academic/terms",
        json={"academic_year_id": year_id, "name": "Bad", "start_date": "2030-12-01", "end_date": "2031-02-01"},
        headers=auth_headers,
    )
    assert outside.status_code == 400

    reversed_dates = client.post(
        "/api/academic/terms",
        json={"academic_year_id": year_id, "name": "Bad", "start_date": "2031-05-01", "end_date": "2031-02-01"},
        headers=auth_headers,
    )
    assert reversed_dates.status_code == 422

    term = client.post(
        "/api/academic/terms",
        json={"academic_year_id": year_id, "name": "Spring", "start_date": "2031-01-01", "end_date": "2031-05-31"},
        headers=auth_headers,
    ).json()
    assert term["is_active"] is False

    activated = client.post(f"/api/academic/terms/{term['id']}/activate", headers=auth_headers)
    assert activated.status_code == 200
    assert activated.json()["is_active"] is True

    active = client.get("/api/academic/active-term", headers=auth_headers).json()
    assert active == {"academic_year_id": year_id, "term_id": term["id"]}

    terms = client.get(f"/api/academic/years/{year_id}/terms", headers=auth_headers).json()
    assert [t["name"] for t in terms] == ["Spring"]


def test_next_student_code_shares_the_yearly_sequence_scheme(db):
    db.add_all(
        [
            Student(student_code="SCH-26-000041", first_name="A", last_name="A", gender="F"),
            Student(student_code="SCH-26-000009", first_name="B", last_name="B", gender="M"),
            Student(student_code="SCH-25-000100", first_name="C", last_name="C", gender="F"),
        ]
    )
    db.add(Teacher(code="STF-26-000002", full_name="Staff"))
    db.commit()

    assert next_student_code(db, today=date(2026, 3, 1)) == "SCH-26-000042"
    assert next_student_code(db, today=date(2024, 3, 1)) == "SCH-24-000001"
    assert next_staff_code(db, today=date(2026, 3, 1)) == "STF-26-000003"


def test_sections_belong_to_a_class_and_are_unique_per_class(client, auth_headers, seed):
    cls = seed.school_class("Grade 8")
    other = seed.school_class("Grade 9")

    first = client.post("/api/classes/sections", json={"class_id": str(cls), "name": " A "}, headers=auth_headers)
    assert first.status_code == 201
    assert first.json()["name"] == "A"

    dup = client.post("/api/classes/sections", json={"class_id": str(cls), "name": "A"}, headers=auth_headers)
    assert dup.status_code == 409
    assert dup.json()["detail"] == "SECTION_ALREADY_EXISTS"

    assert client.post("/api/classes/sections", json={"class_id": str(other), "name": "A"}, headers=auth_headers).status_code == 201

    missing = client.post("/api/classes/sections", json={"class_id": str(uuid.uuid4()), "name": "B"}, headers=auth_headers)
    assert missing.status_code == 404
    assert missing.json()["detail"] == "CLASS_NOT_FOUND"


def test_assign_subject_to_class_then_change_teacher(client, auth_headers, seed):
    cls = seed.school_class("Grade 10")
    subject = seed.subject("MATH", "Mathematics")
    teacher = seed.teacher("T-7", "Katherine Johnson")
    url = "/api/classes/subjects"

    first = client.post(url, json={"class_id": str(cls), "subject_id": str(subject)}, headers=auth_headers)
    assert first.status_code == 200
    assert first.json()["teacher_id"] is None
    assert first.json()["subject_code"] == "MATH"

    body = {"class_id": str(cls), "subject_id": str(subject), "teacher_id": str(teacher)}
    second = client.post(url, json=body, headers=auth_headers)
    assert second.json()["id"] == first.json()["id"]
    assert second.json()["teacher_name"] == "Katherine Johnson"

    unknown_teacher = client.post(url, json={**body, "teacher_id": str(uuid.uuid4())}, headers=auth_headers)
    assert unknown_teacher.status_code == 404
    assert unknown_teacher.json()["detail"] == "TEACHER_NOT_FOUND"

    listed = client.get("/api/classes/", headers=auth_headers).json()
    assert len(listed) == 1
    assert [(s["subject_code"], s["teacher_name"]) for s in listed[0]["subjects"]] == [("MATH", "Katherine Johnson")]


def test_class_listing_includes_sections_and_enrollment_count(client, auth_headers, seed):
    cls = seed.school_class("Grade 11")
    client.post("/api/classes/sections", json={"class_id": str(cls), "name": "B"}, headers=auth_headers)
    client.post("/api/classes/sections", json={"class_id": str(cls), "name": "A"}, headers=auth_headers)
    client.post(
        "/api/students/",
        json={"first_name": "Z", "last_name": "Y", "gender": "F", "class_id": str(cls)},
        headers=auth_headers,
    )

    listed = client.get("/api/classes/", headers=auth_headers).json()[0]
    assert [s["name"] for s in listed["sections"]] == ["A", "B"]
    assert listed["enrollment_count"] == 1
