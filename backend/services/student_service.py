from __future__ import annotations

import logging
import uuid
from datetime import date, datetime, timezone

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from models.school_class import SchoolClass
from models.section import Section
from models.student import Enrollment, Student
from schemas.student import (
    EnrollmentOut,
    StudentCreate,
    StudentDetailOut,
    StudentOut,
    StudentPage,
    StudentSummary,
    StudentUpdate,
)
from services.codes import next_student_code
from services.errors import ConflictError, EntityNotFoundError
from services.term_service import ActiveTerm, resolve_active_term


logger = logging.getLogger(__name__)

CODE_ATTEMPTS = 5
MAX_PAGE_SIZE = 100
DEFAULT_STATUS = "active"

_REQUIRED_FIELDS = ("first_name", "last_name", "gender", "status")


def get_student(db: Session, student_id: uuid.UUID) -> Student:
    student = db.get(Student, student_id)
    if student is None:
        raise EntityNotFoundError("STUDENT_NOT_FOUND")
    return student


def _placement(
    db: Session, class_id: uuid.UUID | None, section_id: uuid.UUID | None
) -> tuple[uuid.UUID, uuid.UUID | None] | None:
    """Validate a (class, section) pair; a section alone implies its class."""

    if section_id is not None:
        section = db.get(Section, section_id)
        if section is None or (class_id is not None and section.class_id != class_id):
            raise EntityNotFoundError("SECTION_NOT_FOUND")
        class_id = section.class_id
    if class_id is None:
        return None
    if db.get(SchoolClass, class_id) is None:
        raise EntityNotFoundError("CLASS_NOT_FOUND")
    return class_id, section_id


def _enroll(
    db: Session,
    *,
    student_id: uuid.UUID,
    class_id: uuid.UUID,
    section_id: uuid.UUID | None,
    active: ActiveTerm,
    update_section: bool = True,
) -> Enrollment:
    existing = db.execute(
        select(Enrollment)
        .where(Enrollment.student_id == student_id)
        .where(Enrollment.class_id == class_id)
        .where(Enrollment.term_id == active.term_id)
        .limit(1)
    ).scalars().first()
    if existing is not None:
        if update_section:
            existing.section_id = section_id
        return existing

    enrollment = Enrollment(
        student_id=student_id,
        class_id=class_id,
        section_id=section_id,
        academic_year_id=active.academic_year_id,
        term_id=active.term_id,
    )
    db.add(enrollment)
    return enrollment


def create_student(db: Session, payload: StudentCreate, *, today: date | None = None) -> Student:
    """Create a student with the next SCH-<yy>-<NNNNNN> code.

    When a class (or section) is given the student is enrolled for the active term
    in the same transaction. A code taken by a concurrent insert is retried.
    """

    placement = _placement(db, payload.class_id, payload.section_id)
    active = resolve_active_term(db) if placement is not None else None

    fields = payload.model_dump(exclude={"class_id", "section_id"})
    fields["status"] = fields.get("status") or DEFAULT_STATUS
    for key in ("first_name", "last_name", "gender"):
        fields[key] = str(fields[key]).strip()

    for attempt in range(CODE_ATTEMPTS):
        code = next_student_code(db, today=today)
        student = Student(student_code=code, **fields)
        db.add(student)
        try:
            db.flush()
            if placement is not None:
                _enroll(db, student_id=student.id, class_id=placement[0], section_id=placement[1], active=active)
            db.commit()
        except IntegrityError:
            db.rollback()
            logger.warning("Student code collision on %s (attempt %d)", code, attempt + 1)
            continue
        db.refresh(student)
        logger.info("Created student id=%s code=%s", student.id, student.student_code)
        return student

    raise ConflictError("STUDENT_CODE_GENERATION_FAILED")


def update_student(db: Session, student_id: uuid.UUID, payload: StudentUpdate) -> Student:
    student = get_student(db, student_id)

    changes = payload.model_dump(exclude_unset=True, exclude={"class_id", "section_id"})
    for key, value in changes.items():
        if value is None and key in _REQUIRED_FIELDS:
            continue
        setattr(student, key, value.strip() if isinstance(value, str) and key != "status" else value)

    placement = _placement(db, payload.class_id, payload.section_id)
    if placement is not None:
        active = resolve_active_term(db)
        _enroll(
            db,
            student_id=student.id,
            class_id=placement[0],
            section_id=placement[1],
            active=active,
            update_section="section_id" in payload.model_fields_set,
        )

    db.commit()
    db.refresh(student)
    return student


def enroll_student(
    db: Session, student_id: uuid.UUID, *, class_id: uuid.UUID, section_id: uuid.UUID | None = None
) -> Enrollment:
    """Enroll into `class_id` for the active term; re-enrolling only updates the section."""

    get_student(db, student_id)
    placement = _placement(db, class_id, section_id)
    active = resolve_active_term(db)

    enrollment = _enroll(db, student_id=student_id, class_id=placement[0], section_id=placement[1], active=active)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("ALREADY_ENROLLED")
    db.refresh(enrollment)
    return enrollment


def load_student(db: Session, student_id: uuid.UUID) -> StudentDetailOut:
    student = get_student(db, student_id)
    enrollments = db.execute(
        select(Enrollment).where(Enrollment.student_id == student_id).order_by(Enrollment.created_at.asc())
    ).scalars().all()
    out = StudentDetailOut.model_validate(student)
    out.enrollments = [EnrollmentOut.model_validate(e) for e in enrollments]
    return out


def list_students(
    db: Session,
    *,
    search: str | None = None,
    status: str | None = None,
    class_id: uuid.UUID | None = None,
    page: int = 1,
    page_size: int = 20,
) -> StudentPage:
    page = max(int(page or 1), 1)
    page_size = min(max(int(page_size or 20), 1), MAX_PAGE_SIZE)

    q = select(Student)
    if status:
        q = q.where(Student.status == status.strip().lower())
    if search and search.strip():
        pattern = f"%{search.strip()}%"
        q = q.where(
            or_(
                Student.first_name.ilike(pattern),
                Student.last_name.ilike(pattern),
                Student.student_code.ilike(pattern),
            )
        )
    if class_id is not None:
        q = q.where(Student.id.in_(select(Enrollment.student_id).where(Enrollment.class_id == class_id)))

    total = db.execute(select(func.count()).select_from(q.subquery())).scalar_one()
    rows = db.execute(
        q.order_by(Student.student_code.desc()).offset((page - 1) * page_size).limit(page_size)
    ).scalars().all()
    return StudentPage(
        data=[StudentOut.model_validate(r) for r in rows],
        total=int(total),
        page=page,
        page_size=page_size,
    )


def student_summary(db: Session, *, today: date | None = None) -> StudentSummary:
    today = today or date.today()
    year_start = datetime(today.year, 1, 1, tzinfo=timezone.utc)

    def count(q) -> int:
        return int(db.execute(q).scalar_one())

    return StudentSummary(
        total=count(select(func.count()).select_from(Student)),
        active=count(select(func.count()).select_from(Student).where(Student.status == "active")),
        graduated=count(select(func.count()).select_from(Student).where(Student.status == "graduated")),
        new_this_year=count(
            select(func.count()).select_from(Enrollment).where(Enrollment.created_at >= year_start)
        ),
    )
