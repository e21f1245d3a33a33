from __future__ import annotations

import logging
import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from api.deps import require_academic_staff, require_school_admin, require_teaching_staff
from core.database import get_db
from schemas.student import (
    EnrollmentOut,
    EnrollRequest,
    StudentCreate,
    StudentDetailOut,
    StudentOut,
    StudentPage,
    StudentSummary,
    StudentUpdate,
)
from services.student_service import (
    MAX_PAGE_SIZE,
    create_student,
    enroll_student,
    get_student,
    list_students,
    load_student,
    student_summary,
    update_student,
)


logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/", response_model=StudentPage, dependencies=[Depends(require_teaching_staff)])
def list_all(
    search: str | None = Query(default=None),
    status: str | None = Query(default=None),
    class_id: uuid.UUID | None = Query(default=None),
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=20, ge=1, le=MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
) -> StudentPage:
    return list_students(db, search=search, status=status, class_id=class_id, page=page, page_size=page_size)


@router.get("/summary", response_model=StudentSummary, dependencies=[Depends(require_teaching_staff)])
def summary(db: Session = Depends(get_db)) -> StudentSummary:
    return student_summary(db)


@router.get("/{student_id}", response_model=StudentDetailOut, dependencies=[Depends(require_teaching_staff)])
def get_one(student_id: uuid.UUID, db: Session = Depends(get_db)) -> StudentDetailOut:
    return load_student(db, student_id)


@router.post("/", response_model=StudentOut, status_code=201, dependencies=[Depends(require_academic_staff)])
def create(payload: StudentCreate, db: Session = Depends(get_db)) -> StudentOut:
    return create_student(db, payload)


@router.put("/{student_id}", response_model=StudentOut, dependencies=[Depends(require_academic_staff)])
def update(student_id: uuid.UUID, payload: StudentUpdate, db: Session = Depends(get_db)) -> StudentOut:
    return update_student(db, student_id, payload)


@router.delete("/{student_id}", dependencies=[Depends(require_school_admin)])
def delete(student_id: uuid.UUID, db: Session = Depends(get_db)) -> dict:
    student = get_student(db, student_id)
    code = student.student_code
    db.delete(student)
    db.commit()
    logger.info("Deleted student id=%s code=%s", student_id, code)
    return {"ok": True}


@router.post(
    "/{student_id}/enroll",
    response_model=EnrollmentOut,
    status_code=201,
    dependencies=[Depends(require_academic_staff)],
)
def enroll(student_id: uuid.UUID, payload: EnrollRequest, db: Session = Depends(get_db)) -> EnrollmentOut:
    return enroll_student(db, student_id, class_id=payload.class_id, section_id=payload.section_id)
