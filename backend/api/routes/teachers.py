from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from core.database import get_db
from models.teacher import Teacher
from schemas.teacher import TeacherCreate, TeacherOut
from services.codes import next_staff_code


logger = logging.getLogger(__name__)

router = APIRouter()

_CODE_ATTEMPTS = 3


@router.get("/", response_model=list[TeacherOut])
def list_teachers(db: Session = Depends(get_db)) -> list[TeacherOut]:
    return db.execute(select(Teacher).order_by(Teacher.full_name.asc())).scalars().all()


@router.post("/", response_model=TeacherOut, status_code=201)
def create_teacher(
    payload: TeacherCreate,
    db: Session = Depends(get_db),
) -> TeacherOut:
    data = payload.model_dump()
    data["full_name"] = str(data["full_name"]).strip()
    if not data["full_name"]:
        raise HTTPException(status_code=400, detail="INVALID_NAME")
    for key in ("email", "department"):
        if data.get(key) is not None:
            data[key] = str(data[key]).strip() or None

    explicit_code = (data.pop("code") or "").strip() or None

    for attempt in range(_CODE_ATTEMPTS):
        code = explicit_code or next_staff_code(db)
        teacher = Teacher(code=code, **data)
        db.add(teacher)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            if explicit_code is not None:
                raise HTTPException(status_code=409, detail="TEACHER_CODE_ALREADY_EXISTS")
            logger.warning("Staff code collision on %s (attempt %d)", code, attempt + 1)
            continue
        db.refresh(teacher)
        return teacher

    raise HTTPException(status_code=409, detail="STAFF_CODE_GENERATION_FAILED")
