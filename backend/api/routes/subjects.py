from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from core.database import get_db
from models.subject import Subject
from models.timetable_slot import TimetableSlot
from schemas.subject import SubjectCreate, SubjectOut, SubjectUpdate


router = APIRouter()


def _ensure_unique_subject_code(db: Session, *, code: str, exclude_subject_id: uuid.UUID | None) -> None:
    q = select(Subject.id).where(Subject.code == code)
    if exclude_subject_id is not None:
        q = q.where(Subject.id != exclude_subject_id)
    if db.execute(q.limit(1)).first() is not None:
        raise HTTPException(status_code=409, detail="SUBJECT_CODE_ALREADY_EXISTS")


@router.get("/", response_model=list[SubjectOut])
def list_subjects(db: Session = Depends(get_db)) -> list[SubjectOut]:
    return db.execute(select(Subject).order_by(Subject.code.asc())).scalars().all()


@router.post("/", response_model=SubjectOut, status_code=201)
def create_subject(
    payload: SubjectCreate,
    db: Session = Depends(get_db),
) -> SubjectOut:
    data = payload.model_dump()
    data["code"] = str(data["code"]).strip()
    data["name"] = str(data["name"]).strip()
    if data.get("department") is not None:
        data["department"] = str(data["department"]).strip() or None
    if not data["code"]:
        raise HTTPException(status_code=400, detail="INVALID_CODE")
    if not data["name"]:
        raise HTTPException(status_code=400, detail="INVALID_NAME")

    _ensure_unique_subject_code(db, code=data["code"], exclude_subject_id=None)

    subject = Subject(**data)
    db.add(subject)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="SUBJECT_CODE_ALREADY_EXISTS")
    db.refresh(subject)
    return subject


@router.patch("/{subject_id}", response_model=SubjectOut)
def update_subject(
    subject_id: uuid.UUID,
    payload: SubjectUpdate,
    db: Session = Depends(get_db),
) -> SubjectOut:
    subject = db.get(Subject, subject_id)
    if subject is None:
        raise HTTPException(status_code=404, detail="SUBJECT_NOT_FOUND")

    updates = payload.model_dump(exclude_unset=True)
    if updates.get("code") is not None:
        updates["code"] = str(updates["code"]).strip()
        if not updates["code"]:
            raise HTTPException(status_code=400, detail="INVALID_CODE")
        _ensure_unique_subject_code(db, code=updates["code"], exclude_subject_id=subject_id)
    if updates.get("name") is not None:
        updates["name"] = str(updates["name"]).strip()
        if not updates["name"]:
            raise HTTPException(status_code=400, detail="INVALID_NAME")
    if updates.get("department") is not None:
        updates["department"] = str(updates["department"]).strip() or None

    for k, v in updates.items():
        if v is None and k in {"code", "name"}:
            continue
        setattr(subject, k, v)

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="SUBJECT_CODE_ALREADY_EXISTS")
    db.refresh(subject)
    return subject


@router.delete("/{subject_id}", status_code=204)
def delete_subject(
    subject_id: uuid.UUID,
    db: Session = Depends(get_db),
) -> None:
    subject = db.get(Subject, subject_id)
    if subject is None:
        raise HTTPException(status_code=404, detail="SUBJECT_NOT_FOUND")

    in_use = db.execute(select(TimetableSlot.id).where(TimetableSlot.subject_id == subject_id).limit(1)).first()
    if in_use is not None:
        raise HTTPException(status_code=409, detail="SUBJECT_IN_USE")

    db.delete(subject)
    db.commit()
