from __future__ import annotations

from collections import defaultdict

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from core.database import get_db
from models.class_subject import ClassSubject
from models.school_class import SchoolClass
from models.section import Section
from models.student import Enrollment
from models.subject import Subject
from models.teacher import Teacher
from schemas.school_class import (
    ClassSubjectAssign,
    ClassSubjectOut,
    SchoolClassCreate,
    SchoolClassDetailOut,
    SchoolClassOut,
    SectionCreate,
    SectionOut,
)


router = APIRouter()


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    return value.strip() or None


def _require_class(db: Session, class_id) -> SchoolClass:
    cls = db.get(SchoolClass, class_id)
    if cls is None:
        raise HTTPException(status_code=404, detail="CLASS_NOT_FOUND")
    return cls


def _class_subject_query():
    return (
        select(
            ClassSubject.id.label("id"),
            ClassSubject.class_id.label("class_id"),
            ClassSubject.subject_id.label("subject_id"),
            Subject.code.label("subject_code"),
            Subject.name.label("subject_name"),
            ClassSubject.teacher_id.label("teacher_id"),
            Teacher.full_name.label("teacher_name"),
        )
        .select_from(ClassSubject)
        .join(Subject, Subject.id == ClassSubject.subject_id)
        .outerjoin(Teacher, Teacher.id == ClassSubject.teacher_id)
    )


def _class_subject_out(r) -> ClassSubjectOut:
    return ClassSubjectOut(
        id=r.id,
        class_id=r.class_id,
        subject_id=r.subject_id,
        subject_code=str(r.subject_code),
        subject_name=str(r.subject_name),
        teacher_id=r.teacher_id,
        teacher_name=str(r.teacher_name) if r.teacher_name is not None else None,
    )


@router.get("/", response_model=list[SchoolClassDetailOut])
def list_classes(db: Session = Depends(get_db)) -> list[SchoolClassDetailOut]:
    classes = db.execute(select(SchoolClass).order_by(SchoolClass.name.asc())).scalars().all()

    sections: dict = defaultdict(list)
    for section in db.execute(select(Section).order_by(Section.name.asc())).scalars().all():
        sections[section.class_id].append(SectionOut.model_validate(section))

    subjects: dict = defaultdict(list)
    for r in db.execute(_class_subject_query().order_by(Subject.code.asc())).all():
        subjects[r.class_id].append(_class_subject_out(r))

    counts = dict(
        db.execute(select(Enrollment.class_id, func.count()).group_by(Enrollment.class_id)).all()
    )

    out: list[SchoolClassDetailOut] = []
    for cls in classes:
        item = SchoolClassDetailOut.model_validate(cls)
        item.sections = sections.get(cls.id, [])
        item.subjects = subjects.get(cls.id, [])
        item.enrollment_count = int(counts.get(cls.id, 0))
        out.append(item)
    return out


@router.post("/", response_model=SchoolClassOut, status_code=201)
def create_class(
    payload: SchoolClassCreate,
    db: Session = Depends(get_db),
) -> SchoolClassOut:
    name = payload.name.strip()
    if not name:
        raise HTTPException(status_code=400, detail="INVALID_NAME")

    cls = SchoolClass(name=name, level=_clean(payload.level), branch=_clean(payload.branch))
    db.add(cls)
    db.commit()
    db.refresh(cls)
    return cls


@router.post("/sections", response_model=SectionOut, status_code=201)
def create_section(
    payload: SectionCreate,
    db: Session = Depends(get_db),
) -> SectionOut:
    _require_class(db, payload.class_id)
    name = payload.name.strip()
    if not name:
        raise HTTPException(status_code=400, detail="INVALID_NAME")

    section = Section(class_id=payload.class_id, name=name)
    db.add(section)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="SECTION_ALREADY_EXISTS")
    db.refresh(section)
    return section


@router.post("/subjects", response_model=ClassSubjectOut)
def assign_subject(
    payload: ClassSubjectAssign,
    db: Session = Depends(get_db),
) -> ClassSubjectOut:
    """Assign a subject to a class, or change its teacher when already assigned."""

    _require_class(db, payload.class_id)
    if db.get(Subject, payload.subject_id) is None:
        raise HTTPException(status_code=404, detail="SUBJECT_NOT_FOUND")
    if payload.teacher_id is not None and db.get(Teacher, payload.teacher_id) is None:
        raise HTTPException(status_code=404, detail="TEACHER_NOT_FOUND")

    q = select(ClassSubject).where(ClassSubject.class_id == payload.class_id).where(
        ClassSubject.subject_id == payload.subject_id
    )
    link = db.execute(q.limit(1)).scalars().first()
    if link is None:
        link = ClassSubject(class_id=payload.class_id, subject_id=payload.subject_id)
        db.add(link)
    link.teacher_id = payload.teacher_id
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        # A concurrent assignment created the row; apply the teacher to it.
        link = db.execute(q.limit(1)).scalars().one()
        link.teacher_id = payload.teacher_id
        db.commit()

    row = db.execute(_class_subject_query().where(ClassSubject.id == link.id)).one()
    return _class_subject_out(row)
