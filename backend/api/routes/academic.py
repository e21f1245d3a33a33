from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from core.database import get_db
from models.academic_year import AcademicYear
from models.term import Term
from schemas.academic import AcademicYearCreate, AcademicYearOut, ActiveTermOut, TermCreate, TermOut
from services.term_service import activate_term, activate_year, resolve_active_term


router = APIRouter()


def _get_academic_year(db: Session, year_id: uuid.UUID) -> AcademicYear:
    year = db.get(AcademicYear, year_id)
    if year is None:
        raise HTTPException(status_code=404, detail="ACADEMIC_YEAR_NOT_FOUND")
    return year


@router.get("/active-term", response_model=ActiveTermOut)
def get_active_term(db: Session = Depends(get_db)) -> ActiveTermOut:
    active = resolve_active_term(db)
    return ActiveTermOut(academic_year_id=active.academic_year_id, term_id=active.term_id)


@router.get("/years", response_model=list[AcademicYearOut])
def list_academic_years(db: Session = Depends(get_db)) -> list[AcademicYearOut]:
    return db.execute(select(AcademicYear).order_by(AcademicYear.start_date.desc())).scalars().all()


@router.post("/years", response_model=AcademicYearOut, status_code=201)
def create_academic_year(
    payload: AcademicYearCreate,
    db: Session = Depends(get_db),
) -> AcademicYearOut:
    year = AcademicYear(
        name=payload.name.strip(),
        start_date=payload.start_date,
        end_date=payload.end_date,
        is_active=False,
    )
    db.add(year)
    try:
        db.flush()
        if payload.is_active:
            activate_year(db, year)
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="ACADEMIC_YEAR_CONFLICT")
    db.refresh(year)
    return year


@router.get("/years/{year_id}/terms", response_model=list[TermOut])
def list_terms(
    year_id: uuid.UUID,
    db: Session = Depends(get_db),
) -> list[TermOut]:
    _get_academic_year(db, year_id)
    q = select(Term).where(Term.academic_year_id == year_id).order_by(Term.start_date.asc())
    return db.execute(q).scalars().all()


@router.post("/terms", response_model=TermOut, status_code=201)
def create_term(
    payload: TermCreate,
    db: Session = Depends(get_db),
) -> TermOut:
    year = _get_academic_year(db, payload.academic_year_id)
    if payload.start_date < year.start_date or payload.end_date > year.end_date:
        raise HTTPException(status_code=400, detail="TERM_OUTSIDE_ACADEMIC_YEAR")

    term = Term(
        academic_year_id=year.id,
        name=payload.name.strip(),
        start_date=payload.start_date,
        end_date=payload.end_date,
        is_active=False,
    )
    db.add(term)
    db.commit()
    db.refresh(term)
    return term


@router.post("/terms/{term_id}/activate", response_model=TermOut)
def activate(
    term_id: uuid.UUID,
    db: Session = Depends(get_db),
) -> TermOut:
    term = db.get(Term, term_id)
    if term is None:
        raise HTTPException(status_code=404, detail="TERM_NOT_FOUND")

    try:
        activate_term(db, term)
        db.commit()
    except IntegrityError:
        db.rollback()
        # Another activation committed in between; the partial unique indexes refused ours.
        raise HTTPException(status_code=409, detail="ACTIVATION_CONFLICT")
    db.refresh(term)
    return term
