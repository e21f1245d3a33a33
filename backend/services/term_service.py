from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import date

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from models.academic_year import AcademicYear
from models.term import Term
from services.errors import EntityNotFoundError


logger = logging.getLogger(__name__)

DEFAULT_TERM_NAME = "Term 1"


@dataclass(frozen=True)
class ActiveTerm:
    academic_year_id: uuid.UUID
    term_id: uuid.UUID


def _active_year(db: Session) -> AcademicYear | None:
    q = select(AcademicYear).where(AcademicYear.is_active.is_(True)).order_by(AcademicYear.created_at.asc())
    return db.execute(q.limit(1)).scalars().first()


def _active_term(db: Session, academic_year_id: uuid.UUID) -> Term | None:
    q = (
        select(Term)
        .where(Term.academic_year_id == academic_year_id)
        .where(Term.is_active.is_(True))
        .order_by(Term.created_at.asc())
    )
    return db.execute(q.limit(1)).scalars().first()


def _get_or_create_active_year(db: Session, today: date) -> AcademicYear:
    year = _active_year(db)
    if year is not None:
        return year

    year = AcademicYear(
        name=str(today.year),
        start_date=date(today.year, 1, 1),
        end_date=date(today.year, 12, 31),
        is_active=True,
    )
    db.add(year)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        # Another request created the active year first.
        year = _active_year(db)
        if year is None:
            raise
        return year

    logger.info("Created active academic year %s (id=%s)", year.name, year.id)
    return year


def _get_or_create_active_term(db: Session, year: AcademicYear) -> Term:
    term = _active_term(db, year.id)
    if term is not None:
        return term

    term = Term(
        academic_year_id=year.id,
        name=DEFAULT_TERM_NAME,
        start_date=year.start_date,
        end_date=year.end_date,
        is_active=True,
    )
    db.add(term)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        term = _active_term(db, year.id)
        if term is None:
            raise
        return term

    logger.info("Created active term %r for academic year id=%s", term.name, year.id)
    return term


def resolve_active_term(db: Session, *, today: date | None = None) -> ActiveTerm:
    """Return the active (academic year, term) pair, creating either if missing.

    A missing year spans the current calendar year; a missing term is "Term 1"
    spanning its year. Nothing is cached, every call re-reads the store.

    Creation commits immediately, so call this before staging other changes
    on the same session.
    """

    year = _get_or_create_active_year(db, today or date.today())
    term = _get_or_create_active_term(db, year)
    return ActiveTerm(academic_year_id=year.id, term_id=term.id)


def activate_year(db: Session, year: AcademicYear) -> None:
    """Make `year` the only active academic year. Does not commit."""

    db.execute(
        update(AcademicYear)
        .where(AcademicYear.id != year.id)
        .where(AcademicYear.is_active.is_(True))
        .values(is_active=False)
        .execution_options(synchronize_session="fetch")
    )
    db.execute(
        update(AcademicYear)
        .where(AcademicYear.id == year.id)
        .values(is_active=True)
        .execution_options(synchronize_session="fetch")
    )


def activate_term(db: Session, term: Term) -> None:
    """Make `term` the active term and its year the active year. Does not commit."""

    year = db.get(AcademicYear, term.academic_year_id)
    if year is None:
        raise EntityNotFoundError("ACADEMIC_YEAR_NOT_FOUND")
    activate_year(db, year)

    db.execute(
        update(Term)
        .where(Term.academic_year_id == term.academic_year_id)
        .where(Term.id != term.id)
        .where(Term.is_active.is_(True))
        .values(is_active=False)
        .execution_options(synchronize_session="fetch")
    )
    db.execute(
        update(Term)
        .where(Term.id == term.id)
        .values(is_active=True)
        .execution_options(synchronize_session="fetch")
    )
