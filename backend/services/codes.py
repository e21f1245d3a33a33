from __future__ import annotations

from datetime import date

from sqlalchemy import select
from sqlalchemy.orm import Session

from models.student import Student
from models.teacher import Teacher


CODE_DIGITS = 6

STAFF_CODE_PREFIX = "STF"
STUDENT_CODE_PREFIX = "SCH"


def code_prefix(tag: str, today: date) -> str:
    return f"{tag}-{today.year % 100:02d}-"


def next_sequential_code(db: Session, column, *, tag: str, today: date | None = None) -> str:
    """Next `<tag>-<yy>-<NNNNNN>` value for `column`, one past the highest this year.

    Codes are not reserved: two concurrent callers can get the same value, so
    callers insert and retry on the unique-code violation. Values in `column`
    that do not end in digits are ignored.
    """

    prefix = code_prefix(tag, today or date.today())
    last = db.execute(
        select(column).where(column.startswith(prefix)).order_by(column.desc()).limit(1)
    ).scalar_one_or_none()

    seq = 1
    if last:
        tail = str(last).rsplit("-", 1)[-1]
        if tail.isdigit():
            seq = int(tail) + 1
    return f"{prefix}{seq:0{CODE_DIGITS}d}"


def next_staff_code(db: Session, *, today: date | None = None) -> str:
    """e.g. STF-26-000007"""
    return next_sequential_code(db, Teacher.code, tag=STAFF_CODE_PREFIX, today=today)


def next_student_code(db: Session, *, today: date | None = None) -> str:
    """e.g. SCH-26-000042"""
    return next_sequential_code(db, Student.student_code, tag=STUDENT_CODE_PREFIX, today=today)
