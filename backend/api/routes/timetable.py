from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from core.database import get_db
from schemas.timetable import SlotConflictResponse, SlotCreate, SlotOut, TimetableOut
from services.timetable_service import assign_slot, load_timetable


router = APIRouter()


@router.get("", response_model=TimetableOut)
@router.get("/", response_model=TimetableOut, include_in_schema=False)
def get_timetable(
    class_id: uuid.UUID | None = Query(default=None),
    term_id: uuid.UUID | None = Query(default=None),
    db: Session = Depends(get_db),
) -> TimetableOut:
    if class_id is None:
        raise HTTPException(status_code=400, detail="CLASS_ID_REQUIRED")
    return load_timetable(db, class_id=class_id, term_id=term_id)


@router.post(
    "/slots",
    response_model=SlotOut,
    status_code=201,
    responses={409: {"model": SlotConflictResponse}},
)
def add_slot(
    payload: SlotCreate,
    db: Session = Depends(get_db),
) -> SlotOut:
    # SlotConflictError is rendered as 409 by the app-level handler.
    return assign_slot(db, payload)
