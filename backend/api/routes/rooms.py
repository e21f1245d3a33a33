from __future__ import annotations

import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from core.database import get_db
from models.room import Room
from models.timetable_slot import TimetableSlot
from schemas.room import RoomCreate, RoomOut


logger = logging.getLogger(__name__)


router = APIRouter()


def _ensure_unique_room_code(db: Session, *, code: str) -> None:
    if db.execute(select(Room.id).where(Room.code == code).limit(1)).first() is not None:
        raise HTTPException(status_code=409, detail="ROOM_CODE_ALREADY_EXISTS")


@router.get("/", response_model=list[RoomOut])
def list_rooms(db: Session = Depends(get_db)) -> list[RoomOut]:
    return db.execute(select(Room).order_by(Room.code.asc())).scalars().all()


@router.post("/", response_model=RoomOut, status_code=201)
def create_room(
    payload: RoomCreate,
    db: Session = Depends(get_db),
) -> RoomOut:
    data = payload.model_dump()
    data["code"] = str(data["code"]).strip()
    data["name"] = str(data["name"]).strip()
    if not data["code"]:
        raise HTTPException(status_code=400, detail="INVALID_CODE")
    if not data["name"]:
        raise HTTPException(status_code=400, detail="INVALID_NAME")

    _ensure_unique_room_code(db, code=data["code"])

    room = Room(**data)
    db.add(room)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="ROOM_CODE_ALREADY_EXISTS")
    db.refresh(room)
    return room


@router.delete("/{room_id}")
def delete_room(
    room_id: uuid.UUID,
    db: Session = Depends(get_db),
) -> dict:
    room = db.get(Room, room_id)
    if room is None:
        raise HTTPException(status_code=404, detail="ROOM_NOT_FOUND")

    in_use = db.execute(select(TimetableSlot.id).where(TimetableSlot.room_id == room_id).limit(1)).first()
    if in_use is not None:
        logger.warning("Deleting room_id=%s (code=%s) still referenced by timetable slots", room_id, room.code)

    db.delete(room)
    db.commit()
    return {"ok": True}
