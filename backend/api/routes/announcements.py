from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.orm import Session

from api.deps import get_current_user
from core.database import get_db
from models.announcement import Announcement
from models.user import User
from schemas.announcement import AnnouncementAuthorOut, AnnouncementCreate, AnnouncementOut


router = APIRouter()


def _to_out(announcement: Announcement, author: User | None) -> AnnouncementOut:
    return AnnouncementOut(
        id=announcement.id,
        title=announcement.title,
        content=announcement.content,
        audience_type=announcement.audience_type,
        audience_id=announcement.audience_id,
        created_by=AnnouncementAuthorOut(id=author.id, name=author.name) if author is not None else None,
        created_at=announcement.created_at,
    )


@router.get("/", response_model=list[AnnouncementOut])
def list_announcements(db: Session = Depends(get_db)) -> list[AnnouncementOut]:
    q = (
        select(Announcement, User)
        .outerjoin(User, User.id == Announcement.created_by_id)
        .order_by(Announcement.created_at.desc(), Announcement.title.asc())
    )
    return [_to_out(a, u) for a, u in db.execute(q).all()]


@router.post("/", response_model=AnnouncementOut, status_code=201)
def create_announcement(
    payload: AnnouncementCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> AnnouncementOut:
    title = payload.title.strip()
    content = payload.content.strip()
    if not title or not content:
        raise HTTPException(status_code=400, detail="INVALID_ANNOUNCEMENT")
    if payload.audience_type != "All" and payload.audience_id is None:
        raise HTTPException(status_code=400, detail="AUDIENCE_ID_REQUIRED")

    announcement = Announcement(
        title=title,
        content=content,
        audience_type=payload.audience_type,
        audience_id=payload.audience_id if payload.audience_type != "All" else None,
        created_by_id=current_user.id,
    )
    db.add(announcement)
    db.commit()
    db.refresh(announcement)
    return _to_out(announcement, current_user)


@router.delete("/{announcement_id}")
def delete_announcement(
    announcement_id: uuid.UUID,
    db: Session = Depends(get_db),
) -> dict:
    announcement = db.get(Announcement, announcement_id)
    if announcement is None:
        raise HTTPException(status_code=404, detail="ANNOUNCEMENT_NOT_FOUND")
    db.delete(announcement)
    db.commit()
    return {"ok": True}
