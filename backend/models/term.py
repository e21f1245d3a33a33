from __future__ import annotations

import uuid

from sqlalchemy import Boolean, CheckConstraint, Column, Date, DateTime, ForeignKey, Index, Text, Uuid, text
from sqlalchemy.sql import func

from models.base import Base


class Term(Base):
    __tablename__ = "terms"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    academic_year_id = Column(
        Uuid,
        ForeignKey("academic_years.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name = Column(Text, nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    is_active = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (
        CheckConstraint("start_date <= end_date", name="ck_terms_dates"),
        # At most one active term per academic year.
        Index(
            "ux_terms_active_per_year",
            "academic_year_id",
            unique=True,
            postgresql_where=text("is_active"),
            sqlite_where=text("is_active"),
        ),
    )
