from __future__ import annotations

import uuid

from sqlalchemy import Boolean, CheckConstraint, Column, Date, DateTime, Index, Text, Uuid, text
from sqlalchemy.sql import func

from models.base import Base


class AcademicYear(Base):
    __tablename__ = "academic_years"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(Text, nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    is_active = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (
        CheckConstraint("start_date <= end_date", name="ck_academic_years_dates"),
        # At most one active year.
        Index(
            "ux_academic_years_active",
            "is_active",
            unique=True,
            postgresql_where=text("is_active"),
            sqlite_where=text("is_active"),
        ),
    )
