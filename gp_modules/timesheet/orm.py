"""
SQLAlchemy ORM persistence model for the Timesheet module.

Invariants enforced
-------------------
* ``total_hours`` uses Numeric(38, 9) -- NEVER float.
* ``status`` stored as String(50).
"""

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import Date, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from gp_kernel.db.base import VersionedBase


class TimesheetEntryModel(VersionedBase):
    """
    Hours a user worked on a project.

    Maps to the ``TimesheetEntry`` DTO in ``gp_modules.timesheet.models``.
    """

    __tablename__ = "timesheet_entries"

    __table_args__ = (
        Index("idx_timesheet_user", "user_id"),
        Index("idx_timesheet_project", "project_id"),
        Index("idx_timesheet_status", "status"),
    )

    user_id: Mapped[UUID]
    project_id: Mapped[UUID]
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    total_hours: Mapped[Decimal]
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    status: Mapped[str] = mapped_column(String(50), nullable=False, default="pending")
    reviewed_by: Mapped[UUID | None]
    reviewed_at: Mapped[datetime | None]
    review_comment: Mapped[str | None] = mapped_column(Text, nullable=True)
    submitted_at: Mapped[datetime | None]

    def to_dto(self):
        from gp_modules.timesheet.models import TimesheetEntry, TimesheetStatus

        return TimesheetEntry(
            id=self.id,
            user_id=self.user_id,
            project_id=self.project_id,
            start_date=self.start_date,
            end_date=self.end_date,
            total_hours=self.total_hours,
            description=self.description,
            status=TimesheetStatus(self.status),
            reviewed_by=self.reviewed_by,
            reviewed_at=self.reviewed_at,
            review_comment=self.review_comment,
            submitted_at=self.submitted_at,
            version=self.version,
        )

    @classmethod
    def from_dto(cls, dto) -> "TimesheetEntryModel":
        return cls(
            id=dto.id,
            user_id=dto.user_id,
            project_id=dto.project_id,
            start_date=dto.start_date,
            end_date=dto.end_date,
            total_hours=dto.total_hours,
            description=dto.description,
            status=dto.status.value,
            reviewed_by=dto.reviewed_by,
            reviewed_at=dto.reviewed_at,
            review_comment=dto.review_comment,
            submitted_at=dto.submitted_at,
            version=dto.version,
        )

    def __repr__(self) -> str:
        return f"<TimesheetEntryModel {self.id} [{self.status}] {self.total_hours}h>"
