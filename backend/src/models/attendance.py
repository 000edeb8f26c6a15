"""Attendance model."""
from sqlalchemy import Boolean, Column, Date, Float, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import relationship

from src.models.base import MutableModel
from src.models.enums import AttendanceStatus, enum_column_type


class Attendance(MutableModel):
    """Daily attendance mark for a worker; photos are kept as attachments."""

    __tablename__ = "attendance"

    project_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    employee_name = Column(String(100), nullable=False)
    labour_type = Column(String(50), nullable=True)
    date = Column(Date, nullable=False)
    time_in = Column(String(5), nullable=True)
    time_out = Column(String(5), nullable=True)
    status = Column(
        enum_column_type(AttendanceStatus, "attendance_status"),
        nullable=False,
        default=AttendanceStatus.PRESENT,
    )
    hours = Column(Float, nullable=True)
    notes = Column(Text, nullable=True)
    is_approved = Column(Boolean, nullable=False, default=False)

    attachment_links = relationship(
        "AttendanceAttachment",
        order_by="AttendanceAttachment.id",
        lazy="selectin",
        cascade="all, delete-orphan",
    )

    @property
    def attachment_ids(self) -> list:
        return [link.attachment_id for link in self.attachment_links]

    def __repr__(self) -> str:
        return f"<Attendance(id={self.id}, employee_name={self.employee_name})>"
