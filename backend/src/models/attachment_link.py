"""Link rows that hold an owning entity's ``attachments`` list.

Each row is one entry of the list, ordered by insertion. The attachment id
is deliberately not a foreign key: an owner may keep referencing an
attachment that no longer exists when its collection is not cleaned up on
delete.
"""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, Uuid, func

from src.models.base import Base, utc_now


class _AttachmentLinkColumns:
    id = Column(Integer, primary_key=True, autoincrement=True)
    attachment_id = Column(Uuid(as_uuid=True), nullable=False, index=True)
    created_at = Column(
        DateTime(timezone=True),
        default=utc_now,
        server_default=func.now(),
        nullable=False,
    )


class TaskAttachment(_AttachmentLinkColumns, Base):
    __tablename__ = "task_attachments"

    task_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("tasks.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )


class IssueAttachment(_AttachmentLinkColumns, Base):
    __tablename__ = "issue_attachments"

    issue_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("issues.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )


class AttendanceAttachment(_AttachmentLinkColumns, Base):
    __tablename__ = "attendance_attachments"

    attendance_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("attendance.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
