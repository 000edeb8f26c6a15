"""File attachment model with the payload stored inline."""

from sqlalchemy import Boolean, Column, Index, Integer, LargeBinary, String, Uuid
from sqlalchemy.orm import deferred

from src.models.base import BaseModel


class FileAttachment(BaseModel):
    """Stored file plus its descriptive metadata.

    Records are immutable once created. The ``data`` column is deferred so
    metadata queries never pull the payload; load it explicitly with
    ``undefer(FileAttachment.data)``.

    ``task_id``, ``project_id`` and ``issue_id`` only record which owner the
    upload was requested for. They are not foreign keys and may point at
    records that never existed.
    """

    __tablename__ = "file_attachments"

    filename = Column(String(512), nullable=False, unique=True)
    original_name = Column(String(255), nullable=False)
    mimetype = Column(String(100), nullable=False)
    size = Column(Integer, nullable=False)
    checksum_sha256 = Column(String(64), nullable=False)
    data = deferred(Column(LargeBinary, nullable=False))

    task_id = Column(Uuid(as_uuid=True), nullable=True, index=True)
    project_id = Column(Uuid(as_uuid=True), nullable=True, index=True)
    issue_id = Column(Uuid(as_uuid=True), nullable=True, index=True)

    uploaded_by = Column(Uuid(as_uuid=True), nullable=False, index=True)
    uploaded_anonymously = Column(Boolean, nullable=False, default=False)

    __table_args__ = (Index("idx_file_attachments_created_at", "created_at"),)

    def __repr__(self) -> str:
        return f"<FileAttachment(id={self.id}, original_name={self.original_name})>"
