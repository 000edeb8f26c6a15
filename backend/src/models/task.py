"""Task model."""
from sqlalchemy import Column, Date, Float, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import relationship

from src.models.base import MutableModel
from src.models.enums import Priority, TaskStatus, enum_column_type


class Task(MutableModel):
    """Unit of site work; owns an ordered list of attachment ids."""

    __tablename__ = "tasks"

    project_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False, default="")
    assigned_to_name = Column(String(100), nullable=True)
    priority = Column(enum_column_type(Priority, "priority"), nullable=False, default=Priority.MEDIUM)
    status = Column(enum_column_type(TaskStatus, "task_status"), nullable=False, default=TaskStatus.TODO)
    due_date = Column(Date, nullable=True)
    estimated_hours = Column(Float, nullable=False, default=0)

    attachment_links = relationship(
        "TaskAttachment",
        order_by="TaskAttachment.id",
        lazy="selectin",
        cascade="all, delete-orphan",
    )

    @property
    def attachment_ids(self) -> list:
        return [link.attachment_id for link in self.attachment_links]

    def __repr__(self) -> str:
        return f"<Task(id={self.id}, title={self.title})>"
