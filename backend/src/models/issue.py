"""Issue model."""
from sqlalchemy import Column, DateTime, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import relationship

from src.models.base import MutableModel
from src.models.enums import IssueCategory, IssueStatus, Priority, enum_column_type


class Issue(MutableModel):
    """Site issue report; owns an ordered list of attachment ids."""

    __tablename__ = "issues"

    project_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False, default="")
    reported_by_name = Column(String(100), nullable=True)
    location = Column(String(255), nullable=True)
    priority = Column(enum_column_type(Priority, "priority"), nullable=False, default=Priority.MEDIUM)
    status = Column(enum_column_type(IssueStatus, "issue_status"), nullable=False, default=IssueStatus.OPEN)
    category = Column(
        enum_column_type(IssueCategory, "issue_category"),
        nullable=False,
        default=IssueCategory.OTHER,
    )
    resolved_at = Column(DateTime(timezone=True), nullable=True)

    attachment_links = relationship(
        "IssueAttachment",
        order_by="IssueAttachment.id",
        lazy="selectin",
        cascade="all, delete-orphan",
    )

    @property
    def attachment_ids(self) -> list:
        return [link.attachment_id for link in self.attachment_links]

    def __repr__(self) -> str:
        return f"<Issue(id={self.id}, title={self.title})>"
