"""Project model."""
from sqlalchemy import Column, String, Text

from src.models.base import MutableModel
from src.models.enums import ProjectStatus, enum_column_type


class Project(MutableModel):
    """Construction project that tasks, issues and attendance belong to."""

    __tablename__ = "projects"

    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    location = Column(String(255), nullable=True)
    status = Column(
        enum_column_type(ProjectStatus, "project_status"),
        nullable=False,
        default=ProjectStatus.PLANNING,
    )

    def __repr__(self) -> str:
        return f"<Project(id={self.id}, name={self.name})>"
