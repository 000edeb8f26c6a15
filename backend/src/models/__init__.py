"""SQLAlchemy models."""

from src.models.attachment_link import AttendanceAttachment, IssueAttachment, TaskAttachment
from src.models.attendance import Attendance
from src.models.audit_event import AuditEvent
from src.models.base import Base, BaseModel, MutableModel
from src.models.enums import (
    AttendanceStatus,
    AuditAction,
    IssueCategory,
    IssueStatus,
    Priority,
    ProjectStatus,
    TaskStatus,
    UserRole,
)
from src.models.file_attachment import FileAttachment
from src.models.issue import Issue
from src.models.project import Project
from src.models.task import Task
from src.models.user import User

__all__ = [
    "Base",
    "BaseModel",
    "MutableModel",
    "UserRole",
    "ProjectStatus",
    "Priority",
    "TaskStatus",
    "IssueStatus",
    "IssueCategory",
    "AttendanceStatus",
    "AuditAction",
    "User",
    "Project",
    "Task",
    "Issue",
    "Attendance",
    "FileAttachment",
    "TaskAttachment",
    "IssueAttachment",
    "AttendanceAttachment",
    "AuditEvent",
]
