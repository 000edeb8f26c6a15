"""Enumerations for users, owning entities and audit actions."""

from enum import Enum

from sqlalchemy import Enum as SQLEnum


class UserRole(str, Enum):
    """Site user roles, highest privilege first."""

    ADMIN = "admin"
    MANAGER = "manager"
    SITE_SUPERVISOR = "site_supervisor"
    EMPLOYEE = "employee"


class ProjectStatus(str, Enum):
    PLANNING = "planning"
    IN_PROGRESS = "in_progress"
    ON_HOLD = "on_hold"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Priority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class TaskStatus(str, Enum):
    TODO = "todo"
    IN_PROGRESS = "in_progress"
    REVIEW = "review"
    COMPLETED = "completed"


class IssueStatus(str, Enum):
    OPEN = "open"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"
    CLOSED = "closed"


class IssueCategory(str, Enum):
    SAFETY = "safety"
    QUALITY = "quality"
    SCHEDULE = "schedule"
    COST = "cost"
    OTHER = "other"


class AttendanceStatus(str, Enum):
    PRESENT = "present"
    ABSENT = "absent"
    LATE = "late"
    HALF_DAY = "half_day"
    OVERTIME = "overtime"


class AuditAction(str, Enum):
    """Audit action types for the attachment trail."""

    ATTACHMENT_UPLOAD = "attachment.upload"
    ATTACHMENT_DELETE = "attachment.delete"


def enum_column_type(enum_cls: type[Enum], name: str):
    """String-backed enum column type that works on every backend."""
    return SQLEnum(
        enum_cls,
        name=name,
        native_enum=False,
        length=32,
        values_callable=lambda x: [e.value for e in x],
    )
