"""User model."""
from sqlalchemy import Boolean, Column, String

from src.models.base import MutableModel
from src.models.enums import UserRole, enum_column_type


class User(MutableModel):
    """Site user who can authenticate against the API."""

    __tablename__ = "users"

    name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False, unique=True)
    role = Column(
        enum_column_type(UserRole, "user_role"),
        nullable=False,
        default=UserRole.EMPLOYEE,
    )
    is_active = Column(Boolean, nullable=False, default=True)

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"
