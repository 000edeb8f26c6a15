"""AuditEvent model."""

from sqlalchemy import JSON, Boolean, Column, String, Uuid

from src.models.base import BaseModel
from src.models.enums import AuditAction, enum_column_type


class AuditEvent(BaseModel):
    """Append-only trail of attachment uploads and deletions.

    ``actor_anonymous`` marks events whose actor id is a synthetic
    placeholder rather than a real user.
    """

    __tablename__ = "audit_events"

    actor_id = Column(Uuid(as_uuid=True), nullable=False, index=True)
    actor_anonymous = Column(Boolean, nullable=False, default=False)
    action = Column(enum_column_type(AuditAction, "audit_action"), nullable=False)
    entity_type = Column(String(50), nullable=False)
    entity_id = Column(Uuid(as_uuid=True), nullable=False, index=True)
    detail_json = Column(JSON, nullable=True)
    ip_address = Column(String(45), nullable=True)

    def __repr__(self) -> str:
        return f"<AuditEvent(id={self.id}, action={self.action}, entity_type={self.entity_type})>"
