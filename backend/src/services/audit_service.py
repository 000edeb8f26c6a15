"""Audit trail for attachment uploads and deletions."""
from typing import Any, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from src.core.identity import Uploader
from src.models.audit_event import AuditEvent
from src.models.enums import AuditAction


class AuditService:
    """Service for creating audit trail entries."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def log(
        self,
        actor: Uploader,
        action: AuditAction,
        entity_type: str,
        entity_id: UUID,
        detail: Optional[dict[str, Any]] = None,
        ip_address: Optional[str] = None,
    ) -> AuditEvent:
        """Create an audit log entry.

        Args:
            actor: Identity performing the action, possibly synthetic
            action: Action being performed
            entity_type: Type of entity being acted upon
            entity_id: ID of entity being acted upon
            detail: Small JSON-serializable context for the event
            ip_address: Client IP address

        Returns:
            Created AuditEvent instance
        """
        audit_event = AuditEvent(
            actor_id=actor.user_id,
            actor_anonymous=actor.anonymous,
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            detail_json=detail,
            ip_address=ip_address,
        )
        self.db.add(audit_event)
        await self.db.flush()
        return audit_event
