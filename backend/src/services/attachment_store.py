"""Persistence and lookup of attachment records."""

from __future__ import annotations

import hashlib
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import undefer

from src.models.file_attachment import FileAttachment


class AttachmentStore:
    """Reads and writes FileAttachment rows.

    Callers pass already-parsed UUIDs; malformed ids are rejected before a
    store method is ever reached.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(
        self,
        *,
        filename: str,
        original_name: str,
        mimetype: str,
        data: bytes,
        uploaded_by: UUID,
        uploaded_anonymously: bool = False,
        task_id: UUID | None = None,
        project_id: UUID | None = None,
        issue_id: UUID | None = None,
        checksum_sha256: str | None = None,
    ) -> FileAttachment:
        """Persist a new attachment and return it with id and timestamp set."""
        attachment = FileAttachment(
            filename=filename,
            original_name=original_name,
            mimetype=mimetype,
            size=len(data),
            checksum_sha256=checksum_sha256 or hashlib.sha256(data).hexdigest(),
            data=data,
            task_id=task_id,
            project_id=project_id,
            issue_id=issue_id,
            uploaded_by=uploaded_by,
            uploaded_anonymously=uploaded_anonymously,
        )
        self.db.add(attachment)
        await self.db.flush()
        return attachment

    async def get_by_id(self, attachment_id: UUID) -> FileAttachment | None:
        """Full record including the binary payload."""
        query = (
            select(FileAttachment)
            .where(FileAttachment.id == attachment_id)
            .options(undefer(FileAttachment.data))
        )
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def get_metadata_by_id(self, attachment_id: UUID) -> FileAttachment | None:
        """Record without the payload column loaded."""
        result = await self.db.execute(
            select(FileAttachment).where(FileAttachment.id == attachment_id)
        )
        return result.scalar_one_or_none()

    async def list_by_task_id(self, task_id: UUID) -> list[FileAttachment]:
        return await self._list_where(FileAttachment.task_id == task_id)

    async def list_by_issue_id(self, issue_id: UUID) -> list[FileAttachment]:
        return await self._list_where(FileAttachment.issue_id == issue_id)

    async def list_by_project_id(self, project_id: UUID) -> list[FileAttachment]:
        return await self._list_where(FileAttachment.project_id == project_id)

    async def _list_where(self, clause) -> list[FileAttachment]:
        query = (
            select(FileAttachment)
            .where(clause)
            .order_by(FileAttachment.created_at, FileAttachment.filename)
        )
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def delete(self, attachment: FileAttachment) -> None:
        await self.db.delete(attachment)
        await self.db.flush()
