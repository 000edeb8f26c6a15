"""Links attachments into the ``attachments`` lists of owning entities."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from uuid import UUID

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.structured_logging import log_json
from src.models.attachment_link import AttendanceAttachment, IssueAttachment, TaskAttachment
from src.models.attendance import Attendance
from src.models.issue import Issue
from src.models.task import Task

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OwnerCollection:
    """An entity type that can hold attachment references."""

    name: str
    owner_model: type
    link_model: type
    owner_column: str


OWNER_COLLECTIONS: dict[str, OwnerCollection] = {
    "task": OwnerCollection("task", Task, TaskAttachment, "task_id"),
    "issue": OwnerCollection("issue", Issue, IssueAttachment, "issue_id"),
    "attendance": OwnerCollection("attendance", Attendance, AttendanceAttachment, "attendance_id"),
}


def get_owner_collection(name: str) -> OwnerCollection:
    try:
        return OWNER_COLLECTIONS[name]
    except KeyError:
        raise ValueError(f"Unknown owner collection '{name}'") from None


class AttachmentLinker:
    """Appends attachment ids to owners and pulls them out again."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def link(self, owner: str, owner_id: UUID, attachment_id: UUID) -> bool:
        """Append an attachment id to an owner's list.

        Linking is best-effort: a missing owner is logged and skipped, the
        attachment itself stays stored.

        Args:
            owner: Owner collection name ("task", "issue", "attendance")
            owner_id: Id of the owning record
            attachment_id: Id of the stored attachment

        Returns:
            True if the owner was found and linked, False if it was skipped
        """
        collection = get_owner_collection(owner)
        record = await self.db.get(collection.owner_model, owner_id)
        if record is None:
            log_json(
                logger,
                logging.WARNING,
                "attachment_link_skipped",
                owner=owner,
                owner_id=str(owner_id),
                attachment_id=str(attachment_id),
                reason="owner_not_found",
            )
            return False

        record.attachment_links.append(collection.link_model(attachment_id=attachment_id))
        await self.db.flush()
        log_json(
            logger,
            logging.INFO,
            "attachment_linked",
            owner=owner,
            owner_id=str(owner_id),
            attachment_id=str(attachment_id),
            position=len(record.attachment_ids),
        )
        return True

    async def pull(self, attachment_id: UUID, owners: Iterable[str]) -> dict[str, int]:
        """Remove an attachment id from every owner in the given collections.

        Returns:
            Number of removed references per collection
        """
        removed: dict[str, int] = {}
        for name in owners:
            collection = get_owner_collection(name)
            link_model = collection.link_model
            result = await self.db.execute(
                delete(link_model)
                .where(link_model.attachment_id == attachment_id)
                .execution_options(synchronize_session="evaluate")
            )
            removed[name] = result.rowcount or 0
        if removed:
            log_json(
                logger,
                logging.INFO,
                "attachment_references_pulled",
                attachment_id=str(attachment_id),
                removed=removed,
            )
        return removed
