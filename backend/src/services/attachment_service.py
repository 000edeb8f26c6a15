"""Attachment service for upload, retrieval and deletion."""

from __future__ import annotations

import hashlib
import logging
import secrets
import time
from dataclasses import dataclass, field
from uuid import UUID

from fastapi import HTTPException, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.attachment_rules import normalize_mimetype, size_limit_message, validate_declared_file
from src.core.config import get_settings
from src.core.errors import AttachmentNotFoundError, AttachmentValidationError
from src.core.identity import Uploader
from src.core.ids import parse_object_id, parse_optional_object_id
from src.core.metrics import observe_attachment_upload
from src.core.structured_logging import log_json
from src.models.enums import AuditAction, UserRole
from src.models.file_attachment import FileAttachment
from src.models.user import User
from src.schemas.attachment import AttachmentMetadata, FailedUpload
from src.services.attachment_linker import AttachmentLinker
from src.services.attachment_store import AttachmentStore
from src.services.audit_service import AuditService

logger = logging.getLogger(__name__)

MAX_ORIGINAL_NAME_LENGTH = 255


@dataclass(frozen=True)
class OwnerRefs:
    """Owner ids supplied alongside an upload; all optional."""

    task_id: UUID | None = None
    project_id: UUID | None = None
    issue_id: UUID | None = None
    attendance_id: UUID | None = None

    @classmethod
    def parse(
        cls,
        *,
        task_id: str | None = None,
        project_id: str | None = None,
        issue_id: str | None = None,
        attendance_id: str | None = None,
    ) -> OwnerRefs:
        """Parse raw form values; blank means absent, malformed is a 400."""
        return cls(
            task_id=parse_optional_object_id(task_id, label="task ID"),
            project_id=parse_optional_object_id(project_id, label="project ID"),
            issue_id=parse_optional_object_id(issue_id, label="issue ID"),
            attendance_id=parse_optional_object_id(attendance_id, label="attendance ID"),
        )

    def linkable(self) -> list[tuple[str, UUID]]:
        """Owners that receive the attachment id in their attachments list."""
        pairs = (
            ("task", self.task_id),
            ("issue", self.issue_id),
            ("attendance", self.attendance_id),
        )
        return [(owner, owner_id) for owner, owner_id in pairs if owner_id is not None]


@dataclass
class BatchUploadResult:
    uploaded: list[AttachmentMetadata] = field(default_factory=list)
    failed: list[FailedUpload] = field(default_factory=list)


def generate_storage_filename(original_name: str) -> str:
    """Unique internal name: epoch millis, random suffix, original name."""
    return f"{int(time.time() * 1000)}-{secrets.randbelow(10**9)}-{original_name}"


async def read_upload_limited(
    upload: UploadFile,
    *,
    max_size: int,
    chunk_size: int,
) -> tuple[bytes, str]:
    """Read an upload in chunks, stopping as soon as it exceeds the cap.

    Never holds more than ``max_size + chunk_size`` bytes.

    Returns:
        Tuple of (payload, sha256 hex digest)

    Raises:
        AttachmentValidationError: If the payload is larger than max_size
    """
    hasher = hashlib.sha256()
    chunks: list[bytes] = []
    total = 0
    while True:
        chunk = await upload.read(chunk_size)
        if not chunk:
            break
        total += len(chunk)
        if total > max_size:
            raise AttachmentValidationError(size_limit_message(max_size))
        hasher.update(chunk)
        chunks.append(chunk)
    return b"".join(chunks), hasher.hexdigest()


class AttachmentService:
    """Service for storing, linking, fetching and deleting attachments."""

    def __init__(self, db: AsyncSession):
        """Initialize attachment service.

        Args:
            db: Database session
        """
        self.db = db
        self.settings = get_settings()
        self.store = AttachmentStore(db)
        self.linker = AttachmentLinker(db)
        self.audit_service = AuditService(db)

    async def upload(
        self,
        upload: UploadFile | None,
        uploader: Uploader,
        owners: OwnerRefs,
        ip_address: str | None = None,
    ) -> FileAttachment:
        """Validate, store and link a single file.

        Args:
            upload: Uploaded file, None when the request carried no file
            uploader: Identity the attachment is recorded against
            owners: Optional owner ids from the request body
            ip_address: Client IP for the audit trail

        Returns:
            Created FileAttachment

        Raises:
            AttachmentValidationError: 400 if the file is missing, of a
                disallowed type or larger than the cap
        """
        if upload is None or not upload.filename:
            raise AttachmentValidationError("No file uploaded")
        return await self._store_upload(upload, uploader, owners, ip_address)

    async def upload_many(
        self,
        uploads: list[UploadFile] | None,
        uploader: Uploader,
        owners: OwnerRefs,
        ip_address: str | None = None,
    ) -> BatchUploadResult:
        """Store each file as its own unit of work.

        A file that fails validation or storage is reported in ``failed``
        and rolled back on its own; files stored before it stay committed.
        """
        if not uploads:
            raise AttachmentValidationError("No files uploaded")
        if len(uploads) > self.settings.upload_max_files:
            raise AttachmentValidationError(
                f"Too many files. Maximum is {self.settings.upload_max_files} per request"
            )

        result = BatchUploadResult()
        for upload in uploads:
            original_name = upload.filename or ""
            try:
                if not upload.filename:
                    raise AttachmentValidationError("No file uploaded")
                attachment = await self._store_upload(upload, uploader, owners, ip_address)
                metadata = AttachmentMetadata.from_record(attachment)
                await self.db.commit()
            except AttachmentValidationError as exc:
                result.failed.append(
                    FailedUpload(
                        original_name=original_name,
                        error=exc.detail,
                        status_code=exc.status_code,
                    )
                )
                continue
            except Exception as exc:
                await self.db.rollback()
                log_json(
                    logger,
                    logging.ERROR,
                    "attachment_batch_item_failed",
                    original_name=original_name,
                    error=str(exc),
                    exception=exc.__class__.__name__,
                )
                result.failed.append(
                    FailedUpload(
                        original_name=original_name,
                        error="Failed to upload file",
                        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                    )
                )
                continue
            result.uploaded.append(metadata)

        log_json(
            logger,
            logging.INFO,
            "attachment_batch_uploaded",
            uploaded=len(result.uploaded),
            failed=len(result.failed),
        )
        return result

    async def _store_upload(
        self,
        upload: UploadFile,
        uploader: Uploader,
        owners: OwnerRefs,
        ip_address: str | None,
    ) -> FileAttachment:
        original_name = upload.filename
        mimetype = normalize_mimetype(upload.content_type)
        max_size = self.settings.upload_max_size_bytes

        try:
            if len(original_name) > MAX_ORIGINAL_NAME_LENGTH:
                raise AttachmentValidationError("File name is too long")
            rejection = validate_declared_file(
                original_name,
                mimetype,
                getattr(upload, "size", None),
                max_size=max_size,
            )
            if rejection:
                raise AttachmentValidationError(rejection)
            data, checksum = await read_upload_limited(
                upload,
                max_size=max_size,
                chunk_size=self.settings.upload_chunk_size_bytes,
            )
        except AttachmentValidationError as exc:
            observe_attachment_upload(outcome="rejected")
            log_json(
                logger,
                logging.WARNING,
                "attachment_rejected",
                original_name=original_name,
                mimetype=mimetype,
                reason=exc.detail,
            )
            raise

        try:
            attachment = await self.store.create(
                filename=generate_storage_filename(original_name),
                original_name=original_name,
                mimetype=mimetype,
                data=data,
                checksum_sha256=checksum,
                uploaded_by=uploader.user_id,
                uploaded_anonymously=uploader.anonymous,
                task_id=owners.task_id,
                project_id=owners.project_id,
                issue_id=owners.issue_id,
            )

            for owner, owner_id in owners.linkable():
                await self.linker.link(owner, owner_id, attachment.id)

            await self.audit_service.log(
                actor=uploader,
                action=AuditAction.ATTACHMENT_UPLOAD,
                entity_type="file_attachment",
                entity_id=attachment.id,
                detail={
                    "original_name": original_name,
                    "mimetype": mimetype,
                    "size": attachment.size,
                    "task_id": str(owners.task_id) if owners.task_id else None,
                    "issue_id": str(owners.issue_id) if owners.issue_id else None,
                },
                ip_address=ip_address,
            )
        except Exception:
            observe_attachment_upload(outcome="failed")
            raise

        observe_attachment_upload(outcome="stored", size_bytes=attachment.size)
        log_json(
            logger,
            logging.INFO,
            "attachment_uploaded",
            attachment_id=str(attachment.id),
            original_name=original_name,
            mimetype=mimetype,
            size=attachment.size,
            anonymous=uploader.anonymous,
        )
        return attachment

    async def get_file(self, file_id: str) -> FileAttachment:
        """Load the full record, payload included.

        Raises:
            AttachmentValidationError: 400 if the id is malformed
            AttachmentNotFoundError: 404 if no record matches
        """
        attachment_id = parse_object_id(file_id, label="file ID")
        attachment = await self.store.get_by_id(attachment_id)
        if not attachment:
            raise AttachmentNotFoundError()
        return attachment

    async def get_info(self, file_id: str) -> FileAttachment:
        """Load a record without its payload."""
        attachment_id = parse_object_id(file_id, label="file ID")
        attachment = await self.store.get_metadata_by_id(attachment_id)
        if not attachment:
            raise AttachmentNotFoundError()
        return attachment

    async def list_for_task(self, task_id: str) -> list[FileAttachment]:
        return await self.store.list_by_task_id(parse_object_id(task_id, label="task ID"))

    async def list_for_issue(self, issue_id: str) -> list[FileAttachment]:
        return await self.store.list_by_issue_id(parse_object_id(issue_id, label="issue ID"))

    async def list_for_project(self, project_id: str) -> list[FileAttachment]:
        return await self.store.list_by_project_id(
            parse_object_id(project_id, label="project ID")
        )

    async def delete(
        self,
        file_id: str,
        current_user: User,
        ip_address: str | None = None,
    ) -> None:
        """Delete an attachment and pull its id out of owning records.

        Only the collections named in ``attachment_cleanup_owners`` are
        cleaned; with the default (tasks only) issue and attendance
        references are left pointing at the removed id.

        Raises:
            AttachmentValidationError: 400 if the id is malformed
            AttachmentNotFoundError: 404 if no record matches
            HTTPException: 403 if the delete policy denies the caller
        """
        attachment_id = parse_object_id(file_id, label="file ID")
        attachment = await self.store.get_metadata_by_id(attachment_id)
        if not attachment:
            raise AttachmentNotFoundError()

        self._check_delete_permission(attachment, current_user)

        removed = await self.linker.pull(attachment.id, self.settings.attachment_cleanup_owners)

        await self.audit_service.log(
            actor=Uploader(user_id=current_user.id, anonymous=False),
            action=AuditAction.ATTACHMENT_DELETE,
            entity_type="file_attachment",
            entity_id=attachment.id,
            detail={
                "original_name": attachment.original_name,
                "references_removed": removed,
            },
            ip_address=ip_address,
        )

        await self.store.delete(attachment)
        log_json(
            logger,
            logging.INFO,
            "attachment_deleted",
            attachment_id=str(attachment_id),
            references_removed=removed,
        )

    def _check_delete_permission(self, attachment: FileAttachment, current_user: User) -> None:
        if self.settings.attachment_delete_policy == "open":
            return
        if current_user.role == UserRole.ADMIN or attachment.uploaded_by == current_user.id:
            return
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not authorized to delete this file",
        )
