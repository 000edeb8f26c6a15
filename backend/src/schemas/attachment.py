"""Pydantic schemas for the file attachment endpoints."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class AttachmentMetadata(BaseModel):
    """Descriptive fields of a stored attachment; never carries the payload."""

    model_config = ConfigDict(populate_by_name=True)

    id: UUID
    filename: str
    original_name: str = Field(alias="originalName")
    mimetype: str
    size: int
    uploaded_at: datetime = Field(alias="uploadedAt")

    @classmethod
    def from_record(cls, attachment) -> "AttachmentMetadata":
        return cls(
            id=attachment.id,
            filename=attachment.filename,
            original_name=attachment.original_name,
            mimetype=attachment.mimetype,
            size=attachment.size,
            uploaded_at=attachment.created_at,
        )


class AttachmentResponse(BaseModel):
    success: bool = True
    data: AttachmentMetadata


class AttachmentListResponse(BaseModel):
    success: bool = True
    data: list[AttachmentMetadata]


class FailedUpload(BaseModel):
    """Outcome of one file in a batch that could not be stored."""

    model_config = ConfigDict(populate_by_name=True)

    original_name: str = Field(alias="originalName")
    error: str
    status_code: int = Field(alias="statusCode")


class BatchUploadResponse(BaseModel):
    """Per-file outcomes of a multi-file upload.

    ``data`` lists what was stored, ``failed`` what was not. Both can be
    non-empty in the same response.
    """

    success: bool
    data: list[AttachmentMetadata]
    failed: list[FailedUpload] = []


class MessageResponse(BaseModel):
    success: bool = True
    message: str
