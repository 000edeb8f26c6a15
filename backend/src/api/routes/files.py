"""API routes for file attachments."""

from urllib.parse import quote

from fastapi import APIRouter, Depends, File, Form, Request, Response, UploadFile, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.deps import get_current_user, get_uploader
from src.core.database import get_db
from src.core.errors import storage_errors
from src.core.identity import Uploader
from src.models.file_attachment import FileAttachment
from src.models.user import User
from src.schemas.attachment import (
    AttachmentListResponse,
    AttachmentMetadata,
    AttachmentResponse,
    BatchUploadResponse,
    MessageResponse,
)
from src.schemas.errors import ErrorResponse
from src.services.attachment_service import AttachmentService, BatchUploadResult, OwnerRefs

router = APIRouter()

ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Validation error"},
    500: {"model": ErrorResponse, "description": "Storage error"},
}


def _client_ip(request: Request) -> str | None:
    return request.client.host if request.client else None


def _content_disposition(original_name: str) -> str:
    """Inline disposition; non-ASCII names get an RFC 5987 ``filename*``."""
    fallback = original_name.encode("ascii", "replace").decode("ascii")
    fallback = fallback.replace("\\", "_").replace('"', "_")
    if fallback == original_name:
        return f'inline; filename="{fallback}"'
    return f"inline; filename=\"{fallback}\"; filename*=UTF-8''{quote(original_name, safe='')}"


def _batch_status(result: BatchUploadResult) -> int:
    if result.uploaded:
        return status.HTTP_201_CREATED
    if all(item.status_code == status.HTTP_400_BAD_REQUEST for item in result.failed):
        return status.HTTP_400_BAD_REQUEST
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def _list_response(attachments: list[FileAttachment]) -> AttachmentListResponse:
    return AttachmentListResponse(
        data=[AttachmentMetadata.from_record(a) for a in attachments]
    )


@router.post(
    "/upload",
    response_model=AttachmentResponse,
    response_model_by_alias=True,
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
    summary="Upload a file",
)
async def upload_file(
    request: Request,
    file: UploadFile | None = File(None),
    task_id: str | None = Form(None, alias="taskId"),
    project_id: str | None = Form(None, alias="projectId"),
    issue_id: str | None = Form(None, alias="issueId"),
    attendance_id: str | None = Form(None, alias="attendanceId"),
    db: AsyncSession = Depends(get_db),
    uploader: Uploader = Depends(get_uploader),
) -> AttachmentResponse:
    """Upload a single file and link it to the given task, issue or attendance.

    Linking is best-effort: an owner id that matches no record is logged
    and the upload still succeeds.
    """
    owners = OwnerRefs.parse(
        task_id=task_id,
        project_id=project_id,
        issue_id=issue_id,
        attendance_id=attendance_id,
    )
    with storage_errors("Failed to upload file", "attachment_upload_failed"):
        service = AttachmentService(db)
        attachment = await service.upload(file, uploader, owners, _client_ip(request))
        metadata = AttachmentMetadata.from_record(attachment)
        await db.commit()
    return AttachmentResponse(data=metadata)


@router.post(
    "/upload-multiple",
    response_model=BatchUploadResponse,
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
    summary="Upload several files",
)
async def upload_files(
    request: Request,
    files: list[UploadFile] | None = File(None),
    task_id: str | None = Form(None, alias="taskId"),
    project_id: str | None = Form(None, alias="projectId"),
    issue_id: str | None = Form(None, alias="issueId"),
    attendance_id: str | None = Form(None, alias="attendanceId"),
    db: AsyncSession = Depends(get_db),
    uploader: Uploader = Depends(get_uploader),
) -> JSONResponse:
    """Upload up to ten files; each file succeeds or fails on its own.

    Returns 201 if anything was stored. Otherwise 400 when every failure was
    a validation failure, 500 when at least one was a storage failure.
    """
    owners = OwnerRefs.parse(
        task_id=task_id,
        project_id=project_id,
        issue_id=issue_id,
        attendance_id=attendance_id,
    )
    with storage_errors("Failed to upload files", "attachment_batch_failed"):
        service = AttachmentService(db)
        result = await service.upload_many(files, uploader, owners, _client_ip(request))

    status_code = _batch_status(result)
    body = BatchUploadResponse(
        success=status_code == status.HTTP_201_CREATED,
        data=result.uploaded,
        failed=result.failed,
    )
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(mode="json", by_alias=True),
    )


@router.get(
    "/task/{task_id}",
    response_model=AttachmentListResponse,
    response_model_by_alias=True,
    responses=ERROR_RESPONSES,
    summary="List files of a task",
)
async def list_task_files(
    task_id: str,
    db: AsyncSession = Depends(get_db),
) -> AttachmentListResponse:
    """List attachment metadata recorded against a task, oldest first."""
    with storage_errors("Failed to retrieve files", "attachment_list_failed"):
        attachments = await AttachmentService(db).list_for_task(task_id)
    return _list_response(attachments)


@router.get(
    "/issue/{issue_id}",
    response_model=AttachmentListResponse,
    response_model_by_alias=True,
    responses=ERROR_RESPONSES,
    summary="List files of an issue",
)
async def list_issue_files(
    issue_id: str,
    db: AsyncSession = Depends(get_db),
) -> AttachmentListResponse:
    with storage_errors("Failed to retrieve files", "attachment_list_failed"):
        attachments = await AttachmentService(db).list_for_issue(issue_id)
    return _list_response(attachments)


@router.get(
    "/project/{project_id}",
    response_model=AttachmentListResponse,
    response_model_by_alias=True,
    responses=ERROR_RESPONSES,
    summary="List files of a project",
)
async def list_project_files(
    project_id: str,
    db: AsyncSession = Depends(get_db),
) -> AttachmentListResponse:
    with storage_errors("Failed to retrieve files", "attachment_list_failed"):
        attachments = await AttachmentService(db).list_for_project(project_id)
    return _list_response(attachments)


@router.get(
    "/{file_id}",
    response_class=Response,
    responses={**ERROR_RESPONSES, 404: {"model": ErrorResponse, "description": "Not found"}},
    summary="Download a file",
)
async def get_file(
    file_id: str,
    db: AsyncSession = Depends(get_db),
) -> Response:
    """Return the stored bytes with the stored content type, shown inline."""
    with storage_errors("Failed to retrieve file", "attachment_fetch_failed"):
        attachment = await AttachmentService(db).get_file(file_id)

    # Exact stored type; Starlette would append a charset to text/* media types
    headers = {
        "Content-Type": attachment.mimetype,
        "Content-Disposition": _content_disposition(attachment.original_name),
        "Content-Length": str(attachment.size),
        "Cache-Control": "private, max-age=3600",
    }
    if attachment.checksum_sha256:
        headers["ETag"] = f'"{attachment.checksum_sha256}"'
    return Response(
        content=attachment.data,
        headers=headers,
    )


@router.get(
    "/{file_id}/info",
    response_model=AttachmentResponse,
    response_model_by_alias=True,
    responses={**ERROR_RESPONSES, 404: {"model": ErrorResponse, "description": "Not found"}},
    summary="Get file metadata",
)
async def get_file_info(
    file_id: str,
    db: AsyncSession = Depends(get_db),
) -> AttachmentResponse:
    """Metadata only; the payload is never loaded."""
    with storage_errors("Failed to retrieve file info", "attachment_info_failed"):
        attachment = await AttachmentService(db).get_info(file_id)
    return AttachmentResponse(data=AttachmentMetadata.from_record(attachment))


@router.delete(
    "/{file_id}",
    response_model=MessageResponse,
    responses={
        **ERROR_RESPONSES,
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        403: {"model": ErrorResponse, "description": "Not allowed"},
        404: {"model": ErrorResponse, "description": "Not found"},
    },
    summary="Delete a file",
)
async def delete_file(
    file_id: str,
    request: Request,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> MessageResponse:
    """Delete a file and remove its id from the configured owner collections.

    Requires authentication.
    """
    with storage_errors("Failed to delete file", "attachment_delete_failed"):
        await AttachmentService(db).delete(file_id, current_user, _client_ip(request))
        await db.commit()
    return MessageResponse(message="File deleted successfully")
