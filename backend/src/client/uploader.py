"""Async client that uploads attachments and tracks them for a parent form.

The uploader validates files with the same rules the server applies, so a
file it accepts is only rejected by the server for reasons the client cannot
see (storage failures, auth).
"""

from __future__ import annotations

import logging
import mimetypes
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

import httpx

from src.client.watermark import watermark_photo
from src.core.attachment_rules import MAX_FILES_PER_REQUEST, is_image_mimetype, validate_declared_file

logger = logging.getLogger(__name__)

Notify = Callable[[str, str], None]


class UploadRejectedError(ValueError):
    """File refused before it was sent."""


class UploadFailedError(Exception):
    """The server answered an attachment request with an error."""

    def __init__(self, message: str, status_code: int):
        super().__init__(message)
        self.status_code = status_code


@dataclass(frozen=True)
class UploadedAttachment:
    id: UUID
    display_name: str
    size: int
    mimetype: str
    url: str


def _log_notify(level: str, message: str) -> None:
    logger.log(logging.ERROR if level == "error" else logging.INFO, message)


def _error_message(response: httpx.Response, fallback: str) -> str:
    try:
        body = response.json()
    except ValueError:
        return fallback
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return fallback


def _owner_fields(
    task_id: UUID | None,
    project_id: UUID | None,
    issue_id: UUID | None,
    attendance_id: UUID | None,
) -> dict[str, str]:
    fields = {
        "taskId": task_id,
        "projectId": project_id,
        "issueId": issue_id,
        "attendanceId": attendance_id,
    }
    return {key: str(value) for key, value in fields.items() if value is not None}


class AttachmentUploader:
    """Uploads files and keeps the list the surrounding form submits.

    Example:
        async with httpx.AsyncClient(base_url="https://siteops.example") as http:
            uploader = AttachmentUploader(http, token=token)
            await uploader.add_file(b"...", "plan.pdf", task_id=task_id)
            payload["attachments"] = uploader.attachment_ids
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        token: str | None = None,
        notify: Notify | None = None,
        base_path: str = "/api/files",
    ):
        self.client = client
        self.token = token
        self.notify = notify or _log_notify
        self.base_path = base_path.rstrip("/")
        self._attachments: list[UploadedAttachment] = []

    @property
    def attachments(self) -> list[UploadedAttachment]:
        return list(self._attachments)

    @property
    def attachment_ids(self) -> list[str]:
        """Ids to submit with the parent entity."""
        return [str(item.id) for item in self._attachments]

    def _headers(self) -> dict[str, str]:
        if self.token:
            return {"Authorization": f"Bearer {self.token}"}
        return {}

    def _check(self, filename: str, content: bytes, mimetype: str | None) -> str:
        mimetype = mimetype or mimetypes.guess_type(filename)[0] or "application/octet-stream"
        rejection = validate_declared_file(filename, mimetype, len(content))
        if rejection:
            self.notify("error", f"{filename}: {rejection}")
            raise UploadRejectedError(rejection)
        return mimetype

    def _track(self, data: dict) -> UploadedAttachment:
        item = UploadedAttachment(
            id=UUID(data["id"]),
            display_name=data["originalName"],
            size=data["size"],
            mimetype=data["mimetype"],
            url=f"{self.base_path}/{data['id']}",
        )
        self._attachments.append(item)
        return item

    async def add_file(
        self,
        content: bytes,
        filename: str,
        mimetype: str | None = None,
        *,
        task_id: UUID | None = None,
        project_id: UUID | None = None,
        issue_id: UUID | None = None,
        attendance_id: UUID | None = None,
    ) -> UploadedAttachment:
        """Validate and upload one file, then add it to the local list.

        Raises:
            UploadRejectedError: If the file fails the shared rules
            UploadFailedError: If the server refused the upload
        """
        mimetype = self._check(filename, content, mimetype)
        self.notify("progress", f"Uploading {filename}")
        response = await self.client.post(
            f"{self.base_path}/upload",
            files={"file": (filename, content, mimetype)},
            data=_owner_fields(task_id, project_id, issue_id, attendance_id),
            headers=self._headers(),
        )
        if response.status_code != 201:
            message = _error_message(response, "Failed to upload file")
            self.notify("error", f"{filename}: {message}")
            raise UploadFailedError(message, response.status_code)

        item = self._track(response.json()["data"])
        self.notify("success", f"{filename} uploaded")
        return item

    async def add_files(
        self,
        files: Iterable[tuple[str, bytes, str | None]],
        *,
        task_id: UUID | None = None,
        project_id: UUID | None = None,
        issue_id: UUID | None = None,
        attendance_id: UUID | None = None,
    ) -> list[UploadedAttachment]:
        """Upload several files in one request.

        Files failing local validation are reported and skipped; the rest are
        sent. Returns the attachments the server stored.
        """
        parts = []
        for filename, content, mimetype in files:
            try:
                parts.append(("files", (filename, content, self._check(filename, content, mimetype))))
            except UploadRejectedError:
                continue

        if not parts:
            return []
        if len(parts) > MAX_FILES_PER_REQUEST:
            message = f"Too many files. Maximum is {MAX_FILES_PER_REQUEST} per request"
            self.notify("error", message)
            raise UploadRejectedError(message)

        self.notify("progress", f"Uploading {len(parts)} file(s)")
        response = await self.client.post(
            f"{self.base_path}/upload-multiple",
            files=parts,
            data=_owner_fields(task_id, project_id, issue_id, attendance_id),
            headers=self._headers(),
        )
        try:
            body = response.json()
        except ValueError:
            body = {}

        for failure in body.get("failed", []):
            self.notify("error", f"{failure['originalName']}: {failure['error']}")
        if "data" not in body:
            message = _error_message(response, "Failed to upload files")
            self.notify("error", message)
            raise UploadFailedError(message, response.status_code)

        stored = [self._track(data) for data in body["data"]]
        if stored:
            self.notify("success", f"{len(stored)} file(s) uploaded")
        return stored

    async def capture_photo(
        self,
        data: bytes,
        *,
        captured_at: datetime | None = None,
        address: str | None = None,
        coordinates: tuple[float, float] | None = None,
        task_id: UUID | None = None,
        issue_id: UUID | None = None,
        attendance_id: UUID | None = None,
        mimetype: str = "image/jpeg",
    ) -> UploadedAttachment:
        """Watermark a camera capture and upload it as a JPEG.

        Raises:
            UploadRejectedError: If the capture is not an image
        """
        if not is_image_mimetype(mimetype):
            message = "Only image captures can be stamped"
            self.notify("error", message)
            raise UploadRejectedError(message)
        captured_at = captured_at or datetime.now()
        stamped = watermark_photo(data, captured_at, address=address, coordinates=coordinates)
        filename = f"attendance_{int(time.time() * 1000)}.jpg"
        return await self.add_file(
            stamped,
            filename,
            "image/jpeg",
            task_id=task_id,
            issue_id=issue_id,
            attendance_id=attendance_id,
        )

    async def remove(self, attachment_id: UUID | str) -> None:
        """Delete on the server; the local entry goes only once that succeeded.

        Raises:
            UploadFailedError: If the server did not delete the file
        """
        attachment_id = UUID(str(attachment_id))
        response = await self.client.delete(
            f"{self.base_path}/{attachment_id}",
            headers=self._headers(),
        )
        if response.status_code != 200:
            message = _error_message(response, "Failed to delete file")
            self.notify("error", message)
            raise UploadFailedError(message, response.status_code)

        self._attachments = [item for item in self._attachments if item.id != attachment_id]
        self.notify("success", "File removed")
