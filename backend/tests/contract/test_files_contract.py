"""Contract tests for the file attachment endpoints."""
import io
from uuid import uuid4

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.attachment_rules import MAX_FILE_SIZE
from src.models.file_attachment import FileAttachment
from src.models.task import Task
from src.services.attachment_store import AttachmentStore
from tests.conftest import auth_headers

METADATA_KEYS = {"id", "filename", "originalName", "mimetype", "size", "uploadedAt"}


async def _count_attachments(db: AsyncSession) -> int:
    result = await db.execute(select(func.count()).select_from(FileAttachment))
    return result.scalar_one()


async def _upload(client: AsyncClient, name="notes.txt", content=b"site notes", mimetype="text/plain", **data):
    return await client.post(
        "/api/files/upload",
        files={"file": (name, io.BytesIO(content), mimetype)},
        data=data,
    )


@pytest.mark.asyncio
async def test_health_returns_ok(client: AsyncClient):
    response = await client.get("/api/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


@pytest.mark.asyncio
async def test_upload_returns_201_with_metadata(client: AsyncClient):
    """POST /files/upload returns the stored metadata without the payload."""
    response = await _upload(client, name="plan.pdf", content=b"%PDF-1.4 plan", mimetype="application/pdf")

    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert set(body["data"]) == METADATA_KEYS
    assert body["data"]["originalName"] == "plan.pdf"
    assert body["data"]["mimetype"] == "application/pdf"
    assert body["data"]["size"] == len(b"%PDF-1.4 plan")
    assert body["data"]["filename"].endswith("-plan.pdf")
    assert body["data"]["filename"] != "plan.pdf"


@pytest.mark.asyncio
async def test_upload_without_file_returns_400(client: AsyncClient, db: AsyncSession):
    response = await client.post("/api/files/upload", data={"taskId": str(uuid4())})

    assert response.status_code == 400
    assert response.json() == {"success": False, "error": "No file uploaded"}
    assert await _count_attachments(db) == 0


@pytest.mark.asyncio
@pytest.mark.parametrize("mimetype", ["application/x-msdownload", "video/mp4", "text/html"])
async def test_upload_disallowed_type_returns_400(client: AsyncClient, db: AsyncSession, mimetype: str):
    response = await _upload(client, name="payload.bin", content=b"MZ\x90\x00", mimetype=mimetype)

    assert response.status_code == 400
    assert response.json()["error"] == (
        "Invalid file type. Only images, documents, and archives are allowed."
    )
    assert await _count_attachments(db) == 0


@pytest.mark.asyncio
async def test_upload_at_size_cap_is_accepted(client: AsyncClient):
    response = await _upload(client, name="scan.zip", content=b"\0" * MAX_FILE_SIZE, mimetype="application/zip")

    assert response.status_code == 201
    assert response.json()["data"]["size"] == MAX_FILE_SIZE


@pytest.mark.asyncio
async def test_upload_over_size_cap_returns_400(client: AsyncClient, db: AsyncSession):
    response = await _upload(
        client,
        name="scan.zip",
        content=b"\0" * (MAX_FILE_SIZE + 1),
        mimetype="application/zip",
    )

    assert response.status_code == 400
    assert response.json()["error"] == "File too large. Maximum size is 10MB"
    assert await _count_attachments(db) == 0


@pytest.mark.asyncio
async def test_upload_with_malformed_task_id_returns_400(client: AsyncClient, db: AsyncSession):
    response = await _upload(client, taskId="not-an-id")

    assert response.status_code == 400
    assert response.json()["error"] == "Invalid task ID"
    assert await _count_attachments(db) == 0


@pytest.mark.asyncio
async def test_upload_with_invalid_token_returns_401(client: AsyncClient, db: AsyncSession):
    response = await client.post(
        "/api/files/upload",
        files={"file": ("notes.txt", io.BytesIO(b"x"), "text/plain")},
        headers={"Authorization": "Bearer not-a-jwt"},
    )

    assert response.status_code == 401
    assert response.json()["success"] is False
    assert await _count_attachments(db) == 0


@pytest.mark.asyncio
async def test_info_returns_metadata_only(client: AsyncClient):
    uploaded = (await _upload(client)).json()["data"]

    response = await client.get(f"/api/files/{uploaded['id']}/info")

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert set(body["data"]) == METADATA_KEYS
    assert "data" not in body["data"]
    assert body["data"]["id"] == uploaded["id"]


@pytest.mark.asyncio
@pytest.mark.parametrize("path", ["/api/files/{id}", "/api/files/{id}/info"])
async def test_malformed_file_id_returns_400(client: AsyncClient, path: str):
    response = await client.get(path.format(id="12345"))

    assert response.status_code == 400
    assert response.json() == {"success": False, "error": "Invalid file ID"}


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("method", "path"),
    [
        ("GET", "/api/files/not-an-id"),
        ("GET", "/api/files/not-an-id/info"),
        ("DELETE", "/api/files/not-an-id"),
    ],
)
async def test_malformed_file_id_never_reaches_storage(
    client: AsyncClient, monkeypatch, test_admin_user, method: str, path: str
):
    async def untouched(self, attachment_id):
        raise AssertionError("storage should not be queried")

    monkeypatch.setattr(AttachmentStore, "get_by_id", untouched)
    monkeypatch.setattr(AttachmentStore, "get_metadata_by_id", untouched)

    response = await client.request(method, path, headers=auth_headers(test_admin_user))

    assert response.status_code == 400
    assert response.json() == {"success": False, "error": "Invalid file ID"}


@pytest.mark.asyncio
@pytest.mark.parametrize("path", ["/api/files/{id}", "/api/files/{id}/info"])
async def test_unknown_file_id_returns_404(client: AsyncClient, path: str):
    response = await client.get(path.format(id=uuid4()))

    assert response.status_code == 404
    assert response.json() == {"success": False, "error": "File not found"}


@pytest.mark.asyncio
async def test_delete_requires_authentication(client: AsyncClient, db: AsyncSession):
    uploaded = (await _upload(client)).json()["data"]

    response = await client.delete(f"/api/files/{uploaded['id']}")

    assert response.status_code == 401
    assert response.json()["success"] is False
    assert await _count_attachments(db) == 1


@pytest.mark.asyncio
async def test_delete_returns_success_message(client: AsyncClient, test_employee_user):
    uploaded = (await _upload(client)).json()["data"]

    response = await client.delete(
        f"/api/files/{uploaded['id']}",
        headers=auth_headers(test_employee_user),
    )

    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "File deleted successfully"}


@pytest.mark.asyncio
async def test_delete_malformed_and_unknown_ids(client: AsyncClient, test_employee_user):
    headers = auth_headers(test_employee_user)

    malformed = await client.delete("/api/files/abc", headers=headers)
    unknown = await client.delete(f"/api/files/{uuid4()}", headers=headers)

    assert malformed.status_code == 400
    assert malformed.json()["error"] == "Invalid file ID"
    assert unknown.status_code == 404
    assert unknown.json()["error"] == "File not found"


@pytest.mark.asyncio
async def test_list_task_files_returns_only_that_task(client: AsyncClient, test_task: Task):
    task_id = str(test_task.id)
    await _upload(client, name="a.txt", taskId=task_id)
    await _upload(client, name="b.txt", taskId=task_id)
    await _upload(client, name="other.txt", taskId=str(uuid4()))

    response = await client.get(f"/api/files/task/{task_id}")

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert sorted(item["originalName"] for item in body["data"]) == ["a.txt", "b.txt"]
    assert all(set(item) == METADATA_KEYS for item in body["data"])


@pytest.mark.asyncio
async def test_list_task_files_with_malformed_id_returns_400(client: AsyncClient):
    response = await client.get("/api/files/task/nope")

    assert response.status_code == 400
    assert response.json()["error"] == "Invalid task ID"


@pytest.mark.asyncio
async def test_list_issue_and_project_files(client: AsyncClient):
    issue_id = str(uuid4())
    project_id = str(uuid4())
    await _upload(client, name="crack.txt", issueId=issue_id, projectId=project_id)

    by_issue = await client.get(f"/api/files/issue/{issue_id}")
    by_project = await client.get(f"/api/files/project/{project_id}")

    assert [item["originalName"] for item in by_issue.json()["data"]] == ["crack.txt"]
    assert [item["originalName"] for item in by_project.json()["data"]] == ["crack.txt"]


@pytest.mark.asyncio
async def test_upload_multiple_without_files_returns_400(client: AsyncClient):
    response = await client.post("/api/files/upload-multiple", data={"taskId": str(uuid4())})

    assert response.status_code == 400
    assert response.json() == {"success": False, "error": "No files uploaded"}


@pytest.mark.asyncio
async def test_upload_multiple_over_limit_returns_400(client: AsyncClient, db: AsyncSession):
    files = [("files", (f"f{i}.txt", io.BytesIO(b"x"), "text/plain")) for i in range(11)]

    response = await client.post("/api/files/upload-multiple", files=files)

    assert response.status_code == 400
    assert response.json()["error"] == "Too many files. Maximum is 10 per request"
    assert await _count_attachments(db) == 0
