"""Integration tests for linking uploads into owner attachment lists."""

import io
from uuid import UUID, uuid4

import pytest
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.models.attachment_link import AttendanceAttachment, IssueAttachment, TaskAttachment
from src.models.audit_event import AuditEvent
from src.models.enums import AuditAction
from src.models.file_attachment import FileAttachment
from tests.conftest import auth_headers


async def _task_links(db: AsyncSession, task_id) -> list[UUID]:
    result = await db.execute(
        select(TaskAttachment.attachment_id)
        .where(TaskAttachment.task_id == task_id)
        .order_by(TaskAttachment.id)
    )
    return list(result.scalars().all())


async def _upload(client: AsyncClient, name: str = "photo.jpg", headers=None, **data):
    return await client.post(
        "/api/files/upload",
        files={"file": (name, io.BytesIO(b"\xff\xd8\xff\xe0jpeg"), "image/jpeg")},
        data=data,
        headers=headers or {},
    )


@pytest.mark.asyncio
async def test_upload_links_into_task_in_order(client: AsyncClient, db: AsyncSession, test_task):
    task_id = test_task.id

    first = await _upload(client, name="before.jpg", taskId=str(task_id))
    second = await _upload(client, name="after.jpg", taskId=str(task_id))

    assert first.status_code == 201
    assert second.status_code == 201
    expected = [
        UUID(first.json()["data"]["id"]),
        UUID(second.json()["data"]["id"]),
    ]
    assert await _task_links(db, task_id) == expected
    assert test_task.attachment_ids == expected


@pytest.mark.asyncio
async def test_upload_links_task_and_issue_together(
    client: AsyncClient, db: AsyncSession, test_task, test_issue
):
    task_id, issue_id = test_task.id, test_issue.id

    response = await _upload(client, taskId=str(task_id), issueId=str(issue_id))
    attachment_id = UUID(response.json()["data"]["id"])

    issue_links = await db.execute(
        select(IssueAttachment.attachment_id).where(IssueAttachment.issue_id == issue_id)
    )
    assert await _task_links(db, task_id) == [attachment_id]
    assert list(issue_links.scalars().all()) == [attachment_id]
    assert test_issue.attachment_ids == [attachment_id]


@pytest.mark.asyncio
async def test_upload_links_into_attendance(client: AsyncClient, db: AsyncSession, test_attendance):
    attendance_id = test_attendance.id

    response = await _upload(client, name="attendance_1.jpg", attendanceId=str(attendance_id))

    links = await db.execute(
        select(AttendanceAttachment.attachment_id).where(
            AttendanceAttachment.attendance_id == attendance_id
        )
    )
    assert list(links.scalars().all()) == [UUID(response.json()["data"]["id"])]
    assert test_attendance.attachment_ids == [UUID(response.json()["data"]["id"])]


@pytest.mark.asyncio
async def test_upload_for_missing_task_still_succeeds(client: AsyncClient, db: AsyncSession, test_task):
    """An unknown taskId leaves an orphaned attachment and no link."""
    task_id = test_task.id
    missing_task_id = uuid4()

    response = await _upload(client, taskId=str(missing_task_id))

    assert response.status_code == 201
    stored = await db.get(FileAttachment, UUID(response.json()["data"]["id"]))
    assert stored is not None
    assert stored.task_id == missing_task_id
    assert await _task_links(db, task_id) == []
    assert await _task_links(db, missing_task_id) == []


@pytest.mark.asyncio
async def test_anonymous_upload_gets_fresh_synthetic_uploader(client: AsyncClient, db: AsyncSession):
    first = await _upload(client, name="one.jpg")
    second = await _upload(client, name="two.jpg")

    records = [
        await db.get(FileAttachment, UUID(r.json()["data"]["id"])) for r in (first, second)
    ]
    assert all(record.uploaded_anonymously for record in records)
    assert records[0].uploaded_by != records[1].uploaded_by


@pytest.mark.asyncio
async def test_authenticated_upload_records_user(
    client: AsyncClient, db: AsyncSession, test_employee_user
):
    user_id = test_employee_user.id

    response = await _upload(client, headers=auth_headers(test_employee_user))

    record = await db.get(FileAttachment, UUID(response.json()["data"]["id"]))
    assert record.uploaded_by == user_id
    assert record.uploaded_anonymously is False

    events = await db.execute(
        select(AuditEvent).where(AuditEvent.entity_id == record.id)
    )
    event = events.scalar_one()
    assert event.action == AuditAction.ATTACHMENT_UPLOAD
    assert event.actor_id == user_id
    assert event.detail_json["original_name"] == "photo.jpg"
