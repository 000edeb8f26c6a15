"""Seed script for development data.

Creates:
- Admin user "admin@siteops.local"
- Project "SiteOps Demo" with one task, one issue and one attendance mark

Prints the ids to use as taskId/issueId/attendanceId in uploads and an
access token for the admin user (needed for DELETE /api/files/{id}).

Can be run multiple times safely (skips if exists).
"""
import asyncio
import os
from datetime import date

from sqlalchemy import select

from src.core.database import get_db
from src.core.security import create_access_token
from src.models.attendance import Attendance
from src.models.enums import UserRole
from src.models.issue import Issue
from src.models.project import Project
from src.models.task import Task
from src.models.user import User


async def seed_data():
    """Seed development data."""
    print("Starting database seeding...")

    project_name = os.environ.get("SEED_PROJECT_NAME", "SiteOps Demo")
    admin_email = os.environ.get("SEED_ADMIN_EMAIL", "admin@siteops.local")

    async for db in get_db():
        result = await db.execute(select(User).where(User.email == admin_email))
        admin = result.scalar_one_or_none()
        if admin:
            print(f"✓ Admin user '{admin_email}' already exists (ID: {admin.id})")
        else:
            admin = User(name="Site Admin", email=admin_email, role=UserRole.ADMIN, is_active=True)
            db.add(admin)
            await db.flush()
            print(f"✓ Created admin user '{admin_email}' (ID: {admin.id})")

        result = await db.execute(select(Project).where(Project.name == project_name))
        project = result.scalar_one_or_none()
        if project:
            print(f"✓ Project '{project_name}' already exists (ID: {project.id})")
            tasks = await db.execute(select(Task).where(Task.project_id == project.id))
            issues = await db.execute(select(Issue).where(Issue.project_id == project.id))
            marks = await db.execute(select(Attendance).where(Attendance.project_id == project.id))
            task = tasks.scalars().first()
            issue = issues.scalars().first()
            attendance = marks.scalars().first()
        else:
            project = Project(name=project_name, location="Demo site")
            db.add(project)
            await db.flush()
            task = Task(project_id=project.id, title="Inspect formwork", description="Level 2 slab")
            issue = Issue(project_id=project.id, title="Water ingress at stairwell")
            attendance = Attendance(project_id=project.id, employee_name="Demo Worker", date=date.today())
            db.add_all([task, issue, attendance])
            await db.flush()
            print(f"✓ Created project '{project_name}' (ID: {project.id})")

        print("\nSeed complete:")
        print(f"  projectId:    {project.id}")
        print(f"  taskId:       {task.id if task else '-'}")
        print(f"  issueId:      {issue.id if issue else '-'}")
        print(f"  attendanceId: {attendance.id if attendance else '-'}")
        print(f"  admin token:  {create_access_token({'sub': str(admin.id)})}")


if __name__ == "__main__":
    asyncio.run(seed_data())
