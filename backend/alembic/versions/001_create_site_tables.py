"""Create site and file attachment tables

Revision ID: 001
Revises:
Create Date: 2026-10-19

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps(updated: bool = True) -> list[sa.Column]:
    columns = [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
    ]
    if updated:
        columns.append(
            sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False)
        )
    return columns


def _project_fk() -> sa.Column:
    return sa.Column('project_id', sa.Uuid(), sa.ForeignKey('projects.id', ondelete='CASCADE'), nullable=False)


def upgrade() -> None:
    """Create site entities, file attachments, link tables and audit trail."""
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('email', sa.String(255), nullable=False, unique=True),
        sa.Column('role', sa.String(32), nullable=False, server_default='employee'),
        sa.Column('is_active', sa.Boolean, nullable=False, server_default=sa.true()),
        *_timestamps(),
    )

    op.create_table(
        'projects',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('description', sa.Text, nullable=True),
        sa.Column('location', sa.String(255), nullable=True),
        sa.Column('status', sa.String(32), nullable=False, server_default='planning'),
        *_timestamps(),
    )

    op.create_table(
        'tasks',
        sa.Column('id', sa.Uuid(), primary_key=True),
        _project_fk(),
        sa.Column('title', sa.String(200), nullable=False),
        sa.Column('description', sa.Text, nullable=False, server_default=''),
        sa.Column('assigned_to_name', sa.String(100), nullable=True),
        sa.Column('priority', sa.String(32), nullable=False, server_default='medium'),
        sa.Column('status', sa.String(32), nullable=False, server_default='todo'),
        sa.Column('due_date', sa.Date, nullable=True),
        sa.Column('estimated_hours', sa.Float, nullable=False, server_default='0'),
        *_timestamps(),
    )
    op.create_index('ix_tasks_project_id', 'tasks', ['project_id'])

    op.create_table(
        'issues',
        sa.Column('id', sa.Uuid(), primary_key=True),
        _project_fk(),
        sa.Column('title', sa.String(200), nullable=False),
        sa.Column('description', sa.Text, nullable=False, server_default=''),
        sa.Column('reported_by_name', sa.String(100), nullable=True),
        sa.Column('location', sa.String(255), nullable=True),
        sa.Column('priority', sa.String(32), nullable=False, server_default='medium'),
        sa.Column('status', sa.String(32), nullable=False, server_default='open'),
        sa.Column('category', sa.String(32), nullable=False, server_default='other'),
        sa.Column('resolved_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_issues_project_id', 'issues', ['project_id'])

    op.create_table(
        'attendance',
        sa.Column('id', sa.Uuid(), primary_key=True),
        _project_fk(),
        sa.Column('employee_name', sa.String(100), nullable=False),
        sa.Column('labour_type', sa.String(50), nullable=True),
        sa.Column('date', sa.Date, nullable=False),
        sa.Column('time_in', sa.String(5), nullable=True),
        sa.Column('time_out', sa.String(5), nullable=True),
        sa.Column('status', sa.String(32), nullable=False, server_default='present'),
        sa.Column('hours', sa.Float, nullable=True),
        sa.Column('notes', sa.Text, nullable=True),
        sa.Column('is_approved', sa.Boolean, nullable=False, server_default=sa.false()),
        *_timestamps(),
    )
    op.create_index('ix_attendance_project_id', 'attendance', ['project_id'])

    # Owner ids are hints only, so no foreign keys here
    op.create_table(
        'file_attachments',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('filename', sa.String(512), nullable=False, unique=True),
        sa.Column('original_name', sa.String(255), nullable=False),
        sa.Column('mimetype', sa.String(100), nullable=False),
        sa.Column('size', sa.Integer, nullable=False),
        sa.Column('checksum_sha256', sa.String(64), nullable=False),
        sa.Column('data', sa.LargeBinary, nullable=False),
        sa.Column('task_id', sa.Uuid(), nullable=True),
        sa.Column('project_id', sa.Uuid(), nullable=True),
        sa.Column('issue_id', sa.Uuid(), nullable=True),
        sa.Column('uploaded_by', sa.Uuid(), nullable=False),
        sa.Column('uploaded_anonymously', sa.Boolean, nullable=False, server_default=sa.false()),
        *_timestamps(updated=False),
        sa.CheckConstraint('size >= 0', name='file_attachment_size_non_negative'),
    )
    op.create_index('ix_file_attachments_task_id', 'file_attachments', ['task_id'])
    op.create_index('ix_file_attachments_project_id', 'file_attachments', ['project_id'])
    op.create_index('ix_file_attachments_issue_id', 'file_attachments', ['issue_id'])
    op.create_index('ix_file_attachments_uploaded_by', 'file_attachments', ['uploaded_by'])
    op.create_index('idx_file_attachments_created_at', 'file_attachments', ['created_at'])

    # One row per entry of an owner's attachments list
    for table, owner_column, owner_table in (
        ('task_attachments', 'task_id', 'tasks'),
        ('issue_attachments', 'issue_id', 'issues'),
        ('attendance_attachments', 'attendance_id', 'attendance'),
    ):
        op.create_table(
            table,
            sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
            sa.Column(owner_column, sa.Uuid(), sa.ForeignKey(f'{owner_table}.id', ondelete='CASCADE'), nullable=False),
            sa.Column('attachment_id', sa.Uuid(), nullable=False),
            *_timestamps(updated=False),
        )
        op.create_index(f'ix_{table}_{owner_column}', table, [owner_column])
        op.create_index(f'ix_{table}_attachment_id', table, ['attachment_id'])

    op.create_table(
        'audit_events',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('actor_id', sa.Uuid(), nullable=False),
        sa.Column('actor_anonymous', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('action', sa.String(32), nullable=False),
        sa.Column('entity_type', sa.String(50), nullable=False),
        sa.Column('entity_id', sa.Uuid(), nullable=False),
        sa.Column('detail_json', sa.JSON, nullable=True),
        sa.Column('ip_address', sa.String(45), nullable=True),
        *_timestamps(updated=False),
    )
    op.create_index('ix_audit_events_actor_id', 'audit_events', ['actor_id'])
    op.create_index('ix_audit_events_entity_id', 'audit_events', ['entity_id'])


def downgrade() -> None:
    """Drop all tables in reverse dependency order."""
    op.drop_table('audit_events')
    op.drop_table('attendance_attachments')
    op.drop_table('issue_attachments')
    op.drop_table('task_attachments')
    op.drop_table('file_attachments')
    op.drop_table('attendance')
    op.drop_table('issues')
    op.drop_table('tasks')
    op.drop_table('projects')
    op.drop_table('users')
