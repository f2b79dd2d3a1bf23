"""initial report schema

Revision ID: 3a9c1e7d5b20
Revises:
Create Date: 2026-10-19 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import mysql


# revision identifiers, used by Alembic.
revision: str = '3a9c1e7d5b20'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


_USER_ROLES = ('citizen', 'entity', 'admin')
_REPORT_STATUSES = ('received', 'in_review', 'in_progress', 'requires_info', 'resolved', 'rejected', 'closed')
_URGENCY_LEVELS = ('low', 'medium', 'high', 'critical')
_CONTACT_PREFERENCES = ('email', 'phone')
_ENTITY_STATUSES = ('pending', 'approved', 'rejected')
_HISTORY_ACTIONS = ('created', 'status_change', 'assignment', 'comment', 'attachment')
_FILE_TYPES = ('image', 'video', 'document')
_ATTACHMENT_TYPES = ('progress', 'resolution')
_NOTIFICATION_TYPES = ('info', 'success', 'warning', 'error')


def _ts() -> sa.types.TypeEngine:
    return sa.DateTime(timezone=True).with_variant(mysql.DATETIME(fsp=6), 'mysql')


def _id() -> sa.Column:
    return sa.Column('id', sa.String(length=36), primary_key=True)


def _created_at() -> sa.Column:
    return sa.Column('created_at', _ts(), nullable=False)


def _updated_at() -> sa.Column:
    return sa.Column('updated_at', _ts(), nullable=False)


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'users',
        _id(),
        _created_at(),
        _updated_at(),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('hashed_password', sa.String(length=255), nullable=False),
        sa.Column('full_name', sa.String(length=255), nullable=False),
        sa.Column('phone', sa.String(length=64), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('role', sa.Enum(*_USER_ROLES, name='user_role'), nullable=False),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'refresh_tokens',
        _id(),
        _created_at(),
        sa.Column('token', sa.String(length=512), nullable=False),
        sa.Column('user_id', sa.String(length=36), nullable=False),
        sa.Column('expires_at', _ts(), nullable=False),
    )
    op.create_index('ix_refresh_tokens_token', 'refresh_tokens', ['token'], unique=True)
    op.create_index('ix_refresh_tokens_user_id', 'refresh_tokens', ['user_id'])

    op.create_table(
        'categories',
        _id(),
        _created_at(),
        _updated_at(),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('icon', sa.String(length=64), nullable=True),
        sa.Column('color', sa.String(length=32), nullable=True),
        sa.Column('responsible_entity', sa.String(length=255), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
    )
    op.create_index('ix_categories_name', 'categories', ['name'], unique=True)

    op.create_table(
        'entities',
        _id(),
        _created_at(),
        _updated_at(),
        sa.Column('user_id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('phone', sa.String(length=64), nullable=True),
        sa.Column('nit', sa.String(length=64), nullable=True),
        sa.Column('status', sa.Enum(*_ENTITY_STATUSES, name='entity_status'), nullable=False),
        sa.Column('rejection_reason', sa.Text(), nullable=True),
        sa.Column('rut_path', sa.String(length=512), nullable=True),
        sa.Column('chamber_path', sa.String(length=512), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
    )
    op.create_index('ix_entities_user_id', 'entities', ['user_id'], unique=True)
    op.create_index('ix_entities_email', 'entities', ['email'])

    op.create_table(
        'entity_categories',
        _id(),
        _created_at(),
        sa.Column('entity_id', sa.String(length=36), nullable=False),
        sa.Column('category_id', sa.String(length=36), nullable=False),
        sa.UniqueConstraint('entity_id', 'category_id', name='uq_entity_category'),
    )
    op.create_index('ix_entity_categories_entity_id', 'entity_categories', ['entity_id'])
    op.create_index('ix_entity_categories_category_id', 'entity_categories', ['category_id'])

    op.create_table(
        'entity_audit_logs',
        _id(),
        _created_at(),
        sa.Column('entity_id', sa.String(length=36), nullable=False),
        sa.Column('admin_id', sa.String(length=36), nullable=False),
        sa.Column('action', sa.Enum(*_ENTITY_STATUSES, name='entity_audit_action'), nullable=False),
        sa.Column('reason', sa.Text(), nullable=True),
    )
    op.create_index('ix_entity_audit_logs_entity_id', 'entity_audit_logs', ['entity_id'])
    op.create_index('ix_entity_audit_logs_admin_id', 'entity_audit_logs', ['admin_id'])

    op.create_table(
        'reports',
        _id(),
        _created_at(),
        _updated_at(),
        sa.Column('tracking_code', sa.String(length=32), nullable=False),
        sa.Column('category_id', sa.String(length=36), nullable=False),
        sa.Column('urgency_level', sa.Enum(*_URGENCY_LEVELS, name='report_urgency'), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('location_address', sa.String(length=512), nullable=False),
        sa.Column('lat', sa.Float(), nullable=True),
        sa.Column('lon', sa.Float(), nullable=True),
        sa.Column('user_id', sa.String(length=36), nullable=True),
        sa.Column('citizen_name', sa.String(length=255), nullable=False),
        sa.Column('citizen_email', sa.String(length=255), nullable=False),
        sa.Column('citizen_phone', sa.String(length=64), nullable=True),
        sa.Column('prefer_contact', sa.Enum(*_CONTACT_PREFERENCES, name='report_contact'), nullable=False),
        sa.Column('status', sa.Enum(*_REPORT_STATUSES, name='report_status'), nullable=False),
        sa.Column('assigned_user_id', sa.String(length=36), nullable=True),
        sa.Column('admin_notes', sa.Text(), nullable=True),
        sa.Column('resolution_notes', sa.Text(), nullable=True),
        sa.Column('rejection_reason', sa.Text(), nullable=True),
        sa.Column('version', sa.Integer(), nullable=False),
        sa.Column('reviewed_at', _ts(), nullable=True),
        sa.Column('started_at', _ts(), nullable=True),
        sa.Column('resolved_at', _ts(), nullable=True),
        sa.Column('closed_at', _ts(), nullable=True),
        sa.Column('citizen_rating', sa.Integer(), nullable=True),
        sa.Column('citizen_comment', sa.Text(), nullable=True),
        sa.Column('rated_at', _ts(), nullable=True),
    )
    op.create_index('ix_reports_tracking_code', 'reports', ['tracking_code'], unique=True)
    op.create_index('ix_reports_category_id', 'reports', ['category_id'])
    op.create_index('ix_reports_user_id', 'reports', ['user_id'])
    op.create_index('ix_reports_assigned_user_id', 'reports', ['assigned_user_id'])

    op.create_table(
        'report_history',
        _id(),
        _created_at(),
        sa.Column('report_id', sa.String(length=36), nullable=False),
        sa.Column('changed_by', sa.String(length=36), nullable=True),
        sa.Column('changed_by_name', sa.String(length=255), nullable=True),
        sa.Column('action', sa.Enum(*_HISTORY_ACTIONS, name='history_action'), nullable=False),
        sa.Column('old_value', sa.String(length=64), nullable=True),
        sa.Column('new_value', sa.String(length=64), nullable=True),
        sa.Column('comment', sa.Text(), nullable=True),
    )
    op.create_index('ix_report_history_report_id', 'report_history', ['report_id'])

    op.create_table(
        'report_comments',
        _id(),
        _created_at(),
        sa.Column('report_id', sa.String(length=36), nullable=False),
        sa.Column('user_id', sa.String(length=36), nullable=False),
        sa.Column('user_name', sa.String(length=255), nullable=False),
        sa.Column('comment', sa.Text(), nullable=False),
        sa.Column('is_public', sa.Boolean(), nullable=False),
        sa.Column('is_internal', sa.Boolean(), nullable=False),
    )
    op.create_index('ix_report_comments_report_id', 'report_comments', ['report_id'])
    op.create_index('ix_report_comments_user_id', 'report_comments', ['user_id'])

    op.create_table(
        'report_attachments',
        _id(),
        _created_at(),
        sa.Column('report_id', sa.String(length=36), nullable=False),
        sa.Column('file_url', sa.String(length=1024), nullable=False),
        sa.Column('file_name', sa.String(length=255), nullable=False),
        sa.Column('file_type', sa.Enum(*_FILE_TYPES, name='attachment_file_type'), nullable=False),
        sa.Column('file_size', sa.Integer(), nullable=False),
        sa.Column('attachment_type', sa.Enum(*_ATTACHMENT_TYPES, name='attachment_type'), nullable=False),
        sa.Column('uploaded_by', sa.String(length=36), nullable=False),
    )
    op.create_index('ix_report_attachments_report_id', 'report_attachments', ['report_id'])
    op.create_index('ix_report_attachments_uploaded_by', 'report_attachments', ['uploaded_by'])

    op.create_table(
        'report_files',
        _id(),
        _created_at(),
        sa.Column('report_id', sa.String(length=36), nullable=False),
        sa.Column('file_path', sa.String(length=512), nullable=False),
        sa.Column('file_url', sa.String(length=1024), nullable=False),
    )
    op.create_index('ix_report_files_report_id', 'report_files', ['report_id'])

    op.create_table(
        'notifications',
        _id(),
        _created_at(),
        sa.Column('user_id', sa.String(length=36), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('type', sa.Enum(*_NOTIFICATION_TYPES, name='notification_type'), nullable=False),
        sa.Column('is_read', sa.Boolean(), nullable=False),
        sa.Column('payload', sa.JSON(), nullable=True),
    )
    op.create_index('ix_notifications_user_id', 'notifications', ['user_id'])


def downgrade() -> None:
    """Downgrade schema."""
    for table in (
        'notifications',
        'report_files',
        'report_attachments',
        'report_comments',
        'report_history',
        'reports',
        'entity_audit_logs',
        'entity_categories',
        'entities',
        'categories',
        'refresh_tokens',
        'users',
    ):
        op.drop_table(table)
