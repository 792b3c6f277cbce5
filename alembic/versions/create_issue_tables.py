"""create users issues issue_attachments

Creates the users, issues and issue_attachments tables used by issue reporting
and attachment uploads.

Revision ID: create_issue_tables
Revises:
Create Date: 2025-09-05 19:05:17.000000

"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'create_issue_tables'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

user_role = sa.Enum('admin', 'staff', 'citizen', name='userrole')
issue_status = sa.Enum('new', 'in_progress', 'resolved', 'closed', name='issuestatus')


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('hashed_password', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('is_active', sa.Boolean(), server_default='true', nullable=False),
        sa.Column('role', user_role, nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('last_login', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_name', 'users', ['name'])

    op.create_table(
        'issues',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('reporter_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('address', sa.String(length=200), nullable=False),
        sa.Column('lat', sa.Float(), nullable=True),
        sa.Column('lng', sa.Float(), nullable=True),
        sa.Column('category_id', sa.Integer(), nullable=False),
        sa.Column('description', sa.String(length=2000), nullable=False),
        sa.Column('status', issue_status, nullable=False),
        sa.Column('priority', sa.Integer(), server_default='3', nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_issues_reporter_id', 'issues', ['reporter_id'])
    op.create_index('ix_issues_category_id', 'issues', ['category_id'])
    op.create_index('ix_issues_status', 'issues', ['status'])
    op.create_index('ix_issues_created_at', 'issues', ['created_at'])
    op.create_index('ix_issues_lat_lng', 'issues', ['lat', 'lng'])

    op.create_table(
        'issue_attachments',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('issue_id', sa.Integer(), sa.ForeignKey('issues.id', ondelete='CASCADE'), nullable=False),
        sa.Column('file_name', sa.String(length=255), nullable=False),
        sa.Column('file_path', sa.String(length=500), nullable=False),
        sa.Column('content_type', sa.String(length=100), nullable=True),
        sa.Column('size', sa.BigInteger(), nullable=False),
        sa.Column('uploaded_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_issue_attachments_issue_id', 'issue_attachments', ['issue_id'])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index('ix_issue_attachments_issue_id', table_name='issue_attachments')
    op.drop_table('issue_attachments')
    for name in ('ix_issues_lat_lng', 'ix_issues_created_at', 'ix_issues_status',
                 'ix_issues_category_id', 'ix_issues_reporter_id'):
        op.drop_index(name, table_name='issues')
    op.drop_table('issues')
    op.drop_index('ix_users_name', table_name='users')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')
    issue_status.drop(op.get_bind(), checkfirst=True)
    user_role.drop(op.get_bind(), checkfirst=True)
