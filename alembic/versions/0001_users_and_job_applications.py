"""Add users and job applications tables

Revision ID: 0001
Revises:
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Create users table
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('lastname', sa.String(length=100), nullable=False, default=''),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('hashed_password', sa.String(length=255), nullable=False),
        sa.Column('is_verified', sa.Boolean(), nullable=False, default=False),
        sa.Column('is_admin', sa.Boolean(), nullable=False, default=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    # Create job_applications table; one row per (applicant, job)
    op.create_table(
        'job_applications',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('applicant_id', sa.String(length=255), nullable=False),
        sa.Column('job_id', sa.String(length=255), nullable=False),
        sa.Column('job_title', sa.String(length=500), nullable=False),
        sa.Column('job_company', sa.String(length=500), nullable=False),
        sa.Column('applicant_name', sa.String(length=255), nullable=False),
        sa.Column('applicant_email', sa.String(length=255), nullable=False),
        sa.Column('cover_letter', sa.Text(), nullable=False, default=''),
        sa.Column('resume_locator', sa.String(length=1024), nullable=False),
        sa.Column('resume_file_name', sa.String(length=255), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False, default='pending'),
        sa.Column('rejection_reason', sa.Text(), nullable=False, default=''),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('applicant_id', 'job_id', name='uq_job_application_applicant_job')
    )
    op.create_index('ix_job_applications_applicant_id', 'job_applications', ['applicant_id'], unique=False)
    op.create_index('ix_job_applications_job_id', 'job_applications', ['job_id'], unique=False)
    op.create_index('ix_job_applications_status', 'job_applications', ['status'], unique=False)
    op.create_index('ix_job_applications_created_at', 'job_applications', ['created_at'], unique=False)


def downgrade() -> None:
    op.drop_index('ix_job_applications_created_at', table_name='job_applications')
    op.drop_index('ix_job_applications_status', table_name='job_applications')
    op.drop_index('ix_job_applications_job_id', table_name='job_applications')
    op.drop_index('ix_job_applications_applicant_id', table_name='job_applications')
    op.drop_table('job_applications')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')
