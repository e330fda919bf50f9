"""Create hiring workflow tables

Revision ID: 001_hiring_workflow
Revises: 
Create Date: 2026-10-18 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '001_hiring_workflow'
down_revision = None
branch_labels = None
depends_on = None


def _id() -> sa.Column:
    return sa.Column('id', sa.BigInteger(), nullable=False, autoincrement=True)


def _created_at() -> sa.Column:
    return sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now())


def _updated_at() -> sa.Column:
    return sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now())


def _request_fk() -> sa.Column:
    return sa.Column('request_id', sa.BigInteger(), sa.ForeignKey('requests.id', ondelete='CASCADE'), nullable=False)


def _user_fk(name: str, nullable: bool = False) -> sa.Column:
    return sa.Column(name, sa.BigInteger(), sa.ForeignKey('users.id'), nullable=nullable)


def upgrade() -> None:
    """Create users, requests and the hiring workflow child tables."""
    op.create_table(
        'users',
        _id(),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('first_name', sa.String(length=100), nullable=False),
        sa.Column('last_name', sa.String(length=100), nullable=False),
        sa.Column('department', sa.String(length=255), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        _created_at(),
        _updated_at(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'user_roles',
        _id(),
        sa.Column('user_id', sa.BigInteger(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('role', sa.String(length=50), nullable=False),
        _created_at(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'role', name='uq_user_role'),
    )
    op.create_index('ix_user_roles_user_id', 'user_roles', ['user_id'])

    op.create_table(
        'requests',
        _id(),
        sa.Column('request_number', sa.String(length=50), nullable=False),
        sa.Column('title', sa.String(length=500), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('status', sa.String(length=50), nullable=False),
        _user_fk('requester_id'),
        _user_fk('assigned_to_id', nullable=True),
        sa.Column('custom_fields', sa.JSON(), nullable=True),
        sa.Column('resolved_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
        _created_at(),
        _updated_at(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_requests_request_number', 'requests', ['request_number'], unique=True)
    op.create_index('ix_requests_status', 'requests', ['status'])
    op.create_index('ix_requests_requester_id', 'requests', ['requester_id'])
    op.create_index('ix_requests_assigned_to_id', 'requests', ['assigned_to_id'])
    op.create_index('idx_request_requester_status', 'requests', ['requester_id', 'status'])

    op.create_table(
        'request_approvals',
        _id(),
        _request_fk(),
        sa.Column('approver_type', sa.String(length=50), nullable=False),
        _user_fk('approver_id', nullable=True),
        sa.Column('status', sa.String(length=50), nullable=False),
        sa.Column('comments', sa.Text(), nullable=True),
        sa.Column('requested_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('responded_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_request_approvals_request_id', 'request_approvals', ['request_id'])
    op.create_index(
        'uq_request_approval_pending',
        'request_approvals',
        ['request_id', 'approver_type'],
        unique=True,
        postgresql_where=sa.text("status = 'PENDING'"),
    )

    op.create_table(
        'request_activities',
        _id(),
        _request_fk(),
        _user_fk('author_id', nullable=True),
        sa.Column('author_name', sa.String(length=255), nullable=False),
        sa.Column('author_role', sa.String(length=100), nullable=True),
        sa.Column('activity_type', sa.String(length=50), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('is_system_generated', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('is_internal', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('metadata', sa.JSON(), nullable=True),
        _created_at(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_request_activities_request_id', 'request_activities', ['request_id'])
    op.create_index('idx_request_activity_request_created', 'request_activities', ['request_id', 'created_at'])

    op.create_table(
        'candidate_resumes',
        _id(),
        _request_fk(),
        _user_fk('uploaded_by_id'),
        sa.Column('file_name', sa.String(length=500), nullable=False),
        sa.Column('file_url', sa.String(length=1000), nullable=False),
        sa.Column('file_size', sa.BigInteger(), nullable=False),
        sa.Column('mime_type', sa.String(length=255), nullable=False),
        sa.Column('candidate_name', sa.String(length=255), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        _created_at(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_candidate_resumes_request_id', 'candidate_resumes', ['request_id'])
    op.create_index('idx_candidate_resume_request_created', 'candidate_resumes', ['request_id', 'created_at'])

    op.create_table(
        'interview_schedules',
        _id(),
        _request_fk(),
        sa.Column('candidate_resume_id', sa.BigInteger(), sa.ForeignKey('candidate_resumes.id'), nullable=False),
        sa.Column('candidate_name', sa.String(length=255), nullable=True),
        sa.Column('interview_date', sa.Date(), nullable=False),
        sa.Column('interview_time', sa.String(length=20), nullable=False),
        sa.Column('location', sa.String(length=500), nullable=True),
        sa.Column('meeting_link', sa.String(length=1000), nullable=True),
        sa.Column('interviewers', sa.JSON(), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        _user_fk('scheduled_by_id'),
        _created_at(),
        _updated_at(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('request_id'),
    )

    op.create_table(
        'interview_feedback',
        _id(),
        _request_fk(),
        sa.Column('decision', sa.String(length=50), nullable=False),
        sa.Column('overall_rating', sa.Integer(), nullable=True),
        sa.Column('technical_skills', sa.Integer(), nullable=True),
        sa.Column('cultural_fit', sa.Integer(), nullable=True),
        sa.Column('communication', sa.Integer(), nullable=True),
        sa.Column('feedback', sa.Text(), nullable=False),
        sa.Column('concerns', sa.Text(), nullable=True),
        _user_fk('submitted_by_id'),
        _created_at(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('request_id'),
    )

    op.create_table(
        'hr_screenings',
        _id(),
        _request_fk(),
        sa.Column('background_check_status', sa.String(length=50), nullable=False),
        sa.Column('background_check_notes', sa.Text(), nullable=True),
        sa.Column('references_check_status', sa.String(length=50), nullable=False),
        sa.Column('references_check_notes', sa.Text(), nullable=True),
        sa.Column('references_contacted', sa.JSON(), nullable=False),
        sa.Column('overall_status', sa.String(length=50), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        _user_fk('completed_by_id', nullable=True),
        _created_at(),
        _updated_at(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('request_id'),
    )

    op.create_table(
        'letters_of_acceptance',
        _id(),
        _request_fk(),
        sa.Column('loa_file_url', sa.String(length=1000), nullable=False),
        sa.Column('loa_file_name', sa.String(length=500), nullable=False),
        sa.Column('loa_file_size', sa.BigInteger(), nullable=False),
        _user_fk('uploaded_by_id'),
        _user_fk('approved_by_id', nullable=True),
        sa.Column('approval_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('approval_comments', sa.Text(), nullable=True),
        sa.Column('issued_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('signed_loa_file_url', sa.String(length=1000), nullable=True),
        sa.Column('signed_loa_file_name', sa.String(length=500), nullable=True),
        sa.Column('signed_loa_file_size', sa.BigInteger(), nullable=True),
        _user_fk('signed_uploaded_by_id', nullable=True),
        sa.Column('accepted_date', sa.DateTime(timezone=True), nullable=True),
        _created_at(),
        _updated_at(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('request_id'),
    )


def downgrade() -> None:
    """Drop the hiring workflow tables."""
    op.drop_table('letters_of_acceptance')
    op.drop_table('hr_screenings')
    op.drop_table('interview_feedback')
    op.drop_table('interview_schedules')
    op.drop_index('idx_candidate_resume_request_created', table_name='candidate_resumes')
    op.drop_index('ix_candidate_resumes_request_id', table_name='candidate_resumes')
    op.drop_table('candidate_resumes')
    op.drop_index('idx_request_activity_request_created', table_name='request_activities')
    op.drop_index('ix_request_activities_request_id', table_name='request_activities')
    op.drop_table('request_activities')
    op.drop_index('uq_request_approval_pending', table_name='request_approvals')
    op.drop_index('ix_request_approvals_request_id', table_name='request_approvals')
    op.drop_table('request_approvals')
    op.drop_index('idx_request_requester_status', table_name='requests')
    op.drop_index('ix_requests_assigned_to_id', table_name='requests')
    op.drop_index('ix_requests_requester_id', table_name='requests')
    op.drop_index('ix_requests_status', table_name='requests')
    op.drop_index('ix_requests_request_number', table_name='requests')
    op.drop_table('requests')
    op.drop_index('ix_user_roles_user_id', table_name='user_roles')
    op.drop_table('user_roles')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')
