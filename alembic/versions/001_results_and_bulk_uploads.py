"""Create users, bulk_uploads, constituency_results and center_results tables.

Revision ID: 001
Revises:
Create Date: 2026-10-18
"""

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]


def upgrade() -> None:
    """Create the results and bulk upload tables."""
    op.create_table(
        "users",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("username", sa.String(100), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("role", sa.String(20), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default="true"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email"),
    )
    op.create_index("ix_users_username", "users", ["username"], unique=True)

    op.create_table(
        "bulk_uploads",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("upload_id", sa.String(64), nullable=False),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("record_type", sa.String(20), nullable=False),
        sa.Column("election_year", sa.Integer(), nullable=False),
        sa.Column("file_name", sa.String(255), nullable=False),
        sa.Column("file_size", sa.Integer(), nullable=False),
        sa.Column("total_rows", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("status", sa.String(20), nullable=False, server_default="uploaded"),
        sa.Column("processed", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("successful", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("updated", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("duplicates", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("failed", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("overwrite_existing", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column("validate_only", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column("validation_errors", postgresql.JSONB(), nullable=False, server_default="[]"),
        sa.Column("processing_time", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("upload_id"),
    )
    op.create_index("ix_bulk_uploads_user_id", "bulk_uploads", ["user_id"])
    op.create_index("ix_bulk_uploads_status", "bulk_uploads", ["status"])

    op.create_table(
        "constituency_results",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("election", sa.Integer(), nullable=False),
        sa.Column("election_year", sa.Integer(), nullable=False),
        sa.Column("constituency_number", sa.Integer(), nullable=False),
        sa.Column("constituency_name", sa.String(200), nullable=False),
        sa.Column("total_voters", sa.Integer(), nullable=False),
        sa.Column("total_centers", sa.Integer(), nullable=False),
        sa.Column("reported_centers", sa.Integer(), nullable=True),
        sa.Column("suspended_centers", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_valid_votes", sa.Integer(), nullable=False),
        sa.Column("cancelled_votes", sa.Integer(), nullable=False),
        sa.Column("total_turnout", sa.Integer(), nullable=False),
        sa.Column("percent_turnout", sa.Float(), nullable=False),
        sa.Column("participant_details", postgresql.JSONB(), nullable=False, server_default="[]"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("election_year", "constituency_number", name="uq_constituency_results_year_number"),
    )
    op.create_index("ix_constituency_results_election_year", "constituency_results", ["election_year"])

    op.create_table(
        "center_results",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("election", sa.Integer(), nullable=False),
        sa.Column("election_year", sa.Integer(), nullable=False),
        sa.Column("constituency_id", sa.Integer(), nullable=False),
        sa.Column("constituency_name", sa.String(200), nullable=False),
        sa.Column("center_no", sa.Integer(), nullable=False),
        sa.Column("center", sa.String(300), nullable=False),
        sa.Column("gender", sa.String(10), nullable=False),
        sa.Column("lat", sa.Float(), nullable=True),
        sa.Column("lon", sa.Float(), nullable=True),
        sa.Column("map_link", sa.String(500), nullable=True),
        sa.Column("total_voters", sa.Integer(), nullable=False),
        sa.Column("total_valid_votes", sa.Integer(), nullable=False),
        sa.Column("total_invalid_votes", sa.Integer(), nullable=False),
        sa.Column("total_votes_cast", sa.Integer(), nullable=False),
        sa.Column("turnout_percentage", sa.Float(), nullable=False),
        sa.Column("participant_info", postgresql.JSONB(), nullable=False, server_default="[]"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "election_year", "constituency_id", "center_no", name="uq_center_results_year_constituency_center"
        ),
    )
    op.create_index("ix_center_results_election_year", "center_results", ["election_year"])
    op.create_index("ix_center_results_constituency_id", "center_results", ["constituency_id"])


def downgrade() -> None:
    """Drop the results and bulk upload tables."""
    op.drop_table("center_results")
    op.drop_table("constituency_results")
    op.drop_table("bulk_uploads")
    op.drop_index("ix_users_username", table_name="users")
    op.drop_table("users")
