"""create user profiles, metric catalog, upload ledger and observations

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19 09:00:00
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None

_JSON = sa.JSON().with_variant(postgresql.JSONB(astext_type=sa.Text()), "postgresql")


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "user_profiles",
        sa.Column("id", sa.Uuid(as_uuid=True), nullable=False),
        sa.Column("external_user_id", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=True),
        sa.Column("user_type", sa.String(length=50), nullable=True),
        sa.Column("selected_profile", sa.String(length=50), nullable=True),
        sa.Column("industry", sa.String(length=100), nullable=True),
        sa.Column("onboarding_completed", sa.Boolean(), nullable=False),
        sa.Column("custom_metrics", _JSON, nullable=True),
        sa.Column("data_input_method", sa.String(length=20), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("external_user_id"),
    )

    op.create_table(
        "available_metrics",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("metric_id", sa.String(length=120), nullable=False),
        sa.Column("metric_name", sa.String(length=255), nullable=False),
        sa.Column("category", sa.String(length=50), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("unit", sa.String(length=50), nullable=True),
        sa.Column("data_type", sa.String(length=20), nullable=False),
        sa.Column("is_available_for_custom", sa.Boolean(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("metric_id"),
    )

    op.create_table(
        "data_uploads",
        sa.Column("id", sa.Uuid(as_uuid=True), nullable=False),
        sa.Column("user_id", sa.Uuid(as_uuid=True), nullable=False),
        sa.Column("file_name", sa.String(length=255), nullable=False),
        sa.Column("file_size", sa.Integer(), nullable=False),
        sa.Column("file_hash", sa.String(length=64), nullable=False),
        sa.Column("upload_status", sa.String(length=32), nullable=False),
        sa.Column("metrics_mapped", _JSON, nullable=False),
        sa.Column("rows_processed", sa.Integer(), nullable=False),
        sa.Column("rows_failed", sa.Integer(), nullable=False),
        sa.Column("error_log", _JSON, nullable=False),
        sa.Column("uploaded_at", sa.DateTime(timezone=True), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["user_id"], ["user_profiles.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("file_hash", name="uq_data_uploads_file_hash"),
    )
    op.create_index("ix_data_uploads_user_id", "data_uploads", ["user_id"], unique=False)
    op.create_index(
        "ix_data_uploads_user_uploaded_at",
        "data_uploads",
        ["user_id", "uploaded_at"],
        unique=False,
    )

    op.create_table(
        "custom_metric_data",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Uuid(as_uuid=True), nullable=False),
        sa.Column("metric_id", sa.String(length=120), nullable=False),
        sa.Column("value", sa.Text(), nullable=False),
        sa.Column("date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("source", sa.String(length=16), nullable=False),
        sa.Column("upload_id", sa.Uuid(as_uuid=True), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["user_id"], ["user_profiles.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["upload_id"], ["data_uploads.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_custom_metric_data_user_metric_date",
        "custom_metric_data",
        ["user_id", "metric_id", "date"],
        unique=False,
    )
    op.create_index("ix_custom_metric_data_upload_id", "custom_metric_data", ["upload_id"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_custom_metric_data_upload_id", table_name="custom_metric_data")
    op.drop_index("ix_custom_metric_data_user_metric_date", table_name="custom_metric_data")
    op.drop_table("custom_metric_data")
    op.drop_index("ix_data_uploads_user_uploaded_at", table_name="data_uploads")
    op.drop_index("ix_data_uploads_user_id", table_name="data_uploads")
    op.drop_table("data_uploads")
    op.drop_table("available_metrics")
    op.drop_table("user_profiles")
