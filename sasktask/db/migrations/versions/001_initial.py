"""Initial schema - marketplace, evidence, audit trail and dispute analysis

Revision ID: 001
Revises: None
Create Date: 2026-10-18
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _uuid_fk(name: str, target: str, nullable: bool = False, index: bool = False) -> sa.Column:
    return sa.Column(
        name,
        postgresql.UUID(as_uuid=True),
        sa.ForeignKey(target),
        nullable=nullable,
        index=index,
    )


def _soft_delete_and_timestamps() -> list[sa.Column]:
    return [
        sa.Column("is_deleted", sa.Boolean, nullable=False, server_default=sa.text("false")),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]


def _created_at() -> sa.Column:
    # Append-only tables carry creation time only.
    return sa.Column(
        "created_at",
        sa.DateTime(timezone=True),
        nullable=False,
        server_default=sa.func.now(),
        index=True,
    )


def upgrade() -> None:
    # Profiles
    op.create_table(
        "profiles",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("full_name", sa.String(255), nullable=False),
        sa.Column("city", sa.String(120), nullable=True),
        sa.Column("rating", sa.Float, nullable=True),
        sa.Column("total_reviews", sa.Integer, nullable=False, server_default=sa.text("0")),
        sa.Column("completed_tasks", sa.Integer, nullable=False, server_default=sa.text("0")),
        sa.Column("trust_score", sa.Float, nullable=True),
        sa.Column("reputation_score", sa.Float, nullable=True),
        sa.Column("reliability_score", sa.Float, nullable=True),
        sa.Column("latitude", sa.Float, nullable=True),
        sa.Column("longitude", sa.Float, nullable=True),
        sa.Column("skills", postgresql.JSONB, nullable=True),
        sa.Column("preferred_categories", postgresql.JSONB, nullable=True),
        *_soft_delete_and_timestamps(),
    )

    op.create_table(
        "badges",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        _uuid_fk("user_id", "profiles.id", index=True),
        sa.Column("badge_type", sa.String(50), nullable=False),
        sa.Column("badge_level", sa.String(20), nullable=True),
        *_soft_delete_and_timestamps(),
    )

    # Tasks & bookings
    op.create_table(
        "tasks",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        _uuid_fk("task_giver_id", "profiles.id", index=True),
        sa.Column("title", sa.String(500), nullable=False),
        sa.Column("description", sa.Text, nullable=False, server_default=""),
        sa.Column("category", sa.String(100), nullable=False, index=True),
        sa.Column("pay_amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("estimated_duration", sa.Float, nullable=True),
        sa.Column("location", sa.String(500), nullable=False, server_default=""),
        sa.Column("latitude", sa.Float, nullable=True),
        sa.Column("longitude", sa.Float, nullable=True),
        sa.Column("priority", sa.String(20), nullable=True, server_default="medium"),
        sa.Column("status", sa.String(20), nullable=False, server_default="open", index=True),
        sa.Column("scheduled_date", sa.DateTime(timezone=True), nullable=True),
        *_soft_delete_and_timestamps(),
    )

    op.create_table(
        "bookings",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        _uuid_fk("task_id", "tasks.id", index=True),
        _uuid_fk("task_doer_id", "profiles.id", index=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("deposit_paid", sa.Boolean, nullable=False, server_default=sa.text("false")),
        *_soft_delete_and_timestamps(),
    )

    # Disputes
    op.create_table(
        "disputes",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        _uuid_fk("booking_id", "bookings.id", index=True),
        _uuid_fk("task_id", "tasks.id"),
        _uuid_fk("raised_by", "profiles.id"),
        _uuid_fk("against_user", "profiles.id"),
        sa.Column("dispute_reason", sa.String(30), nullable=False),
        sa.Column("dispute_details", sa.Text, nullable=True),
        sa.Column("status", sa.String(30), nullable=False, server_default="open"),
        sa.Column("resolution", sa.Text, nullable=True),
        *_soft_delete_and_timestamps(),
    )

    # Evidence
    op.create_table(
        "dispute_evidence",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        _uuid_fk("dispute_id", "disputes.id", index=True),
        _uuid_fk("uploaded_by", "profiles.id"),
        sa.Column("evidence_type", sa.String(30), nullable=False, server_default="photo"),
        sa.Column("file_url", sa.String(1000), nullable=False),
        sa.Column("file_name", sa.String(255), nullable=False),
        sa.Column("file_type", sa.String(100), nullable=False),
        sa.Column("file_size", sa.Integer, nullable=True),
        sa.Column("description", sa.Text, nullable=True),
        _created_at(),
    )

    op.create_table(
        "work_evidence",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        _uuid_fk("booking_id", "bookings.id", index=True),
        _uuid_fk("uploaded_by", "profiles.id"),
        sa.Column("evidence_type", sa.String(30), nullable=False, server_default="photo"),
        sa.Column("file_url", sa.String(1000), nullable=False),
        sa.Column("file_name", sa.String(255), nullable=False),
        sa.Column("file_type", sa.String(100), nullable=False),
        sa.Column("file_size", sa.Integer, nullable=True),
        sa.Column("caption", sa.Text, nullable=True),
        _created_at(),
    )

    op.create_table(
        "task_checkins",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        _uuid_fk("booking_id", "bookings.id", index=True),
        _uuid_fk("user_id", "profiles.id"),
        sa.Column("checkin_type", sa.String(10), nullable=False),
        sa.Column("latitude", sa.Float, nullable=True),
        sa.Column("longitude", sa.Float, nullable=True),
        sa.Column("location_accuracy", sa.Float, nullable=True),
        sa.Column("notes", sa.Text, nullable=True),
        _created_at(),
    )

    op.create_table(
        "task_checklists",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        _uuid_fk("task_id", "tasks.id", index=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("requires_photo", sa.Boolean, nullable=False, server_default=sa.text("false")),
        sa.Column("display_order", sa.Integer, nullable=False, server_default=sa.text("0")),
        *_soft_delete_and_timestamps(),
    )

    op.create_table(
        "checklist_completions",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        _uuid_fk("booking_id", "bookings.id", index=True),
        _uuid_fk("checklist_id", "task_checklists.id"),
        _uuid_fk("completed_by", "profiles.id"),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("photo_url", sa.String(1000), nullable=True),
        sa.Column("rejection_reason", sa.Text, nullable=True),
        *_soft_delete_and_timestamps(),
    )

    # Audit trail (hash chained)
    op.create_table(
        "audit_trail_events",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        _uuid_fk("booking_id", "bookings.id", nullable=True, index=True),
        _uuid_fk("user_id", "profiles.id"),
        sa.Column("event_type", sa.String(100), nullable=False),
        sa.Column("event_category", sa.String(50), nullable=False),
        sa.Column("event_data", postgresql.JSONB, nullable=True),
        sa.Column("event_hash", sa.String(128), nullable=True),
        sa.Column("previous_hash", sa.String(128), nullable=True),
        sa.Column("ip_address", sa.String(45), nullable=True),
        _created_at(),
    )

    # Dispute analysis (append-only)
    op.create_table(
        "dispute_analysis",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        _uuid_fk("dispute_id", "disputes.id", index=True),
        sa.Column("analysis_type", sa.String(20), nullable=False),
        sa.Column("model_identifier", sa.String(20), nullable=False),
        sa.Column("ai_model", sa.String(100), nullable=True),
        sa.Column("risk_score", sa.Integer, nullable=False),
        sa.Column("confidence_score", sa.Integer, nullable=False),
        sa.Column("recommendation", sa.String(30), nullable=False),
        sa.Column("reasoning", sa.Text, nullable=False, server_default=""),
        sa.Column("inconsistencies", postgresql.JSONB, nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column("suggested_resolution", sa.Text, nullable=False, server_default=""),
        sa.Column("evidence_summary", postgresql.JSONB, nullable=False),
        _created_at(),
        sa.CheckConstraint("risk_score BETWEEN 0 AND 100", name="ck_dispute_analysis_risk_range"),
        sa.CheckConstraint(
            "confidence_score BETWEEN 0 AND 100", name="ck_dispute_analysis_confidence_range"
        ),
    )


def downgrade() -> None:
    op.drop_table("dispute_analysis")
    op.drop_table("audit_trail_events")
    op.drop_table("checklist_completions")
    op.drop_table("task_checklists")
    op.drop_table("task_checkins")
    op.drop_table("work_evidence")
    op.drop_table("dispute_evidence")
    op.drop_table("disputes")
    op.drop_table("bookings")
    op.drop_table("tasks")
    op.drop_table("badges")
    op.drop_table("profiles")
