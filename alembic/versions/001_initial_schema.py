"""Initial database schema.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-19

Creates all initial tables for the dormitory manager:
- Rooms
- Assignments (one open assignment per resident)
- Payments (one pending/verified payment per assignment)
- Audit logs
"""

from typing import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers
revision: str = "001_initial"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create all database tables."""

    # ==================== ROOMS ====================
    op.create_table(
        "rooms",
        sa.Column("id", sa.Uuid, primary_key=True),
        sa.Column("number", sa.String(20), nullable=False),
        sa.Column("floor", sa.Integer, nullable=False),
        sa.Column("capacity", sa.Integer, nullable=False),
        sa.Column("room_type", sa.String(20), nullable=False),
        sa.Column("monthly_rate", sa.Numeric(10, 2), nullable=False, server_default="5000"),
        sa.Column("status", sa.String(20), nullable=False, server_default="available"),
        sa.Column("occupied_count", sa.Integer, nullable=False, server_default="0"),
        sa.Column("description", sa.Text, server_default=""),
        sa.Column("amenities", sa.JSON),
        sa.Column("images", sa.JSON),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.CheckConstraint("capacity >= 1 AND capacity <= 6", name="ck_rooms_capacity_range"),
        sa.CheckConstraint(
            "occupied_count >= 0 AND occupied_count <= capacity",
            name="ck_rooms_occupancy_within_capacity",
        ),
        sa.CheckConstraint("floor >= 0", name="ck_rooms_floor_non_negative"),
        sa.CheckConstraint("monthly_rate >= 0", name="ck_rooms_rate_non_negative"),
    )
    op.create_index("ix_rooms_number", "rooms", ["number"], unique=True)
    op.create_index("ix_rooms_status", "rooms", ["status"])

    # ==================== ASSIGNMENTS ====================
    op.create_table(
        "assignments",
        sa.Column("id", sa.Uuid, primary_key=True),
        sa.Column("reference_number", sa.String(30), nullable=False),
        sa.Column("resident_id", sa.Uuid, nullable=False),
        sa.Column("room_id", sa.Uuid, sa.ForeignKey("rooms.id"), nullable=False),
        sa.Column("start_date", sa.Date, nullable=False),
        sa.Column("end_date", sa.Date, nullable=False),
        sa.Column("duration_days", sa.Integer, nullable=False),
        sa.Column("monthly_rate_snapshot", sa.Numeric(10, 2), nullable=False),
        sa.Column("total_price", sa.Integer, nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("notes", sa.Text),
        sa.Column("id_image", sa.Text),
        sa.Column("approved_at", sa.DateTime(timezone=True)),
        sa.Column("approved_by", sa.Uuid),
        sa.Column("checked_in_at", sa.DateTime(timezone=True)),
        sa.Column("checked_out_at", sa.DateTime(timezone=True)),
        sa.Column("checked_out_by", sa.Uuid),
        sa.Column("cancelled_at", sa.DateTime(timezone=True)),
        sa.Column("completed_at", sa.DateTime(timezone=True)),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.CheckConstraint("end_date > start_date", name="ck_assignments_date_order"),
        sa.CheckConstraint("duration_days > 0", name="ck_assignments_duration_positive"),
    )
    op.create_index(
        "ix_assignments_reference_number", "assignments", ["reference_number"], unique=True
    )
    op.create_index("ix_assignments_resident_id", "assignments", ["resident_id"])
    op.create_index("ix_assignments_room_id", "assignments", ["room_id"])
    op.create_index("ix_assignments_status", "assignments", ["status"])
    op.create_index("ix_assignments_room_status", "assignments", ["room_id", "status"])
    op.create_index(
        "uq_assignments_resident_open",
        "assignments",
        ["resident_id"],
        unique=True,
        postgresql_where=sa.text("status IN ('pending', 'approved', 'active')"),
    )

    # ==================== PAYMENTS ====================
    op.create_table(
        "payments",
        sa.Column("id", sa.Uuid, primary_key=True),
        sa.Column("assignment_id", sa.Uuid, sa.ForeignKey("assignments.id"), nullable=False),
        sa.Column("resident_id", sa.Uuid, nullable=False),
        sa.Column("amount", sa.Integer, nullable=False),
        sa.Column("method", sa.String(10), nullable=False),
        sa.Column("reference_number", sa.String(100)),
        sa.Column("proof_image", sa.Text),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("remarks", sa.Text, server_default=""),
        sa.Column("verified_by", sa.Uuid),
        sa.Column("verified_at", sa.DateTime(timezone=True)),
        sa.Column("rejected_at", sa.DateTime(timezone=True)),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.CheckConstraint("amount >= 0", name="ck_payments_amount_non_negative"),
    )
    op.create_index("ix_payments_assignment_id", "payments", ["assignment_id"])
    op.create_index("ix_payments_resident_id", "payments", ["resident_id"])
    op.create_index("ix_payments_status", "payments", ["status"])
    op.create_index(
        "uq_payments_assignment_live",
        "payments",
        ["assignment_id"],
        unique=True,
        postgresql_where=sa.text("status IN ('pending', 'verified')"),
    )

    # ==================== AUDIT ====================
    op.create_table(
        "audit_logs",
        sa.Column("id", sa.Uuid, primary_key=True),
        sa.Column("actor_id", sa.Uuid),
        sa.Column("actor_role", sa.String(20)),
        sa.Column("action", sa.String(100), nullable=False),
        sa.Column("resource_type", sa.String(50), nullable=False),
        sa.Column("resource_id", sa.Uuid),
        sa.Column("old_values", sa.JSON),
        sa.Column("new_values", sa.JSON),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    for column in ("actor_id", "action", "resource_type", "resource_id", "created_at"):
        op.create_index(f"ix_audit_logs_{column}", "audit_logs", [column])


def downgrade() -> None:
    """Drop all database tables in reverse order."""
    op.drop_table("audit_logs")
    op.drop_table("payments")
    op.drop_table("assignments")
    op.drop_table("rooms")
