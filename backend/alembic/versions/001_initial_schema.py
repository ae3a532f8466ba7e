"""Initial schema: courts, bookings, payments, slot reservations, admin users.

Revision ID: 001
Revises: None
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]


def upgrade() -> None:
    # Courts table
    op.create_table(
        "courts",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("description", sa.String(500), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        *_timestamps(),
        sa.UniqueConstraint("name", name="uq_courts_name"),
    )
    op.create_index("ix_courts_id", "courts", ["id"])

    # Bookings table
    op.create_table(
        "bookings",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("booking_number", sa.String(32), nullable=False),
        sa.Column("customer_name", sa.String(100), nullable=False),
        sa.Column("customer_email", sa.String(255), nullable=False),
        sa.Column("customer_phone", sa.String(20), nullable=False),
        sa.Column("court_id", sa.Integer(), sa.ForeignKey("courts.id"), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("start_time", sa.Time(), nullable=False),
        sa.Column("end_time", sa.Time(), nullable=False),
        sa.Column("duration", sa.Integer(), nullable=False),
        sa.Column(
            "status", sa.String(30), nullable=False,
            server_default=sa.text("'PENDING_VERIFICATION'"),
        ),
        sa.Column("total_amount", sa.Integer(), nullable=False),
        sa.Column("notes", sa.String(500), nullable=True),
        sa.Column("verification_token", sa.String(64), nullable=False),
        *_timestamps(),
        sa.CheckConstraint("end_time > start_time", name="check_booking_time_range"),
        sa.CheckConstraint("duration > 0", name="check_booking_duration_positive"),
        sa.CheckConstraint("total_amount >= 0", name="check_booking_amount_non_negative"),
        sa.CheckConstraint(
            "status IN ('PENDING_VERIFICATION', 'CONFIRMED', 'CANCELLED', 'COMPLETED')",
            name="check_booking_status",
        ),
    )
    op.create_index("ix_bookings_id", "bookings", ["id"])
    op.create_index("ix_bookings_booking_number", "bookings", ["booking_number"], unique=True)
    # Availability and conflict checks always filter on court + date + active status.
    op.create_index("ix_bookings_court_date_status", "bookings", ["court_id", "date", "status"])

    # Payments table: at most one payment per booking
    op.create_table(
        "payments",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "booking_id", sa.Integer(),
            sa.ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("payment_method", sa.String(10), nullable=False),
        sa.Column("reference_code", sa.String(100), nullable=False),
        sa.Column("amount", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default=sa.text("'PENDING'")),
        sa.Column("verified_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("verified_by", sa.String(64), nullable=True),
        sa.Column("rejection_reason", sa.String(500), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("booking_id", name="uq_payments_booking_id"),
        sa.CheckConstraint("payment_method IN ('GCASH', 'MAYA')", name="check_payment_method"),
        sa.CheckConstraint(
            "status IN ('PENDING', 'VERIFIED', 'REJECTED')", name="check_payment_status"
        ),
        sa.CheckConstraint(
            "status != 'REJECTED' OR rejection_reason IS NOT NULL",
            name="check_payment_rejection_reason",
        ),
    )
    op.create_index("ix_payments_id", "payments", ["id"])
    # The admin queue lists PENDING payments
    op.create_index("ix_payments_status", "payments", ["status"])

    # Slot reservations: one row per occupied hour of an active booking.
    # UNIQUE (court_id, date, hour) is the double-booking guard; a concurrent
    # insert for a taken hour fails here no matter what the caller read first.
    op.create_table(
        "slot_reservations",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "booking_id", sa.Integer(),
            sa.ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("court_id", sa.Integer(), sa.ForeignKey("courts.id"), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("hour", sa.Integer(), nullable=False),
        sa.UniqueConstraint("court_id", "date", "hour", name="uq_slot_reservation_court_date_hour"),
        sa.CheckConstraint("hour >= 0 AND hour < 24", name="check_slot_reservation_hour"),
    )
    op.create_index("ix_slot_reservations_booking_id", "slot_reservations", ["booking_id"])

    # Admin users
    op.create_table(
        "admin_users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("hashed_password", sa.String(255), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        *_timestamps(),
    )
    op.create_index("ix_admin_users_id", "admin_users", ["id"])
    op.create_index("ix_admin_users_user_id", "admin_users", ["user_id"], unique=True)
    op.create_index("ix_admin_users_email", "admin_users", ["email"], unique=True)


def downgrade() -> None:
    op.drop_table("admin_users")
    op.drop_table("slot_reservations")
    op.drop_table("payments")
    op.drop_table("bookings")
    op.drop_table("courts")
