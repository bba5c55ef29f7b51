"""initial

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19

"""

from alembic import op
import sqlalchemy as sa

revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


def _created_at():
    return sa.Column("created_at", sa.DateTime(timezone=True), nullable=False)


def upgrade() -> None:
    op.create_table(
        "admin_users",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False, server_default=""),
        sa.Column("role", sa.String(length=20), nullable=False, server_default="ADMIN"),
        sa.Column("phone", sa.String(length=20), nullable=True),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("last_login_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_by_id", sa.String(length=36), sa.ForeignKey("admin_users.id", ondelete="SET NULL"), nullable=True),
        _created_at(),
    )
    op.create_index("ix_admin_users_email", "admin_users", ["email"], unique=True)
    op.create_index("ix_admin_users_role", "admin_users", ["role"])

    op.create_table(
        "audit_logs",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("admin_id", sa.String(length=36), sa.ForeignKey("admin_users.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("action", sa.String(length=80), nullable=False),
        sa.Column("entity", sa.String(length=40), nullable=False),
        sa.Column("entity_id", sa.String(length=80), nullable=True),
        sa.Column("changes_json", sa.Text(), nullable=True),
        sa.Column("ip_address", sa.String(length=64), nullable=True),
        sa.Column("user_agent", sa.String(length=512), nullable=True),
        _created_at(),
    )
    op.create_index("ix_audit_logs_admin_id", "audit_logs", ["admin_id"])
    op.create_index("ix_audit_logs_action", "audit_logs", ["action"])
    op.create_index("ix_audit_logs_entity", "audit_logs", ["entity"])
    op.create_index("ix_audit_logs_entity_id", "audit_logs", ["entity_id"])
    op.create_index("ix_audit_logs_created_at", "audit_logs", ["created_at"])

    op.create_table(
        "chalets",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("name_ar", sa.String(length=100), nullable=False),
        sa.Column("name_en", sa.String(length=100), nullable=False),
        sa.Column("slug", sa.String(length=80), nullable=False),
        sa.Column("max_guests", sa.Integer(), nullable=False, server_default="4"),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default="0"),
        _created_at(),
    )
    op.create_index("ix_chalets_slug", "chalets", ["slug"], unique=True)

    op.create_table(
        "bookings",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("booking_ref", sa.String(length=20), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("visit_type", sa.String(length=20), nullable=False),
        sa.Column("customer_name", sa.String(length=100), nullable=False),
        sa.Column("customer_phone", sa.String(length=20), nullable=False),
        sa.Column("email", sa.String(length=320), nullable=True),
        sa.Column("guests", sa.Integer(), nullable=False, server_default="2"),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("language", sa.String(length=2), nullable=False, server_default="ar"),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="PENDING"),
        sa.Column("payment_status", sa.String(length=20), nullable=False, server_default="PENDING"),
        sa.Column("admin_confirmed", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("chalet_id", sa.String(length=36), sa.ForeignKey("chalets.id", ondelete="SET NULL"), nullable=True),
        sa.Column("cancellation_reason", sa.String(length=500), nullable=True),
        sa.Column("cancelled_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("reminder_sent_at", sa.DateTime(timezone=True), nullable=True),
        _created_at(),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_bookings_booking_ref", "bookings", ["booking_ref"], unique=True)
    op.create_index("ix_bookings_date", "bookings", ["date"])
    op.create_index("ix_bookings_visit_type", "bookings", ["visit_type"])
    op.create_index("ix_bookings_customer_phone", "bookings", ["customer_phone"])
    op.create_index("ix_bookings_status", "bookings", ["status"])
    op.create_index("ix_bookings_chalet_id", "bookings", ["chalet_id"])
    op.create_index("ix_bookings_created_at", "bookings", ["created_at"])

    op.create_table(
        "blackout_dates",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("visit_type", sa.String(length=20), nullable=True),
        sa.Column("chalet_id", sa.String(length=36), sa.ForeignKey("chalets.id", ondelete="CASCADE"), nullable=True),
        sa.Column("reason", sa.String(length=200), nullable=True),
        sa.Column("created_by", sa.String(length=36), nullable=True),
        _created_at(),
    )
    op.create_index("ix_blackout_dates_date", "blackout_dates", ["date"])
    op.create_index("ix_blackout_dates_chalet_id", "blackout_dates", ["chalet_id"])

    op.create_table(
        "booking_counters",
        sa.Column("year", sa.Integer(), primary_key=True, autoincrement=False),
        sa.Column("last_seq", sa.Integer(), nullable=False, server_default="0"),
    )

    op.create_table(
        "pricing",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("visit_type", sa.String(length=20), nullable=False, unique=True),
        sa.Column("total_price", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("deposit_amount", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )

    op.create_table(
        "chalet_pricing",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("chalet_id", sa.String(length=36), sa.ForeignKey("chalets.id", ondelete="CASCADE"), nullable=False),
        sa.Column("visit_type", sa.String(length=20), nullable=False),
        sa.Column("total_price", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("deposit_amount", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("chalet_id", "visit_type", name="uq_chalet_pricing_chalet_visit_type"),
    )
    op.create_index("ix_chalet_pricing_chalet_id", "chalet_pricing", ["chalet_id"])

    op.create_table(
        "settings",
        sa.Column("key", sa.String(length=80), primary_key=True),
        sa.Column("value", sa.Text(), nullable=False, server_default=""),
        sa.Column("type", sa.String(length=20), nullable=False, server_default="string"),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )

    op.create_table(
        "otp_codes",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("purpose", sa.String(length=20), nullable=False),
        sa.Column("subject_key", sa.String(length=40), nullable=False),
        sa.Column("code", sa.String(length=6), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("verified", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        _created_at(),
        sa.UniqueConstraint("purpose", "subject_key", name="uq_otp_purpose_subject"),
    )
    op.create_index("ix_otp_codes_expires_at", "otp_codes", ["expires_at"])


def downgrade() -> None:
    op.drop_table("otp_codes")
    op.drop_table("settings")
    op.drop_table("chalet_pricing")
    op.drop_table("pricing")
    op.drop_table("booking_counters")
    op.drop_table("blackout_dates")
    op.drop_table("bookings")
    op.drop_table("chalets")
    op.drop_table("audit_logs")
    op.drop_table("admin_users")
