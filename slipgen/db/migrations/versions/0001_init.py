"""initial schema: slips"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


revision = "0001_init"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    appointment_type_enum = sa.Enum("standard", "premium", name="appointment_type_enum")
    slip_status_enum = sa.Enum(
        "pending",
        "processing",
        "submitted",
        "otp_required",
        "error",
        name="slip_status_enum",
    )

    op.create_table(
        "slips",
        sa.Column("id", sa.UUID(), nullable=False),
        sa.Column("country", sa.String(length=100), nullable=True),
        sa.Column("city", sa.String(length=100), nullable=True),
        sa.Column("traveled_country", sa.String(length=100), nullable=True),
        sa.Column("appointment_type", appointment_type_enum, nullable=False),
        sa.Column("medical_center", sa.String(length=255), nullable=True),
        sa.Column("premium_medical_center", sa.String(length=255), nullable=True),
        sa.Column("appointment_date", sa.String(length=20), nullable=True),
        sa.Column("first_name", sa.String(length=255), nullable=True),
        sa.Column("last_name", sa.String(length=255), nullable=True),
        sa.Column("dob", sa.String(length=20), nullable=True),
        sa.Column("nationality", sa.String(length=100), nullable=True),
        sa.Column("gender", sa.String(length=20), nullable=True),
        sa.Column("marital_status", sa.String(length=20), nullable=True),
        sa.Column("passport", sa.String(length=50), nullable=True),
        sa.Column("confirm_passport", sa.String(length=50), nullable=True),
        sa.Column("passport_issue_date", sa.String(length=20), nullable=True),
        sa.Column("passport_issue_place", sa.String(length=255), nullable=True),
        sa.Column("passport_expiry_on", sa.String(length=20), nullable=True),
        sa.Column("visa_type", sa.String(length=50), nullable=True),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("phone", sa.String(length=50), nullable=True),
        sa.Column("national_id", sa.String(length=100), nullable=True),
        sa.Column("applied_position", sa.String(length=20), nullable=True),
        sa.Column("applied_position_other", sa.String(length=255), nullable=True),
        sa.Column("status", slip_status_enum, nullable=False),
        sa.Column("generated_link", sa.String(length=2048), nullable=True),
        sa.Column("log_entries", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_slips_status", "slips", ["status", "created_at"])


def downgrade() -> None:
    op.drop_index("idx_slips_status", table_name="slips")
    op.drop_table("slips")
    sa.Enum(name="slip_status_enum").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="appointment_type_enum").drop(op.get_bind(), checkfirst=True)
