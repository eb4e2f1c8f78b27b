"""Create users, loans and loan_applications tables"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "0001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
            server_onupdate=sa.func.now(),
        ),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("photo_url", sa.String(length=1024), nullable=False, server_default=""),
        sa.Column("role", sa.String(length=20), nullable=False, server_default="borrower"),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="active"),
        sa.Column("suspend_reason", sa.Text(), nullable=False, server_default=""),
        sa.Column("firebase_uid", sa.String(length=128), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("email", name="uq_users_email"),
        sa.UniqueConstraint("firebase_uid", name="uq_users_firebase_uid"),
        sa.CheckConstraint("role IN ('borrower', 'manager', 'admin')", name="ck_users_role"),
        sa.CheckConstraint("status IN ('active', 'suspended')", name="ck_users_status"),
    )
    op.create_index("ix_users_role", "users", ["role"])

    op.create_table(
        "loans",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("category", sa.String(length=100), nullable=False),
        sa.Column("interest", sa.Numeric(6, 2), nullable=False),
        sa.Column("max_limit", sa.Numeric(18, 2), nullable=False),
        sa.Column("required_documents", postgresql.JSONB(), nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column("emi_plans", postgresql.JSONB(), nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column("images", postgresql.JSONB(), nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column("show_on_home", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column(
            "created_by",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("users.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column("created_by_email", sa.String(length=255), nullable=False),
        *_timestamps(),
        sa.CheckConstraint("interest >= 0", name="ck_loans_interest_nonneg"),
        sa.CheckConstraint("max_limit >= 0", name="ck_loans_max_limit_nonneg"),
    )
    op.create_index("ix_loans_category", "loans", ["category"])
    op.create_index("ix_loans_show_on_home", "loans", ["show_on_home"])
    op.create_index("ix_loans_created_by", "loans", ["created_by"])
    op.create_index("ix_loans_created_at", "loans", ["created_at"])

    op.create_table(
        "loan_applications",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "user_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("users.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column("user_email", sa.String(length=255), nullable=False),
        sa.Column(
            "loan_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("loans.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("loan_title", sa.String(length=255), nullable=False),
        sa.Column("interest_rate", sa.Numeric(6, 2), nullable=False),
        sa.Column("first_name", sa.String(length=100), nullable=False),
        sa.Column("last_name", sa.String(length=100), nullable=False),
        sa.Column("contact_number", sa.String(length=50), nullable=False),
        sa.Column("national_id", sa.LargeBinary(), nullable=False),
        sa.Column("income_source", sa.String(length=255), nullable=False),
        sa.Column("monthly_income", sa.Numeric(18, 2), nullable=False),
        sa.Column("loan_amount", sa.Numeric(18, 2), nullable=False),
        sa.Column("reason", sa.Text(), nullable=False),
        sa.Column("address", sa.Text(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=False, server_default=""),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="Pending"),
        sa.Column("application_fee_status", sa.String(length=20), nullable=False, server_default="Unpaid"),
        sa.Column("payment_transaction_id", sa.String(length=255), nullable=True),
        sa.Column("payment_amount", sa.Numeric(18, 2), nullable=True),
        sa.Column("paid_at", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column("approved_at", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column("rejected_at", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
        *_timestamps(),
        sa.CheckConstraint("monthly_income >= 0", name="ck_loan_app_income_nonneg"),
        sa.CheckConstraint("loan_amount > 0", name="ck_loan_app_amount_positive"),
        sa.CheckConstraint("version >= 1", name="ck_loan_app_version_positive"),
        sa.CheckConstraint("status IN ('Pending', 'Approved', 'Rejected')", name="ck_loan_app_status"),
        sa.CheckConstraint("application_fee_status IN ('Unpaid', 'Paid')", name="ck_loan_app_fee_status"),
    )
    op.create_index("ix_loan_applications_user_id", "loan_applications", ["user_id"])
    op.create_index("ix_loan_applications_loan_id", "loan_applications", ["loan_id"])
    op.create_index("ix_loan_applications_status", "loan_applications", ["status"])
    op.create_index("ix_loan_applications_created_at", "loan_applications", ["created_at"])


def downgrade() -> None:
    op.drop_index("ix_loan_applications_created_at", table_name="loan_applications")
    op.drop_index("ix_loan_applications_status", table_name="loan_applications")
    op.drop_index("ix_loan_applications_loan_id", table_name="loan_applications")
    op.drop_index("ix_loan_applications_user_id", table_name="loan_applications")
    op.drop_table("loan_applications")
    op.drop_index("ix_loans_created_at", table_name="loans")
    op.drop_index("ix_loans_created_by", table_name="loans")
    op.drop_index("ix_loans_show_on_home", table_name="loans")
    op.drop_index("ix_loans_category", table_name="loans")
    op.drop_table("loans")
    op.drop_index("ix_users_role", table_name="users")
    op.drop_table("users")
