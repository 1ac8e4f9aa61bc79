"""
001: Initial schema: customers, assessments and the follow-up thread

All foreign keys are NOT NULL and ON DELETE RESTRICT.

Revision ID: 001
Create Date: 2026-10-19
"""
from alembic import op
import sqlalchemy as sa

revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "customer",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("fname", sa.String(100), nullable=False),
        sa.Column("lname", sa.String(100), nullable=False),
        sa.Column("gender", sa.String(20), nullable=False),
        sa.Column("age", sa.Integer, nullable=False),
        sa.Column("mobile", sa.String(20), nullable=False, unique=True),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("pan", sa.String(20), nullable=False, unique=True),
        sa.Column("account_number", sa.String(34), nullable=False, unique=True),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("last_accessed", sa.DateTime, nullable=True),
        sa.Column("created_at", sa.DateTime, server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime, server_default=sa.func.now(), nullable=False),
    )

    op.create_table(
        "bank_user",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("username", sa.String(100), nullable=False, unique=True),
        sa.Column("password_hash", sa.String(255), nullable=False),
    )

    op.create_table(
        "assessment",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "customer_id", sa.Integer,
            sa.ForeignKey("customer.id", ondelete="RESTRICT"), nullable=False,
        ),
        sa.Column("score", sa.Integer, nullable=False),
        sa.Column("status", sa.String(30), nullable=False),
        sa.Column("answers", sa.JSON, nullable=False),
        sa.Column("breakdown", sa.JSON, nullable=True),
        sa.Column("language", sa.String(8), nullable=False, server_default="en"),
        sa.Column("created_at", sa.DateTime, server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime, server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_assessment_customer_id", "assessment", ["customer_id"])
    op.create_index("ix_assessment_status", "assessment", ["status"])
    op.create_index("ix_assessment_customer_created", "assessment", ["customer_id", "created_at"])

    op.create_table(
        "message",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "assessment_id", sa.Integer,
            sa.ForeignKey("assessment.id", ondelete="RESTRICT"), nullable=False,
        ),
        sa.Column("sender", sa.String(100), nullable=False),
        sa.Column("text", sa.Text, nullable=False),
        sa.Column("created_at", sa.DateTime, server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_message_assessment_id", "message", ["assessment_id"])

    op.create_table(
        "document",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "assessment_id", sa.Integer,
            sa.ForeignKey("assessment.id", ondelete="RESTRICT"), nullable=False,
        ),
        sa.Column("file_name", sa.String(255), nullable=False, unique=True),
        sa.Column("original_name", sa.String(255), nullable=False),
        sa.Column("file_path", sa.String(512), nullable=False),
        sa.Column("doc_type", sa.String(100), nullable=True),
        sa.Column("upload_date", sa.DateTime, server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_document_assessment_id", "document", ["assessment_id"])

    op.create_table(
        "assessment_status_audit",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "assessment_id", sa.Integer,
            sa.ForeignKey("assessment.id", ondelete="RESTRICT"), nullable=False,
        ),
        sa.Column("old_status", sa.String(30), nullable=False),
        sa.Column("new_status", sa.String(30), nullable=False),
        sa.Column("changed_by", sa.String(100), nullable=False),
        sa.Column("changed_at", sa.DateTime, server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_assessment_status_audit_assessment_id", "assessment_status_audit", ["assessment_id"])

    op.create_table(
        "dynamic_question",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("question_key", sa.String(50), nullable=False),
        sa.Column("question", sa.Text, nullable=False),
        sa.Column("language", sa.String(8), nullable=False, server_default="en"),
        sa.Column("options", sa.JSON, nullable=False),
        sa.Column("created_at", sa.DateTime, server_default=sa.func.now(), nullable=False),
    )


def downgrade() -> None:
    op.drop_table("dynamic_question")
    op.drop_table("assessment_status_audit")
    op.drop_table("document")
    op.drop_table("message")
    op.drop_table("assessment")
    op.drop_table("bank_user")
    op.drop_table("customer")
