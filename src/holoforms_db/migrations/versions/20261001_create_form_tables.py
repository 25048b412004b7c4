"""Create forms, form_fields and form_responses tables.

Revision ID: 20261001_forms
Revises:
Create Date: 2026-10-01
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB, TIMESTAMP, UUID

# revision identifiers, used by Alembic.
revision = "20261001_forms"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # --- forms ---
    op.create_table(
        "forms",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", sa.Text, nullable=False),
        sa.Column("name", sa.Text, nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column(
            "status",
            sa.String(20),
            nullable=False,
            server_default=sa.text("'draft'"),
        ),
        sa.Column("slug", sa.Text, nullable=True, unique=True),
        sa.Column("created_at", TIMESTAMP(timezone=True), nullable=False),
        sa.Column("updated_at", TIMESTAMP(timezone=True), nullable=False),
        sa.CheckConstraint(
            "status IN ('draft', 'published', 'closed')",
            name="ck_form_status",
        ),
    )
    op.create_index("ix_forms_user_id", "forms", ["user_id"])

    # --- form_fields ---
    op.create_table(
        "form_fields",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "form_id",
            UUID(as_uuid=True),
            sa.ForeignKey("forms.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("field_type", sa.String(20), nullable=False),
        sa.Column("label", sa.Text, nullable=False),
        sa.Column("required", sa.Boolean, nullable=False, server_default=sa.text("false")),
        sa.Column("options", JSONB, nullable=True),
        sa.Column("allow_multiple", sa.Boolean, nullable=False, server_default=sa.text("false")),
        sa.Column("allow_attachments", sa.Boolean, nullable=False, server_default=sa.text("false")),
        sa.Column("include_other", sa.Boolean, nullable=False, server_default=sa.text("false")),
        sa.Column("require_yes_reason", sa.Boolean, nullable=False, server_default=sa.text("false")),
        sa.Column("require_no_reason", sa.Boolean, nullable=False, server_default=sa.text("false")),
        sa.Column("display_order", sa.Integer, nullable=False, server_default=sa.text("0")),
        sa.Column("page_number", sa.Integer, nullable=False, server_default=sa.text("1")),
        sa.Column("created_at", TIMESTAMP(timezone=True), nullable=False),
        sa.CheckConstraint("page_number >= 1", name="ck_field_page_positive"),
    )
    op.create_index(
        "ix_form_fields_order",
        "form_fields",
        ["form_id", "page_number", "display_order"],
    )

    # --- form_responses ---
    op.create_table(
        "form_responses",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "form_id",
            UUID(as_uuid=True),
            sa.ForeignKey("forms.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "response_data",
            JSONB,
            nullable=False,
            server_default=sa.text("'{}'::jsonb"),
        ),
        sa.Column("submitted_by_email", sa.Text, nullable=True),
        sa.Column("submitted_by_name", sa.Text, nullable=True),
        sa.Column("submitted_at", TIMESTAMP(timezone=True), nullable=False),
    )
    op.create_index(
        "ix_form_responses_form_submitted",
        "form_responses",
        ["form_id", "submitted_at"],
    )


def downgrade() -> None:
    op.drop_index("ix_form_responses_form_submitted", table_name="form_responses")
    op.drop_table("form_responses")
    op.drop_index("ix_form_fields_order", table_name="form_fields")
    op.drop_table("form_fields")
    op.drop_index("ix_forms_user_id", table_name="forms")
    op.drop_table("forms")
