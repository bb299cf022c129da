"""create uploads table

Revision ID: 20261018_0001
Revises:
Create Date: 2026-10-18 09:00:00
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "20261018_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "uploads",
        sa.Column("id", sa.Uuid(as_uuid=True), nullable=False),
        sa.Column("user_base_entity_id", sa.String(length=64), nullable=True),
        sa.Column("username", sa.String(length=255), nullable=False),
        sa.Column("uploaded_file", sa.String(length=255), nullable=False),
        sa.Column("uploaded_file_type", sa.String(length=32), nullable=False),
        sa.Column("imported_rows", sa.Integer(), nullable=False),
        sa.Column("rejected_rows", sa.Integer(), nullable=False),
        sa.Column("upload_date", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_uploads_username", "uploads", ["username"], unique=False)
    op.create_index(
        "ix_uploads_username_file_type",
        "uploads",
        ["username", "uploaded_file_type"],
        unique=False,
    )
    op.create_index("ix_uploads_user_base_entity_id", "uploads", ["user_base_entity_id"], unique=False)
    op.create_index("ix_uploads_upload_date", "uploads", ["upload_date"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_uploads_upload_date", table_name="uploads")
    op.drop_index("ix_uploads_user_base_entity_id", table_name="uploads")
    op.drop_index("ix_uploads_username_file_type", table_name="uploads")
    op.drop_index("ix_uploads_username", table_name="uploads")
    op.drop_table("uploads")
