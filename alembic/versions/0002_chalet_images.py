"""chalet images

Revision ID: 0002_chalet_images
Revises: 0001_initial
Create Date: 2026-10-19

"""

from alembic import op
import sqlalchemy as sa

revision = "0002_chalet_images"
down_revision = "0001_initial"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "chalet_images",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("chalet_id", sa.String(length=36), sa.ForeignKey("chalets.id", ondelete="CASCADE"), nullable=False),
        sa.Column("url", sa.String(length=1000), nullable=False),
        sa.Column("caption", sa.String(length=200), nullable=True),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_chalet_images_chalet_id", "chalet_images", ["chalet_id"])


def downgrade() -> None:
    op.drop_index("ix_chalet_images_chalet_id", table_name="chalet_images")
    op.drop_table("chalet_images")
