"""add buffer flag to lot tasks

Revision ID: 8c2d5e1f7a30
Revises: 4a1e0c7b9d12
Create Date: 2026-10-18
"""

from alembic import op
import sqlalchemy as sa


revision = "8c2d5e1f7a30"
down_revision = "4a1e0c7b9d12"
branch_labels = None
depends_on = None


def upgrade() -> None:
    with op.batch_alter_table("lot_tasks") as batch_op:
        batch_op.add_column(
            sa.Column("is_buffer", sa.Boolean(), nullable=False, server_default=sa.false())
        )
    op.execute("UPDATE lot_tasks SET is_buffer = 1 WHERE lower(trade) = 'buffer'")


def downgrade() -> None:
    with op.batch_alter_table("lot_tasks") as batch_op:
        batch_op.drop_column("is_buffer")
