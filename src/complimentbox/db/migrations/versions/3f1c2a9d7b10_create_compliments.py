"""create compliments table

Append-only log of compliments, partitioned by recipient code. The
composite index serves "all compliments for a code, newest first".

Revision ID: 3f1c2a9d7b10
Revises:
Create Date: 2026-10-17 10:12:41.204118
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f1c2a9d7b10'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "compliments",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("recipient_code", sa.Text(), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_compliments_recipient_code_id",
        "compliments",
        ["recipient_code", "id"],
    )


def downgrade() -> None:
    op.drop_index("ix_compliments_recipient_code_id", table_name="compliments")
    op.drop_table("compliments")
