"""initial board schema

Revision ID: 3c1f9a7d2b40
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "3c1f9a7d2b40"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create identity and post tables."""
    op.create_table(
        "identity",
        sa.Column("address", sa.Text(), nullable=False),
        sa.Column("restricted", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("restricted_message", sa.Text(), nullable=False, server_default=""),
        sa.Column("verified", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("captcha_required", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("last_posted_at", sa.BigInteger(), nullable=False, server_default="0"),
        sa.Column("view_ticket", sa.BigInteger(), nullable=False, server_default="0"),
        sa.Column("likes_sent", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("likes_received", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("dislikes_sent", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("dislikes_received", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("views_sent", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("views_received", sa.Integer(), nullable=False, server_default="0"),
        sa.PrimaryKeyConstraint("address"),
    )
    op.create_table(
        "post",
        sa.Column(
            "id",
            sa.BigInteger().with_variant(sa.Integer(), "sqlite"),
            autoincrement=True,
            nullable=False,
        ),
        sa.Column("timestamp", sa.BigInteger(), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("author_address", sa.Text(), nullable=False),
        sa.Column("root_id", sa.BigInteger(), nullable=True),
        sa.Column("path", sa.Text(), nullable=True),
        sa.Column("hidden", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("views", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("likes", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("dislikes", sa.Integer(), nullable=False, server_default="0"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("path"),
    )
    op.create_index("ix_post_root_id", "post", ["root_id"])
    op.create_index("ix_post_author_address", "post", ["author_address"])


def downgrade() -> None:
    """Drop identity and post tables."""
    op.drop_index("ix_post_author_address", table_name="post")
    op.drop_index("ix_post_root_id", table_name="post")
    op.drop_table("post")
    op.drop_table("identity")
