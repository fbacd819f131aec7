"""initial oauth storage schema

Revision ID: 202610190001
Revises:
Create Date: 2026-10-19 00:00:01
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = "202610190001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "clients",
        sa.Column("id", sa.String(length=255), nullable=False),
        sa.Column("secret", sa.String(length=255), nullable=False, server_default=""),
        sa.Column("redirect_uri", sa.Text(), nullable=False, server_default=""),
        sa.Column("user_data", sa.JSON(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "authorizations",
        sa.Column("code", sa.String(length=255), nullable=False),
        sa.Column("client", sa.JSON(), nullable=False),
        sa.Column("expires_in", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("scope", sa.Text(), nullable=False, server_default=""),
        sa.Column("redirect_uri", sa.Text(), nullable=False, server_default=""),
        sa.Column("state", sa.Text(), nullable=False, server_default=""),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("user_data", sa.JSON(), nullable=True),
        sa.Column("code_challenge", sa.String(length=255), nullable=False, server_default=""),
        sa.Column("code_challenge_method", sa.String(length=16), nullable=False, server_default=""),
        sa.PrimaryKeyConstraint("code"),
    )

    op.create_table(
        "accesses",
        sa.Column("access_token", sa.String(length=255), nullable=False),
        sa.Column("refresh_token", sa.String(length=255), nullable=True),
        sa.Column("client", sa.JSON(), nullable=False),
        sa.Column("grant_data", sa.JSON(), nullable=True),
        sa.Column("previous", sa.JSON(), nullable=True),
        sa.Column("expires_in", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("scope", sa.Text(), nullable=False, server_default=""),
        sa.Column("redirect_uri", sa.Text(), nullable=False, server_default=""),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("user_data", sa.JSON(), nullable=True),
        sa.PrimaryKeyConstraint("access_token"),
    )
    # Sparse, non-unique: empty refresh tokens are stored as NULL
    op.create_index(
        "idx_accesses_refresh_token",
        "accesses",
        ["refresh_token"],
        unique=False,
        postgresql_where=sa.text("refresh_token IS NOT NULL"),
        sqlite_where=sa.text("refresh_token IS NOT NULL"),
    )


def downgrade() -> None:
    op.drop_index("idx_accesses_refresh_token", table_name="accesses")
    op.drop_table("accesses")
    op.drop_table("authorizations")
    op.drop_table("clients")
