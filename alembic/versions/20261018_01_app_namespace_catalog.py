"""App namespace declaration catalog

Revision ID: 20261018_01
Revises: None
Create Date: 2026-10-18
"""
# pylint: disable=no-member,invalid-name,wrong-import-order

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "20261018_01"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""

    op.create_table(
        "app_namespace",
        sa.Column("id", sa.BigInteger().with_variant(sa.Integer(), "sqlite"), primary_key=True, autoincrement=True),
        sa.Column("app_id", sa.Text(), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("format", sa.Text(), nullable=False, server_default=sa.text("'properties'")),
        sa.Column("is_public", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("comment", sa.Text(), nullable=False, server_default=sa.text("''")),
        sa.Column("is_deleted", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_by", sa.Text(), nullable=False),
        sa.Column("created_at_utc", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.current_timestamp()),
        sa.Column("deleted_by", sa.Text(), nullable=True),
        sa.Column("deleted_at_utc", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint(
            "format IN ('properties', 'xml', 'json', 'yml', 'yaml', 'txt')",
            name="ck_app_namespace_format",
        ),
    )
    op.create_index(
        "uq_app_namespace_active_app_name",
        "app_namespace",
        ["app_id", "name"],
        unique=True,
        postgresql_where=sa.text("is_deleted = false"),
        sqlite_where=sa.text("is_deleted = 0"),
    )
    op.create_index("ix_app_namespace_name", "app_namespace", ["name"])


def downgrade() -> None:
    """Downgrade schema."""

    op.drop_index("ix_app_namespace_name", table_name="app_namespace")
    op.drop_index("uq_app_namespace_active_app_name", table_name="app_namespace")
    op.drop_table("app_namespace")
