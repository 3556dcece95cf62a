"""Initial schema — representatives, companies, assignments, rotation cursor.

Revision ID: 001
Revises: None
Create Date: 2026-10-19
"""

from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Sales representatives
    op.create_table(
        "sales_representatives",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("email", sa.String(320), unique=True, nullable=False),
        sa.Column("first_name", sa.String(100), nullable=True),
        sa.Column("last_name", sa.String(100), nullable=True),
        sa.Column("role", sa.String(30), nullable=False, server_default="sales"),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column(
            "email_notifications", sa.Boolean, nullable=False, server_default=sa.true()
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    )
    op.create_index(
        "idx_sales_reps_role_active", "sales_representatives", ["role", "is_active"]
    )

    # Companies
    op.create_table(
        "companies",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("industry", sa.String(100), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    )

    # Company → sales rep assignments (append-only)
    op.create_table(
        "company_sales_users",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "company_id",
            sa.String(36),
            sa.ForeignKey("companies.id", ondelete="CASCADE"),
            unique=True,
            nullable=False,
        ),
        sa.Column(
            "sales_representative_id",
            sa.String(36),
            sa.ForeignKey("sales_representatives.id"),
            nullable=False,
        ),
        sa.Column("sequence", sa.Integer, unique=True, nullable=False),
        sa.Column("method", sa.String(20), nullable=False, server_default="rotation"),
        sa.Column("assigned_by", sa.String(36), nullable=True),
        sa.Column(
            "assigned_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    )
    op.create_index(
        "idx_assignments_sales_rep", "company_sales_users", ["sales_representative_id"]
    )

    # Rotation cursor
    op.create_table(
        "rotation_cursors",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("rr_key", sa.String(200), unique=True, nullable=False),
        sa.Column("last_representative_id", sa.String(36), nullable=True),
        sa.Column("sequence", sa.Integer, nullable=False, server_default="0"),
        sa.Column("version", sa.Integer, nullable=False, server_default="0"),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    )


def downgrade() -> None:
    op.drop_table("rotation_cursors")
    op.drop_index("idx_assignments_sales_rep", table_name="company_sales_users")
    op.drop_table("company_sales_users")
    op.drop_table("companies")
    op.drop_index("idx_sales_reps_role_active", table_name="sales_representatives")
    op.drop_table("sales_representatives")
