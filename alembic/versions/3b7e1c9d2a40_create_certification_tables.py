"""create certification tables

Revision ID: 3b7e1c9d2a40
Revises:
Create Date: 2026-10-18 00:00:00.000000

"""

from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "3b7e1c9d2a40"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "certifications",
        sa.Column("id", sa.String(length=80), primary_key=True),
        sa.Column("subject", sa.String(length=255), nullable=False),
        sa.Column("certification_type", sa.String(length=50), nullable=False),
        sa.Column("issue_date", sa.BigInteger(), nullable=False),
        sa.Column("expiration_date", sa.BigInteger(), nullable=False),
        sa.Column("status", sa.String(length=16), nullable=False),
        sa.Column("evidence", sa.JSON(), nullable=False),
        sa.Column("metadata", sa.String(length=500), nullable=False, server_default=""),
        sa.Column("renewal_count", sa.Integer(), nullable=False, server_default="0"),
        sa.UniqueConstraint("subject", "certification_type", name="uq_subject_type"),
    )
    op.create_table(
        "certification_requirements",
        sa.Column("certification_type", sa.String(length=50), primary_key=True),
        sa.Column("required_hours", sa.Integer(), nullable=False),
        sa.Column("required_activities", sa.JSON(), nullable=False),
        sa.Column("validity_days", sa.Integer(), nullable=False),
    )
    op.create_table(
        "role_members",
        sa.Column("role", sa.String(length=16), primary_key=True),
        sa.Column("member_id", sa.String(length=255), primary_key=True),
    )
    op.create_table(
        "revocation_logs",
        sa.Column(
            "certification_id",
            sa.String(length=80),
            sa.ForeignKey("certifications.id"),
            primary_key=True,
        ),
        sa.Column("reason", sa.String(length=200), nullable=False),
        sa.Column("timestamp", sa.BigInteger(), nullable=False),
    )
    op.create_table(
        "system_state",
        sa.Column("name", sa.String(length=32), primary_key=True),
        sa.Column("value", sa.BigInteger(), nullable=False, server_default="0"),
    )


def downgrade() -> None:
    op.drop_table("system_state")
    op.drop_table("revocation_logs")
    op.drop_table("role_members")
    op.drop_table("certification_requirements")
    op.drop_table("certifications")
