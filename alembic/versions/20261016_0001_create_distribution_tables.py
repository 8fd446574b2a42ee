"""create agents, distributions and tasks tables

Revision ID: 20261016_0001
Revises:
Create Date: 2026-10-16 09:00:00
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "20261016_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "agents",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email", name="uq_agents_email"),
    )
    op.create_index(
        "ix_agents_is_active_created_at",
        "agents",
        ["is_active", "created_at"],
        unique=False,
    )

    op.create_table(
        "distributions",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("filename", sa.String(length=300), nullable=False),
        sa.Column("original_name", sa.String(length=255), nullable=False),
        sa.Column("total_items", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(length=32), nullable=False),
        sa.Column("processing_error", sa.Text(), nullable=True),
        sa.Column("uploaded_by", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("total_agents", sa.Integer(), nullable=True),
        sa.Column("items_per_agent", sa.Integer(), nullable=True),
        sa.Column("remainder_items", sa.Integer(), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_distributions_status", "distributions", ["status"], unique=False)
    op.create_index(
        "ix_distributions_uploaded_by_created_at",
        "distributions",
        ["uploaded_by", "created_at"],
        unique=False,
    )
    op.create_index("ix_distributions_filename", "distributions", ["filename"], unique=False)

    op.create_table(
        "tasks",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("distribution_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("agent_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("first_name", sa.String(length=100), nullable=False),
        sa.Column("phone", sa.String(length=20), nullable=False),
        sa.Column("notes", sa.String(length=1000), nullable=False, server_default=""),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("status", sa.String(length=32), nullable=False),
        sa.Column("assigned_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.ForeignKeyConstraint(["distribution_id"], ["distributions.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["agent_id"], ["agents.id"], ondelete="RESTRICT"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_tasks_agent_id_status", "tasks", ["agent_id", "status"], unique=False)
    op.create_index(
        "ix_tasks_distribution_id_agent_id",
        "tasks",
        ["distribution_id", "agent_id"],
        unique=False,
    )
    op.create_index("ix_tasks_agent_id_assigned_at", "tasks", ["agent_id", "assigned_at"], unique=False)
    op.create_index(
        "ix_tasks_distribution_id_position",
        "tasks",
        ["distribution_id", "position"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index("ix_tasks_distribution_id_position", table_name="tasks")
    op.drop_index("ix_tasks_agent_id_assigned_at", table_name="tasks")
    op.drop_index("ix_tasks_distribution_id_agent_id", table_name="tasks")
    op.drop_index("ix_tasks_agent_id_status", table_name="tasks")
    op.drop_table("tasks")

    op.drop_index("ix_distributions_filename", table_name="distributions")
    op.drop_index("ix_distributions_uploaded_by_created_at", table_name="distributions")
    op.drop_index("ix_distributions_status", table_name="distributions")
    op.drop_table("distributions")

    op.drop_index("ix_agents_is_active_created_at", table_name="agents")
    op.drop_table("agents")
