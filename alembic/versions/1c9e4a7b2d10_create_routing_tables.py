"""create sales_reps, routing_rules, percentage_allocations, routing_logs

Revision ID: 1c9e4a7b2d10
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "1c9e4a7b2d10"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "sales_reps",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False, unique=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.func.now()
        ),
        sa.Column(
            "updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()
        ),
    )

    op.create_table(
        "routing_rules",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("scope", sa.String(length=20), nullable=False),
        sa.Column("match_value", sa.String(length=100), nullable=False),
        sa.Column("status", sa.String(length=50), nullable=True),
        sa.Column(
            "sales_rep_id",
            sa.Uuid(),
            sa.ForeignKey("sales_reps.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.CheckConstraint(
            "scope IN ('source', 'city')", name="ck_routing_rule_scope"
        ),
        sa.CheckConstraint(
            "match_value = lower(match_value)", name="ck_routing_rule_value_lower"
        ),
    )
    op.create_index(
        "ix_routing_rules_scope_value", "routing_rules", ["scope", "match_value"]
    )

    op.create_table(
        "percentage_allocations",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column(
            "sales_rep_id",
            sa.Uuid(),
            sa.ForeignKey("sales_reps.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("percentage", sa.Float(), nullable=False, server_default="0"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.CheckConstraint("percentage >= 0", name="ck_allocation_percentage_nonneg"),
    )

    op.create_table(
        "routing_logs",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("lead_email", sa.String(length=255)),
        sa.Column("lead_city", sa.String(length=100)),
        sa.Column("lead_source", sa.String(length=100)),
        sa.Column("lead_status", sa.String(length=50)),
        sa.Column(
            "assigned_sales_rep_id",
            sa.Uuid(),
            sa.ForeignKey("sales_reps.id", ondelete="SET NULL"),
        ),
        sa.Column("routing_method", sa.String(length=20), nullable=False),
        sa.Column(
            "routing_criteria",
            sa.JSON().with_variant(postgresql.JSONB(), "postgresql"),
        ),
        sa.Column("random_value", sa.Float()),
        sa.CheckConstraint(
            "routing_method IN ('source', 'city', 'percentage')",
            name="ck_routing_log_method",
        ),
    )
    op.create_index("ix_routing_logs_created_at", "routing_logs", ["created_at"])


def downgrade() -> None:
    op.drop_index("ix_routing_logs_created_at", table_name="routing_logs")
    op.drop_table("routing_logs")
    op.drop_table("percentage_allocations")
    op.drop_index("ix_routing_rules_scope_value", table_name="routing_rules")
    op.drop_table("routing_rules")
    op.drop_table("sales_reps")
