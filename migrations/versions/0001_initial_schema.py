"""initial schema: users, subscriptions, charts, data points

Revision ID: 0001
Revises:
Create Date: 2026-10-19
"""
from alembic import op
import sqlalchemy as sa

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None

PK = sa.BigInteger().with_variant(sa.Integer(), "sqlite")


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", PK, autoincrement=True, nullable=False),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("password_hash", sa.String(), nullable=False),
        sa.Column("is_active", sa.Boolean(), server_default=sa.text("true"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_users"),
        sa.UniqueConstraint("email", name="uq_users_email"),
    )

    op.create_table(
        "subscriptions",
        sa.Column("id", PK, autoincrement=True, nullable=False),
        sa.Column("user_id", sa.BigInteger(), nullable=False),
        sa.Column("tier", sa.String(), nullable=False),
        sa.Column("status", sa.String(), nullable=False),
        sa.Column("started_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("ends_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(
            ["user_id"], ["users.id"],
            name="fk_subscriptions_user_id_users", ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_subscriptions"),
        sa.UniqueConstraint("user_id", name="uq_subscriptions_user_id"),
    )

    op.create_table(
        "charts",
        sa.Column("id", PK, autoincrement=True, nullable=False),
        sa.Column("user_id", sa.BigInteger(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("category", sa.String(length=100), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(
            ["user_id"], ["users.id"],
            name="fk_charts_user_id_users", ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_charts"),
    )
    op.create_index("idx_charts_user_updated", "charts", ["user_id", "updated_at"])
    op.create_index("idx_charts_user_category", "charts", ["user_id", "category"])

    op.create_table(
        "data_points",
        sa.Column("id", PK, autoincrement=True, nullable=False),
        sa.Column("chart_id", sa.BigInteger(), nullable=False),
        sa.Column("measurement", sa.Float(), nullable=False),
        sa.Column("date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(
            ["chart_id"], ["charts.id"],
            name="fk_data_points_chart_id_charts", ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_data_points"),
    )
    op.create_index("idx_data_points_chart_date", "data_points", ["chart_id", "date"])


def downgrade() -> None:
    op.drop_index("idx_data_points_chart_date", table_name="data_points")
    op.drop_table("data_points")
    op.drop_index("idx_charts_user_category", table_name="charts")
    op.drop_index("idx_charts_user_updated", table_name="charts")
    op.drop_table("charts")
    op.drop_table("subscriptions")
    op.drop_table("users")
