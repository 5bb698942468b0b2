"""Add bus routes and favorite routes tables

Revision ID: 003_add_bus_routes_tables
Revises: 002_add_wallet_points
Create Date: 2025-02-20 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "003_add_bus_routes_tables"
down_revision: Union[str, None] = "002_add_wallet_points"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "bus_routes",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("start_point", sa.Text(), nullable=False),
        sa.Column("end_point", sa.Text(), nullable=False),
        sa.Column("stops_count", sa.Integer(), nullable=False),
        sa.Column("duration_minutes", sa.Integer(), nullable=False),
        sa.Column("base_fare", sa.Float(), nullable=False),
        sa.Column("fare_per_stop", sa.Float(), server_default="5.0", nullable=False),
        sa.Column("currency", sa.Text(), server_default="KES", nullable=False),
        sa.Column("stops", sa.JSON(), nullable=False),
        sa.Column("is_active", sa.Boolean(), server_default=sa.text("1"), nullable=False),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
        sqlite_autoincrement=True,
    )

    op.create_table(
        "favorite_routes",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("route_id", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["route_id"], ["bus_routes.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "route_id", name="uq_favorite_user_route"),
        sqlite_autoincrement=True,
    )
    op.create_index("idx_favorite_routes_user", "favorite_routes", ["user_id"])


def downgrade() -> None:
    op.drop_index("idx_favorite_routes_user", table_name="favorite_routes")
    op.drop_table("favorite_routes")
    op.drop_table("bus_routes")
