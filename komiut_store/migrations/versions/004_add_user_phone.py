"""add phone to users

Revision ID: 004_add_user_phone
Revises: 003_add_bus_routes_tables
Create Date: 2025-03-14

"""
from alembic import op
import sqlalchemy as sa


revision = '004_add_user_phone'
down_revision = '003_add_bus_routes_tables'
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.add_column('users', sa.Column('phone', sa.Text(), nullable=True))


def downgrade() -> None:
    with op.batch_alter_table('users') as batch_op:
        batch_op.drop_column('phone')
