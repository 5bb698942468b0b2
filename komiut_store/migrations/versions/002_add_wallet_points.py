"""add loyalty points to wallets

Revision ID: 002_add_wallet_points
Revises: 001_initial_schema
Create Date: 2025-02-03

"""
from alembic import op
import sqlalchemy as sa


revision = '002_add_wallet_points'
down_revision = '001_initial_schema'
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.add_column('wallets',
        sa.Column('points', sa.Integer(), server_default='0', nullable=False)
    )


def downgrade() -> None:
    with op.batch_alter_table('wallets') as batch_op:
        batch_op.drop_column('points')
