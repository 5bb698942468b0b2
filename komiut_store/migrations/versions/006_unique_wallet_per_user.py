"""one wallet per user

Revision ID: 006_unique_wallet_per_user
Revises: 005_add_user_profile_image
Create Date: 2025-05-19

"""
from alembic import op


revision = '006_unique_wallet_per_user'
down_revision = '005_add_user_profile_image'
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Fails if a store already holds two wallets for the same user
    op.create_index('uq_wallets_user_id', 'wallets', ['user_id'], unique=True)


def downgrade() -> None:
    op.drop_index('uq_wallets_user_id', table_name='wallets')
