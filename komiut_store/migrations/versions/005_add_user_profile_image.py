"""add profile image path to users

Revision ID: 005_add_user_profile_image
Revises: 004_add_user_phone
Create Date: 2025-04-02

"""
from alembic import op
import sqlalchemy as sa


revision = '005_add_user_profile_image'
down_revision = '004_add_user_phone'
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.add_column('users', sa.Column('profile_image', sa.Text(), nullable=True))


def downgrade() -> None:
    with op.batch_alter_table('users') as batch_op:
        batch_op.drop_column('profile_image')
