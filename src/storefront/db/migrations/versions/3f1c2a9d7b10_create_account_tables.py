"""Create users, addresses and shops tables

Revision ID: 3f1c2a9d7b10
Revises:
Create Date: 2026-10-19 09:12:44.118204
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f1c2a9d7b10'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password', sa.String(length=255), nullable=False),
        sa.Column('phone_number', sa.String(length=30), nullable=True),
        sa.Column('role', sa.String(length=30), nullable=False),
        sa.Column('avatar', sa.String(length=500), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('reset_password_token', sa.String(length=255), nullable=True),
        sa.Column('reset_password_time', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email'),
    )
    op.create_table(
        'addresses',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.Column('country', sa.String(length=100), nullable=True),
        sa.Column('city', sa.String(length=100), nullable=True),
        sa.Column('address1', sa.String(length=255), nullable=True),
        sa.Column('address2', sa.String(length=255), nullable=True),
        sa.Column('zip_code', sa.String(length=20), nullable=True),
        sa.Column('address_type', sa.String(length=30), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('idx_addresses_user', 'addresses', ['user_id', 'position'])
    op.create_table(
        'shops',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('address', sa.Text(), nullable=False),
        sa.Column('phone_number', sa.String(length=30), nullable=False),
        sa.Column('role', sa.String(length=30), nullable=False),
        sa.Column('avatar', sa.String(length=500), nullable=False),
        sa.Column('zip_code', sa.String(length=20), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('reset_password_token', sa.String(length=255), nullable=True),
        sa.Column('reset_password_time', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email'),
    )


def downgrade() -> None:
    op.drop_table('shops')
    op.drop_index('idx_addresses_user', table_name='addresses')
    op.drop_table('addresses')
    op.drop_table('users')
