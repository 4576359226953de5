"""Initial accounts schema

Revision ID: 001
Revises:
Create Date: 2026-10-17

WHAT: Creates users, products, bought_products and verification_codes.

WHY: Accounts, their purchases and the short-lived codes that confirm
registration and email changes are the whole persistent state of the
accounts service.

HOW:
- users.email is unique; the index is the final guard against two
  accounts claiming one address
- bought_products rows cascade with their user and product
- verification_codes are keyed by email, indexed for the active-code lookup
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


auth_provider_enum = sa.Enum('local', 'google', 'facebook', name='authprovider')
verification_purpose_enum = sa.Enum('registration', 'email_change', name='verificationpurpose')


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        # NULL for accounts that only sign in through Google or Facebook
        sa.Column('hashed_password', sa.String(length=255), nullable=True),
        sa.Column('avatar_url', sa.String(length=512), nullable=True),
        sa.Column('auth_provider', auth_provider_enum, nullable=False, server_default='local'),
        sa.Column('is_admin', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_users_id'), 'users', ['id'], unique=False)
    op.create_index(op.f('ix_users_email'), 'users', ['email'], unique=True)

    op.create_table(
        'products',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('price', sa.Numeric(precision=10, scale=2), nullable=False, server_default='0'),
        sa.Column('material_url', sa.String(length=512), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_products_id'), 'products', ['id'], unique=False)

    op.create_table(
        'bought_products',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('product_id', sa.Integer(), nullable=False),
        sa.Column('bought_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['product_id'], ['products.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_bought_products_id'), 'bought_products', ['id'], unique=False)
    op.create_index(op.f('ix_bought_products_user_id'), 'bought_products', ['user_id'], unique=False)
    op.create_index(op.f('ix_bought_products_product_id'), 'bought_products', ['product_id'], unique=False)

    op.create_table(
        'verification_codes',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('code', sa.String(length=6), nullable=False),
        sa.Column('purpose', verification_purpose_enum, nullable=False),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
        sa.Column('is_used', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_verification_codes_id'), 'verification_codes', ['id'], unique=False)
    op.create_index(op.f('ix_verification_codes_email'), 'verification_codes', ['email'], unique=False)
    op.create_index(
        'ix_verification_codes_email_used_expires',
        'verification_codes',
        ['email', 'is_used', 'expires_at'],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index('ix_verification_codes_email_used_expires', table_name='verification_codes')
    op.drop_index(op.f('ix_verification_codes_email'), table_name='verification_codes')
    op.drop_index(op.f('ix_verification_codes_id'), table_name='verification_codes')
    op.drop_table('verification_codes')

    op.drop_index(op.f('ix_bought_products_product_id'), table_name='bought_products')
    op.drop_index(op.f('ix_bought_products_user_id'), table_name='bought_products')
    op.drop_index(op.f('ix_bought_products_id'), table_name='bought_products')
    op.drop_table('bought_products')

    op.drop_index(op.f('ix_products_id'), table_name='products')
    op.drop_table('products')

    op.drop_index(op.f('ix_users_email'), table_name='users')
    op.drop_index(op.f('ix_users_id'), table_name='users')
    op.drop_table('users')

    # Enum types are standalone objects in PostgreSQL
    bind = op.get_bind()
    verification_purpose_enum.drop(bind, checkfirst=True)
    auth_provider_enum.drop(bind, checkfirst=True)
