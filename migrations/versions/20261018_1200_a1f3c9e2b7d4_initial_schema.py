"""Initial storefront schema

Revision ID: a1f3c9e2b7d4
Revises:
Create Date: 2026-10-18 12:00:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = 'a1f3c9e2b7d4'
down_revision = None
branch_labels = None
depends_on = None

ACTIVE_CART_CONDITION = "status = 'ACTIVE' AND dt_deleted IS NULL"


def timestamps():
    return [
        sa.Column('dt_created', sa.DateTime(), nullable=False),
        sa.Column('dt_updated', sa.DateTime(), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('username', sa.String(length=150), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('first_name', sa.String(length=50), nullable=False),
        sa.Column('last_name', sa.String(length=50), nullable=False),
        sa.Column('password', sa.String(length=255), nullable=False),
        *timestamps(),
        sa.Column('dt_deleted', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email'),
    )
    op.create_index('ix_users_username', 'users', ['username'])
    op.create_index('ix_users_dt_deleted', 'users', ['dt_deleted'])
    op.create_index('ix_users_email_deleted', 'users', ['email', 'dt_deleted'])

    op.create_table(
        'profiles',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('bio', sa.Text(), nullable=True),
        sa.Column('birth_date', sa.Date(), nullable=True),
        sa.Column('phone', sa.String(length=20), nullable=True),
        sa.Column('document', sa.String(length=20), nullable=True),
        sa.Column('profession', sa.String(length=100), nullable=True),
        sa.Column('avatar', sa.String(length=500), nullable=True),
        sa.Column('confirm_email', sa.Boolean(), nullable=False),
        sa.Column('unsubscribe', sa.Boolean(), nullable=False),
        sa.Column('access_level', sa.String(length=50), nullable=False),
        *timestamps(),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id'),
    )

    op.create_table(
        'user_tokens',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('code', sa.String(length=64), nullable=False),
        sa.Column('token_type', sa.String(length=32), nullable=False),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
        sa.Column('consumed', sa.Boolean(), nullable=False),
        sa.Column('dt_created', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('code'),
    )
    op.create_index('ix_user_tokens_user_id', 'user_tokens', ['user_id'])
    op.create_index('ix_user_tokens_code_type', 'user_tokens', ['code', 'token_type'])

    op.create_table(
        'tenants',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=True),
        sa.Column('tenant_type', sa.String(length=50), nullable=False),
        *timestamps(),
        sa.Column('dt_deleted', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_tenants_user_id', 'tenants', ['user_id'])
    op.create_index('ix_tenants_dt_deleted', 'tenants', ['dt_deleted'])

    op.create_table(
        'tenant_users',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('tenant_id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        *timestamps(),
        sa.ForeignKeyConstraint(['tenant_id'], ['tenants.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('tenant_id', 'user_id', name='uq_tenant_users_tenant_user'),
    )
    op.create_index('ix_tenant_users_tenant_id', 'tenant_users', ['tenant_id'])
    op.create_index('ix_tenant_users_user_id', 'tenant_users', ['user_id'])

    op.create_table(
        'products',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('tenant_id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('slug', sa.String(length=255), nullable=False),
        sa.Column('short_description', sa.String(length=500), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('price_cents', sa.Integer(), nullable=False),
        sa.Column('stock_quantity', sa.Integer(), nullable=False),
        sa.Column('attributes', postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        *timestamps(),
        sa.Column('dt_deleted', sa.DateTime(), nullable=True),
        sa.CheckConstraint('price_cents >= 0', name='ck_products_price_non_negative'),
        sa.CheckConstraint('stock_quantity >= 0', name='ck_products_stock_non_negative'),
        sa.ForeignKeyConstraint(['tenant_id'], ['tenants.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_products_tenant_id', 'products', ['tenant_id'])
    op.create_index('ix_products_dt_deleted', 'products', ['dt_deleted'])
    op.create_index('ix_products_tenant_created', 'products', ['tenant_id', 'dt_created'])

    op.create_table(
        'carts',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('tenant_id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column(
            'status',
            sa.Enum('ACTIVE', 'CHECKOUT_IN_PROGRESS', 'CONVERTED_TO_ORDER', 'ABANDONED', 'CANCELLED',
                    name='cart_status'),
            nullable=False,
        ),
        sa.Column('currency', sa.String(length=3), nullable=False),
        sa.Column('subtotal_cents', sa.Integer(), nullable=False),
        sa.Column('discount_total_cents', sa.Integer(), nullable=False),
        sa.Column('tax_total_cents', sa.Integer(), nullable=False),
        sa.Column('shipping_total_cents', sa.Integer(), nullable=False),
        sa.Column('grand_total_cents', sa.Integer(), nullable=False),
        sa.Column('version', sa.Integer(), nullable=False),
        sa.Column('expires_at', sa.DateTime(), nullable=True),
        *timestamps(),
        sa.Column('dt_deleted', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['tenant_id'], ['tenants.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_carts_tenant_id', 'carts', ['tenant_id'])
    op.create_index('ix_carts_user_id', 'carts', ['user_id'])
    op.create_index('ix_carts_dt_deleted', 'carts', ['dt_deleted'])
    op.create_index('ix_carts_tenant_status', 'carts', ['tenant_id', 'status'])
    op.create_index('uq_carts_tenant_active', 'carts', ['tenant_id'], unique=True,
                    postgresql_where=sa.text(ACTIVE_CART_CONDITION),
                    sqlite_where=sa.text(ACTIVE_CART_CONDITION))

    op.create_table(
        'cart_items',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('cart_id', sa.Uuid(), nullable=False),
        sa.Column('product_id', sa.Uuid(), nullable=False),
        sa.Column('variant_id', sa.Uuid(), nullable=True),
        sa.Column('unit_price_cents', sa.Integer(), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('line_discount_total_cents', sa.Integer(), nullable=False),
        sa.Column('line_tax_total_cents', sa.Integer(), nullable=False),
        sa.Column('line_total_cents', sa.Integer(), nullable=False),
        sa.Column('attributes_snapshot', postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column('attributes_hash', sa.String(length=64), nullable=False),
        *timestamps(),
        sa.Column('dt_deleted', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['cart_id'], ['carts.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['product_id'], ['products.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_cart_items_cart_id', 'cart_items', ['cart_id'])
    op.create_index('ix_cart_items_product_id', 'cart_items', ['product_id'])
    op.create_index('ix_cart_items_dt_deleted', 'cart_items', ['dt_deleted'])
    op.create_index('ix_cart_items_key', 'cart_items',
                    ['cart_id', 'product_id', 'variant_id', 'attributes_hash'])

    op.create_table(
        'orchestrators',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('app_name', sa.String(length=100), nullable=False),
        sa.Column('app_url', sa.String(length=500), nullable=False),
        sa.Column('app_token', sa.Uuid(), nullable=False),
        *timestamps(),
        sa.Column('dt_deleted', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('app_token'),
    )
    op.create_index('ix_orchestrators_app_name', 'orchestrators', ['app_name'])
    op.create_index('ix_orchestrators_dt_deleted', 'orchestrators', ['dt_deleted'])


def downgrade() -> None:
    op.drop_table('orchestrators')
    op.drop_table('cart_items')
    op.drop_table('carts')
    sa.Enum(name='cart_status').drop(op.get_bind(), checkfirst=True)
    op.drop_table('products')
    op.drop_table('tenant_users')
    op.drop_table('tenants')
    op.drop_table('user_tokens')
    op.drop_table('profiles')
    op.drop_table('users')
