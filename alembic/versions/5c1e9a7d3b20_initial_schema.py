"""initial schema

Revision ID: 5c1e9a7d3b20
Revises: 
Create Date: 2026-10-18 18:40:12.004512

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '5c1e9a7d3b20'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Create products table
    op.create_table(
        'products',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(length=300), nullable=False),
        sa.Column('buy_price', sa.Numeric(10, 2), nullable=False),
        sa.Column('sell_price', sa.Numeric(10, 2), nullable=False),
        sa.Column('stock', sa.Integer(), nullable=False),
        sa.Column('category', sa.String(length=100), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('barcode', sa.String(length=100), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint('buy_price >= 0', name='ck_products_buy_price'),
        sa.CheckConstraint('sell_price >= 0', name='ck_products_sell_price'),
        sa.CheckConstraint('stock >= 0', name='ck_products_stock'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('barcode')
    )
    op.create_index('ix_products_name', 'products', ['name'])
    op.create_index('ix_products_category', 'products', ['category'])
    op.create_index('ix_products_barcode', 'products', ['barcode'], unique=True)
    op.create_index('ix_products_created_at', 'products', ['created_at'])
    op.create_index('ix_products_updated_at', 'products', ['updated_at'])

    # Create sales table
    op.create_table(
        'sales',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('total_amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('total_profit', sa.Numeric(12, 2), nullable=False),
        sa.Column('payment_method', sa.String(length=20), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint('total_amount >= 0', name='ck_sales_total_amount'),
        sa.CheckConstraint('total_profit >= 0', name='ck_sales_total_profit'),
        sa.CheckConstraint("payment_method IN ('cash', 'card', 'transfer')", name='ck_sales_payment_method'),
        sa.CheckConstraint("status IN ('completed', 'refunded')", name='ck_sales_status'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_sales_status', 'sales', ['status'])
    op.create_index('ix_sales_created_at', 'sales', ['created_at'])

    # Create sale_items table
    op.create_table(
        'sale_items',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('sale_id', sa.String(length=36), nullable=False),
        sa.Column('product_id', sa.String(length=36), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('unit_sell_price', sa.Numeric(10, 2), nullable=False),
        sa.Column('unit_buy_price', sa.Numeric(10, 2), nullable=False),
        sa.Column('total_sell_price', sa.Numeric(12, 2), nullable=False),
        sa.Column('item_profit', sa.Numeric(12, 2), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint('quantity > 0', name='ck_sale_items_quantity'),
        sa.CheckConstraint('unit_sell_price >= 0', name='ck_sale_items_unit_sell_price'),
        sa.CheckConstraint('unit_buy_price >= 0', name='ck_sale_items_unit_buy_price'),
        sa.ForeignKeyConstraint(['sale_id'], ['sales.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['product_id'], ['products.id'], ondelete='RESTRICT'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_sale_items_sale_id', 'sale_items', ['sale_id'])
    op.create_index('ix_sale_items_product_id', 'sale_items', ['product_id'])

    # Create customers table
    op.create_table(
        'customers',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('phone', sa.String(length=30), nullable=False),
        sa.Column('email', sa.String(length=100), nullable=True),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('phone')
    )
    op.create_index('ix_customers_phone', 'customers', ['phone'], unique=True)
    op.create_index('ix_customers_created_at', 'customers', ['created_at'])

    # Create services table
    op.create_table(
        'services',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('category', sa.String(length=100), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('price', sa.Numeric(10, 2), nullable=False),
        sa.Column('duration', sa.Integer(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint('price >= 0', name='ck_services_price'),
        sa.CheckConstraint('duration > 0', name='ck_services_duration'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_services_name', 'services', ['name'])
    op.create_index('ix_services_category', 'services', ['category'])
    op.create_index('ix_services_created_at', 'services', ['created_at'])
    op.create_index('ix_services_updated_at', 'services', ['updated_at'])

    # Create service_sales table
    op.create_table(
        'service_sales',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('service_id', sa.String(length=36), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('unit_price', sa.Numeric(10, 2), nullable=False),
        sa.Column('total_amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('served_by', sa.String(length=200), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint('quantity > 0', name='ck_service_sales_quantity'),
        sa.CheckConstraint('unit_price >= 0', name='ck_service_sales_unit_price'),
        sa.ForeignKeyConstraint(['service_id'], ['services.id'], ondelete='RESTRICT'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_service_sales_service_id', 'service_sales', ['service_id'])
    op.create_index('ix_service_sales_created_at', 'service_sales', ['created_at'])

    # Create sync_state table
    op.create_table(
        'sync_state',
        sa.Column('key', sa.String(length=50), nullable=False),
        sa.Column('value', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('key')
    )


def downgrade() -> None:
    op.drop_table('sync_state')
    op.drop_table('service_sales')
    op.drop_table('services')
    op.drop_table('customers')
    op.drop_table('sale_items')
    op.drop_table('sales')
    op.drop_table('products')
