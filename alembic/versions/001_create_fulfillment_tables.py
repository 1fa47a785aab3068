"""Create orders, returns, warehouses and catalog descriptor tables.

Revision ID: 001
Revises:
Create Date: 2026-10-12

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create fulfillment and directory tables."""
    # Orders table
    op.create_table(
        'orders',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('order_number', sa.String(20), nullable=False, unique=True),
        sa.Column('user_id', sa.String(64), nullable=True, index=True),
        sa.Column('status', sa.String(20), nullable=False, server_default='processing', index=True),
        sa.Column('shipping_full_name', sa.String(255), nullable=False),
        sa.Column('shipping_phone', sa.String(50), nullable=False),
        sa.Column('shipping_address', sa.JSON(), nullable=False),
        sa.Column('billing_address', sa.JSON(), nullable=True),
        sa.Column('items', sa.JSON(), nullable=False),
        sa.Column('total_amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('final_amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('payment_method', sa.String(20), nullable=False, server_default='cod'),
        sa.Column('payment_status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('is_delivered', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('delivered_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('allocated_warehouse_id', sa.String(64), nullable=True, index=True),
        sa.Column('allocated_by', sa.String(64), nullable=True),
        sa.Column('allocated_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('status_history', sa.JSON(), nullable=False),
        sa.Column('version', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, index=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    )

    # Returns table (order_id has no foreign key: deleting an order leaves its returns)
    op.create_table(
        'returns',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('order_id', sa.String(36), nullable=False, index=True),
        sa.Column('user_id', sa.String(64), nullable=True, index=True),
        sa.Column('product_id', sa.String(64), nullable=False, index=True),
        sa.Column('variant_id', sa.String(64), nullable=True),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('price_at_order', sa.Numeric(12, 2), nullable=False),
        sa.Column('reason', sa.Text(), nullable=True),
        sa.Column('comments', sa.Text(), nullable=True),
        sa.Column('refund_amount', sa.Numeric(12, 2), nullable=True),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending', index=True),
        sa.Column('processed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('refund_status', sa.String(20), nullable=False, server_default='pending', index=True),
        sa.Column('refunded_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('pickup_scheduled', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('pickup_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('pickup_status', sa.String(100), nullable=True),
        sa.Column('version', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, index=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    )

    # Warehouse directory
    op.create_table(
        'warehouses',
        sa.Column('id', sa.String(64), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('street', sa.String(255), nullable=True),
        sa.Column('city', sa.String(100), nullable=True),
        sa.Column('state', sa.String(100), nullable=True),
        sa.Column('pin_code', sa.String(20), nullable=True),
        sa.Column('lat', sa.Float(), nullable=True),
        sa.Column('lng', sa.Float(), nullable=True),
        sa.Column('status', sa.String(30), nullable=False, server_default='active'),
    )

    # Catalog descriptors
    op.create_table(
        'catalog_products',
        sa.Column('id', sa.String(64), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('sku', sa.String(100), nullable=True),
    )
    op.create_table(
        'catalog_variants',
        sa.Column('id', sa.String(64), primary_key=True),
        sa.Column('product_id', sa.String(64), nullable=False, index=True),
        sa.Column('sku', sa.String(100), nullable=True),
        sa.Column('attributes', sa.JSON(), nullable=False),
    )


def downgrade() -> None:
    """Drop fulfillment and directory tables."""
    op.drop_table('catalog_variants')
    op.drop_table('catalog_products')
    op.drop_table('warehouses')
    op.drop_table('returns')
    op.drop_table('orders')
