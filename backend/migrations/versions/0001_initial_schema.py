"""initial schema

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-19 00:00:00.000000

Creates the channel stock schema:
- products: product master with the warehouse pool and one pool per channel
- activity_logs: append-only human-readable activity history
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '0001_initial_schema'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():

    # ============================================================================
    # products: product master and stock pools
    # ============================================================================
    op.create_table(
        'products',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('product_code', sa.String(length=64), nullable=False),
        sa.Column('price', sa.Integer(), nullable=False),
        sa.Column('total_stock', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('tiktok_stock', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('shopee_stock', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('toko_stock', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('color', sa.String(length=32), nullable=False),
        sa.Column('version_id', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.CheckConstraint('price >= 0', name='ck_products_price_nonneg'),
        sa.CheckConstraint('total_stock >= 0', name='ck_products_total_stock_nonneg'),
        sa.CheckConstraint('tiktok_stock >= 0', name='ck_products_tiktok_stock_nonneg'),
        sa.CheckConstraint('shopee_stock >= 0', name='ck_products_shopee_stock_nonneg'),
        sa.CheckConstraint('toko_stock >= 0', name='ck_products_toko_stock_nonneg'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('product_code'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_products_created_at', 'products', ['created_at'])

    # ============================================================================
    # activity_logs: newest-first activity history
    # ============================================================================
    op.create_table(
        'activity_logs',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('action', sa.String(length=64), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_activity_logs_created_at', 'activity_logs', ['created_at'])


def downgrade():
    """Drop all tables (destructive operation)."""
    op.drop_index('ix_activity_logs_created_at', table_name='activity_logs')
    op.drop_table('activity_logs')
    op.drop_index('ix_products_created_at', table_name='products')
    op.drop_table('products')
