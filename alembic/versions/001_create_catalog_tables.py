"""Create catalog and stock ledger tables.

Revision ID: 001
Revises:
Create Date: 2026-10-18

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
    """Create products, colors, sizes, product_variants and stock_imports tables."""
    # Products table
    op.create_table(
        'products',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('base_price', sa.Integer(), nullable=False),
        sa.Column('category_id', sa.Integer(), nullable=True, index=True),
        sa.Column('image_url', sa.String(1000), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true', index=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.CheckConstraint('base_price >= 0', name='ck_products_base_price'),
    )

    # Lookup tables
    op.create_table(
        'colors',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(50), nullable=False, unique=True),
        sa.Column('hex_code', sa.String(7), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
    )
    op.create_table(
        'sizes',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('value', sa.String(10), nullable=False, unique=True),
        sa.Column('size_system', sa.String(20), nullable=False, server_default='US'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
    )

    # Product variants table
    op.create_table(
        'product_variants',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('product_id', sa.Integer(),
                  sa.ForeignKey('products.id', ondelete='RESTRICT'), nullable=False, index=True),
        sa.Column('color_id', sa.Integer(),
                  sa.ForeignKey('colors.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('size_id', sa.Integer(),
                  sa.ForeignKey('sizes.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('sku', sa.String(50), nullable=False, unique=True),
        sa.Column('price', sa.Integer(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true', index=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.CheckConstraint('price IS NULL OR price >= 0', name='ck_variants_price'),
    )

    # One active variant per (product, color, size)
    op.create_index(
        'uq_variants_active_triple',
        'product_variants',
        ['product_id', 'color_id', 'size_id'],
        unique=True,
        postgresql_where=sa.text('is_active'),
    )

    # Stock ledger (append-only)
    op.create_table(
        'stock_imports',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('variant_id', sa.Integer(),
                  sa.ForeignKey('product_variants.id', ondelete='RESTRICT'), nullable=False, index=True),
        sa.Column('operator_id', sa.String(64), nullable=False, index=True),
        sa.Column('kind', sa.String(20), nullable=False, server_default='import'),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('unit_cost', sa.Integer(), nullable=True),
        sa.Column('note', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text('now()'), index=True),
        sa.CheckConstraint(
            "(kind = 'import' AND quantity > 0 AND unit_cost >= 0) "
            "OR (kind = 'adjustment' AND quantity <> 0)",
            name='ck_stock_imports_quantity',
        ),
    )


def downgrade() -> None:
    """Drop catalog and stock ledger tables."""
    op.drop_table('stock_imports')
    op.drop_index('uq_variants_active_triple', table_name='product_variants')
    op.drop_table('product_variants')
    op.drop_table('sizes')
    op.drop_table('colors')
    op.drop_table('products')
