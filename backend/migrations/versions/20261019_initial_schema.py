"""Initial schema: catalog, stock ledger, orders, receipts, cash drawer, print queue

Revision ID: 20261019_initial
Revises:
Create Date: 2026-10-19

This migration creates:
1. designs, items (version-counted), stock_movements
2. orders (store adjustments and customer orders)
3. receipts, receipt_lines, receipt_payments, reference_sequences
4. cash_entries, cash_drawer_balances, drawer_open_events
5. print_jobs
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '20261019_initial'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]


def upgrade():
    # ==========================================================================
    # 1. CATALOG AND STOCK
    # ==========================================================================
    op.create_table('designs',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('code', sa.String(length=64), nullable=False),
        sa.Column('type_tags', sa.JSON(), nullable=False),
        sa.Column('purchase_price_cents', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('sale_price_cents', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('fabric', sa.String(length=255), nullable=True),
        sa.Column('fabric_list', sa.JSON(), nullable=False),
        sa.Column('colors', sa.JSON(), nullable=False),
        sa.Column('sizes', sa.JSON(), nullable=False),
        sa.Column('hot', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('remark', sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True,
    )
    op.create_index('ix_designs_code', 'designs', ['code'], unique=True)

    op.create_table('items',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('design_id', sa.Integer(), nullable=False),
        sa.Column('warehouse', sa.String(length=16), nullable=False),
        sa.Column('color', sa.String(length=64), nullable=False),
        sa.Column('size', sa.String(length=32), nullable=False),
        sa.Column('stock', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('version_id', sa.Integer(), nullable=False, server_default='1'),
        *_timestamps(),
        sa.CheckConstraint('stock >= 0', name='ck_items_stock_non_negative'),
        sa.ForeignKeyConstraint(['design_id'], ['designs.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('design_id', 'warehouse', 'color', 'size', name='uq_items_design_wh_color_size'),
        sqlite_autoincrement=True,
    )
    op.create_index('ix_items_design_id', 'items', ['design_id'])
    op.create_index('ix_items_design_warehouse', 'items', ['design_id', 'warehouse'])

    op.create_table('stock_movements',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('item_id', sa.Integer(), nullable=False),
        sa.Column('kind', sa.String(length=16), nullable=False),
        sa.Column('delta', sa.Integer(), nullable=False),
        sa.Column('stock_after', sa.Integer(), nullable=False),
        sa.Column('order_id', sa.Integer(), nullable=True),
        sa.Column('note', sa.String(length=255), nullable=True),
        sa.Column('occurred_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['item_id'], ['items.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True,
    )
    op.create_index('ix_stock_movements_item_id', 'stock_movements', ['item_id'])
    op.create_index('ix_stock_movements_order_id', 'stock_movements', ['order_id'])
    op.create_index('ix_stock_movements_item_occurred', 'stock_movements', ['item_id', 'occurred_at'])

    # ==========================================================================
    # 2. ORDERS
    # ==========================================================================
    op.create_table('orders',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('item_id', sa.Integer(), nullable=False),
        sa.Column('kind', sa.String(length=16), nullable=False, server_default='STORE'),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('remark', sa.String(length=255), nullable=True),
        sa.Column('status', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('pending_date', sa.Date(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint('quantity > 0', name='ck_orders_quantity_positive'),
        sa.ForeignKeyConstraint(['item_id'], ['items.id']),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True,
    )
    op.create_index('ix_orders_item_id', 'orders', ['item_id'])
    op.create_index('ix_orders_status', 'orders', ['status'])
    op.create_index('ix_orders_created_at', 'orders', ['created_at'])
    op.create_index('ix_orders_status_created', 'orders', ['status', 'created_at'])

    # ==========================================================================
    # 3. RECEIPTS
    # ==========================================================================
    op.create_table('receipts',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('store', sa.Integer(), nullable=False),
        sa.Column('cashier', sa.String(length=64), nullable=False),
        sa.Column('ref_no', sa.String(length=32), nullable=False),
        sa.Column('total_cents', sa.Integer(), nullable=False),
        sa.Column('gst_cents', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('voided', sa.Boolean(), nullable=False, server_default='0'),
        sa.Column('voided_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('reprint_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('store', 'ref_no', name='uq_receipts_store_ref_no'),
        sqlite_autoincrement=True,
    )
    op.create_index('ix_receipts_store', 'receipts', ['store'])
    op.create_index('ix_receipts_created_at', 'receipts', ['created_at'])
    op.create_index('ix_receipts_store_voided_created', 'receipts', ['store', 'voided', 'created_at'])

    op.create_table('receipt_lines',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('receipt_id', sa.Integer(), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.Column('code', sa.String(length=64), nullable=False),
        sa.Column('qty', sa.Integer(), nullable=False),
        sa.Column('unit_price_cents', sa.Integer(), nullable=False),
        sa.Column('discount_percent_bps', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('discount_cents', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('final_price_cents', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['receipt_id'], ['receipts.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True,
    )
    op.create_index('ix_receipt_lines_receipt_id', 'receipt_lines', ['receipt_id'])

    op.create_table('receipt_payments',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('receipt_id', sa.Integer(), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.Column('method', sa.String(length=64), nullable=False),
        sa.Column('amount_cents', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['receipt_id'], ['receipts.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True,
    )
    op.create_index('ix_receipt_payments_receipt_id', 'receipt_payments', ['receipt_id'])
    op.create_index('ix_receipt_payments_method', 'receipt_payments', ['method'])

    op.create_table('reference_sequences',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('store', sa.Integer(), nullable=False),
        sa.Column('document_type', sa.String(length=32), nullable=False),
        sa.Column('next_number', sa.Integer(), nullable=False, server_default='1'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('store', 'document_type', name='uq_reference_sequences_store_type'),
        sqlite_autoincrement=True,
    )

    # ==========================================================================
    # 4. CASH DRAWER
    # ==========================================================================
    op.create_table('cash_entries',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('store', sa.Integer(), nullable=False),
        sa.Column('type', sa.Integer(), nullable=False),
        sa.Column('amount_cents', sa.Integer(), nullable=False),
        sa.Column('remark', sa.String(length=255), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint('amount_cents > 0', name='ck_cash_entries_amount_positive'),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True,
    )
    op.create_index('ix_cash_entries_store_created', 'cash_entries', ['store', 'created_at'])

    op.create_table('cash_drawer_balances',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('store', sa.Integer(), nullable=False),
        sa.Column('type', sa.Integer(), nullable=False),
        sa.Column('amount_cents', sa.Integer(), nullable=False),
        sa.Column('business_date', sa.Date(), nullable=False),
        sa.Column('remark', sa.String(length=255), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint('amount_cents >= 0', name='ck_cash_drawer_balances_amount_non_negative'),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True,
    )
    op.create_index('ix_cash_drawer_balances_store_date', 'cash_drawer_balances', ['store', 'business_date'])

    op.create_table('drawer_open_events',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('store', sa.Integer(), nullable=False),
        sa.Column('reason', sa.String(length=255), nullable=True),
        sa.Column('occurred_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True,
    )
    op.create_index('ix_drawer_open_events_store', 'drawer_open_events', ['store'])

    # ==========================================================================
    # 5. PRINT QUEUE
    # ==========================================================================
    op.create_table('print_jobs',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('store', sa.Integer(), nullable=False),
        sa.Column('kind', sa.String(length=16), nullable=False),
        sa.Column('status', sa.String(length=16), nullable=False, server_default='QUEUED'),
        sa.Column('receipt_id', sa.Integer(), nullable=True),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True,
    )
    op.create_index('ix_print_jobs_receipt_id', 'print_jobs', ['receipt_id'])
    op.create_index('ix_print_jobs_store_status', 'print_jobs', ['store', 'status'])


def downgrade():
    op.drop_table('print_jobs')
    op.drop_table('drawer_open_events')
    op.drop_table('cash_drawer_balances')
    op.drop_table('cash_entries')
    op.drop_table('reference_sequences')
    op.drop_table('receipt_payments')
    op.drop_table('receipt_lines')
    op.drop_table('receipts')
    op.drop_table('orders')
    op.drop_table('stock_movements')
    op.drop_table('items')
    op.drop_table('designs')
