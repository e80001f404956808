"""Initial schema - order blocking tables

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001_initial_schema'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'platform_inventory',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('created_at', sa.TIMESTAMP(timezone=False), nullable=False),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=False), nullable=False),
        sa.Column('product_id', sa.String(), nullable=False),
        sa.Column('platform', sa.String(), nullable=False),
        sa.Column('stock_quantity', sa.Integer(), nullable=False),
        sa.Column('reserved_quantity', sa.Integer(), nullable=False),
        sa.Column('available_quantity', sa.Integer(), nullable=False),
        sa.Column('last_synced_at', sa.TIMESTAMP(timezone=False), nullable=True),
        sa.Column('sync_status', sa.String(), nullable=False),
        sa.Column('is_order_blocked', sa.Boolean(), nullable=False),
        sa.Column('order_block_reason', sa.String(), nullable=True),
        sa.Column('order_block_date', sa.TIMESTAMP(timezone=False), nullable=True),
        sa.Column('auto_unblock_date', sa.TIMESTAMP(timezone=False), nullable=True),
        sa.UniqueConstraint('product_id', 'platform', name='uq_platform_inventory_product_platform'),
        sa.CheckConstraint('available_quantity >= 0', name='ck_platform_inventory_available_nonneg'),
        sa.CheckConstraint('reserved_quantity >= 0', name='ck_platform_inventory_reserved_nonneg'),
    )
    op.create_index('ix_platform_inventory_product_id', 'platform_inventory', ['product_id'])
    op.create_index('ix_platform_inventory_platform', 'platform_inventory', ['platform'])
    op.create_index('ix_platform_inventory_is_order_blocked', 'platform_inventory', ['is_order_blocked'])
    op.create_index('ix_platform_inventory_auto_unblock_date', 'platform_inventory', ['auto_unblock_date'])

    op.create_table(
        'inventory_transactions',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('product_id', sa.String(), nullable=False),
        sa.Column('platform', sa.String(), nullable=False),
        sa.Column('transaction_type', sa.String(), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('previous_stock', sa.Integer(), nullable=False),
        sa.Column('new_stock', sa.Integer(), nullable=False),
        sa.Column('reference_id', sa.String(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.TIMESTAMP(timezone=False), nullable=False),
    )
    op.create_index('ix_inventory_transactions_product_id', 'inventory_transactions', ['product_id'])
    op.create_index('ix_inventory_transactions_platform', 'inventory_transactions', ['platform'])
    op.create_index('ix_inventory_transactions_transaction_type', 'inventory_transactions', ['transaction_type'])
    op.create_index('ix_inventory_transactions_reference_id', 'inventory_transactions', ['reference_id'])
    op.create_index('ix_inventory_transactions_created_at', 'inventory_transactions', ['created_at'])

    op.create_table(
        'order_blocks',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('product_id', sa.String(), nullable=False),
        sa.Column('platform', sa.String(), nullable=False),
        sa.Column('block_type', sa.String(), nullable=False),
        sa.Column('reason', sa.String(), nullable=False),
        sa.Column('custom_reason', sa.Text(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_by', sa.String(), nullable=True),
        sa.Column('block_date', sa.TIMESTAMP(timezone=False), nullable=False),
        sa.Column('scheduled_unblock_date', sa.TIMESTAMP(timezone=False), nullable=True),
        sa.Column('unblock_date', sa.TIMESTAMP(timezone=False), nullable=True),
        sa.Column('unblock_reason', sa.Text(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
    )
    op.create_index('ix_order_blocks_product_id', 'order_blocks', ['product_id'])
    op.create_index('ix_order_blocks_platform', 'order_blocks', ['platform'])
    op.create_index('ix_order_blocks_is_active', 'order_blocks', ['is_active'])
    # Storage-level backstop for the one-active-block-per-pair rule
    op.create_index(
        'uq_order_blocks_one_active',
        'order_blocks',
        ['product_id', 'platform'],
        unique=True,
        postgresql_where=sa.text('is_active'),
    )

    op.create_table(
        'order_management',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('order_id', sa.String(), nullable=False),
        sa.Column('customer_id', sa.String(), nullable=True),
        sa.Column('product_id', sa.String(), nullable=False),
        sa.Column('platform', sa.String(), nullable=False),
        sa.Column('quantity_requested', sa.Integer(), nullable=False),
        sa.Column('quantity_available', sa.Integer(), nullable=False),
        sa.Column('quantity_fulfilled', sa.Integer(), nullable=False),
        sa.Column('order_status', sa.String(), nullable=False),
        sa.Column('block_reason', sa.Text(), nullable=True),
        sa.Column('created_at', sa.TIMESTAMP(timezone=False), nullable=False),
    )
    op.create_index('ix_order_management_order_id', 'order_management', ['order_id'])
    op.create_index('ix_order_management_customer_id', 'order_management', ['customer_id'])
    op.create_index('ix_order_management_product_id', 'order_management', ['product_id'])
    op.create_index('ix_order_management_platform', 'order_management', ['platform'])
    op.create_index('ix_order_management_order_status', 'order_management', ['order_status'])
    op.create_index('ix_order_management_created_at', 'order_management', ['created_at'])

    op.create_table(
        'platform_integrations',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('platform', sa.String(), nullable=False),
        sa.Column('is_connected', sa.Boolean(), nullable=False),
        sa.Column('auto_block_low_stock', sa.Boolean(), nullable=False),
        sa.Column('low_stock_threshold', sa.Integer(), nullable=False),
        sa.Column('auto_block_out_of_stock', sa.Boolean(), nullable=False),
        sa.Column('allow_backorders', sa.Boolean(), nullable=False),
        sa.Column('backorder_max_quantity', sa.Integer(), nullable=False),
        sa.Column('notify_on_order_block', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.TIMESTAMP(timezone=False), nullable=False),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=False), nullable=False),
    )
    op.create_index('ix_platform_integrations_platform', 'platform_integrations', ['platform'], unique=True)

    op.create_table(
        'inventory_alerts',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('product_id', sa.String(), nullable=False),
        sa.Column('platform', sa.String(), nullable=False),
        sa.Column('alert_type', sa.String(), nullable=False),
        sa.Column('severity', sa.String(), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('details', sa.JSON(), nullable=True),
        sa.Column('is_read', sa.Boolean(), nullable=False),
        sa.Column('is_resolved', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.TIMESTAMP(timezone=False), nullable=False),
        sa.Column('resolved_at', sa.TIMESTAMP(timezone=False), nullable=True),
    )
    op.create_index('ix_inventory_alerts_product_id', 'inventory_alerts', ['product_id'])
    op.create_index('ix_inventory_alerts_platform', 'inventory_alerts', ['platform'])
    op.create_index('ix_inventory_alerts_alert_type', 'inventory_alerts', ['alert_type'])
    op.create_index('ix_inventory_alerts_is_read', 'inventory_alerts', ['is_read'])
    op.create_index('ix_inventory_alerts_created_at', 'inventory_alerts', ['created_at'])


def downgrade() -> None:
    op.drop_table('inventory_alerts')
    op.drop_table('platform_integrations')
    op.drop_table('order_management')
    op.drop_table('order_blocks')
    op.drop_table('inventory_transactions')
    op.drop_table('platform_inventory')
