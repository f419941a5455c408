"""initial marketplace schema

Revision ID: 001_initial_marketplace_schema
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = '001_initial_marketplace_schema'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table('admin_users',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('username', sa.String(length=100), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=True),
        sa.Column('last_login', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_admin_users_username', 'admin_users', ['username'], unique=True)

    op.create_table('wallets',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('address', sa.String(length=128), nullable=False),
        sa.Column('network', sa.String(length=10), nullable=False),
        sa.Column('wallet_client', sa.String(length=100), nullable=False, server_default='unknown'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint('address', 'network', name='uq_wallets_address_network'),
    )
    op.create_index('ix_wallets_address', 'wallets', ['address'])
    op.create_index('ix_wallets_created_at', 'wallets', ['created_at'])

    op.create_table('payout_records',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('wallet_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('wallets.id'), nullable=False),
        sa.Column('network', sa.String(length=10), nullable=False),
        sa.Column('owner_address', sa.String(length=128), nullable=False),
        sa.Column('recipient', sa.String(length=128), nullable=False),
        sa.Column('spender', sa.String(length=128), nullable=False),
        sa.Column('amount', sa.Numeric(38, 18), nullable=False),
        sa.Column('raw_amount', sa.String(length=80), nullable=False),
        sa.Column('decimals', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='pending'),
        sa.Column('tx_hash', sa.String(length=100), nullable=True),
        sa.Column('error', sa.Text(), nullable=True),
        sa.Column('idempotency_key', sa.String(length=100), nullable=True, unique=True),
        sa.Column('requested_by', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_payout_records_wallet_id', 'payout_records', ['wallet_id'])
    op.create_index('ix_payout_records_status', 'payout_records', ['status'])
    op.create_index('ix_payout_records_tx_hash', 'payout_records', ['tx_hash'])
    op.create_index('ix_payout_records_created_at', 'payout_records', ['created_at'])

    counters = op.create_table('counters',
        sa.Column('name', sa.String(length=50), primary_key=True),
        sa.Column('seq', sa.Integer(), nullable=False, server_default='0'),
    )
    op.bulk_insert(counters, [
        {'name': 'traders', 'seq': 0},
        {'name': 'ads', 'seq': 0},
        {'name': 'tickets', 'seq': 0},
    ])

    op.create_table('traders',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('avatar', sa.String(length=500), nullable=True),
        sa.Column('country', sa.String(length=100), nullable=True),
        sa.Column('currency', sa.String(length=10), nullable=True),
        sa.Column('currency_symbol', sa.String(length=10), nullable=True),
        sa.Column('price_per_usdt', sa.Numeric(20, 8), nullable=False, server_default='0'),
        sa.Column('network', sa.String(length=10), nullable=False, server_default='TRC-20'),
        sa.Column('payment_options', postgresql.JSON, nullable=True),
        sa.Column('limit', sa.String(length=100), nullable=True),
        sa.Column('total_trades', sa.Integer(), nullable=True),
        sa.Column('success_rate', sa.Float(), nullable=True),
        sa.Column('response_rate', sa.String(length=50), nullable=True),
        sa.Column('rating', sa.Float(), nullable=True),
        sa.Column('reviews', sa.Integer(), nullable=True),
        sa.Column('online', sa.Boolean(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    op.create_table('ads',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('image', sa.String(length=500), nullable=True),
        sa.Column('bg_color', sa.String(length=50), nullable=True),
        sa.Column('link', sa.String(length=500), nullable=True),
        sa.Column('active', sa.Boolean(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    op.create_table('tickets',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('wallet_address', sa.String(length=128), nullable=True),
        sa.Column('subject', sa.String(length=255), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('status', sa.String(length=10), nullable=False, server_default='open'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    op.create_table('platform_settings',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('platform_fee', sa.Numeric(10, 4), nullable=False),
        sa.Column('min_trade_amount', sa.Numeric(20, 2), nullable=False),
        sa.Column('support_email', sa.String(length=255), nullable=False),
        sa.Column('maintenance_mode', sa.Boolean(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )


def downgrade() -> None:
    op.drop_table('platform_settings')
    op.drop_table('tickets')
    op.drop_table('ads')
    op.drop_table('traders')
    op.drop_table('counters')

    op.drop_index('ix_payout_records_created_at', table_name='payout_records')
    op.drop_index('ix_payout_records_tx_hash', table_name='payout_records')
    op.drop_index('ix_payout_records_status', table_name='payout_records')
    op.drop_index('ix_payout_records_wallet_id', table_name='payout_records')
    op.drop_table('payout_records')

    op.drop_index('ix_wallets_created_at', table_name='wallets')
    op.drop_index('ix_wallets_address', table_name='wallets')
    op.drop_table('wallets')

    op.drop_index('ix_admin_users_username', table_name='admin_users')
    op.drop_table('admin_users')
