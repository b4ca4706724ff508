"""initial ledger schema

Revision ID: 001
Revises: 
Create Date: 2026-10-18 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Create users table
    op.create_table(
        'users',
        sa.Column('uuid', sa.String(36), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('status', sa.String(50), nullable=False, server_default='active'),
        sa.Column('user_role', sa.String(50), nullable=False, server_default='user'),
        sa.Column('is_provider', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('provider_display_name', sa.String(255), nullable=True),
        sa.Column('bio', sa.Text(), nullable=True),
        sa.Column('signal_fee', sa.Integer(), nullable=True),
        sa.Column('stripe_customer_id', sa.String(255), nullable=True),
        sa.Column('stripe_connect_account_id', sa.String(255), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('uuid'),
        sa.UniqueConstraint('email'),
    )
    op.create_index('ix_users_email', 'users', ['email'])
    op.create_index('idx_user_status', 'users', ['status'])
    op.create_index('idx_user_is_provider', 'users', ['is_provider'])

    # Create signal_subscriptions table
    op.create_table(
        'signal_subscriptions',
        sa.Column('uuid', sa.String(36), nullable=False),
        sa.Column('status', sa.String(50), nullable=False, server_default='active'),
        sa.Column('price', sa.Integer(), nullable=False),
        sa.Column('currency', sa.String(3), nullable=False, server_default='GBP'),
        sa.Column('stripe_subscription_id', sa.String(255), nullable=True),
        sa.Column('user_id', sa.String(36), sa.ForeignKey('users.uuid'), nullable=False),
        sa.Column('provider_id', sa.String(36), sa.ForeignKey('users.uuid'), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('uuid'),
    )
    op.create_index('idx_signal_subscription_user_id', 'signal_subscriptions', ['user_id'])
    op.create_index('idx_signal_subscription_provider_id', 'signal_subscriptions', ['provider_id'])
    op.create_index('idx_signal_subscription_status', 'signal_subscriptions', ['status'])

    # Create signal_payouts table
    op.create_table(
        'signal_payouts',
        sa.Column('uuid', sa.String(36), nullable=False),
        sa.Column('provider_id', sa.String(36), sa.ForeignKey('users.uuid'), nullable=False),
        sa.Column('amount', sa.Integer(), nullable=False),
        sa.Column('currency', sa.String(3), nullable=False, server_default='GBP'),
        sa.Column('stripe_transfer_id', sa.String(255), nullable=True),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('period_start', sa.DateTime(), nullable=False),
        sa.Column('period_end', sa.DateTime(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('uuid'),
        sa.CheckConstraint("status IN ('pending', 'paid', 'failed')", name='payout_status'),
        sa.CheckConstraint('amount > 0', name='ck_signal_payout_amount_positive'),
    )
    op.create_index('idx_signal_payout_provider_id', 'signal_payouts', ['provider_id'])
    op.create_index('idx_signal_payout_status', 'signal_payouts', ['status'])

    # Create provider_earnings table
    op.create_table(
        'provider_earnings',
        sa.Column('uuid', sa.String(36), nullable=False),
        sa.Column('provider_id', sa.String(36), sa.ForeignKey('users.uuid'), nullable=False),
        sa.Column('subscription_id', sa.String(36), sa.ForeignKey('signal_subscriptions.uuid'), nullable=True),
        sa.Column('gross_amount', sa.Integer(), nullable=False),
        sa.Column('fee_percentage', sa.Integer(), nullable=False, server_default='15'),
        sa.Column('fee_amount', sa.Integer(), nullable=False),
        sa.Column('net_amount', sa.Integer(), nullable=False),
        sa.Column('currency', sa.String(3), nullable=False, server_default='GBP'),
        sa.Column('status', sa.String(20), nullable=False, server_default='available'),
        sa.Column('payout_id', sa.String(36), sa.ForeignKey('signal_payouts.uuid'), nullable=True),
        sa.Column('stripe_invoice_id', sa.String(255), nullable=True),
        sa.Column('earned_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('uuid'),
        sa.UniqueConstraint('stripe_invoice_id'),
        sa.CheckConstraint("status IN ('available', 'pending_payout', 'paid_out')", name='earning_status'),
        sa.CheckConstraint('net_amount + fee_amount = gross_amount', name='ck_provider_earning_split'),
        sa.CheckConstraint('net_amount >= 0 AND fee_amount >= 0', name='ck_provider_earning_non_negative'),
    )
    op.create_index('idx_provider_earning_provider_status', 'provider_earnings', ['provider_id', 'status'])
    op.create_index('idx_provider_earning_earned_at', 'provider_earnings', ['earned_at'])
    op.create_index('idx_provider_earning_payout_id', 'provider_earnings', ['payout_id'])


def downgrade() -> None:
    op.drop_index('idx_provider_earning_payout_id', table_name='provider_earnings')
    op.drop_index('idx_provider_earning_earned_at', table_name='provider_earnings')
    op.drop_index('idx_provider_earning_provider_status', table_name='provider_earnings')
    op.drop_table('provider_earnings')

    op.drop_index('idx_signal_payout_status', table_name='signal_payouts')
    op.drop_index('idx_signal_payout_provider_id', table_name='signal_payouts')
    op.drop_table('signal_payouts')

    op.drop_index('idx_signal_subscription_status', table_name='signal_subscriptions')
    op.drop_index('idx_signal_subscription_provider_id', table_name='signal_subscriptions')
    op.drop_index('idx_signal_subscription_user_id', table_name='signal_subscriptions')
    op.drop_table('signal_subscriptions')

    op.drop_index('idx_user_is_provider', table_name='users')
    op.drop_index('idx_user_status', table_name='users')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')
