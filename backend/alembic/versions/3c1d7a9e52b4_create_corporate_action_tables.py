"""create corporate action tables

Revision ID: 3c1d7a9e52b4
Revises:
Create Date: 2026-10-18 10:04:12.518223

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3c1d7a9e52b4'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table('accounts',
    sa.Column('id', sa.String(length=36), nullable=False),
    sa.Column('name', sa.String(), nullable=False),
    sa.Column('institution_name', sa.String(), nullable=True),
    sa.Column('is_active', sa.Boolean(), nullable=True),
    sa.Column('created_at', sa.DateTime(), nullable=True),
    sa.Column('updated_at', sa.DateTime(), nullable=True),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_table('securities',
    sa.Column('id', sa.String(length=36), nullable=False),
    sa.Column('ticker', sa.String(), nullable=False),
    sa.Column('name', sa.String(), nullable=True),
    sa.Column('quantity_increment', sa.Numeric(precision=18, scale=8), nullable=True),
    sa.Column('created_at', sa.DateTime(), nullable=True),
    sa.Column('updated_at', sa.DateTime(), nullable=True),
    sa.PrimaryKeyConstraint('id'),
    sa.UniqueConstraint('ticker')
    )
    op.create_table('corporate_actions',
    sa.Column('id', sa.String(length=36), nullable=False),
    sa.Column('action_type', sa.String(), nullable=False),
    sa.Column('symbol_id', sa.String(length=36), nullable=False),
    sa.Column('new_symbol_id', sa.String(length=36), nullable=True),
    sa.Column('ex_date', sa.Date(), nullable=False),
    sa.Column('record_date', sa.Date(), nullable=True),
    sa.Column('pay_date', sa.Date(), nullable=True),
    sa.Column('description', sa.String(length=500), nullable=False),
    sa.Column('source', sa.String(length=100), nullable=False),
    sa.Column('ratio_from', sa.Numeric(precision=18, scale=8), nullable=True),
    sa.Column('ratio_to', sa.Numeric(precision=18, scale=8), nullable=True),
    sa.Column('amount_per_share', sa.Numeric(precision=18, scale=6), nullable=True),
    sa.Column('currency', sa.String(length=3), nullable=True),
    sa.Column('qualified', sa.Boolean(), nullable=False),
    sa.Column('merger_type', sa.String(), nullable=True),
    sa.Column('exchange_ratio', sa.Numeric(precision=18, scale=8), nullable=True),
    sa.Column('cash_per_share', sa.Numeric(precision=18, scale=6), nullable=True),
    sa.Column('acquirer_share_price', sa.Numeric(precision=18, scale=6), nullable=True),
    sa.Column('basis_allocation_percent', sa.Numeric(precision=9, scale=6), nullable=True),
    sa.Column('status', sa.String(), nullable=False),
    sa.Column('applied_at', sa.DateTime(), nullable=True),
    sa.Column('applied_by', sa.String(length=100), nullable=True),
    sa.Column('reversed_at', sa.DateTime(), nullable=True),
    sa.Column('reversal_reason', sa.String(length=500), nullable=True),
    sa.Column('created_at', sa.DateTime(), nullable=True),
    sa.Column('updated_at', sa.DateTime(), nullable=True),
    sa.CheckConstraint("status IN ('pending', 'applied', 'reversed', 'cancelled')", name='ck_corporate_action_status'),
    sa.ForeignKeyConstraint(['new_symbol_id'], ['securities.id'], ),
    sa.ForeignKeyConstraint(['symbol_id'], ['securities.id'], ),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_corporate_actions_action_type'), 'corporate_actions', ['action_type'], unique=False)
    op.create_index(op.f('ix_corporate_actions_ex_date'), 'corporate_actions', ['ex_date'], unique=False)
    op.create_index(op.f('ix_corporate_actions_status'), 'corporate_actions', ['status'], unique=False)
    op.create_index(op.f('ix_corporate_actions_symbol_id'), 'corporate_actions', ['symbol_id'], unique=False)
    op.create_table('holding_lots',
    sa.Column('id', sa.String(length=36), nullable=False),
    sa.Column('account_id', sa.String(length=36), nullable=False),
    sa.Column('security_id', sa.String(length=36), nullable=False),
    sa.Column('ticker', sa.String(), nullable=False),
    sa.Column('acquisition_date', sa.Date(), nullable=False),
    sa.Column('cost_basis_per_unit', sa.Numeric(precision=18, scale=6), nullable=False),
    sa.Column('original_quantity', sa.Numeric(precision=18, scale=8), nullable=False),
    sa.Column('current_quantity', sa.Numeric(precision=18, scale=8), nullable=False),
    sa.Column('is_closed', sa.Boolean(), nullable=True),
    sa.Column('source', sa.String(), nullable=False),
    sa.Column('corporate_action_id', sa.String(length=36), nullable=True),
    sa.Column('created_at', sa.DateTime(), nullable=True),
    sa.Column('updated_at', sa.DateTime(), nullable=True),
    sa.CheckConstraint('cost_basis_per_unit >= 0', name='ck_holding_lot_cost_basis_non_negative'),
    sa.CheckConstraint('current_quantity >= 0', name='ck_holding_lot_current_quantity_non_negative'),
    sa.CheckConstraint('original_quantity > 0', name='ck_holding_lot_original_quantity_positive'),
    sa.ForeignKeyConstraint(['account_id'], ['accounts.id'], ),
    sa.ForeignKeyConstraint(['corporate_action_id'], ['corporate_actions.id'], ),
    sa.ForeignKeyConstraint(['security_id'], ['securities.id'], ),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_holding_lots_account_id'), 'holding_lots', ['account_id'], unique=False)
    op.create_index(op.f('ix_holding_lots_acquisition_date'), 'holding_lots', ['acquisition_date'], unique=False)
    op.create_index(op.f('ix_holding_lots_corporate_action_id'), 'holding_lots', ['corporate_action_id'], unique=False)
    op.create_index(op.f('ix_holding_lots_is_closed'), 'holding_lots', ['is_closed'], unique=False)
    op.create_index(op.f('ix_holding_lots_security_id'), 'holding_lots', ['security_id'], unique=False)
    op.create_table('lot_adjustments',
    sa.Column('id', sa.String(length=36), nullable=False),
    sa.Column('corporate_action_id', sa.String(length=36), nullable=False),
    sa.Column('lot_id', sa.String(length=36), nullable=False),
    sa.Column('account_id', sa.String(length=36), nullable=False),
    sa.Column('security_id', sa.String(length=36), nullable=False),
    sa.Column('adjustment_type', sa.String(), nullable=False),
    sa.Column('fifo_order', sa.Integer(), nullable=False),
    sa.Column('quantity_before', sa.Numeric(precision=18, scale=8), nullable=False),
    sa.Column('quantity_after', sa.Numeric(precision=18, scale=8), nullable=False),
    sa.Column('unit_basis_before', sa.Numeric(precision=18, scale=6), nullable=False),
    sa.Column('unit_basis_after', sa.Numeric(precision=18, scale=6), nullable=False),
    sa.Column('total_basis_before', sa.Numeric(precision=18, scale=6), nullable=False),
    sa.Column('total_basis_after', sa.Numeric(precision=18, scale=6), nullable=False),
    sa.Column('cash_received', sa.Numeric(precision=18, scale=6), nullable=False),
    sa.Column('realized_gain', sa.Numeric(precision=18, scale=6), nullable=False),
    sa.Column('deferred_gain', sa.Numeric(precision=18, scale=6), nullable=False),
    sa.Column('income_amount', sa.Numeric(precision=18, scale=6), nullable=False),
    sa.Column('tax_treatment', sa.String(), nullable=True),
    sa.Column('cash_in_lieu_quantity', sa.Numeric(precision=18, scale=8), nullable=False),
    sa.Column('cash_in_lieu_basis', sa.Numeric(precision=18, scale=6), nullable=False),
    sa.Column('basis_residual', sa.Numeric(precision=24, scale=14), nullable=False),
    sa.Column('created_lot', sa.Boolean(), nullable=False),
    sa.Column('lot_mutated', sa.Boolean(), nullable=False),
    sa.Column('reason', sa.String(length=500), nullable=True),
    sa.Column('created_at', sa.DateTime(), nullable=True),
    sa.ForeignKeyConstraint(['account_id'], ['accounts.id'], ),
    sa.ForeignKeyConstraint(['corporate_action_id'], ['corporate_actions.id'], ),
    sa.ForeignKeyConstraint(['lot_id'], ['holding_lots.id'], ),
    sa.ForeignKeyConstraint(['security_id'], ['securities.id'], ),
    sa.PrimaryKeyConstraint('id'),
    sa.UniqueConstraint('corporate_action_id', 'lot_id', name='uix_lot_adjustment_action_lot')
    )
    op.create_index(op.f('ix_lot_adjustments_corporate_action_id'), 'lot_adjustments', ['corporate_action_id'], unique=False)
    op.create_index(op.f('ix_lot_adjustments_lot_id'), 'lot_adjustments', ['lot_id'], unique=False)


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index(op.f('ix_lot_adjustments_lot_id'), table_name='lot_adjustments')
    op.drop_index(op.f('ix_lot_adjustments_corporate_action_id'), table_name='lot_adjustments')
    op.drop_table('lot_adjustments')
    op.drop_index(op.f('ix_holding_lots_security_id'), table_name='holding_lots')
    op.drop_index(op.f('ix_holding_lots_is_closed'), table_name='holding_lots')
    op.drop_index(op.f('ix_holding_lots_corporate_action_id'), table_name='holding_lots')
    op.drop_index(op.f('ix_holding_lots_acquisition_date'), table_name='holding_lots')
    op.drop_index(op.f('ix_holding_lots_account_id'), table_name='holding_lots')
    op.drop_table('holding_lots')
    op.drop_index(op.f('ix_corporate_actions_symbol_id'), table_name='corporate_actions')
    op.drop_index(op.f('ix_corporate_actions_status'), table_name='corporate_actions')
    op.drop_index(op.f('ix_corporate_actions_ex_date'), table_name='corporate_actions')
    op.drop_index(op.f('ix_corporate_actions_action_type'), table_name='corporate_actions')
    op.drop_table('corporate_actions')
    op.drop_table('securities')
    op.drop_table('accounts')
