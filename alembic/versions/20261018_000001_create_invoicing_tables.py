"""Create invoicing tables

Revision ID: 20261018_000001
Revises: None
Create Date: 2026-10-18

This migration creates the account_taxes, invoices, invoice_lines and
payments tables used by the invoice lifecycle engine.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '20261018_000001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _audit_columns():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('created_by', sa.Uuid(), nullable=True),
        sa.Column('updated_by', sa.Uuid(), nullable=True),
    ]


def upgrade() -> None:
    """Create the invoicing tables."""
    op.create_table(
        'account_taxes',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('organization_id', sa.Uuid(), nullable=False),
        sa.Column('company_id', sa.Uuid(), nullable=True),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column(
            'type_tax_use',
            sa.Enum('sale', 'purchase', 'none', name='tax_use', create_constraint=True),
            nullable=False,
            server_default='sale'
        ),
        sa.Column(
            'amount_type',
            sa.Enum('percent', 'fixed', 'division', 'group', name='tax_amount_type', create_constraint=True),
            nullable=False,
            server_default='percent'
        ),
        sa.Column('amount', sa.Numeric(precision=12, scale=4), nullable=False),
        sa.Column('price_include', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('include_base_amount', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('is_base_affected', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('sequence', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('active', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_audit_columns(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_account_taxes_organization_id', 'account_taxes', ['organization_id'])

    op.create_table(
        'invoices',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('organization_id', sa.Uuid(), nullable=False),
        sa.Column('company_id', sa.Uuid(), nullable=False),
        sa.Column('partner_id', sa.Uuid(), nullable=False),
        sa.Column('reference', sa.String(length=64), nullable=True),
        sa.Column(
            'status',
            sa.Enum('draft', 'open', 'paid', 'cancelled', name='invoice_status', create_constraint=True),
            nullable=False,
            server_default='draft'
        ),
        sa.Column(
            'type',
            sa.Enum('customer', 'supplier', name='invoice_type', create_constraint=True),
            nullable=False
        ),
        sa.Column('invoice_date', sa.Date(), nullable=False),
        sa.Column('due_date', sa.Date(), nullable=False),
        sa.Column('payment_term_id', sa.Uuid(), nullable=True),
        sa.Column('fiscal_position_id', sa.Uuid(), nullable=True),
        sa.Column('currency_id', sa.Uuid(), nullable=False),
        sa.Column('journal_id', sa.Uuid(), nullable=False),
        sa.Column('amount_untaxed', sa.Numeric(precision=12, scale=2), nullable=False, server_default='0'),
        sa.Column('amount_tax', sa.Numeric(precision=12, scale=2), nullable=False, server_default='0'),
        sa.Column('amount_total', sa.Numeric(precision=12, scale=2), nullable=False, server_default='0'),
        sa.Column('amount_residual', sa.Numeric(precision=12, scale=2), nullable=False, server_default='0'),
        sa.Column('note', sa.Text(), nullable=True),
        sa.Column('version', sa.Integer(), nullable=False, server_default='1'),
        *_audit_columns(),
        sa.PrimaryKeyConstraint('id'),
    )

    # Create indexes for common queries
    op.create_index('ix_invoices_organization_id', 'invoices', ['organization_id'])
    op.create_index('ix_invoices_partner_id', 'invoices', ['partner_id'])
    op.create_index('ix_invoices_status', 'invoices', ['status'])
    op.create_index('ix_invoices_type', 'invoices', ['type'])
    op.create_index('ix_invoices_invoice_date', 'invoices', ['invoice_date'])

    op.create_table(
        'invoice_lines',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('invoice_id', sa.Uuid(), nullable=False),
        sa.Column('product_id', sa.Uuid(), nullable=True),
        sa.Column('product_name', sa.String(length=255), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('quantity', sa.Numeric(precision=12, scale=3), nullable=False),
        sa.Column('uom_id', sa.Uuid(), nullable=True),
        sa.Column('unit_price', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('discount', sa.Numeric(precision=5, scale=2), nullable=False, server_default='0'),
        sa.Column('tax_id', sa.Uuid(), nullable=True),
        sa.Column('account_id', sa.Uuid(), nullable=False),
        sa.Column('price_subtotal', sa.Numeric(precision=12, scale=2), nullable=False, server_default='0'),
        sa.Column('price_tax', sa.Numeric(precision=12, scale=2), nullable=False, server_default='0'),
        sa.Column('price_total', sa.Numeric(precision=12, scale=2), nullable=False, server_default='0'),
        sa.Column('sequence', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(
            ['invoice_id'],
            ['invoices.id'],
            name='fk_invoice_lines_invoice_id',
            ondelete='CASCADE'
        ),
    )
    op.create_index('ix_invoice_lines_invoice_id', 'invoice_lines', ['invoice_id'])

    op.create_table(
        'payments',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('organization_id', sa.Uuid(), nullable=False),
        sa.Column('company_id', sa.Uuid(), nullable=False),
        sa.Column('invoice_id', sa.Uuid(), nullable=False),
        sa.Column('partner_id', sa.Uuid(), nullable=False),
        sa.Column('payment_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('amount', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('currency_id', sa.Uuid(), nullable=False),
        sa.Column('journal_id', sa.Uuid(), nullable=True),
        sa.Column('payment_method', sa.String(length=50), nullable=True),
        sa.Column('reference', sa.String(length=255), nullable=True),
        sa.Column('note', sa.Text(), nullable=True),
        *_audit_columns(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(
            ['invoice_id'],
            ['invoices.id'],
            name='fk_payments_invoice_id',
            ondelete='CASCADE'
        ),
    )
    op.create_index('ix_payments_organization_id', 'payments', ['organization_id'])
    op.create_index('ix_payments_invoice_id', 'payments', ['invoice_id'])
    op.create_index('ix_payments_partner_id', 'payments', ['partner_id'])
    op.create_index('ix_payments_payment_date', 'payments', ['payment_date'])


def downgrade() -> None:
    """Drop the invoicing tables."""
    op.drop_index('ix_payments_payment_date', table_name='payments')
    op.drop_index('ix_payments_partner_id', table_name='payments')
    op.drop_index('ix_payments_invoice_id', table_name='payments')
    op.drop_index('ix_payments_organization_id', table_name='payments')
    op.drop_table('payments')

    op.drop_index('ix_invoice_lines_invoice_id', table_name='invoice_lines')
    op.drop_table('invoice_lines')

    op.drop_index('ix_invoices_invoice_date', table_name='invoices')
    op.drop_index('ix_invoices_type', table_name='invoices')
    op.drop_index('ix_invoices_status', table_name='invoices')
    op.drop_index('ix_invoices_partner_id', table_name='invoices')
    op.drop_index('ix_invoices_organization_id', table_name='invoices')
    op.drop_table('invoices')

    op.drop_index('ix_account_taxes_organization_id', table_name='account_taxes')
    op.drop_table('account_taxes')
