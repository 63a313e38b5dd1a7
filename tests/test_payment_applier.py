"""
Tests for the PaymentApplier.

Validates:
- Validation order: status, then amount sign, then residual
- Payment defaults and identity context inherited from the invoice
- Residual reduction and the automatic transition to paid
"""

from datetime import datetime, timezone
from decimal import Decimal
from uuid import uuid4

import pytest

from models import InvoiceStatus
from services.exceptions import InsufficientResidualError, InvalidStateTransitionError, ValidationError
from services.lifecycle import BuiltinTransitioner
from services.payment_applier import PaymentApplier
from tests.conftest import (
    COMPANY_ID,
    CURRENCY_ID,
    ORGANIZATION_ID,
    PARTNER_ID,
    make_invoice_data,
    make_payment,
)


@pytest.fixture
def applier(invoice_repository, payment_repository):
    return PaymentApplier(payment_repository, invoice_repository, BuiltinTransitioner())


def _apply(applier, invoice_repository, invoice, data):
    with invoice_repository.transaction():
        return applier.apply(invoice, data)


# =============================================================================
# Validation
# =============================================================================


class TestValidation:

    def test_draft_invoice_rejected(self, applier, service):
        draft = service.create(make_invoice_data())
        with pytest.raises(InvalidStateTransitionError) as exc_info:
            applier.validate(draft, Decimal("10"))
        assert exc_info.value.current_status == "draft"

    def test_status_checked_before_amount(self, applier, service):
        draft = service.create(make_invoice_data())
        with pytest.raises(InvalidStateTransitionError):
            applier.validate(draft, Decimal("-5"))

    @pytest.mark.parametrize("amount", ["0", "-1", "-0.004"])
    def test_non_positive_amount(self, applier, open_invoice, amount):
        with pytest.raises(ValidationError) as exc_info:
            applier.validate(open_invoice, Decimal(amount))
        assert exc_info.value.field == "amount"
        assert "must be positive" in str(exc_info.value)

    def test_amount_above_residual(self, applier, open_invoice):
        with pytest.raises(InsufficientResidualError) as exc_info:
            applier.validate(open_invoice, Decimal("100.01"))
        assert exc_info.value.residual == Decimal("100.00")
        assert "payment amount cannot exceed residual amount" in str(exc_info.value)

    def test_amount_just_above_residual_is_not_rounded_down(self, applier, open_invoice):
        with pytest.raises(InsufficientResidualError) as exc_info:
            applier.validate(open_invoice, Decimal("100.004"))
        assert exc_info.value.amount == Decimal("100.004")
        assert open_invoice.amount_residual == Decimal("100")

    @pytest.mark.parametrize("amount", ["12.345", "0.004"])
    def test_sub_cent_amount_rejected(self, applier, open_invoice, amount):
        with pytest.raises(ValidationError) as exc_info:
            applier.validate(open_invoice, Decimal(amount))
        assert exc_info.value.field == "amount"
        assert "more than 2 decimal places" in str(exc_info.value)

    def test_trailing_zeros_accepted(self, applier, open_invoice):
        assert applier.validate(open_invoice, Decimal("12.3400")) == Decimal("12.34")


# =============================================================================
# Application
# =============================================================================


class TestApply:

    def test_partial_payment_keeps_invoice_open(self, applier, invoice_repository, open_invoice):
        result = _apply(applier, invoice_repository, open_invoice, make_payment("60"))

        assert result.became_paid is False
        assert result.invoice.amount_residual == Decimal("40.00")
        assert result.invoice.status == InvoiceStatus.OPEN
        assert result.payment.amount == Decimal("60.00")

    def test_exact_payment_marks_paid(self, applier, invoice_repository, open_invoice):
        result = _apply(applier, invoice_repository, open_invoice, make_payment("100"))

        assert result.became_paid is True
        assert result.invoice.amount_residual == Decimal("0.00")
        assert result.invoice.status == InvoiceStatus.PAID

    def test_identity_context_forced_from_invoice(self, applier, invoice_repository, open_invoice):
        foreign = uuid4()
        data = make_payment(
            "10",
            invoice_id=foreign,
            partner_id=foreign,
            organization_id=foreign,
            company_id=foreign,
            currency_id=foreign,
        )
        payment = _apply(applier, invoice_repository, open_invoice, data).payment

        assert payment.invoice_id == open_invoice.id
        assert payment.partner_id == PARTNER_ID
        assert payment.organization_id == ORGANIZATION_ID
        assert payment.company_id == COMPANY_ID
        assert payment.currency_id == CURRENCY_ID

    def test_defaults_id_and_date(self, applier, invoice_repository, open_invoice):
        payment = _apply(applier, invoice_repository, open_invoice, make_payment("10")).payment
        assert payment.id is not None
        assert payment.payment_date is not None

    def test_keeps_caller_id_and_date(self, applier, invoice_repository, open_invoice):
        payment_id = uuid4()
        paid_at = datetime(2026, 3, 1, 9, 30, tzinfo=timezone.utc)
        payment = _apply(
            applier, invoice_repository, open_invoice,
            make_payment("10", id=payment_id, payment_date=paid_at, reference="BANK-1"),
        ).payment

        assert payment.id == payment_id
        assert payment.payment_date == paid_at
        assert payment.reference == "BANK-1"

    def test_payment_attached_to_invoice(self, applier, invoice_repository, payment_repository, open_invoice):
        result = _apply(applier, invoice_repository, open_invoice, make_payment("25"))

        assert result.payment in result.invoice.payments
        assert result.invoice.amount_paid == Decimal("25.00")
        assert [p.id for p in payment_repository.find_by_invoice(open_invoice.id)] == [result.payment.id]

    def test_residual_equals_total_minus_payments(self, applier, invoice_repository, open_invoice):
        for amount in ("10", "20.50", "30.25"):
            invoice = _apply(applier, invoice_repository, open_invoice, make_payment(amount)).invoice
            assert invoice.amount_residual == invoice.amount_total - invoice.amount_paid
        assert invoice.amount_residual == Decimal("39.25")
