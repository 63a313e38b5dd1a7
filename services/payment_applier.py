# services/payment_applier.py
"""
Payment Applier - settles an invoice's residual amount with a payment.

Validation, in order:
1. the invoice is open
2. the amount is positive
3. the amount does not exceed the residual (never clamped)
4. the amount has at most two decimal places (never rounded)

On success the payment inherits the invoice's identity context, is stored,
the residual is reduced and, once it reaches zero, the invoice moves to paid
through the transitioner. The caller owns the transaction and the events.
"""
import logging
import uuid
from dataclasses import dataclass
from decimal import Decimal

from models import Invoice, InvoiceStatus, Payment
from models.base import utcnow
from schemas.payment import PaymentCreate
from .amount_calculator import CENT, fits_places, to_decimal
from .exceptions import InsufficientResidualError, InvalidStateTransitionError, ValidationError
from .lifecycle import TRANSITION_PAY, Transitioner
from .repository import InvoiceRepository, PaymentRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PaymentResult:
     payment: Payment
     invoice: Invoice
     became_paid: bool


class PaymentApplier:

     def __init__(
          self,
          payment_repository: PaymentRepository,
          invoice_repository: InvoiceRepository,
          transitioner: Transitioner,
     ):
          self.payment_repository = payment_repository
          self.invoice_repository = invoice_repository
          self.transitioner = transitioner

     def validate(self, invoice: Invoice, amount) -> Decimal:
          """Check the payment against the invoice and return the amount in cents."""
          if invoice.status != InvoiceStatus.OPEN:
               raise InvalidStateTransitionError(
                    TRANSITION_PAY, invoice.status, "only open invoices can receive payments"
               )

          amount = to_decimal(amount)
          if amount <= 0:
               raise ValidationError("payment amount must be positive", field="amount")

          residual = to_decimal(invoice.amount_residual)
          if amount > residual:
               raise InsufficientResidualError(amount, residual)

          if not fits_places(amount, 2):
               raise ValidationError(
                    "payment amount cannot have more than 2 decimal places", field="amount"
               )
          return amount.quantize(CENT)

     def build_payment(self, invoice: Invoice, data: PaymentCreate, amount: Decimal) -> Payment:
          payment = Payment(
               id=data.id or uuid.uuid4(),
               payment_date=data.payment_date or utcnow(),
               amount=amount,
               journal_id=data.journal_id,
               payment_method=data.payment_method,
               reference=data.reference,
               note=data.note,
               created_by=data.created_by,
               updated_by=data.created_by,
          )
          # identity context always comes from the invoice
          payment.invoice_id = invoice.id
          payment.partner_id = invoice.partner_id
          payment.organization_id = invoice.organization_id
          payment.company_id = invoice.company_id
          payment.currency_id = invoice.currency_id
          return payment

     def apply(self, invoice: Invoice, data: PaymentCreate) -> PaymentResult:
          amount = self.validate(invoice, data.amount)
          payment = self.build_payment(invoice, data, amount)

          payment.invoice = invoice
          self.payment_repository.create(payment)

          invoice.amount_residual = to_decimal(invoice.amount_residual) - amount
          became_paid = False
          if invoice.amount_residual <= 0:
               self.transitioner.transition(TRANSITION_PAY, invoice)
               became_paid = True

          if data.created_by is not None:
               invoice.updated_by = data.created_by
          invoice = self.invoice_repository.update(invoice)

          logger.info(
               f"Applied payment {payment.id} of {amount} to invoice {invoice.id}, "
               f"residual {invoice.amount_residual}{' (paid)' if became_paid else ''}"
          )
          return PaymentResult(payment=payment, invoice=invoice, became_paid=became_paid)
