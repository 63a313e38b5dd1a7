# services/invoice_service.py
"""
Invoice Service - orchestration of the invoice lifecycle.

Every mutating operation follows load -> validate -> mutate -> persist inside
one repository transaction, then publishes its domain events once the
transaction has committed. Event publishing never fails an operation.
"""
import logging
import uuid
from datetime import date, timedelta
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from config import InvoicingSettings
from models import Invoice, InvoiceLine, InvoiceStatus, InvoiceType, Payment
from schemas.invoice import InvoiceCreate, InvoiceUpdate, InvoiceFilter, InvoiceLineCreate, InvoiceResponse
from schemas.payment import PaymentCreate, PaymentFilter, PaymentResponse
from . import events
from .amount_calculator import AmountCalculator
from .events import EventBus, EventPublisher, publish_safely
from .exceptions import InvalidStateTransitionError, NotFoundError
from .lifecycle import (
     TRANSITION_CANCEL,
     TRANSITION_CONFIRM,
     TRANSITION_UPDATE,
     Transitioner,
     create_transitioner,
)
from .payment_applier import PaymentApplier, PaymentResult
from .repository import (
     InvoiceRepository,
     PaymentRepository,
     SqlAlchemyInvoiceRepository,
     SqlAlchemyPaymentRepository,
)
from .tax_service import DatabaseTaxRateProvider, TaxRateProvider
from .validation import validate_invoice
from .workflow_engine import ConfiguredWorkflowEngine

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = (
     "partner_id",
     "currency_id",
     "journal_id",
     "reference",
     "invoice_date",
     "due_date",
     "payment_term_id",
     "fiscal_position_id",
     "note",
)

REQUIRED_FIELDS = ("partner_id", "currency_id", "journal_id", "invoice_date", "due_date")


def invoice_payload(invoice: Invoice) -> dict:
     return InvoiceResponse.model_validate(invoice).model_dump(mode="json")


def payment_payload(payment: Payment) -> dict:
     return PaymentResponse.model_validate(payment).model_dump(mode="json")


class InvoiceLifecycleService:
     """Service class for invoice lifecycle operations."""

     def __init__(
          self,
          repository: InvoiceRepository,
          payment_repository: PaymentRepository,
          tax_provider: Optional[TaxRateProvider] = None,
          publisher: Optional[EventPublisher] = None,
          transitioner: Optional[Transitioner] = None,
          settings: Optional[InvoicingSettings] = None,
     ):
          self.repository = repository
          self.payment_repository = payment_repository
          self.publisher = publisher
          self.settings = settings or InvoicingSettings()
          self.calculator = AmountCalculator(tax_provider, self.settings.tax_failure_policy)
          self.transitioner = transitioner or create_transitioner()
          self.payment_applier = PaymentApplier(payment_repository, repository, self.transitioner)

     # ------------------------------------------------------------------
     # Commands
     # ------------------------------------------------------------------

     def create(self, data: InvoiceCreate) -> Invoice:
          """
          Create a draft invoice.

          Args:
               data: Invoice header and raw lines

          Returns:
               The persisted Invoice with totals and residual filled in

          Raises:
               ValidationError: If a required reference or line field is invalid
               TaxProviderError: If tax lookup fails under the strict policy
               PersistenceError: If the invoice could not be stored
          """
          invoice_date = data.invoice_date or date.today()
          invoice = Invoice(
               id=uuid.uuid4(),
               organization_id=data.organization_id,
               company_id=data.company_id,
               partner_id=data.partner_id,
               reference=data.reference,
               status=InvoiceStatus.DRAFT,
               type=data.type,
               invoice_date=invoice_date,
               due_date=data.due_date or invoice_date + timedelta(days=self.settings.default_due_days),
               payment_term_id=data.payment_term_id,
               fiscal_position_id=data.fiscal_position_id,
               currency_id=data.currency_id,
               journal_id=data.journal_id,
               note=data.note,
               created_by=data.created_by,
               updated_by=data.created_by,
               lines=[self._build_line(line, seq) for seq, line in enumerate(data.lines, start=1)],
          )

          validate_invoice(invoice)
          self.calculator.apply(invoice)
          invoice.amount_residual = invoice.amount_total

          with self.repository.transaction():
               invoice = self.repository.create(invoice)

          logger.info(f"Created invoice {invoice.id} for partner {invoice.partner_id}, total {invoice.amount_total}")
          self._publish(events.INVOICE_CREATED, invoice_payload(invoice))
          return invoice

     def update(self, invoice_id: UUID, data: InvoiceUpdate) -> Invoice:
          """
          Update a draft invoice and recompute its totals.

          Provided lines replace the existing line set. The residual is
          recomputed as total minus payments.

          Raises:
               NotFoundError: If the invoice does not exist
               InvalidStateTransitionError: If the invoice is not a draft
               ValidationError: If the updated invoice is invalid
          """
          with self.repository.transaction():
               invoice = self._load(invoice_id, for_update=True)
               self.transitioner.transition(TRANSITION_UPDATE, invoice)

               changes = data.model_dump(exclude_unset=True, include=set(UPDATABLE_FIELDS))
               for field, value in changes.items():
                    # None clears optional fields but never a required one
                    if value is None and field in REQUIRED_FIELDS:
                         continue
                    setattr(invoice, field, value)
               if data.lines is not None:
                    invoice.lines = [self._build_line(line, seq) for seq, line in enumerate(data.lines, start=1)]

               validate_invoice(invoice)
               self.calculator.apply(invoice)
               invoice.amount_residual = invoice.amount_total - invoice.amount_paid
               if data.updated_by is not None:
                    invoice.updated_by = data.updated_by

               invoice = self.repository.update(invoice)

          logger.info(f"Updated invoice {invoice.id}, total {invoice.amount_total}")
          self._publish(events.INVOICE_UPDATED, invoice_payload(invoice))
          return invoice

     def delete(self, invoice_id: UUID) -> None:
          """
          Delete an invoice with its lines and payments.

          Deleting a missing invoice is a no-op. Paid invoices are never deleted.
          """
          with self.repository.transaction():
               invoice = self.repository.find_by_id(invoice_id, for_update=True)
               if invoice is None:
                    logger.info(f"Invoice {invoice_id} already absent, nothing to delete")
                    return

               if invoice.status == InvoiceStatus.PAID:
                    raise InvalidStateTransitionError("delete", invoice.status, "cannot delete paid invoices")

               payload = {"id": str(invoice.id), "organization_id": str(invoice.organization_id)}
               self.repository.delete(invoice.id)

          logger.info(f"Deleted invoice {invoice_id}")
          self._publish(events.INVOICE_DELETED, payload)

     def confirm(self, invoice_id: UUID) -> Invoice:
          """Move a draft invoice with at least one line to open."""
          invoice = self._transition(invoice_id, TRANSITION_CONFIRM)
          self._publish(events.INVOICE_CONFIRMED, invoice_payload(invoice))
          return invoice

     def cancel(self, invoice_id: UUID) -> Invoice:
          """Cancel a draft or open invoice."""
          invoice = self._transition(invoice_id, TRANSITION_CANCEL)
          self._publish(events.INVOICE_CANCELLED, invoice_payload(invoice))
          return invoice

     def record_payment(self, invoice_id: UUID, data: PaymentCreate) -> PaymentResult:
          """
          Record a payment against an open invoice.

          The payment row and the residual/status update are committed together.

          Raises:
               NotFoundError: If the invoice does not exist
               InvalidStateTransitionError: If the invoice is not open
               ValidationError: If the amount is not positive
               InsufficientResidualError: If the amount exceeds the residual
               PersistenceError: If storing failed (nothing is applied)
          """
          with self.repository.transaction():
               invoice = self._load(invoice_id, for_update=True)
               result = self.payment_applier.apply(invoice, data)

          invoice_data = invoice_payload(result.invoice)
          self._publish(events.PAYMENT_RECEIVED, {
               "invoice_id": str(result.invoice.id),
               "payment": payment_payload(result.payment),
               "invoice": invoice_data,
          })
          if result.became_paid:
               self._publish(events.INVOICE_PAID, invoice_data)
          return result

     # ------------------------------------------------------------------
     # Queries
     # ------------------------------------------------------------------

     def get(self, invoice_id: UUID) -> Invoice:
          return self._load(invoice_id)

     def list(self, filters: Optional[InvoiceFilter] = None) -> List[Invoice]:
          return self.repository.find_all(filters or InvoiceFilter())

     def list_by_partner(self, partner_id: UUID) -> List[Invoice]:
          return self.repository.find_by_partner(partner_id)

     def list_by_status(self, status: InvoiceStatus) -> List[Invoice]:
          return self.repository.find_by_status(InvoiceStatus(status))

     def list_by_type(self, invoice_type: InvoiceType) -> List[Invoice]:
          return self.repository.find_by_type(InvoiceType(invoice_type))

     def get_payment(self, payment_id: UUID) -> Payment:
          payment = self.payment_repository.find_by_id(payment_id)
          if payment is None:
               raise NotFoundError("payment", payment_id)
          return payment

     def list_payments(self, filters: Optional[PaymentFilter] = None) -> List[Payment]:
          return self.payment_repository.find_all(filters or PaymentFilter())

     def list_payments_by_invoice(self, invoice_id: UUID) -> List[Payment]:
          return self.payment_repository.find_by_invoice(invoice_id)

     def list_payments_by_partner(self, partner_id: UUID) -> List[Payment]:
          return self.payment_repository.find_by_partner(partner_id)

     def partner_balance(self, partner_id: UUID) -> dict:
          """
          Summarize a partner's invoices.

          Args:
               partner_id: ID of the partner

          Returns:
               Dictionary with balance information
          """
          invoices = self.repository.find_by_partner(partner_id)

          draft = [inv for inv in invoices if inv.status == InvoiceStatus.DRAFT]
          open_ = [inv for inv in invoices if inv.status == InvoiceStatus.OPEN]
          paid = [inv for inv in invoices if inv.status == InvoiceStatus.PAID]
          cancelled = [inv for inv in invoices if inv.status == InvoiceStatus.CANCELLED]

          return {
               "partner_id": partner_id,
               "total_owed": sum((inv.amount_residual for inv in open_), Decimal("0.00")),
               "open_amount": sum((inv.amount_total for inv in open_), Decimal("0.00")),
               "overdue_amount": sum((inv.amount_residual for inv in open_ if inv.is_overdue), Decimal("0.00")),
               "paid_amount": sum((inv.amount_total for inv in paid), Decimal("0.00")),
               "draft_amount": sum((inv.amount_total for inv in draft), Decimal("0.00")),
               "total_invoices": len(invoices),
               "draft_count": len(draft),
               "open_count": len(open_),
               "paid_count": len(paid),
               "cancelled_count": len(cancelled),
          }

     # ------------------------------------------------------------------
     # Helpers
     # ------------------------------------------------------------------

     def _load(self, invoice_id: UUID, for_update: bool = False) -> Invoice:
          invoice = self.repository.find_by_id(invoice_id, for_update=for_update)
          if invoice is None:
               raise NotFoundError("invoice", invoice_id)
          return invoice

     def _transition(self, invoice_id: UUID, transition_name: str) -> Invoice:
          with self.repository.transaction():
               invoice = self._load(invoice_id, for_update=True)
               self.transitioner.transition(transition_name, invoice)
               invoice = self.repository.update(invoice)

          logger.info(f"Invoice {invoice.id} {transition_name}: now {invoice.status.value}")
          return invoice

     def _build_line(self, data: InvoiceLineCreate, sequence: int) -> InvoiceLine:
          return InvoiceLine(
               id=uuid.uuid4(),
               product_id=data.product_id,
               product_name=data.product_name,
               description=data.description,
               quantity=data.quantity,
               uom_id=data.uom_id,
               unit_price=data.unit_price,
               discount=data.discount,
               tax_id=data.tax_id,
               account_id=data.account_id,
               sequence=sequence,
          )

     def _publish(self, event_type: str, payload) -> None:
          publish_safely(self.publisher, event_type, payload)


def create_invoice_service(
     session: Session,
     settings: Optional[InvoicingSettings] = None,
     publisher: Optional[EventPublisher] = None,
) -> InvoiceLifecycleService:
     """
     Wire an InvoiceLifecycleService on a database session.

     Uses the configured workflow engine when settings.workflow_file is set,
     the built-in transition table otherwise.
     """
     settings = settings or InvoicingSettings.from_env()
     engine = ConfiguredWorkflowEngine.from_file(settings.workflow_file) if settings.workflow_file else None
     return InvoiceLifecycleService(
          repository=SqlAlchemyInvoiceRepository(session),
          payment_repository=SqlAlchemyPaymentRepository(session),
          tax_provider=DatabaseTaxRateProvider(session),
          publisher=publisher if publisher is not None else EventBus(),
          transitioner=create_transitioner(engine),
          settings=settings,
     )
