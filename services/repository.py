# services/repository.py
"""
Repository ports and their SQLAlchemy implementations.

All writes of one lifecycle operation happen inside a single
``transaction()`` scope: the scope commits once at the end and rolls back
everything when any exception escapes, so a payment is never stored without
the matching residual update.

Concurrency:
- Invoice rows carry a version column (SQLAlchemy version_id_col). An
  UPDATE whose version no longer matches raises StaleDataError, surfaced as
  ConcurrentModificationError.
- find_by_id(..., for_update=True) issues SELECT ... FOR UPDATE on backends
  that support it and refreshes the loaded instance.
"""
import logging
from contextlib import contextmanager
from typing import Generator, List, Optional, Protocol
from uuid import UUID

from sqlalchemy import select, inspect
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload
from sqlalchemy.orm.exc import StaleDataError

from models import Invoice, InvoiceStatus, InvoiceType, Payment
from schemas.invoice import InvoiceFilter
from schemas.payment import PaymentFilter
from .exceptions import ConcurrentModificationError, NotFoundError, PersistenceError

logger = logging.getLogger(__name__)


@contextmanager
def persistence_errors(action: str) -> Generator[None, None, None]:
     """Translate SQLAlchemy failures into engine persistence errors."""
     try:
          yield
     except StaleDataError as exc:
          logger.warning(f"Concurrent modification detected while trying to {action}")
          raise ConcurrentModificationError(f"failed to {action}: invoice was modified concurrently") from exc
     except SQLAlchemyError as exc:
          logger.error(f"Database error while trying to {action}: {exc}")
          raise PersistenceError(f"failed to {action}: {exc}") from exc


class InvoiceRepository(Protocol):
     def transaction(self): ...
     def create(self, invoice: Invoice) -> Invoice: ...
     def find_by_id(self, invoice_id: UUID, for_update: bool = False) -> Optional[Invoice]: ...
     def find_all(self, filters: InvoiceFilter) -> List[Invoice]: ...
     def update(self, invoice: Invoice) -> Invoice: ...
     def delete(self, invoice_id: UUID) -> None: ...
     def find_by_partner(self, partner_id: UUID) -> List[Invoice]: ...
     def find_by_status(self, status: InvoiceStatus) -> List[Invoice]: ...
     def find_by_type(self, invoice_type: InvoiceType) -> List[Invoice]: ...


class PaymentRepository(Protocol):
     def create(self, payment: Payment) -> Payment: ...
     def find_by_id(self, payment_id: UUID) -> Optional[Payment]: ...
     def find_all(self, filters: PaymentFilter) -> List[Payment]: ...
     def find_by_invoice(self, invoice_id: UUID) -> List[Payment]: ...
     def find_by_partner(self, partner_id: UUID) -> List[Payment]: ...


def _invoice_query():
     return select(Invoice).options(selectinload(Invoice.lines), selectinload(Invoice.payments))


class SqlAlchemyInvoiceRepository:
     """Invoice persistence on a SQLAlchemy session (unit of work)."""

     def __init__(self, session: Session):
          self.session = session

     @contextmanager
     def transaction(self) -> Generator[Session, None, None]:
          """
          Commit everything done inside the block at once, or nothing.

          Usage:
               with repository.transaction():
                    repository.create(invoice)
          """
          try:
               yield self.session
               self.session.commit()
          except StaleDataError as exc:
               self.session.rollback()
               raise ConcurrentModificationError("failed to commit: invoice was modified concurrently") from exc
          except SQLAlchemyError as exc:
               self.session.rollback()
               logger.error(f"Transaction failed and was rolled back: {exc}")
               raise PersistenceError(f"failed to commit: {exc}") from exc
          except Exception:
               self.session.rollback()
               raise

     def create(self, invoice: Invoice) -> Invoice:
          with persistence_errors("create invoice"):
               self.session.add(invoice)
               self.session.flush()
          return invoice

     def find_by_id(self, invoice_id: UUID, for_update: bool = False) -> Optional[Invoice]:
          stmt = _invoice_query().where(Invoice.id == invoice_id)
          if for_update:
               stmt = stmt.with_for_update().execution_options(populate_existing=True)
          with persistence_errors("get invoice"):
               return self.session.execute(stmt).scalar_one_or_none()

     def find_all(self, filters: InvoiceFilter) -> List[Invoice]:
          stmt = _invoice_query()
          if filters.organization_id:
               stmt = stmt.where(Invoice.organization_id == filters.organization_id)
          if filters.partner_id:
               stmt = stmt.where(Invoice.partner_id == filters.partner_id)
          if filters.status:
               stmt = stmt.where(Invoice.status == filters.status)
          if filters.type:
               stmt = stmt.where(Invoice.type == filters.type)
          if filters.date_from:
               stmt = stmt.where(Invoice.invoice_date >= filters.date_from)
          if filters.date_to:
               stmt = stmt.where(Invoice.invoice_date <= filters.date_to)

          stmt = (
               stmt.order_by(Invoice.invoice_date.desc(), Invoice.created_at.desc())
               .offset(filters.offset)
               .limit(filters.limit)
          )
          with persistence_errors("list invoices"):
               return list(self.session.execute(stmt).scalars().all())

     def update(self, invoice: Invoice) -> Invoice:
          """Write the invoice and its full line set (lines not present are deleted)."""
          with persistence_errors("update invoice"):
               if not inspect(invoice).persistent:
                    if self.session.get(Invoice, invoice.id) is None:
                         raise NotFoundError("invoice", invoice.id)
                    invoice = self.session.merge(invoice)
               self.session.flush()
          return invoice

     def delete(self, invoice_id: UUID) -> None:
          """Delete the invoice together with its lines and payments."""
          with persistence_errors("delete invoice"):
               invoice = self.session.get(Invoice, invoice_id)
               if invoice is None:
                    raise NotFoundError("invoice", invoice_id)
               self.session.delete(invoice)
               self.session.flush()

     def _find_where(self, action: str, *criteria) -> List[Invoice]:
          stmt = _invoice_query().where(*criteria).order_by(Invoice.invoice_date.desc())
          with persistence_errors(action):
               return list(self.session.execute(stmt).scalars().all())

     def find_by_partner(self, partner_id: UUID) -> List[Invoice]:
          return self._find_where("get invoices by partner", Invoice.partner_id == partner_id)

     def find_by_status(self, status: InvoiceStatus) -> List[Invoice]:
          return self._find_where("get invoices by status", Invoice.status == status)

     def find_by_type(self, invoice_type: InvoiceType) -> List[Invoice]:
          return self._find_where("get invoices by type", Invoice.type == invoice_type)


class SqlAlchemyPaymentRepository:
     """Payment persistence sharing the invoice repository's session."""

     def __init__(self, session: Session):
          self.session = session

     def create(self, payment: Payment) -> Payment:
          with persistence_errors("create payment"):
               self.session.add(payment)
               self.session.flush()
          return payment

     def find_by_id(self, payment_id: UUID) -> Optional[Payment]:
          with persistence_errors("get payment"):
               return self.session.get(Payment, payment_id)

     def find_all(self, filters: PaymentFilter) -> List[Payment]:
          stmt = select(Payment)
          if filters.organization_id:
               stmt = stmt.where(Payment.organization_id == filters.organization_id)
          if filters.invoice_id:
               stmt = stmt.where(Payment.invoice_id == filters.invoice_id)
          if filters.partner_id:
               stmt = stmt.where(Payment.partner_id == filters.partner_id)
          if filters.date_from:
               stmt = stmt.where(Payment.payment_date >= filters.date_from)
          if filters.date_to:
               stmt = stmt.where(Payment.payment_date <= filters.date_to)

          stmt = stmt.order_by(Payment.payment_date.desc()).offset(filters.offset).limit(filters.limit)
          with persistence_errors("list payments"):
               return list(self.session.execute(stmt).scalars().all())

     def find_by_invoice(self, invoice_id: UUID) -> List[Payment]:
          stmt = select(Payment).where(Payment.invoice_id == invoice_id).order_by(Payment.payment_date)
          with persistence_errors("get payments by invoice"):
               return list(self.session.execute(stmt).scalars().all())

     def find_by_partner(self, partner_id: UUID) -> List[Payment]:
          stmt = select(Payment).where(Payment.partner_id == partner_id).order_by(Payment.payment_date.desc())
          with persistence_errors("get payments by partner"):
               return list(self.session.execute(stmt).scalars().all())
