# models/invoice.py
import enum
import uuid
from datetime import date
from decimal import Decimal

from sqlalchemy import (
     Column, Integer, Numeric, Date, DateTime, ForeignKey, Enum, String, Text, Uuid
)
from sqlalchemy.ext.orderinglist import ordering_list
from sqlalchemy.orm import relationship
from .base import Base, AuditMixin, utcnow


class InvoiceStatus(str, enum.Enum):
     """Lifecycle states of an invoice."""
     DRAFT = "draft"
     OPEN = "open"
     PAID = "paid"
     CANCELLED = "cancelled"


class InvoiceType(str, enum.Enum):
     """Whether the invoice bills a customer or records a supplier bill."""
     CUSTOMER = "customer"
     SUPPLIER = "supplier"


def _enum_values(enum_cls):
     return [member.value for member in enum_cls]


class Invoice(AuditMixin, Base):
     """
     Invoice model - the aggregate root for lines and payments.

     Totals (amount_untaxed, amount_tax, amount_total) are derived from the
     lines by the amount calculator. amount_residual starts equal to
     amount_total and decreases as payments are applied. Status is only
     changed through a transitioner (see services.lifecycle).
     """
     __tablename__ = "invoices"

     id = Column(Uuid, primary_key=True, default=uuid.uuid4)

     # Ownership and counterpart
     organization_id = Column(Uuid, nullable=False, index=True)
     company_id = Column(Uuid, nullable=False)
     partner_id = Column(Uuid, nullable=False, index=True)

     reference = Column(String(64), nullable=True)
     status = Column(
          Enum(InvoiceStatus, name="invoice_status", values_callable=_enum_values, create_constraint=True),
          default=InvoiceStatus.DRAFT,
          nullable=False,
          index=True
     )
     type = Column(
          Enum(InvoiceType, name="invoice_type", values_callable=_enum_values, create_constraint=True),
          nullable=False,
          index=True
     )

     # Dates
     invoice_date = Column(Date, nullable=False, index=True)
     due_date = Column(Date, nullable=False)

     # Accounting references
     payment_term_id = Column(Uuid, nullable=True)
     fiscal_position_id = Column(Uuid, nullable=True)
     currency_id = Column(Uuid, nullable=False)
     journal_id = Column(Uuid, nullable=False)

     # Derived totals
     amount_untaxed = Column(Numeric(12, 2), nullable=False, default=Decimal("0.00"))
     amount_tax = Column(Numeric(12, 2), nullable=False, default=Decimal("0.00"))
     amount_total = Column(Numeric(12, 2), nullable=False, default=Decimal("0.00"))
     amount_residual = Column(Numeric(12, 2), nullable=False, default=Decimal("0.00"))

     note = Column(Text, nullable=True)

     # Optimistic concurrency counter, bumped by SQLAlchemy on every UPDATE
     version = Column(Integer, nullable=False)

     # Relationships
     lines = relationship(
          "InvoiceLine",
          back_populates="invoice",
          cascade="all, delete-orphan",
          order_by="InvoiceLine.sequence",
          collection_class=ordering_list("sequence", count_from=1),
     )
     payments = relationship(
          "Payment",
          back_populates="invoice",
          cascade="all, delete-orphan",
          order_by="Payment.payment_date",
     )

     __mapper_args__ = {"version_id_col": version}

     def __repr__(self):
          status = self.status.value if self.status else None
          return f"<Invoice(id={self.id}, total={self.amount_total}, residual={self.amount_residual}, status='{status}')>"

     @property
     def is_overdue(self) -> bool:
          """Check if invoice is open and past its due date."""
          return self.status == InvoiceStatus.OPEN and self.due_date < date.today()

     @property
     def amount_paid(self) -> Decimal:
          return sum((payment.amount for payment in self.payments), Decimal("0.00"))


class InvoiceLine(Base):
     """
     One priced item on an invoice.

     price_subtotal, price_tax and price_total are filled in by the amount
     calculator and are never set by callers.
     """
     __tablename__ = "invoice_lines"

     id = Column(Uuid, primary_key=True, default=uuid.uuid4)
     invoice_id = Column(
          Uuid,
          ForeignKey("invoices.id", ondelete="CASCADE"),
          nullable=False,
          index=True
     )

     product_id = Column(Uuid, nullable=True)
     product_name = Column(String(255), nullable=True)
     description = Column(Text, nullable=True)
     quantity = Column(Numeric(12, 3), nullable=False)
     uom_id = Column(Uuid, nullable=True)
     unit_price = Column(Numeric(12, 2), nullable=False)
     discount = Column(Numeric(5, 2), nullable=False, default=Decimal("0"))
     tax_id = Column(Uuid, nullable=True)
     account_id = Column(Uuid, nullable=False)

     # Derived amounts
     price_subtotal = Column(Numeric(12, 2), nullable=False, default=Decimal("0.00"))
     price_tax = Column(Numeric(12, 2), nullable=False, default=Decimal("0.00"))
     price_total = Column(Numeric(12, 2), nullable=False, default=Decimal("0.00"))

     sequence = Column(Integer, nullable=False, default=1)

     created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
     updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

     invoice = relationship("Invoice", back_populates="lines")

     def __repr__(self):
          return f"<InvoiceLine(sequence={self.sequence}, qty={self.quantity}, unit_price={self.unit_price}, total={self.price_total})>"
