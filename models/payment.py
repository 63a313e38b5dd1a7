# models/payment.py
"""
Payment model - money received against (or paid out for) an invoice.

A payment is written once and never modified afterwards. Identity context
(invoice, partner, organization, company, currency) is always copied from
the invoice it settles.
"""
import uuid

from sqlalchemy import Column, Numeric, String, Text, DateTime, ForeignKey, Uuid
from sqlalchemy.orm import relationship
from .base import Base, AuditMixin


class Payment(AuditMixin, Base):
     """Immutable payment record owned by an invoice through invoice_id."""
     __tablename__ = "payments"

     id = Column(Uuid, primary_key=True, default=uuid.uuid4)
     organization_id = Column(Uuid, nullable=False, index=True)
     company_id = Column(Uuid, nullable=False)
     invoice_id = Column(
          Uuid,
          ForeignKey("invoices.id", ondelete="CASCADE"),
          nullable=False,
          index=True
     )
     partner_id = Column(Uuid, nullable=False, index=True)

     payment_date = Column(DateTime(timezone=True), nullable=False, index=True)
     amount = Column(Numeric(12, 2), nullable=False)
     currency_id = Column(Uuid, nullable=False)
     journal_id = Column(Uuid, nullable=True)
     payment_method = Column(String(50), nullable=True)
     reference = Column(String(255), nullable=True)
     note = Column(Text, nullable=True)

     # Relationships
     invoice = relationship("Invoice", back_populates="payments")

     def __repr__(self):
          return f"<Payment(id={self.id}, invoice_id={self.invoice_id}, amount={self.amount})>"
