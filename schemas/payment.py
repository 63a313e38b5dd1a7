# schemas/payment.py
"""
Pydantic schemas for recording and reading payments.
"""
from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID
from pydantic import BaseModel, Field, ConfigDict


class PaymentCreate(BaseModel):
     """
     Request to record a payment against an open invoice.

     Invoice, partner, organization, company and currency references are
     always taken from the invoice; values supplied here are overwritten.
     The amount is checked by the payment applier, not here, so that
     state errors are reported before amount errors.
     """
     id: Optional[UUID] = None
     amount: Decimal = Field(..., description="Amount paid (must not exceed the residual)")
     payment_date: Optional[datetime] = Field(None, description="Defaults to now")
     journal_id: Optional[UUID] = None
     payment_method: Optional[str] = Field(None, max_length=50)
     reference: Optional[str] = Field(None, max_length=255)
     note: Optional[str] = None

     invoice_id: Optional[UUID] = None
     partner_id: Optional[UUID] = None
     organization_id: Optional[UUID] = None
     company_id: Optional[UUID] = None
     currency_id: Optional[UUID] = None

     created_by: Optional[UUID] = None

     model_config = ConfigDict(
          json_schema_extra={
               "example": {
                    "amount": 60.00,
                    "payment_method": "bank_transfer",
                    "reference": "BANK-2026-0042",
               }
          }
     )


class PaymentResponse(BaseModel):
     id: UUID
     invoice_id: UUID
     organization_id: UUID
     company_id: UUID
     partner_id: UUID
     payment_date: datetime
     amount: Decimal
     currency_id: UUID
     journal_id: Optional[UUID] = None
     payment_method: Optional[str] = None
     reference: Optional[str] = None
     note: Optional[str] = None

     model_config = ConfigDict(from_attributes=True)


class PaymentFilter(BaseModel):
     """Criteria for listing payments."""
     organization_id: Optional[UUID] = None
     invoice_id: Optional[UUID] = None
     partner_id: Optional[UUID] = None
     date_from: Optional[datetime] = None
     date_to: Optional[datetime] = None
     limit: int = Field(50, ge=1, le=500)
     offset: int = Field(0, ge=0)
