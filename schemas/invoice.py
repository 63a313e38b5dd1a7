# schemas/invoice.py
"""
Pydantic schemas for invoice commands, queries and event payloads.
"""
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, List
from uuid import UUID
from pydantic import BaseModel, Field, ConfigDict

from models.invoice import InvoiceStatus, InvoiceType
from .payment import PaymentResponse


class InvoiceLineCreate(BaseModel):
     """Raw line input. Derived amounts are computed by the engine."""
     product_id: Optional[UUID] = None
     product_name: Optional[str] = Field(None, max_length=255)
     description: Optional[str] = None
     quantity: Decimal = Field(..., gt=0, decimal_places=3, description="Quantity (must be positive)")
     uom_id: Optional[UUID] = None
     unit_price: Decimal = Field(..., ge=0, decimal_places=2, description="Unit price (cannot be negative)")
     discount: Decimal = Field(default=Decimal("0"), ge=0, le=100, decimal_places=2, description="Discount percentage")
     tax_id: Optional[UUID] = Field(None, description="Tax applied to the discounted subtotal")
     account_id: UUID = Field(..., description="Income/expense account for the line")


class InvoiceCreate(BaseModel):
     """Schema for creating a new draft invoice."""
     organization_id: UUID
     company_id: UUID
     partner_id: UUID
     currency_id: UUID
     journal_id: UUID
     type: InvoiceType
     reference: Optional[str] = Field(None, max_length=64)
     invoice_date: Optional[date] = Field(None, description="Defaults to today")
     due_date: Optional[date] = Field(None, description="Defaults to invoice date + 30 days")
     payment_term_id: Optional[UUID] = None
     fiscal_position_id: Optional[UUID] = None
     note: Optional[str] = None
     lines: List[InvoiceLineCreate] = Field(default_factory=list)
     created_by: Optional[UUID] = None

     model_config = ConfigDict(
          json_schema_extra={
               "example": {
                    "organization_id": "5b0c3c8e-8a4f-4e59-9a43-7d1f0e2f7c11",
                    "company_id": "0f3c7a52-3f0e-4f4b-8d5c-9b0b4c9a2e21",
                    "partner_id": "c7b7f0de-4a3e-4c39-9f0a-8f7e2d6b5a31",
                    "currency_id": "9a0d2b64-7c1e-4f0b-a0c2-3e5f7b9d1c41",
                    "journal_id": "1e2f3a4b-5c6d-4e7f-8a9b-0c1d2e3f4a51",
                    "type": "customer",
                    "lines": [
                         {
                              "description": "Consulting",
                              "quantity": 2,
                              "unit_price": 50.00,
                              "discount": 0,
                              "account_id": "7d8e9f0a-1b2c-4d3e-8f4a-5b6c7d8e9f61"
                         }
                    ]
               }
          }
     )


class InvoiceUpdate(BaseModel):
     """
     Schema for updating a draft invoice.

     Only provided fields are changed. When lines are provided they replace
     the whole line set.
     """
     partner_id: Optional[UUID] = None
     currency_id: Optional[UUID] = None
     journal_id: Optional[UUID] = None
     reference: Optional[str] = Field(None, max_length=64)
     invoice_date: Optional[date] = None
     due_date: Optional[date] = None
     payment_term_id: Optional[UUID] = None
     fiscal_position_id: Optional[UUID] = None
     note: Optional[str] = None
     lines: Optional[List[InvoiceLineCreate]] = None
     updated_by: Optional[UUID] = None


class InvoiceFilter(BaseModel):
     """Criteria for listing invoices."""
     organization_id: Optional[UUID] = None
     partner_id: Optional[UUID] = None
     status: Optional[InvoiceStatus] = None
     type: Optional[InvoiceType] = None
     date_from: Optional[date] = None
     date_to: Optional[date] = None
     limit: int = Field(50, ge=1, le=500)
     offset: int = Field(0, ge=0)


class InvoiceLineResponse(BaseModel):
     id: UUID
     sequence: int
     product_id: Optional[UUID] = None
     product_name: Optional[str] = None
     description: Optional[str] = None
     quantity: Decimal
     unit_price: Decimal
     discount: Decimal
     tax_id: Optional[UUID] = None
     account_id: UUID
     price_subtotal: Decimal
     price_tax: Decimal
     price_total: Decimal

     model_config = ConfigDict(from_attributes=True)


class InvoiceResponse(BaseModel):
     """Schema for invoice response and invoice event payloads."""
     id: UUID
     organization_id: UUID
     company_id: UUID
     partner_id: UUID
     reference: Optional[str] = None
     status: InvoiceStatus
     type: InvoiceType
     invoice_date: date
     due_date: date
     currency_id: UUID
     journal_id: UUID
     amount_untaxed: Decimal
     amount_tax: Decimal
     amount_total: Decimal
     amount_residual: Decimal
     note: Optional[str] = None
     created_at: Optional[datetime] = None
     updated_at: Optional[datetime] = None
     lines: List[InvoiceLineResponse] = Field(default_factory=list)
     payments: List[PaymentResponse] = Field(default_factory=list)

     model_config = ConfigDict(from_attributes=True)
