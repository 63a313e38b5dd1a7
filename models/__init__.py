# models/__init__.py
from .base import Base
from .invoice import Invoice, InvoiceLine, InvoiceStatus, InvoiceType
from .payment import Payment
from .account_tax import AccountTax, TaxAmountType, TaxUse

__all__ = [
     "Base",
     "Invoice",
     "InvoiceLine",
     "InvoiceStatus",
     "InvoiceType",
     "Payment",
     "AccountTax",
     "TaxAmountType",
     "TaxUse",
]
