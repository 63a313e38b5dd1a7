# schemas/__init__.py
from .invoice import (
     InvoiceLineCreate,
     InvoiceCreate,
     InvoiceUpdate,
     InvoiceFilter,
     InvoiceLineResponse,
     InvoiceResponse,
)
from .payment import (
     PaymentCreate,
     PaymentResponse,
     PaymentFilter,
)

__all__ = [
     "InvoiceLineCreate",
     "InvoiceCreate",
     "InvoiceUpdate",
     "InvoiceFilter",
     "InvoiceLineResponse",
     "InvoiceResponse",
     "PaymentCreate",
     "PaymentResponse",
     "PaymentFilter",
]
