# services/exceptions.py
"""
Typed exceptions raised by the invoicing engine.

Every exception carries a machine-readable ``code`` class attribute and the
structured data needed to act on it, so callers catch by type and never
parse messages.

    InvoicingError
    +-- ValidationError
    +-- NotFoundError
    +-- InvalidStateTransitionError
    +-- InsufficientResidualError
    +-- TaxProviderError
    +-- PersistenceError
        +-- ConcurrentModificationError
"""
from decimal import Decimal
from typing import Any, Optional


class InvoicingError(Exception):
     """Base exception for all invoicing engine errors."""

     code: str = "INVOICING_ERROR"


class ValidationError(InvoicingError):
     """Input failed validation. Raised before any mutation."""

     code: str = "VALIDATION_ERROR"

     def __init__(self, message: str, field: Optional[str] = None):
          self.field = field
          super().__init__(message)


class NotFoundError(InvoicingError):
     """The targeted invoice or payment does not exist."""

     code: str = "NOT_FOUND"

     def __init__(self, entity: str, entity_id: Any):
          self.entity = entity
          self.entity_id = entity_id
          super().__init__(f"{entity} not found: {entity_id}")


class InvalidStateTransitionError(InvoicingError):
     """A lifecycle guard rejected the requested transition."""

     code: str = "INVALID_STATE_TRANSITION"

     def __init__(self, transition: str, current_status: Any, message: Optional[str] = None):
          self.transition = transition
          self.current_status = getattr(current_status, "value", current_status)
          super().__init__(
               message or f"transition '{transition}' is not allowed from status '{self.current_status}'"
          )


class InsufficientResidualError(InvoicingError):
     """A payment would push the residual amount below zero."""

     code: str = "INSUFFICIENT_RESIDUAL"

     def __init__(self, amount: Decimal, residual: Decimal):
          self.amount = amount
          self.residual = residual
          super().__init__(
               f"payment amount cannot exceed residual amount (amount={amount}, residual={residual})"
          )


class TaxProviderError(InvoicingError):
     """The tax rate provider could not compute a tax amount."""

     code: str = "TAX_PROVIDER_ERROR"

     def __init__(self, tax_id: Any, message: Optional[str] = None):
          self.tax_id = tax_id
          super().__init__(message or f"tax could not be computed for tax {tax_id}")


class PersistenceError(InvoicingError):
     """Wraps a storage-layer failure. Always surfaced to the caller."""

     code: str = "PERSISTENCE_ERROR"


class ConcurrentModificationError(PersistenceError):
     """The stored invoice changed between read and write."""

     code: str = "CONCURRENT_MODIFICATION"
