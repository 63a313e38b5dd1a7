# services/__init__.py
from .invoice_service import InvoiceLifecycleService, create_invoice_service
from .amount_calculator import AmountCalculator, InvoiceTotals
from .payment_applier import PaymentApplier, PaymentResult
from .lifecycle import (
     BuiltinTransitioner,
     ExternalEngineTransitioner,
     Transitioner,
     WorkflowEngine,
     create_transitioner,
)
from .workflow_engine import ConfiguredWorkflowEngine
from .repository import SqlAlchemyInvoiceRepository, SqlAlchemyPaymentRepository
from .tax_service import DatabaseTaxRateProvider, TaxRateProvider
from .events import Event, EventBus, EventPublisher
from .exceptions import (
     InvoicingError,
     ValidationError,
     NotFoundError,
     InvalidStateTransitionError,
     InsufficientResidualError,
     TaxProviderError,
     PersistenceError,
     ConcurrentModificationError,
)

__all__ = [
     "InvoiceLifecycleService",
     "create_invoice_service",
     "AmountCalculator",
     "InvoiceTotals",
     "PaymentApplier",
     "PaymentResult",
     "BuiltinTransitioner",
     "ExternalEngineTransitioner",
     "Transitioner",
     "WorkflowEngine",
     "create_transitioner",
     "ConfiguredWorkflowEngine",
     "SqlAlchemyInvoiceRepository",
     "SqlAlchemyPaymentRepository",
     "DatabaseTaxRateProvider",
     "TaxRateProvider",
     "Event",
     "EventBus",
     "EventPublisher",
     "InvoicingError",
     "ValidationError",
     "NotFoundError",
     "InvalidStateTransitionError",
     "InsufficientResidualError",
     "TaxProviderError",
     "PersistenceError",
     "ConcurrentModificationError",
]
