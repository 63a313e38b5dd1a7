"""
Pytest fixtures for the invoicing engine test suite.

Provides:
- An in-memory SQLite database shared across one test (StaticPool)
- Repositories, a deterministic tax rate provider and a recording publisher
- An InvoiceLifecycleService wired on the test session
- Builders for invoice and payment commands
"""

from decimal import Decimal
from pathlib import Path
from typing import List, Tuple
from uuid import UUID

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from config import InvoicingSettings
from models import Base, InvoiceType
from schemas import InvoiceCreate, InvoiceLineCreate, PaymentCreate
from services.exceptions import TaxProviderError
from services.invoice_service import InvoiceLifecycleService
from services.lifecycle import BuiltinTransitioner
from services.repository import SqlAlchemyInvoiceRepository, SqlAlchemyPaymentRepository

ORGANIZATION_ID = UUID("5b0c3c8e-8a4f-4e59-9a43-7d1f0e2f7c11")
COMPANY_ID = UUID("0f3c7a52-3f0e-4f4b-8d5c-9b0b4c9a2e21")
PARTNER_ID = UUID("c7b7f0de-4a3e-4c39-9f0a-8f7e2d6b5a31")
CURRENCY_ID = UUID("9a0d2b64-7c1e-4f0b-a0c2-3e5f7b9d1c41")
JOURNAL_ID = UUID("1e2f3a4b-5c6d-4e7f-8a9b-0c1d2e3f4a51")
ACCOUNT_ID = UUID("7d8e9f0a-1b2c-4d3e-8f4a-5b6c7d8e9f61")

VAT_20 = UUID("20202020-2020-4020-8020-202020202020")
BROKEN_TAX = UUID("dead0000-0000-4000-8000-00000000dead")

WORKFLOW_FILE = Path(__file__).resolve().parent.parent / "workflows" / "invoice.yaml"


# =============================================================================
# Test doubles
# =============================================================================


class PercentTaxProvider:
    """Tax provider with fixed percentage rates keyed by tax id."""

    def __init__(self, rates=None):
        self.rates = rates if rates is not None else {VAT_20: Decimal("20")}
        self.calls: List[Tuple[UUID, Decimal]] = []

    def calculate_line_tax(self, tax_id, taxable_base):
        self.calls.append((tax_id, taxable_base))
        if tax_id not in self.rates:
            raise TaxProviderError(tax_id, f"tax not found: {tax_id}")
        return taxable_base * self.rates[tax_id] / Decimal("100")


class RecordingPublisher:
    """EventPublisher that keeps every published event, or fails on demand."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.events: List[Tuple[str, object]] = []

    def publish(self, event_type, payload):
        if self.fail:
            raise RuntimeError("event broker unavailable")
        self.events.append((event_type, payload))

    @property
    def types(self) -> List[str]:
        return [event_type for event_type, _ in self.events]

    def payloads(self, event_type: str) -> list:
        return [payload for kind, payload in self.events if kind == event_type]


# =============================================================================
# Builders
# =============================================================================


def make_line(**overrides) -> InvoiceLineCreate:
    data = {
        "description": "Consulting",
        "quantity": Decimal("2"),
        "unit_price": Decimal("50"),
        "discount": Decimal("0"),
        "account_id": ACCOUNT_ID,
    }
    data.update(overrides)
    return InvoiceLineCreate(**data)


def make_invoice_data(lines=None, **overrides) -> InvoiceCreate:
    data = {
        "organization_id": ORGANIZATION_ID,
        "company_id": COMPANY_ID,
        "partner_id": PARTNER_ID,
        "currency_id": CURRENCY_ID,
        "journal_id": JOURNAL_ID,
        "type": InvoiceType.CUSTOMER,
        "lines": [make_line()] if lines is None else lines,
    }
    data.update(overrides)
    return InvoiceCreate(**data)


def make_payment(amount, **overrides) -> PaymentCreate:
    return PaymentCreate(amount=Decimal(str(amount)), **overrides)


# =============================================================================
# Database fixtures
# =============================================================================


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session(engine) -> Session:
    factory = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    session = factory()
    yield session
    session.close()


@pytest.fixture
def invoice_repository(session):
    return SqlAlchemyInvoiceRepository(session)


@pytest.fixture
def payment_repository(session):
    return SqlAlchemyPaymentRepository(session)


# =============================================================================
# Service fixtures
# =============================================================================


@pytest.fixture
def tax_provider():
    return PercentTaxProvider()


@pytest.fixture
def publisher():
    return RecordingPublisher()


@pytest.fixture
def settings():
    return InvoicingSettings()


@pytest.fixture
def service(invoice_repository, payment_repository, tax_provider, publisher, settings):
    return InvoiceLifecycleService(
        repository=invoice_repository,
        payment_repository=payment_repository,
        tax_provider=tax_provider,
        publisher=publisher,
        transitioner=BuiltinTransitioner(),
        settings=settings,
    )


@pytest.fixture
def open_invoice(service):
    """Confirmed invoice with a total of 100."""
    invoice = service.create(make_invoice_data())
    return service.confirm(invoice.id)
