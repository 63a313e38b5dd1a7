# services/tax_service.py
"""
Tax Rate Provider - computes the tax amount of a line from its tax reference.

The amount calculator only depends on the TaxRateProvider protocol; the
database-backed implementation below reads AccountTax rows.
"""
import logging
from decimal import Decimal
from typing import Protocol
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from models import AccountTax, TaxAmountType
from .exceptions import TaxProviderError

logger = logging.getLogger(__name__)

HUNDRED = Decimal("100")


class TaxRateProvider(Protocol):
     def calculate_line_tax(self, tax_id: UUID, taxable_base: Decimal) -> Decimal:
          ...


def compute_tax(tax: AccountTax, taxable_base: Decimal) -> Decimal:
     """
     Compute the tax amount for a taxable base according to the tax's amount type.

     - percent:  base * rate / 100
     - fixed:    flat amount per line
     - division: tax already included in the base, base / (1 + rate/100) * rate/100
     - group:    0 (composition of child taxes is not supported)
     """
     if tax is None:
          return Decimal("0")

     rate = Decimal(tax.amount)
     if tax.amount_type == TaxAmountType.PERCENT:
          return taxable_base * (rate / HUNDRED)
     if tax.amount_type == TaxAmountType.FIXED:
          return rate
     if tax.amount_type == TaxAmountType.DIVISION:
          if rate > 0:
               return taxable_base / (1 + rate / HUNDRED) * (rate / HUNDRED)
          return Decimal("0")
     return Decimal("0")


class DatabaseTaxRateProvider:
     """Looks up active AccountTax rows through the given session."""

     def __init__(self, session: Session):
          self.session = session

     def get_tax(self, tax_id: UUID) -> AccountTax:
          try:
               tax = self.session.execute(
                    select(AccountTax).where(AccountTax.id == tax_id, AccountTax.active.is_(True))
               ).scalar_one_or_none()
          except SQLAlchemyError as exc:
               raise TaxProviderError(tax_id, f"failed to fetch tax {tax_id}: {exc}") from exc

          if tax is None:
               raise TaxProviderError(tax_id, f"tax not found: {tax_id}")
          return tax

     def calculate_line_tax(self, tax_id: UUID, taxable_base: Decimal) -> Decimal:
          tax = self.get_tax(tax_id)
          amount = compute_tax(tax, taxable_base)
          logger.debug(f"Tax {tax.name} ({tax.amount_type.value} {tax.amount}) on {taxable_base} = {amount}")
          return amount
