# services/amount_calculator.py
"""
Amount Calculator - line and invoice totals.

Per line, in order:
1. subtotal = quantity * unit_price
2. subtotal *= (1 - discount / 100) when a discount is set
3. tax = 0 without a tax reference, otherwise asked from the tax rate provider
4. total = subtotal + tax

Invoice totals are the sums of the line amounts. Subtotal and tax are rounded
to cents when computed, so the invoice totals are exact sums of what is
stored on the lines.

The only side effect is the tax lookup. A failing lookup is logged and the
line tax becomes zero, unless the calculator runs with the strict policy.
"""
import logging
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional

from config import TaxFailurePolicy
from models import Invoice, InvoiceLine
from .exceptions import TaxProviderError
from .tax_service import TaxRateProvider

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def to_decimal(value) -> Decimal:
     if value is None:
          return Decimal("0")
     if isinstance(value, Decimal):
          return value
     return Decimal(str(value))


def round_money(value) -> Decimal:
     return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def fits_places(value, places: int) -> bool:
     """True when the value carries no digits beyond the given decimal places."""
     value = to_decimal(value)
     return value == value.quantize(Decimal(1).scaleb(-places))


@dataclass(frozen=True)
class InvoiceTotals:
     amount_untaxed: Decimal
     amount_tax: Decimal
     amount_total: Decimal


class AmountCalculator:
     """Fills in line amounts and invoice totals."""

     def __init__(
          self,
          tax_provider: Optional[TaxRateProvider] = None,
          failure_policy: TaxFailurePolicy = TaxFailurePolicy.LENIENT,
     ):
          self.tax_provider = tax_provider
          self.failure_policy = TaxFailurePolicy(failure_policy)

     def line_subtotal(self, line: InvoiceLine) -> Decimal:
          subtotal = to_decimal(line.quantity) * to_decimal(line.unit_price)
          discount = to_decimal(line.discount)
          if discount > 0:
               subtotal = subtotal * (1 - discount / Decimal("100"))
          return round_money(subtotal)

     def line_tax(self, line: InvoiceLine, subtotal: Decimal) -> Decimal:
          if line.tax_id is None:
               return ZERO

          try:
               if self.tax_provider is None:
                    raise TaxProviderError(line.tax_id, "no tax rate provider configured")
               return round_money(self.tax_provider.calculate_line_tax(line.tax_id, subtotal))
          except Exception as exc:
               if self.failure_policy == TaxFailurePolicy.STRICT:
                    if isinstance(exc, TaxProviderError):
                         raise
                    raise TaxProviderError(line.tax_id, f"tax lookup failed for tax {line.tax_id}: {exc}") from exc
               logger.warning(f"Tax lookup failed for tax {line.tax_id}, using zero tax: {exc}")
               return ZERO

     def compute_line(self, line: InvoiceLine) -> InvoiceLine:
          subtotal = self.line_subtotal(line)
          tax = self.line_tax(line, subtotal)

          line.price_subtotal = subtotal
          line.price_tax = tax
          line.price_total = subtotal + tax
          return line

     def compute(self, lines: Iterable[InvoiceLine]) -> InvoiceTotals:
          """Compute every line in order and return the accumulated totals."""
          amount_untaxed = ZERO
          amount_tax = ZERO
          amount_total = ZERO

          for line in lines:
               self.compute_line(line)
               amount_untaxed += line.price_subtotal
               amount_tax += line.price_tax
               amount_total += line.price_total

          return InvoiceTotals(
               amount_untaxed=amount_untaxed,
               amount_tax=amount_tax,
               amount_total=amount_total,
          )

     def apply(self, invoice: Invoice) -> InvoiceTotals:
          """Recompute the invoice's lines and copy the totals onto the invoice."""
          totals = self.compute(invoice.lines)
          invoice.amount_untaxed = totals.amount_untaxed
          invoice.amount_tax = totals.amount_tax
          invoice.amount_total = totals.amount_total
          return totals
