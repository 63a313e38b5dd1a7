# services/validation.py
from decimal import Decimal

from models import Invoice, InvoiceLine
from .amount_calculator import fits_places, to_decimal
from .exceptions import ValidationError

REQUIRED_REFERENCES = (
     ("organization_id", "organization ID is required"),
     ("company_id", "company ID is required"),
     ("partner_id", "partner ID is required"),
     ("currency_id", "currency ID is required"),
     ("journal_id", "journal ID is required"),
)

# decimal places stored by the line columns
LINE_PRECISION = (
     ("quantity", 3),
     ("unit_price", 2),
     ("discount", 2),
)


def validate_line(line: InvoiceLine) -> None:
     if line.account_id is None:
          raise ValidationError("account ID is required for all lines", field="account_id")
     if line.quantity is None or to_decimal(line.quantity) <= 0:
          raise ValidationError("quantity must be positive for all lines", field="quantity")
     if line.unit_price is None or to_decimal(line.unit_price) < 0:
          raise ValidationError("unit price cannot be negative", field="unit_price")
     discount = to_decimal(line.discount)
     if discount < 0 or discount > Decimal("100"):
          raise ValidationError("discount must be between 0 and 100", field="discount")
     for field, places in LINE_PRECISION:
          if not fits_places(getattr(line, field), places):
               raise ValidationError(f"{field} cannot have more than {places} decimal places", field=field)


def validate_invoice(invoice: Invoice) -> None:
     """Check required references and the line set. Raises ValidationError on the first problem."""
     for field, message in REQUIRED_REFERENCES:
          if getattr(invoice, field) is None:
               raise ValidationError(message, field=field)

     if invoice.type is None:
          raise ValidationError("invoice type is required", field="type")

     if not invoice.lines:
          raise ValidationError("invoice must have at least one line", field="lines")

     for line in invoice.lines:
          validate_line(line)
