# config.py
"""
Invoicing engine settings loaded from environment variables.

Environment:
     INVOICE_DEFAULT_DUE_DAYS     days between invoice date and default due date (30)
     INVOICE_TAX_FAILURE_POLICY   lenient | strict (lenient)
     INVOICE_WORKFLOW_FILE        YAML workflow definition; built-in table when unset
     LOG_LEVEL                    logging level name (INFO)

Use .env file for local development.
"""
import enum
import logging
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

DEFAULT_DUE_DAYS = 30


class TaxFailurePolicy(str, enum.Enum):
     """What to do when the tax rate provider fails for a line."""
     LENIENT = "lenient"  # log and use zero tax
     STRICT = "strict"  # fail the operation


@dataclass(frozen=True)
class InvoicingSettings:
     default_due_days: int = DEFAULT_DUE_DAYS
     tax_failure_policy: TaxFailurePolicy = TaxFailurePolicy.LENIENT
     workflow_file: Optional[str] = None

     @classmethod
     def from_env(cls) -> "InvoicingSettings":
          raw_days = os.getenv("INVOICE_DEFAULT_DUE_DAYS", str(DEFAULT_DUE_DAYS))
          try:
               default_due_days = int(raw_days)
          except ValueError as exc:
               raise ValueError(f"INVOICE_DEFAULT_DUE_DAYS must be an integer, got {raw_days!r}") from exc
          if default_due_days < 0:
               raise ValueError("INVOICE_DEFAULT_DUE_DAYS cannot be negative")

          raw_policy = os.getenv("INVOICE_TAX_FAILURE_POLICY", TaxFailurePolicy.LENIENT.value).strip().lower()
          try:
               tax_failure_policy = TaxFailurePolicy(raw_policy)
          except ValueError as exc:
               raise ValueError(f"INVOICE_TAX_FAILURE_POLICY must be 'lenient' or 'strict', got {raw_policy!r}") from exc

          return cls(
               default_due_days=default_due_days,
               tax_failure_policy=tax_failure_policy,
               workflow_file=os.getenv("INVOICE_WORKFLOW_FILE") or None,
          )


def configure_logging(level: Optional[str] = None) -> None:
     logging.basicConfig(
          level=(level or os.getenv("LOG_LEVEL", "INFO")).upper(),
          format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
     )
