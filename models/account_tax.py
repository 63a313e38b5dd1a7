# models/account_tax.py
import enum
import uuid

from sqlalchemy import Column, Integer, Numeric, String, Text, Boolean, Enum, Uuid
from .base import Base, AuditMixin


class TaxUse(str, enum.Enum):
     SALE = "sale"
     PURCHASE = "purchase"
     NONE = "none"


class TaxAmountType(str, enum.Enum):
     """How a tax amount is derived from the taxable base."""
     PERCENT = "percent"
     FIXED = "fixed"
     DIVISION = "division"
     GROUP = "group"


def _enum_values(enum_cls):
     return [member.value for member in enum_cls]


class AccountTax(AuditMixin, Base):
     """
     Tax definition referenced by invoice lines through tax_id.
     Read by the database-backed tax rate provider.
     """
     __tablename__ = "account_taxes"

     id = Column(Uuid, primary_key=True, default=uuid.uuid4)
     organization_id = Column(Uuid, nullable=False, index=True)
     company_id = Column(Uuid, nullable=True)

     name = Column(String(100), nullable=False)
     type_tax_use = Column(
          Enum(TaxUse, name="tax_use", values_callable=_enum_values, create_constraint=True),
          default=TaxUse.SALE,
          nullable=False
     )
     amount_type = Column(
          Enum(TaxAmountType, name="tax_amount_type", values_callable=_enum_values, create_constraint=True),
          default=TaxAmountType.PERCENT,
          nullable=False
     )
     amount = Column(Numeric(12, 4), nullable=False)

     price_include = Column(Boolean, default=False, nullable=False)
     include_base_amount = Column(Boolean, default=False, nullable=False)
     is_base_affected = Column(Boolean, default=False, nullable=False)

     description = Column(Text, nullable=True)
     sequence = Column(Integer, default=1, nullable=False)
     active = Column(Boolean, default=True, nullable=False)

     def __repr__(self):
          return f"<AccountTax(name='{self.name}', type='{self.amount_type.value}', amount={self.amount})>"
