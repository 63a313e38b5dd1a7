# services/lifecycle.py
"""
Invoice lifecycle state machine.

    draft --confirm--> open --pay--> paid
    draft/open --cancel--> cancelled
    draft --update--> draft

paid and cancelled are terminal. A transitioner is the only thing allowed
to change Invoice.status. Two variants exist, chosen at construction time:

- BuiltinTransitioner applies the INVOICE_TRANSITIONS table below.
- ExternalEngineTransitioner hands the transition to an injected workflow
  engine, which checks the guards and mutates the invoice itself.
"""
import logging
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Protocol, Tuple

from models import Invoice, InvoiceStatus
from .exceptions import InvalidStateTransitionError, ValidationError

logger = logging.getLogger(__name__)

TRANSITION_CONFIRM = "confirm"
TRANSITION_PAY = "pay"
TRANSITION_CANCEL = "cancel"
TRANSITION_UPDATE = "update"


@dataclass(frozen=True)
class Guard:
     """A condition on the invoice that must hold for a transition."""
     name: str
     description: str
     check: Callable[[Invoice], bool]
     message: str
     # empty line sets are input errors, everything else is a state error
     raises_validation_error: bool = False

     def enforce(self, transition: str, invoice: Invoice) -> None:
          if self.check(invoice):
               return
          if self.raises_validation_error:
               raise ValidationError(self.message, field="lines")
          raise InvalidStateTransitionError(transition, invoice.status, self.message)


@dataclass(frozen=True)
class Transition:
     """A permitted status change."""
     name: str
     from_states: Tuple[InvoiceStatus, ...]
     to_state: InvoiceStatus
     message: str
     guard: Optional[str] = None


HAS_LINES = Guard(
     name="has_lines",
     description="Invoice has at least one line",
     check=lambda invoice: len(invoice.lines) >= 1,
     message="invoice must have at least one line to be confirmed",
     raises_validation_error=True,
)

RESIDUAL_SETTLED = Guard(
     name="residual_settled",
     description="Invoice residual amount is zero",
     check=lambda invoice: invoice.amount_residual is not None and invoice.amount_residual <= 0,
     message="invoice residual amount is not settled",
)

GUARDS: Dict[str, Guard] = {
     HAS_LINES.name: HAS_LINES,
     RESIDUAL_SETTLED.name: RESIDUAL_SETTLED,
}

INVOICE_TRANSITIONS: Dict[str, Transition] = {
     TRANSITION_CONFIRM: Transition(
          TRANSITION_CONFIRM,
          (InvoiceStatus.DRAFT,),
          InvoiceStatus.OPEN,
          message="only draft invoices can be confirmed",
          guard=HAS_LINES.name,
     ),
     TRANSITION_PAY: Transition(
          TRANSITION_PAY,
          (InvoiceStatus.OPEN,),
          InvoiceStatus.PAID,
          message="only open invoices can be paid",
          guard=RESIDUAL_SETTLED.name,
     ),
     TRANSITION_CANCEL: Transition(
          TRANSITION_CANCEL,
          (InvoiceStatus.DRAFT, InvoiceStatus.OPEN),
          InvoiceStatus.CANCELLED,
          message="invoice cannot be cancelled in its current state",
     ),
     TRANSITION_UPDATE: Transition(
          TRANSITION_UPDATE,
          (InvoiceStatus.DRAFT,),
          InvoiceStatus.DRAFT,
          message="only draft invoices can be updated",
     ),
}


class Transitioner(Protocol):
     def transition(self, transition_name: str, invoice: Invoice) -> Invoice:
          ...


class WorkflowEngine(Protocol):
     """External engine port: checks guards and mutates the entity, or raises."""

     def transition(self, transition_name: str, entity: Invoice) -> None:
          ...


class BuiltinTransitioner:
     """Applies the inline transition table."""

     def __init__(self, transitions: Optional[Dict[str, Transition]] = None):
          self.transitions = transitions or INVOICE_TRANSITIONS

     def transition(self, transition_name: str, invoice: Invoice) -> Invoice:
          transition = self.transitions.get(transition_name)
          if transition is None:
               raise InvalidStateTransitionError(
                    transition_name, invoice.status, f"unknown transition '{transition_name}'"
               )

          if invoice.status not in transition.from_states:
               logger.info(f"Rejected '{transition_name}' for invoice {invoice.id} in status {invoice.status.value}")
               raise InvalidStateTransitionError(transition_name, invoice.status, transition.message)

          if transition.guard:
               GUARDS[transition.guard].enforce(transition_name, invoice)

          previous = invoice.status
          invoice.status = transition.to_state
          logger.debug(f"Invoice {invoice.id}: {previous.value} -> {invoice.status.value} ({transition_name})")
          return invoice


class ExternalEngineTransitioner:
     """Delegates guard checks and the status change to an injected workflow engine."""

     def __init__(self, engine: WorkflowEngine):
          self.engine = engine

     def transition(self, transition_name: str, invoice: Invoice) -> Invoice:
          try:
               self.engine.transition(transition_name, invoice)
          except (InvalidStateTransitionError, ValidationError):
               raise
          except Exception as exc:
               raise InvalidStateTransitionError(
                    transition_name,
                    invoice.status,
                    f"workflow engine rejected transition '{transition_name}': {exc}",
               ) from exc
          return invoice


def create_transitioner(engine: Optional[WorkflowEngine] = None) -> Transitioner:
     """Use the external engine when one is configured, the built-in table otherwise."""
     if engine is not None:
          return ExternalEngineTransitioner(engine)
     return BuiltinTransitioner()
