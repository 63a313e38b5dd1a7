# services/workflow_engine.py
"""
Configured workflow engine.

Loads a state machine definition from YAML and satisfies the WorkflowEngine
port used by ExternalEngineTransitioner. Guards are referenced by name and
resolved against services.lifecycle.GUARDS.

Example definition:

     workflow_id: invoice
     initial: draft
     states: [draft, open, paid, cancelled]
     transitions:
       - name: confirm
         from: [draft]
         to: open
         guard: has_lines
         message: only draft invoices can be confirmed

A ``from`` entry of ``"*"`` matches any state.
"""
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Tuple, Union

import yaml

from models import Invoice, InvoiceStatus
from .exceptions import InvalidStateTransitionError
from .lifecycle import GUARDS

logger = logging.getLogger(__name__)

ANY_STATE = "*"


class WorkflowConfigError(ValueError):
     """The workflow definition is malformed."""


@dataclass(frozen=True)
class ConfiguredTransition:
     name: str
     from_states: Tuple[str, ...]
     to_state: str
     guard: Optional[str] = None
     message: Optional[str] = None

     def allows(self, state: str) -> bool:
          return ANY_STATE in self.from_states or state in self.from_states


@dataclass(frozen=True)
class WorkflowDefinition:
     workflow_id: str
     initial: str
     states: Tuple[str, ...]
     transitions: Dict[str, ConfiguredTransition]


def parse_workflow(data: dict) -> WorkflowDefinition:
     """Build and check a definition from already-parsed YAML."""
     if not isinstance(data, dict):
          raise WorkflowConfigError("workflow definition must be a mapping")

     try:
          workflow_id = data["workflow_id"]
          initial = data["initial"]
          states = tuple(data["states"])
          raw_transitions = data["transitions"]
     except KeyError as exc:
          raise WorkflowConfigError(f"workflow definition is missing '{exc.args[0]}'") from exc

     if initial not in states:
          raise WorkflowConfigError(f"initial state '{initial}' is not a declared state")

     transitions = {}
     for raw in raw_transitions:
          from_states = raw.get("from", [])
          if isinstance(from_states, str):
               from_states = [from_states]
          transition = ConfiguredTransition(
               name=raw["name"],
               from_states=tuple(from_states),
               to_state=raw["to"],
               guard=raw.get("guard"),
               message=raw.get("message"),
          )
          unknown = [s for s in transition.from_states + (transition.to_state,) if s != ANY_STATE and s not in states]
          if unknown:
               raise WorkflowConfigError(f"transition '{transition.name}' references unknown states {unknown}")
          if transition.guard and transition.guard not in GUARDS:
               raise WorkflowConfigError(f"transition '{transition.name}' references unknown guard '{transition.guard}'")
          transitions[transition.name] = transition

     return WorkflowDefinition(
          workflow_id=workflow_id,
          initial=initial,
          states=states,
          transitions=transitions,
     )


def load_workflow(source: Union[str, Path]) -> WorkflowDefinition:
     """Load a workflow definition from a YAML file."""
     path = Path(source)
     try:
          with path.open("r", encoding="utf-8") as handle:
               data = yaml.safe_load(handle)
     except OSError as exc:
          raise WorkflowConfigError(f"failed to read workflow config {path}: {exc}") from exc
     except yaml.YAMLError as exc:
          raise WorkflowConfigError(f"failed to parse workflow config {path}: {exc}") from exc
     return parse_workflow(data)


class ConfiguredWorkflowEngine:
     """Workflow engine driven by a WorkflowDefinition."""

     def __init__(self, definition: WorkflowDefinition):
          self.definition = definition
          logger.info(
               f"Workflow '{definition.workflow_id}' loaded with "
               f"{len(definition.states)} states and {len(definition.transitions)} transitions"
          )

     @classmethod
     def from_file(cls, source: Union[str, Path]) -> "ConfiguredWorkflowEngine":
          return cls(load_workflow(source))

     @classmethod
     def from_yaml(cls, text: str) -> "ConfiguredWorkflowEngine":
          try:
               data = yaml.safe_load(text)
          except yaml.YAMLError as exc:
               raise WorkflowConfigError(f"failed to parse workflow config: {exc}") from exc
          return cls(parse_workflow(data))

     def transition(self, transition_name: str, entity: Invoice) -> None:
          transition = self.definition.transitions.get(transition_name)
          if transition is None:
               raise InvalidStateTransitionError(
                    transition_name, entity.status, f"transition {transition_name} not found"
               )

          current = entity.status.value
          if not transition.allows(current):
               raise InvalidStateTransitionError(
                    transition_name,
                    entity.status,
                    transition.message or f"cannot transition from {current} using {transition_name}",
               )

          if transition.guard:
               GUARDS[transition.guard].enforce(transition_name, entity)

          entity.status = InvoiceStatus(transition.to_state)
