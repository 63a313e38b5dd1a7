"""
Tests for the YAML-configured workflow engine.
"""

from decimal import Decimal
from uuid import uuid4

import pytest

from models import Invoice, InvoiceStatus
from services.exceptions import InvalidStateTransitionError
from services.workflow_engine import (
    ConfiguredWorkflowEngine,
    WorkflowConfigError,
    load_workflow,
    parse_workflow,
)
from tests.conftest import WORKFLOW_FILE

MINIMAL = """
workflow_id: invoice
initial: draft
states: [draft, open, paid, cancelled]
transitions:
  - name: cancel
    from: "*"
    to: cancelled
"""


# =============================================================================
# Loading
# =============================================================================


class TestLoading:

    def test_bundled_definition(self):
        definition = load_workflow(WORKFLOW_FILE)
        assert definition.workflow_id == "invoice"
        assert definition.initial == "draft"
        assert set(definition.transitions) == {"confirm", "pay", "cancel", "update"}
        assert definition.transitions["confirm"].guard == "has_lines"

    def test_single_from_state_is_normalized(self):
        definition = parse_workflow({
            "workflow_id": "w",
            "initial": "draft",
            "states": ["draft", "open"],
            "transitions": [{"name": "confirm", "from": "draft", "to": "open"}],
        })
        assert definition.transitions["confirm"].from_states == ("draft",)

    def test_missing_key(self):
        with pytest.raises(WorkflowConfigError, match="transitions"):
            parse_workflow({"workflow_id": "w", "initial": "draft", "states": ["draft"]})

    def test_initial_must_be_declared(self):
        with pytest.raises(WorkflowConfigError):
            parse_workflow({"workflow_id": "w", "initial": "new", "states": ["draft"], "transitions": []})

    def test_unknown_state(self):
        with pytest.raises(WorkflowConfigError, match="unknown states"):
            parse_workflow({
                "workflow_id": "w",
                "initial": "draft",
                "states": ["draft"],
                "transitions": [{"name": "confirm", "from": ["draft"], "to": "open"}],
            })

    def test_unknown_guard(self):
        with pytest.raises(WorkflowConfigError, match="unknown guard"):
            parse_workflow({
                "workflow_id": "w",
                "initial": "draft",
                "states": ["draft", "open"],
                "transitions": [{"name": "confirm", "from": ["draft"], "to": "open", "guard": "approved"}],
            })

    def test_not_a_mapping(self):
        with pytest.raises(WorkflowConfigError):
            ConfiguredWorkflowEngine.from_yaml("- just\n- a list\n")

    def test_invalid_yaml(self):
        with pytest.raises(WorkflowConfigError):
            ConfiguredWorkflowEngine.from_yaml("workflow_id: [unclosed")

    def test_missing_file(self, tmp_path):
        with pytest.raises(WorkflowConfigError):
            load_workflow(tmp_path / "absent.yaml")


# =============================================================================
# Transitions
# =============================================================================


class TestEngineTransitions:

    def test_wildcard_from_state(self):
        engine = ConfiguredWorkflowEngine.from_yaml(MINIMAL)
        invoice = Invoice(id=uuid4(), status=InvoiceStatus.PAID, amount_residual=Decimal("0"))
        engine.transition("cancel", invoice)
        assert invoice.status == InvoiceStatus.CANCELLED

    def test_unknown_transition(self):
        engine = ConfiguredWorkflowEngine.from_yaml(MINIMAL)
        invoice = Invoice(id=uuid4(), status=InvoiceStatus.DRAFT)
        with pytest.raises(InvalidStateTransitionError, match="not found"):
            engine.transition("confirm", invoice)

    def test_default_message_without_configured_one(self):
        engine = ConfiguredWorkflowEngine.from_yaml("""
workflow_id: invoice
initial: draft
states: [draft, open]
transitions:
  - name: confirm
    from: [draft]
    to: open
""")
        invoice = Invoice(id=uuid4(), status=InvoiceStatus.OPEN)
        with pytest.raises(InvalidStateTransitionError, match="cannot transition from open using confirm"):
            engine.transition("confirm", invoice)
