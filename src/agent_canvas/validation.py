"""Connection rules deciding which edges the canvas may create."""

from __future__ import annotations

from typing import Dict, Sequence

from .models import (
    AgentNode,
    Connection,
    FunctionToolNode,
    GuardrailNode,
    Node,
    RunnerNode,
    ValidationResult,
)


MISSING_NODE_REASON = "Invalid connection: node does not exist"


def validate_connection(connection: Connection, nodes: Sequence[Node]) -> ValidationResult:
    """
    Decide whether *connection* may be added to a graph holding *nodes*.

    The check only reads its arguments, so callers may run it speculatively
    (for example while the user is still dragging a connection).
    """
    index: Dict[str, Node] = {node.id: node for node in nodes}
    source = index.get(connection.source)
    target = index.get(connection.target)

    if source is None or target is None:
        return ValidationResult(False, MISSING_NODE_REASON)

    if isinstance(source, FunctionToolNode) and isinstance(target, AgentNode):
        if source.id in target.data.tools:
            return ValidationResult(False, "This tool is already connected to the agent")
        return ValidationResult(True, "Valid connection: tool -> agent")

    if isinstance(source, AgentNode) and isinstance(target, AgentNode):
        if source.id in target.data.handoffs:
            return ValidationResult(False, "This agent is already a handoff target")
        return ValidationResult(True, "Valid connection: agent -> agent (handoff)")

    if isinstance(source, AgentNode) and isinstance(target, RunnerNode):
        return ValidationResult(True, "Valid connection: agent -> runner")

    if isinstance(source, GuardrailNode) and isinstance(target, AgentNode):
        return ValidationResult(True, "Valid connection: guardrail -> agent")

    return ValidationResult(False, f"Unsupported connection: {source.type} -> {target.type}")


__all__ = ["MISSING_NODE_REASON", "validate_connection"]
