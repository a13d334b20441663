from __future__ import annotations

import logging
import uuid
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from pydantic import BaseModel

from .codegen import generate_code
from .config import Settings
from .errors import ReferentialInconsistency, UnknownNodeKind
from .models import (
    EDGE_CHANGE_ADAPTER,
    NODE_ADAPTER,
    NODE_CHANGE_ADAPTER,
    NODE_CLASSES,
    AgentData,
    AgentNode,
    ConnectResult,
    Connection,
    Edge,
    FunctionToolData,
    FunctionToolNode,
    Graph,
    GuardrailData,
    Node,
    NodeData,
    NodeKind,
    Position,
    PositionChange,
    RemoveChange,
    RunnerData,
    SelectChange,
    ToolParameter,
)
from .templates import load_template
from .validation import MISSING_NODE_REASON, validate_connection


LOGGER = logging.getLogger("agent_canvas.store")

DEFAULT_INSTRUCTIONS = "Enter the agent instructions here..."
DEFAULT_RUNNER_INPUT = "Enter the runner input here..."


def default_node_data(kind: NodeKind, node_id: str) -> NodeData:
    """Payload a freshly dropped node of *kind* starts with."""
    suffix = node_id[:4]
    if kind is NodeKind.AGENT:
        return AgentData(label="Agent", name=f"Agent_{suffix}", instructions=DEFAULT_INSTRUCTIONS)
    if kind is NodeKind.RUNNER:
        return RunnerData(label="Runner", input=DEFAULT_RUNNER_INPUT)
    if kind is NodeKind.FUNCTION_TOOL:
        return FunctionToolData(
            label="Function Tool",
            name=f"function_{suffix}",
            parameters=[ToolParameter(name="param1", type="str")],
            return_type="str",
            implementation='return "Hello World"',
        )
    if kind is NodeKind.GUARDRAIL:
        return GuardrailData(label="Guardrail", name=f"Guardrail_{suffix}")
    raise UnknownNodeKind(kind)


class GraphStore:
    """
    Owner of the single editable graph.

    Every mutation goes through the methods below. Edges are only created by
    :meth:`connect` (validated) or :meth:`replace` (trusted template input).
    """

    def __init__(self, validation_enabled: bool = True) -> None:
        self.nodes: List[Node] = []
        self.edges: List[Edge] = []
        self.selected_node_id: Optional[str] = None
        self.is_dragging = False
        self.generated_code = ""
        self.validation_enabled = validation_enabled

    @classmethod
    def from_settings(cls, settings: Settings) -> "GraphStore":
        return cls(validation_enabled=settings.validate_connections)

    # Queries

    def get_node(self, node_id: str) -> Optional[Node]:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    @property
    def selected_node(self) -> Optional[Node]:
        if self.selected_node_id is None:
            return None
        return self.get_node(self.selected_node_id)

    def snapshot(self) -> Graph:
        """Deep copy of the current graph."""
        return Graph(
            nodes=[node.model_copy(deep=True) for node in self.nodes],
            edges=[edge.model_copy(deep=True) for edge in self.edges],
        )

    def check_integrity(self, strict: bool = False) -> List[Edge]:
        """
        Return the edges whose endpoints do not resolve to nodes.

        Such edges indicate a defect upstream; they are logged and left in
        place. With *strict* set, :class:`ReferentialInconsistency` is raised
        instead of returning a non-empty list.
        """
        node_ids = {node.id for node in self.nodes}
        dangling = [edge for edge in self.edges if edge.source not in node_ids or edge.target not in node_ids]
        for edge in dangling:
            LOGGER.error("Edge %s references a missing node (%s -> %s)", edge.id, edge.source, edge.target)
        if strict and dangling:
            raise ReferentialInconsistency(edge.id for edge in dangling)
        return dangling

    # Mutations

    def add_node(self, kind: Union[NodeKind, str], position: Union[Position, Mapping[str, float]]) -> str:
        """Append a node of *kind* (enum or drag tag) at *position* and return its id."""
        try:
            node_kind = NodeKind(kind)
        except ValueError as exc:
            raise UnknownNodeKind(kind) from exc

        node_id = str(uuid.uuid4())
        node_class = NODE_CLASSES[node_kind]
        node = node_class(
            id=node_id,
            position=position if isinstance(position, Position) else Position.model_validate(position),
            data=default_node_data(node_kind, node_id),
        )
        self.nodes = [*self.nodes, node]
        LOGGER.debug("Added %s node %s", node_kind.value, node_id)
        return node_id

    def update_node_data(self, node_id: str, partial: Mapping[str, Any]) -> None:
        """Shallow-merge *partial* into the node's payload; unknown ids are ignored."""
        node = self.get_node(node_id)
        if node is None:
            LOGGER.debug("update_node_data ignored for unknown node %s", node_id)
            return
        data = node.data.merged(partial)
        self.nodes = [item.model_copy(update={"data": data}) if item.id == node_id else item for item in self.nodes]

    def apply_node_changes(self, changes: Iterable[Union[BaseModel, Mapping[str, Any]]]) -> None:
        """Apply a batch of position/remove/select changes in one step."""
        parsed = [_coerce(NODE_CHANGE_ADAPTER, change) for change in changes]
        removed = {change.id for change in parsed if isinstance(change, RemoveChange)}
        updates: Dict[str, Dict[str, Any]] = {}
        selected_node_id = self.selected_node_id

        for change in parsed:
            if isinstance(change, PositionChange) and change.position is not None:
                updates.setdefault(change.id, {})["position"] = change.position
            elif isinstance(change, SelectChange):
                updates.setdefault(change.id, {})["selected"] = change.selected
                if change.selected:
                    selected_node_id = change.id
                elif selected_node_id == change.id:
                    selected_node_id = None

        nodes = [
            node.model_copy(update=updates[node.id]) if node.id in updates else node
            for node in self.nodes
            if node.id not in removed
        ]
        edges = [edge for edge in self.edges if edge.source not in removed and edge.target not in removed]
        if selected_node_id in removed:
            selected_node_id = None

        if removed:
            LOGGER.debug("Removed nodes %s and %d attached edges", sorted(removed), len(self.edges) - len(edges))
        self.nodes = nodes
        self.edges = edges
        self.selected_node_id = selected_node_id
        self.is_dragging = any(isinstance(change, PositionChange) and change.dragging for change in parsed)

    def apply_edge_changes(self, changes: Iterable[Union[BaseModel, Mapping[str, Any]]]) -> None:
        """Apply a batch of remove/select changes to edges in one step."""
        parsed = [_coerce(EDGE_CHANGE_ADAPTER, change) for change in changes]
        removed = {change.id for change in parsed if isinstance(change, RemoveChange)}
        selection = {change.id: change.selected for change in parsed if isinstance(change, SelectChange)}

        self.edges = [
            edge.model_copy(update={"selected": selection[edge.id]}) if edge.id in selection else edge
            for edge in self.edges
            if edge.id not in removed
        ]

    def connect(self, connection: Union[Connection, Mapping[str, Any]]) -> ConnectResult:
        """Admit a candidate edge if the connection rules allow it."""
        candidate = connection if isinstance(connection, Connection) else Connection.model_validate(connection)

        if not self.validation_enabled:
            if self.get_node(candidate.source) is None or self.get_node(candidate.target) is None:
                LOGGER.info("Rejected connection %s -> %s: %s", candidate.source, candidate.target, MISSING_NODE_REASON)
                return ConnectResult(False, MISSING_NODE_REASON)
            reason = "Connection added without validation"
            edge = self._append_edge(candidate, reason)
            return ConnectResult(True, reason, edge)

        verdict = validate_connection(candidate, self.nodes)
        if not verdict.valid:
            LOGGER.info("Rejected connection %s -> %s: %s", candidate.source, candidate.target, verdict.reason)
            return ConnectResult(False, verdict.reason)

        edge = self._append_edge(candidate, verdict.reason)
        self._mirror(candidate)
        return ConnectResult(True, verdict.reason, edge)

    def replace(self, nodes: Sequence[Union[Node, Mapping[str, Any]]], edges: Sequence[Union[Edge, Mapping[str, Any]]]) -> None:
        """Adopt *nodes* and *edges* wholesale without validating them."""
        self.nodes = [_coerce(NODE_ADAPTER, node).model_copy(deep=True) for node in nodes]
        self.edges = [
            edge.model_copy(deep=True) if isinstance(edge, Edge) else Edge.model_validate(edge) for edge in edges
        ]
        if self.selected_node_id is not None and self.get_node(self.selected_node_id) is None:
            self.selected_node_id = None

    def load_template(self, template_id: str) -> None:
        nodes, edges = load_template(template_id)
        self.replace(nodes, edges)
        LOGGER.info("Loaded template %s (%d nodes, %d edges)", template_id, len(nodes), len(edges))

    def clear(self) -> None:
        self.nodes = []
        self.edges = []
        self.selected_node_id = None
        self.is_dragging = False

    def select_node(self, node_id: Optional[str]) -> None:
        """Select *node_id* (or nothing) and keep the per-node ``selected`` flags in step."""
        if node_id is not None and self.get_node(node_id) is None:
            LOGGER.debug("select_node ignored for unknown node %s", node_id)
            return
        self.nodes = [
            node.model_copy(update={"selected": node.id == node_id}) if node.selected != (node.id == node_id) else node
            for node in self.nodes
        ]
        self.selected_node_id = node_id

    def toggle_validation(self) -> bool:
        self.validation_enabled = not self.validation_enabled
        LOGGER.info("Connection validation %s", "enabled" if self.validation_enabled else "disabled")
        return self.validation_enabled

    def generate_code(self) -> str:
        """Render the current graph and keep the text in :attr:`generated_code`."""
        self.generated_code = generate_code(self.nodes, self.edges)
        return self.generated_code

    def _append_edge(self, candidate: Connection, message: str) -> Edge:
        edge = Edge(id=f"e-{uuid.uuid4()}", source=candidate.source, target=candidate.target, message=message)
        self.edges = [*self.edges, edge]
        return edge

    def _mirror(self, candidate: Connection) -> None:
        source = self.get_node(candidate.source)
        target = self.get_node(candidate.target)
        if not isinstance(target, AgentNode):
            return
        if isinstance(source, FunctionToolNode) and source.id not in target.data.tools:
            self.update_node_data(target.id, {"tools": [*target.data.tools, source.id]})
        elif isinstance(source, AgentNode) and source.id not in target.data.handoffs:
            self.update_node_data(target.id, {"handoffs": [*target.data.handoffs, source.id]})


def _coerce(adapter, value):
    return value if isinstance(value, BaseModel) else adapter.validate_python(value)


__all__ = ["GraphStore", "default_node_data"]
