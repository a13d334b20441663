"""Graph entities shared by the store, the validator and the code generator."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Mapping, Optional, Type, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from .errors import ConnectionRejected


class NodeKind(str, Enum):
    """Node kinds, valued with the tags carried by canvas drag payloads."""

    AGENT = "agent"
    RUNNER = "runner"
    FUNCTION_TOOL = "functionTool"
    GUARDRAIL = "guardrail"


class RunnerMode(str, Enum):
    SYNC = "sync"
    ASYNC = "async"


class Position(BaseModel):
    x: float = 0.0
    y: float = 0.0


class NodeData(BaseModel):
    """Base payload. Unknown keys sent by the canvas are kept as extras."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    label: str = ""

    def merged(self, partial: Mapping[str, Any]) -> "NodeData":
        """Return a copy with *partial* shallow-merged on top, revalidated."""

        aliases = {field.alias: name for name, field in type(self).model_fields.items() if field.alias}
        payload = self.model_dump()
        payload.update({aliases.get(key, key): value for key, value in partial.items()})
        return type(self).model_validate(payload)


class AgentData(NodeData):
    name: str = ""
    instructions: str = ""
    handoff_description: Optional[str] = None
    output_type: Optional[str] = None
    # Mirrors of the inbound Agent/FunctionTool edges, maintained by GraphStore.connect.
    handoffs: List[str] = Field(default_factory=list)
    tools: List[str] = Field(default_factory=list)


class RunnerData(NodeData):
    input: str = ""
    mode: RunnerMode = RunnerMode.SYNC
    context: Optional[str] = None


class ToolParameter(BaseModel):
    name: str = ""
    type: str = "str"
    description: Optional[str] = None


class FunctionToolData(NodeData):
    name: str = ""
    parameters: List[ToolParameter] = Field(default_factory=list)
    return_type: str = Field(default="str", alias="returnType")
    implementation: Optional[str] = None


class GuardrailData(NodeData):
    name: str = ""
    output_model: Optional[str] = None
    guardrail_function: Optional[str] = None


class _NodeBase(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    position: Position = Field(default_factory=Position)
    selected: bool = False

    @property
    def kind(self) -> NodeKind:
        return NodeKind(self.type)  # type: ignore[attr-defined]


class AgentNode(_NodeBase):
    type: Literal["agent"] = "agent"
    data: AgentData = Field(default_factory=AgentData)


class RunnerNode(_NodeBase):
    type: Literal["runner"] = "runner"
    data: RunnerData = Field(default_factory=RunnerData)


class FunctionToolNode(_NodeBase):
    type: Literal["functionTool"] = "functionTool"
    data: FunctionToolData = Field(default_factory=FunctionToolData)


class GuardrailNode(_NodeBase):
    type: Literal["guardrail"] = "guardrail"
    data: GuardrailData = Field(default_factory=GuardrailData)


Node = Annotated[
    Union[AgentNode, RunnerNode, FunctionToolNode, GuardrailNode],
    Field(discriminator="type"),
]

NODE_CLASSES: Dict[NodeKind, Type[_NodeBase]] = {
    NodeKind.AGENT: AgentNode,
    NodeKind.RUNNER: RunnerNode,
    NodeKind.FUNCTION_TOOL: FunctionToolNode,
    NodeKind.GUARDRAIL: GuardrailNode,
}


class Edge(BaseModel):
    """Directed relationship between two node ids."""

    model_config = ConfigDict(extra="allow")

    id: str
    source: str
    target: str
    selected: bool = False
    message: Optional[str] = None


class Connection(BaseModel):
    """Candidate edge proposed by the canvas before it has an id."""

    model_config = ConfigDict(extra="ignore")

    source: str
    target: str


class Graph(BaseModel):
    """Snapshot of a whole graph, used for import and export."""

    nodes: List[Node] = Field(default_factory=list)
    edges: List[Edge] = Field(default_factory=list)


class PositionChange(BaseModel):
    type: Literal["position"] = "position"
    id: str
    position: Optional[Position] = None
    dragging: bool = False


class RemoveChange(BaseModel):
    type: Literal["remove"] = "remove"
    id: str


class SelectChange(BaseModel):
    type: Literal["select"] = "select"
    id: str
    selected: bool = True


NodeChange = Annotated[Union[PositionChange, RemoveChange, SelectChange], Field(discriminator="type")]
EdgeChange = Annotated[Union[RemoveChange, SelectChange], Field(discriminator="type")]

NODE_ADAPTER: TypeAdapter = TypeAdapter(Node)
NODE_CHANGE_ADAPTER: TypeAdapter = TypeAdapter(NodeChange)
EDGE_CHANGE_ADAPTER: TypeAdapter = TypeAdapter(EdgeChange)


@dataclass(frozen=True)
class ValidationResult:
    """Verdict of the connection rules for one candidate edge."""

    valid: bool
    reason: str


@dataclass(frozen=True)
class ConnectResult:
    """Outcome of GraphStore.connect."""

    accepted: bool
    reason: str
    edge: Optional[Edge] = None

    def raise_for_status(self) -> "ConnectResult":
        if not self.accepted:
            raise ConnectionRejected(self.reason)
        return self


__all__ = [
    "AgentData",
    "AgentNode",
    "ConnectResult",
    "Connection",
    "EDGE_CHANGE_ADAPTER",
    "Edge",
    "EdgeChange",
    "FunctionToolData",
    "FunctionToolNode",
    "Graph",
    "GuardrailData",
    "GuardrailNode",
    "NODE_ADAPTER",
    "NODE_CHANGE_ADAPTER",
    "NODE_CLASSES",
    "Node",
    "NodeChange",
    "NodeData",
    "NodeKind",
    "Position",
    "PositionChange",
    "RemoveChange",
    "RunnerData",
    "RunnerMode",
    "RunnerNode",
    "SelectChange",
    "ToolParameter",
    "ValidationResult",
]
