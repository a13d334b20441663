from __future__ import annotations

import pytest
from pydantic import ValidationError

from agent_canvas.errors import ConnectionRejected
from agent_canvas.models import (
    NODE_ADAPTER,
    AgentNode,
    ConnectResult,
    FunctionToolData,
    FunctionToolNode,
    Graph,
    NodeKind,
    RunnerData,
    RunnerMode,
    RunnerNode,
)


def test_nodes_are_discriminated_by_type_tag() -> None:
    node = NODE_ADAPTER.validate_python(
        {
            "id": "tool-1",
            "type": "functionTool",
            "position": {"x": 10, "y": 20},
            "data": {
                "label": "Function Tool",
                "name": "get_weather",
                "parameters": [{"name": "city", "type": "str"}],
                "returnType": "str",
            },
        }
    )
    assert isinstance(node, FunctionToolNode)
    assert node.kind is NodeKind.FUNCTION_TOOL
    assert node.data.return_type == "str"
    assert node.data.parameters[0].name == "city"


def test_unknown_type_tag_fails_validation() -> None:
    with pytest.raises(ValidationError):
        NODE_ADAPTER.validate_python({"id": "x", "type": "planner", "data": {}})


def test_merged_accepts_wire_and_python_names() -> None:
    data = FunctionToolData(name="lookup", return_type="str")
    assert data.merged({"returnType": "int"}).return_type == "int"
    assert data.merged({"return_type": "bool", "name": "check"}).name == "check"


def test_merged_keeps_extra_canvas_keys() -> None:
    data = RunnerData(input="hi").merged({"color": "#555"})
    assert data.model_dump()["color"] == "#555"
    assert data.input == "hi"


def test_merged_rejects_invalid_mode() -> None:
    with pytest.raises(ValidationError):
        RunnerData().merged({"mode": "parallel"})


def test_graph_json_uses_wire_names() -> None:
    graph = Graph(
        nodes=[
            AgentNode(id="a"),
            FunctionToolNode(id="t", data=FunctionToolData(name="f")),
            RunnerNode(id="r", data=RunnerData(mode=RunnerMode.ASYNC)),
        ]
    )
    payload = graph.model_dump_json(by_alias=True)
    assert '"returnType"' in payload
    assert '"functionTool"' in payload
    restored = Graph.model_validate_json(payload)
    assert [node.kind for node in restored.nodes] == [NodeKind.AGENT, NodeKind.FUNCTION_TOOL, NodeKind.RUNNER]
    assert restored.nodes[2].data.mode is RunnerMode.ASYNC


def test_connect_result_raise_for_status() -> None:
    assert ConnectResult(True, "ok").raise_for_status().accepted is True
    with pytest.raises(ConnectionRejected) as excinfo:
        ConnectResult(False, "Unsupported connection: agent -> functionTool").raise_for_status()
    assert excinfo.value.reason == "Unsupported connection: agent -> functionTool"
