from __future__ import annotations

import pytest

from agent_canvas.models import AgentNode, FunctionToolNode, NodeKind, RunnerMode, RunnerNode
from agent_canvas.templates import TEMPLATES, list_templates, load_template


def test_registry_lists_builtin_templates() -> None:
    assert [template.key for template in list_templates()] == ["basic", "multiAgent", "functionTool"]


def test_basic_template_contents() -> None:
    nodes, edges = load_template("basic")
    agent, runner = nodes
    assert isinstance(agent, AgentNode) and isinstance(runner, RunnerNode)
    assert agent.data.name == "Assistant"
    assert agent.data.instructions == "You are a helpful assistant."
    assert agent.data.tools == [] and agent.data.handoffs == []
    assert runner.data.input == "Write a haiku about recursion in programming."
    assert runner.data.mode is RunnerMode.SYNC
    assert [(edge.source, edge.target) for edge in edges] == [(agent.id, runner.id)]


@pytest.mark.parametrize("template_id", sorted(TEMPLATES))
def test_templates_are_referentially_consistent(template_id: str) -> None:
    nodes, edges = load_template(template_id)
    node_ids = [node.id for node in nodes]
    assert len(set(node_ids)) == len(node_ids)
    assert len({edge.id for edge in edges}) == len(edges)
    for edge in edges:
        assert edge.source in node_ids and edge.target in node_ids


@pytest.mark.parametrize("template_id", sorted(TEMPLATES))
def test_template_mirrors_match_edges(template_id: str) -> None:
    nodes, edges = load_template(template_id)
    kinds = {node.id: node.kind for node in nodes}
    for node in nodes:
        if not isinstance(node, AgentNode):
            continue
        inbound = [edge.source for edge in edges if edge.target == node.id]
        assert node.data.tools == [source for source in inbound if kinds[source] is NodeKind.FUNCTION_TOOL]
        assert node.data.handoffs == [source for source in inbound if kinds[source] is NodeKind.AGENT]


def test_function_tool_template_contents() -> None:
    nodes, _ = load_template("functionTool")
    tool = next(node for node in nodes if isinstance(node, FunctionToolNode))
    assert tool.data.name == "get_weather"
    assert tool.data.implementation == 'return f"The weather in {city} is sunny."'


def test_each_load_uses_fresh_ids() -> None:
    first, _ = load_template("basic")
    second, _ = load_template("basic")
    assert {node.id for node in first}.isdisjoint(node.id for node in second)


def test_unknown_template_falls_back_to_basic(caplog: pytest.LogCaptureFixture) -> None:
    nodes, _ = load_template("missing")
    assert [node.kind for node in nodes] == [NodeKind.AGENT, NodeKind.RUNNER]
    assert "missing" in caplog.text
