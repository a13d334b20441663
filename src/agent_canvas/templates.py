"""Ready-made graphs the store can adopt wholesale."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from typing import Callable, Dict, List, Tuple

from .models import (
    AgentData,
    AgentNode,
    Edge,
    FunctionToolData,
    FunctionToolNode,
    Node,
    Position,
    RunnerData,
    RunnerMode,
    RunnerNode,
    ToolParameter,
)


LOGGER = logging.getLogger("agent_canvas.templates")

DEFAULT_TEMPLATE = "basic"

TemplateGraph = Tuple[List[Node], List[Edge]]


@dataclass(frozen=True)
class FlowTemplate:
    """A named graph factory; every call builds nodes with fresh ids."""

    key: str
    description: str
    build: Callable[[], TemplateGraph]


def _new_id() -> str:
    return str(uuid.uuid4())


def _edge(source: str, target: str) -> Edge:
    return Edge(id=f"e-{uuid.uuid4()}", source=source, target=target)


def _basic_template() -> TemplateGraph:
    agent_id, runner_id = _new_id(), _new_id()
    nodes: List[Node] = [
        AgentNode(
            id=agent_id,
            position=Position(x=250, y=100),
            data=AgentData(label="Agent", name="Assistant", instructions="You are a helpful assistant."),
        ),
        RunnerNode(
            id=runner_id,
            position=Position(x=250, y=300),
            data=RunnerData(label="Runner", input="Write a haiku about recursion in programming.", mode=RunnerMode.SYNC),
        ),
    ]
    return nodes, [_edge(agent_id, runner_id)]


def _multi_agent_template() -> TemplateGraph:
    spanish_id, english_id, triage_id, runner_id = _new_id(), _new_id(), _new_id(), _new_id()
    nodes: List[Node] = [
        AgentNode(
            id=spanish_id,
            position=Position(x=100, y=100),
            data=AgentData(label="Agent", name="Spanish agent", instructions="You only speak Spanish."),
        ),
        AgentNode(
            id=english_id,
            position=Position(x=400, y=100),
            data=AgentData(label="Agent", name="English agent", instructions="You only speak English."),
        ),
        AgentNode(
            id=triage_id,
            position=Position(x=250, y=250),
            data=AgentData(
                label="Agent",
                name="Triage agent",
                instructions="Handoff to the appropriate agent based on the language of the request.",
                handoffs=[spanish_id, english_id],
            ),
        ),
        RunnerNode(
            id=runner_id,
            position=Position(x=250, y=400),
            data=RunnerData(label="Runner", input="Hola, ¿cómo estás?", mode=RunnerMode.ASYNC),
        ),
    ]
    edges = [
        _edge(spanish_id, triage_id),
        _edge(english_id, triage_id),
        _edge(triage_id, runner_id),
    ]
    return nodes, edges


def _function_tool_template() -> TemplateGraph:
    agent_id, tool_id, runner_id = _new_id(), _new_id(), _new_id()
    nodes: List[Node] = [
        AgentNode(
            id=agent_id,
            position=Position(x=250, y=200),
            data=AgentData(
                label="Agent",
                name="Hello world",
                instructions="You are a helpful agent.",
                tools=[tool_id],
            ),
        ),
        FunctionToolNode(
            id=tool_id,
            position=Position(x=100, y=100),
            data=FunctionToolData(
                label="Function Tool",
                name="get_weather",
                parameters=[ToolParameter(name="city", type="str")],
                return_type="str",
                implementation='return f"The weather in {city} is sunny."',
            ),
        ),
        RunnerNode(
            id=runner_id,
            position=Position(x=250, y=350),
            data=RunnerData(label="Runner", input="What's the weather in Tokyo?", mode=RunnerMode.ASYNC),
        ),
    ]
    return nodes, [_edge(tool_id, agent_id), _edge(agent_id, runner_id)]


TEMPLATES: Dict[str, FlowTemplate] = {
    "basic": FlowTemplate("basic", "Single assistant agent with a synchronous runner", _basic_template),
    "multiAgent": FlowTemplate("multiAgent", "Triage agent handing off to language agents", _multi_agent_template),
    "functionTool": FlowTemplate("functionTool", "Agent calling a weather function tool", _function_tool_template),
}


def list_templates() -> List[FlowTemplate]:
    return list(TEMPLATES.values())


def load_template(template_id: str) -> TemplateGraph:
    """Build the nodes and edges of *template_id*, falling back to the basic template."""

    template = TEMPLATES.get(template_id)
    if template is None:
        LOGGER.warning("Unknown template %r; using %r", template_id, DEFAULT_TEMPLATE)
        template = TEMPLATES[DEFAULT_TEMPLATE]
    return template.build()


__all__ = ["DEFAULT_TEMPLATE", "FlowTemplate", "TEMPLATES", "list_templates", "load_template"]
