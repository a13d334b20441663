"""Render a graph snapshot as an OpenAI Agents SDK program."""

from __future__ import annotations

import keyword
import logging
import re
from typing import Dict, List, Optional, Sequence, Type

from .models import (
    AgentNode,
    Edge,
    FunctionToolNode,
    GuardrailNode,
    Node,
    RunnerMode,
    RunnerNode,
    ToolParameter,
)


LOGGER = logging.getLogger("agent_canvas.codegen")

BASE_IMPORT = "from agents import Agent, Runner"
ASYNC_IMPORT = "import asyncio"
MODEL_IMPORT = "from pydantic import BaseModel"
GUARDRAIL_IMPORT = "from agents import GuardrailFunctionOutput, InputGuardrail"
TOOL_IMPORT = "from agents import function_tool"

DEFAULT_RUNNER_INPUT = "Enter your question here..."
DEFAULT_TOOL_BODY = 'return "Function implementation"'
INDENT = "    "

# Names the emitted program binds or calls at module level besides node symbols.
RESERVED_NAMES = frozenset(
    {
        "Agent",
        "Runner",
        "function_tool",
        "asyncio",
        "BaseModel",
        "GuardrailFunctionOutput",
        "InputGuardrail",
        "result",
        "print",
        "dict",
    }
)

_NON_WORD = re.compile(r"\W+")


def generate_code(nodes: Sequence[Node], edges: Sequence[Edge]) -> str:
    """Return the program text for *nodes* and *edges*.

    Identical input always yields identical output; incomplete node data is
    rendered with empty or placeholder values instead of raising.
    """
    return CodeGenerator(nodes, edges).render()


class CodeGenerator:
    """Single-use renderer holding the lookups for one snapshot."""

    def __init__(self, nodes: Sequence[Node], edges: Sequence[Edge]) -> None:
        self._nodes = list(nodes)
        self._index: Dict[str, Node] = {node.id: node for node in self._nodes}
        self._edges: List[Edge] = []
        for edge in edges:
            if edge.source not in self._index or edge.target not in self._index:
                LOGGER.error(
                    "Edge %s references a missing node (%s -> %s); skipping it",
                    edge.id,
                    edge.source,
                    edge.target,
                )
                continue
            self._edges.append(edge)

        self._agents = [node for node in self._nodes if isinstance(node, AgentNode)]
        self._runners = [node for node in self._nodes if isinstance(node, RunnerNode)]
        self._tools = [node for node in self._nodes if isinstance(node, FunctionToolNode)]
        self._guardrails = [node for node in self._nodes if isinstance(node, GuardrailNode)]
        self._has_async = any(node.data.mode == RunnerMode.ASYNC for node in self._runners)

        self._entry_points: Dict[str, str] = {}
        for node in self._runners:
            if node.data.mode == RunnerMode.ASYNC and self._inbound(node.id, AgentNode):
                count = len(self._entry_points) + 1
                self._entry_points[node.id] = "main" if count == 1 else f"main_{count}"
        self._taken = set(RESERVED_NAMES) | set(self._entry_points.values())
        self._model_names: Dict[str, str] = {}
        self._names: Dict[str, str] = {}
        self._assign_names()

    def _assign_names(self) -> None:
        """Bind every emitted symbol to a distinct module-level name, in node order."""
        for node in self._guardrails:
            if _present(node.data.output_model):
                model = _identifier(node.data.output_model, "GuardrailOutput")
                if model not in self._model_names:
                    self._model_names[model] = self._claim(model)
        for node in self._nodes:
            if isinstance(node, AgentNode):
                self._names[node.id] = self._claim(_identifier(node.data.name, "unnamed_agent"))
            elif isinstance(node, FunctionToolNode):
                self._names[node.id] = self._claim(_identifier(node.data.name, "unnamed_tool"))
            elif isinstance(node, GuardrailNode) and _present(node.data.guardrail_function):
                self._names[node.id] = self._claim(_identifier(node.data.guardrail_function, "guardrail"))

    def _claim(self, base: str) -> str:
        name, suffix = base, 2
        while name in self._taken:
            name = f"{base}_{suffix}"
            suffix += 1
        if name != base:
            LOGGER.debug("Name %s is already bound; using %s", base, name)
        self._taken.add(name)
        return name

    def _model_name(self, node: GuardrailNode) -> Optional[str]:
        if not _present(node.data.output_model):
            return None
        return self._model_names[_identifier(node.data.output_model, "GuardrailOutput")]

    def render(self) -> str:
        sections = [
            "\n".join(self._imports()),
            "\n\n\n".join(self._guardrail_blocks()),
            "\n\n\n".join(self._tool_blocks()),
            "\n\n".join(self._agent_blocks()),
            "\n\n\n".join(self._runner_blocks()),
        ]
        return "\n\n\n".join(section for section in sections if section) + "\n"

    def _imports(self) -> List[str]:
        lines = [BASE_IMPORT]
        if self._has_async:
            lines.append(ASYNC_IMPORT)
        if self._guardrails or any(_present(node.data.output_type) for node in self._agents):
            lines.append(MODEL_IMPORT)
        if self._guardrails:
            lines.append(GUARDRAIL_IMPORT)
        if self._tools:
            lines.append(TOOL_IMPORT)
        return lines

    def _guardrail_blocks(self) -> List[str]:
        blocks: List[str] = []
        emitted_models = set()
        for node in self._guardrails:
            model = self._model_name(node)
            if model and model not in emitted_models:
                emitted_models.add(model)
                blocks.append(f"class {model}(BaseModel):\n{INDENT}is_valid: bool\n{INDENT}reasoning: str")
            if node.id in self._names:
                blocks.append(_guardrail_function(self._names[node.id], model))
        return blocks

    def _tool_blocks(self) -> List[str]:
        blocks: List[str] = []
        for node in self._tools:
            data = node.data
            params = ", ".join(_parameter(param) for param in data.parameters if _present(param.name))
            returns = f" -> {data.return_type.strip()}" if _present(data.return_type) else ""
            lines = ["@function_tool", f"def {self._names[node.id]}({params}){returns}:"]
            lines.extend(_docstring(data.parameters))
            body = data.implementation if _present(data.implementation) else DEFAULT_TOOL_BODY
            lines.extend(_indent(body))
            blocks.append("\n".join(lines))
        return blocks

    def _agent_blocks(self) -> List[str]:
        blocks: List[str] = []
        for node in self._agents:
            data = node.data
            kwargs = [f"name={_literal(data.name)}", f"instructions={_literal(data.instructions)}"]
            if _present(data.handoff_description):
                kwargs.append(f"handoff_description={_literal(data.handoff_description)}")
            if _present(data.output_type):
                kwargs.append(f"output_type={data.output_type.strip()}")

            tools = [self._names[source.id] for source in self._inbound(node.id, FunctionToolNode)]
            if tools:
                kwargs.append(f"tools=[{', '.join(tools)}]")

            handoffs = [self._names[source.id] for source in self._inbound(node.id, AgentNode)]
            if handoffs:
                kwargs.append(f"handoffs=[{', '.join(handoffs)}]")

            guardrails = [
                self._names[source.id]
                for source in self._inbound(node.id, GuardrailNode)
                if source.id in self._names
            ]
            if guardrails:
                if len(guardrails) > 1:
                    LOGGER.warning(
                        "Agent %s has %d guardrails; only %s is wired in",
                        data.name,
                        len(guardrails),
                        guardrails[0],
                    )
                kwargs.append(
                    f"input_guardrails=[\n{INDENT * 2}InputGuardrail(guardrail_function={guardrails[0]}),\n{INDENT}]"
                )

            body = "".join(f"{INDENT}{kwarg},\n" for kwarg in kwargs)
            blocks.append(f"{self._names[node.id]} = Agent(\n{body})")
        return blocks

    def _runner_blocks(self) -> List[str]:
        blocks: List[str] = []
        if not self._runners:
            if self._agents:
                args = f"{self._names[self._agents[0].id]}, {_literal(DEFAULT_RUNNER_INPUT)}"
                blocks.append(_sync_run(args))
            return blocks

        for node in self._runners:
            agents = self._inbound(node.id, AgentNode)
            if not agents:
                LOGGER.debug("Runner %s has no agent connected; nothing emitted", node.id)
                continue
            data = node.data
            args = f"{self._names[agents[0].id]}, {_literal(data.input)}"
            if _present(data.context):
                args += f", context={data.context.strip()}"
            if node.id in self._entry_points:
                blocks.append(_async_run(self._entry_points[node.id], args))
            else:
                blocks.append(_sync_run(args))
        return blocks

    def _inbound(self, target_id: str, kind: Type[Node]) -> List[Node]:
        """Sources of the given kind with an edge into *target_id*, in edge order, deduplicated."""
        sources: List[Node] = []
        seen = set()
        for edge in self._edges:
            if edge.target != target_id or edge.source in seen:
                continue
            source = self._index[edge.source]
            if isinstance(source, kind):
                seen.add(edge.source)
                sources.append(source)
        return sources


def _guardrail_function(name: str, model: Optional[str]) -> str:
    if model:
        output_type, tripwire = model, "not final_output.is_valid"
    else:
        output_type, tripwire = "dict", 'not final_output.get("is_valid", False)'
    return (
        f"async def {name}(ctx, agent, input_data):\n"
        f"{INDENT}result = await Runner.run(agent, input_data, context=ctx.context)\n"
        f"{INDENT}final_output = result.final_output_as({output_type})\n"
        f"{INDENT}return GuardrailFunctionOutput(\n"
        f"{INDENT * 2}output_info=final_output,\n"
        f"{INDENT * 2}tripwire_triggered={tripwire},\n"
        f"{INDENT})"
    )


def _sync_run(args: str) -> str:
    return f"result = Runner.run_sync({args})\nprint(result.final_output)"


def _async_run(name: str, args: str) -> str:
    return (
        f"async def {name}():\n"
        f"{INDENT}result = await Runner.run({args})\n"
        f"{INDENT}print(result.final_output)\n"
        "\n\n"
        'if __name__ == "__main__":\n'
        f"{INDENT}asyncio.run({name}())"
    )


def _parameter(param: ToolParameter) -> str:
    name = _identifier(param.name, "arg")
    return f"{name}: {param.type.strip()}" if _present(param.type) else name


def _docstring(parameters: Sequence[ToolParameter]) -> List[str]:
    # function_tool reads argument descriptions from a Google-style docstring.
    described = [param for param in parameters if _present(param.name) and _present(param.description)]
    if not described:
        return []
    lines = [f'{INDENT}"""', f"{INDENT}Args:"]
    for param in described:
        text = param.description.strip().replace('"""', '\\"\\"\\"')
        lines.append(f"{INDENT * 2}{_identifier(param.name, 'arg')}: {text}")
    lines.append(f'{INDENT}"""')
    return lines


def _indent(body: str) -> List[str]:
    return [f"{INDENT}{line}" if line.strip() else "" for line in body.splitlines()]


def _present(value: Optional[str]) -> bool:
    return value is not None and value.strip() != ""


def _identifier(value: Optional[str], fallback: str) -> str:
    """Coerce free-form user text into a Python identifier."""
    text = _NON_WORD.sub("_", (value or "").strip())
    if not text or text == "_":
        return fallback
    if text[0].isdigit():
        text = f"_{text}"
    if keyword.iskeyword(text):
        text = f"{text}_"
    return text


def _literal(value: Optional[str]) -> str:
    text = (value or "").replace("\\", "\\\\").replace('"', '\\"')
    text = text.replace("\n", "\\n").replace("\r", "\\r").replace("\t", "\\t")
    return f'"{text}"'


__all__ = ["CodeGenerator", "DEFAULT_RUNNER_INPUT", "generate_code"]
