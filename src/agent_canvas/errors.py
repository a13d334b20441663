"""Exception hierarchy for graph editing."""

from __future__ import annotations

from typing import Iterable, List


class AgentCanvasError(Exception):
    """Base class for errors raised by agent_canvas."""


class ConnectionRejected(AgentCanvasError):
    """A candidate edge failed the connection rules; the graph was left unchanged."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class ReferentialInconsistency(AgentCanvasError):
    """One or more edges reference node ids that do not exist."""

    def __init__(self, edge_ids: Iterable[str]) -> None:
        self.edge_ids: List[str] = list(edge_ids)
        super().__init__(f"Edges reference missing nodes: {', '.join(self.edge_ids)}")


class UnknownNodeKind(AgentCanvasError, ValueError):
    """A drag payload carried a tag that is not a node kind."""

    def __init__(self, tag: object) -> None:
        super().__init__(f"Unknown node kind: {tag!r}")
        self.tag = tag


__all__ = ["AgentCanvasError", "ConnectionRejected", "ReferentialInconsistency", "UnknownNodeKind"]
