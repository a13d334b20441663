"""
Agent Canvas - graph model, connection rules and code generation for
visually assembled OpenAI Agents SDK workflows.
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("agent-canvas")
except PackageNotFoundError:  # pragma: no cover - fallback for source checkouts
    __version__ = "0.0.0"

from .codegen import generate_code
from .config import Settings
from .models import Connection, Edge, Graph, NodeKind, Position
from .store import GraphStore
from .templates import load_template
from .validation import validate_connection

__all__ = [
    "Connection",
    "Edge",
    "Graph",
    "GraphStore",
    "NodeKind",
    "Position",
    "Settings",
    "__version__",
    "generate_code",
    "load_template",
    "validate_connection",
]
