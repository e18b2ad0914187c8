from .graph_components import *
from .errors import *
from .service import create_playground_url, validate_code
from .syntax import SYNTAX_GUIDE

__version__ = "0.1.0"
__all__ = [
    "parse",
    "diff",
    "apply_changes",
    "ExportedGraph",
    "Lane",
    "GraphNode",
    "GraphEdge",
    "DiffResult",
    "PatchOperation",
    "PatchResult",
    "Shape",
    "NodeKind",
    "LaneType",
    "create_playground_url",
    "SYNTAX_GUIDE",
    "validate_code",
    "FlowZapError",
    "ParseError",
    "OperationError",
    "ServiceError",
]
