from .core import DEFAULT_LANE, Handle, LaneType, NodeKind, Shape
from .lane import Lane
from .node import GraphNode
from .edge import GraphEdge
from .graph import ExportedGraph, GraphStats
from .classify import infer_lane_type, infer_node_kind
from .escaping import escape_label, unescape_value
from .parser import match_line, parse
from .diff import DiffResult, FieldChange, NodeUpdate, diff, diff_graphs
from .operations import NewEdge, NewNode, PatchOperation, SUPPORTED_OPERATIONS
from .patch import AppliedOperation, LineIndex, PatchResult, apply_changes

__all__ = [
    "DEFAULT_LANE",
    "Handle",
    "LaneType",
    "NodeKind",
    "Shape",
    "Lane",
    "GraphNode",
    "GraphEdge",
    "ExportedGraph",
    "GraphStats",
    "infer_lane_type",
    "infer_node_kind",
    "escape_label",
    "unescape_value",
    "match_line",
    "parse",
    "diff",
    "diff_graphs",
    "DiffResult",
    "FieldChange",
    "NodeUpdate",
    "NewEdge",
    "NewNode",
    "PatchOperation",
    "SUPPORTED_OPERATIONS",
    "AppliedOperation",
    "LineIndex",
    "PatchResult",
    "apply_changes",
]
