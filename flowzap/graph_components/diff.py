from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Tuple

from .edge import GraphEdge
from .graph import ExportedGraph
from .node import GraphNode
from .parser import parse

COMPARED_NODE_FIELDS = ("label", "shape", "lane_id")
_WIRE_FIELD_NAMES = {"lane_id": "laneId"}


@dataclass(frozen=True)
class FieldChange:
    old: str
    new: str


@dataclass
class NodeUpdate:
    id: str
    changes: Dict[str, FieldChange] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, object]:
        return {
            "id": self.id,
            "changes": {
                _WIRE_FIELD_NAMES.get(name, name): {"old": change.old, "new": change.new}
                for name, change in self.changes.items()
            },
        }


@dataclass
class DiffResult:
    nodes_added: List[GraphNode] = field(default_factory=list)
    nodes_removed: List[GraphNode] = field(default_factory=list)
    nodes_updated: List[NodeUpdate] = field(default_factory=list)
    edges_added: List[GraphEdge] = field(default_factory=list)
    edges_removed: List[GraphEdge] = field(default_factory=list)
    lanes_added: List[str] = field(default_factory=list)
    lanes_removed: List[str] = field(default_factory=list)
    summary: str = "No changes detected"

    def has_changes(self) -> bool:
        return any(
            [
                self.nodes_added,
                self.nodes_removed,
                self.nodes_updated,
                self.edges_added,
                self.edges_removed,
                self.lanes_added,
                self.lanes_removed,
            ]
        )

    def to_dict(self) -> Dict[str, object]:
        def brief_node(node: GraphNode) -> Dict[str, str]:
            return {"id": node.id, "label": node.label, "lane": node.lane_id}

        def brief_edge(edge: GraphEdge) -> Dict[str, object]:
            return {"from": edge.source, "to": edge.target, "label": edge.label}

        return {
            "nodesAdded": [brief_node(node) for node in self.nodes_added],
            "nodesRemoved": [brief_node(node) for node in self.nodes_removed],
            "nodesUpdated": [update.to_dict() for update in self.nodes_updated],
            "edgesAdded": [brief_edge(edge) for edge in self.edges_added],
            "edgesRemoved": [brief_edge(edge) for edge in self.edges_removed],
            "lanesAdded": list(self.lanes_added),
            "lanesRemoved": list(self.lanes_removed),
        }


def _field_value(node: GraphNode, name: str) -> str:
    value = getattr(node, name)
    return getattr(value, "value", value)


def _compare_nodes(old: GraphNode, new: GraphNode) -> Dict[str, FieldChange]:
    changes: Dict[str, FieldChange] = {}
    for name in COMPARED_NODE_FIELDS:
        old_value = _field_value(old, name)
        new_value = _field_value(new, name)
        if old_value != new_value:
            changes[name] = FieldChange(old=old_value, new=new_value)
    return changes


def _edge_map(graph: ExportedGraph) -> Dict[Tuple[str, str], GraphEdge]:
    # Positional edge ids are unstable across edits, so identity is (from, to).
    return {edge.key: edge for edge in graph.edges}


def _summarize(result: DiffResult) -> str:
    def labels(nodes: List[GraphNode]) -> str:
        return ", ".join(f'"{node.label}"' for node in nodes)

    parts: List[str] = []
    if result.nodes_added:
        parts.append(f"Added {len(result.nodes_added)} node(s): {labels(result.nodes_added)}")
    if result.nodes_removed:
        parts.append(
            f"Removed {len(result.nodes_removed)} node(s): {labels(result.nodes_removed)}"
        )
    if result.nodes_updated:
        parts.append(f"Updated {len(result.nodes_updated)} node(s)")
    if result.edges_added:
        parts.append(f"Added {len(result.edges_added)} connection(s)")
    if result.edges_removed:
        parts.append(f"Removed {len(result.edges_removed)} connection(s)")
    if result.lanes_added:
        parts.append(f"Added lane(s): {', '.join(result.lanes_added)}")
    if result.lanes_removed:
        parts.append(f"Removed lane(s): {', '.join(result.lanes_removed)}")
    return ". ".join(parts) if parts else "No changes detected"


def diff_graphs(old_graph: ExportedGraph, new_graph: ExportedGraph) -> DiffResult:
    old_nodes = old_graph.node_map()
    new_nodes = new_graph.node_map()
    result = DiffResult()

    for node_id, node in new_nodes.items():
        previous = old_nodes.get(node_id)
        if previous is None:
            result.nodes_added.append(node)
            continue
        changes = _compare_nodes(previous, node)
        if changes:
            result.nodes_updated.append(NodeUpdate(id=node_id, changes=changes))

    result.nodes_removed = [
        node for node_id, node in old_nodes.items() if node_id not in new_nodes
    ]

    old_edges = _edge_map(old_graph)
    new_edges = _edge_map(new_graph)
    result.edges_added = [edge for key, edge in new_edges.items() if key not in old_edges]
    result.edges_removed = [edge for key, edge in old_edges.items() if key not in new_edges]

    old_lanes = [lane.id for lane in old_graph.lanes]
    new_lanes = [lane.id for lane in new_graph.lanes]
    result.lanes_added = [lane_id for lane_id in new_lanes if lane_id not in old_lanes]
    result.lanes_removed = [lane_id for lane_id in old_lanes if lane_id not in new_lanes]

    result.summary = _summarize(result)
    return result


def diff(old_text: str, new_text: str) -> DiffResult:
    return diff_graphs(parse(old_text), parse(new_text))
