from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .edge import GraphEdge
from .lane import Lane
from .node import GraphNode


@dataclass(frozen=True)
class GraphStats:
    lane_count: int = 0
    node_count: int = 0
    edge_count: int = 0
    cross_lane_edges: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            "laneCount": self.lane_count,
            "nodeCount": self.node_count,
            "edgeCount": self.edge_count,
            "crossLaneEdges": self.cross_lane_edges,
        }


@dataclass
class ExportedGraph:
    """Structured view of a diagram: lanes in first-seen order, nodes and
    edges in declaration order, plus aggregate counts.

    Duplicate node ids are kept as separate entries; lookups resolve to the
    last declaration.
    """

    lanes: List[Lane] = field(default_factory=list)
    nodes: List[GraphNode] = field(default_factory=list)
    edges: List[GraphEdge] = field(default_factory=list)
    stats: GraphStats = field(default_factory=GraphStats)

    @classmethod
    def build(
        cls, lanes: List[Lane], nodes: List[GraphNode], edges: List[GraphEdge]
    ) -> "ExportedGraph":
        stats = GraphStats(
            lane_count=len(lanes),
            node_count=len(nodes),
            edge_count=len(edges),
            cross_lane_edges=sum(1 for edge in edges if edge.is_cross_lane),
        )
        return cls(lanes=list(lanes), nodes=list(nodes), edges=list(edges), stats=stats)

    def node_map(self) -> Dict[str, GraphNode]:
        return {node.id: node for node in self.nodes}

    def get_node(self, node_id: str) -> Optional[GraphNode]:
        return self.node_map().get(node_id)

    def get_lane(self, lane_id: str) -> Optional[Lane]:
        for lane in self.lanes:
            if lane.id == lane_id:
                return lane
        return None

    def nodes_in_lane(self, lane_id: str) -> List[GraphNode]:
        return [node for node in self.nodes if node.lane_id == lane_id]

    def cross_lane_edges(self) -> List[GraphEdge]:
        return [edge for edge in self.edges if edge.is_cross_lane]

    def to_dict(self) -> Dict[str, object]:
        return {
            "lanes": [lane.to_dict() for lane in self.lanes],
            "nodes": [node.to_dict() for node in self.nodes],
            "edges": [edge.to_dict() for edge in self.edges],
            "stats": self.stats.to_dict(),
        }
