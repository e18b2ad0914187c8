"""Line-oriented parser turning diagram code into an :class:`ExportedGraph`.

Each trimmed line is classified on its own by :func:`match_line` into one of
the line results below, then folded into a call-local builder. Lines that
match nothing are skipped, so partial or invalid diagrams still produce a
usable partial graph. ``strict=True`` turns unrecognised lines into
:class:`~flowzap.errors.ParseError` instead.
"""

from __future__ import annotations

import itertools
import re
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple, Union

from ..errors import ParseError
from .classify import infer_lane_type, infer_node_kind
from .core import DEFAULT_LANE, LaneType, NodeKind, Shape
from .edge import GraphEdge
from .escaping import unescape_value
from .graph import ExportedGraph
from .lane import Lane
from .node import GraphNode

LANE_OPEN_RE = re.compile(r"^(.+?)\s*\{\s*(?:#\s*(.*))?$")
NODE_RE = re.compile(
    r"^(\w+):\s*(" + "|".join(Shape.names()) + r")\b\s*(.*)$"
)
ATTRIBUTE_RE = re.compile(r'(\w+)\s*[:=]\s*"((?:[^"\\]|\\.)*)"')
EDGE_RE = re.compile(
    r"^(.+?)\.handle\(([^)]+)\)\s*->\s*(.+?)\.handle\(([^)]+)\)"
    r'(?:\s*\[label\s*[:=]\s*"((?:[^"\\]|\\.)*)"\])?'
)
LOOP_RE = re.compile(r"^loop\s*\[")

TASKBOX_PROPERTIES = ("owner", "description", "system")

LaneClassifier = Callable[[str, str], LaneType]
NodeClassifier = Callable[[Shape, str], NodeKind]


@dataclass(frozen=True)
class NodeRef:
    node_id: str
    lane_id: Optional[str] = None

    @classmethod
    def parse(cls, raw: str) -> "NodeRef":
        parts = raw.strip().split(".")
        lane_id = parts[0] if len(parts) > 1 else None
        return cls(node_id=parts[-1], lane_id=lane_id)


@dataclass(frozen=True)
class LaneOpen:
    lane_id: str
    label: Optional[str] = None


@dataclass(frozen=True)
class LaneClose:
    pass


@dataclass(frozen=True)
class NodeDeclaration:
    node_id: str
    shape: Shape
    attributes: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class EdgeDeclaration:
    source: NodeRef
    target: NodeRef
    source_handle: str
    target_handle: str
    label: Optional[str] = None


@dataclass(frozen=True)
class Skipped:
    line: str
    reason: str = "unrecognized"


LineMatch = Union[LaneOpen, LaneClose, NodeDeclaration, EdgeDeclaration, Skipped]


def parse_attributes(text: str) -> Dict[str, str]:
    return {key: unescape_value(value) for key, value in ATTRIBUTE_RE.findall(text)}


def match_line(line: str) -> LineMatch:
    line = line.strip()

    lane_match = LANE_OPEN_RE.match(line)
    if lane_match:
        label = (lane_match.group(2) or "").strip() or None
        return LaneOpen(lane_id=lane_match.group(1).strip(), label=label)

    if line == "}":
        return LaneClose()

    # Edge lines may contain a colon inside their label.
    if "->" not in line:
        node_match = NODE_RE.match(line)
        if node_match:
            node_id, shape, rest = node_match.groups()
            return NodeDeclaration(
                node_id=node_id, shape=Shape(shape), attributes=parse_attributes(rest)
            )

    edge_match = EDGE_RE.match(line)
    if edge_match:
        source, source_handle, target, target_handle, label = edge_match.groups()
        return EdgeDeclaration(
            source=NodeRef.parse(source),
            target=NodeRef.parse(target),
            source_handle=source_handle.strip().lower(),
            target_handle=target_handle.strip().lower(),
            label=unescape_value(label) if label else None,
        )

    if line.startswith("#"):
        return Skipped(line, reason="comment")
    if LOOP_RE.match(line):
        return Skipped(line, reason="loop")
    return Skipped(line)


class _GraphBuilder:
    def __init__(
        self, lane_classifier: LaneClassifier, node_classifier: NodeClassifier
    ) -> None:
        self._lane_classifier = lane_classifier
        self._node_classifier = node_classifier
        self._lanes: Dict[str, Lane] = {}
        self._nodes: List[GraphNode] = []
        self._edges: List[GraphEdge] = []
        # Most recent lane each node id was declared in.
        self._node_lanes: Dict[str, str] = {}
        self._current_lane: Optional[str] = None
        self._edge_ids = itertools.count(1)

    def open_lane(self, match: LaneOpen, label_hint: Optional[str] = None) -> None:
        if match.lane_id not in self._lanes:
            label = match.label or label_hint or match.lane_id
            self._lanes[match.lane_id] = Lane(
                id=match.lane_id,
                label=label,
                type=self._lane_classifier(match.lane_id, label),
            )
        self._current_lane = match.lane_id

    def close_lane(self) -> None:
        self._current_lane = None

    def add_node(self, match: NodeDeclaration) -> None:
        attributes = match.attributes
        lane_id = self._current_lane or DEFAULT_LANE
        properties = None
        if match.shape is Shape.TASKBOX:
            properties = {
                key: attributes[key] for key in TASKBOX_PROPERTIES if attributes.get(key)
            }
        self._nodes.append(
            GraphNode(
                id=match.node_id,
                lane_id=lane_id,
                label=attributes.get("label")
                or attributes.get("description")
                or match.node_id,
                kind=self._node_classifier(match.shape, attributes.get("label", "")),
                shape=match.shape,
                properties=properties,
            )
        )
        self._node_lanes[match.node_id] = lane_id

    def _resolve_lane(self, ref: NodeRef) -> Optional[str]:
        return ref.lane_id or self._node_lanes.get(ref.node_id)

    def add_edge(self, match: EdgeDeclaration) -> None:
        self._edges.append(
            GraphEdge(
                id=f"e{next(self._edge_ids)}",
                source=match.source.node_id,
                target=match.target.node_id,
                source_handle=match.source_handle,
                target_handle=match.target_handle,
                source_lane=self._resolve_lane(match.source),
                target_lane=self._resolve_lane(match.target),
                label=match.label,
            )
        )

    def build(self) -> ExportedGraph:
        return ExportedGraph.build(list(self._lanes.values()), self._nodes, self._edges)


def split_lines(text: str) -> List[Tuple[int, str]]:
    normalized = str(text or "").replace("\r\n", "\n").replace("\r", "\n")
    numbered = []
    for number, raw in enumerate(normalized.split("\n"), start=1):
        line = raw.strip()
        if line:
            numbered.append((number, line))
    return numbered


def _comment_label(line: str) -> Optional[str]:
    if not line.startswith("#"):
        return None
    return line[1:].strip() or None


def parse(
    text: str,
    *,
    strict: bool = False,
    lane_classifier: LaneClassifier = infer_lane_type,
    node_classifier: NodeClassifier = infer_node_kind,
) -> ExportedGraph:
    builder = _GraphBuilder(lane_classifier, node_classifier)
    lines = split_lines(text)

    for index, (number, line) in enumerate(lines):
        result = match_line(line)
        if isinstance(result, LaneOpen):
            label_hint = None
            if result.label is None and index + 1 < len(lines):
                label_hint = _comment_label(lines[index + 1][1])
            builder.open_lane(result, label_hint)
        elif isinstance(result, LaneClose):
            builder.close_lane()
        elif isinstance(result, NodeDeclaration):
            builder.add_node(result)
        elif isinstance(result, EdgeDeclaration):
            builder.add_edge(result)
        elif strict and result.reason == "unrecognized":
            raise ParseError("Unrecognized line", number, line)

    return builder.build()
