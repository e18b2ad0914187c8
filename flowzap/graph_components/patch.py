"""Apply structured patch operations to diagram code.

The text is edited as a list of lines. A :class:`LineIndex` built once from
the input records where every node and lane lives; each insertion or removal
goes through :meth:`LineIndex.shift` so later operations in the same batch
see up-to-date positions. Lines no operation touches are left verbatim.

Operations that cannot be applied are recorded as skipped and the batch
carries on.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, NamedTuple, Optional, Sequence

from ..errors import OperationError
from .core import DEFAULT_LANE, Shape
from .escaping import escape_label, quoted
from .operations import (
    INSERT_EDGE,
    INSERT_NODE,
    REMOVE_EDGE,
    REMOVE_NODE,
    UPDATE_EDGE,
    UPDATE_NODE,
    PatchOperation,
)
from .parser import ATTRIBUTE_RE, LaneClose, LaneOpen, NodeDeclaration, match_line

logger = logging.getLogger(__name__)

SEQUENTIAL_ID_RE = re.compile(r"^n(\d+)$")
SHAPE_TOKEN_RE = re.compile(r"^(\s*\w+:\s*)(" + "|".join(Shape.names()) + r")\b")
INDENT = "  "


@dataclass
class LaneSpan:
    start: int
    # Line of the lane's closing brace.
    end: int


@dataclass
class LineIndex:
    node_lines: Dict[str, int] = field(default_factory=dict)
    node_lanes: Dict[str, str] = field(default_factory=dict)
    lane_spans: Dict[str, LaneSpan] = field(default_factory=dict)

    @classmethod
    def scan(cls, lines: Sequence[str]) -> "LineIndex":
        index = cls()
        current_lane: Optional[str] = None
        lane_start = 0

        for number, line in enumerate(lines):
            result = match_line(line)
            if isinstance(result, LaneOpen):
                current_lane = result.lane_id
                lane_start = number
            elif isinstance(result, LaneClose):
                if current_lane is not None:
                    index.lane_spans[current_lane] = LaneSpan(lane_start, number)
                current_lane = None
            elif isinstance(result, NodeDeclaration):
                index.node_lines[result.node_id] = number
                index.node_lanes[result.node_id] = current_lane or DEFAULT_LANE

        return index

    def shift(self, at: int, delta: int) -> None:
        """Move every recorded line at or after ``at`` by ``delta``."""
        for node_id, number in self.node_lines.items():
            if number >= at:
                self.node_lines[node_id] = number + delta
        for span in self.lane_spans.values():
            if span.start >= at:
                span.start += delta
            if span.end >= at:
                span.end += delta

    def forget_node(self, node_id: str) -> None:
        self.node_lines.pop(node_id, None)
        self.node_lanes.pop(node_id, None)

    def highest_sequential_id(self) -> int:
        highest = 0
        for node_id in self.node_lines:
            match = SEQUENTIAL_ID_RE.match(node_id)
            if match:
                highest = max(highest, int(match.group(1)))
        return highest


@dataclass(frozen=True)
class AppliedOperation:
    op: str
    applied: bool
    message: str

    def __str__(self) -> str:
        if self.applied:
            return f"{self.op}: {self.message}"
        return f"{self.op}: skipped ({self.message})"


class PatchResult(NamedTuple):
    code: str
    applied: List[AppliedOperation]

    @property
    def log(self) -> List[str]:
        return [str(entry) for entry in self.applied]

    @property
    def skipped(self) -> List[AppliedOperation]:
        return [entry for entry in self.applied if not entry.applied]


def _set_attribute(line: str, key: str, value: str) -> str:
    rendered = quoted(key, value)
    for match in ATTRIBUTE_RE.finditer(line):
        if match.group(1) == key:
            return line[: match.start()] + rendered + line[match.end() :]
    return f"{line.rstrip()} {rendered}"


class _PatchBuffer:
    def __init__(self, text: str) -> None:
        self.newline = "\r\n" if "\r\n" in text else "\n"
        self.lines: List[str] = text.split(self.newline)
        self.index = LineIndex.scan(self.lines)
        self._last_id = self.index.highest_sequential_id()
        self._handlers: Dict[str, Callable[[PatchOperation], AppliedOperation]] = {
            INSERT_NODE: self._insert_node,
            REMOVE_NODE: self._remove_node,
            UPDATE_NODE: self._update_node,
            INSERT_EDGE: self._insert_edge,
            REMOVE_EDGE: self._remove_edge,
        }

    @property
    def text(self) -> str:
        return self.newline.join(self.lines)

    def apply(self, operation: PatchOperation) -> AppliedOperation:
        handler = self._handlers.get(operation.op)
        if handler is not None:
            entry = handler(operation)
        elif operation.op == UPDATE_EDGE:
            entry = self._skip(operation, "not supported")
        else:
            entry = self._skip(operation, "unknown operation")

        if entry.applied:
            logger.debug("Applied patch operation: %s", entry)
        else:
            logger.info("Skipped patch operation: %s", entry)
        return entry

    def _done(self, operation: PatchOperation, message: str) -> AppliedOperation:
        return AppliedOperation(op=operation.op, applied=True, message=message)

    def _skip(self, operation: PatchOperation, reason: str) -> AppliedOperation:
        return AppliedOperation(op=operation.op or "<missing op>", applied=False, message=reason)

    def _insert_line(self, at: int, line: str) -> None:
        self.lines.insert(at, line)
        self.index.shift(at, 1)

    def _remove_line(self, at: int) -> None:
        del self.lines[at]
        self.index.shift(at + 1, -1)

    def _next_node_id(self) -> str:
        self._last_id += 1
        return f"n{self._last_id}"

    def _in_lane(self, node_id: Optional[str], lane_id: str) -> bool:
        return node_id in self.index.node_lines and self.index.node_lanes.get(node_id) == lane_id

    def _insert_node(self, operation: PatchOperation) -> AppliedOperation:
        new_node = operation.new_node
        if new_node is None or not operation.lane_id:
            return self._skip(operation, "missing newNode or laneId")

        shape = new_node.shape or Shape.RECTANGLE.value
        if shape not in Shape.names():
            return self._skip(operation, f'unknown shape "{shape}"')

        span = self.index.lane_spans.get(operation.lane_id)
        if span is None:
            return self._skip(operation, f'lane "{operation.lane_id}" not found')

        node_lines = self.index.node_lines
        insert_at = span.end
        # Anchors outside the target lane are ignored.
        if self._in_lane(operation.after_node_id, operation.lane_id):
            insert_at = node_lines[operation.after_node_id] + 1
        elif self._in_lane(operation.before_node_id, operation.lane_id):
            insert_at = node_lines[operation.before_node_id]

        node_id = self._next_node_id()
        parts = [f"{INDENT}{node_id}: {shape}"]
        if new_node.label:
            parts.append(quoted("label", new_node.label))
        for key, value in new_node.properties.items():
            parts.append(quoted(key, value))

        self._insert_line(insert_at, " ".join(parts))
        node_lines[node_id] = insert_at
        self.index.node_lanes[node_id] = operation.lane_id
        return self._done(
            operation,
            f'added "{new_node.label or node_id}" as {node_id} in {operation.lane_id}',
        )

    def _remove_node(self, operation: PatchOperation) -> AppliedOperation:
        if not operation.node_id:
            return self._skip(operation, "missing nodeId")

        number = self.index.node_lines.get(operation.node_id)
        if number is None:
            return self._skip(operation, f'node "{operation.node_id}" not found')

        # Edges referencing the node are left in place.
        self.index.forget_node(operation.node_id)
        self._remove_line(number)
        return self._done(operation, f"removed {operation.node_id}")

    def _update_node(self, operation: PatchOperation) -> AppliedOperation:
        if not operation.node_id or operation.updates is None:
            return self._skip(operation, "missing nodeId or updates")

        number = self.index.node_lines.get(operation.node_id)
        if number is None:
            return self._skip(operation, f'node "{operation.node_id}" not found')

        line = self.lines[number]
        for key, value in operation.updates.items():
            if key == "shape":
                if value not in Shape.names():
                    return self._skip(operation, f'unknown shape "{value}"')
                line = SHAPE_TOKEN_RE.sub(lambda m: m.group(1) + value, line, count=1)
            else:
                line = _set_attribute(line, key, value)

        self.lines[number] = line
        return self._done(
            operation,
            f"updated {operation.node_id} with {', '.join(operation.updates)}",
        )

    def _insert_edge(self, operation: PatchOperation) -> AppliedOperation:
        edge = operation.new_edge
        if edge is None or not edge.source or not edge.target:
            return self._skip(operation, "missing newEdge")

        source_lane = self.index.node_lanes.get(edge.source)
        if source_lane is None:
            return self._skip(operation, f'source node "{edge.source}" not found')

        span = self.index.lane_spans.get(source_lane)
        if span is None:
            return self._skip(operation, f'lane "{source_lane}" not found')

        target_lane = self.index.node_lanes.get(edge.target)
        target_ref = edge.target
        if target_lane and target_lane not in (source_lane, DEFAULT_LANE):
            target_ref = f"{target_lane}.{edge.target}"

        line = (
            f"{INDENT}{edge.source}.handle({edge.source_handle}) -> "
            f"{target_ref}.handle({edge.target_handle})"
        )
        if edge.label:
            line += f' [label="{escape_label(edge.label)}"]'

        self._insert_line(span.end, line)
        suffix = f" [{edge.label}]" if edge.label else ""
        return self._done(operation, f"added {edge.source} -> {edge.target}{suffix}")

    def _remove_edge(self, operation: PatchOperation) -> AppliedOperation:
        edge = operation.new_edge
        if edge is None or not edge.source or not edge.target:
            return self._skip(operation, "missing edge specification")

        pattern = re.compile(
            rf"^\s*(?:\w+\.)?{re.escape(edge.source)}\.handle\([^)]+\)\s*->\s*"
            rf"(?:\w+\.)?{re.escape(edge.target)}\.handle"
        )
        for number, line in enumerate(self.lines):
            if pattern.match(line):
                self._remove_line(number)
                return self._done(operation, f"removed {edge.source} -> {edge.target}")

        return self._skip(operation, f"edge {edge.source} -> {edge.target} not found")


def _coerce_operations(operations: Iterable[Any]) -> List[PatchOperation]:
    if isinstance(operations, (str, bytes)) or not isinstance(operations, Iterable):
        raise OperationError("operations must be a sequence of patch operations.")
    return [PatchOperation.coerce(operation) for operation in operations]


def apply_changes(text: str, operations: Iterable[Any]) -> PatchResult:
    """Apply ``operations`` in order and return the new text plus a log.

    Each entry of ``operations`` is a :class:`PatchOperation` or its wire
    mapping. A non-mapping entry raises :class:`OperationError` before any
    edit is made.
    """
    batch = _coerce_operations(operations)
    buffer = _PatchBuffer(text)
    applied = [buffer.apply(operation) for operation in batch]
    return PatchResult(code=buffer.text, applied=applied)
