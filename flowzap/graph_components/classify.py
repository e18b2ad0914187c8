"""Keyword heuristics for lane types and node kinds.

The results are advisory hints for downstream reasoning; they never affect
how a diagram is parsed or patched.
"""

from typing import Iterable

from .core import LaneType, NodeKind, Shape

ACTOR_KEYWORDS = ("user", "customer", "client", "actor", "person", "human")
SYSTEM_KEYWORDS = (
    "api",
    "server",
    "database",
    "db",
    "service",
    "system",
    "backend",
    "frontend",
)
START_KEYWORDS = ("start", "begin")
END_KEYWORDS = ("end", "complete", "finish")


def _mentions(text: str, keywords: Iterable[str]) -> bool:
    return any(keyword in text for keyword in keywords)


def infer_lane_type(lane_id: str, label: str) -> LaneType:
    combined = f"{lane_id} {label}".lower()
    if _mentions(combined, ACTOR_KEYWORDS):
        return LaneType.ACTOR
    if _mentions(combined, SYSTEM_KEYWORDS):
        return LaneType.SYSTEM
    return LaneType.UNKNOWN


def infer_node_kind(shape: Shape, label: str) -> NodeKind:
    if shape is Shape.CIRCLE:
        lowered = label.lower()
        if _mentions(lowered, START_KEYWORDS):
            return NodeKind.START
        if _mentions(lowered, END_KEYWORDS):
            return NodeKind.END
        return NodeKind.START
    if shape is Shape.DIAMOND:
        return NodeKind.DECISION
    if shape is Shape.TASKBOX:
        return NodeKind.TASK
    return NodeKind.STEP
