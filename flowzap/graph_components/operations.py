from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

from ..errors import OperationError
from .core import Handle

INSERT_NODE = "insertNode"
REMOVE_NODE = "removeNode"
UPDATE_NODE = "updateNode"
INSERT_EDGE = "insertEdge"
REMOVE_EDGE = "removeEdge"
UPDATE_EDGE = "updateEdge"

SUPPORTED_OPERATIONS = (INSERT_NODE, REMOVE_NODE, UPDATE_NODE, INSERT_EDGE, REMOVE_EDGE)


def _optional_str(payload: Mapping[str, Any], key: str) -> Optional[str]:
    value = payload.get(key)
    if value is None:
        return None
    return str(value)


def _require_mapping(value: Any, name: str) -> Optional[Mapping[str, Any]]:
    if value is None:
        return None
    if not isinstance(value, Mapping):
        raise OperationError(f"'{name}' must be an object, got {type(value).__name__}.")
    return value


@dataclass
class NewNode:
    # Kept as the raw string; an unknown shape makes insertNode skip.
    shape: Optional[str] = None
    label: Optional[str] = None
    properties: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "NewNode":
        properties = _require_mapping(payload.get("properties"), "newNode.properties") or {}
        return cls(
            shape=_optional_str(payload, "shape"),
            label=_optional_str(payload, "label"),
            properties={str(key): str(value) for key, value in properties.items()},
        )


@dataclass
class NewEdge:
    source: str
    target: str
    label: Optional[str] = None
    source_handle: str = Handle.RIGHT.value
    target_handle: str = Handle.LEFT.value

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "NewEdge":
        return cls(
            source=str(payload.get("from") or ""),
            target=str(payload.get("to") or ""),
            label=_optional_str(payload, "label"),
            source_handle=str(payload.get("fromHandle") or Handle.RIGHT.value),
            target_handle=str(payload.get("toHandle") or Handle.LEFT.value),
        )


@dataclass
class PatchOperation:
    op: str
    node_id: Optional[str] = None
    after_node_id: Optional[str] = None
    before_node_id: Optional[str] = None
    lane_id: Optional[str] = None
    new_node: Optional[NewNode] = None
    new_edge: Optional[NewEdge] = None
    updates: Optional[Dict[str, str]] = None

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "PatchOperation":
        if not isinstance(payload, Mapping):
            raise OperationError(
                f"Patch operation must be an object, got {type(payload).__name__}."
            )

        new_node = _require_mapping(payload.get("newNode"), "newNode")
        new_edge = _require_mapping(payload.get("newEdge"), "newEdge")
        updates = _require_mapping(payload.get("updates"), "updates")

        return cls(
            op=str(payload.get("op") or ""),
            node_id=_optional_str(payload, "nodeId"),
            after_node_id=_optional_str(payload, "afterNodeId"),
            before_node_id=_optional_str(payload, "beforeNodeId"),
            lane_id=_optional_str(payload, "laneId"),
            new_node=NewNode.from_dict(new_node) if new_node is not None else None,
            new_edge=NewEdge.from_dict(new_edge) if new_edge is not None else None,
            updates=(
                {str(key): str(value) for key, value in updates.items()}
                if updates is not None
                else None
            ),
        )

    @classmethod
    def coerce(cls, value: Any) -> "PatchOperation":
        if isinstance(value, cls):
            return value
        return cls.from_dict(value)
