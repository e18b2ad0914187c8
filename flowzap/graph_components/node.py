from dataclasses import dataclass
from typing import Dict, Optional

from .core import DEFAULT_LANE, NodeKind, Shape


@dataclass(frozen=True)
class GraphNode:
    id: str
    lane_id: str = DEFAULT_LANE
    label: str = ""
    kind: NodeKind = NodeKind.STEP
    shape: Shape = Shape.RECTANGLE
    # Only populated for taskbox nodes.
    properties: Optional[Dict[str, str]] = None

    def to_dict(self) -> Dict[str, object]:
        payload: Dict[str, object] = {
            "id": self.id,
            "laneId": self.lane_id,
            "label": self.label,
            "kind": self.kind.value,
            "shape": self.shape.value,
        }
        if self.properties is not None:
            payload["properties"] = dict(self.properties)
        return payload
