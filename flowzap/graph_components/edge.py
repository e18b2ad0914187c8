from dataclasses import dataclass
from typing import Dict, Optional


@dataclass(frozen=True)
class GraphEdge:
    id: str
    source: str
    target: str
    source_handle: str
    target_handle: str
    source_lane: Optional[str] = None
    target_lane: Optional[str] = None
    label: Optional[str] = None

    @property
    def key(self) -> tuple:
        return (self.source, self.target)

    @property
    def is_cross_lane(self) -> bool:
        return bool(
            self.source_lane
            and self.target_lane
            and self.source_lane != self.target_lane
        )

    def to_dict(self) -> Dict[str, str]:
        payload = {
            "id": self.id,
            "from": self.source,
            "to": self.target,
            "sourceHandle": self.source_handle,
            "targetHandle": self.target_handle,
        }
        if self.source_lane:
            payload["fromLane"] = self.source_lane
        if self.target_lane:
            payload["toLane"] = self.target_lane
        if self.label:
            payload["label"] = self.label
        return payload
