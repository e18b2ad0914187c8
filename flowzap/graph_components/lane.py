from dataclasses import dataclass
from typing import Dict

from .core import LaneType


@dataclass(frozen=True)
class Lane:
    id: str
    label: str
    type: LaneType = LaneType.UNKNOWN

    def to_dict(self) -> Dict[str, str]:
        return {"id": self.id, "label": self.label, "type": self.type.value}
