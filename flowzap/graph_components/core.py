from enum import Enum


class Shape(Enum):

    CIRCLE = "circle"
    RECTANGLE = "rectangle"
    DIAMOND = "diamond"
    TASKBOX = "taskbox"

    @classmethod
    def names(cls) -> tuple:
        return tuple(member.value for member in cls)


class NodeKind(Enum):

    START = "start"
    END = "end"
    STEP = "step"
    DECISION = "decision"
    TASK = "task"


class LaneType(Enum):

    ACTOR = "actor"
    SYSTEM = "system"
    UNKNOWN = "unknown"


class Handle(Enum):

    LEFT = "left"
    RIGHT = "right"
    TOP = "top"
    BOTTOM = "bottom"


DEFAULT_LANE = "default"
