from typing import Optional


class FlowZapError(Exception):
    pass


class ParseError(FlowZapError):
    def __init__(self, message: str, line_number: int, line: Optional[str] = None) -> None:
        super().__init__(f"Line {line_number}: {message}")
        self.line_number = line_number
        self.line = line


class OperationError(FlowZapError):
    pass


class ServiceError(FlowZapError, RuntimeError):
    pass


__all__ = ["FlowZapError", "ParseError", "OperationError", "ServiceError"]
