from .playground_client import (
    PlaygroundResult,
    ValidationIssue,
    ValidationResult,
    create_playground,
    create_playground_url,
    validate_code,
)
from .tools import (
    MAX_CODE_LENGTH,
    handle_apply_change,
    handle_create_playground,
    handle_diff,
    handle_export_graph,
    handle_get_syntax,
    handle_validate,
    sanitize_code,
)

__all__ = [
    "PlaygroundResult",
    "ValidationIssue",
    "ValidationResult",
    "create_playground",
    "create_playground_url",
    "validate_code",
    "MAX_CODE_LENGTH",
    "handle_apply_change",
    "handle_create_playground",
    "handle_diff",
    "handle_export_graph",
    "handle_get_syntax",
    "handle_validate",
    "sanitize_code",
]
