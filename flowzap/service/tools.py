"""Boundary handlers: validate raw inputs, run the core, return JSON-ready dicts.

Input checks (type, emptiness, size ceiling) live here rather than in the
parser, differ or patcher, which assume well-formed string input.
"""

import json
import re
from typing import Any, Callable, Dict, Mapping, Optional

from ..errors import OperationError, ServiceError
from ..graph_components.diff import diff
from ..graph_components.operations import SUPPORTED_OPERATIONS
from ..graph_components.parser import parse
from ..graph_components.patch import apply_changes
from ..syntax import SYNTAX_GUIDE
from .playground_client import (
    PlaygroundResult,
    ValidationResult,
    create_playground_url,
    validate_code,
)

MAX_CODE_LENGTH = 50_000

# C0 controls and DEL, except tab, newline and carriage return.
CONTROL_CHARS_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")

PlaygroundClient = Callable[[str], PlaygroundResult]
Validator = Callable[[str], ValidationResult]

GRAPH_USAGE_HINT = (
    "Use this graph to query structure: find nodes by lane, trace paths between "
    "nodes, identify decision points, etc."
)


def _failure(message: str) -> Dict[str, Any]:
    return {"success": False, "error": message}


def check_code(value: Any, name: str = "code", *, allow_empty: bool = False) -> Optional[str]:
    if not isinstance(value, str):
        return f"{name} must be a string"
    if not allow_empty and not value.strip():
        return f"{name} cannot be empty"
    if len(value) > MAX_CODE_LENGTH:
        return f"{name} exceeds maximum length of {MAX_CODE_LENGTH:,} characters"
    return None


def sanitize_code(code: str) -> str:
    return CONTROL_CHARS_RE.sub("", code)


def check_operations(operations: Any) -> Optional[str]:
    if not isinstance(operations, list):
        return "operations must be an array"
    for operation in operations:
        if not isinstance(operation, Mapping) or operation.get("op") not in SUPPORTED_OPERATIONS:
            return (
                f"Invalid operation: {json.dumps(operation, default=str)}. "
                f"op must be one of: {', '.join(SUPPORTED_OPERATIONS)}"
            )
    return None


def handle_export_graph(code: Any) -> Dict[str, Any]:
    error = check_code(code)
    if error:
        return _failure(error)
    return {
        "success": True,
        "graph": parse(sanitize_code(code)).to_dict(),
        "hint": GRAPH_USAGE_HINT,
    }


def handle_diff(old_code: Any, new_code: Any) -> Dict[str, Any]:
    error = check_code(old_code, "oldCode", allow_empty=True) or check_code(
        new_code, "newCode", allow_empty=True
    )
    if error:
        return _failure(error)

    result = diff(sanitize_code(old_code), sanitize_code(new_code))
    return {"success": True, "changes": result.to_dict(), "summary": result.summary}


def handle_apply_change(
    code: Any,
    operations: Any,
    *,
    playground: Optional[PlaygroundClient] = create_playground_url,
) -> Dict[str, Any]:
    error = check_code(code) or check_operations(operations)
    if error:
        return _failure(error)

    try:
        result = apply_changes(sanitize_code(code), operations)
    except OperationError as exc:
        return _failure(f"Failed to apply changes: {exc}")

    payload: Dict[str, Any] = {
        "success": True,
        "code": result.code,
        "url": None,
        "applied": result.log,
        "summary": f"Applied {len(result.applied)} operation(s)",
    }
    if playground is not None:
        shared = playground(result.code)
        payload["url"] = shared.url
        if shared.error:
            payload["playgroundError"] = shared.error
    return payload


def handle_validate(code: Any, *, validator: Validator = validate_code) -> Dict[str, Any]:
    error = check_code(code)
    if error:
        return _failure(error)

    try:
        result = validator(sanitize_code(code))
    except ServiceError as exc:
        return _failure(f"Validation service unavailable: {exc}")
    return {"success": True, **result.to_dict()}


def handle_create_playground(
    code: Any,
    *,
    validator: Validator = validate_code,
    playground: PlaygroundClient = create_playground_url,
) -> Dict[str, Any]:
    """Validate ``code`` and, only if it is valid, create a share link for it."""
    error = check_code(code)
    if error:
        return _failure(error)

    code = sanitize_code(code)
    try:
        validation = validator(code)
    except ServiceError as exc:
        return _failure(f"Validation service unavailable: {exc}")
    if not validation.valid:
        return {
            **_failure("Cannot create playground - code has errors"),
            "errors": validation.to_dict()["errors"],
        }

    shared = playground(code)
    if shared.url:
        return {"success": True, "url": shared.url}
    return _failure(f"Failed to create playground: {shared.error or 'unexpected response'}")


def handle_get_syntax() -> Dict[str, Any]:
    return {"success": True, "syntax": SYNTAX_GUIDE}
