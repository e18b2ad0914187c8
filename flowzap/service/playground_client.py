"""Clients for the hosted validation and playground (share link) services.

Only the narrow request/response contracts are used here; nothing in the
parse/diff/patch core depends on these calls succeeding.
"""

import json
import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

import requests

from ..errors import ServiceError

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://flowzap.xyz"
REQUEST_TIMEOUT = 30.0
MAX_REPORTED_ISSUES = 50
VIEWS = ("workflow", "sequence", "architecture")
USER_AGENT = "flowzap-graph/0.1.0"


def _as_int(value: Any) -> int:
    try:
        return int(value or 0)
    except (TypeError, ValueError):
        return 0


@dataclass
class ValidationIssue:
    line: int
    message: str


@dataclass
class ValidationResult:
    valid: bool
    errors: List[ValidationIssue] = field(default_factory=list)
    warnings: List[Any] = field(default_factory=list)
    stats: Optional[Dict[str, int]] = None

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "ValidationResult":
        errors = payload.get("errors")
        warnings = payload.get("warnings")
        stats = payload.get("stats")
        issues = []
        if isinstance(errors, list):
            for error in errors[:MAX_REPORTED_ISSUES]:
                if isinstance(error, Mapping):
                    issues.append(
                        ValidationIssue(
                            line=_as_int(error.get("line")),
                            message=str(error.get("message", "")),
                        )
                    )
                else:
                    issues.append(ValidationIssue(line=0, message=str(error)))
        return cls(
            valid=bool(payload.get("valid")),
            errors=issues,
            warnings=list(warnings[:MAX_REPORTED_ISSUES]) if isinstance(warnings, list) else [],
            stats=(
                {key: _as_int(stats.get(key)) for key in ("lanes", "nodes", "edges")}
                if isinstance(stats, Mapping)
                else None
            ),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "valid": self.valid,
            "errors": [{"line": issue.line, "message": issue.message} for issue in self.errors],
            "warnings": list(self.warnings),
            "stats": dict(self.stats) if self.stats is not None else None,
        }


@dataclass
class PlaygroundResult:
    url: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.url is not None


def resolve_base_url(explicit_url: Optional[str] = None) -> str:
    return (explicit_url or os.getenv("FLOWZAP_API_BASE") or DEFAULT_BASE_URL).rstrip("/")


def _post_json(url: str, payload: Mapping[str, Any], timeout: float) -> Dict[str, Any]:
    headers = {
        "Accept": "application/json",
        "Content-Type": "application/json",
        "User-Agent": USER_AGENT,
        "X-Client": "flowzap-graph",
    }
    try:
        response = requests.post(url, headers=headers, data=json.dumps(payload), timeout=timeout)
    except requests.Timeout as exc:
        raise ServiceError("Request timed out") from exc
    except requests.RequestException as exc:
        raise ServiceError(f"Request to {url} failed: {exc}") from exc

    if response.status_code >= 400:
        raise ServiceError(f"API error: {response.status_code}")

    try:
        data = response.json()
    except ValueError as exc:
        raise ServiceError(f"Failed to decode response from {url}: {exc}") from exc

    if not isinstance(data, dict):
        raise ServiceError(f"Unexpected response from {url}: expected a JSON object.")
    return data


def validate_code(
    code: str,
    *,
    base_url: Optional[str] = None,
    timeout: float = REQUEST_TIMEOUT,
) -> ValidationResult:
    root = resolve_base_url(base_url)
    data = _post_json(f"{root}/api/validate", {"code": code}, timeout)
    return ValidationResult.from_dict(data)


def create_playground(
    code: str,
    *,
    view: Optional[str] = None,
    base_url: Optional[str] = None,
    timeout: float = REQUEST_TIMEOUT,
) -> str:
    if view is not None and view not in VIEWS:
        raise ValueError(f"Unknown view: {view}. Expected one of {', '.join(VIEWS)}.")

    root = resolve_base_url(base_url)
    payload: Dict[str, Any] = {"code": code, "source": "mcp"}
    if view:
        payload["view"] = view

    data = _post_json(f"{root}/api/playground/create", payload, timeout)
    url = data.get("url")
    if not url:
        raise ServiceError(str(data.get("error") or "Unknown error creating playground"))
    if not str(url).startswith(f"{root}/"):
        raise ServiceError("Invalid playground URL returned")
    return str(url)


def create_playground_url(code: str, **kwargs: Any) -> PlaygroundResult:
    try:
        return PlaygroundResult(url=create_playground(code, **kwargs))
    except (ServiceError, ValueError) as exc:
        logger.warning("Could not create playground: %s", exc)
        return PlaygroundResult(error=str(exc))
