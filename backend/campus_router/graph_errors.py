from __future__ import annotations

from dataclasses import dataclass
from typing import Any

FROZEN_REASON_CODES: frozenset[str] = frozenset(
    {
        "graph_error",
        "snapshot_invalid",
        "snapshot_malformed_json",
        "snapshot_missing_collection",
        "snapshot_unknown_waypoint",
        "snapshot_duplicate_waypoint",
        "waypoint_position_invalid",
        "waypoint_not_found",
        "route_endpoints_identical",
        "route_request_invalid",
    }
)


@dataclass(eq=False)
class CampusGraphError(Exception):
    message: str
    reason_code: str = "graph_error"
    details: dict[str, Any] | None = None

    def __str__(self) -> str:
        return self.message

    def as_detail(self) -> dict[str, Any]:
        detail: dict[str, Any] = {
            "reason_code": normalize_reason_code(self.reason_code),
            "message": self.message,
        }
        if self.details:
            detail["details"] = self.details
        return detail


@dataclass(eq=False)
class ValidationError(CampusGraphError):
    """Malformed or structurally inconsistent snapshot, import or edit."""

    reason_code: str = "snapshot_invalid"


@dataclass(eq=False)
class NotFoundError(CampusGraphError):
    reason_code: str = "waypoint_not_found"


@dataclass(eq=False)
class InvalidRequestError(CampusGraphError):
    reason_code: str = "route_request_invalid"


def normalize_reason_code(reason_code: str, *, default: str = "graph_error") -> str:
    code = str(reason_code or "").strip()
    if code in FROZEN_REASON_CODES:
        return code
    return default
