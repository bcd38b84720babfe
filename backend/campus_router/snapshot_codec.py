from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from .graph_errors import ValidationError
from .models import GraphSnapshot

REQUIRED_COLLECTIONS: tuple[str, ...] = ("nodes", "edges")
_MAX_REPORTED_ERRORS = 20


def _format_loc(loc: tuple[Any, ...]) -> str:
    return ".".join(str(part) for part in loc) or "<root>"


def _from_pydantic(exc: PydanticValidationError) -> ValidationError:
    errors = exc.errors(include_url=False)
    reported = [
        {"field": _format_loc(tuple(err.get("loc", ()))), "type": str(err.get("type", "")), "msg": str(err.get("msg", ""))}
        for err in errors[:_MAX_REPORTED_ERRORS]
    ]
    first = reported[0] if reported else {"field": "<root>", "type": "", "msg": "invalid snapshot"}
    details = {"field": first["field"], "error_count": len(errors), "errors": reported}
    if first["type"] == "missing" and first["field"] in REQUIRED_COLLECTIONS:
        return ValidationError(
            message=f"snapshot is missing required collection '{first['field']}'",
            reason_code="snapshot_missing_collection",
            details=details,
        )
    return ValidationError(
        message=f"invalid snapshot field '{first['field']}': {first['msg']}",
        reason_code="snapshot_invalid",
        details=details,
    )


def _parse_json(raw: str | bytes) -> Any:
    if isinstance(raw, bytes):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ValidationError(
                message="snapshot is not valid UTF-8",
                reason_code="snapshot_malformed_json",
                details={"position": e.start},
            ) from e
    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        raise ValidationError(
            message=f"snapshot is not valid JSON: {e.msg}",
            reason_code="snapshot_malformed_json",
            details={"line": e.lineno, "column": e.colno},
        ) from e


def decode_snapshot(raw: str | bytes | Mapping[str, Any] | GraphSnapshot) -> GraphSnapshot:
    """Parse and validate a serialized graph.

    Accepts JSON text/bytes, an already-parsed mapping, or a ``GraphSnapshot``
    (deep-copied). Anything malformed surfaces as ``ValidationError`` naming the
    offending field; referential checks between edges and nodes are left to the
    graph store's ``load``.
    """
    if isinstance(raw, GraphSnapshot):
        return raw.model_copy(deep=True)

    data: Any = _parse_json(raw) if isinstance(raw, (str, bytes)) else raw
    if not isinstance(data, Mapping):
        raise ValidationError(
            message="snapshot must be a JSON object with 'nodes' and 'edges'",
            reason_code="snapshot_invalid",
            details={"received_type": type(data).__name__},
        )

    for key in REQUIRED_COLLECTIONS:
        if data.get(key) is None:
            raise ValidationError(
                message=f"snapshot is missing required collection '{key}'",
                reason_code="snapshot_missing_collection",
                details={"field": key},
            )

    try:
        return GraphSnapshot.model_validate(dict(data))
    except PydanticValidationError as e:
        raise _from_pydantic(e) from e


def snapshot_to_dict(snapshot: GraphSnapshot) -> dict[str, Any]:
    return snapshot.model_dump(mode="json")


def encode_snapshot(snapshot: GraphSnapshot, *, indent: int | None = 2) -> str:
    return json.dumps(snapshot_to_dict(snapshot), indent=indent, ensure_ascii=False)
