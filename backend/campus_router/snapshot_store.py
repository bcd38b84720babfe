from __future__ import annotations

import os
from datetime import UTC, datetime
from pathlib import Path
from threading import Lock

from .logging_utils import log_event
from .models import GraphSnapshot
from .settings import settings
from .snapshot_codec import decode_snapshot, encode_snapshot

_LOCK = Lock()


def snapshot_store_path() -> Path:
    return Path(settings.out_dir) / "snapshots" / "campus_graph.json"


def save_graph_snapshot(snapshot: GraphSnapshot, *, path: Path | None = None) -> Path:
    target = path or snapshot_store_path()
    payload = encode_snapshot(snapshot)
    with _LOCK:
        target.parent.mkdir(parents=True, exist_ok=True)
        # Write-then-rename so a reader never sees a half-written snapshot.
        tmp = target.with_suffix(target.suffix + ".tmp")
        tmp.write_text(payload, encoding="utf-8")
        os.replace(tmp, target)
    log_event(
        "graph_snapshot_saved",
        path=str(target),
        waypoint_count=len(snapshot.nodes),
        connection_count=len(snapshot.edges),
        saved_at_utc=datetime.now(UTC).isoformat(),
    )
    return target


def load_graph_snapshot(*, path: Path | None = None) -> GraphSnapshot | None:
    target = path or snapshot_store_path()
    with _LOCK:
        if not target.exists():
            return None
        raw = target.read_bytes()
    return decode_snapshot(raw)

