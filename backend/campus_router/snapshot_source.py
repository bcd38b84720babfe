from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Literal
from urllib.parse import urlparse

import httpx

from .default_graph import default_snapshot
from .graph_errors import ValidationError
from .graph_store import check_snapshot
from .logging_utils import log_event
from .models import GraphSnapshot
from .settings import settings
from .snapshot_codec import decode_snapshot
from .snapshot_store import load_graph_snapshot, snapshot_store_path


@dataclass(frozen=True)
class SnapshotFetch:
    source: str
    snapshot: GraphSnapshot | None
    error: str = ""


@dataclass(frozen=True)
class ResolvedSnapshot:
    snapshot: GraphSnapshot
    origin: Literal["source", "default"]
    source: str
    error: str = ""


def _is_url(source: str) -> bool:
    return urlparse(source).scheme.lower() in {"http", "https"}


def _configured_source(source: str | None) -> str:
    """Explicit ``source``, else ``GRAPH_SOURCE``; empty means the snapshot store."""
    return str(source if source is not None else settings.graph_source).strip()


def _fetch_from_store() -> SnapshotFetch:
    path = snapshot_store_path()
    try:
        snapshot = load_graph_snapshot(path=path)
        if snapshot is not None:
            check_snapshot(snapshot)
    except ValidationError as e:
        return SnapshotFetch(source=str(path), snapshot=None, error=f"{e.reason_code}: {e.message}")
    except OSError as e:
        return SnapshotFetch(source=str(path), snapshot=None, error=f"{type(e).__name__}: {str(e).strip()}")
    if snapshot is None:
        return SnapshotFetch(source=str(path), snapshot=None, error="snapshot source not found")
    return SnapshotFetch(source=str(path), snapshot=snapshot)


def _read_source(source: str, *, timeout_s: float, client: httpx.Client | None) -> bytes:
    if not _is_url(source):
        return Path(source).read_bytes()
    if client is not None:
        resp = client.get(source)
        resp.raise_for_status()
        return resp.content
    # trust_env=False keeps proxy env vars from hijacking requests to local hosts.
    with httpx.Client(
        timeout=httpx.Timeout(timeout_s, connect=min(5.0, timeout_s)),
        trust_env=False,
        headers={"accept": "application/json"},
    ) as owned:
        resp = owned.get(source)
        resp.raise_for_status()
        return resp.content


def fetch_snapshot(
    source: str | None = None,
    *,
    timeout_s: float | None = None,
    client: httpx.Client | None = None,
) -> SnapshotFetch:
    """Read and validate a snapshot from a file path, an http(s) URL or the snapshot store.

    Never raises: every failure kind comes back as ``SnapshotFetch(snapshot=None)``
    with a short error description so the caller can decide what to substitute.
    """
    src = _configured_source(source)
    if not src:
        return _fetch_from_store()
    timeout = float(timeout_s if timeout_s is not None else settings.graph_source_timeout_s)
    try:
        raw = _read_source(src, timeout_s=timeout, client=client)
    except FileNotFoundError:
        return SnapshotFetch(source=src, snapshot=None, error="snapshot source not found")
    except httpx.HTTPStatusError as e:
        return SnapshotFetch(source=src, snapshot=None, error=f"HTTP {e.response.status_code}")
    except (OSError, httpx.HTTPError) as e:
        return SnapshotFetch(source=src, snapshot=None, error=f"{type(e).__name__}: {str(e).strip()}")

    try:
        snapshot = decode_snapshot(raw)
        check_snapshot(snapshot)
    except ValidationError as e:
        return SnapshotFetch(source=src, snapshot=None, error=f"{e.reason_code}: {e.message}")
    return SnapshotFetch(source=src, snapshot=snapshot)


def resolve_snapshot(
    source: str | None = None,
    *,
    timeout_s: float | None = None,
    client: httpx.Client | None = None,
) -> ResolvedSnapshot:
    fetched = fetch_snapshot(source, timeout_s=timeout_s, client=client)
    if fetched.snapshot is not None:
        return ResolvedSnapshot(snapshot=fetched.snapshot, origin="source", source=fetched.source)

    log_event(
        "graph_snapshot_fallback",
        level=logging.WARNING,
        source=fetched.source,
        error=fetched.error,
    )
    return ResolvedSnapshot(
        snapshot=default_snapshot(),
        origin="default",
        source=fetched.source,
        error=fetched.error,
    )
