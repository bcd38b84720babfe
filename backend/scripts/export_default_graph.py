from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Any, Sequence

from campus_router.default_graph import default_snapshot
from campus_router.snapshot_store import save_graph_snapshot


def run_export(args: argparse.Namespace) -> dict[str, Any]:
    snapshot = default_snapshot()
    output = Path(args.output).resolve()
    if output.exists() and not args.force:
        raise ValueError(f"refusing to overwrite existing file: {output} (pass --force)")
    written = save_graph_snapshot(snapshot, path=output)
    return {
        "output": str(written),
        "waypoint_count": len(snapshot.nodes),
        "connection_count": len(snapshot.edges),
    }


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Write the built-in campus graph as a snapshot JSON file.")
    parser.add_argument("--output", default="out/snapshots/campus_graph.json")
    parser.add_argument("--force", action="store_true")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(list(argv) if argv is not None else None)
    payload = run_export(args)
    print(json.dumps(payload, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
