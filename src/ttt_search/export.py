"""
Export the decision tree of one search for offline inspection.

Writes a flat node table (CSV and/or Parquet), the nested tree as JSON and a
manifest.json with enough metadata to reproduce the run.
"""
from __future__ import annotations

import csv
import hashlib
import importlib.util
import json
import logging
import sys
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from .game_basics import serialize_board, to_board
from .paths import get_git_commit, get_git_is_dirty
from .tracking import log_artifact, log_params
from .tree import build_tree, flatten_tree, tree_stats

EXPORT_VERSION = "1.0.0"
FORMATS = ("csv", "parquet", "both")
NODE_COLUMNS = [
    'node_id', 'parent_id', 'depth', 'move', 'best_move', 'board',
    'score', 'verdict', 'maximizing', 'n_children', 'n_pruned',
]


@dataclass
class ExportArgs:
    out: Path
    board: Sequence = field(default_factory=lambda: [0] * 9)
    depth: int = 9
    maximizing: bool = True
    prune: bool = True
    format: str = "csv"  # one of: "csv", "parquet", "both"
    verbose: bool = False
    cli_argv: Optional[List[str]] = None


def _schema_hash(columns: List[str]) -> str:
    return hashlib.sha256("\n".join(sorted(columns)).encode("utf-8")).hexdigest()


def _sha256_file(path: Path) -> str:
    h = hashlib.sha256()
    with path.open('rb') as f:
        for chunk in iter(lambda: f.read(8192), b''):
            h.update(chunk)
    return h.hexdigest()


def _package_versions() -> Dict[str, str]:
    versions: Dict[str, str] = {}
    for pkg in ["numpy", "pandas", "pyarrow"]:
        if importlib.util.find_spec(pkg) is None:
            continue
        ver = getattr(__import__(pkg), "__version__", None)
        if ver:
            versions[pkg] = ver
    return versions


def _write_csv(path: Path, rows: List[Dict[str, Any]]) -> None:
    with path.open('w', newline='') as f:
        w = csv.DictWriter(f, fieldnames=NODE_COLUMNS)
        w.writeheader()
        for r in rows:
            w.writerow(r)


def run_export(args: ExportArgs) -> Path:
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format="[%(levelname)s] %(message)s")
    fmt = (args.format or "csv").lower()
    if fmt not in FORMATS:
        raise ValueError(f"Unknown export format: {args.format}")
    have_parquet = (importlib.util.find_spec('pandas') is not None
                    and importlib.util.find_spec('pyarrow') is not None)
    parquet_msg = (
        "Parquet dependencies not available (install pandas and pyarrow). "
        "Use pip install .[parquet] to enable parquet support."
    )
    if fmt == "parquet" and not have_parquet:
        raise RuntimeError(parquet_msg)

    board = to_board(args.board)
    logging.info("Searching %s depth=%d side=%s prune=%s",
                 serialize_board(board), args.depth, "O" if args.maximizing else "X", args.prune)
    result, root = build_tree(board, args.depth, args.maximizing, prune=args.prune)
    rows = flatten_tree(root)
    stats = tree_stats(root)
    logging.info("Recorded %d nodes (%d leaves, %d pruned moves)",
                 stats['nodes'], stats['leaves'], stats['pruned_moves'])

    args.out.mkdir(parents=True, exist_ok=True)
    nodes_csv = args.out / 'tree_nodes.csv'
    nodes_parquet = args.out / 'tree_nodes.parquet'
    tree_json = args.out / 'tree.json'

    wrote_csv = False
    wrote_parquet = False
    if fmt in {"csv", "both"}:
        _write_csv(nodes_csv, rows)
        wrote_csv = True
        logging.info("Wrote %s (%d rows)", nodes_csv, len(rows))
    if fmt in {"parquet", "both"}:
        if have_parquet:
            import pandas as pd  # type: ignore
            pd.DataFrame(rows, columns=NODE_COLUMNS).to_parquet(nodes_parquet)
            wrote_parquet = True
            logging.info("Wrote %s", nodes_parquet)
        else:
            logging.warning("%s Proceeding with CSV only; manifest will record parquet_written=false.",
                            parquet_msg)
    tree_json.write_text(json.dumps(root.to_dict(), indent=1))

    files: Dict[str, Any] = {
        "nodes_csv": str(nodes_csv) if wrote_csv else None,
        "nodes_parquet": str(nodes_parquet) if wrote_parquet else None,
        "tree_json": str(tree_json),
    }
    manifest = {
        "export_version": EXPORT_VERSION,
        "created_at": datetime.now(timezone.utc).isoformat(),
        "args": {
            "board": serialize_board(board),
            "depth": args.depth,
            "maximizing": args.maximizing,
            "prune": args.prune,
            "format": fmt,
        },
        "result": {
            "move": result.move,
            "score": result.score,
            "verdict": result.verdict.value,
            "principal_variation": root.principal_variation(),
        },
        "git_commit": get_git_commit(),
        "git_is_dirty": get_git_is_dirty(),
        "python": {
            "python_version": sys.version.split(" ")[0],
            "packages": _package_versions(),
        },
        "cli_argv": args.cli_argv,
        "tree_stats": stats,
        "schema_hash": _schema_hash(NODE_COLUMNS),
        "files": files,
        "checksums": {label: _sha256_file(Path(p)) for label, p in files.items() if p is not None},
        "parquet_written": wrote_parquet,
    }
    (args.out / "manifest.json").write_text(json.dumps(manifest, indent=2))
    logging.info("Wrote manifest.json")

    log_params({
        "board": serialize_board(board),
        "depth": args.depth,
        "maximizing": args.maximizing,
        "prune": args.prune,
        "format": fmt,
        "nodes": stats['nodes'],
    })
    log_artifact(args.out / "manifest.json")
    for p in files.values():
        if p is not None:
            log_artifact(Path(p))
    return args.out
