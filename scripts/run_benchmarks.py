#!/usr/bin/env python3
from __future__ import annotations

import argparse
import math
import statistics as stats
import time
from dataclasses import dataclass
from pathlib import Path
from typing import List, Tuple

from ttt_search.search import count_nodes, search
from ttt_search.tracking import log_metrics, log_params, maybe_mlflow_run


def ci95(values: List[float]) -> Tuple[float, float]:
    if not values:
        return (float("nan"), float("nan"))
    m = stats.fmean(values)
    s = stats.pstdev(values) if len(values) > 1 else 0.0
    half = 1.96 * (s / math.sqrt(len(values)))
    return m, half


@dataclass
class Config:
    repeats: int = 5
    depth: int = 9
    tracking: str = "none"  # or "mlflow"
    log_dir: Path = Path("runs")


def _time(fn, repeats: int) -> List[float]:
    times: List[float] = []
    for _ in range(repeats):
        t0 = time.perf_counter()
        fn()
        times.append(time.perf_counter() - t0)
    return times


def main() -> int:
    p = argparse.ArgumentParser(description="Time pruned vs plain minimax from the empty board")
    p.add_argument("--repeats", type=int, default=Config.repeats)
    p.add_argument("--depth", type=int, default=Config.depth)
    p.add_argument("--tracking", choices=["none", "mlflow"], default="none")
    ns = p.parse_args()
    cfg = Config(repeats=ns.repeats, depth=ns.depth, tracking=ns.tracking)
    board = [0] * 9

    with maybe_mlflow_run(cfg.tracking == "mlflow", run_name="benchmarks", log_dir=cfg.log_dir):
        log_params({"repeats": cfg.repeats, "depth": cfg.depth})
        pruned_t = _time(lambda: search(board, cfg.depth, True), cfg.repeats)
        plain_t = _time(lambda: search(board, cfg.depth, True, prune=False), cfg.repeats)
        pruned_n = count_nodes(board, cfg.depth, True)
        plain_n = count_nodes(board, cfg.depth, True, prune=False)
        m_pruned, h_pruned = ci95(pruned_t)
        m_plain, h_plain = ci95(plain_t)
        log_metrics({
            "pruned_mean_s": m_pruned,
            "pruned_ci95_half_s": h_pruned,
            "plain_mean_s": m_plain,
            "plain_ci95_half_s": h_plain,
            "pruned_nodes": float(pruned_n.nodes),
            "plain_nodes": float(plain_n.nodes),
        })
    print(f"alpha-beta: mean={m_pruned:.4f}s ± {h_pruned:.4f}s (95% CI) nodes={pruned_n.nodes} cutoffs={pruned_n.cutoffs}")
    print(f"minimax:    mean={m_plain:.4f}s ± {h_plain:.4f}s (95% CI) nodes={plain_n.nodes}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
