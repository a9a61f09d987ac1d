from __future__ import annotations

import argparse
import csv
import logging
import random
import sys
import time
from pathlib import Path
from typing import Optional

from .config import Difficulty, depth_for, load_settings
from .evaluator import evaluate
from .export import FORMATS, ExportArgs, run_export
from .game import GameSession
from .game_basics import (
    Board,
    current_player,
    is_maximizing,
    is_valid_state,
    parse_board,
    render_board,
    serialize_board,
    X,
)
from .search import NodeCounter, ranked_moves, search
from .tracking import maybe_mlflow_run
from .tree import build_tree, render_tree


def _add_search_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--board", help="Board string, e.g. 100020000 or X...O.... (omit with --stdin)")
    depth = p.add_mutually_exclusive_group()
    depth.add_argument("--depth", type=int, default=None, help="Search depth in plies")
    depth.add_argument(
        "--difficulty",
        choices=[d.value for d in Difficulty],
        default=None,
        help="Map a difficulty to a depth (see TTT_DEPTH_* env vars)",
    )
    p.add_argument(
        "--side",
        choices=["x", "o"],
        default=None,
        help="Side to move (default: inferred from piece counts, X moves first)",
    )
    p.add_argument("--no-prune", dest="prune", action="store_false", help="Disable alpha-beta cutoffs")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="ttt-search", description="Tic-tac-toe alpha-beta search")
    sub = p.add_subparsers(dest="cmd")
    p.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")
    p.add_argument("--version", action="store_true", help="Print version and exit")
    p.add_argument("--info", action="store_true", help="Print environment and dependency info and exit")
    p.add_argument("--seed", type=int, default=None, help="Seed for the bot's fallback move")

    p_eval = sub.add_parser("evaluate", help="Classify a board as won, tied or still in play")
    p_eval.add_argument("--board", required=True, help="Board string")

    p_search = sub.add_parser("search", help="Find the best move for the side to move")
    _add_search_args(p_search)
    p_search.add_argument(
        "--stdin", action="store_true", help="Read many boards from stdin and stream CSV output"
    )
    p_search.add_argument("--tree", action="store_true", help="Print the decision tree")
    p_search.add_argument(
        "--max-render-depth", type=int, default=2, help="Deepest tree level printed with --tree"
    )
    p_search.add_argument("--all-moves", action="store_true", help="Also log the score of every legal move")

    p_export = sub.add_parser("export", help="Export the decision tree of one search")
    _add_search_args(p_export)
    p_export.add_argument("--out", type=Path, default=None, help="Output directory (default: TTT_TREE_DIR)")
    p_export.add_argument("--format", choices=list(FORMATS), default="csv", help="Node table format")
    p_export.add_argument("--tracking", choices=["none", "mlflow"], default="none",
                          help="Experiment tracking backend")
    p_export.add_argument("--log-dir", type=Path, default=Path("runs"),
                          help="Directory for tracking logs/artifacts (for mlflow local backend)")

    p_play = sub.add_parser("play", help="Play against the bot, reading your moves (0-8) from stdin")
    p_play.add_argument("--difficulty", choices=[d.value for d in Difficulty], default=None)
    p_play.add_argument("--no-delay", action="store_true", help="Skip the pause before the bot moves")
    p_play.add_argument("--show-tree", action="store_true", help="Print the bot's decision tree each turn")
    return p


def _print_info() -> None:
    import importlib.util
    import platform

    print(f"python={sys.version.split()[0]} platform={platform.platform()}")
    for pkg in ["numpy", "pandas", "pyarrow", "mlflow"]:
        spec = importlib.util.find_spec(pkg)
        if spec is None:
            print(f"{pkg}=<not installed>")
        else:
            mod = __import__(pkg)
            print(f"{pkg}={getattr(mod, '__version__', '?')}")


def _read_board(raw: Optional[str]) -> Board:
    board = parse_board(raw or "")
    if not is_valid_state(board):
        raise ValueError("Board is not a valid reachable state.")
    return board


def _resolve(ns: argparse.Namespace, board: Board) -> tuple[int, bool]:
    if ns.depth is not None:
        depth = ns.depth
    else:
        settings = load_settings()
        difficulty = Difficulty.parse(ns.difficulty) if ns.difficulty else settings.default_difficulty
        depth = depth_for(difficulty, settings)
    if ns.side is not None:
        maximizing = ns.side == "o"
    else:
        maximizing = is_maximizing(current_player(board))
    return depth, maximizing


def _cmd_evaluate(ns: argparse.Namespace) -> int:
    board = parse_board(ns.board)
    ev = evaluate(board)
    logging.info("outcome=%s line=%s", ev.outcome.value, list(ev.line) if ev.line else None)
    return 0


def _cmd_search(ns: argparse.Namespace) -> int:
    if ns.stdin:
        w = csv.writer(sys.stdout)
        w.writerow(["board", "side", "depth", "move", "score", "verdict"])
        for line in sys.stdin:
            raw = line.strip()
            if not raw:
                continue
            try:
                board = _read_board(raw)
            except ValueError:
                logging.debug("skipping invalid board %r", raw)
                continue
            depth, maximizing = _resolve(ns, board)
            res = search(board, depth, maximizing, prune=ns.prune)
            w.writerow([
                serialize_board(board),
                "o" if maximizing else "x",
                depth,
                "" if res.move is None else res.move,
                res.score,
                res.verdict.value,
            ])
        return 0

    board = _read_board(ns.board)
    depth, maximizing = _resolve(ns, board)
    if ns.tree:
        res, root = build_tree(board, depth, maximizing, prune=ns.prune)
        nodes = root.size()
    else:
        counter = NodeCounter()
        res = search(board, depth, maximizing, prune=ns.prune, observer=counter)
        nodes = counter.nodes
    logging.info(
        "move=%s score=%d verdict=%s depth=%d side=%s nodes=%d",
        res.move, res.score, res.verdict.value, depth, "o" if maximizing else "x", nodes,
    )
    if ns.all_moves:
        for r in ranked_moves(board, depth, maximizing):
            logging.info("  cell=%d score=%+d verdict=%s", r.move, r.score, r.verdict.value)
    if ns.tree:
        print(render_tree(root, max_depth=ns.max_render_depth))
    return 0


def _cmd_export(ns: argparse.Namespace, argv: Optional[list[str]]) -> int:
    from .paths import tree_dir

    board = _read_board(ns.board)
    depth, maximizing = _resolve(ns, board)
    out_dir = ns.out if ns.out is not None else tree_dir()
    with maybe_mlflow_run(ns.tracking == "mlflow", run_name="tree_export", log_dir=ns.log_dir):
        out = run_export(ExportArgs(
            out=out_dir,
            board=board,
            depth=depth,
            maximizing=maximizing,
            prune=ns.prune,
            format=ns.format,
            verbose=ns.verbose,
            cli_argv=list(argv) if argv is not None else None,
        ))
    logging.info("Exported decision tree to: %s", out)
    return 0


def _cmd_play(ns: argparse.Namespace) -> int:
    settings = load_settings()
    difficulty = Difficulty.parse(ns.difficulty) if ns.difficulty else settings.default_difficulty
    session = GameSession(difficulty=difficulty, settings=settings)
    rng = random.Random(ns.seed)
    print(f"You are X. Difficulty: {difficulty.value} (depth {depth_for(difficulty, settings)})")
    print(render_board(session.board))
    for line in sys.stdin:
        raw = line.strip()
        if not raw:
            continue
        if raw.lower() in ("q", "quit", "exit"):
            break
        if not raw.isdigit() or not session.player_move(int(raw)):
            print(f"Illegal move: {raw!r}. Enter an empty cell 0-8.")
            continue
        if not session.is_over:
            if not ns.no_delay and settings.bot_delay_ms > 0:
                time.sleep(settings.bot_delay_ms / 1000.0)
            move = session.bot_move(rng)
            print(f"Bot plays {move}")
            if ns.show_tree and session.last_tree is not None:
                print(render_tree(session.last_tree, max_depth=1))
        print(render_board(session.board, highlight=session.winning_line))
        if session.is_over:
            break
    if session.status == "won":
        print("You win!" if session.winner == X else "Bot wins!")
    elif session.status == "tie":
        print("Game tied!")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    ns = parser.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if getattr(ns, "verbose", False) else logging.INFO,
                        format="[%(levelname)s] %(message)s")

    if ns.version:
        try:
            from importlib.metadata import version as _ver

            print(_ver("ttt-search"))
        except Exception:
            print("unknown")
        return 0
    if ns.info:
        _print_info()
        return 0

    handlers = {
        "evaluate": _cmd_evaluate,
        "search": _cmd_search,
        "play": _cmd_play,
    }
    try:
        if ns.cmd == "export":
            return _cmd_export(ns, argv)
        if ns.cmd in handlers:
            return handlers[ns.cmd](ns)
    except (ValueError, RuntimeError) as e:
        logging.error("%s", e)
        return 2

    parser.print_help()
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
