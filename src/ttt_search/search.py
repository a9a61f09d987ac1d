"""
Adversarial search: minimax with alpha-beta pruning and a depth budget.

Score polarity is fixed: O (the bot) maximizes, X minimizes.
- An O win scores +10, an X win -10, a tie 0.
- Running out of depth on an open board also scores 0, but is tagged
  Verdict.HORIZON so callers can tell it apart from a proven tie.

Tie-break policy: candidates are tried in ascending cell order and only a
strictly better score replaces the running best, so the lowest-index move
wins among equals.

The recursion is pure. Callers that want to see the search pass an observer
(see TreeRecorder in tree.py and NodeCounter below); without one nothing
beyond the boards themselves is allocated.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import List, NamedTuple, Optional, Sequence

from .evaluator import Outcome, evaluate
from .game_basics import Board, apply_move, legal_moves, side_for, to_board

WIN_SCORE = 10
INF = math.inf


class Verdict(Enum):
    X_WIN = "x_win"
    O_WIN = "o_win"
    TIE = "tie"
    HORIZON = "horizon"

    @property
    def score(self) -> int:
        return VERDICT_SCORES[self]


VERDICT_SCORES = {
    Verdict.X_WIN: -WIN_SCORE,
    Verdict.O_WIN: WIN_SCORE,
    Verdict.TIE: 0,
    Verdict.HORIZON: 0,
}


@dataclass(frozen=True)
class SearchResult:
    score: int
    move: Optional[int]
    verdict: Verdict

    @property
    def is_horizon(self) -> bool:
        return self.verdict is Verdict.HORIZON


def _leaf(verdict: Verdict) -> SearchResult:
    return SearchResult(verdict.score, None, verdict)


_TERMINAL_RESULTS = {
    Outcome.X_WINS: _leaf(Verdict.X_WIN),
    Outcome.O_WINS: _leaf(Verdict.O_WIN),
    Outcome.TIE: _leaf(Verdict.TIE),
}
_HORIZON_RESULT = _leaf(Verdict.HORIZON)


class SearchObserver:
    """Hooks called around every visited state. Subclass and override."""

    def enter(self, board: Board, move: Optional[int], maximizing: bool) -> None:
        pass

    def leave(self, result: SearchResult) -> None:
        pass

    def cutoff(self, skipped: Sequence[int]) -> None:
        pass


class NodeCounter(SearchObserver):
    """Counts visited states, alpha-beta cutoffs and the moves they skipped."""

    def __init__(self) -> None:
        self.nodes = 0
        self.leaves = 0
        self.cutoffs = 0
        self.skipped_moves = 0

    def enter(self, board, move, maximizing):
        self.nodes += 1

    def leave(self, result):
        if result.move is None:
            self.leaves += 1

    def cutoff(self, skipped):
        self.cutoffs += 1
        self.skipped_moves += len(skipped)


class _Best(NamedTuple):
    score: float
    move: Optional[int]
    verdict: Optional[Verdict]
    alpha: float
    beta: float

    @classmethod
    def start(cls, maximizing: bool, alpha: float, beta: float) -> "_Best":
        return cls(-INF if maximizing else INF, None, None, alpha, beta)

    def absorb(self, move: int, child: SearchResult, maximizing: bool) -> "_Best":
        if maximizing:
            if child.score > self.score:
                return _Best(child.score, move, child.verdict, max(self.alpha, child.score), self.beta)
            return self._replace(alpha=max(self.alpha, self.score))
        if child.score < self.score:
            return _Best(child.score, move, child.verdict, self.alpha, min(self.beta, child.score))
        return self._replace(beta=min(self.beta, self.score))

    @property
    def cutoff(self) -> bool:
        return self.beta <= self.alpha


def _alphabeta(
    board: Board,
    depth: int,
    maximizing: bool,
    alpha: float,
    beta: float,
    prune: bool,
    observer: Optional[SearchObserver],
) -> SearchResult:
    evaluation = evaluate(board)
    if evaluation.is_terminal:
        return _TERMINAL_RESULTS[evaluation.outcome]
    if depth == 0:
        return _HORIZON_RESULT

    mark = side_for(maximizing)
    best = _Best.start(maximizing, alpha, beta)
    moves = legal_moves(board)
    for n, move in enumerate(moves):
        child_board = apply_move(board, move, mark)
        if observer is not None:
            observer.enter(child_board, move, not maximizing)
        child = _alphabeta(child_board, depth - 1, not maximizing, best.alpha, best.beta, prune, observer)
        if observer is not None:
            observer.leave(child)
        best = best.absorb(move, child, maximizing)
        if prune and best.cutoff:
            if observer is not None:
                observer.cutoff(moves[n + 1:])
            break
    return SearchResult(int(best.score), best.move, best.verdict)


def _check_args(board: Sequence, depth: int, alpha: float, beta: float) -> Board:
    b = to_board(board)
    if isinstance(depth, bool) or not isinstance(depth, int):
        raise ValueError(f"Depth must be an integer, got {depth!r}")
    if depth < 0:
        raise ValueError(f"Depth must be >= 0, got {depth}")
    if not alpha < beta:
        raise ValueError(f"Search window requires alpha < beta, got alpha={alpha} beta={beta}")
    return b


def search(
    board: Sequence,
    depth: int,
    maximizing: bool,
    alpha: float = -INF,
    beta: float = INF,
    prune: bool = True,
    observer: Optional[SearchObserver] = None,
) -> SearchResult:
    """Best achievable score and move for the side to move.

    Args:
        board: 9 cells (see game_basics.to_board for accepted forms)
        depth: remaining plies to explore; 0 only evaluates the board
        maximizing: True when O is to move, False for X
        alpha, beta: initial search window
        prune: set False to visit every candidate (plain minimax)
        observer: optional SearchObserver notified for every visited state

    Returns:
        SearchResult; move is None when the board is terminal or depth is 0.
    """
    b = _check_args(board, depth, alpha, beta)
    if observer is not None:
        observer.enter(b, None, maximizing)
    result = _alphabeta(b, depth, maximizing, alpha, beta, prune, observer)
    if observer is not None:
        observer.leave(result)
    logging.debug(
        "search depth=%d side=%s prune=%s -> move=%s score=%d verdict=%s",
        depth,
        "O" if maximizing else "X",
        prune,
        result.move,
        result.score,
        result.verdict.value,
    )
    return result


def choose_move(board: Sequence, depth: int, maximizing: bool = True) -> Optional[int]:
    return search(board, depth, maximizing).move


def count_nodes(board: Sequence, depth: int, maximizing: bool, prune: bool = True) -> NodeCounter:
    counter = NodeCounter()
    search(board, depth, maximizing, prune=prune, observer=counter)
    return counter


def ranked_moves(board: Sequence, depth: int, maximizing: bool) -> List[SearchResult]:
    """Exact score of every legal move, in cell order (no pruning at the root).

    Each entry's move is the cell played; score and verdict come from a
    full-window search of the resulting position.
    """
    b = _check_args(board, depth, -INF, INF)
    if evaluate(b).is_terminal or depth == 0:
        return []
    mark = side_for(maximizing)
    out: List[SearchResult] = []
    for move in legal_moves(b):
        child = search(apply_move(b, move, mark), depth - 1, not maximizing)
        out.append(SearchResult(child.score, move, child.verdict))
    return out
