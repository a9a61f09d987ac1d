"""
Position evaluator: classifies a board as a win for either side, a tie, or
still in play.

Lines are checked in the canonical order of WIN_PATTERNS, all of X's lines
before O's. Legal play never produces two winners, so the X-first order only
matters for hand-built boards.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence, Tuple

from .game_basics import EMPTY, O, WIN_PATTERNS, X


class Outcome(Enum):
    X_WINS = "x_wins"
    O_WINS = "o_wins"
    TIE = "tie"
    ONGOING = "ongoing"


@dataclass(frozen=True)
class Evaluation:
    outcome: Outcome
    line: Optional[Tuple[int, int, int]] = None

    @property
    def is_terminal(self) -> bool:
        return self.outcome is not Outcome.ONGOING


def _first_line(board: Sequence[int], player: int) -> Optional[Tuple[int, int, int]]:
    for a, b, c in WIN_PATTERNS:
        if board[a] == player and board[b] == player and board[c] == player:
            return (a, b, c)
    return None


def evaluate(board: Sequence[int]) -> Evaluation:
    line = _first_line(board, X)
    if line is not None:
        return Evaluation(Outcome.X_WINS, line)
    line = _first_line(board, O)
    if line is not None:
        return Evaluation(Outcome.O_WINS, line)
    if EMPTY not in board:
        return Evaluation(Outcome.TIE)
    return Evaluation(Outcome.ONGOING)


def winner(board: Sequence[int]) -> int:
    """Winning side (X or O), or EMPTY when nobody has three in a row."""
    outcome = evaluate(board).outcome
    if outcome is Outcome.X_WINS:
        return X
    if outcome is Outcome.O_WINS:
        return O
    return EMPTY


def winning_line(board: Sequence[int]) -> Optional[Tuple[int, int, int]]:
    return evaluate(board).line


def is_terminal(board: Sequence[int]) -> bool:
    return evaluate(board).is_terminal
