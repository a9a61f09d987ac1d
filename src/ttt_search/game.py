"""
Turn management for a human (X) versus bot (O) game.

The session owns the board and whose turn it is; the engine is only asked for
a move on the bot's turn. When the engine returns no move the bot falls back
to a random empty cell.
"""
from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import Optional, Tuple

from .config import Difficulty, Settings, depth_for, load_settings
from .evaluator import Outcome, evaluate
from .game_basics import EMPTY, O, X, Board, apply_move, empty_board, legal_moves
from .tree import DecisionNode, build_tree

PLAYING = "playing"
WON = "won"
TIE = "tie"


@dataclass
class GameSession:
    difficulty: Difficulty = Difficulty.MEDIUM
    settings: Settings = field(default_factory=load_settings)
    board: Board = field(default_factory=empty_board)
    x_next: bool = True
    status: str = PLAYING
    winner: int = EMPTY
    winning_line: Optional[Tuple[int, int, int]] = None
    last_tree: Optional[DecisionNode] = None

    def reset(self) -> None:
        self.board = empty_board()
        self.x_next = True
        self.status = PLAYING
        self.winner = EMPTY
        self.winning_line = None
        self.last_tree = None

    @property
    def to_move(self) -> int:
        return X if self.x_next else O

    @property
    def is_over(self) -> bool:
        return self.status != PLAYING

    def make_move(self, index: int) -> bool:
        """Place the side-to-move's mark; returns False when the move is ignored."""
        if self.is_over or not 0 <= index < 9 or self.board[index] != EMPTY:
            return False
        self.board = apply_move(self.board, index, self.to_move)
        ev = evaluate(self.board)
        if ev.outcome in (Outcome.X_WINS, Outcome.O_WINS):
            self.status = WON
            self.winner = X if ev.outcome is Outcome.X_WINS else O
            self.winning_line = ev.line
        elif ev.outcome is Outcome.TIE:
            self.status = TIE
        else:
            self.x_next = not self.x_next
        return True

    def player_move(self, index: int) -> bool:
        if not self.x_next:
            return False
        return self.make_move(index)

    def bot_move(self, rng: Optional[random.Random] = None) -> Optional[int]:
        """Let the engine play O. Returns the cell played, or None if it was not O's turn."""
        if self.is_over or self.x_next:
            return None
        available = legal_moves(self.board)
        if not available:
            return None
        depth = depth_for(self.difficulty, self.settings)
        result, tree = build_tree(self.board, depth, maximizing=True)
        self.last_tree = tree
        move = result.move
        if move is None:
            move = (rng or random).choice(available)
            logging.debug("engine returned no move, falling back to cell %d", move)
        logging.debug(
            "bot difficulty=%s depth=%d move=%d score=%d nodes=%d",
            self.difficulty.value, depth, move, result.score, tree.size(),
        )
        self.make_move(move)
        return move

    def set_difficulty(self, difficulty: Difficulty) -> None:
        self.difficulty = difficulty
        if self.is_over:
            self.reset()
