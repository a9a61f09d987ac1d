import math
from typing import List

import pytest
try:
    from hypothesis import given, settings, strategies as st  # type: ignore
except ModuleNotFoundError:  # pragma: no cover - test infra
    pytest.skip("Hypothesis not installed", allow_module_level=True)

from ttt_search.evaluator import evaluate
from ttt_search.game_basics import apply_move, current_player, empty_board, is_maximizing, legal_moves
from ttt_search.search import Verdict, search
from ttt_search.tree import build_tree


def _play(cells: List[int]):
    """Apply a move sequence from the empty board, stopping at a finished game."""
    board = empty_board()
    for cell in cells:
        if evaluate(board).is_terminal:
            break
        if board[cell] == 0:
            board = apply_move(board, cell, current_player(board))
    return board


positions = st.lists(st.integers(min_value=0, max_value=8), min_size=2, max_size=9, unique=True).map(_play)


@settings(max_examples=40, deadline=None)
@given(positions, st.integers(min_value=0, max_value=9))
def test_pruning_matches_plain_minimax(board, depth):
    maximizing = is_maximizing(current_player(board))
    pruned = search(board, depth, maximizing)
    plain = search(board, depth, maximizing, prune=False)
    assert pruned.score == plain.score
    assert pruned.move == plain.move


@settings(max_examples=60, deadline=None)
@given(positions, st.integers(min_value=0, max_value=9), st.booleans())
def test_score_alphabet_and_move_legality(board, depth, maximizing):
    res = search(board, depth, maximizing)
    assert res.score in (-10, 0, 10)
    assert res.score == res.verdict.score
    if res.move is not None:
        assert res.move in legal_moves(board)
    else:
        assert evaluate(board).is_terminal or depth == 0


@settings(max_examples=60, deadline=None)
@given(positions, st.booleans())
def test_horizon_only_without_terminal(board, maximizing):
    res = search(board, 0, maximizing)
    assert (res.verdict is Verdict.HORIZON) == (not evaluate(board).is_terminal)


@settings(max_examples=25, deadline=None)
@given(positions, st.integers(min_value=1, max_value=9))
def test_tree_root_agrees_with_plain_search(board, depth):
    maximizing = is_maximizing(current_player(board))
    res, root = build_tree(board, depth, maximizing)
    assert res == search(board, depth, maximizing)
    assert root.score == res.score
    for node in root.iter_nodes():
        if node.children:
            assert node.best_move in [c.move for c in node.children]
            target = max if node.maximizing else min
            assert node.score == target(c.score for c in node.children)
        assert not math.isinf(node.score)
