from functools import lru_cache

import pytest

from ttt_search.evaluator import Outcome, evaluate
from ttt_search.game_basics import (
    apply_move,
    current_player,
    is_maximizing,
    iter_reachable_states,
    legal_moves,
)
from ttt_search.search import search


@lru_cache(maxsize=None)
def reference_value(board: tuple, maximizing: bool) -> int:
    """Plain memoized minimax on the same score scale."""
    outcome = evaluate(board).outcome
    if outcome is Outcome.X_WINS:
        return -10
    if outcome is Outcome.O_WINS:
        return 10
    if outcome is Outcome.TIE:
        return 0
    mark = 2 if maximizing else 1
    values = [reference_value(apply_move(board, mv, mark), not maximizing) for mv in legal_moves(board)]
    return max(values) if maximizing else min(values)


@pytest.fixture(scope="module")
def late_states():
    # four or more pieces keeps the unpruned searches cheap
    return [b for b in iter_reachable_states() if sum(1 for v in b if v) >= 4]


def test_reachable_state_count():
    assert sum(1 for _ in iter_reachable_states()) == 5478


def test_full_depth_matches_reference_minimax(late_states):
    for b in late_states:
        maximizing = is_maximizing(current_player(b))
        res = search(b, 9, maximizing)
        assert res.score == reference_value(b, maximizing), b


def test_full_depth_never_picks_a_losing_move_when_avoidable(late_states):
    for b in late_states:
        if evaluate(b).outcome is not Outcome.ONGOING:
            continue
        maximizing = is_maximizing(current_player(b))
        mark = 2 if maximizing else 1
        res = search(b, 9, maximizing)
        child_values = {mv: reference_value(apply_move(b, mv, mark), not maximizing) for mv in legal_moves(b)}
        chosen = child_values[res.move]
        best = max(child_values.values()) if maximizing else min(child_values.values())
        assert chosen == best, b
        # among equals the lowest index is chosen
        assert res.move == min(mv for mv, v in child_values.items() if v == best)


def test_pruning_agrees_with_plain_minimax(late_states):
    for b in late_states:
        maximizing = is_maximizing(current_player(b))
        for depth in (1, 3, 9):
            pruned = search(b, depth, maximizing)
            plain = search(b, depth, maximizing, prune=False)
            assert pruned.score == plain.score, (b, depth)
            assert pruned.move == plain.move, (b, depth)


def test_depth_limited_moves_are_legal(late_states):
    for b in late_states[::7]:
        maximizing = is_maximizing(current_player(b))
        res = search(b, 2, maximizing)
        if evaluate(b).is_terminal:
            assert res.move is None
        else:
            assert res.move in legal_moves(b)
