"""ttt_search package.

Minimax search with alpha-beta pruning for tic-tac-toe, the position
evaluator it stops on, and a recorder that turns one search into an
explorable decision tree.

Convenience imports are exposed for common workflows.
"""

from .config import Difficulty, depth_for
from .evaluator import Evaluation, Outcome, evaluate
from .game import GameSession
from .search import NodeCounter, SearchResult, Verdict, choose_move, search
from .tree import DecisionNode, build_tree, render_tree

__all__ = [
    "evaluate",
    "Evaluation",
    "Outcome",
    "search",
    "choose_move",
    "SearchResult",
    "Verdict",
    "NodeCounter",
    "build_tree",
    "DecisionNode",
    "render_tree",
    "Difficulty",
    "depth_for",
    "GameSession",
]
