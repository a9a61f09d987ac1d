"""
Decision-tree recording for a single search.

TreeRecorder is a SearchObserver: it mirrors the engine's recursion into
DecisionNode objects as states are entered and left, so the tree holds exactly
the states the engine visited. Moves skipped by an alpha-beta cutoff are
listed in `pruned` and never appear as children.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple, cast

import numpy as np

from .game_basics import Board, board_symbols, serialize_board
from .search import INF, SearchObserver, SearchResult, Verdict, search


@dataclass
class DecisionNode:
    board: Board
    move: Optional[int]
    maximizing: bool
    depth: int
    score: int = 0
    verdict: Optional[Verdict] = None
    best_move: Optional[int] = None
    children: List["DecisionNode"] = field(default_factory=list)
    pruned: Tuple[int, ...] = ()

    @property
    def is_leaf(self) -> bool:
        return not self.children

    def iter_nodes(self) -> Iterator["DecisionNode"]:
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def size(self) -> int:
        return sum(1 for _ in self.iter_nodes())

    def height(self) -> int:
        return max(n.depth for n in self.iter_nodes()) - self.depth

    def child_for(self, move: int) -> Optional["DecisionNode"]:
        for child in self.children:
            if child.move == move:
                return child
        return None

    def best_child(self) -> Optional["DecisionNode"]:
        """First child with the best score for the side to move here."""
        best: Optional[DecisionNode] = None
        for child in self.children:
            if best is None:
                best = child
            elif self.maximizing and child.score > best.score:
                best = child
            elif not self.maximizing and child.score < best.score:
                best = child
        return best

    def principal_variation(self) -> List[int]:
        moves: List[int] = []
        node: Optional[DecisionNode] = self
        while node is not None and node.best_move is not None:
            moves.append(node.best_move)
            node = node.child_for(node.best_move)
        return moves

    def to_dict(self) -> Dict[str, Any]:
        return {
            'board': serialize_board(self.board),
            'move': self.move,
            'best_move': self.best_move,
            'score': self.score,
            'verdict': self.verdict.value if self.verdict else None,
            'maximizing': self.maximizing,
            'depth': self.depth,
            'pruned': list(self.pruned),
            'children': [c.to_dict() for c in self.children],
        }


class TreeRecorder(SearchObserver):
    def __init__(self) -> None:
        self.root: Optional[DecisionNode] = None
        self._stack: List[DecisionNode] = []

    def enter(self, board, move, maximizing):
        node = DecisionNode(board=board, move=move, maximizing=maximizing, depth=len(self._stack))
        if self._stack:
            self._stack[-1].children.append(node)
        else:
            self.root = node
        self._stack.append(node)

    def leave(self, result: SearchResult):
        node = self._stack.pop()
        node.score = result.score
        node.verdict = result.verdict
        node.best_move = result.move

    def cutoff(self, skipped: Sequence[int]):
        self._stack[-1].pruned = tuple(skipped)


def build_tree(
    board: Sequence,
    depth: int,
    maximizing: bool,
    alpha: float = -INF,
    beta: float = INF,
    prune: bool = True,
) -> Tuple[SearchResult, DecisionNode]:
    """Run search() and return its result together with the explored tree."""
    recorder = TreeRecorder()
    result = search(board, depth, maximizing, alpha=alpha, beta=beta, prune=prune, observer=recorder)
    return result, cast(DecisionNode, recorder.root)


def flatten_tree(root: DecisionNode) -> List[Dict[str, Any]]:
    """Pre-order rows with integer ids; parent_id is None for the root."""
    rows: List[Dict[str, Any]] = []
    stack: List[Tuple[DecisionNode, Optional[int]]] = [(root, None)]
    while stack:
        node, parent_id = stack.pop()
        node_id = len(rows)
        rows.append({
            'node_id': node_id,
            'parent_id': parent_id,
            'depth': node.depth,
            'move': node.move,
            'best_move': node.best_move,
            'board': serialize_board(node.board),
            'score': node.score,
            'verdict': node.verdict.value if node.verdict else None,
            'maximizing': node.maximizing,
            'n_children': len(node.children),
            'n_pruned': len(node.pruned),
        })
        for child in reversed(node.children):
            stack.append((child, node_id))
    return rows


def render_tree(root: DecisionNode, max_depth: Optional[int] = None, indent: str = "  ") -> str:
    """Indented text view; '*' marks the move chosen at the parent."""
    lines: List[str] = []

    def walk(node: DecisionNode, chosen: bool) -> None:
        level = node.depth - root.depth
        label = "root" if node.move is None else f"move {node.move}"
        verdict = node.verdict.value if node.verdict else "?"
        mark = " *" if chosen else ""
        lines.append(f"{indent * level}{label} {board_symbols(node.board)} score={node.score:+d} ({verdict}){mark}")
        if max_depth is not None and level >= max_depth:
            if node.children:
                lines.append(f"{indent * (level + 1)}... {node.size() - 1} more")
            return
        for child in node.children:
            walk(child, child.move == node.best_move)

    walk(root, False)
    return '\n'.join(lines)


def tree_stats(root: DecisionNode) -> Dict[str, Any]:
    nodes = list(root.iter_nodes())
    depths = np.array([n.depth - root.depth for n in nodes], dtype=np.int64)
    branching = np.array([len(n.children) for n in nodes if n.children], dtype=np.float64)
    return {
        'nodes': len(nodes),
        'leaves': int(sum(1 for n in nodes if n.is_leaf)),
        'height': int(depths.max()),
        'nodes_per_depth': np.bincount(depths).tolist(),
        'mean_branching': float(branching.mean()) if branching.size else 0.0,
        'pruned_moves': int(sum(len(n.pruned) for n in nodes)),
    }
