"""
Game basics: board representation, parsing, rendering and move application.
Teaching notes:
- A board is a tuple of 9 cells: 0=empty, 1=X, 2=O. X always starts.
- X is the human side and minimizes; O is the bot and maximizes.
- Boards are never mutated; applying a move returns a new tuple.
"""
from __future__ import annotations

from collections import deque
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple

EMPTY = 0
X = 1
O = 2

Board = Tuple[int, ...]

WIN_PATTERNS = [
    (0, 1, 2), (3, 4, 5), (6, 7, 8),
    (0, 3, 6), (1, 4, 7), (2, 5, 8),
    (0, 4, 8), (2, 4, 6),
]

SYMBOLS = {EMPTY: '.', X: 'X', O: 'O'}
_CHAR_TO_CELL = {
    '0': EMPTY, '.': EMPTY, '-': EMPTY, '_': EMPTY,
    '1': X, 'x': X, 'X': X,
    '2': O, 'o': O, 'O': O,
}


def empty_board() -> Board:
    return (EMPTY,) * 9


def _to_cell(value) -> int:
    if value is None:
        return EMPTY
    if isinstance(value, bool):
        raise ValueError(f"Invalid cell value: {value!r}")
    if isinstance(value, int):
        if value in (EMPTY, X, O):
            return value
        raise ValueError(f"Invalid cell value: {value!r}")
    if isinstance(value, str) and len(value) == 1 and value in _CHAR_TO_CELL:
        return _CHAR_TO_CELL[value]
    raise ValueError(f"Invalid cell value: {value!r}")


def to_board(cells: Iterable) -> Board:
    """Normalize any 9-cell sequence into a board tuple.

    Accepts ints (0/1/2), None for empty and the symbols "X"/"O"/".".
    Raises ValueError on a wrong length or an unknown cell.
    """
    board = tuple(_to_cell(c) for c in cells)
    if len(board) != 9:
        raise ValueError(f"Board must have 9 cells, got {len(board)}")
    return board


def parse_board(raw: str) -> Board:
    """Parse a 9-character board string such as "100020000" or "X...O....".

    Whitespace and '|' / '/' separators are ignored so rendered rows can be
    pasted back in.
    """
    cleaned = ''.join(ch for ch in raw if not ch.isspace() and ch not in '|/')
    if len(cleaned) != 9 or any(ch not in _CHAR_TO_CELL for ch in cleaned):
        raise ValueError(f"Invalid board string {raw!r}. Must be 9 chars of 0/1/2 or X/O/.")
    return tuple(_CHAR_TO_CELL[ch] for ch in cleaned)


def serialize_board(board: Sequence[int]) -> str:
    return ''.join(str(cell) for cell in board)


def board_symbols(board: Sequence[int]) -> str:
    return ''.join(SYMBOLS[cell] for cell in board)


def render_board(board: Sequence[int], highlight: Optional[Sequence[int]] = None) -> str:
    """Three text rows such as " X | O | . "; highlighted cells are bracketed."""
    marked = set(highlight or ())
    rows = []
    for r in range(3):
        cells = []
        for i in range(r * 3, r * 3 + 3):
            sym = SYMBOLS[board[i]]
            cells.append(f"[{sym}]" if i in marked else f" {sym} ")
        rows.append('|'.join(cells))
    return '\n'.join(rows)


def get_piece_counts(board: Sequence[int]) -> Tuple[int, int]:
    return sum(1 for v in board if v == X), sum(1 for v in board if v == O)


def legal_moves(board: Sequence[int]) -> List[int]:
    return [i for i, v in enumerate(board) if v == EMPTY]


def apply_move(board: Sequence[int], idx: int, player: int) -> Board:
    lst = list(board)
    lst[idx] = player
    return tuple(lst)


def current_player(board: Sequence[int]) -> int:
    x, o = get_piece_counts(board)
    return X if x == o else O


def side_for(maximizing: bool) -> int:
    return O if maximizing else X


def is_maximizing(player: int) -> bool:
    return player == O


def is_valid_state(board: Sequence[int]) -> bool:
    """True when the board can arise from legal play with X moving first."""
    x_count, o_count = get_piece_counts(board)
    if not (x_count == o_count or x_count == o_count + 1):
        return False

    def count_wins(p: int) -> int:
        return sum(1 for pat in WIN_PATTERNS if all(board[i] == p for i in pat))

    x_wins = count_wins(X)
    o_wins = count_wins(O)
    if x_wins > 0 and o_wins > 0:
        return False
    if x_wins > 0 and x_count != o_count + 1:
        return False
    if o_wins > 0 and x_count != o_count:
        return False
    return True


def iter_reachable_states() -> Iterator[Board]:
    """Every board reachable from the empty board by legal play, breadth-first."""
    # local import: evaluator depends on this module
    from .evaluator import is_terminal

    start = empty_board()
    queue = deque([start])
    seen = {start}
    while queue:
        board = queue.popleft()
        yield board
        if is_terminal(board):
            continue
        player = current_player(board)
        for mv in legal_moves(board):
            child = apply_move(board, mv, player)
            if child not in seen:
                seen.add(child)
                queue.append(child)
