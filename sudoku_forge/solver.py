from __future__ import annotations

import random
from typing import Optional, Sequence

from sudoku_forge.board import CELLS, DIGITS, GridConstraints, box_of, constraints_for, col_of, row_of
from sudoku_forge.models import Grid
from sudoku_forge.validator import cage_allows


# ------------------ grid helpers ------------------
def is_solved(board: Sequence[int]) -> bool:
    return all(v != 0 for v in board)


def is_valid_solution(board: Sequence[int], constraints=None) -> bool:
    """Full board where every group holds each digit at most once and every cage hits its sum."""
    if len(board) != CELLS or not is_solved(board):
        return False
    layout = constraints_for(constraints)
    for unit in layout.units:
        vals = [board[i] for i in unit]
        if len(set(vals)) != len(vals):
            return False
    return all(sum(board[i] for i in cage.cells) == cage.total for cage in layout.cages)


# ------------------ backtracking core ------------------
class _Used:
    """Digits present per row/col/box as bitmasks (bit d set = digit d used)."""

    def __init__(self, board: Sequence[int]):
        self.row_used = [0] * 9
        self.col_used = [0] * 9
        self.box_used = [0] * 9
        for i, v in enumerate(board):
            if v:
                b = 1 << v
                self.row_used[row_of(i)] |= b
                self.col_used[col_of(i)] |= b
                self.box_used[box_of(i)] |= b

    def toggle(self, i: int, d: int) -> None:
        b = 1 << d
        self.row_used[row_of(i)] ^= b
        self.col_used[col_of(i)] ^= b
        self.box_used[box_of(i)] ^= b

    def allows(self, board: Sequence[int], i: int, d: int, layout: GridConstraints) -> bool:
        """Same answer as is_valid_placement for an empty cell i."""
        if (self.row_used[row_of(i)] | self.col_used[col_of(i)] | self.box_used[box_of(i)]) & (1 << d):
            return False
        cage = layout.cage_for(i)
        return cage is None or cage_allows(board, i, d, cage)


def _next_empty(board: Sequence[int], start: int = 0) -> int:
    """First empty cell at or after `start` (callers leave no gap before it)."""
    for i in range(start, CELLS):
        if board[i] == 0:
            return i
    return -1


def _fill(board: Grid, layout: GridConstraints, rng: random.Random, used: _Used, start: int = 0) -> bool:
    empty = _next_empty(board, start)
    if empty == -1:
        return True

    nums = list(DIGITS)
    rng.shuffle(nums)

    for d in nums:
        if used.allows(board, empty, d, layout):
            board[empty] = d
            used.toggle(empty, d)
            if _fill(board, layout, rng, used, empty + 1):
                return True
            used.toggle(empty, d)
            board[empty] = 0
    return False


def _count(board: Grid, layout: GridConstraints, limit: int, used: _Used, start: int = 0) -> int:
    empty = _next_empty(board, start)
    if empty == -1:
        return 1

    count = 0
    for d in DIGITS:
        if used.allows(board, empty, d, layout):
            board[empty] = d
            used.toggle(empty, d)
            count += _count(board, layout, limit - count, used, empty + 1)
            used.toggle(empty, d)
            board[empty] = 0
            if count >= limit:
                return count
    return count


# ------------------ public API ------------------
def solve(board: Sequence[int], constraints=None, rng: Optional[random.Random] = None) -> Optional[Grid]:
    """Complete a copy of `board`; digit order is shuffled by `rng`. None if no completion exists."""
    work = list(board)
    if _fill(work, constraints_for(constraints), rng or random.Random(), _Used(work)):
        return work
    return None


def generate_solution(rng: Optional[random.Random] = None) -> Grid:
    """A uniformly shuffled, fully solved classic grid."""
    solution = solve([0] * CELLS, rng=rng)
    if solution is None:  # pragma: no cover - an empty board always completes
        raise RuntimeError("Backtracking exhausted an empty board")
    return solution


def count_solutions(board: Sequence[int], limit: int = 2, constraints=None) -> int:
    """Number of completions of `board`, counting stops once `limit` is reached."""
    work = list(board)
    return _count(work, constraints_for(constraints), limit, _Used(work))


def has_unique_solution(board: Sequence[int], constraints=None) -> bool:
    return count_solutions(board, 2, constraints) == 1

