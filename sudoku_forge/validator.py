from __future__ import annotations
from typing import Sequence

from sudoku_forge.board import constraints_for, index_of
from sudoku_forge.models import Cage


def cage_allows(board: Sequence[int], i: int, digit: int, cage: Cage) -> bool:
    """Cage rules for `digit` at cell i; the value currently at i is ignored."""
    running = digit
    empties = 0
    for p in cage.cells:
        if p == i:
            continue
        v = board[p]
        if v == 0:
            empties += 1
        elif v == digit:
            return False
        else:
            running += v

    if running > cage.total:
        return False
    if empties == 0 and running != cage.total:
        return False
    return True


def is_valid_placement(board: Sequence[int], row: int, col: int, digit: int, constraints=None) -> bool:
    """
    True if `digit` may go at (row, col) on `board`:
    - not already in the same row, column or box
    - cage mode: not already in the cage, the cage's running sum plus `digit`
      stays within the target, and a cage filled by this placement hits the
      target exactly

    The target cell's own current value is ignored. `constraints` may be a
    GridConstraints, a list of cages, or None for the classic layout.
    """
    layout = constraints_for(constraints)
    i = index_of(row, col)

    for p in layout.peers_of[i]:
        if board[p] == digit:
            return False

    cage = layout.cage_for(i)
    if cage is None:
        return True
    return cage_allows(board, i, digit, cage)
