from __future__ import annotations

import logging
import random
from typing import Iterable, List, Optional, Sequence

from sudoku_forge.board import CELLS, DIGITS, GridConstraints, box_of, col_of, constraints_for, row_of
from sudoku_forge.models import CageHintInfo, HintResult, HintType
from sudoku_forge.validator import is_valid_placement

logger = logging.getLogger(__name__)


def _fmt_cell(i: int) -> str:
    return f"(r{row_of(i)+1}, c{col_of(i)+1})"


def get_candidates(board: Sequence[int], i: int, constraints=None) -> List[int]:
    layout = constraints_for(constraints)
    r, c = row_of(i), col_of(i)
    return [d for d in DIGITS if is_valid_placement(board, r, c, d, layout)]


def _only_spot(board: Sequence[int], i: int, d: int, group: Iterable[int], layout: GridConstraints) -> bool:
    """True if no other empty cell of `group` can legally take d."""
    for p in group:
        if p != i and board[p] == 0 and is_valid_placement(board, row_of(p), col_of(p), d, layout):
            return False
    return True


def cage_info(board: Sequence[int], i: int, layout: GridConstraints) -> Optional[CageHintInfo]:
    cage = layout.cage_for(i)
    if cage is None:
        return None
    current = sum(board[p] for p in cage.cells)
    empties = sum(1 for p in cage.cells if board[p] == 0)
    return CageHintInfo(
        total=cage.total,
        current_sum=current,
        remaining_cells=empties,
        remaining_sum=cage.total - current,
    )


def _result(board, i: int, reason: HintType, digit: int, candidates: List[int], layout) -> HintResult:
    return HintResult(
        cell=i,
        row=row_of(i),
        col=col_of(i),
        box=box_of(i),
        reason=reason,
        digit=digit,
        candidates=candidates,
        cage=cage_info(board, i, layout),
    )


# ------------------ Technique hint finders ------------------
def hint_naked_single(board, cells: List[int], layout: GridConstraints) -> Optional[HintResult]:
    for i in cells:
        candidates = get_candidates(board, i, layout)
        if len(candidates) == 1:
            return _result(board, i, HintType.NAKED_SINGLE, candidates[0], candidates, layout)
    return None


def hint_hidden_single(board, cells: List[int], layout: GridConstraints) -> Optional[HintResult]:
    for i in cells:
        candidates = get_candidates(board, i, layout)
        for d in candidates:
            if _only_spot(board, i, d, layout.rows[row_of(i)], layout):
                return _result(board, i, HintType.HIDDEN_SINGLE_ROW, d, candidates, layout)
            if _only_spot(board, i, d, layout.cols[col_of(i)], layout):
                return _result(board, i, HintType.HIDDEN_SINGLE_COL, d, candidates, layout)
            if _only_spot(board, i, d, layout.boxes[box_of(i)], layout):
                return _result(board, i, HintType.HIDDEN_SINGLE_BOX, d, candidates, layout)
    return None


def find_hint(
    board: Sequence[int],
    solution: Sequence[int],
    cages=None,
    cells: Optional[Iterable[int]] = None,
    rng: Optional[random.Random] = None,
) -> Optional[HintResult]:
    """
    Priority order over the empty cells (or the given `cells`, if any):
      1) Naked single
      2) Hidden single, row -> column -> box
      3) A uniformly random empty cell, answered from the solution
    Returns None when there is no empty cell to hint.
    """
    layout = constraints_for(cages)
    pool = list(range(CELLS)) if cells is None else list(cells)
    empty = [i for i in pool if board[i] == 0]
    if not empty:
        return None

    for finder in (hint_naked_single, hint_hidden_single):
        h = finder(board, empty, layout)
        if h is not None:
            logger.debug("hint %s at %s -> %d", h.reason.value, _fmt_cell(h.cell), h.digit)
            return h

    i = (rng or random).choice(empty)
    return _result(board, i, HintType.GENERAL, solution[i], get_candidates(board, i, layout), layout)


def describe_hint(hint: HintResult, level: int) -> List[str]:
    """Steps disclosed so far: 0 = location, 1 = reasoning, 2 = answer."""
    where = _fmt_cell(hint.cell)
    steps = [f"Look at cell {where} in box {hint.box+1}."]

    if level >= 1:
        if hint.reason is HintType.NAKED_SINGLE:
            steps.append(
                f"After removing the digits already in row {hint.row+1}, column {hint.col+1} "
                f"and box {hint.box+1}, only one candidate is left."
            )
        elif hint.reason is HintType.HIDDEN_SINGLE_ROW:
            steps.append(f"In row {hint.row+1}, one digit can only go in this cell.")
        elif hint.reason is HintType.HIDDEN_SINGLE_COL:
            steps.append(f"In column {hint.col+1}, one digit can only go in this cell.")
        elif hint.reason is HintType.HIDDEN_SINGLE_BOX:
            steps.append(f"In box {hint.box+1}, one digit can only go in this cell.")
        else:
            steps.append(f"Candidates for this cell: {hint.candidates}.")

        if hint.cage is not None:
            steps.append(
                f"Its cage sums to {hint.cage.total}; {hint.cage.current_sum} is placed, "
                f"{hint.cage.remaining_sum} remains across {hint.cage.remaining_cells} empty cell(s)."
            )

    if level >= 2:
        steps.append(f"The answer is {hint.digit}: place {hint.digit} in {where}.")

    return steps
