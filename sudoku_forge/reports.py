from __future__ import annotations
from typing import Dict, List, Optional, Sequence, Tuple

from sudoku_forge.board import CELLS, constraints_for, row_of, col_of
from sudoku_forge.models import ConflictType, ViolationReport


def _cells_1_indexed(cells: List[int]) -> List[Tuple[int, int]]:
    return [(row_of(i) + 1, col_of(i) + 1) for i in cells]


def _duplicates(board: Sequence[int], group: Sequence[int]) -> Tuple[int, List[int]]:
    positions: Dict[int, List[int]] = {}
    for i in group:
        v = board[i]
        if v == 0:
            continue
        positions.setdefault(v, []).append(i)
    for d, cells in positions.items():
        if len(cells) > 1:
            return d, cells
    return -1, []


_UNIT_NAMES = {
    ConflictType.ROW: ("Row", "row", "row"),
    ConflictType.COL: ("Column", "column", "column"),
    ConflictType.BOX: ("Box", "box", "3×3 box"),
}


def generate_violation_report(
    initial_board: Optional[Sequence[int]],
    board: Sequence[int],
    cages=None,
) -> ViolationReport:
    """
    1) Given tampering (a fixed clue was changed)
    2) Sudoku rule violations (duplicate digit in row/col/box)
    3) Cage violations (duplicate digit in a cage, partial sum above target,
       full cage with the wrong sum)
    Returns the FIRST detected violation with a clear explanation.
    """
    layout = constraints_for(cages)

    # A) Given tampering
    if initial_board is not None:
        edited = [i for i in range(CELLS) if initial_board[i] != 0 and board[i] != initial_board[i]]
        if edited:
            return ViolationReport(
                has_violation=True,
                violation_type=ConflictType.GIVEN_TAMPERING,
                conflict_cells=edited,
                explanation=(
                    "Given tampering detected: a given is a fixed clue and must never be changed.\n"
                    f"Edited given cells (1-indexed): {_cells_1_indexed(edited)}."
                )
            )

    # B) Row / column / box duplicates
    for kind, groups in ((ConflictType.ROW, layout.rows),
                         (ConflictType.COL, layout.cols),
                         (ConflictType.BOX, layout.boxes)):
        title, noun, rule_noun = _UNIT_NAMES[kind]
        for n, group in enumerate(groups):
            d, cells = _duplicates(board, group)
            if cells:
                return ViolationReport(
                    has_violation=True,
                    violation_type=kind,
                    unit_index=n + 1,
                    digit=d,
                    conflict_cells=cells,
                    explanation=(
                        f"{title} rule violation: digit {d} appears more than once in {noun} {n+1}.\n"
                        f"Conflict cells (1-indexed): {_cells_1_indexed(cells)}.\n"
                        f"Sudoku rule: each digit 1–9 may appear at most once per {rule_noun}."
                    )
                )

    # C) Cages
    for n, cage in enumerate(layout.cages):
        d, cells = _duplicates(board, cage.cells)
        if cells:
            return ViolationReport(
                has_violation=True,
                violation_type=ConflictType.CAGE,
                unit_index=n,
                digit=d,
                conflict_cells=cells,
                explanation=(
                    f"Cage rule violation: digit {d} appears more than once in the cage of sum {cage.total}.\n"
                    f"Conflict cells (1-indexed): {_cells_1_indexed(cells)}.\n"
                    "Cage rule: digits inside a cage never repeat."
                )
            )

        filled = [board[i] for i in cage.cells if board[i] != 0]
        total = sum(filled)
        full = len(filled) == len(cage.cells)
        if total > cage.total or (full and total != cage.total):
            return ViolationReport(
                has_violation=True,
                violation_type=ConflictType.CAGE_SUM,
                unit_index=n,
                conflict_cells=list(cage.cells),
                explanation=(
                    f"Cage sum violation: the cage at {_cells_1_indexed(list(cage.cells))} "
                    f"must sum to {cage.total}, its digits sum to {total}."
                )
            )

    return ViolationReport(
        has_violation=False,
        conflict_cells=[],
        explanation="No violations detected (no given tampering, no row/col/box/cage conflicts)."
    )
