from __future__ import annotations
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

from sudoku_forge.models import Cage, Grid

SIZE = 9
CELLS = SIZE * SIZE
DIGITS = range(1, 10)


def row_of(i: int) -> int:
    return i // 9


def col_of(i: int) -> int:
    return i % 9


def box_of(i: int) -> int:
    return (i // 9 // 3) * 3 + (i % 9) // 3  # 0..8


def index_of(r: int, c: int) -> int:
    return r * 9 + c


def check_index(i: int) -> int:
    if not isinstance(i, int) or not 0 <= i < CELLS:
        raise ValueError(f"Cell index must be an int in 0..80, got {i!r}")
    return i


def check_digit(d: int, allow_empty: bool = True) -> int:
    low = 0 if allow_empty else 1
    if not isinstance(d, int) or not low <= d <= 9:
        raise ValueError(f"Digit must be an int in {low}..9, got {d!r}")
    return d


def check_board(board: Sequence[int]) -> Grid:
    if len(board) != CELLS:
        raise ValueError(f"Expected 81 cells, got {len(board)}")
    for v in board:
        check_digit(v)
    return list(board)


def parse_81(s: str) -> Grid:
    s = "".join(ch for ch in s if not ch.isspace())
    if len(s) != CELLS:
        raise ValueError(f"Expected 81 characters after removing whitespace, got {len(s)}")
    grid: Grid = []
    for ch in s:
        if ch in ".0":
            grid.append(0)
        elif ch.isdigit():
            grid.append(int(ch))
        else:
            raise ValueError(f"Invalid char '{ch}' in grid.")
    return grid


def board_to_81(board: Sequence[int]) -> str:
    return "".join(str(v) for v in board)


def pretty(board: Sequence[int]) -> str:
    lines = []
    for r in range(9):
        if r in (3, 6):
            lines.append("-" * 21)
        row = []
        for c in range(9):
            if c in (3, 6):
                row.append("|")
            v = board[index_of(r, c)]
            row.append(str(v) if v != 0 else ".")
        lines.append(" ".join(row))
    return "\n".join(lines)


def digit_counts(board: Sequence[int]) -> Dict[int, int]:
    counts = {d: 0 for d in DIGITS}
    for v in board:
        if v:
            counts[v] += 1
    return counts


class GridConstraints:
    """
    Immutable constraint layout:
    - rows/cols/boxes = 9 groups of 9 cell indices each
    - cages = optional partition of the 81 cells with target sums
    - peers_of[i] = cells sharing a row, column or box with i (i excluded)
    - cage_of[i] = position of i's cage in `cages`, or None in classic mode
    """

    def __init__(self, cages: Optional[Iterable[Cage]] = None):
        self.rows: List[Tuple[int, ...]] = [tuple(index_of(r, c) for c in range(9)) for r in range(9)]
        self.cols: List[Tuple[int, ...]] = [tuple(index_of(r, c) for r in range(9)) for c in range(9)]
        self.boxes: List[Tuple[int, ...]] = [
            tuple(index_of(r, c)
                  for r in range(br * 3, br * 3 + 3)
                  for c in range(bc * 3, bc * 3 + 3))
            for br in range(3) for bc in range(3)
        ]
        self.cages: List[Cage] = list(cages or [])
        self.cage_of: List[Optional[int]] = [None] * CELLS
        for ci, cage in enumerate(self.cages):
            for i in cage.cells:
                check_index(i)
                if self.cage_of[i] is not None:
                    raise ValueError(f"Cell {i} belongs to more than one cage")
                self.cage_of[i] = ci

        self.peers_of: List[Tuple[int, ...]] = []
        self._precompute_peers()

    @property
    def has_cages(self) -> bool:
        return bool(self.cages)

    @property
    def units(self) -> List[Tuple[int, ...]]:
        return self.rows + self.cols + self.boxes + [cage.cells for cage in self.cages]

    def _precompute_peers(self) -> None:
        for i in range(CELLS):
            peers: Set[int] = set()
            # row + col + box
            peers.update(self.rows[row_of(i)])
            peers.update(self.cols[col_of(i)])
            peers.update(self.boxes[box_of(i)])
            peers.discard(i)
            self.peers_of.append(tuple(sorted(peers)))

    def cage_for(self, i: int) -> Optional[Cage]:
        ci = self.cage_of[i]
        return self.cages[ci] if ci is not None else None

    def conflicting_cells(self, i: int) -> Set[int]:
        """Every other cell that may not hold the same digit as cell i."""
        out = set(self.peers_of[i])
        cage = self.cage_for(i)
        if cage is not None:
            out.update(cage.cells)
            out.discard(i)
        return out


CLASSIC = GridConstraints()


def constraints_for(layout=None) -> GridConstraints:
    """Accepts a GridConstraints, an iterable of cages, or None (classic)."""
    if isinstance(layout, GridConstraints):
        return layout
    cages = list(layout or [])
    return GridConstraints(cages) if cages else CLASSIC
