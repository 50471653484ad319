from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

Grid = List[int]  # 81 cells, row-major, 0 = empty


class GameMode(str, Enum):
    CLASSIC = "classic"
    CAGE = "cage"


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"
    EXPERT = "expert"


class HintType(str, Enum):
    NAKED_SINGLE = "naked_single"
    HIDDEN_SINGLE_ROW = "hidden_single_row"
    HIDDEN_SINGLE_COL = "hidden_single_col"
    HIDDEN_SINGLE_BOX = "hidden_single_box"
    GENERAL = "general"


class GameState(str, Enum):
    PLAYING = "playing"
    WON = "won"
    LOST = "lost"


class ConflictType(str, Enum):
    ROW = "ROW"
    COL = "COL"
    BOX = "BOX"
    CAGE = "CAGE"
    CAGE_SUM = "CAGE_SUM"
    GIVEN_TAMPERING = "GIVEN_TAMPERING"
    NONE = "NONE"


@dataclass(frozen=True)
class Cage:
    cells: Tuple[int, ...]
    total: int

    def __post_init__(self):
        object.__setattr__(self, "cells", tuple(sorted(self.cells)))

    def to_dict(self) -> dict:
        return {"cells": list(self.cells), "sum": self.total}

    @staticmethod
    def from_dict(data: dict) -> "Cage":
        return Cage(tuple(int(i) for i in data["cells"]), int(data["sum"]))


@dataclass(frozen=True)
class Puzzle:
    mode: GameMode
    difficulty: Difficulty
    solution: Tuple[int, ...]
    initial_board: Grid
    board: Grid
    cages: List[Cage] = field(default_factory=list)
    hints: int = 0


@dataclass(frozen=True)
class CageHintInfo:
    total: int
    current_sum: int
    remaining_cells: int
    remaining_sum: int


@dataclass(frozen=True)
class HintResult:
    cell: int
    row: int
    col: int
    box: int
    reason: HintType
    digit: int
    candidates: List[int]
    cage: Optional[CageHintInfo] = None


@dataclass(frozen=True)
class Completions:
    row: Optional[int] = None
    col: Optional[int] = None
    box: Optional[int] = None

    @property
    def any(self) -> bool:
        return self.row is not None or self.col is not None or self.box is not None

    @property
    def level(self) -> int:
        # 1 = single correct digit, 2 = at least one group newly complete
        return 2 if self.any else 1


@dataclass(frozen=True)
class MoveResult:
    mistake: bool = False
    completions: Completions = field(default_factory=Completions)
    ignored: bool = False
    state: GameState = GameState.PLAYING


@dataclass(frozen=True)
class ViolationReport:
    has_violation: bool
    violation_type: ConflictType = ConflictType.NONE
    unit_index: int = -1              # 1..9 for row/col/box, cage position for cages
    digit: int = -1
    conflict_cells: List[int] = field(default_factory=list)
    explanation: str = ""
