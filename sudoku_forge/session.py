from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import FrozenSet, List, Optional, Set

from sudoku_forge.board import (
    CELLS, GridConstraints, box_of, check_board, check_digit, check_index, col_of, constraints_for, row_of,
)
from sudoku_forge.config import HINT_LEVELS, MAX_MISTAKES
from sudoku_forge.generator import new_puzzle
from sudoku_forge.hints import find_hint
from sudoku_forge.models import (
    Cage, Completions, Difficulty, GameMode, GameState, Grid, HintResult, MoveResult, Puzzle,
)
from sudoku_forge.reports import generate_violation_report
from sudoku_forge.solver import is_solved

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HistoryEntry:
    cell: int
    value: int
    notes: FrozenSet[int]


@dataclass
class GameSession:
    """
    Everything one puzzle in play owns. Engine functions below take the
    session by reference and mutate it; nothing is kept elsewhere.
    """
    mode: GameMode
    difficulty: Difficulty
    solution: List[int]
    initial_board: Grid
    board: Grid
    cages: List[Cage] = field(default_factory=list)
    notes: List[Set[int]] = field(default_factory=lambda: [set() for _ in range(CELLS)])
    hints_left: int = 0
    mistakes: int = 0
    max_mistakes: int = MAX_MISTAKES
    state: GameState = GameState.PLAYING
    history: List[HistoryEntry] = field(default_factory=list)
    completed_rows: Set[int] = field(default_factory=set)
    completed_cols: Set[int] = field(default_factory=set)
    completed_boxes: Set[int] = field(default_factory=set)
    hint_cells: Set[int] = field(default_factory=set)
    current_hint: Optional[HintResult] = None
    hint_level: int = 0
    _layout: Optional[GridConstraints] = field(default=None, repr=False, compare=False)

    @property
    def constraints(self) -> GridConstraints:
        if self._layout is None:
            self._layout = constraints_for(self.cages)
        return self._layout

    @property
    def game_over(self) -> bool:
        return self.state is not GameState.PLAYING

    @staticmethod
    def from_puzzle(puzzle: Puzzle, max_mistakes: int = MAX_MISTAKES) -> "GameSession":
        return GameSession(
            mode=puzzle.mode,
            difficulty=puzzle.difficulty,
            solution=list(puzzle.solution),
            initial_board=list(puzzle.initial_board),
            board=list(puzzle.board),
            cages=list(puzzle.cages),
            hints_left=puzzle.hints,
            max_mistakes=max_mistakes,
        )

    def to_dict(self) -> dict:
        return {
            "mode": self.mode.value,
            "difficulty": self.difficulty.value,
            "solution": list(self.solution),
            "initial_board": list(self.initial_board),
            "board": list(self.board),
            "cages": [cage.to_dict() for cage in self.cages],
            "notes": [sorted(n) for n in self.notes],
            "hints_left": self.hints_left,
            "mistakes": self.mistakes,
            "max_mistakes": self.max_mistakes,
            "state": self.state.value,
            "history": [
                {"cell": h.cell, "value": h.value, "notes": sorted(h.notes)} for h in self.history
            ],
            "completed_rows": sorted(self.completed_rows),
            "completed_cols": sorted(self.completed_cols),
            "completed_boxes": sorted(self.completed_boxes),
            "hint_cells": sorted(self.hint_cells),
        }

    @staticmethod
    def from_dict(data: dict) -> "GameSession":
        notes = data.get("notes") or [[] for _ in range(CELLS)]
        if len(notes) != CELLS:
            raise ValueError(f"Expected 81 note sets, got {len(notes)}")
        return GameSession(
            mode=GameMode(data["mode"]),
            difficulty=Difficulty(data.get("difficulty", Difficulty.EASY)),
            solution=check_board(data["solution"]),
            initial_board=check_board(data["initial_board"]),
            board=check_board(data["board"]),
            cages=[Cage.from_dict(c) for c in data.get("cages", [])],
            notes=[{check_digit(int(d), allow_empty=False) for d in n} for n in notes],
            hints_left=int(data.get("hints_left", 0)),
            mistakes=int(data.get("mistakes", 0)),
            max_mistakes=int(data.get("max_mistakes", MAX_MISTAKES)),
            state=GameState(data.get("state", GameState.PLAYING)),
            history=[
                HistoryEntry(int(h["cell"]), int(h["value"]), frozenset(h.get("notes", [])))
                for h in data.get("history", [])
            ],
            completed_rows=set(data.get("completed_rows", [])),
            completed_cols=set(data.get("completed_cols", [])),
            completed_boxes=set(data.get("completed_boxes", [])),
            hint_cells=set(data.get("hint_cells", [])),
        )


def new_session(
    mode=GameMode.CLASSIC,
    difficulty=Difficulty.EASY,
    rng: Optional[random.Random] = None,
    max_mistakes: int = MAX_MISTAKES,
) -> GameSession:
    return GameSession.from_puzzle(new_puzzle(mode, difficulty, rng), max_mistakes)


# ------------------ notes ------------------
def remove_related_notes(session: GameSession, i: int, digit: int) -> None:
    """Drop `digit` from the notes of every cell that can no longer hold it."""
    session.notes[i].clear()
    for p in session.constraints.conflicting_cells(i):
        session.notes[p].discard(digit)


def _push_history(session: GameSession, i: int) -> None:
    session.history.append(HistoryEntry(i, session.board[i], frozenset(session.notes[i])))


def toggle_note(session: GameSession, i: int, digit: int) -> MoveResult:
    check_index(i)
    check_digit(digit, allow_empty=False)
    if session.game_over or session.initial_board[i] != 0:
        return MoveResult(ignored=True, state=session.state)

    _push_history(session, i)
    if digit in session.notes[i]:
        session.notes[i].discard(digit)
    else:
        session.notes[i].add(digit)
    session.board[i] = 0
    session.hint_cells.discard(i)
    return MoveResult(state=session.state)


def undo(session: GameSession) -> bool:
    if not session.history or session.game_over:
        return False
    last = session.history.pop()
    session.board[last.cell] = last.value
    session.notes[last.cell] = set(last.notes)
    return True


# ------------------ completion / win ------------------
def check_completion(session: GameSession, i: int) -> Completions:
    """Report the row/column/box of cell i that became full for the first time."""
    layout = session.constraints
    board = session.board
    r, c, b = row_of(i), col_of(i), box_of(i)

    row = col = box = None
    if r not in session.completed_rows and all(board[p] for p in layout.rows[r]):
        session.completed_rows.add(r)
        row = r
    if c not in session.completed_cols and all(board[p] for p in layout.cols[c]):
        session.completed_cols.add(c)
        col = c
    if b not in session.completed_boxes and all(board[p] for p in layout.boxes[b]):
        session.completed_boxes.add(b)
        box = b
    return Completions(row=row, col=col, box=box)


def check_win(session: GameSession) -> bool:
    if session.mode is GameMode.CAGE:
        won = is_solved(session.board) and not generate_violation_report(
            session.initial_board, session.board, session.constraints
        ).has_violation
    else:
        won = list(session.board) == list(session.solution)

    if won and session.state is GameState.PLAYING:
        session.state = GameState.WON
        logger.info("puzzle solved (%s, %s), %d mistake(s)",
                    session.mode.value, session.difficulty.value, session.mistakes)
    return won


def _commit(session: GameSession, i: int, digit: int) -> Completions:
    session.board[i] = digit
    remove_related_notes(session, i, digit)
    completions = check_completion(session, i)
    check_win(session)
    return completions


# ------------------ moves ------------------
def apply_digit(session: GameSession, i: int, digit: int) -> MoveResult:
    """
    Enter `digit` (0 = erase) at cell i.
    - game over or a given cell: ignored, nothing changes
    - wrong digit: mistake counted, cell stays empty; hitting max_mistakes loses
    - right digit: committed, related notes cleared, new completions reported
    """
    check_index(i)
    check_digit(digit)
    if session.game_over or session.initial_board[i] != 0:
        return MoveResult(ignored=True, state=session.state)

    _push_history(session, i)
    session.notes[i].clear()
    session.hint_cells.discard(i)

    if digit == 0:
        session.board[i] = 0
        return MoveResult(state=session.state)

    if digit != session.solution[i]:
        session.board[i] = 0
        session.mistakes += 1
        if session.mistakes >= session.max_mistakes:
            session.state = GameState.LOST
            logger.info("mistake limit reached (%d/%d)", session.mistakes, session.max_mistakes)
        return MoveResult(mistake=True, state=session.state)

    completions = _commit(session, i, digit)
    return MoveResult(completions=completions, state=session.state)


# ------------------ hints ------------------
def request_hint(session: GameSession, rng: Optional[random.Random] = None) -> Optional[HintResult]:
    """Open a hint at level 0 (location only). Credits are not spent yet."""
    if session.game_over or session.hints_left <= 0:
        return None
    hint = find_hint(session.board, session.solution, session.constraints, rng=rng)
    session.current_hint = hint
    session.hint_level = 0
    return hint


def advance_hint(session: GameSession) -> Optional[MoveResult]:
    """
    Disclose the next level of the open hint. Reaching the answer level writes
    the digit, spends one credit and returns the resulting MoveResult;
    earlier levels return None. A finished game or an empty credit pool
    closes the hint instead.
    """
    if session.game_over or session.hints_left <= 0:
        close_hint(session)
        return None

    hint = session.current_hint
    if hint is None or session.hint_level >= HINT_LEVELS - 1:
        return None

    refreshed = find_hint(session.board, session.solution, session.constraints, cells=[hint.cell])
    if refreshed is None:
        close_hint(session)
        return None
    session.current_hint = refreshed
    session.hint_level += 1

    if session.hint_level < HINT_LEVELS - 1:
        return None

    session.hint_cells.add(refreshed.cell)
    completions = _commit(session, refreshed.cell, refreshed.digit)
    session.hints_left -= 1
    return MoveResult(completions=completions, state=session.state)


def close_hint(session: GameSession) -> None:
    session.current_hint = None
    session.hint_level = 0


def resume_hint(session: GameSession, cell: int, level: int) -> Optional[HintResult]:
    """Re-open the hint on `cell` at `level` for callers that keep no hint between requests."""
    check_index(cell)
    if session.game_over or session.hints_left <= 0:
        return None
    hint = find_hint(session.board, session.solution, session.constraints, cells=[cell])
    session.current_hint = hint
    session.hint_level = min(max(level, 0), HINT_LEVELS - 1) if hint is not None else 0
    return hint
