from __future__ import annotations

import logging
import random
from typing import List, Optional, Sequence, Set

from sudoku_forge.board import CELLS, CLASSIC, col_of, index_of, row_of
from sudoku_forge.config import CAGE_GROWTH_ATTEMPTS, CAGE_SIZE_WEIGHTS, settings_for
from sudoku_forge.models import Cage, Difficulty, GameMode, Grid, Puzzle
from sudoku_forge.solver import generate_solution, has_unique_solution

logger = logging.getLogger(__name__)

DIRECTIONS = ((-1, 0), (1, 0), (0, -1), (0, 1))


def carve(solution: Sequence[int], remove: int, rng: random.Random) -> Grid:
    """
    Clear up to `remove` cells from a copy of `solution`, one random position at a time.
    A removal that breaks uniqueness is rolled back, so the board stays uniquely
    solvable after every step.
    """
    board = list(solution)
    positions = list(range(CELLS))
    rng.shuffle(positions)

    removed = 0
    for pos in positions:
        if removed >= remove:
            break
        backup = board[pos]
        board[pos] = 0
        if has_unique_solution(board, CLASSIC):
            removed += 1
        else:
            board[pos] = backup

    if removed < remove:
        logger.debug("carve stopped at %d of %d removals", removed, remove)
    return board


def _neighbours(i: int) -> List[int]:
    r, c = row_of(i), col_of(i)
    out = []
    for dr, dc in DIRECTIONS:
        rr, cc = r + dr, c + dc
        if 0 <= rr < 9 and 0 <= cc < 9:
            out.append(index_of(rr, cc))
    return out


def _pick_size(rng: random.Random) -> int:
    sizes = list(CAGE_SIZE_WEIGHTS)
    return rng.choices(sizes, weights=[CAGE_SIZE_WEIGHTS[s] for s in sizes])[0]


def build_cages(solution: Sequence[int], rng: random.Random) -> List[Cage]:
    """
    Partition all 81 cells into cages by randomized region growth.

    Cells are seeded in index order. Each cage grows by probing a random
    orthogonal neighbour of a random member; the probe is rejected when the
    neighbour is already taken or its solution digit repeats one in the cage.
    Growth ends at the drawn size or after CAGE_GROWTH_ATTEMPTS rejected
    probes in a row, so cages may come out smaller than drawn (even size 1).
    """
    visited: Set[int] = set()
    cages: List[Cage] = []

    for start in range(CELLS):
        if start in visited:
            continue
        target = _pick_size(rng)
        cells = [start]
        digits = {solution[start]}
        visited.add(start)

        attempts = 0
        while len(cells) < target and attempts < CAGE_GROWTH_ATTEMPTS:
            nxt = rng.choice(_neighbours(rng.choice(cells)))
            if nxt in visited or solution[nxt] in digits:
                attempts += 1
                continue
            cells.append(nxt)
            digits.add(solution[nxt])
            visited.add(nxt)
            attempts = 0

        cages.append(Cage(tuple(cells), sum(solution[i] for i in cells)))

    return cages


def reveal(solution: Sequence[int], count: int, rng: random.Random) -> Grid:
    board = [0] * CELLS
    positions = list(range(CELLS))
    rng.shuffle(positions)
    for pos in positions[:count]:
        board[pos] = solution[pos]
    return board


def generate_classic(difficulty=Difficulty.EASY, rng: Optional[random.Random] = None) -> Puzzle:
    rng = rng or random.Random()
    settings = settings_for(difficulty)
    solution = generate_solution(rng)
    board = carve(solution, settings.remove, rng)
    logger.debug("classic puzzle: %d givens (%s)", sum(1 for v in board if v), Difficulty(difficulty).value)
    return Puzzle(
        mode=GameMode.CLASSIC,
        difficulty=Difficulty(difficulty),
        solution=tuple(solution),
        initial_board=board,
        board=list(board),
        cages=[],
        hints=settings.hints,
    )


def generate_cage(difficulty=Difficulty.EASY, rng: Optional[random.Random] = None) -> Puzzle:
    rng = rng or random.Random()
    settings = settings_for(difficulty)
    solution = generate_solution(rng)
    cages = build_cages(solution, rng)
    board = reveal(solution, settings.reveal, rng)
    logger.debug("cage puzzle: %d cages, %d revealed (%s)", len(cages), settings.reveal, Difficulty(difficulty).value)
    return Puzzle(
        mode=GameMode.CAGE,
        difficulty=Difficulty(difficulty),
        solution=tuple(solution),
        initial_board=board,
        board=list(board),
        cages=cages,
        hints=settings.hints,
    )


def new_puzzle(mode=GameMode.CLASSIC, difficulty=Difficulty.EASY, rng: Optional[random.Random] = None) -> Puzzle:
    """Build a fresh puzzle; raises ValueError for an unknown mode or difficulty."""
    mode = GameMode(mode)
    if mode is GameMode.CAGE:
        return generate_cage(difficulty, rng)
    return generate_classic(difficulty, rng)
