from __future__ import annotations

import random

import pytest

from sudoku_forge.board import parse_81
from sudoku_forge.models import Difficulty, GameMode
from sudoku_forge.session import GameSession

SOLVED = (
    "534678912"
    "672195348"
    "198342567"
    "859761423"
    "426853791"
    "713924856"
    "961537284"
    "287419635"
    "345286179"
)


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def solution():
    return parse_81(SOLVED)


def make_session(solution, empty_cells, hints=3, max_mistakes=3, mode=GameMode.CLASSIC, cages=None):
    initial = list(solution)
    for i in empty_cells:
        initial[i] = 0
    return GameSession(
        mode=mode,
        difficulty=Difficulty.EASY,
        solution=list(solution),
        initial_board=initial,
        board=list(initial),
        cages=list(cages or []),
        hints_left=hints,
        max_mistakes=max_mistakes,
    )
