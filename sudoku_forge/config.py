from __future__ import annotations
from dataclasses import dataclass
from typing import Dict

from sudoku_forge.models import Difficulty


@dataclass(frozen=True)
class DifficultySettings:
    remove: int   # classic: cells carved out of the solution
    reveal: int   # cage mode: cells revealed from the solution
    hints: int    # hint credits granted per puzzle


DIFFICULTY_SETTINGS: Dict[Difficulty, DifficultySettings] = {
    Difficulty.EASY: DifficultySettings(remove=35, reveal=30, hints=5),
    Difficulty.MEDIUM: DifficultySettings(remove=45, reveal=22, hints=4),
    Difficulty.HARD: DifficultySettings(remove=52, reveal=12, hints=3),
    Difficulty.EXPERT: DifficultySettings(remove=58, reveal=0, hints=2),
}

MAX_MISTAKES = 3
HINT_LEVELS = 3  # location -> reasoning -> answer

# cage size -> relative weight
CAGE_SIZE_WEIGHTS: Dict[int, int] = {1: 1, 2: 4, 3: 5, 4: 4, 5: 1}
CAGE_GROWTH_ATTEMPTS = 12


def settings_for(difficulty) -> DifficultySettings:
    return DIFFICULTY_SETTINGS[Difficulty(difficulty)]
