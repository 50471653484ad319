from __future__ import annotations

from sudoku_forge.board import GridConstraints, index_of
from sudoku_forge.models import Cage
from sudoku_forge.validator import is_valid_placement


def test_row_column_and_box_conflicts(solution):
    board = [0] * 81
    board[index_of(0, 0)] = 5
    assert not is_valid_placement(board, 0, 8, 5)   # row
    assert not is_valid_placement(board, 8, 0, 5)   # column
    assert not is_valid_placement(board, 2, 2, 5)   # box
    assert is_valid_placement(board, 4, 4, 5)
    assert is_valid_placement(board, 0, 8, 6)


def test_own_cell_value_is_ignored(solution):
    board = list(solution)
    assert is_valid_placement(board, 0, 0, solution[0])


def test_repeated_calls_are_deterministic(solution):
    board = list(solution)
    board[10] = 0
    first = [is_valid_placement(board, 1, 1, d) for d in range(1, 10)]
    second = [is_valid_placement(board, 1, 1, d) for d in range(1, 10)]
    assert first == second
    assert first.count(True) == 1
    assert board[10] == 0


def test_cage_rejects_repeated_digit():
    digits = {0: 5, 1: 3, 3: 8, 4: 1}
    cage = Cage(tuple(digits), sum(digits.values()))
    assert cage.total == 17
    assert cage.to_dict()["sum"] == 17
    cages = [cage]
    board = [0] * 81
    board[0] = 3
    assert not is_valid_placement(board, 0, 1, 3, cages)


def test_cage_only_conflict():
    # 0 = r1c1 and 13 = r2c5 share no row, column or box
    cages = [Cage((0, 13), 9)]
    board = [0] * 81
    board[0] = 5
    assert is_valid_placement(board, 1, 4, 5)
    assert not is_valid_placement(board, 1, 4, 5, cages)


def test_cage_completion_must_hit_target():
    layout = GridConstraints([Cage((0, 13), 9)])
    board = [0] * 81
    board[0] = 5
    assert not is_valid_placement(board, 1, 4, 3, layout)
    assert is_valid_placement(board, 1, 4, 4, layout)


def test_cage_running_sum_may_not_exceed_target():
    layout = GridConstraints([Cage((0, 13, 26), 10)])
    board = [0] * 81
    board[0] = 8
    assert not is_valid_placement(board, 1, 4, 3, layout)
    assert is_valid_placement(board, 1, 4, 1, layout)
