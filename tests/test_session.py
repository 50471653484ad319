from __future__ import annotations

import random

from sudoku_forge.models import Cage, GameMode, GameState
from sudoku_forge.session import (
    GameSession, advance_hint, apply_digit, close_hint, new_session, request_hint, resume_hint, toggle_note, undo,
)

from conftest import make_session


def _wrong(solution, i):
    return solution[i] % 9 + 1


def test_given_cells_are_ignored(solution):
    session = make_session(solution, [40])
    result = apply_digit(session, 0, 9)
    assert result.ignored
    assert session.board[0] == solution[0]
    assert session.history == []


def test_wrong_digit_counts_a_mistake(solution):
    session = make_session(solution, [40, 41])
    result = apply_digit(session, 40, _wrong(solution, 40))
    assert result.mistake
    assert session.mistakes == 1
    assert session.board[40] == 0
    assert session.state is GameState.PLAYING


def test_last_allowed_mistake_loses(solution):
    session = make_session(solution, [40, 41], max_mistakes=3)
    session.mistakes = session.max_mistakes - 1
    result = apply_digit(session, 40, _wrong(solution, 40))
    assert result.mistake
    assert result.state is GameState.LOST
    assert session.state is GameState.LOST
    assert apply_digit(session, 40, solution[40]).ignored


def test_correct_digit_clears_related_notes(solution):
    session = make_session(solution, [0, 1, 80])
    d = solution[0]
    session.notes[0] = {d, 9}
    session.notes[1] = {d, 2}
    session.notes[80] = {d}
    result = apply_digit(session, 0, d)
    assert not result.mistake
    assert session.board[0] == d
    assert session.notes[0] == set()
    assert d not in session.notes[1]
    assert 2 in session.notes[1]
    assert session.notes[80] == {d}


def test_completions_are_reported_once(solution):
    session = make_session(solution, [0, 80])
    first = apply_digit(session, 0, solution[0])
    assert (first.completions.row, first.completions.col, first.completions.box) == (0, 0, 0)
    assert first.completions.level == 2
    assert session.state is GameState.PLAYING

    apply_digit(session, 0, 0)
    again = apply_digit(session, 0, solution[0])
    assert not again.completions.any
    assert again.completions.level == 1

    last = apply_digit(session, 80, solution[80])
    assert last.completions.row == 8
    assert last.state is GameState.WON


def test_undo_restores_value_and_notes(solution):
    session = make_session(solution, [40, 41])
    toggle_note(session, 40, 3)
    apply_digit(session, 40, solution[40])
    assert session.notes[40] == set()
    assert undo(session)
    assert session.board[40] == 0
    assert session.notes[40] == {3}
    assert undo(session)
    assert session.notes[40] == set()
    assert not undo(session)


def test_toggle_note(solution):
    session = make_session(solution, [40])
    toggle_note(session, 40, 4)
    toggle_note(session, 40, 7)
    toggle_note(session, 40, 4)
    assert session.notes[40] == {7}
    assert toggle_note(session, 0, 4).ignored


def test_hint_disclosure_spends_credit_only_at_answer(solution):
    session = make_session(solution, [40, 41], hints=2)
    hint = request_hint(session, random.Random(1))
    assert hint is not None
    assert session.hint_level == 0

    assert advance_hint(session) is None
    assert session.hint_level == 1
    assert session.hints_left == 2
    assert session.board[hint.cell] == 0

    result = advance_hint(session)
    assert result is not None
    assert session.hint_level == 2
    assert session.hints_left == 1
    assert session.board[hint.cell] == solution[hint.cell]
    assert hint.cell in session.hint_cells
    assert advance_hint(session) is None


def test_open_hint_is_dropped_once_the_game_is_lost(solution):
    session = make_session(solution, [40, 41], hints=3, max_mistakes=1)
    hint = request_hint(session, random.Random(1))
    assert hint is not None

    apply_digit(session, 40, _wrong(solution, 40))
    assert session.state is GameState.LOST

    assert advance_hint(session) is None
    assert advance_hint(session) is None
    assert session.current_hint is None
    assert session.board[40] == 0
    assert session.board[41] == 0
    assert session.hints_left == 3
    assert not session.hint_cells


def test_advance_hint_needs_a_credit(solution):
    session = make_session(solution, [40], hints=1)
    request_hint(session)
    session.hints_left = 0
    assert advance_hint(session) is None
    assert session.current_hint is None
    assert session.board[40] == 0


def test_no_hint_without_credits(solution):
    session = make_session(solution, [40], hints=0)
    assert request_hint(session) is None


def test_resume_hint_reopens_at_level(solution):
    session = make_session(solution, [40, 41])
    hint = resume_hint(session, 41, 1)
    assert hint.cell == 41
    assert session.hint_level == 1
    advance_hint(session)
    assert session.board[41] == solution[41]
    close_hint(session)
    assert session.current_hint is None


def test_cage_mode_win(solution):
    cage = Cage((0, 1), solution[0] + solution[1])
    session = make_session(solution, [0, 1], mode=GameMode.CAGE, cages=[cage])
    apply_digit(session, 0, solution[0])
    result = apply_digit(session, 1, solution[1])
    assert result.state is GameState.WON


def test_dict_round_trip(solution):
    session = make_session(solution, [40, 41])
    toggle_note(session, 41, 5)
    apply_digit(session, 40, _wrong(solution, 40))
    restored = GameSession.from_dict(session.to_dict())
    assert restored.board == session.board
    assert restored.notes == session.notes
    assert restored.mistakes == 1
    assert restored.history == session.history
    assert restored.state is GameState.PLAYING


def test_new_session_uses_difficulty_table():
    session = new_session(GameMode.CAGE, "medium", random.Random(2))
    assert session.hints_left == 4
    assert session.cages
    assert session.board == session.initial_board
