from __future__ import annotations

import logging
import os
import random

from flask import Flask, request, jsonify
from flask_cors import CORS

from sudoku_forge.board import board_to_81, check_board, check_digit, constraints_for, digit_counts, parse_81
from sudoku_forge.config import HINT_LEVELS
from sudoku_forge.generator import new_puzzle
from sudoku_forge.hints import describe_hint, find_hint
from sudoku_forge.models import Cage
from sudoku_forge.reports import generate_violation_report
from sudoku_forge.session import (
    GameSession, advance_hint, apply_digit, request_hint, resume_hint, toggle_note, undo,
)
from sudoku_forge.solver import has_unique_solution
from sudoku_forge.validator import is_valid_placement

logger = logging.getLogger(__name__)

app = Flask(__name__)
CORS(app)

BAD_REQUEST = (ValueError, KeyError, TypeError)


def _bad_request(e):
    logger.warning("rejected %s: %s", request.path, e)
    return jsonify({"error": str(e)}), 400


def _board(value):
    """Accepts an 81-char string (digits, 0 or '.') or a list of 81 ints."""
    if isinstance(value, str):
        return parse_81(value)
    if not isinstance(value, list):
        raise ValueError("Board must be an 81-char string or a list of 81 ints")
    return check_board([int(v) for v in value])


def _cages(data):
    return [Cage.from_dict(c) for c in (data.get("cages") or [])]


def _hint_json(hint, level):
    if hint is None:
        return {"has_hint": False}
    out = {
        "has_hint": True,
        "cell": hint.cell,
        "row": hint.row,
        "col": hint.col,
        "box": hint.box,
        "reason": hint.reason.value,
        "digit": hint.digit if level >= HINT_LEVELS - 1 else None,
        "candidates": hint.candidates,
        "level": level,
        "steps": describe_hint(hint, level),
    }
    if hint.cage is not None:
        out["cage"] = {
            "sum": hint.cage.total,
            "current_sum": hint.cage.current_sum,
            "remaining_cells": hint.cage.remaining_cells,
            "remaining_sum": hint.cage.remaining_sum,
        }
    return out


def _move_json(result):
    if result is None:
        return None
    return {
        "mistake": result.mistake,
        "ignored": result.ignored,
        "state": result.state.value,
        "completions": {
            "row": result.completions.row,
            "col": result.completions.col,
            "box": result.completions.box,
            "level": result.completions.level,
        },
    }


@app.get("/health")
def health():
    return jsonify({"ok": True})


@app.post("/puzzle")
def puzzle():
    try:
        data = request.get_json(force=True) or {}
        seed = data.get("seed")
        rng = random.Random(seed) if seed is not None else None
        p = new_puzzle(data.get("mode", "classic"), data.get("difficulty", "easy"), rng)
        session = GameSession.from_puzzle(p)
        return jsonify({
            "mode": p.mode.value,
            "difficulty": p.difficulty.value,
            "solution81": board_to_81(p.solution),
            "initial81": board_to_81(p.initial_board),
            "cages": [c.to_dict() for c in p.cages],
            "hints": p.hints,
            "session": session.to_dict(),
        })
    except BAD_REQUEST as e:
        return _bad_request(e)


@app.post("/validate")
def validate():
    try:
        data = request.get_json(force=True) or {}
        board = _board(data["board"])
        row, col = int(data["row"]), int(data["col"])
        if not (0 <= row < 9 and 0 <= col < 9):
            raise ValueError("row and col must be in 0..8")
        digit = check_digit(int(data["digit"]), allow_empty=False)
        cages = _cages(data)
        layout = constraints_for(cages)

        initial = data.get("initial")
        report = generate_violation_report(_board(initial) if initial is not None else None, board, layout)
        return jsonify({
            "valid": is_valid_placement(board, row, col, digit, layout),
            "violation": {
                "has_violation": report.has_violation,
                "type": report.violation_type.value,
                "cells": report.conflict_cells,
                "explanation": report.explanation,
            },
        })
    except BAD_REQUEST as e:
        return _bad_request(e)


@app.post("/unique")
def unique():
    try:
        data = request.get_json(force=True) or {}
        board = _board(data["board"])
        return jsonify({"unique": has_unique_solution(board, _cages(data))})
    except BAD_REQUEST as e:
        return _bad_request(e)


@app.post("/hint")
def hint():
    try:
        data = request.get_json(force=True) or {}
        board = _board(data["board"])
        solution = _board(data["solution"])
        level = min(max(int(data.get("level", 0)), 0), HINT_LEVELS - 1)
        h = find_hint(board, solution, _cages(data))
        return jsonify(_hint_json(h, level))
    except BAD_REQUEST as e:
        return _bad_request(e)


@app.post("/move")
def move():
    """
    Stateless play step: the client posts its session and one action
    ("digit" | "note" | "undo" | "hint" | "hint_more") and receives the
    updated session back.
    """
    try:
        data = request.get_json(force=True) or {}
        session = GameSession.from_dict(data["session"])
        action = data.get("action", "digit")
        result = None
        hint_level = None

        if action == "digit":
            result = apply_digit(session, int(data["cell"]), int(data["digit"]))
        elif action == "note":
            result = toggle_note(session, int(data["cell"]), int(data["digit"]))
        elif action == "undo":
            undo(session)
        elif action == "hint":
            request_hint(session)
            hint_level = session.hint_level
        elif action == "hint_more":
            resume_hint(session, int(data["hint_cell"]), int(data.get("level", 0)))
            result = advance_hint(session)
            hint_level = session.hint_level
        else:
            raise ValueError(f"Unknown action '{action}'")

        payload = {
            "result": _move_json(result),
            "session": session.to_dict(),
            "digit_counts": digit_counts(session.board),
        }
        if hint_level is not None:
            payload["hint"] = _hint_json(session.current_hint, hint_level)
        return jsonify(payload)
    except BAD_REQUEST as e:
        return _bad_request(e)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    app.run(
        host=os.environ.get("SUDOKU_API_HOST", "0.0.0.0"),
        port=int(os.environ.get("SUDOKU_API_PORT", "8000")),
        debug=os.environ.get("SUDOKU_API_DEBUG", "1") not in ("0", "false", "no"),
    )
