from __future__ import annotations

import pytest

from flask_api import app
from sudoku_forge.board import board_to_81
from sudoku_forge.solver import count_solutions

from conftest import SOLVED, make_session


@pytest.fixture
def client():
    app.config.update(TESTING=True)
    return app.test_client()


def test_health(client):
    assert client.get("/health").get_json() == {"ok": True}


def test_new_classic_puzzle(client):
    data = client.post("/puzzle", json={"mode": "classic", "difficulty": "easy", "seed": 5}).get_json()
    initial = [int(ch) for ch in data["initial81"]]
    assert count_solutions(initial, 2) == 1
    assert data["cages"] == []
    assert data["session"]["hints_left"] == 5


def test_new_cage_puzzle(client):
    data = client.post("/puzzle", json={"mode": "cage", "difficulty": "expert", "seed": 5}).get_json()
    assert data["initial81"] == "0" * 81
    assert sum(len(c["cells"]) for c in data["cages"]) == 81


def test_validate(client):
    board = "0" + SOLVED[1:]
    ok = client.post("/validate", json={"board": board, "row": 0, "col": 0, "digit": int(SOLVED[0])}).get_json()
    bad = client.post("/validate", json={"board": board, "row": 0, "col": 0, "digit": int(SOLVED[1])}).get_json()
    assert ok["valid"] is True
    assert bad["valid"] is False
    assert ok["violation"]["has_violation"] is False


def test_validate_reports_cage_sum(client):
    cages = [{"cells": [0, 1], "sum": 3}]
    data = client.post("/validate", json={
        "board": SOLVED, "row": 4, "col": 4, "digit": 1, "cages": cages,
    }).get_json()
    assert data["violation"]["type"] == "CAGE_SUM"


def test_unique(client):
    assert client.post("/unique", json={"board": "0" + SOLVED[1:]}).get_json() == {"unique": True}
    assert client.post("/unique", json={"board": "0" * 81}).get_json() == {"unique": False}


def test_hint(client):
    board = SOLVED[:40] + "0" + SOLVED[41:]
    data = client.post("/hint", json={"board": board, "solution": SOLVED, "level": 2}).get_json()
    assert data["reason"] == "naked_single"
    assert data["cell"] == 40
    assert data["digit"] == int(SOLVED[40])
    assert len(data["steps"]) == 3

    hidden = client.post("/hint", json={"board": board, "solution": SOLVED}).get_json()
    assert hidden["digit"] is None


def test_move_round_trip(client, solution):
    session = make_session(solution, [40, 41]).to_dict()
    data = client.post("/move", json={"session": session, "cell": 40, "digit": solution[40]}).get_json()
    assert data["result"]["mistake"] is False
    assert data["session"]["board"][40] == solution[40]

    data = client.post("/move", json={"session": data["session"], "cell": 41, "digit": solution[41] % 9 + 1}).get_json()
    assert data["result"]["mistake"] is True
    assert data["session"]["mistakes"] == 1


def test_move_hint_actions(client, solution):
    session = make_session(solution, [40]).to_dict()
    opened = client.post("/move", json={"session": session, "action": "hint"}).get_json()
    assert opened["hint"]["cell"] == 40
    assert opened["hint"]["level"] == 0

    more = client.post("/move", json={
        "session": opened["session"], "action": "hint_more", "hint_cell": 40, "level": 1,
    }).get_json()
    assert more["hint"]["level"] == 2
    assert more["result"]["state"] == "won"
    assert more["session"]["hints_left"] == 2
    assert board_to_81(more["session"]["board"]) == SOLVED


@pytest.mark.parametrize("path,payload", [
    ("/puzzle", {"mode": "jigsaw"}),
    ("/validate", {"board": "123"}),
    ("/unique", {}),
    ("/hint", {"board": SOLVED}),
    ("/move", {"session": {}, "action": "digit"}),
])
def test_bad_requests(client, path, payload):
    resp = client.post(path, json=payload)
    assert resp.status_code == 400
    assert "error" in resp.get_json()
