import argparse
import logging
import random

from sudoku_forge.board import board_to_81, pretty, row_of, col_of
from sudoku_forge.config import HINT_LEVELS
from sudoku_forge.generator import new_puzzle
from sudoku_forge.hints import describe_hint, find_hint
from sudoku_forge.models import Difficulty, GameMode


def print_cages(cages):
    for n, cage in enumerate(cages, 1):
        cells = ", ".join(f"r{row_of(i)+1}c{col_of(i)+1}" for i in cage.cells)
        print(f"{n:>3}. sum {cage.total:>2}: {cells}")


def main(argv=None):
    p = argparse.ArgumentParser(description="Generate a Sudoku puzzle (classic or cage-sum).")
    p.add_argument("--mode", choices=[m.value for m in GameMode], default=GameMode.CLASSIC.value)
    p.add_argument("--difficulty", choices=[d.value for d in Difficulty], default=Difficulty.EASY.value)
    p.add_argument("--seed", type=int, default=None, help="Seed for reproducible puzzles")
    p.add_argument("--hint", action="store_true", help="Print one next-step hint")
    p.add_argument("--solution", action="store_true", help="Print the solution too")
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = p.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    rng = random.Random(args.seed)
    puzzle = new_puzzle(args.mode, args.difficulty, rng)

    print(f"\nPUZZLE ({puzzle.mode.value}, {puzzle.difficulty.value}, {puzzle.hints} hints):\n")
    print(pretty(puzzle.initial_board))
    print()
    print(board_to_81(puzzle.initial_board))

    if puzzle.cages:
        print("\nCAGES:\n")
        print_cages(puzzle.cages)

    if args.solution:
        print("\nSOLUTION:\n")
        print(pretty(puzzle.solution))

    if args.hint:
        hint = find_hint(puzzle.board, puzzle.solution, puzzle.cages, rng=rng)
        print("\nHINT REPORT")
        print("-" * 60)
        if hint is None:
            print("No hint available.")
        else:
            print(f"Technique: {hint.reason.value}")
            for n, step in enumerate(describe_hint(hint, HINT_LEVELS - 1), 1):
                print(f"{n}. {step}")
        print("-" * 60)
    print()


if __name__ == "__main__":
    main()
