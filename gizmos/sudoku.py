"""Sudoku solving and generation of puzzles that have exactly one solution."""

from __future__ import annotations

import random
import sys
from itertools import product
from pathlib import Path
from typing import Iterable, Optional, Sequence, Union

EMPTY = "."
DIGITS = "123456789"

_DECIMAL = frozenset("0123456789")
_ALL_DIGITS = sum(1 << d for d in range(1, 10))
_SEPARATOR = "-" * 25

Board = list[list[str]]


class SudokuError(ValueError):
    """Raised for malformed boards and puzzles without a unique solution."""


def _empty_board() -> Board:
    return [[EMPTY] * 9 for _ in range(9)]


def _copy(board: Iterable[Iterable[str]]) -> Board:
    return [list(row) for row in board]


def _box(row: int, col: int) -> int:
    return (row // 3) * 3 + col // 3


class Sudoku:
    """A 9x9 board of digits and '.' for empty cells."""

    def __init__(
        self,
        board: Optional[Iterable[Iterable[str]]] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.board = _empty_board() if board is None else _copy(board)
        if len(self.board) != 9 or any(len(row) != 9 for row in self.board):
            raise SudokuError("A board must have 9 rows of 9 cells.")
        self._rng = rng if rng is not None else random.Random()

    def _candidates(self, row: int, col: int) -> list[str]:
        used = set(self.board[row])
        used.update(line[col] for line in self.board)
        top, left = (row // 3) * 3, (col // 3) * 3
        used.update(
            self.board[i][j] for i in range(top, top + 3) for j in range(left, left + 3)
        )
        return [digit for digit in DIGITS if digit not in used]

    def _fill(self, position: int = 0) -> bool:
        """Fill the empty cells in random order; leave the board filled on success."""
        while position < 81 and self.board[position // 9][position % 9] != EMPTY:
            position += 1
        if position == 81:
            return True
        row, col = divmod(position, 9)
        candidates = self._candidates(row, col)
        self._rng.shuffle(candidates)
        for digit in candidates:
            self.board[row][col] = digit
            if self._fill(position + 1):
                return True
        self.board[row][col] = EMPTY
        return False

    def _solutions(self, limit: int) -> list[Board]:
        """Return up to ``limit`` completions of the board, leaving it untouched."""
        grid = _copy(self.board)
        rows, cols, boxes = [0] * 9, [0] * 9, [0] * 9
        empties: list[tuple[int, int]] = []
        for row, col in product(range(9), range(9)):
            value = grid[row][col]
            if value == EMPTY:
                empties.append((row, col))
            elif value in DIGITS:
                bit = 1 << int(value)
                rows[row] |= bit
                cols[col] |= bit
                boxes[_box(row, col)] |= bit

        found: list[Board] = []

        def search() -> None:
            best: Optional[tuple[int, int, int]] = None
            best_count = 10
            for row, col in empties:
                if grid[row][col] != EMPTY:
                    continue
                options = _ALL_DIGITS & ~(rows[row] | cols[col] | boxes[_box(row, col)])
                count = options.bit_count()
                if count == 0:
                    return
                if count < best_count:
                    best, best_count = (row, col, options), count
            if best is None:
                found.append(_copy(grid))
                return

            row, col, options = best
            box = _box(row, col)
            for digit in range(1, 10):
                bit = 1 << digit
                if not options & bit:
                    continue
                grid[row][col] = str(digit)
                rows[row] |= bit
                cols[col] |= bit
                boxes[box] |= bit
                search()
                grid[row][col] = EMPTY
                rows[row] &= ~bit
                cols[col] &= ~bit
                boxes[box] &= ~bit
                if len(found) >= limit:
                    return

        search()
        return found

    def solve(self) -> Board:
        """Return the single solution of the board."""
        solutions = self._solutions(2)
        if not solutions:
            raise SudokuError("Invalid Sudoku.")
        if len(solutions) > 1:
            raise SudokuError("Multiple solutions exist.")
        return solutions[0]

    def generate(self) -> Board:
        """Turn the board into a puzzle with a unique solution and return it."""
        if not self._fill():
            raise SudokuError("Invalid Sudoku.")
        cells = list(product(range(9), range(9)))
        self._rng.shuffle(cells)
        while cells:
            row, col = cells.pop()
            removed = self.board[row][col]
            self.board[row][col] = EMPTY
            if len(self._solutions(2)) > 1:
                self.board[row][col] = removed
        return _copy(self.board)


def format_board(board: Iterable[Iterable[str]]) -> str:
    """Return the board drawn with box separators."""
    lines = [_SEPARATOR]
    for i, row in enumerate(board):
        cells = "".join(
            value + (" | " if j % 3 == 2 else " ") for j, value in enumerate(row)
        )
        lines.append("| " + cells)
        if i % 3 == 2:
            lines.append(_SEPARATOR)
    return "\n".join(lines) + "\n"


def parse_board(text: str) -> Board:
    """Read 81 cells of digits or '.'; every other character is ignored."""
    cells = [ch for ch in text if ch in _DECIMAL or ch == EMPTY]
    if len(cells) != 81:
        raise SudokuError("Invalid input.")
    return [cells[start:start + 9] for start in range(0, 81, 9)]


def read_board(path: Union[str, Path]) -> Board:
    """Read a board from a file."""
    return parse_board(Path(path).read_text(encoding="utf-8", errors="replace"))


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Solve the board in a file, or print a new puzzle when no file is given."""
    args = list(sys.argv[1:] if argv is None else argv)
    if len(args) > 1:
        print("Usage: sudoku <filename>")
        return 0
    if not args:
        print(format_board(Sudoku().generate()), end="")
        return 0

    try:
        board = read_board(args[0])
    except OSError:
        print(f"{args[0]}: No such file or directory")
        return 1
    except SudokuError as exc:
        print(f"Error: {exc}")
        return 1

    try:
        solution = Sudoku(board).solve()
    except SudokuError as exc:
        print(f"Error: {exc}")
        return 1
    print(format_board(solution), end="")
    return 0