"""Minesweeper game state: mine layout, clicks, flood reveal and text rendering."""

from __future__ import annotations

import enum
import random
from collections import deque
from dataclasses import dataclass
from itertools import product
from typing import NamedTuple, Optional

MINE = -1
EMPTY = 0

_NEIGHBOURS = (
    (-1, -1), (-1, 0), (-1, 1),
    (0, -1), (0, 1),
    (1, -1), (1, 0), (1, 1),
)


class CellStatus(enum.Enum):
    HIDDEN = enum.auto()
    FLAGGED = enum.auto()
    REVEALED = enum.auto()


class Color(enum.Enum):
    RED = enum.auto()
    WHITE = enum.auto()
    GREEN = enum.auto()
    LIGHTGRAY = enum.auto()
    BLACK = enum.auto()
    DARKRED = enum.auto()
    DARKGRAY = enum.auto()


class GameStatus(enum.Enum):
    IN_PROGRESS = enum.auto()
    WON = enum.auto()
    LOST = enum.auto()


@dataclass
class Cell:
    """A mine (-1) or the number of neighbouring mines, and its visibility."""

    value: int
    status: CellStatus = CellStatus.HIDDEN

    @property
    def is_mine(self) -> bool:
        return self.value == MINE


class CellDetails(NamedTuple):
    text: str
    foreground: Color
    background: Color


class Minesweeper:
    """A board with randomly placed mines."""

    def __init__(
        self,
        rows: int,
        cols: int,
        mines: Optional[int] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        if rows < 1 or cols < 1:
            raise ValueError("the board needs at least one row and one column")
        count = (rows * cols) // 10 if mines is None else mines
        if not 0 <= count <= rows * cols:
            raise ValueError("the number of mines must fit on the board")
        rng = rng if rng is not None else random.Random()

        cells = list(product(range(rows), range(cols)))
        rng.shuffle(cells)
        mined = set(cells[:count])

        self.rows = rows
        self.cols = cols
        self.mine_count = count
        self.safe_cells = rows * cols - count
        self.hover_row = 0
        self.hover_col = 0
        self.status = GameStatus.IN_PROGRESS
        self.grid = [
            [
                Cell(
                    MINE
                    if (r, c) in mined
                    else sum((r + dr, c + dc) in mined for dr, dc in _NEIGHBOURS)
                )
                for c in range(cols)
            ]
            for r in range(rows)
        ]

    def _inside(self, row: int, col: int) -> bool:
        return 0 <= row < self.rows and 0 <= col < self.cols

    def cell_details(self, row: int, col: int) -> CellDetails:
        """Return the text and colours a cell is drawn with."""
        cell = self.grid[row][col]
        text, foreground, background = " ", Color.WHITE, Color.BLACK

        if cell.status is CellStatus.REVEALED or self.status is not GameStatus.IN_PROGRESS:
            if cell.is_mine:
                text, background = "X", Color.DARKRED
            elif cell.value != EMPTY:
                text, foreground, background = str(cell.value), Color.BLACK, Color.LIGHTGRAY
            else:
                background = Color.LIGHTGRAY
        elif cell.status is CellStatus.FLAGGED:
            text, background = "#", Color.RED

        if row == self.hover_row and col == self.hover_col:
            foreground, background = Color.WHITE, Color.DARKGRAY

        return CellDetails(text, foreground, background)

    def click(self, row: int, col: int, left: bool, right: bool, released: bool) -> None:
        """Apply a mouse click on a cell to the game."""
        if not self._inside(row, col) or not released:
            return
        cell = self.grid[row][col]
        if right and cell.status is not CellStatus.REVEALED:
            cell.status = (
                CellStatus.FLAGGED if cell.status is CellStatus.HIDDEN else CellStatus.HIDDEN
            )
        elif left and cell.status is CellStatus.HIDDEN:
            if cell.is_mine:
                self.status = GameStatus.LOST
            elif cell.value != EMPTY:
                cell.status = CellStatus.REVEALED
                self.safe_cells -= 1
            else:
                self._flood(row, col)

        if self.safe_cells == 0:
            self.status = GameStatus.WON

    def _flood(self, row: int, col: int) -> None:
        """Reveal an empty cell and spread across its empty neighbours."""
        self.grid[row][col].status = CellStatus.REVEALED
        self.safe_cells -= 1
        queue = deque([(row, col)])
        while queue:
            x, y = queue.popleft()
            for dx, dy in _NEIGHBOURS:
                nx, ny = x + dx, y + dy
                if not self._inside(nx, ny):
                    continue
                neighbour = self.grid[nx][ny]
                if neighbour.status is not CellStatus.REVEALED and not neighbour.is_mine:
                    neighbour.status = CellStatus.REVEALED
                    self.safe_cells -= 1
                    if neighbour.value == EMPTY:
                        queue.append((nx, ny))


_TITLES = {
    GameStatus.IN_PROGRESS: "Minesweeper💥",
    GameStatus.WON: "Victory!🤩",
    GameStatus.LOST: "Game Lost!😵",
}

_ANSI = {
    Color.RED: 91,
    Color.WHITE: 97,
    Color.GREEN: 32,
    Color.LIGHTGRAY: 37,
    Color.BLACK: 30,
    Color.DARKRED: 31,
    Color.DARKGRAY: 90,
}


def _paint(details: CellDetails) -> str:
    fg = _ANSI[details.foreground]
    bg = _ANSI[details.background] + 10
    return f"\x1b[{fg};{bg}m {details.text} \x1b[0m"


def render(game: Minesweeper) -> str:
    """Draw the game as coloured terminal text under a status title."""
    width = game.cols * 3
    lines = [_TITLES[game.status], "┌" + "─" * width + "┐"]
    for r in range(game.rows):
        row = "".join(_paint(game.cell_details(r, c)) for c in range(game.cols))
        lines.append("│" + row + "│")
    lines.append("└" + "─" * width + "┘")
    return "\n".join(lines)