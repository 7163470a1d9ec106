"""Word search puzzles: a trie-driven solver and a backtracking generator."""

from __future__ import annotations

import math
import random
import string
import sys
from itertools import product
from pathlib import Path
from typing import Iterable, Iterator, Optional, Sequence, Union

EMPTY = "*"

_UNREACHABLE = sys.maxsize
_FAR = 2**31 - 1

_DIRECTIONS: tuple[tuple[int, int], ...] = (
    (-1, -1), (-1, 0), (-1, 1),
    (0, -1), (0, 1),
    (1, -1), (1, 0), (1, 1),
)


class GridError(ValueError):
    """Raised when a puzzle grid is not rectangular."""


class Trie:
    """Prefix tree that also tracks the shortest distance to a word end."""

    def __init__(self, words: Iterable[str] = ()) -> None:
        self.end = False
        self.min_dist = _UNREACHABLE
        self.children: dict[str, Trie] = {}
        for word in words:
            self.insert(word)

    def insert(self, word: str) -> None:
        """Add a word."""
        node = self
        for idx, ch in enumerate(word):
            node.min_dist = min(node.min_dist, len(word) - idx)
            node = node.children.setdefault(ch, Trie())
        node.end = True
        node.min_dist = 0

    def remove(self, word: str) -> bool:
        """Remove a word; return whether it was present."""
        path: list[tuple[Trie, str]] = []
        node = self
        for ch in word:
            child = node.children.get(ch)
            if child is None:
                return False
            path.append((node, ch))
            node = child
        if not node.end:
            return False

        node.end = False
        node.min_dist = node._shortest()
        for parent, ch in reversed(path):
            child = parent.children[ch]
            if not child.end and not child.children:
                del parent.children[ch]
            parent.min_dist = parent._shortest()
        return True

    def _shortest(self) -> int:
        if self.end:
            return 0
        return min((child.min_dist + 1 for child in self.children.values()), default=_UNREACHABLE)

    def __contains__(self, word: object) -> bool:
        if not isinstance(word, str):
            return False
        node: Optional[Trie] = self
        for ch in word:
            node = node.children.get(ch)
            if node is None:
                return False
        return node.end


class WordSearch:
    """A grid of letters together with the list of words hidden in it."""

    def __init__(
        self,
        words: Iterable[str],
        grid: Optional[Iterable[Iterable[str]]] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.words = list(words)
        self.grid = [list(row) for row in grid or ()]
        if any(len(row) != len(self.grid[0]) for row in self.grid):
            raise GridError("Invalid Grid.")
        self._rng = rng if rng is not None else random.Random()

    @property
    def rows(self) -> int:
        return len(self.grid)

    @property
    def cols(self) -> int:
        return len(self.grid[0]) if self.grid else 0

    def _cells(self) -> Iterator[tuple[int, int]]:
        return product(range(self.rows), range(self.cols))

    def _inside(self, x: int, y: int) -> bool:
        return 0 <= x < self.rows and 0 <= y < self.cols

    def _max_dist(self, x: int, y: int, dx: int, dy: int) -> int:
        bx = _FAR if dx == 0 else (0 if dx < 0 else self.rows)
        by = _FAR if dy == 0 else (0 if dy < 0 else self.cols)
        return min(abs(x - bx), abs(y - by)) + 1

    def solve(self) -> set[str]:
        """Find the words in the grid and blank out every cell not used by one."""
        root = Trie(self.words)
        visited: set[tuple[int, int]] = set()
        found: set[str] = set()

        for (i, j), (dx, dy) in product(list(self._cells()), _DIRECTIONS):
            x, y = i, j
            node = root
            path: list[tuple[int, int]] = []
            while self._inside(x, y):
                child = node.children.get(self.grid[x][y])
                if child is None or child.min_dist > self._max_dist(x, y, dx, dy):
                    break
                node = child
                path.append((x, y))
                x += dx
                y += dy
                if node.end:
                    word = "".join(self.grid[p][q] for p, q in path)
                    visited.update(path)
                    found.add(word)
                    root.remove(word)

        for i, j in self._cells():
            if (i, j) not in visited:
                self.grid[i][j] = EMPTY
        return found

    def _candidates(self, word: str) -> list[tuple[int, int, int, int]]:
        """Placements for a word, fewest overlaps first, ties broken at random."""
        scored = []
        for (i, j), (dx, dy) in product(list(self._cells()), _DIRECTIONS):
            if len(word) >= self._max_dist(i, j, dx, dy):
                continue
            overlaps = 0
            for k, ch in enumerate(word):
                existing = self.grid[i + k * dx][j + k * dy]
                if existing != EMPTY:
                    if existing != ch:
                        break
                    overlaps += 1
            else:
                scored.append((overlaps, self._rng.random(), i, j, dx, dy))
        scored.sort(key=lambda c: (c[0], c[1]))
        return [(i, j, dx, dy) for _, _, i, j, dx, dy in scored]

    def _place(self, pending: list[str], limit: int) -> bool:
        if not pending:
            return True
        word = pending.pop()
        for row, col, dx, dy in self._candidates(word)[:limit]:
            cells = [(row + k * dx, col + k * dy) for k in range(len(word))]
            fresh = [(x, y) for (x, y), ch in zip(cells, word) if self.grid[x][y] != ch]
            for (x, y), ch in zip(cells, word):
                self.grid[x][y] = ch
            if self._place(pending, limit):
                return True
            for x, y in fresh:
                self.grid[x][y] = EMPTY
        pending.append(word)
        return False

    def generate(self) -> None:
        """Build a new grid that hides every word, padded with random letters."""
        if not self.words:
            raise ValueError("cannot generate a puzzle without words")
        count = len(self.words)
        average = sum(len(word) for word in self.words) // count
        low = math.ceil(math.sqrt(count * average * 1.05))
        high = math.ceil(math.sqrt(count * average * 1.25))
        rows = self._rng.randint(low, high)
        cols = self._rng.randint(low, high)

        pending = list(self.words)
        while True:
            self.grid = [[EMPTY] * cols for _ in range(rows)]
            if self._rng.randint(0, 1):
                rows += 1
            if self._rng.randint(0, 1):
                cols += 1
            self._rng.shuffle(pending)
            if self._place(pending, 1):
                break

        for i, j in self._cells():
            if self.grid[i][j] == EMPTY:
                self.grid[i][j] = self._rng.choice(string.ascii_uppercase)

    def render(self) -> str:
        """Return the grid as text, each letter followed by a space."""
        return "".join("".join(f"{ch} " for ch in row) + "\n" for row in self.grid)


def read_word_list(path: Union[str, Path]) -> list[str]:
    """Read whitespace-separated words; a missing file gives no words."""
    file = Path(path)
    if not file.is_file():
        return []
    return file.read_text().split()


def read_grid(path: Union[str, Path]) -> list[list[str]]:
    """Read a grid, one row per line, ignoring whitespace within rows."""
    file = Path(path)
    if not file.is_file():
        return []
    lines = file.read_text().split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    grid: list[list[str]] = []
    for line in lines:
        row = [ch for ch in line if not ch.isspace()]
        grid.append(row)
        if len(row) != len(grid[0]):
            raise GridError("Invalid Grid.")
    return grid


_USAGE = (
    "Usage:\n"
    "  1. Generate word search puzzle:\n"
    "     wordsearch <wordlist>\n\n"
    "  2. Solve word search puzzle:\n"
    "     wordsearch <wordlist> <grid>"
)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Generate a puzzle from a word list, or solve a given grid."""
    args = list(sys.argv[1:] if argv is None else argv)
    if len(args) == 1:
        puzzle = WordSearch(read_word_list(args[0]))
        try:
            puzzle.generate()
        except ValueError as exc:
            print(f"Error: {exc}.")
            return 1
        print(puzzle.render(), end="")
        return 0
    if len(args) == 2:
        words = read_word_list(args[0])
        try:
            puzzle = WordSearch(words, read_grid(args[1]))
        except GridError:
            print("Error: Invalid Grid.")
            return 1
        found = puzzle.solve()
        print(f"{len(found)}F, {len(words) - len(found)}NF\n")
        print(puzzle.render(), end="")
        return 0
    print(_USAGE)
    return 0