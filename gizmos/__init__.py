"""Small tools: a Redis-compatible server, Code 128 barcodes, puzzles, Minesweeper logic and tiny network servers."""

__version__ = "0.1.0"