import random

import pytest

from gizmos.minesweeper import (
    MINE,
    CellDetails,
    CellStatus,
    Color,
    GameStatus,
    Minesweeper,
    render,
)


def _game(rows, cols, mines, seed=1):
    game = Minesweeper(rows, cols, mines, random.Random(seed))
    game.hover_row = -1
    game.hover_col = -1
    return game


def _mine_position(game):
    return next(
        (r, c)
        for r in range(game.rows)
        for c in range(game.cols)
        if game.grid[r][c].is_mine
    )


def _safe_position(game):
    return next(
        (r, c)
        for r in range(game.rows)
        for c in range(game.cols)
        if not game.grid[r][c].is_mine
    )


def test_mine_count_and_safe_cells():
    game = _game(5, 6, 7)
    mines = sum(cell.is_mine for row in game.grid for cell in row)
    assert mines == 7
    assert game.safe_cells == game.rows * game.cols - 7
    assert game.status is GameStatus.IN_PROGRESS


def test_default_mine_count():
    assert Minesweeper(10, 10, rng=random.Random(0)).mine_count == 10


def test_too_many_mines_rejected():
    with pytest.raises(ValueError):
        Minesweeper(2, 2, 5)


def test_negative_mines_rejected():
    with pytest.raises(ValueError):
        Minesweeper(2, 2, -1)


def test_safe_cell_surrounded_by_mines_counts_them():
    game = _game(2, 2, 3)
    r, c = _safe_position(game)
    assert game.grid[r][c].value == 3


def test_hidden_cell_details():
    game = _game(3, 3, 0)
    assert game.cell_details(1, 1) == CellDetails(" ", Color.WHITE, Color.BLACK)


def test_hovered_cell_details():
    game = _game(3, 3, 0)
    game.hover_row, game.hover_col = 1, 2
    assert game.cell_details(1, 2) == CellDetails(" ", Color.WHITE, Color.DARKGRAY)


def test_right_click_toggles_flag():
    game = _game(3, 3, 0)
    game.click(0, 0, False, True, True)
    assert game.grid[0][0].status is CellStatus.FLAGGED
    assert game.cell_details(0, 0) == CellDetails("#", Color.WHITE, Color.RED)
    game.click(0, 0, False, True, True)
    assert game.grid[0][0].status is CellStatus.HIDDEN


def test_left_click_on_flag_is_ignored():
    game = _game(3, 3, 0)
    game.click(0, 0, False, True, True)
    game.click(0, 0, True, False, True)
    assert game.grid[0][0].status is CellStatus.FLAGGED
    assert game.safe_cells == 9


def test_unreleased_click_is_ignored():
    game = _game(3, 3, 0)
    game.click(1, 1, True, False, False)
    assert game.grid[1][1].status is CellStatus.HIDDEN
    assert game.status is GameStatus.IN_PROGRESS


def test_click_outside_board_is_ignored():
    game = _game(3, 3, 0)
    game.click(-1, 0, True, False, True)
    game.click(3, 0, True, False, True)
    game.click(0, 3, True, False, True)
    assert game.safe_cells == 9
    assert all(cell.status is CellStatus.HIDDEN for row in game.grid for cell in row)


def test_flood_reveals_empty_board_and_wins():
    game = _game(4, 4, 0)
    game.click(2, 2, True, False, True)
    assert all(cell.status is CellStatus.REVEALED for row in game.grid for cell in row)
    assert game.safe_cells == 0
    assert game.status is GameStatus.WON
    assert game.cell_details(0, 0) == CellDetails(" ", Color.WHITE, Color.LIGHTGRAY)


def test_flood_reveals_flagged_cells():
    game = _game(3, 3, 0)
    game.click(0, 0, False, True, True)
    game.click(2, 2, True, False, True)
    assert game.grid[0][0].status is CellStatus.REVEALED
    assert game.status is GameStatus.WON


def test_revealing_numbered_cell():
    game = _game(1, 2, 1)
    r, c = _safe_position(game)
    game.click(r, c, True, False, True)
    assert game.grid[r][c].status is CellStatus.REVEALED
    assert game.cell_details(r, c) == CellDetails("1", Color.BLACK, Color.LIGHTGRAY)
    assert game.status is GameStatus.WON


def test_right_click_on_revealed_cell_does_nothing():
    game = _game(1, 2, 1)
    r, c = _safe_position(game)
    game.click(r, c, True, False, True)
    game.click(r, c, False, True, True)
    assert game.grid[r][c].status is CellStatus.REVEALED


def test_clicking_mine_loses_and_shows_board():
    game = _game(3, 3, 2)
    r, c = _mine_position(game)
    game.click(r, c, True, False, True)
    assert game.status is GameStatus.LOST
    assert game.grid[r][c].value == MINE
    assert game.cell_details(r, c) == CellDetails("X", Color.WHITE, Color.DARKRED)


def test_render_title_and_size():
    game = _game(3, 4, 0)
    lines = render(game).split("\n")
    assert lines[0] == "Minesweeper💥"
    assert len(lines) == game.rows + 3


def test_render_after_win_and_loss():
    won = _game(2, 2, 0)
    won.click(0, 0, True, False, True)
    assert render(won).split("\n")[0] == "Victory!🤩"

    lost = _game(2, 2, 1)
    r, c = _mine_position(lost)
    lost.click(r, c, True, False, True)
    assert render(lost).split("\n")[0] == "Game Lost!😵"
    assert " X " in render(lost)