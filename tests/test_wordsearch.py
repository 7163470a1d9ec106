import random

import pytest

from gizmos.wordsearch import (
    GridError,
    Trie,
    WordSearch,
    main,
    read_grid,
    read_word_list,
)


def test_trie_insert_and_membership():
    trie = Trie(["CAT", "CATS"])
    assert "CAT" in trie
    assert "CATS" in trie
    assert "CA" not in trie


def test_trie_remove_reports_presence():
    trie = Trie(["CAT"])
    assert trie.remove("DOG") is False
    assert trie.remove("CA") is False
    assert trie.remove("CAT") is True
    assert trie.remove("CAT") is False
    assert "CAT" not in trie


def test_trie_remove_prefix_keeps_longer_word():
    trie = Trie(["AB", "ABCD"])
    assert trie.min_dist == len("AB")
    assert trie.remove("AB")
    assert "ABCD" in trie
    assert "AB" not in trie
    assert trie.min_dist == len("ABCD")


def test_trie_remove_prunes_branch():
    trie = Trie(["XY"])
    trie.remove("XY")
    assert trie.children == {}


def test_solve_finds_words_and_blanks_rest():
    puzzle = WordSearch(["CAT", "TOW", "DOG"], ["CAT", "ZQO", "ZZW"])
    found = puzzle.solve()
    assert found == {"CAT", "TOW"}
    assert puzzle.grid == [["C", "A", "T"], ["*", "*", "O"], ["*", "*", "W"]]


def test_solve_reads_backwards():
    puzzle = WordSearch(["TAC"], ["CAT"])
    assert puzzle.solve() == {"TAC"}
    assert puzzle.grid == [["C", "A", "T"]]


def test_solve_marks_first_occurrence_only():
    puzzle = WordSearch(["AB"], ["ABXAB"])
    assert puzzle.solve() == {"AB"}
    assert puzzle.grid == [["A", "B", "*", "*", "*"]]


def test_ragged_grid_rejected():
    with pytest.raises(GridError):
        WordSearch(["A"], ["AB", "C"])


def test_render_format():
    puzzle = WordSearch([], [["A", "B"], ["C", "D"]])
    assert puzzle.render() == "A B \nC D \n"


@pytest.mark.parametrize("seed", [0, 1, 7])
def test_generate_hides_every_word(seed):
    words = ["CAT", "DOG", "BIRD", "FISH", "HORSE"]
    puzzle = WordSearch(words, rng=random.Random(seed))
    puzzle.generate()
    grid = puzzle.grid
    assert grid
    assert all(len(row) == len(grid[0]) for row in grid)
    assert all(ch.isupper() and ch.isalpha() for row in grid for ch in row)

    solver = WordSearch(words, grid)
    assert solver.solve() == set(words)


def test_generate_without_words_fails():
    with pytest.raises(ValueError):
        WordSearch([]).generate()


def test_read_word_list(tmp_path):
    path = tmp_path / "words.txt"
    path.write_text("CAT dog\nTOW\n")
    assert read_word_list(path) == ["CAT", "dog", "TOW"]
    assert read_word_list(tmp_path / "missing.txt") == []


def test_read_grid(tmp_path):
    path = tmp_path / "grid.txt"
    path.write_text("A B C\nD E F\n")
    assert read_grid(path) == [["A", "B", "C"], ["D", "E", "F"]]
    assert read_grid(tmp_path / "missing.txt") == []


def test_read_grid_uneven(tmp_path):
    path = tmp_path / "grid.txt"
    path.write_text("ABC\nDE\n")
    with pytest.raises(GridError):
        read_grid(path)


def test_main_solve(tmp_path, capsys):
    words = tmp_path / "words.txt"
    words.write_text("CAT TOW DOG\n")
    grid = tmp_path / "grid.txt"
    grid.write_text("CAT\nZQO\nZZW\n")
    assert main([str(words), str(grid)]) == 0
    out = capsys.readouterr().out
    assert out.startswith("2F, 1NF\n\n")
    assert out.endswith("C A T \n* * O \n* * W \n")


def test_main_invalid_grid(tmp_path, capsys):
    words = tmp_path / "words.txt"
    words.write_text("CAT\n")
    grid = tmp_path / "grid.txt"
    grid.write_text("CAT\nZ\n")
    assert main([str(words), str(grid)]) == 1
    assert "Error: Invalid Grid." in capsys.readouterr().out


def test_main_generate(tmp_path, capsys):
    words = tmp_path / "words.txt"
    words.write_text("CAT DOG\n")
    assert main([str(words)]) == 0
    lines = capsys.readouterr().out.splitlines()
    grid = [line.split() for line in lines]
    assert WordSearch(["CAT", "DOG"], grid).solve() == {"CAT", "DOG"}


def test_main_usage(capsys):
    assert main([]) == 0
    assert "Usage" in capsys.readouterr().out