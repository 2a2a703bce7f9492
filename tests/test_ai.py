"""Tests for the minimax search engine."""

import pytest

from tictactoe.ai import UNLIMITED_DEPTH, SearchEngine, pair_shortcut
from tictactoe.game import O, X, Board


def test_engine_blocks_immediate_horizontal_win():
    board = Board(["x", "x", "", "", "", "", "", "", ""])
    chosen = []

    engine = SearchEngine()
    move = engine.best_move(board, False, chosen.append)

    assert move == 2
    assert chosen == [2]


def test_engine_completes_its_own_line():
    board = Board(["x", "x", "", "", "o", "", "", "", ""])
    assert SearchEngine().best_move(board, True) == 2


def test_root_board_is_not_mutated():
    board = Board(["x", "", "", "", "o", "", "", "", ""])
    before = list(board.cells)
    SearchEngine().best_move(board, True)
    assert board.cells == before


def test_empty_board_search_is_deterministic():
    calls = []
    engine = SearchEngine(max_depth=UNLIMITED_DEPTH)

    first = engine.best_move(Board(), True, calls.append)
    second = engine.best_move(Board(), True, calls.append)

    assert first in range(9)
    assert first == second
    assert calls == [first, second]


def _perfect_value(board, maximizing):
    """Plain minimax over the whole tree: 1 for x, -1 for o, 0 for a draw."""
    winner = board.terminal_state().winner
    if winner:
        return 1 if winner == X else -1
    if board.is_full():
        return 0
    values = []
    for index in board.available_moves():
        child = board.clone()
        child.insert(X if maximizing else O, index)
        values.append(_perfect_value(child, not maximizing))
    return max(values) if maximizing else min(values)


def test_opening_move_does_not_lose():
    board = Board()
    move = SearchEngine().best_move(board, True)

    assert board.insert(X, move)
    assert _perfect_value(board, False) == 0


def test_root_shortcut_may_name_an_occupied_cell():
    # x holds 0 and 1 but o already blocked at 2; the table still answers 2.
    board = Board(["x", "x", "o", "x", "o", "", "", "", ""])
    chosen = []

    move = SearchEngine().best_move(board, False, chosen.append)

    assert move == 2
    assert chosen == [2]
    assert move not in board.available_moves()


def test_ties_resolve_to_lowest_index():
    # At depth 1 every opening is a neutral leaf.
    outcome = SearchEngine(max_depth=1).search(Board(), True)
    assert outcome.score == 0
    assert outcome.candidates == {0: list(range(9))}
    assert outcome.move == 0


def test_chosen_move_is_first_recorded_for_best_value():
    outcome = SearchEngine().search(Board(["", "", "", "", "x", "", "", "", ""]), False)
    tied = outcome.candidates[outcome.score]
    assert outcome.move == tied[0] == min(tied)


@pytest.mark.parametrize(
    "cells, maximizing",
    [
        ([""] * 9, True),
        (["", "", "", "", "x", "", "", "", ""], False),
        (["x", "", "", "", "o", "", "", "", ""], True),
        (["", "x", "", "", "o", "", "", "", ""], True),
        (["x", "", "", "", "", "", "", "", "o"], True),
    ],
)
@pytest.mark.parametrize("max_depth", [UNLIMITED_DEPTH, 1, 2, 3, 4])
def test_pruning_never_changes_the_chosen_move(cells, maximizing, max_depth):
    pruned = SearchEngine(max_depth=max_depth).search(Board(cells), maximizing)
    full = SearchEngine(max_depth=max_depth, pruning=False).search(
        Board(cells), maximizing
    )

    assert pruned.move == full.move
    assert pruned.score == full.score
    assert pruned.nodes <= full.nodes


def test_pair_shortcut_uses_fixed_cell_table():
    assert pair_shortcut(Board()) is None
    assert pair_shortcut(Board(["x", "", "", "", "o", "", "", "", ""])) is None
    assert pair_shortcut(Board(["", "x", "", "", "", "", "", "x", ""])) == 4
    assert pair_shortcut(Board(["o", "", "", "", "o", "", "", "", ""])) == 8
    assert pair_shortcut(Board(["", "x", "x", "", "", "", "", "", ""])) == 0


def test_interior_node_returns_shortcut_index():
    board = Board(["x", "x", "", "", "o", "", "", "", ""])
    assert SearchEngine().best_move(board, False, depth=1) == 2


def test_interior_node_scores_terminal_positions_by_depth():
    engine = SearchEngine()
    x_wins = Board(["x", "x", "x", "o", "o", "", "", "", ""])
    o_wins = Board(["x", "x", "", "o", "o", "o", "x", "", ""])
    draw = Board(["x", "o", "x", "x", "o", "o", "o", "x", "x"])

    assert engine.best_move(x_wins, False, depth=3) == 97
    assert engine.best_move(o_wins, True, depth=2) == -98
    assert engine.best_move(draw, True, depth=4) == 0


def test_depth_limit_is_neutral_leaf():
    board = Board(["x", "", "", "", "o", "", "", "", ""])
    assert SearchEngine(max_depth=2).best_move(board, True, depth=2) == 0


def test_non_board_argument_is_rejected():
    engine = SearchEngine()
    with pytest.raises(TypeError):
        engine.best_move(["", "", "", "", "", "", "", "", ""], True)
    with pytest.raises(TypeError):
        engine.search(None)


@pytest.mark.parametrize(
    "cells, expected",
    [
        (["x", "x", "x", "o", "o", "", "", "", ""], 100),
        (["x", "x", "", "o", "o", "o", "x", "", ""], -100),
        (["x", "o", "x", "x", "o", "o", "o", "x", "x"], 0),
    ],
)
def test_finished_board_returns_its_score(cells, expected):
    calls = []
    engine = SearchEngine()

    assert engine.best_move(Board(cells), False, calls.append) == expected
    assert calls == []

    outcome = engine.search(Board(cells), False)
    assert outcome.move is None
    assert outcome.score == expected


def test_zero_depth_limit_scores_the_root():
    calls = []
    engine = SearchEngine(max_depth=0)

    assert engine.best_move(Board(), True, calls.append) == 0
    assert calls == []


@pytest.mark.parametrize("max_depth", [-2, -5])
def test_invalid_depth_is_rejected(max_depth):
    with pytest.raises(ValueError):
        SearchEngine(max_depth=max_depth)
