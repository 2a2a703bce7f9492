"""Minimax search with alpha-beta pruning for 3x3 tic-tac-toe."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple

from .game import Board, O, X

logger = logging.getLogger(__name__)

UNLIMITED_DEPTH = -1
WIN_SCORE = 100

# Two matching, non-empty cells on a line short-circuit the node with a fixed
# cell index. Order matters: the first matching pair wins.
PAIR_SHORTCUTS: Tuple[Tuple[int, int, int], ...] = (
    # horizontal
    (0, 1, 2), (1, 2, 0), (0, 2, 1),
    (3, 4, 5), (3, 5, 4), (4, 5, 3),
    (6, 7, 8), (6, 8, 7), (7, 8, 6),
    # vertical
    (0, 3, 6), (0, 6, 3), (3, 6, 0),
    (1, 4, 7), (1, 7, 4), (4, 7, 1),
    (2, 5, 8), (2, 8, 5), (5, 8, 2),
    # diagonal
    (0, 4, 8), (0, 8, 4), (4, 8, 0),
    (2, 4, 6), (2, 6, 4), (4, 6, 2),
)


def pair_shortcut(board: Board) -> Optional[int]:
    """Return the fixed cell index for the first matching pair, if any."""
    cells = board.cells
    for a, b, target in PAIR_SHORTCUTS:
        if cells[a] and cells[a] == cells[b]:
            return target
    return None


@dataclass
class SearchOutcome:
    """Result of one root search.

    ``candidates`` maps each root child value to the moves that produced it,
    in the order they were explored. It is empty when the pair shortcut
    decided the root directly. ``move`` is None when the root was already
    terminal or at the depth limit; ``score`` then holds its leaf value.

    The pair shortcut's index is not checked against the board and may name
    an occupied cell.
    """

    move: Optional[int]
    score: int
    candidates: Dict[int, List[int]] = field(default_factory=dict)
    nodes: int = 0


@dataclass
class _SearchContext:
    candidates: Dict[int, List[int]] = field(default_factory=dict)
    nodes: int = 0


@dataclass
class SearchEngine:
    """Computer player choosing moves by minimax with alpha-beta pruning.

    ``x`` is always the maximizing side and ``o`` the minimizing side.
    ``max_depth`` of ``UNLIMITED_DEPTH`` searches every line to the end.
    """

    max_depth: int = UNLIMITED_DEPTH
    pruning: bool = True

    def __post_init__(self) -> None:
        if self.max_depth < UNLIMITED_DEPTH:
            raise ValueError(
                f"max_depth must be {UNLIMITED_DEPTH} (unlimited) or non-negative, "
                f"got {self.max_depth}"
            )

    # ---- public API ----

    def best_move(
        self,
        board: Board,
        maximizing: bool = True,
        on_done: Optional[Callable[[int], None]] = None,
        alpha: int = -WIN_SCORE,
        beta: int = WIN_SCORE,
        depth: int = 0,
    ) -> int:
        """Pick the move for the side to play.

        At ``depth == 0`` the chosen cell index is passed to ``on_done`` and
        returned. At deeper levels the propagated node value is returned
        instead, as it is at the root when the board is already terminal or
        ``max_depth`` is 0; ``on_done`` is not called then. ``board`` is
        never mutated.
        """
        if not isinstance(board, Board):
            raise TypeError(
                "The first argument to best_move should be an instance of Board, "
                f"got {type(board).__name__}"
            )
        if depth > 0:
            return self._minimax(board, maximizing, alpha, beta, depth, _SearchContext())

        outcome = self.search(board, maximizing, alpha, beta)
        if outcome.move is None:
            return outcome.score
        if on_done is not None:
            on_done(outcome.move)
        return outcome.move

    def search(
        self,
        board: Board,
        maximizing: bool = True,
        alpha: int = -WIN_SCORE,
        beta: int = WIN_SCORE,
    ) -> SearchOutcome:
        if not isinstance(board, Board):
            raise TypeError(
                "search expects an instance of Board, "
                f"got {type(board).__name__}"
            )
        ctx = _SearchContext()
        ctx.nodes += 1

        leaf = self._leaf_score(board, 0)
        if leaf is not None:
            logger.debug("Root position is already scored %d; no move to choose", leaf)
            return SearchOutcome(move=None, score=leaf, nodes=ctx.nodes)

        shortcut = pair_shortcut(board)
        if shortcut is not None:
            outcome = SearchOutcome(move=shortcut, score=shortcut, nodes=ctx.nodes)
        else:
            best = self._expand(board, maximizing, alpha, beta, 0, ctx)
            # Ties resolve to the first move recorded under the best value.
            outcome = SearchOutcome(
                move=ctx.candidates[best][0],
                score=best,
                candidates=ctx.candidates,
                nodes=ctx.nodes,
            )

        logger.debug(
            "%s to move: chose %d (value %d, %d nodes, depth limit %d, pruning %s)",
            X if maximizing else O,
            outcome.move,
            outcome.score,
            outcome.nodes,
            self.max_depth,
            self.pruning,
        )
        return outcome

    # ---- core search ----

    def _leaf_score(self, board: Board, depth: int) -> Optional[int]:
        """Score for a terminal or depth-limited node, None if it must be searched."""
        result = board.terminal_state()
        if not result and depth != self.max_depth:
            return None
        if result.winner == X:
            return WIN_SCORE - depth
        if result.winner == O:
            return -WIN_SCORE + depth
        # No static evaluation: depth-limited leaves are neutral.
        return 0

    def _minimax(
        self,
        board: Board,
        maximizing: bool,
        alpha: int,
        beta: int,
        depth: int,
        ctx: _SearchContext,
    ) -> int:
        ctx.nodes += 1

        score = self._leaf_score(board, depth)
        if score is not None:
            return score

        # The cell index stands in for the node value here.
        shortcut = pair_shortcut(board)
        if shortcut is not None:
            return shortcut

        return self._expand(board, maximizing, alpha, beta, depth, ctx)

    def _expand(
        self,
        board: Board,
        maximizing: bool,
        alpha: int,
        beta: int,
        depth: int,
        ctx: _SearchContext,
    ) -> int:
        mark = X if maximizing else O
        best = -WIN_SCORE if maximizing else WIN_SCORE

        for index in board.available_moves():
            child = board.clone()
            child.insert(mark, index)
            value = self._minimax(child, not maximizing, alpha, beta, depth + 1, ctx)

            if maximizing:
                best = max(best, value)
                alpha = max(alpha, best)
            else:
                best = min(best, value)
                beta = min(beta, best)

            if depth == 0:
                ctx.candidates.setdefault(value, []).append(index)

            if self.pruning and alpha >= beta:
                break

        return best
