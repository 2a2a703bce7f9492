"""Core rules for a single 3x3 tic-tac-toe board."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

Mark = str  # "x" or "o"
Direction = str  # "H", "V" or "D"

X: Mark = "x"
O: Mark = "o"
EMPTY = ""

HORIZONTAL: Direction = "H"
VERTICAL: Direction = "V"
DIAGONAL: Direction = "D"

# Checked in this order; the first complete line decides the result.
WINNING_LINES: Tuple[Tuple[Direction, int, Tuple[int, int, int]], ...] = (
    (HORIZONTAL, 1, (0, 1, 2)),
    (HORIZONTAL, 2, (3, 4, 5)),
    (HORIZONTAL, 3, (6, 7, 8)),
    (VERTICAL, 1, (0, 3, 6)),
    (VERTICAL, 2, (1, 4, 7)),
    (VERTICAL, 3, (2, 5, 8)),
    (DIAGONAL, 1, (0, 4, 8)),
    (DIAGONAL, 2, (2, 4, 6)),
)


def other(mark: Mark) -> Mark:
    return O if mark == X else X


# ---------- Terminal result ----------


@dataclass(frozen=True)
class TerminalResult:
    """Outcome of a position: non-terminal, a win along a line, or a draw.

    ``direction`` is one of ``"H"``, ``"V"``, ``"D"`` and ``line`` is the
    1-based index of the winning line within its direction group.
    """

    kind: str = "non_terminal"
    winner: Optional[Mark] = None
    direction: Optional[Direction] = None
    line: Optional[int] = None

    @classmethod
    def win(cls, mark: Mark, direction: Direction, line: int) -> "TerminalResult":
        return cls(kind="win", winner=mark, direction=direction, line=line)

    @classmethod
    def draw(cls) -> "TerminalResult":
        return cls(kind="draw")

    @property
    def is_terminal(self) -> bool:
        return self.kind != "non_terminal"

    @property
    def is_draw(self) -> bool:
        return self.kind == "draw"

    def __bool__(self) -> bool:
        return self.is_terminal

    def to_dict(self) -> Optional[Dict[str, object]]:
        """Shape used by the display layer to draw the winning line."""
        if self.kind == "win":
            return {"winner": self.winner, "direction": self.direction, "row": self.line}
        if self.kind == "draw":
            return {"winner": "draw"}
        return None


NON_TERMINAL = TerminalResult()


# ---------- Board ----------


@dataclass
class Board:
    # "x", "o", or "" for empty, row-major
    cells: List[Mark] = field(default_factory=lambda: [EMPTY] * 9)

    def __post_init__(self) -> None:
        self.cells = list(self.cells)

    def is_empty(self) -> bool:
        return all(not c for c in self.cells)

    def is_full(self) -> bool:
        return all(c for c in self.cells)

    def insert(self, mark: Mark, index: int) -> bool:
        """Place ``mark`` at ``index``; returns False if the cell is taken or
        does not exist, leaving the board untouched."""
        if not 0 <= index <= 8 or self.cells[index]:
            return False
        self.cells[index] = mark
        return True

    def available_moves(self) -> List[int]:
        return [i for i, c in enumerate(self.cells) if not c]

    def terminal_state(self) -> TerminalResult:
        if self.is_empty():
            return NON_TERMINAL

        for direction, line, (a, b, c) in WINNING_LINES:
            v = self.cells[a]
            if v and v == self.cells[b] == self.cells[c]:
                return TerminalResult.win(v, direction, line)

        if self.is_full():
            return TerminalResult.draw()
        return NON_TERMINAL

    @property
    def winner(self) -> Optional[Mark]:
        return self.terminal_state().winner

    def clone(self) -> "Board":
        return Board(cells=self.cells.copy())
