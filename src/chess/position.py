"""
A square on the board, addressed by grid coordinates.

(placed in its own module as multiple other modules need to import it)

Row 0 is the 8th rank (black's back rank), row 7 the 1st rank (white's back rank). Column 0 is the a-file.
"""

from __future__ import annotations

from dataclasses import dataclass

BOARD_SIZE = 8
FILES = "abcdefgh"


@dataclass(frozen=True)
class Position:
    row: int
    col: int

    @classmethod
    def from_algebraic(cls, sq: str) -> Position:
        """Algebraic notation: 'a8' - 'h1' get converted to (0,0) - (7,7)"""
        if len(sq) != 2 or sq[0] not in FILES or not sq[1].isdigit():
            raise ValueError(f"Cannot interpret {sq!r} as a square name.")
        position = cls(row=BOARD_SIZE - int(sq[1]), col=FILES.index(sq[0]))
        if not position.is_within_bounds():
            raise ValueError(f"Square {sq!r} is not on the board.")
        return position

    def to_algebraic(self) -> str:
        return f"{FILES[self.col]}{BOARD_SIZE - self.row}"

    def is_within_bounds(self) -> bool:
        return (0 <= self.row < BOARD_SIZE) and (0 <= self.col < BOARD_SIZE)

    def offset(self, d_row: int, d_col: int) -> Position:
        return Position(self.row + d_row, self.col + d_col)


def all_positions() -> list[Position]:
    """Every square, rank 8 to rank 1, a-file to h-file"""
    return [Position(row, col) for row in range(BOARD_SIZE) for col in range(BOARD_SIZE)]
