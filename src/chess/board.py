"""The Game board: an 8x8 grid of cells, each holding a Piece or nothing"""

from dataclasses import dataclass
from typing import Optional, Self, Sequence

from src.chess.pieces import Piece
from src.chess.position import BOARD_SIZE, Position, all_positions
from src.core.shared_types import Color, PieceType

STARTING_PLACEMENT = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR"
EMPTY_PLACEMENT = "/".join(["8"] * BOARD_SIZE)

Grid = list[list[Optional[Piece]]]


@dataclass
class Board:
    grid: Grid

    @classmethod
    def empty(cls) -> Self:
        return cls([[None] * BOARD_SIZE for _ in range(BOARD_SIZE)])

    @classmethod
    def initial(cls) -> Self:
        return cls.from_fen(STARTING_PLACEMENT)

    @classmethod
    def from_fen(cls, fen_str: str) -> Self:
        """Construct a board using the first part of a FEN string (the part that denotes the piece placement).

        ex. standard starting position:
        rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR
        means:
        * black pieces are on the 8th rank, reading from the a-file: rook on a8, knight on b8, etc.
        * pawns cover 7th rank entirely
        * ranks 6 through 3 have 8 consecutive empty squares
        * rank 2 are the white pawns (capital letters)
        * 1st rank are the white pieces.

        The ranks come in the same order as the rows of the grid (8th rank first), so row index == rank index in the string.
        """
        board = cls.empty()
        for row, fen_one_rank in enumerate(fen_str.split("/")):
            col = 0
            for character in fen_one_rank:
                if character.isdigit():
                    # A number denotes the amount of empty squares after each other
                    col += int(character)
                else:
                    board.grid[row][col] = Piece.from_fen(character)
                    col += 1
        return board

    def to_fen(self) -> str:
        """Ranks are separated by slashes in FEN string."""
        return "/".join(self._row_to_fen(row) for row in self.grid)

    @staticmethod
    def _row_to_fen(row: Sequence[Optional[Piece]]) -> str:
        """FEN string of a single rank"""
        fen_characters: list[str] = []
        empty_count = 0
        for piece in row:
            if piece is None:
                empty_count += 1
                continue
            if empty_count > 0:
                fen_characters.append(str(empty_count))
                empty_count = 0
            fen_characters.append(piece.to_fen())

        # if the entire rank is empty, then we still place this number in the string
        if empty_count > 0:
            fen_characters.append(str(empty_count))
        return "".join(fen_characters)

    @classmethod
    def from_glyphs(cls, rows: Sequence[Sequence[Optional[str]]]) -> Self:
        """Boundary helper: read a grid of Unicode glyphs (None for an empty cell), as a UI would supply it."""
        return cls(
            [[Piece.from_glyph(cell) if cell else None for cell in row] for row in rows]
        )

    def to_glyphs(self) -> list[list[Optional[str]]]:
        return [[piece.glyph if piece else None for piece in row] for row in self.grid]

    def copy(self) -> Self:
        """Pieces are immutable, so copying the rows is a full copy."""
        return type(self)([list(row) for row in self.grid])

    def piece(self, position: Position) -> Optional[Piece]:
        return self.grid[position.row][position.col]

    def is_empty(self, position: Position) -> bool:
        return self.piece(position) is None

    def place_piece(self, piece: Piece, position: Position) -> None:
        self.grid[position.row][position.col] = piece

    def remove_piece(self, position: Position) -> Optional[Piece]:
        piece = self.piece(position)
        self.grid[position.row][position.col] = None
        return piece

    def move_piece(self, from_position: Position, to_position: Position) -> None:
        """Write the piece into its new cell and clear the old one (whatever stood on the target is overwritten)"""
        self.grid[to_position.row][to_position.col] = self.remove_piece(from_position)

    def locate_color(self, color: Color) -> list[Position]:
        return [
            position
            for position in all_positions()
            if (piece := self.piece(position)) is not None and piece.color == color
        ]

    def locate_king(self, color: Color) -> Optional[Position]:
        king = Piece(PieceType.KING, color)
        return next(
            (position for position in all_positions() if self.piece(position) == king),
            None,
        )
