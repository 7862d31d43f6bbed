"""Defines the types of chess pieces"""

from dataclasses import dataclass
from typing import Optional, Self

from src.core.shared_types import Color, PieceType

FEN_TO_PIECE: dict[str, PieceType] = {
    "p": PieceType.PAWN,
    "n": PieceType.KNIGHT,
    "b": PieceType.BISHOP,
    "r": PieceType.ROOK,
    "q": PieceType.QUEEN,
    "k": PieceType.KING,
}

PIECE_TO_FEN: dict[PieceType, str] = {value: key for key, value in FEN_TO_PIECE.items()}

# Unicode glyphs are only an I/O concern (rendering / boards supplied as glyph grids)
GLYPHS: dict[tuple[Color, PieceType], str] = {
    (Color.WHITE, PieceType.KING): "♔",
    (Color.WHITE, PieceType.QUEEN): "♕",
    (Color.WHITE, PieceType.ROOK): "♖",
    (Color.WHITE, PieceType.BISHOP): "♗",
    (Color.WHITE, PieceType.KNIGHT): "♘",
    (Color.WHITE, PieceType.PAWN): "♙",
    (Color.BLACK, PieceType.KING): "♚",
    (Color.BLACK, PieceType.QUEEN): "♛",
    (Color.BLACK, PieceType.ROOK): "♜",
    (Color.BLACK, PieceType.BISHOP): "♝",
    (Color.BLACK, PieceType.KNIGHT): "♞",
    (Color.BLACK, PieceType.PAWN): "♟",
}

GLYPH_TO_PIECE: dict[str, tuple[Color, PieceType]] = {
    value: key for key, value in GLYPHS.items()
}


PIECE_POINTS: dict[PieceType, int] = {
    PieceType.PAWN: 1,
    PieceType.KNIGHT: 3,
    PieceType.BISHOP: 3,
    PieceType.ROOK: 5,
    PieceType.QUEEN: 9,
    PieceType.KING: 0,
}

PROMOTION_OPTIONS: tuple[PieceType, ...] = (
    PieceType.QUEEN,
    PieceType.ROOK,
    PieceType.BISHOP,
    PieceType.KNIGHT,
)


@dataclass(frozen=True)
class Piece:
    type: PieceType
    color: Color

    @property
    def points(self) -> int:
        return PIECE_POINTS[self.type]

    @classmethod
    def from_fen(cls, character: str) -> Self:
        # lower case: Black pieces, upper case: White pieces
        if character.lower() not in FEN_TO_PIECE:
            raise ValueError(f"Invalid piece character: {character!r}")
        color = Color.WHITE if character.isupper() else Color.BLACK
        piece_type = FEN_TO_PIECE[character.lower()]
        return cls(piece_type, color)

    def to_fen(self) -> str:
        return (
            PIECE_TO_FEN[self.type].upper()
            if self.color == Color.WHITE
            else PIECE_TO_FEN[self.type].lower()
        )

    @classmethod
    def from_glyph(cls, glyph: str) -> Self:
        if glyph not in GLYPH_TO_PIECE:
            raise ValueError(f"Invalid piece glyph: {glyph!r}")
        color, piece_type = GLYPH_TO_PIECE[glyph]
        return cls(piece_type, color)

    @property
    def glyph(self) -> str:
        return GLYPHS[(self.color, self.type)]

    def promoted_to(self, new_type: PieceType) -> Self:
        """Pieces are immutable: promotion hands back a new piece of the same color"""
        return type(self)(new_type, self.color)


def piece_info(symbol: Optional[str]) -> Optional[Piece]:
    """
    Look up the piece a symbol stands for.
    Understands both FEN letters ('N', 'q') and Unicode glyphs ('♘', '♛'). An empty cell (None / "") has no piece.
    """
    if not symbol:
        return None
    if symbol in GLYPH_TO_PIECE:
        return Piece.from_glyph(symbol)
    return Piece.from_fen(symbol)


def piece_value(piece: Piece | str | None) -> int:
    """Material value of a piece (or a piece symbol). The king and empty squares are worth nothing."""
    if isinstance(piece, str):
        piece = piece_info(piece)
    if piece is None:
        return 0
    return piece.points
