"""Helpers for implementing Castling rules. Need to be imported by multiple sources"""

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Self

from src.chess.position import BOARD_SIZE, Position
from src.core.shared_types import Color

BACK_RANK_ROW: dict[Color, int] = {Color.WHITE: BOARD_SIZE - 1, Color.BLACK: 0}
KING_START_COL = 4


class CastlingSide(Enum):
    """Values are the columns the rook of that side starts on"""

    QUEEN_SIDE = 0
    KING_SIDE = BOARD_SIZE - 1

    @classmethod
    def from_king_move(cls, from_col: int, to_col: int) -> Self:
        return cls.KING_SIDE if to_col > from_col else cls.QUEEN_SIDE


@dataclass(frozen=True)
class CastlingSquares:
    """
    Store the columns where king/rook start from/end up in by castling. The row is the back rank of the castling color.
    """

    king_from: int
    king_to: int
    rook_from: int
    rook_to: int

    def squares(self, color: Color) -> tuple[Position, Position, Position, Position]:
        row = BACK_RANK_ROW[color]
        return (
            Position(row, self.king_from),
            Position(row, self.king_to),
            Position(row, self.rook_from),
            Position(row, self.rook_to),
        )


# The moves (in classical chess) made when castling: the rook ends up right next to the king, on the side the king came from
CASTLING_RULES: dict[CastlingSide, CastlingSquares] = {
    CastlingSide.KING_SIDE: CastlingSquares(
        king_from=KING_START_COL, king_to=6, rook_from=7, rook_to=5
    ),
    CastlingSide.QUEEN_SIDE: CastlingSquares(
        king_from=KING_START_COL, king_to=2, rook_from=0, rook_to=3
    ),
}


@dataclass
class CastlingRights:
    """
    Which of the castling pieces of one color have moved.
    ----

    Flags are monotonic: once set they stay set (even if the rook moves back to its starting square), until the game is reset.
    NOTE: A captured rook never "moved". That case is handled by checking the rook is still physically there.
    """

    king: bool = False
    rook_left: bool = False
    rook_right: bool = False

    def rook_moved(self, side: CastlingSide) -> bool:
        return self.rook_right if side == CastlingSide.KING_SIDE else self.rook_left


@dataclass
class HasMoved:
    white: CastlingRights = field(default_factory=CastlingRights)
    black: CastlingRights = field(default_factory=CastlingRights)

    def __getitem__(self, color: Color) -> CastlingRights:
        return self.white if color == Color.WHITE else self.black

    def record_king_move(self, color: Color) -> None:
        self[color].king = True

    def record_rook_move(self, color: Color, from_position: Position) -> None:
        """Only a rook leaving its own corner (file a or h on its back rank) revokes a right"""
        if from_position.row != BACK_RANK_ROW[color]:
            return
        if from_position.col == CastlingSide.QUEEN_SIDE.value:
            self[color].rook_left = True
        elif from_position.col == CastlingSide.KING_SIDE.value:
            self[color].rook_right = True

    def to_dict(self) -> dict[str, dict[str, bool]]:
        return {color.value: asdict(self[color]) for color in Color}

    @classmethod
    def from_dict(cls, data: dict[str, dict[str, bool]]) -> Self:
        return cls(
            white=CastlingRights(**data.get(Color.WHITE.value, {})),
            black=CastlingRights(**data.get(Color.BLACK.value, {})),
        )
