"""
Type definitions used across layers
"""

from enum import StrEnum


class Status(StrEnum):
    IN_PROGRESS = "in progress"
    AWAITING_PROMOTION = "awaiting promotion"
    CHECKMATE = "checkmate"
    STALEMATE = "stalemate"
    TIMEOUT = "timeout"


class Color(StrEnum):
    WHITE = "white"
    BLACK = "black"

    @property
    def opposite(self) -> "Color":
        return Color.BLACK if self == Color.WHITE else Color.WHITE


class PieceType(StrEnum):
    PAWN = "pawn"
    KNIGHT = "knight"
    BISHOP = "bishop"
    ROOK = "rook"
    QUEEN = "queen"
    KING = "king"


class GameOverReason(StrEnum):
    CHECKMATE = "checkmate"
    STALEMATE = "stalemate"
    TIMEOUT = "timeout"


# A finished game is won by one of the colors or drawn
DRAW = "draw"


class GameMode(StrEnum):
    """Who plays the black pieces. The computer always plays black."""

    FRIEND = "friend"
    AI_EASY = "ai-easy"
    AI_MEDIUM = "ai-medium"
    AI_HARD = "ai-hard"

    @property
    def against_computer(self) -> bool:
        return self != GameMode.FRIEND
