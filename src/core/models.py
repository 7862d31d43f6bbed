"""
Contract for the Service layer.

Domain level data model of information representing a Game.
Everything is a plain str/int/bool/list/dict so the record can be stored as is (JSON columns) and restored later.
"""

from dataclasses import dataclass, field
from typing import Optional

# Type aliases to make GameModel easier to read
PieceColor = str
FenPiece = str


@dataclass
class MoveModel:
    """One entry of the move history."""

    from_square: str
    to_square: str
    piece: FenPiece
    notation: str
    timestamp: float
    captured_piece: Optional[FenPiece] = None
    promotion: Optional[str] = None


@dataclass
class GameModel:
    """Complete snapshot of a game: enough to resume play with the exact same set of legal moves."""

    starting_fen: str
    current_fen: str
    moves: list[MoveModel]
    has_moved: dict[PieceColor, dict[str, bool]]
    captured_pieces: dict[PieceColor, list[FenPiece]]
    score: dict[PieceColor, int]
    status: str
    game_mode: str = "friend"
    hints_remaining: int = 3
    clock: dict[PieceColor, int] = field(default_factory=dict)
    winner: Optional[str] = None
    pending_promotion: Optional[list[str]] = None
