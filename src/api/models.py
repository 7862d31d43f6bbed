"""Requests and Response models"""

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from src.chess.fen import is_valid_fen
from src.chess.position import Position
from src.core.exceptions import InvalidRequestError
from src.core.shared_types import Color, GameMode, PieceType, Status

PieceColor = str
FenPiece = str


def _validate_square_name(value: str) -> str:
    try:
        Position.from_algebraic(value)
    except ValueError as e:
        raise InvalidRequestError(
            f"Cannot interpret {value!r} as a valid square name."
        ) from e
    return value


# --- REQUEST MODELS ---
class CreateGameRequest(BaseModel):
    game_mode: GameMode = GameMode.FRIEND
    starting_fen: Optional[str] = None

    @field_validator("starting_fen")
    @classmethod
    def validate_starting_fen(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value

        value = value.strip()
        if not is_valid_fen(value):
            raise InvalidRequestError(f"Cannot interpret {value!r} as FEN.")
        return value


class GetGameRequest(BaseModel):
    game_id: UUID


class DeleteGameRequest(BaseModel):
    game_id: UUID


class UndoRequest(BaseModel):
    game_id: UUID


class ResetRequest(BaseModel):
    game_id: UUID


class ComputerMoveRequest(BaseModel):
    game_id: UUID


class HintRequest(BaseModel):
    game_id: UUID


class TickRequest(BaseModel):
    game_id: UUID
    seconds: int = Field(default=1, ge=1)


class ValidMovesRequest(BaseModel):
    game_id: UUID
    square: str

    @field_validator("square")
    @classmethod
    def validate_square(cls, value: str) -> str:
        return _validate_square_name(value)


class MoveRequest(BaseModel):
    game_id: UUID
    from_square: str
    to_square: str
    promote_to: Optional[PieceType] = None

    @field_validator(*["from_square", "to_square"])
    @classmethod
    def validate_square(cls, value: str) -> str:
        return _validate_square_name(value)


class PromotionRequest(BaseModel):
    game_id: UUID
    piece_type: PieceType


# --- RESPONSE MODELS ---
class GameResponse(BaseModel):
    game_id: UUID
    fen_state: str
    starting_state: str
    current_player: Color
    status: Status
    winner: Optional[str]
    in_check: bool
    game_mode: GameMode
    move_history: list[str]
    captured_pieces: dict[PieceColor, list[FenPiece]]
    score: dict[PieceColor, int]
    hints_remaining: int
    clock: dict[PieceColor, int]
    pending_promotion: Optional[list[str]] = None


class ValidMovesResponse(BaseModel):
    game_id: UUID
    square: str
    valid_moves: list[str]


class MoveResponse(BaseModel):
    """A rejected move is not an error: `accepted` is False and the game is unchanged"""

    accepted: bool
    game: GameResponse


class HintResponse(BaseModel):
    game_id: UUID
    move: str
    hints_remaining: int
