"""
Move history and the state it rebuilds.

The history is append-only. Undo does not try to reverse a move: it drops the last record and replays everything that is
left from the starting position, using the exact same bookkeeping as live play (`apply_move`).
"""

import time
from dataclasses import dataclass, field
from typing import Iterable, Optional, Self

from src.chess.board import Board
from src.chess.castling import HasMoved
from src.chess.check import PAWN_DIRECTION
from src.chess.executor import execute_move
from src.chess.fen import STARTING_FEN, FENState, board_to_fen
from src.chess.moves import is_castling_attempt
from src.chess.pieces import FEN_TO_PIECE, PIECE_TO_FEN, Piece
from src.chess.position import Position
from src.core.exceptions import IllegalMoveError
from src.core.models import MoveModel
from src.core.shared_types import Color, PieceType


def move_notation(from_square: Position, to_square: Position) -> str:
    """ex. 'e2-e4'"""
    return f"{from_square.to_algebraic()}-{to_square.to_algebraic()}"


@dataclass(frozen=True)
class MoveRecord:
    from_square: Position
    to_square: Position
    piece: Piece
    notation: str
    timestamp: float
    captured_piece: Optional[Piece] = None
    promotion: Optional[PieceType] = None

    def to_model(self) -> MoveModel:
        return MoveModel(
            from_square=self.from_square.to_algebraic(),
            to_square=self.to_square.to_algebraic(),
            piece=self.piece.to_fen(),
            notation=self.notation,
            timestamp=self.timestamp,
            captured_piece=self.captured_piece.to_fen() if self.captured_piece else None,
            promotion=PIECE_TO_FEN[self.promotion] if self.promotion else None,
        )

    @classmethod
    def from_model(cls, model: MoveModel) -> Self:
        return cls(
            from_square=Position.from_algebraic(model.from_square),
            to_square=Position.from_algebraic(model.to_square),
            piece=Piece.from_fen(model.piece),
            notation=model.notation,
            timestamp=model.timestamp,
            captured_piece=Piece.from_fen(model.captured_piece) if model.captured_piece else None,
            promotion=FEN_TO_PIECE[model.promotion.lower()] if model.promotion else None,
        )


def _empty_captures() -> dict[Color, list[Piece]]:
    return {color: [] for color in Color}


def _zero_score() -> dict[Color, int]:
    return {color: 0 for color in Color}


@dataclass
class GameState:
    """
    Everything that changes from move to move.
    ----

    * captured_pieces / score are keyed by the color that did the capturing.
    * en_passant_target is only set right after a pawn double step (the square it skipped).
    """

    board: Board
    current_player: Color = Color.WHITE
    has_moved: HasMoved = field(default_factory=HasMoved)
    en_passant_target: Optional[Position] = None
    captured_pieces: dict[Color, list[Piece]] = field(default_factory=_empty_captures)
    score: dict[Color, int] = field(default_factory=_zero_score)
    history: list[MoveRecord] = field(default_factory=list)

    @classmethod
    def from_fen(cls, fen: str = STARTING_FEN) -> Self:
        fen_state = FENState.from_fen(fen)
        return cls(
            board=fen_state.board,
            current_player=fen_state.color_to_move,
            has_moved=fen_state.has_moved,
            en_passant_target=fen_state.en_passant_square,
        )

    def to_fen(self) -> str:
        return board_to_fen(
            self.board,
            self.current_player,
            self.has_moved,
            self.en_passant_target,
            self.history,
        )


def apply_move(
    state: GameState,
    from_square: Position,
    to_square: Position,
    promotion: Optional[PieceType] = None,
    timestamp: Optional[float] = None,
) -> MoveRecord:
    """
    Execute the move and do all the bookkeeping. The move must already have been validated.
    ----

    1. execute the move on the board (captures, en passant, castling rook, promotion)
    2. credit the capture to the mover (captured list + score)
    3. revoke castling rights when the king or a rook leaves its square
    4. set/clear the en passant target
    5. append the move to the history
    6. hand the turn to the opponent
    """
    piece = state.board.piece(from_square)
    if piece is None:
        raise IllegalMoveError(f"No piece on {from_square.to_algebraic()} to move.")

    result = execute_move(
        from_square,
        to_square,
        state.board,
        state.en_passant_target,
        is_castling=is_castling_attempt(from_square, to_square, state.board),
        promotion=promotion,
    )

    if result.captured_piece is not None:
        state.captured_pieces[piece.color].append(result.captured_piece)
        state.score[piece.color] += result.captured_piece.points

    if piece.type == PieceType.KING:
        state.has_moved.record_king_move(piece.color)
    elif piece.type == PieceType.ROOK:
        state.has_moved.record_rook_move(piece.color, from_square)

    state.en_passant_target = None
    if piece.type == PieceType.PAWN and abs(to_square.row - from_square.row) == 2:
        state.en_passant_target = from_square.offset(PAWN_DIRECTION[piece.color], 0)

    record = MoveRecord(
        from_square=from_square,
        to_square=to_square,
        piece=piece,
        notation=move_notation(from_square, to_square),
        timestamp=time.time() if timestamp is None else timestamp,
        captured_piece=result.captured_piece,
        promotion=promotion,
    )
    state.history.append(record)
    state.board = result.board
    state.current_player = piece.color.opposite
    return record


def replay(records: Iterable[MoveRecord], starting_fen: str = STARTING_FEN) -> GameState:
    """Rebuild the state by replaying the recorded moves (incl. their promotions) from the starting position"""
    state = GameState.from_fen(starting_fen)
    for record in records:
        apply_move(
            state,
            record.from_square,
            record.to_square,
            promotion=record.promotion,
            timestamp=record.timestamp,
        )
    return state
