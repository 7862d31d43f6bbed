"""
Apply an (already validated) move to a board.

The executor only moves pieces around. All bookkeeping (score, captured pieces, castling rights, en passant square,
move history, turn switch) is done by the caller.
"""

from dataclasses import dataclass
from typing import Optional

from src.chess.board import Board
from src.chess.castling import CASTLING_RULES, CastlingSide
from src.chess.check import PAWN_DIRECTION
from src.chess.pieces import Piece
from src.chess.position import Position
from src.core.shared_types import PieceType


@dataclass
class MoveResult:
    board: Board
    captured_piece: Optional[Piece] = None
    is_castling: bool = False
    is_en_passant: bool = False


def execute_move(
    from_square: Position,
    to_square: Position,
    board: Board,
    en_passant_target: Optional[Position] = None,
    is_castling: bool = False,
    promotion: Optional[PieceType] = None,
) -> MoveResult:
    """
    Move the piece on `from_square` to `to_square` on a COPY of the board.
    ----

    * ordinary capture: whatever stood on the destination is reported before it gets overwritten.
    * en passant: the pawn that just passed (standing behind the destination, seen from the mover) gets removed.
    * castling: the rook jumps over the king and ends up right next to it.
    * promotion: the pawn is replaced by a piece of the chosen type (only when a choice is supplied).
    """
    new_board = board.copy()
    piece = new_board.piece(from_square)
    if piece is None:
        raise ValueError(f"No piece to move on {from_square.to_algebraic()}.")

    captured_piece = new_board.piece(to_square)
    is_en_passant = (
        piece.type == PieceType.PAWN
        and en_passant_target is not None
        and to_square == en_passant_target
        and from_square.col != to_square.col
        and captured_piece is None
    )
    if is_en_passant:
        # the captured pawn sits one row "behind" the target square
        captured_piece = new_board.remove_piece(
            to_square.offset(-PAWN_DIRECTION[piece.color], 0)
        )

    new_board.move_piece(from_square, to_square)

    if is_castling:
        side = CastlingSide.from_king_move(from_square.col, to_square.col)
        rules = CASTLING_RULES[side]
        new_board.move_piece(
            Position(from_square.row, rules.rook_from),
            Position(from_square.row, rules.rook_to),
        )

    if promotion is not None and piece.type == PieceType.PAWN:
        new_board.place_piece(piece.promoted_to(promotion), to_square)

    return MoveResult(
        board=new_board,
        captured_piece=captured_piece,
        is_castling=is_castling,
        is_en_passant=is_en_passant,
    )
