"""
Check detection: is a square attacked, is a king in check, would a move leave the mover's king in check.

Key idea: instead of asking every enemy piece whether it can reach the square, look outwards FROM the square
along every line a piece could attack it from, and see what we run into first (raycasting).
"""

import logging
from typing import Callable, Optional

from src.chess.board import Board
from src.chess.pieces import Piece
from src.chess.position import Position
from src.core.shared_types import Color, PieceType

logger = logging.getLogger(__name__)

Vector = tuple[int, int]

STRAIGHTS: list[Vector] = [(1, 0), (-1, 0), (0, 1), (0, -1)]
DIAGONALS: list[Vector] = [(1, 1), (1, -1), (-1, 1), (-1, -1)]
KNIGHT_JUMPS: list[Vector] = [
    (2, 1),
    (2, -1),
    (-2, 1),
    (-2, -1),
    (1, 2),
    (1, -2),
    (-1, 2),
    (-1, -2),
]
KING_STEPS: list[Vector] = STRAIGHTS + DIAGONALS

# Rows grow towards white's side of the board: white pawns move to lower rows, black pawns to higher rows
PAWN_DIRECTION: dict[Color, int] = {Color.WHITE: -1, Color.BLACK: 1}


# --- CAPTURING RULES / ATTACKING RULES ---
def raycasting_attack(
    square: Position,
    by_color: Color,
    by_piece_types: tuple[PieceType, ...],
    board: Board,
    directions: list[Vector],
) -> bool:
    """
    Raycasting algorithm for attacks.
    ---

    Is the specified square in the line-of-sight of a piece of the specified color and type(s),
    that is allowed to move along the given directions?

    Walk along every direction until the edge of the board or the first piece. Only that first piece can attack.
    """
    for d_row, d_col in directions:
        target = square.offset(d_row, d_col)
        while target.is_within_bounds():
            piece_found = board.piece(target)
            if piece_found is not None:
                if piece_found.color == by_color and piece_found.type in by_piece_types:
                    return True
                break
            target = target.offset(d_row, d_col)
    return False


def single_step_attack(
    square: Position,
    by_color: Color,
    by_piece_type: PieceType,
    board: Board,
    deltas: list[Vector],
) -> bool:
    """Equivalent of raycasting for pieces that attack a single step along a direction (pawns, knights, kings)."""
    attacker = Piece(by_piece_type, by_color)
    for d_row, d_col in deltas:
        target = square.offset(d_row, d_col)
        if target.is_within_bounds() and board.piece(target) == attacker:
            return True
    return False


def is_attacked_by_pawn(square: Position, by_color: Color, board: Board) -> bool:
    """
    Pawns take diagonally, never straight ahead.
    ----

    NOTE: Pawn moves are not symmetric. To check IF a white pawn attacks your square, look one row further DOWN the grid
    (white pawns move towards row 0), i.e. the vectors are the reverse of the pawn's own capture direction.
    """
    back = -PAWN_DIRECTION[by_color]
    return single_step_attack(
        square, by_color, PieceType.PAWN, board, [(back, 1), (back, -1)]
    )


def is_attacked_by_knight(square: Position, by_color: Color, board: Board) -> bool:
    return single_step_attack(square, by_color, PieceType.KNIGHT, board, KNIGHT_JUMPS)


def is_attacked_along_diagonal(square: Position, by_color: Color, board: Board) -> bool:
    """Bishops and the queen"""
    return raycasting_attack(
        square, by_color, (PieceType.BISHOP, PieceType.QUEEN), board, DIAGONALS
    )


def is_attacked_along_straight(square: Position, by_color: Color, board: Board) -> bool:
    """Rooks and the queen"""
    return raycasting_attack(
        square, by_color, (PieceType.ROOK, PieceType.QUEEN), board, STRAIGHTS
    )


def is_attacked_by_king(square: Position, by_color: Color, board: Board) -> bool:
    return single_step_attack(square, by_color, PieceType.KING, board, KING_STEPS)


# --- STRATEGY PATTERN: ATTACKING RULES ---
IsAttackedFn = Callable[[Position, Color, Board], bool]
ATTACK_RULES: tuple[IsAttackedFn, ...] = (
    is_attacked_by_pawn,
    is_attacked_by_knight,
    is_attacked_along_diagonal,
    is_attacked_along_straight,
    is_attacked_by_king,
)


def is_square_under_attack(square: Position, attacker_color: Color, board: Board) -> bool:
    return any(rule(square, attacker_color, board) for rule in ATTACK_RULES)


def is_in_check(color: Color, board: Board) -> bool:
    """
    Is the king of the given color attacked?

    NOTE: A board without that king should never occur during play. Rather than crashing on a corrupted position,
    report 'not in check'.
    """
    king_square = board.locate_king(color)
    if king_square is None:
        logger.warning("No %s king on the board, reporting 'not in check'", color)
        return False
    return is_square_under_attack(king_square, color.opposite, board)


def would_be_in_check(
    from_square: Position,
    to_square: Position,
    board: Board,
    en_passant_target: Optional[Position] = None,
) -> bool:
    """Return True if the move leaves the mover's own king in check

    plan:
    1. Copy the board
    2. make the candidate move (incl. taking the pawn when capturing en passant)
    3. determine if king is in check on the new board
    """
    piece = board.piece(from_square)
    if piece is None:
        return False

    scratch = board.copy()
    if _is_en_passant_capture(piece, from_square, to_square, board, en_passant_target):
        scratch.remove_piece(Position(from_square.row, to_square.col))
    scratch.move_piece(from_square, to_square)
    return is_in_check(piece.color, scratch)


def _is_en_passant_capture(
    piece: Piece,
    from_square: Position,
    to_square: Position,
    board: Board,
    en_passant_target: Optional[Position],
) -> bool:
    return (
        piece.type == PieceType.PAWN
        and en_passant_target == to_square
        and from_square.col != to_square.col
        and board.is_empty(to_square)
    )
