"""
Checks for ending the game: checkmate and stalemate.

Both boil down to "does the player to move have any legal move left?". A legal move is one that passes the movement rules
AND does not leave your own king in check.
"""

from typing import Iterator, Optional

from src.chess.board import Board
from src.chess.castling import HasMoved
from src.chess.check import is_in_check, would_be_in_check
from src.chess.moves import get_valid_moves
from src.chess.position import Position
from src.core.shared_types import Color


def _legal_moves(
    color: Color,
    board: Board,
    en_passant_target: Optional[Position],
    has_moved: Optional[HasMoved],
) -> Iterator[tuple[Position, Position]]:
    """Lazily generate the legal moves, so callers that only need the first one can stop early."""
    for from_square in board.locate_color(color):
        for to_square in get_valid_moves(from_square, board, en_passant_target, has_moved):
            if not would_be_in_check(from_square, to_square, board, en_passant_target):
                yield from_square, to_square


def all_legal_moves(
    color: Color,
    board: Board,
    en_passant_target: Optional[Position] = None,
    has_moved: Optional[HasMoved] = None,
) -> list[tuple[Position, Position]]:
    return list(_legal_moves(color, board, en_passant_target, has_moved))


def has_legal_moves(
    color: Color,
    board: Board,
    en_passant_target: Optional[Position] = None,
    has_moved: Optional[HasMoved] = None,
) -> bool:
    return next(_legal_moves(color, board, en_passant_target, has_moved), None) is not None


def is_checkmate(
    color: Color,
    board: Board,
    en_passant_target: Optional[Position] = None,
    has_moved: Optional[HasMoved] = None,
) -> bool:
    """You are in check and there is no way out of it"""
    return is_in_check(color, board) and not has_legal_moves(
        color, board, en_passant_target, has_moved
    )


def is_stalemate(
    color: Color,
    board: Board,
    en_passant_target: Optional[Position] = None,
    has_moved: Optional[HasMoved] = None,
) -> bool:
    """You are NOT in check, but every move you could make would put you in check (or you have no moves at all)"""
    return not is_in_check(color, board) and not has_legal_moves(
        color, board, en_passant_target, has_moved
    )
