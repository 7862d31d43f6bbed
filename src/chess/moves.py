"""
Geometry/Base movement rules

Key idea: Use strategy pattern to define the movement rule for each piece type.

A move passing these rules can still be illegal: whether it leaves your own king in check is tested separately
(see `would_be_in_check()` in check.py), and only after that a move may be executed.
"""

from dataclasses import dataclass
from typing import Callable, Optional, Self

from src.chess.board import Board
from src.chess.castling import CASTLING_RULES, CastlingSide, HasMoved
from src.chess.check import PAWN_DIRECTION, is_in_check, is_square_under_attack
from src.chess.pieces import FEN_TO_PIECE, PIECE_TO_FEN
from src.chess.position import BOARD_SIZE, Position, all_positions
from src.core.shared_types import Color, PieceType

PAWN_START_ROW: dict[Color, int] = {Color.WHITE: BOARD_SIZE - 2, Color.BLACK: 1}
PROMOTION_ROW: dict[Color, int] = {Color.WHITE: 0, Color.BLACK: BOARD_SIZE - 1}


@dataclass(frozen=True)
class Move:
    """basic definition of a move to be made"""

    from_square: Position
    to_square: Position
    promote_to: Optional[PieceType] = None

    @classmethod
    def from_uci(cls, uci: str) -> Self:
        """
        Universal Chess Interface:
        ---
        One of the standard chess notations for moves, and the way the search engine answers.

        examples:
        * "e2e4": move the piece that was on e2 to e4
        * "e7e8q" : (pawn) moves from e7 to e8 and promotes to a queen (the q)
        * "e1g1": the king castles king side

        Raises ValueError if the string cannot be read as a move.
        """
        if len(uci) not in (4, 5):
            raise ValueError(f"Cannot interpret {uci!r} as a UCI move.")
        from_sq = Position.from_algebraic(uci[:2])
        to_sq = Position.from_algebraic(uci[2:4])
        promote_to = None
        if len(uci) == 5:
            if uci[4].lower() not in FEN_TO_PIECE:
                raise ValueError(f"Invalid promotion piece in {uci!r}.")
            promote_to = FEN_TO_PIECE[uci[4].lower()]
        return cls(from_sq, to_sq, promote_to)

    def to_uci(self) -> str:
        """Convert into UCI notation"""
        piece_char = PIECE_TO_FEN[self.promote_to] if self.promote_to else ""
        return f"{self.from_square.to_algebraic()}{self.to_square.to_algebraic()}{piece_char}"


def parse_best_move(token: Optional[str]) -> Optional[Move]:
    """
    Decode the best move reported by the search engine.
    The engine answers '(none)' (or nothing at all) when there is no move; a malformed answer is treated the same way.
    """
    if not token or token == "(none)":
        return None
    try:
        return Move.from_uci(token)
    except ValueError:
        return None


# --- MOVEMENT RULES ---
def _step(start: int, end: int) -> int:
    return (end > start) - (end < start)


def is_path_clear(from_square: Position, to_square: Position, board: Board) -> bool:
    """Every square strictly in between (along a straight line or diagonal) must be empty"""
    d_row = _step(from_square.row, to_square.row)
    d_col = _step(from_square.col, to_square.col)
    current = from_square.offset(d_row, d_col)
    while current != to_square:
        if not board.is_empty(current):
            return False
        current = current.offset(d_row, d_col)
    return True


def is_valid_pawn_move(
    from_square: Position,
    to_square: Position,
    board: Board,
    en_passant_target: Optional[Position] = None,
) -> bool:
    """
    A pawn:
    - moves by a single square forward, onto an empty square.
    - can move by two in its first move (so when on its starting rank), through two empty squares.
    - takes diagonally: onto an enemy piece, or onto the en passant target square.
    """
    color = board.piece(from_square).color  # type: ignore[union-attr]
    direction = PAWN_DIRECTION[color]
    row_diff = to_square.row - from_square.row
    col_diff = abs(to_square.col - from_square.col)

    # pawn pushes
    if col_diff == 0 and board.is_empty(to_square):
        if row_diff == direction:
            return True
        if (
            from_square.row == PAWN_START_ROW[color]
            and row_diff == 2 * direction
            and board.is_empty(from_square.offset(direction, 0))
        ):
            return True

    # pawns take diagonally
    if col_diff == 1 and row_diff == direction:
        target = board.piece(to_square)
        if target is not None:
            return target.color != color
        if en_passant_target is None or to_square != en_passant_target:
            return False
        # the pawn that just double stepped stands right next to us
        passed_pawn = board.piece(Position(from_square.row, to_square.col))
        return (
            passed_pawn is not None
            and passed_pawn.type == PieceType.PAWN
            and passed_pawn.color != color
        )

    return False


def is_valid_knight_move(
    from_square: Position, to_square: Position, board: Board, en_passant_target: Optional[Position] = None
) -> bool:
    """Knights always move such that (|delta_row|, |delta_col|) is (2, 1) or (1, 2)"""
    deltas = (abs(to_square.row - from_square.row), abs(to_square.col - from_square.col))
    return deltas in {(2, 1), (1, 2)}


def is_valid_rook_move(
    from_square: Position, to_square: Position, board: Board, en_passant_target: Optional[Position] = None
) -> bool:
    """Rooks move either horizontally or vertically"""
    if from_square.row != to_square.row and from_square.col != to_square.col:
        return False
    return is_path_clear(from_square, to_square, board)


def is_valid_bishop_move(
    from_square: Position, to_square: Position, board: Board, en_passant_target: Optional[Position] = None
) -> bool:
    """Bishops move diagonally: |delta_row| = |delta_col|"""
    if abs(to_square.row - from_square.row) != abs(to_square.col - from_square.col):
        return False
    return is_path_clear(from_square, to_square, board)


def is_valid_queen_move(
    from_square: Position, to_square: Position, board: Board, en_passant_target: Optional[Position] = None
) -> bool:
    """
    The Queen combines the rook moves (horizontal + vertical movements) and bishop moves (diagonal movement)
    """
    return is_valid_rook_move(from_square, to_square, board) or is_valid_bishop_move(
        from_square, to_square, board
    )


def is_valid_king_move(
    from_square: Position, to_square: Position, board: Board, en_passant_target: Optional[Position] = None
) -> bool:
    """
    The king can move by a single square at the time.

    Castling is modelled as a special king move (handled separately).
    """
    return (
        abs(to_square.row - from_square.row) <= 1
        and abs(to_square.col - from_square.col) <= 1
    )


# -- STRATEGY PATTERN: MOVEMENT RULES ---
MoveRuleFn = Callable[[Position, Position, Board, Optional[Position]], bool]
MOVEMENT_RULES: dict[PieceType, MoveRuleFn] = {
    PieceType.PAWN: is_valid_pawn_move,
    PieceType.KNIGHT: is_valid_knight_move,
    PieceType.BISHOP: is_valid_bishop_move,
    PieceType.ROOK: is_valid_rook_move,
    PieceType.QUEEN: is_valid_queen_move,
    PieceType.KING: is_valid_king_move,
}


# -- CASTLING MOVES ---
def is_castling_attempt(from_square: Position, to_square: Position, board: Board) -> bool:
    """A king moving two squares along its row"""
    piece = board.piece(from_square)
    return (
        piece is not None
        and piece.type == PieceType.KING
        and from_square.row == to_square.row
        and abs(to_square.col - from_square.col) == 2
    )


def is_valid_castling(
    from_square: Position,
    to_square: Position,
    board: Board,
    has_moved: HasMoved,
    require_safe_passage: bool = True,
) -> bool:
    """
    Is the king allowed to castle with this move?
    ---

    **you are allowed to castle if**

    * The king moves exactly two squares along its back rank, starting from its start square (e1 / e8).
    * Neither the king nor the rook of that side ever moved.
    * That rook is actually still standing in its corner (it could have been captured without ever moving).
    * All squares in between king and rook are empty.
    * (require_safe_passage) You are not in check, and the king does not pass through or land on an attacked square.
    """
    king = board.piece(from_square)
    if king is None or king.type != PieceType.KING:
        return False
    if from_square.row != to_square.row or abs(to_square.col - from_square.col) != 2:
        return False

    rights = has_moved[king.color]
    if rights.king:
        return False

    side = CastlingSide.from_king_move(from_square.col, to_square.col)
    if rights.rook_moved(side):
        return False

    # only from the king's start square on its own back rank (a FEN can put a king with castling rights elsewhere)
    king_from, king_to, rook_square, _ = CASTLING_RULES[side].squares(king.color)
    if (from_square, to_square) != (king_from, king_to):
        return False

    rook = board.piece(rook_square)
    if rook is None or rook.type != PieceType.ROOK or rook.color != king.color:
        return False

    if not is_path_clear(from_square, rook_square, board):
        return False

    if require_safe_passage:
        if is_in_check(king.color, board):
            return False
        direction = _step(from_square.col, to_square.col)
        passage = [from_square.offset(0, direction), to_square]
        if any(is_square_under_attack(sq, king.color.opposite, board) for sq in passage):
            return False

    return True


# -- GENERAL MOVE VALIDATION ---
def is_valid_move(
    from_square: Position,
    to_square: Position,
    board: Board,
    en_passant_target: Optional[Position] = None,
    has_moved: Optional[HasMoved] = None,
) -> bool:
    """
    Can the piece on `from_square` go to `to_square`, according to the movement rules of its type?
    ----

    NOTE: Does NOT test whether the move leaves your own king in check.
    NOTE: A king moving two squares is only accepted as castling, so only when the castling rights (`has_moved`) are supplied.
    """
    piece = board.piece(from_square)
    if piece is None or from_square == to_square:
        return False
    if not to_square.is_within_bounds():
        return False

    # Check if destination has same color piece
    target = board.piece(to_square)
    if target is not None and target.color == piece.color:
        return False

    if is_castling_attempt(from_square, to_square, board):
        return has_moved is not None and is_valid_castling(
            from_square, to_square, board, has_moved
        )

    movement_rule = MOVEMENT_RULES[piece.type]
    return movement_rule(from_square, to_square, board, en_passant_target)


def get_valid_moves(
    from_square: Position,
    board: Board,
    en_passant_target: Optional[Position] = None,
    has_moved: Optional[HasMoved] = None,
) -> list[Position]:
    """Brute force: try all squares on the board. Does not filter out moves leaving you in check."""
    return [
        to_square
        for to_square in all_positions()
        if is_valid_move(from_square, to_square, board, en_passant_target, has_moved)
    ]


def is_promotion_move(from_square: Position, to_square: Position, board: Board) -> bool:
    """check if the move is a pawn move reaching the final rank (seen from the pawn's color)"""
    piece = board.piece(from_square)
    return (
        piece is not None
        and piece.type == PieceType.PAWN
        and to_square.row == PROMOTION_ROW[piece.color]
    )
