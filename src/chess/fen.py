"""
Reading and writing FEN strings, and translating between FEN castling letters and the has-moved flags of a live game.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from itertools import combinations
from typing import TYPE_CHECKING, Callable, Optional, Self, Sequence

from src.chess.board import STARTING_PLACEMENT, Board
from src.chess.castling import CASTLING_RULES, CastlingRights, CastlingSide, HasMoved
from src.chess.pieces import FEN_TO_PIECE, Piece
from src.chess.position import BOARD_SIZE, FILES, Position
from src.core.exceptions import InvalidFENError
from src.core.shared_types import Color, PieceType

if TYPE_CHECKING:
    from src.chess.history import MoveRecord

STARTING_FEN = f"{STARTING_PLACEMENT} w KQkq - 0 1"
COLOR_CODES: dict[str, Color] = {"w": Color.WHITE, "b": Color.BLACK}
COLOR_TO_CODE: dict[Color, str] = {color: code for code, color in COLOR_CODES.items()}
# the pawn that just double stepped belongs to the side NOT to move
EN_PASSANT_RANK: dict[Color, str] = {Color.WHITE: "6", Color.BLACK: "3"}
# ranks 1-8, and the lengths of runs of empty squares in a placement
BOARD_DIGITS = "12345678"

# "-" plus every ordered selection of KQkq: "K", "Q", ..., "KQk", ..., "KQkq"
VALID_CASTLING_ENCODINGS: list[str] = ["-"] + [
    "".join(letters) for count in range(1, 5) for letters in combinations("KQkq", count)
]


class CastlingDirection(Enum):
    """Rights will be revoked during the game. Enum prevents silly typos/ inconsistent naming later in the application."""

    WHITE_KING_SIDE = "K"
    WHITE_QUEEN_SIDE = "Q"
    BLACK_KING_SIDE = "k"
    BLACK_QUEEN_SIDE = "q"

    @property
    def color(self) -> Color:
        return Color.WHITE if self.value.isupper() else Color.BLACK

    @property
    def side(self) -> CastlingSide:
        return CastlingSide.KING_SIDE if self.value.lower() == "k" else CastlingSide.QUEEN_SIDE


CASTLING_ORDER: tuple[CastlingDirection, ...] = (
    CastlingDirection.WHITE_KING_SIDE,
    CastlingDirection.WHITE_QUEEN_SIDE,
    CastlingDirection.BLACK_KING_SIDE,
    CastlingDirection.BLACK_QUEEN_SIDE,
)


def castling_from_fen(castle_fen: str) -> dict[CastlingDirection, bool]:
    """parse the part of the FEN string that encodes castling rights"""
    return {
        direction: (direction.value in castle_fen) for direction in CastlingDirection
    }


def castling_to_fen(castling_rights: dict[CastlingDirection, bool]) -> str:
    """create the part of the FEN string that encodes castling rights"""
    castling_chars = "".join(
        [direction.value for direction in CASTLING_ORDER if castling_rights[direction]]
    )
    return castling_chars or "-"


def castling_rights_from_board(
    board: Board, has_moved: HasMoved
) -> dict[CastlingDirection, bool]:
    """
    A castling letter is only written when neither the king nor the rook of that side moved,
    AND both still stand on their start squares (the rook may have been captured there, a FEN may place the king elsewhere).
    """
    rights: dict[CastlingDirection, bool] = {}
    for direction in CastlingDirection:
        color, side = direction.color, direction.side
        king_from, _, corner, _ = CASTLING_RULES[side].squares(color)
        rights[direction] = (
            not has_moved[color].king
            and not has_moved[color].rook_moved(side)
            and board.piece(king_from) == Piece(PieceType.KING, color)
            and board.piece(corner) == Piece(PieceType.ROOK, color)
        )
    return rights


def has_moved_from_castling(castling_rights: dict[CastlingDirection, bool]) -> HasMoved:
    """
    Reverse direction: when starting from a FEN, a missing letter means that rook is treated as having moved.
    (The king flag cannot be recovered from FEN, and it does not need to be: revoking both rook sides is equivalent.)
    """
    return HasMoved(
        white=CastlingRights(
            rook_left=not castling_rights[CastlingDirection.WHITE_QUEEN_SIDE],
            rook_right=not castling_rights[CastlingDirection.WHITE_KING_SIDE],
        ),
        black=CastlingRights(
            rook_left=not castling_rights[CastlingDirection.BLACK_QUEEN_SIDE],
            rook_right=not castling_rights[CastlingDirection.BLACK_KING_SIDE],
        ),
    )


def half_move_clock(move_history: Sequence[MoveRecord]) -> int:
    """Count back from the last move: how many moves in a row were neither a pawn move nor a capture"""
    count = 0
    for record in reversed(move_history):
        if record.piece.type == PieceType.PAWN or record.captured_piece is not None:
            break
        count += 1
    return count


def board_to_fen(
    board: Board,
    current_player: Color,
    has_moved: HasMoved,
    en_passant_target: Optional[Position],
    move_history: Sequence[MoveRecord],
) -> str:
    """Encode a live game into a FEN string (as the search engine expects it)."""
    state = FENState(
        position=board.to_fen(),
        color_to_move=current_player,
        castling_rights=castling_rights_from_board(board, has_moved),
        en_passant_square=en_passant_target,
        half_move_clock=half_move_clock(move_history),
        num_turns=len(move_history) // 2 + 1,
    )
    return state.to_fen()


def is_valid_fen(fen: str) -> bool:
    """
    Check if given string follows proper FEN notation: six space separated fields, each valid on its own,
    and an en passant target on the rank that fits the side to move.
    """
    fields = fen.split(" ")
    if len(fields) != len(FIELD_VALIDATORS):
        return False
    if not all(validator(value) for validator, value in zip(FIELD_VALIDATORS, fields)):
        return False

    # the en passant target has to be behind a pawn of the side that just moved
    color_code, en_passant = fields[1], fields[3]
    return en_passant == "-" or en_passant[1] == EN_PASSANT_RANK[COLOR_CODES[color_code]]


def _rank_width(rank_fen: str) -> Optional[int]:
    """Number of squares one rank of the placement describes. None if it holds anything but digits and piece letters."""
    width = 0
    for character in rank_fen:
        if character in BOARD_DIGITS:
            width += int(character)
        elif character.lower() in FEN_TO_PIECE:
            width += 1
        else:
            return None
    return width


def is_valid_position(position: str) -> bool:
    """Only check the part of the FEN encoding for the board position: 8 ranks of 8 squares, and exactly one king per color."""
    rank_fens = position.split("/")
    if len(rank_fens) != BOARD_SIZE:
        return False
    if any(_rank_width(rank_fen) != BOARD_SIZE for rank_fen in rank_fens):
        return False
    return position.count("K") == 1 and position.count("k") == 1


def is_valid_color_code(color: str) -> bool:
    return color in COLOR_CODES


def is_valid_castling_rights(castling: str) -> bool:
    """Letters of KQkq, in that order and without repeats, or a '-' if all rights have been revoked."""
    return castling in VALID_CASTLING_ENCODINGS


def is_valid_square(square: str) -> bool:
    """Valid square should be a letter for the file + a number for the rank"""
    if len(square) != 2:
        return False
    file_char, rank_char = square
    return file_char in FILES and rank_char in BOARD_DIGITS


def is_valid_en_passant(en_passant: str) -> bool:
    """
    Either '-' or the square a pawn just skipped over.
    That square can only be on the 3rd rank (white just moved) or the 6th rank (black just moved).
    """
    if en_passant == "-":
        return True
    return is_valid_square(en_passant) and en_passant[1] in EN_PASSANT_RANK.values()


def is_valid_move_counter(counter: str) -> bool:
    # str.isdigit also accepts digits int() cannot read (ex. "²")
    return counter.isascii() and counter.isdigit()


FIELD_VALIDATORS: tuple[Callable[[str], bool], ...] = (
    is_valid_position,
    is_valid_color_code,
    is_valid_castling_rights,
    is_valid_en_passant,
    is_valid_move_counter,
    is_valid_move_counter,
)


@dataclass
class FENState:
    """
    Everything a FEN string (Forsyth-Edwards Notation) says about a position.
    ----

        <placement> <side to move> <castling rights> <en passant target> <half move clock> <full move number>

    * placement: ranks 8 down to 1, separated by '/'. Pieces as letters (uppercase for white), digits for runs of empty squares.
    * side to move: 'w' or 'b'
    * castling rights: any of 'KQkq' (K/Q king-side/queen-side, capital letters for white), or '-'
    * en passant target: the square a pawn skipped on its double step during the last move, or '-'
    * half move clock: moves since the last pawn move or capture
    * full move number: starts at 1, goes up after every move of black

    ex. the standard starting position:
    rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1
    """

    position: str
    color_to_move: Color
    castling_rights: dict[CastlingDirection, bool]
    en_passant_square: Optional[Position]
    half_move_clock: int
    num_turns: int

    @classmethod
    def from_fen(cls, fen: str) -> Self:
        """Parse the FEN into data. Raises InvalidFENError when the string is not valid FEN."""
        if not is_valid_fen(fen):
            raise InvalidFENError(f"Cannot interpret supplied string as FEN: {fen}")

        position, color_code, castling, en_passant, half_moves, turns = fen.split(" ")
        return cls(
            position=position,
            color_to_move=COLOR_CODES[color_code],
            castling_rights=castling_from_fen(castling),
            en_passant_square=None if en_passant == "-" else Position.from_algebraic(en_passant),
            half_move_clock=int(half_moves),
            num_turns=int(turns),
        )

    def to_fen(self) -> str:
        """reverse operation: write a FEN from the given data"""
        fields = (
            self.position,
            COLOR_TO_CODE[self.color_to_move],
            castling_to_fen(self.castling_rights),
            self.en_passant_square.to_algebraic() if self.en_passant_square else "-",
            str(self.half_move_clock),
            str(self.num_turns),
        )
        return " ".join(fields)

    @property
    def board(self) -> Board:
        return Board.from_fen(self.position)

    @property
    def has_moved(self) -> HasMoved:
        return has_moved_from_castling(self.castling_rights)
