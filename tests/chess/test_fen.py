"""Unit tests for src/chess/fen.py"""

import pytest

from src.chess.board import Board
from src.chess.castling import CastlingRights, HasMoved
from src.chess.fen import (
    STARTING_FEN,
    VALID_CASTLING_ENCODINGS,
    CastlingDirection,
    FENState,
    board_to_fen,
    castling_from_fen,
    castling_rights_from_board,
    castling_to_fen,
    half_move_clock,
    has_moved_from_castling,
    is_valid_castling_rights,
    is_valid_color_code,
    is_valid_en_passant,
    is_valid_fen,
    is_valid_position,
    is_valid_square,
)
from src.chess.history import MoveRecord
from src.chess.pieces import Piece
from src.chess.position import Position
from src.core.exceptions import InvalidFENError
from src.core.shared_types import Color

KINGS_ONLY = "4k3/8/8/8/8/8/8/4K3"


def record(from_alg: str, to_alg: str, piece: str, captured: str | None = None) -> MoveRecord:
    return MoveRecord(
        from_square=Position.from_algebraic(from_alg),
        to_square=Position.from_algebraic(to_alg),
        piece=Piece.from_fen(piece),
        notation=f"{from_alg}-{to_alg}",
        timestamp=0.0,
        captured_piece=Piece.from_fen(captured) if captured else None,
    )


@pytest.mark.parametrize(
    "fen, expected_rights",
    [
        ("KQkq", {direction: True for direction in CastlingDirection}),
        (
            "KQk",
            {
                CastlingDirection.WHITE_KING_SIDE: True,
                CastlingDirection.WHITE_QUEEN_SIDE: True,
                CastlingDirection.BLACK_KING_SIDE: True,
                CastlingDirection.BLACK_QUEEN_SIDE: False,
            },
        ),
        ("-", {direction: False for direction in CastlingDirection}),
    ],
)
def test_castling_from_fen(fen: str, expected_rights: dict[CastlingDirection, bool]) -> None:
    """Check encoding of castling rights is correctly decoded"""
    assert castling_from_fen(fen) == expected_rights
    assert castling_to_fen(expected_rights) == fen


@pytest.mark.parametrize(
    "fen",
    [
        STARTING_FEN,
        "r3k2r/pppq1ppp/2npbn2/4p3/2B1P3/2NP1N2/PPP2PPP/R1BQ1RK1 b kq - 3 9",
        f"{KINGS_ONLY} w - - 0 1",
        "rnbqkbnr/ppp1pppp/8/3pP3/8/8/PPPP1PPP/RNBQKBNR w KQkq d6 0 3",
    ],
)
def test_fen_parsing_roundtrip(fen: str) -> None:
    """Create a FENState from FEN, convert back to FEN to check if the order of elements in the FEN string are parsed correctly"""
    state = FENState.from_fen(fen)
    assert state.to_fen() == fen


@pytest.mark.parametrize("color_str, color", [("w", Color.WHITE), ("b", Color.BLACK)])
def test_color_to_move(color_str: str, color: Color) -> None:
    state = FENState.from_fen(f"{KINGS_ONLY} {color_str} - - 0 1")
    assert state.color_to_move == color


@pytest.mark.parametrize(
    "en_passant_algebraic, expected_square",
    [("-", None), ("e6", Position.from_algebraic("e6"))],
)
def test_en_passant_square(en_passant_algebraic: str, expected_square: Position | None) -> None:
    state = FENState.from_fen(f"{KINGS_ONLY} w - {en_passant_algebraic} 0 1")
    assert state.en_passant_square == expected_square


def test_move_counters() -> None:
    state = FENState.from_fen(f"{KINGS_ONLY} w - - 6 23")
    assert state.half_move_clock == 6
    assert state.num_turns == 23


@pytest.mark.parametrize(
    "invalid_fen",
    [
        "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0",  # missing a part
        "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR x KQkq - 0 1",  # bogus color
        "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq e9 0 1",  # square off the board
        "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - x 1",
        "8/8/8/8/8/8/8/8 w - - 0 1",  # no kings
        "4k3/8/8/8/8/8/8/4K3 w - - 0 ²",  # superscript digit
        "4k3/8/8/8/8/8/8/²K5 w - - 0 1",
        "4k3/8/8/8/8/8/8/4K3 w - e3 0 1",  # en passant rank does not fit the side to move
        "4k3/8/8/8/8/8/8/4K3 b - e6 0 1",
    ],
)
def test_invalid_fen(invalid_fen: str) -> None:
    assert not is_valid_fen(invalid_fen)
    with pytest.raises(InvalidFENError):
        FENState.from_fen(invalid_fen)


@pytest.mark.parametrize(
    "position",
    [
        "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR",
        "r3k2r/pppq1ppp/2npbn2/4p3/2B1P3/2NP1N2/PPP2PPP/R1BQ1RK1",
        KINGS_ONLY,
    ],
)
def test_valid_position(position: str) -> None:
    assert is_valid_position(position)


@pytest.mark.parametrize(
    "position",
    [
        "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR/RNBQKBNR",  # an additional rank
        "rnbqkbnr/pppppppp/8/",  # not enough ranks
        "rnbqkbnr/pppppppp/6/23/42/34/PPPPPPPP/RNBQKBNR",  # empty squares exceed number of files
        "rnbqkbnr/pppppppp/8/8/8/8/2P2P42/RNBQKBNR",  # empty squares in between pieces exceeds number of files
        "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNRRRR",  # number of pieces in the rank exceeds number of files
        "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/WRTYUIOM",  # bogus codes for the pieces
        "rn@q#bnr/p-ppp-pp/8/8/8/8/PPPPPPPP/RNBQKBNR",  # bogus characters for the pieces
        "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQ1BNR",  # white king missing
        "4k3/8/8/8/8/8/8/3KK3",  # two white kings
    ],
)
def test_invalid_position(position: str) -> None:
    """Check these bogus positions are invalid"""
    assert not is_valid_position(position)


@pytest.mark.parametrize("castling", VALID_CASTLING_ENCODINGS)
def test_valid_castling(castling: str) -> None:
    assert is_valid_castling_rights(castling)


@pytest.mark.parametrize(
    "castling",
    [
        "KKQ",  # duplicates
        "KQkqKQkq",  # too long (and duplicates)
        "----",
        "%$#&",  # bogus characters
        "KqXQ",  # use a letter outside of K or Q
        "K-kq",  # using a dash when only one of the rights have been revoked
    ],
)
def test_invalid_castling(castling: str) -> None:
    assert not is_valid_castling_rights(castling)


@pytest.mark.parametrize("square", ["a1", "b6", "e5", "h8"])
def test_valid_square(square: str) -> None:
    assert is_valid_square(square)


@pytest.mark.parametrize("square", ["a9", "h0", "1a", "-", "a#", "x1", "!4", "a10"])
def test_invalid_square(square: str) -> None:
    assert not is_valid_square(square)


@pytest.mark.parametrize("en_passant", ["a3", "h6", "-"])
def test_valid_en_passant(en_passant: str) -> None:
    """include the encoding for 'no en passant square available'."""
    assert is_valid_en_passant(en_passant)


@pytest.mark.parametrize("en_passant", ["e4", "a1", "h8", "e9", "--"])
def test_invalid_en_passant(en_passant: str) -> None:
    """Only a square on the 3rd or 6th rank can have been skipped by a pawn"""
    assert not is_valid_en_passant(en_passant)


def test_castling_encodings() -> None:
    assert len(VALID_CASTLING_ENCODINGS) == 16
    assert "KQkq" in VALID_CASTLING_ENCODINGS
    assert "qk" not in VALID_CASTLING_ENCODINGS


@pytest.mark.parametrize("color", ["w", "b"])
def test_valid_color(color: str) -> None:
    assert is_valid_color_code(color)


# --- ENCODING A LIVE GAME ---
def test_castling_letters_need_the_rook_in_its_corner() -> None:
    """No flag was ever set, but the h1 rook got captured: K must disappear"""
    board = Board.from_fen("r3k2r/8/8/8/8/8/8/R3K2n")
    rights = castling_rights_from_board(board, HasMoved())
    assert castling_to_fen(rights) == "Qkq"


def test_castling_letters_need_the_king_on_its_start_square() -> None:
    board = Board.from_fen("r3k2r/8/8/8/8/8/8/R2K3R")
    assert castling_to_fen(castling_rights_from_board(board, HasMoved())) == "kq"


def test_castling_letters_follow_the_flags() -> None:
    board = Board.from_fen("r3k2r/8/8/8/8/8/8/R3K2R")
    has_moved = HasMoved(white=CastlingRights(king=True), black=CastlingRights(rook_left=True))
    assert castling_to_fen(castling_rights_from_board(board, has_moved)) == "k"


def test_has_moved_from_castling_letters() -> None:
    has_moved = has_moved_from_castling(castling_from_fen("Kq"))
    assert has_moved == HasMoved(
        white=CastlingRights(rook_left=True),
        black=CastlingRights(rook_right=True),
    )


def test_half_move_clock_counts_back_to_last_pawn_move_or_capture() -> None:
    history = [
        record("e2", "e4", "P"),
        record("g8", "f6", "n"),
        record("g1", "f3", "N"),
        record("f6", "e4", "n", captured="P"),
        record("b1", "c3", "N"),
        record("e4", "c3", "n", captured="N"),
        record("d1", "e2", "Q"),
        record("c3", "b1", "n"),
    ]
    assert half_move_clock(history) == 2
    assert half_move_clock(history[:1]) == 0
    assert half_move_clock([]) == 0


def test_board_to_fen_at_start() -> None:
    fen = board_to_fen(Board.initial(), Color.WHITE, HasMoved(), None, [])
    assert fen == STARTING_FEN


def test_board_to_fen_after_double_step() -> None:
    board = Board.from_fen("rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR")
    fen = board_to_fen(
        board, Color.BLACK, HasMoved(), Position.from_algebraic("e3"), [record("e2", "e4", "P")]
    )
    assert fen == "rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b KQkq e3 0 1"
