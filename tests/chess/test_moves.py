"""Unit tests for /src/chess/moves.py"""

import pytest

from src.chess.board import Board
from src.chess.castling import CastlingRights, HasMoved
from src.chess.moves import (
    MOVEMENT_RULES,
    Move,
    get_valid_moves,
    is_path_clear,
    is_promotion_move,
    is_valid_castling,
    is_valid_move,
    parse_best_move,
)
from src.chess.position import Position
from src.core.shared_types import PieceType

CASTLING_FEN = "r3k2r/8/8/8/8/8/8/R3K2R"


def sq(name: str) -> Position:
    return Position.from_algebraic(name)


# -- MOVE CREATION, ENCODING/DECODING UCI NOTATION ---
@pytest.mark.parametrize(
    "uci_move, from_uci, to_uci",
    [
        ("e2e4", "e2", "e4"),
        ("a1a5", "a1", "a5"),
        ("d2e4", "d2", "e4"),
        ("g3a7", "g3", "a7"),
    ],
)
def test_creating_move_from_uci(uci_move: str, from_uci: str, to_uci: str) -> None:
    """Creating logic / parsing of UCI notation for the move should be <from_square><to_square>"""
    move = Move.from_uci(uci_move)
    assert move.from_square == sq(from_uci)
    assert move.to_square == sq(to_uci)
    assert move.promote_to is None
    assert move.to_uci() == uci_move


def test_creating_move_incl_promotion() -> None:
    move = Move.from_uci("e7e8q")
    assert move.from_square == sq("e7")
    assert move.to_square == sq("e8")
    assert move.promote_to == PieceType.QUEEN
    assert move.to_uci() == "e7e8q"


@pytest.mark.parametrize("invalid", ["", "e2", "e2e", "e2e9", "z2e4", "e7e8x", "e2e4qq"])
def test_invalid_uci(invalid: str) -> None:
    with pytest.raises(ValueError):
        Move.from_uci(invalid)


@pytest.mark.parametrize(
    "token, expected",
    [
        ("e2e4", Move(Position(6, 4), Position(4, 4))),
        ("a7a8n", Move(Position(1, 0), Position(0, 0), PieceType.KNIGHT)),
        ("(none)", None),
        ("", None),
        (None, None),
        ("garbage", None),
    ],
)
def test_parse_best_move(token: str | None, expected: Move | None) -> None:
    assert parse_best_move(token) == expected


# --- MOVEMENT RULES ---
def test_every_piece_type_has_a_rule() -> None:
    assert set(MOVEMENT_RULES) == set(PieceType)


@pytest.mark.parametrize(
    "to_square, valid",
    [("e3", True), ("e4", True), ("e5", False), ("d3", False), ("e1", False)],
)
def test_pawn_pushes_from_start(to_square: str, valid: bool) -> None:
    board = Board.initial()
    assert is_valid_move(sq("e2"), sq(to_square), board) == valid


def test_black_pawn_moves_down_the_board() -> None:
    board = Board.initial()
    assert is_valid_move(sq("d7"), sq("d5"), board)
    assert not is_valid_move(sq("d7"), sq("d8"), board)


def test_pawn_double_step_needs_two_empty_squares() -> None:
    board = Board.from_fen("4k3/8/8/8/8/4n3/4P3/4K3")
    assert not is_valid_move(sq("e2"), sq("e3"), board)
    assert not is_valid_move(sq("e2"), sq("e4"), board)


def test_pawn_double_step_only_from_start_rank() -> None:
    board = Board.from_fen("4k3/8/8/8/8/4P3/8/4K3")
    assert is_valid_move(sq("e3"), sq("e4"), board)
    assert not is_valid_move(sq("e3"), sq("e5"), board)


def test_pawn_captures_diagonally_only() -> None:
    board = Board.from_fen("4k3/8/8/3p1p2/4P3/8/8/4K3")
    assert is_valid_move(sq("e4"), sq("d5"), board)
    assert is_valid_move(sq("e4"), sq("f5"), board)
    board = Board.from_fen("4k3/8/8/4p3/4P3/8/8/4K3")
    assert not is_valid_move(sq("e4"), sq("e5"), board)


def test_pawn_en_passant_needs_the_target_square() -> None:
    """White pawn on e5, black pawn just double stepped d7-d5"""
    board = Board.from_fen("4k3/8/8/3pP3/8/8/8/4K3")
    assert is_valid_move(sq("e5"), sq("d6"), board, en_passant_target=sq("d6"))
    assert not is_valid_move(sq("e5"), sq("d6"), board)
    assert not is_valid_move(sq("e5"), sq("f6"), board, en_passant_target=sq("d6"))


@pytest.mark.parametrize(
    "to_square, valid",
    [("f3", True), ("h3", True), ("e2", False), ("g2", False), ("g3", False)],
)
def test_knight_jumps(to_square: str, valid: bool) -> None:
    """g1 knight in the starting position: it can jump over the pawns, but not onto its own pieces"""
    board = Board.initial()
    assert is_valid_move(sq("g1"), sq(to_square), board) == valid


def test_sliding_pieces_need_a_clear_path() -> None:
    board = Board.initial()
    assert not is_valid_move(sq("a1"), sq("a3"), board)
    assert not is_valid_move(sq("c1"), sq("e3"), board)
    assert not is_valid_move(sq("d1"), sq("d3"), board)


@pytest.mark.parametrize(
    "piece_square, to_square, valid",
    [
        ("d4", "d8", True),  # rook: up to capture the enemy
        ("d4", "h4", True),
        ("d4", "e5", False),
        ("c1", "h6", True),  # bishop: long diagonal
        ("c1", "c2", False),
        ("f1", "f8", True),  # queen straight
        ("f1", "a6", True),  # queen diagonal
        ("f1", "g3", False),
    ],
)
def test_sliding_piece_geometry(piece_square: str, to_square: str, valid: bool) -> None:
    board = Board.from_fen("3r3k/8/8/8/3R4/8/8/K1B2Q2")
    assert is_valid_move(sq(piece_square), sq(to_square), board) == valid


def test_cannot_capture_own_piece_or_stand_still() -> None:
    board = Board.initial()
    assert not is_valid_move(sq("d1"), sq("d2"), board)
    assert not is_valid_move(sq("d1"), sq("d1"), board)
    assert not is_valid_move(sq("d4"), sq("d5"), board)  # no piece to move


def test_king_moves_a_single_square() -> None:
    board = Board.from_fen("4k3/8/8/8/8/8/8/4K3")
    assert is_valid_move(sq("e1"), sq("d2"), board)
    assert not is_valid_move(sq("e1"), sq("e3"), board)


def test_is_path_clear() -> None:
    board = Board.from_fen("4k3/8/8/8/8/8/8/R2BK3")
    assert is_path_clear(sq("a1"), sq("c1"), board)
    assert not is_path_clear(sq("a1"), sq("e1"), board)


def test_get_valid_moves_counts_at_start() -> None:
    board = Board.initial()
    assert sorted(p.to_algebraic() for p in get_valid_moves(sq("b1"), board)) == ["a3", "c3"]
    assert len(get_valid_moves(sq("e2"), board)) == 2
    assert get_valid_moves(sq("e1"), board) == []


# --- CASTLING ---
@pytest.mark.parametrize(
    "king_from, king_to",
    [("e1", "g1"), ("e1", "c1"), ("e8", "g8"), ("e8", "c8")],
)
def test_castling_allowed_with_all_rights(king_from: str, king_to: str) -> None:
    board = Board.from_fen(CASTLING_FEN)
    assert is_valid_castling(sq(king_from), sq(king_to), board, HasMoved())
    assert is_valid_move(sq(king_from), sq(king_to), board, has_moved=HasMoved())


def test_two_square_king_move_needs_castling_rights() -> None:
    board = Board.from_fen(CASTLING_FEN)
    assert not is_valid_move(sq("e1"), sq("g1"), board)


@pytest.mark.parametrize(
    "rights, king_to, allowed",
    [
        (CastlingRights(king=True), "g1", False),
        (CastlingRights(king=True), "c1", False),
        (CastlingRights(rook_right=True), "g1", False),
        (CastlingRights(rook_right=True), "c1", True),
        (CastlingRights(rook_left=True), "c1", False),
        (CastlingRights(rook_left=True), "g1", True),
    ],
)
def test_castling_revoked_by_moved_pieces(rights: CastlingRights, king_to: str, allowed: bool) -> None:
    board = Board.from_fen(CASTLING_FEN)
    has_moved = HasMoved(white=rights)
    assert is_valid_castling(sq("e1"), sq(king_to), board, has_moved) == allowed


def test_castling_needs_the_rook_present() -> None:
    """A rook captured in its corner never moved, but it is gone"""
    board = Board.from_fen("r3k2r/8/8/8/8/8/8/R3K3")
    assert not is_valid_castling(sq("e1"), sq("g1"), board, HasMoved())
    board = Board.from_fen("r3k2r/8/8/8/8/8/8/R3K2n")
    assert not is_valid_castling(sq("e1"), sq("g1"), board, HasMoved())


@pytest.mark.parametrize(
    "placement, king_from, king_to",
    [
        ("4k3/8/8/8/8/8/8/3K3R", "d1", "f1"),  # king off its start square, rook would land on it
        ("4k3/8/8/8/4K2R/8/8/8", "e4", "g4"),  # not the back rank
        ("4k3/8/8/8/8/8/8/R4K2", "f1", "d1"),  # rook in its corner, but the king is not on e1
    ],
)
def test_castling_only_from_the_king_start_square(placement: str, king_from: str, king_to: str) -> None:
    board = Board.from_fen(placement)
    assert not is_valid_castling(sq(king_from), sq(king_to), board, HasMoved())
    assert not is_valid_move(sq(king_from), sq(king_to), board, None, HasMoved())


def test_castling_needs_empty_squares_between() -> None:
    board = Board.from_fen("r3k2r/8/8/8/8/8/8/RN2K2R")
    assert not is_valid_castling(sq("e1"), sq("c1"), board, HasMoved())
    assert is_valid_castling(sq("e1"), sq("g1"), board, HasMoved())


def test_castling_not_out_of_through_or_into_check() -> None:
    # in check from the rook on e8
    board = Board.from_fen("4r1k1/8/8/8/8/8/8/R3K2R")
    assert not is_valid_castling(sq("e1"), sq("g1"), board, HasMoved())
    # f1 attacked by the rook on f8
    board = Board.from_fen("5rk1/8/8/8/8/8/8/R3K2R")
    assert not is_valid_castling(sq("e1"), sq("g1"), board, HasMoved())
    assert is_valid_castling(sq("e1"), sq("c1"), board, HasMoved())
    # g1 attacked by the rook on g8
    board = Board.from_fen("k5r1/8/8/8/8/8/8/R3K2R")
    assert not is_valid_castling(sq("e1"), sq("g1"), board, HasMoved())


def test_castling_safety_can_be_switched_off() -> None:
    board = Board.from_fen("5rk1/8/8/8/8/8/8/R3K2R")
    assert is_valid_castling(sq("e1"), sq("g1"), board, HasMoved(), require_safe_passage=False)


def test_queen_side_b_file_may_be_attacked() -> None:
    """Only the squares the king crosses must be safe: b1 being attacked does not matter"""
    board = Board.from_fen("1r4k1/8/8/8/8/8/8/R3K2R")
    assert is_valid_castling(sq("e1"), sq("c1"), board, HasMoved())


# --- PROMOTION ---
@pytest.mark.parametrize(
    "fen, from_square, to_square, expected",
    [
        ("4k3/P7/8/8/8/8/8/4K3", "a7", "a8", True),
        ("4k3/8/8/8/8/8/p7/4K3", "a2", "a1", True),
        ("4k3/8/P7/8/8/8/8/4K3", "a6", "a7", False),
        ("4k3/R7/8/8/8/8/8/4K3", "a7", "a8", False),
    ],
)
def test_is_promotion_move(fen: str, from_square: str, to_square: str, expected: bool) -> None:
    board = Board.from_fen(fen)
    assert is_promotion_move(sq(from_square), sq(to_square), board) == expected
