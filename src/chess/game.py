"""
The Game class will be the entrypoint into the domain layer for the service layer.
It owns all the mutable state of a single game and is responsible for orchestrating the business logic required to play a turn:

    movement rules --> self-check filter --> execute + bookkeeping --> game over detection

An illegal move attempt is not an error: `make_move` simply answers False and nothing changes.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional, Self

from src.chess.board import Board
from src.chess.check import is_in_check, would_be_in_check
from src.chess.fen import STARTING_FEN
from src.chess.game_over import all_legal_moves, is_checkmate, is_stalemate
from src.chess.history import GameState, MoveRecord, apply_move, replay
from src.chess.moves import Move, get_valid_moves, is_promotion_move, is_valid_move
from src.chess.pieces import PROMOTION_OPTIONS
from src.chess.position import Position
from src.core.exceptions import GameStateError, IllegalMoveError, InvalidFENError
from src.core.models import GameModel
from src.core.shared_types import DRAW, Color, GameMode, GameOverReason, PieceType, Status

logger = logging.getLogger(__name__)

DEFAULT_HINTS = 3
DEFAULT_CLOCK_SECONDS = 600

FINISHED: dict[Status, GameOverReason] = {
    Status.CHECKMATE: GameOverReason.CHECKMATE,
    Status.STALEMATE: GameOverReason.STALEMATE,
    Status.TIMEOUT: GameOverReason.TIMEOUT,
}


@dataclass(frozen=True)
class PendingPromotion:
    """A pawn reached the last rank, but the player has not picked the piece to promote into yet"""

    from_square: Position
    to_square: Position
    color: Color


@dataclass(frozen=True)
class GameOver:
    winner: str  # a Color value or DRAW
    reason: GameOverReason


def _full_clock(seconds: int) -> dict[Color, int]:
    return {color: seconds for color in Color}


@dataclass
class Game:
    # --- DOMAIN LAYER API CALLED BY SERVICE---

    state: GameState
    starting_fen: str = STARTING_FEN
    game_mode: GameMode = GameMode.FRIEND
    game_over: Optional[GameOver] = None
    pending_promotion: Optional[PendingPromotion] = None
    max_hints: int = DEFAULT_HINTS
    hints_remaining: int = DEFAULT_HINTS
    clock_seconds: int = DEFAULT_CLOCK_SECONDS
    clock: dict[Color, int] = field(default_factory=lambda: _full_clock(DEFAULT_CLOCK_SECONDS))

    @classmethod
    def new_game(
        cls,
        starting_fen: Optional[str] = None,
        game_mode: GameMode = GameMode.FRIEND,
        hints: int = DEFAULT_HINTS,
        clock_seconds: int = DEFAULT_CLOCK_SECONDS,
    ) -> Self:
        """Start from the standard position, or from the supplied FEN (raises InvalidFENError if it cannot be read)."""
        fen = starting_fen or STARTING_FEN
        game = cls(
            state=GameState.from_fen(fen),
            starting_fen=fen,
            game_mode=game_mode,
            max_hints=hints,
            hints_remaining=hints,
            clock_seconds=clock_seconds,
            clock=_full_clock(clock_seconds),
        )
        # a FEN can describe a position that is already over
        game._update_game_over(mover=game.current_player.opposite)
        return game

    # --- READ ONLY VIEWS ---
    @property
    def board(self) -> Board:
        return self.state.board

    @property
    def current_player(self) -> Color:
        return self.state.current_player

    @property
    def history(self) -> list[MoveRecord]:
        return self.state.history

    @property
    def status(self) -> Status:
        if self.game_over is not None:
            return Status(self.game_over.reason.value)
        if self.pending_promotion is not None:
            return Status.AWAITING_PROMOTION
        return Status.IN_PROGRESS

    @property
    def winner(self) -> Optional[str]:
        return self.game_over.winner if self.game_over else None

    @property
    def in_check(self) -> bool:
        return is_in_check(self.current_player, self.board)

    @property
    def fen(self) -> str:
        return self.state.to_fen()

    def valid_moves(self, position: Position) -> list[Position]:
        """
        Destinations the piece on `position` can legally go to (castling included, moves leaving you in check excluded).
        Only the player to move has valid moves.
        """
        if self.game_over is not None or self.pending_promotion is not None:
            return []
        piece = self.board.piece(position)
        if piece is None or piece.color != self.current_player:
            return []
        return [
            to_square
            for to_square in get_valid_moves(
                position, self.board, self.state.en_passant_target, self.state.has_moved
            )
            if not would_be_in_check(position, to_square, self.board, self.state.en_passant_target)
        ]

    def legal_moves(self) -> list[Move]:
        """All legal moves of the player to move. A pawn reaching the last rank is listed once, promoting to a queen."""
        if self.game_over is not None or self.pending_promotion is not None:
            return []
        moves = all_legal_moves(
            self.current_player,
            self.board,
            self.state.en_passant_target,
            self.state.has_moved,
        )
        return [
            Move(from_square, to_square, self._default_promotion(from_square, to_square))
            for from_square, to_square in moves
        ]

    # --- MUTATIONS ---
    def make_move(
        self,
        from_square: Position,
        to_square: Position,
        promotion: Optional[PieceType] = None,
    ) -> bool:
        """
        Attempt to make a move
        -----

        Rejected (returns False, state untouched) when:
        1. the game is over, or a promotion is still waiting for the player's choice
        2. there is no piece of the player to move on `from_square`
        3. the movement rules do not allow it
        4. it would leave your own king in check

        A pawn moving to the last rank without a promotion choice suspends the turn: the move is accepted
        (returns True) but nothing happens until `complete_promotion()` gets called.
        """
        if self.game_over is not None or self.pending_promotion is not None:
            return False

        piece = self.board.piece(from_square)
        if piece is None or piece.color != self.current_player:
            return False

        if not is_valid_move(
            from_square,
            to_square,
            self.board,
            self.state.en_passant_target,
            self.state.has_moved,
        ):
            return False

        if would_be_in_check(from_square, to_square, self.board, self.state.en_passant_target):
            return False

        if is_promotion_move(from_square, to_square, self.board):
            if promotion is None:
                self.pending_promotion = PendingPromotion(from_square, to_square, piece.color)
                return True
            if promotion not in PROMOTION_OPTIONS:
                return False
        else:
            promotion = None

        self._apply(from_square, to_square, promotion)
        return True

    def complete_promotion(self, piece_type: PieceType) -> bool:
        """Finish the suspended promotion move with the chosen piece (queen, rook, bishop or knight)"""
        if self.pending_promotion is None or piece_type not in PROMOTION_OPTIONS:
            return False
        pending = self.pending_promotion
        self.pending_promotion = None
        self._apply(pending.from_square, pending.to_square, piece_type)
        return True

    def apply_uci(self, uci: str) -> None:
        """
        Strict entry point for importing moves: play a move in UCI notation or raise IllegalMoveError.
        A promotion must carry its piece (ex. 'e7e8q').
        """
        try:
            move = Move.from_uci(uci)
        except ValueError as e:
            raise IllegalMoveError(f"Cannot interpret {uci!r} as a move.") from e

        if not self.make_move(move.from_square, move.to_square, move.promote_to):
            raise IllegalMoveError(f"Move not allowed: {uci}")
        if self.pending_promotion is not None:
            self.pending_promotion = None
            raise IllegalMoveError(f"Move {uci} reaches the last rank but names no piece to promote into.")

    def undo(self) -> bool:
        """
        Take back the last move, by replaying the history minus its last record.
        If a promotion is pending, only that (not yet executed) move is cancelled.
        """
        if self.pending_promotion is not None:
            self.pending_promotion = None
            return True
        if not self.history:
            return False

        undone = self.history[-1]
        self.state = replay(self.history[:-1], self.starting_fen)
        self.game_over = None
        logger.info("Undo %s", undone.notation)
        return True

    def reset(self) -> None:
        """Back to the starting position. Discards history, captures, clock and used hints."""
        self.state = GameState.from_fen(self.starting_fen)
        self.game_over = None
        self.pending_promotion = None
        self.hints_remaining = self.max_hints
        self.clock = _full_clock(self.clock_seconds)

    def tick(self, seconds: int = 1) -> None:
        """The clock of the player to move runs down. Running out of time loses the game."""
        if self.game_over is not None:
            return
        color = self.current_player
        self.clock[color] = max(0, self.clock[color] - seconds)
        if self.clock[color] == 0:
            self._finish(GameOver(winner=color.opposite.value, reason=GameOverReason.TIMEOUT))

    def use_hint(self) -> bool:
        """Spend one of the hints. False when none are left (or there is nothing to hint at)"""
        if self.game_over is not None or self.hints_remaining <= 0:
            return False
        self.hints_remaining -= 1
        return True

    # -- PRIVATE HELPERS ---
    def _apply(self, from_square: Position, to_square: Position, promotion: Optional[PieceType]) -> None:
        record = apply_move(self.state, from_square, to_square, promotion)
        logger.info(
            "%s played %s%s",
            record.piece.color,
            record.notation,
            f" (captures {record.captured_piece.type})" if record.captured_piece else "",
        )
        self._update_game_over(mover=record.piece.color)

    def _update_game_over(self, mover: Color) -> None:
        """
        Performs checks to see if game has ended.

        NOTE the state has already been updated: the player to move now is the opponent of the one who just moved.
        """
        to_move = self.current_player
        args = (to_move, self.board, self.state.en_passant_target, self.state.has_moved)
        if is_checkmate(*args):
            self._finish(GameOver(winner=mover.value, reason=GameOverReason.CHECKMATE))
        elif is_stalemate(*args):
            self._finish(GameOver(winner=DRAW, reason=GameOverReason.STALEMATE))

    def _finish(self, game_over: GameOver) -> None:
        self.game_over = game_over
        logger.info("Game over: %s (winner: %s)", game_over.reason, game_over.winner)

    def _default_promotion(self, from_square: Position, to_square: Position) -> Optional[PieceType]:
        if is_promotion_move(from_square, to_square, self.board):
            return PROMOTION_OPTIONS[0]
        return None

    # --- CONVERSION FROM/TO SERVICE LAYER CONTRACT ---
    def to_model(self) -> GameModel:
        """Encode back into a format the Service layer uses"""
        pending = self.pending_promotion
        return GameModel(
            starting_fen=self.starting_fen,
            current_fen=self.fen,
            moves=[record.to_model() for record in self.history],
            has_moved=self.state.has_moved.to_dict(),
            captured_pieces={
                color.value: [piece.to_fen() for piece in pieces]
                for color, pieces in self.state.captured_pieces.items()
            },
            score={color.value: points for color, points in self.state.score.items()},
            status=self.status.value,
            game_mode=self.game_mode.value,
            hints_remaining=self.hints_remaining,
            clock={color.value: seconds for color, seconds in self.clock.items()},
            winner=self.winner,
            pending_promotion=(
                [pending.from_square.to_algebraic(), pending.to_square.to_algebraic()]
                if pending
                else None
            ),
        )

    @classmethod
    def from_model(
        cls,
        model: GameModel,
        hints: int = DEFAULT_HINTS,
        clock_seconds: int = DEFAULT_CLOCK_SECONDS,
    ) -> Self:
        """
        Define how to construct a Game from the information the Service layer actually has.
        The position is rebuilt by replaying the stored moves; it has to agree with the stored FEN.
        """
        # Validation
        if model.status not in Status._value2member_map_:
            raise GameStateError(
                f"Invalid status code: {model.status!r}. \nPick one from {','.join(status.value for status in Status)}"
            )
        if model.game_mode not in GameMode._value2member_map_:
            raise GameStateError(f"Invalid game mode: {model.game_mode!r}.")

        try:
            state = replay(
                [MoveRecord.from_model(move) for move in model.moves],
                model.starting_fen,
            )
        except (ValueError, IllegalMoveError, InvalidFENError) as e:
            raise GameStateError(f"Stored moves cannot be replayed: {e}") from e
        if state.to_fen() != model.current_fen:
            raise GameStateError(
                f"Stored position {model.current_fen!r} does not match the replayed moves ({state.to_fen()!r})."
            )

        status = Status(model.status)
        game_over = None
        if status in FINISHED:
            game_over = GameOver(winner=model.winner or DRAW, reason=FINISHED[status])

        pending = None
        if model.pending_promotion:
            from_alg, to_alg = model.pending_promotion
            pending = PendingPromotion(
                Position.from_algebraic(from_alg),
                Position.from_algebraic(to_alg),
                state.current_player,
            )

        clock = {
            color: model.clock.get(color.value, clock_seconds) for color in Color
        }
        return cls(
            state=state,
            starting_fen=model.starting_fen,
            game_mode=GameMode(model.game_mode),
            game_over=game_over,
            pending_promotion=pending,
            max_hints=hints,
            hints_remaining=model.hints_remaining,
            clock_seconds=clock_seconds,
            clock=clock,
        )
