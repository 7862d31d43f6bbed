"""Orchestration of communication from API router to business logic and persistence layers (and the reverse direction)."""

import logging
import random
from typing import Optional
from uuid import UUID

from src.api.models import (
    ComputerMoveRequest,
    CreateGameRequest,
    DeleteGameRequest,
    GameResponse,
    GetGameRequest,
    HintRequest,
    HintResponse,
    MoveRequest,
    MoveResponse,
    PromotionRequest,
    ResetRequest,
    TickRequest,
    UndoRequest,
    ValidMovesRequest,
    ValidMovesResponse,
)
from src.chess.game import Game
from src.chess.position import Position
from src.core.config import Settings
from src.core.exceptions import GameStateError, RepositoryError
from src.core.models import GameModel
from src.core.shared_types import Color
from src.db.repository import GameRepository
from src.engine.uci_client import SearchOracle
from src.services.computer_player import ComputerPlayer, Difficulty

logger = logging.getLogger(__name__)

# Against the computer, the human always plays white
COMPUTER_COLOR = Color.BLACK


class ChessService:
    """Orchestration of layers for chess game."""

    def __init__(
        self,
        repository: GameRepository,
        settings: Optional[Settings] = None,
        oracle: Optional[SearchOracle] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.repo = repository
        self.settings = settings or Settings()
        self.oracle = oracle
        self.rng = rng or random.Random()

    # -- API routes logic ---
    def create_new_game(self, request: CreateGameRequest) -> GameResponse:
        """Player requested to create a new game (against a friend or the computer)."""

        # Use info in CreateGameRequest to create a new Game, and convert into GameModel
        new_game = Game.new_game(
            starting_fen=request.starting_fen,
            game_mode=request.game_mode,
            hints=self.settings.hints,
            clock_seconds=self.settings.clock_seconds,
        )

        # Store the GameModel in the repository
        stored_game, game_id = self.repo.create_game(new_game.to_model())
        logger.info("Created game %s (%s)", game_id, request.game_mode)

        # Return a GameResponse
        return self._create_game_response(game_id, self._to_game(stored_game))

    def get_game_state(self, request: GetGameRequest) -> GameResponse:
        """
        Retrieve current game state.
        ----
        Used in "polling" loop by frontend to check when it is the player's turn for instance.
        """
        game = self._load_game(request.game_id)
        return self._create_game_response(request.game_id, game)

    def valid_moves(self, request: ValidMovesRequest) -> ValidMovesResponse:
        """Where can the piece on the requested square go? (used to highlight squares)"""
        game = self._load_game(request.game_id)
        destinations = game.valid_moves(Position.from_algebraic(request.square))
        return ValidMovesResponse(
            game_id=request.game_id,
            square=request.square,
            valid_moves=[square.to_algebraic() for square in destinations],
        )

    def make_move(self, request: MoveRequest) -> MoveResponse:
        """Make a move attempt. An illegal move is reported back (accepted=False), not raised."""
        game = self._load_game(request.game_id)

        if game.game_mode.against_computer and game.current_player == COMPUTER_COLOR:
            accepted = False
        else:
            accepted = game.make_move(
                Position.from_algebraic(request.from_square),
                Position.from_algebraic(request.to_square),
                request.promote_to,
            )

        if accepted:
            self._store(request.game_id, game)
        return MoveResponse(
            accepted=accepted, game=self._create_game_response(request.game_id, game)
        )

    def complete_promotion(self, request: PromotionRequest) -> MoveResponse:
        """The player picked the piece for the pawn that reached the last rank."""
        game = self._load_game(request.game_id)
        accepted = game.complete_promotion(request.piece_type)
        if accepted:
            self._store(request.game_id, game)
        return MoveResponse(
            accepted=accepted, game=self._create_game_response(request.game_id, game)
        )

    def undo(self, request: UndoRequest) -> MoveResponse:
        """Take back the last move (in a game against the computer: the computer's reply AND your own move)."""
        game = self._load_game(request.game_id)
        accepted = game.undo()
        if (
            accepted
            and game.game_mode.against_computer
            and game.current_player == COMPUTER_COLOR
            and game.pending_promotion is None
        ):
            game.undo()
        if accepted:
            self._store(request.game_id, game)
        return MoveResponse(
            accepted=accepted, game=self._create_game_response(request.game_id, game)
        )

    def reset(self, request: ResetRequest) -> GameResponse:
        game = self._load_game(request.game_id)
        game.reset()
        self._store(request.game_id, game)
        return self._create_game_response(request.game_id, game)

    async def computer_move(self, request: ComputerMoveRequest) -> MoveResponse:
        """Let the computer play its move (after its thinking delay)."""
        game = self._load_game(request.game_id)
        if not game.game_mode.against_computer:
            raise GameStateError(f"Game {request.game_id} has no computer opponent.")
        if game.current_player != COMPUTER_COLOR:
            return MoveResponse(
                accepted=False, game=self._create_game_response(request.game_id, game)
            )

        player = ComputerPlayer(
            self.oracle,
            Difficulty.from_game_mode(game.game_mode),
            self.settings,
            self.rng,
        )
        if not await player.play(game):
            raise GameStateError(f"Computer cannot move. status: {game.status}")

        self._store(request.game_id, game)
        return MoveResponse(
            accepted=True, game=self._create_game_response(request.game_id, game)
        )

    async def hint(self, request: HintRequest) -> HintResponse:
        """Suggest a move for the player to move. Costs one hint."""
        game = self._load_game(request.game_id)
        if game.hints_remaining <= 0:
            raise GameStateError("No hints left.")

        player = ComputerPlayer(self.oracle, Difficulty.HARD, self.settings, self.rng)
        move = await player.suggest(game)
        if move is None:
            raise GameStateError(f"No move to suggest. status: {game.status}")

        self._store(request.game_id, game)
        return HintResponse(
            game_id=request.game_id,
            move=move.to_uci(),
            hints_remaining=game.hints_remaining,
        )

    def tick_clock(self, request: TickRequest) -> GameResponse:
        game = self._load_game(request.game_id)
        game.tick(request.seconds)
        self._store(request.game_id, game)
        return self._create_game_response(request.game_id, game)

    def delete_game(self, request: DeleteGameRequest) -> None:
        """Handle a request to delete a Game record."""
        if self.repo.delete_game(request.game_id) is None:
            raise RepositoryError(f"Game with game_id={request.game_id} not found.")

    # -- Internal helpers --
    def _create_game_response(self, game_id: UUID, game: Game) -> GameResponse:
        """Convert the Game into a GameResponse (for game with given ID.)"""
        model = game.to_model()
        return GameResponse(
            game_id=game_id,
            fen_state=model.current_fen,
            starting_state=model.starting_fen,
            current_player=game.current_player,
            status=game.status,
            winner=model.winner,
            in_check=game.in_check,
            game_mode=game.game_mode,
            move_history=[move.notation for move in model.moves],
            captured_pieces=model.captured_pieces,
            score=model.score,
            hints_remaining=model.hints_remaining,
            clock=model.clock,
            pending_promotion=model.pending_promotion,
        )

    def _to_game(self, model: GameModel) -> Game:
        return Game.from_model(
            model, hints=self.settings.hints, clock_seconds=self.settings.clock_seconds
        )

    def _load_game(self, game_id: UUID) -> Game:
        return self._to_game(self._fetch_game(game_id))

    def _store(self, game_id: UUID, game: Game) -> None:
        if self.repo.update_game(game_id, game.to_model()) is None:
            raise RepositoryError(f"Game with {game_id=} not found.")

    def _fetch_game(self, game_id: UUID) -> GameModel:
        """Attempt to find the game in the repository and raise error if it fails."""
        game_model = self.repo.get_game(game_id)
        if game_model is None:
            raise RepositoryError(f"Game with {game_id=} not found.")
        return game_model
