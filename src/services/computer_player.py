"""
The computer opponent (and the hint button, which asks the same question for the human player).

Moves coming from the search engine are never trusted: they go through the exact same legality checks as a human move.
Whenever the engine cannot help (absent, too slow, crashed, answered nonsense) a random legal move is played instead.
"""

import asyncio
import logging
import random
from enum import StrEnum
from typing import Optional, Self

from src.chess.game import Game
from src.chess.moves import Move, parse_best_move
from src.chess.pieces import PROMOTION_OPTIONS
from src.core.config import Settings
from src.core.exceptions import EngineError
from src.core.shared_types import GameMode, PieceType
from src.engine.uci_client import SearchLimit, SearchOracle

logger = logging.getLogger(__name__)


class Difficulty(StrEnum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"

    @classmethod
    def from_game_mode(cls, game_mode: GameMode) -> Self:
        if not game_mode.against_computer:
            raise ValueError(f"Game mode {game_mode!r} has no computer opponent.")
        return cls(game_mode.value.removeprefix("ai-"))


# EASY never asks the engine
SEARCH_LIMITS: dict[Difficulty, SearchLimit] = {
    Difficulty.MEDIUM: SearchLimit(depth=2),
    Difficulty.HARD: SearchLimit(depth=8),
}
HINT_LIMIT = SearchLimit()


class ComputerPlayer:
    def __init__(
        self,
        oracle: Optional[SearchOracle],
        difficulty: Difficulty = Difficulty.MEDIUM,
        settings: Optional[Settings] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.oracle = oracle
        self.difficulty = difficulty
        self.settings = settings or Settings()
        self.rng = rng or random.Random()

    async def choose_move(self, game: Game) -> Optional[Move]:
        """Pick a move for the player to move. None only if there is no legal move at all."""
        if self.difficulty == Difficulty.EASY:
            return self._random_move(game)
        return await self._search(game, SEARCH_LIMITS[self.difficulty])

    async def play(self, game: Game) -> bool:
        """
        Choose a move, "think" for a moment, then play it through the normal move pipeline.
        Returns whether a move was made.
        """
        move = await self.choose_move(game)
        if move is None:
            return False
        await asyncio.sleep(self.settings.thinking_delay)
        played = game.make_move(move.from_square, move.to_square, move.promote_to)
        if not played:
            logger.warning("Computer move %s was rejected", move.to_uci())
        return played

    async def suggest(self, game: Game) -> Optional[Move]:
        """A hint for the player to move. Spends one hint; None when there are no hints left."""
        if not game.legal_moves() or not game.use_hint():
            return None
        return await self._search(game, HINT_LIMIT)

    # -- PRIVATE HELPERS ---
    async def _search(self, game: Game, limit: SearchLimit) -> Optional[Move]:
        legal_moves = game.legal_moves()
        if not legal_moves:
            return None
        if self.oracle is None:
            logger.warning("No engine available, playing a random move")
            return self._random_move(game)

        try:
            token = await asyncio.wait_for(
                self.oracle.best_move(game.fen, limit),
                timeout=self.settings.engine_timeout,
            )
        except asyncio.TimeoutError:
            logger.warning(
                "Engine did not answer within %.1f s, playing a random move",
                self.settings.engine_timeout,
            )
            await self.oracle.stop()
            return self._random_move(game)
        except EngineError as e:
            logger.warning("Engine failed (%s), playing a random move", e)
            return self._random_move(game)

        move = self._validate(parse_best_move(token), legal_moves)
        if move is None:
            logger.warning("Engine answered %r, which is not a legal move here. Playing a random move", token)
            return self._random_move(game)
        logger.debug("Engine suggests %s", move.to_uci())
        return move

    @staticmethod
    def _validate(move: Optional[Move], legal_moves: list[Move]) -> Optional[Move]:
        """Match the engine's move against the legal moves. A promotion without a piece becomes a queen."""
        if move is None:
            return None
        for legal in legal_moves:
            if (legal.from_square, legal.to_square) != (move.from_square, move.to_square):
                continue
            if legal.promote_to is None:
                return legal
            if move.promote_to is None:
                return Move(move.from_square, move.to_square, PieceType.QUEEN)
            return move if move.promote_to in PROMOTION_OPTIONS else None
        return None

    def _random_move(self, game: Game) -> Optional[Move]:
        legal_moves = game.legal_moves()
        if not legal_moves:
            return None
        return self.rng.choice(legal_moves)
