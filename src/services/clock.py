"""Periodic clock tick for a running game. The clock is advisory: it only ends the game when a flag falls."""

import asyncio
import logging
from typing import Callable, Optional

from src.chess.game import Game

logger = logging.getLogger(__name__)


async def run_clock(
    game: Game,
    interval: float = 1.0,
    on_tick: Optional[Callable[[Game], None]] = None,
) -> None:
    """
    Every `interval` seconds one second is taken off the clock of the player to move, until the game is over.
    Cancel the task to stop the clock (ex. when the game gets closed).
    """
    while game.game_over is None:
        await asyncio.sleep(interval)
        game.tick(1)
        if on_tick is not None:
            on_tick(game)
    logger.info("Clock stopped: %s", game.status)
