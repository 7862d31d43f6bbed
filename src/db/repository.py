"""What the service needs from storage. SQLGameRepository (sql_repository.py) is the real implementation; tests use an in-memory dict."""

from typing import Protocol
from uuid import UUID

from src.core.models import GameModel


class GameRepository(Protocol):
    """
    Games are stored as complete snapshots (GameModel), keyed by a UUID handed out on creation.
    Lookups of an unknown id answer None instead of raising: the service decides what that means.
    """

    def create_game(self, game: GameModel) -> tuple[GameModel, UUID]: ...

    def get_game(self, game_id: UUID) -> GameModel | None: ...

    def update_game(self, game_id: UUID, game: GameModel) -> GameModel | None:
        """Replace the whole snapshot. None if there is no such game."""
        ...

    def delete_game(self, game_id: UUID) -> GameModel | None:
        """Answer the snapshot that got removed. None if there is no such game."""
        ...
