"""Implementation of (Game)Repository using SQLAlchemy"""

from dataclasses import asdict
from uuid import UUID, uuid4

from sqlalchemy import select
from sqlalchemy.orm import Session

from src.core.models import GameModel, MoveModel
from src.db.schema import DBGame


class SQLGameRepository:
    """Data stored using SQL / methods implemented using SQLAlchemy"""

    def __init__(self, db_session: Session) -> None:
        self.db = db_session

    def get_game(self, game_id: UUID) -> GameModel | None:
        """Get game by ID, if record exists."""
        game_db = self._fetch_game(game_id)
        if game_db:
            return self._to_model(game_db)
        return None

    def create_game(self, game: GameModel) -> tuple[GameModel, UUID]:
        """Store new game and return the stored data + newly created game ID."""

        new_id = uuid4()
        game_db = DBGame(id=new_id)
        self._copy_into(game, game_db)
        self.db.add(game_db)
        self.db.commit()
        self.db.refresh(game_db)
        return self._to_model(game_db), new_id

    def update_game(self, game_id: UUID, game: GameModel) -> GameModel | None:
        """Overwrite the snapshot of an existing record."""
        game_db = self._fetch_game(game_id)
        if not game_db:
            return None
        self._copy_into(game, game_db)
        self.db.commit()
        self.db.refresh(game_db)
        return self._to_model(game_db)

    def delete_game(self, game_id: UUID) -> GameModel | None:
        """Remove a game's record."""
        game_db = self._fetch_game(game_id)
        if not game_db:
            return None
        game_model = self._to_model(game_db)
        self.db.delete(game_db)
        self.db.commit()
        return game_model

    def _fetch_game(self, game_id: UUID) -> DBGame | None:
        query = select(DBGame).where(DBGame.id == game_id)
        return self.db.scalar(query)

    @staticmethod
    def _copy_into(game: GameModel, game_db: DBGame) -> None:
        """NOTE: JSON columns only notice re-assignment, so always assign fresh containers."""
        game_db.starting_fen = game.starting_fen
        game_db.current_fen = game.current_fen
        game_db.moves = [asdict(move) for move in game.moves]
        game_db.has_moved = {color: dict(flags) for color, flags in game.has_moved.items()}
        game_db.captured_pieces = {color: list(pieces) for color, pieces in game.captured_pieces.items()}
        game_db.score = dict(game.score)
        game_db.status = game.status
        game_db.game_mode = game.game_mode
        game_db.hints_remaining = game.hints_remaining
        game_db.clock = dict(game.clock)
        game_db.winner = game.winner
        game_db.pending_promotion = list(game.pending_promotion) if game.pending_promotion else None

    def _to_model(self, game_db: DBGame) -> GameModel:
        """Convert SQLAlchemy model to data transfer model."""
        return GameModel(
            starting_fen=game_db.starting_fen,
            current_fen=game_db.current_fen,
            moves=[MoveModel(**move) for move in game_db.moves],
            has_moved=game_db.has_moved,
            captured_pieces=game_db.captured_pieces,
            score=game_db.score,
            status=game_db.status,
            game_mode=game_db.game_mode,
            hints_remaining=game_db.hints_remaining,
            clock=game_db.clock,
            winner=game_db.winner,
            pending_promotion=game_db.pending_promotion,
        )
