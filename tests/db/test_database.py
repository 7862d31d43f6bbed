"""Unit tests for src/db/database.py"""

from pathlib import Path

from sqlalchemy import inspect

from src.chess.game import Game
from src.core.config import Settings
from src.db.database import create_session_factory, get_db
from src.db.sql_repository import SQLGameRepository


def test_in_memory_database_is_shared_between_sessions() -> None:
    """Tables get created, and a game stored in one session can be read back from another."""
    factory = create_session_factory(Settings(database_url="sqlite:///:memory:"))

    first = factory()
    _, game_id = SQLGameRepository(first).create_game(Game.new_game().to_model())
    first.close()

    second = factory()
    assert SQLGameRepository(second).get_game(game_id) is not None
    second.close()


def test_file_database(tmp_path: Path) -> None:
    url = f"sqlite:///{tmp_path / 'chess.db'}"
    factory = create_session_factory(Settings(database_url=url))
    assert "games" in inspect(factory.kw["bind"]).get_table_names()
    assert (tmp_path / "chess.db").exists()


def test_get_db_closes_session() -> None:
    factory = create_session_factory(Settings(database_url="sqlite:///:memory:"))
    sessions = get_db(factory)
    session = next(sessions)
    assert session.is_active
    sessions.close()  # runs the finally block
    assert not session.in_transaction()
