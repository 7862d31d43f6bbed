"""
Pytest will auto-discover / import this file called 'conftest.py'.
Fixtures shared by the test layers: an in-memory database, built through the same factory the application uses.
"""

from typing import Generator

import pytest
from sqlalchemy.orm import Session

from src.core.config import Settings
from src.db.database import IN_MEMORY_SQLITE, create_session_factory
from src.db.schema import Base

# A single in-memory SQLite database (StaticPool) for the whole test session
TestingSessionLocal = create_session_factory(Settings(database_url=IN_MEMORY_SQLITE))
engine = TestingSessionLocal.kw["bind"]


@pytest.fixture
def db_session_repo() -> Generator[Session, None, None]:
    """Fresh tables for every test, removed at teardown so repository tests stay independent of each other."""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)
