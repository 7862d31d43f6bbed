"""Generate database sessions, for the database configured in the settings"""

import logging
from typing import Generator, Optional

from sqlalchemy import StaticPool, create_engine
from sqlalchemy.orm import Session, sessionmaker

from src.core.config import Settings
from src.db.schema import Base

logger = logging.getLogger(__name__)

IN_MEMORY_SQLITE = "sqlite:///:memory:"


def create_session_factory(settings: Optional[Settings] = None) -> sessionmaker[Session]:
    """Connect to the database (creating the tables if needed) and hand back a factory for sessions"""
    settings = settings or Settings.from_env()
    engine_options: dict = {}
    if settings.database_url.startswith("sqlite"):
        engine_options["connect_args"] = {"check_same_thread": False}
    if settings.database_url == IN_MEMORY_SQLITE:
        # every connection would otherwise get its own (empty) in-memory database
        engine_options["poolclass"] = StaticPool

    engine = create_engine(settings.database_url, **engine_options)

    # Ensure all tables are created
    Base.metadata.create_all(bind=engine)
    logger.info("Connected to database %s", engine.url.render_as_string(hide_password=True))
    return sessionmaker(bind=engine)


def get_db(session_factory: sessionmaker[Session]) -> Generator[Session, None, None]:
    db = session_factory()
    try:
        yield db
    finally:
        db.close()
