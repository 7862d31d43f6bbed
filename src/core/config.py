"""
Application settings.

Values are read from environment variables prefixed with `CHESS_` (ex. CHESS_DATABASE_URL), falling back to the defaults below.
"""

import logging
import os
from typing import Mapping, Optional, Self

from pydantic import BaseModel, Field

ENV_PREFIX = "CHESS_"
LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


class Settings(BaseModel):
    database_url: str = "sqlite:///chess.db"
    # Command that starts a UCI speaking engine (Stockfish by default)
    engine_command: str = "stockfish"
    # seconds to wait for the engine's best move before falling back to a random legal move
    engine_timeout: float = Field(default=5.0, gt=0)
    # seconds the computer "thinks" before its move is shown
    thinking_delay: float = Field(default=1.0, ge=0)
    hints: int = Field(default=3, ge=0)
    clock_seconds: int = Field(default=600, gt=0)
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> Self:
        """Collect every `CHESS_<FIELD>` variable that is set. pydantic takes care of the type conversion."""
        environ = os.environ if environ is None else environ
        values = {
            name: environ[f"{ENV_PREFIX}{name.upper()}"]
            for name in cls.model_fields
            if f"{ENV_PREFIX}{name.upper()}" in environ
        }
        return cls.model_validate(values)


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
