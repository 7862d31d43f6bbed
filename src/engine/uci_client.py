"""
Client for an external search engine speaking the Universal Chess Interface (UCI), ex. Stockfish.

The engine runs as a child process; we talk to it over its stdin/stdout pipes:

    >> uci                      << ... uciok        (handshake)
    >> isready                  << readyok
    >> ucinewgame
    >> position fen <FEN>
    >> go depth 8               << info ... (ignored)
                                << bestmove e2e4 [ponder ...]

Only ONE coroutine may read the engine's stdout at a time: every read goes through a single asyncio.Lock.
Waiting for an answer has no deadline here. The caller races `best_move` against its own timeout and the
search gets a 'stop' when it is cancelled.
"""

import asyncio
import logging
import shlex
import time
from collections import deque
from dataclasses import dataclass
from typing import Optional, Protocol

from src.core.exceptions import EngineError

logger = logging.getLogger(__name__)

DEFAULT_DEPTH = 8
HANDSHAKE_TIMEOUT = 3.0
READY_TIMEOUT = 2.0
QUIT_TIMEOUT = 1.0
# repeated 'stop' signals within this window are dropped
STOP_THROTTLE = 0.1


@dataclass(frozen=True)
class SearchLimit:
    """How long the engine may search: a fixed depth (in plies) or a fixed time. Without either a depth of 8 is used."""

    depth: Optional[int] = None
    movetime_ms: Optional[int] = None

    def to_go_command(self) -> str:
        if self.depth is not None:
            return f"go depth {self.depth}"
        if self.movetime_ms is not None:
            return f"go movetime {self.movetime_ms}"
        return f"go depth {DEFAULT_DEPTH}"


class SearchOracle(Protocol):
    """Anything that can come up with a best move for a position"""

    async def best_move(self, fen: str, limit: SearchLimit) -> Optional[str]:
        """UCI token of the best move, or None when the position has no move."""
        ...

    async def stop(self) -> None:
        """Ask for the current search to end early. Advisory only."""
        ...


def parse_bestmove_line(line: str) -> Optional[str]:
    """'bestmove e2e4 ponder e7e5' --> 'e2e4'; 'bestmove (none)' --> None"""
    parts = line.split()
    if len(parts) < 2 or parts[0] != "bestmove" or parts[1] == "(none)":
        return None
    return parts[1]


class UciEngine:
    """Manage a UCI engine process"""

    def __init__(self, command: str) -> None:
        self.command = command
        self.proc: Optional[asyncio.subprocess.Process] = None
        self._read_lock = asyncio.Lock()
        self._search_active = False
        # a cancelled search still answers with a 'bestmove' line, which must not be mistaken for the next answer
        self._needs_sync = False
        self._last_stop_ts = 0.0
        self._last_lines: deque[str] = deque(maxlen=50)

    @property
    def is_running(self) -> bool:
        return self.proc is not None and self.proc.returncode is None

    # --- PROCESS MANAGEMENT ---
    async def start(self) -> None:
        """Spawn the engine (if not running yet) and perform the UCI handshake."""
        if self.is_running:
            return
        logger.info("Starting engine: %s", self.command)
        try:
            self.proc = await asyncio.create_subprocess_exec(
                *shlex.split(self.command),
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.DEVNULL,
            )
        except OSError as e:
            raise EngineError(f"Cannot start engine {self.command!r}: {e}") from e

        await self._send("uci")
        try:
            await asyncio.wait_for(self._read_until("uciok"), timeout=HANDSHAKE_TIMEOUT)
        except asyncio.TimeoutError as e:
            raise EngineError("UCI handshake timed out") from e
        logger.debug("handshake ok")

    async def is_ready(self) -> bool:
        """Ping the engine. False if it does not answer in time."""
        await self.start()
        await self._send("isready")
        try:
            await asyncio.wait_for(self._read_until("readyok"), timeout=READY_TIMEOUT)
        except asyncio.TimeoutError:
            logger.warning("Engine did not answer 'isready' within %.1f s", READY_TIMEOUT)
            return False
        self._needs_sync = False
        return True

    async def new_game(self) -> None:
        await self.start()
        await self._send("ucinewgame")

    async def close(self) -> None:
        """Ask the engine to quit, kill it if it does not listen."""
        if not self.is_running:
            return
        assert self.proc is not None
        try:
            await self._send("quit")
            await asyncio.wait_for(self.proc.wait(), timeout=QUIT_TIMEOUT)
        except (asyncio.TimeoutError, EngineError):
            self.proc.kill()
            await self.proc.wait()
        logger.info("Engine stopped")
        self.proc = None

    # --- SEARCH ---
    async def best_move(self, fen: str, limit: SearchLimit) -> Optional[str]:
        """
        Search the position and return the best move as a UCI token (ex. 'e7e8q').
        Returns None if the engine reports there is no move ('bestmove (none)').

        NOTE: if this coroutine gets cancelled (ex. by a timeout), the engine is told to stop searching.
        """
        await self.start()
        if self._search_active or self._needs_sync:
            # an earlier search was abandoned: stop it and skip its answer
            await self.stop()
            if not await self.is_ready():
                raise EngineError("Engine does not respond after stopping the previous search")

        await self._send(f"position fen {fen}")
        await self._send(limit.to_go_command())

        self._search_active = True
        try:
            line = await self._read_until("bestmove")
        except asyncio.CancelledError:
            self._needs_sync = True
            await self.stop()
            raise
        finally:
            self._search_active = False
        return parse_bestmove_line(line)

    async def stop(self) -> None:
        """Send 'stop' to end an ongoing search early. Duplicate signals in quick succession are dropped."""
        if not self.is_running:
            return
        now = time.monotonic()
        if now - self._last_stop_ts < STOP_THROTTLE:
            logger.debug("skip stop (throttled)")
            return
        self._last_stop_ts = now
        try:
            await self._send("stop")
        except EngineError as e:
            logger.warning("Could not send stop: %s", e)

    # --- I/O HELPERS ---
    async def _send(self, command: str) -> None:
        if self.proc is None or self.proc.stdin is None:
            raise EngineError("Engine is not running")
        logger.debug(">> %s", command)
        try:
            self.proc.stdin.write(f"{command}\n".encode("utf-8"))
            await self.proc.stdin.drain()
        except (BrokenPipeError, ConnectionResetError) as e:
            raise EngineError(f"Engine pipe closed while sending {command!r}") from e

    async def _read_until(self, prefix: str) -> str:
        """Read lines (holding the read lock) until one starts with `prefix`. Everything else (info lines etc.) is skipped."""
        if self.proc is None or self.proc.stdout is None:
            raise EngineError("Engine is not running")
        async with self._read_lock:
            while True:
                raw = await self.proc.stdout.readline()
                if not raw:
                    last = self._last_lines[-1] if self._last_lines else ""
                    raise EngineError(
                        f"Engine terminated unexpectedly (code={self.proc.returncode}) last={last!r}"
                    )
                line = raw.decode("utf-8", errors="replace").strip()
                self._last_lines.append(line)
                logger.debug("<< %s", line)
                if line.startswith(prefix):
                    return line
