from __future__ import annotations

import threading
import uuid
from typing import Dict, Optional

from ...economy.market import Market
from ...engine.game import Game


class InMemorySessionStore:
    """Thread-safe in-memory game session store.

    Responsibilities:
    - Create new sessions with unique `game_id`s
    - Retrieve, replace and delete sessions
    - Serialize moves within one game through a per-game lock
    """

    def __init__(self, market: Optional[Market] = None) -> None:
        self._lock = threading.RLock()
        self._games: Dict[str, Game] = {}
        self._game_locks: Dict[str, threading.Lock] = {}
        self.market = market

    def create(self, game: Optional[Game] = None) -> str:
        """Create a new game session and return its `game_id`."""
        gid = str(uuid.uuid4())
        if game is None:
            game = Game.new(self.market)
        with self._lock:
            self._games[gid] = game
            self._game_locks[gid] = threading.Lock()
        return gid

    def get(self, game_id: str) -> Optional[Game]:
        with self._lock:
            return self._games.get(game_id)

    def lock_for(self, game_id: str) -> threading.Lock:
        with self._lock:
            return self._game_locks.setdefault(game_id, threading.Lock())

    def set(self, game_id: str, game: Game) -> None:
        with self._lock:
            if game_id not in self._games:
                raise KeyError(game_id)
            self._games[game_id] = game

    def delete(self, game_id: str) -> bool:
        with self._lock:
            self._game_locks.pop(game_id, None)
            return self._games.pop(game_id, None) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._games)
