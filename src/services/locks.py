"""
One lock per game.

Appending a move must see the head signature left by the previous append, so appends to the SAME game run
one at a time. Appends to different games do not wait on each other.
"""

import threading
from contextlib import contextmanager
from typing import Iterator


class GameLocks:
    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[int, threading.Lock] = {}

    def _lock_for(self, game_id: int) -> threading.Lock:
        with self._guard:
            return self._locks.setdefault(game_id, threading.Lock())

    @contextmanager
    def hold(self, game_id: int) -> Iterator[None]:
        """Critical section for a single game."""
        lock = self._lock_for(game_id)
        with lock:
            yield

    def forget(self, game_id: int) -> None:
        """Drop the lock of a deleted game."""
        with self._guard:
            self._locks.pop(game_id, None)


# FastAPI runs sync endpoints in a thread pool: every request shares this registry
GAME_LOCKS = GameLocks()
