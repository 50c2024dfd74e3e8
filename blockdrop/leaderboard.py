"""
In-memory leaderboard keeping the best score per player name.

One Leaderboard is created at startup and handed to everything that needs
it (the game-over handler and the score server). The score server updates
it from its own threads, so every access goes through a lock.
"""

from __future__ import annotations

import threading
from typing import NamedTuple


class PlayerScore(NamedTuple):
    name: str
    score: int


class Leaderboard:
    """Best score per player, listed from highest to lowest."""

    def __init__(self) -> None:
        self._scores: dict[str, int] = {}
        self._lock = threading.Lock()

    def submit(self, name: str, score: int) -> bool:
        """Record a score for a player.

        An existing entry is replaced only when the new score is strictly
        higher.

        Args:
            name: Player name.
            score: Final score of the game.

        Returns:
            True if the stored score changed, False if it was kept.
        """
        with self._lock:
            best = self._scores.get(name)
            if best is not None and score <= best:
                return False
            # An improved entry moves behind existing ones with the same score.
            self._scores.pop(name, None)
            self._scores[name] = int(score)
            return True

    def entries(self) -> list[PlayerScore]:
        """Return all entries sorted by score, highest first."""
        with self._lock:
            items = [PlayerScore(name, score) for name, score in self._scores.items()]
        return sorted(items, key=lambda entry: entry.score, reverse=True)

    def best(self, name: str) -> int | None:
        """Return the stored score for a player, or None if unknown."""
        with self._lock:
            return self._scores.get(name)

    def clear(self) -> None:
        """Remove every entry."""
        with self._lock:
            self._scores.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._scores)
