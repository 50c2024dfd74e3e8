"""
Glue between the engine's events and the score collaborators.

GameSession listens for the engine's game-over and leaderboard events,
collects the player's name, records the score in the local Leaderboard and
hands it to the background ScoreSubmitter (if any). It holds no pygame
state, so the play loop only forwards keystrokes to it.
"""

from __future__ import annotations

from blockdrop.game.engine import GAME_OVER_EVENT, LEADERBOARD_EVENT, GameEngine
from blockdrop.leaderboard import Leaderboard
from blockdrop.net import ScoreSubmitter


class GameSession:
    """Name entry and score recording around one GameEngine.

    Attributes:
        engine: The engine whose events are observed.
        leaderboard: Local store updated at every game over.
        submitter: Optional remote push; failures never reach the session.
        show_leaderboard: Whether the leaderboard overlay is visible.
        pending_score: Score waiting for a name, or None.
        name_buffer: Name typed so far.
    """

    def __init__(
        self,
        engine: GameEngine,
        leaderboard: Leaderboard,
        submitter: ScoreSubmitter | None = None,
        max_name_length: int = 12,
        default_name: str = "Player",
    ) -> None:
        self.engine = engine
        self.leaderboard = leaderboard
        self.submitter = submitter
        self.max_name_length = max_name_length
        self.default_name = default_name

        self.show_leaderboard = False
        self.pending_score: int | None = None
        self.name_buffer = ""

        engine.add_listener(GAME_OVER_EVENT, self._on_game_over)
        engine.add_listener(LEADERBOARD_EVENT, self._on_show_leaderboard)

    @property
    def name_prompt(self) -> str | None:
        """Text for the name-entry overlay, or None when not asking."""
        return self.name_buffer if self.pending_score is not None else None

    def _on_game_over(self, score: int) -> None:
        self.pending_score = score
        self.name_buffer = ""
        self.show_leaderboard = False

    def _on_show_leaderboard(self) -> None:
        self.show_leaderboard = not self.show_leaderboard

    def type_character(self, char: str) -> None:
        if self.pending_score is None:
            return
        if len(char) == 1 and char.isprintable() and len(self.name_buffer) < self.max_name_length:
            self.name_buffer += char

    def backspace(self) -> None:
        self.name_buffer = self.name_buffer[:-1]

    def confirm_name(self) -> None:
        """Record the pending score under the typed name and show the table."""
        if self.pending_score is None:
            return
        name = self.name_buffer.strip() or self.default_name
        self.record_score(name, self.pending_score)
        self.pending_score = None
        self.name_buffer = ""
        self.show_leaderboard = True

    def skip_name(self) -> None:
        self.pending_score = None
        self.name_buffer = ""

    def record_score(self, name: str, score: int) -> None:
        """Update the local leaderboard, then queue the remote push."""
        self.leaderboard.submit(name, score)
        print(f"Game over: {name} scored {score}")
        if self.submitter is not None:
            self.submitter.submit(name, score)
