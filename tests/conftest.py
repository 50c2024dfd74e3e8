from __future__ import annotations

import pytest

from blockdrop.game.board import Board
from blockdrop.game.engine import Command, GameEngine


class FakeTime:
    """Manually advanced time source (seconds)."""

    def __init__(self, start: float = 100.0) -> None:
        self.now = start

    def advance(self, seconds: float) -> None:
        self.now += seconds

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def fake_time() -> FakeTime:
    return FakeTime()


@pytest.fixture
def engine(fake_time: FakeTime) -> GameEngine:
    return GameEngine(board=Board(), seed=1234, time_source=fake_time)


@pytest.fixture
def running_engine(engine: GameEngine) -> GameEngine:
    engine.handle(Command.START)
    return engine


def force_game_over(engine: GameEngine) -> None:
    """Block the spawn area so the next lock ends the game."""
    engine.board.grid[0:2, 3:7] = 1
    engine.step()
