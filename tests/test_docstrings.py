from __future__ import annotations

import inspect

import pytest

from blockdrop.game.board import Board
from blockdrop.game.clock import Clock
from blockdrop.game.engine import GameEngine, GameSnapshot
from blockdrop.leaderboard import Leaderboard
from blockdrop.net import ScoreClient, ScoreServer, ScoreSubmitter


@pytest.mark.parametrize(
    "cls", [Board, Clock, GameEngine, GameSnapshot, Leaderboard, ScoreClient, ScoreServer, ScoreSubmitter]
)
def test_public_methods_are_documented(cls):
    undocumented = [
        name
        for name, member in vars(cls).items()
        if not name.startswith("__")
        and (inspect.isfunction(member) or isinstance(member, property))
        and not inspect.getdoc(member)
    ]
    assert undocumented == []
