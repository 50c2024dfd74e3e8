from __future__ import annotations

from blockdrop.game.engine import Command
from blockdrop.leaderboard import Leaderboard
from blockdrop.session import GameSession

from conftest import force_game_over


class RecordingSubmitter:
    def __init__(self):
        self.submitted = []

    def submit(self, name, score):
        self.submitted.append((name, score))


def test_game_over_opens_name_entry(running_engine):
    session = GameSession(running_engine, Leaderboard())
    assert session.name_prompt is None

    running_engine.score = 400
    force_game_over(running_engine)

    assert session.pending_score == 400
    assert session.name_prompt == ""


def test_confirm_records_locally_and_remotely(running_engine):
    leaderboard = Leaderboard()
    submitter = RecordingSubmitter()
    session = GameSession(running_engine, leaderboard, submitter)
    running_engine.score = 400
    force_game_over(running_engine)

    for char in "Ann":
        session.type_character(char)
    session.confirm_name()

    assert leaderboard.best("Ann") == 400
    assert submitter.submitted == [("Ann", 400)]
    assert session.name_prompt is None
    assert session.show_leaderboard


def test_name_editing(running_engine):
    session = GameSession(running_engine, Leaderboard(), max_name_length=3)
    force_game_over(running_engine)

    for char in "Bobby":
        session.type_character(char)
    assert session.name_buffer == "Bob"
    session.backspace()
    session.type_character("\t")
    session.type_character("")
    assert session.name_buffer == "Bo"


def test_blank_name_uses_default(running_engine):
    leaderboard = Leaderboard()
    session = GameSession(running_engine, leaderboard)
    running_engine.score = 100
    force_game_over(running_engine)
    session.type_character(" ")
    session.confirm_name()
    assert leaderboard.best("Player") == 100


def test_skip_records_nothing(running_engine):
    leaderboard = Leaderboard()
    session = GameSession(running_engine, leaderboard)
    force_game_over(running_engine)
    session.skip_name()
    assert len(leaderboard) == 0
    assert session.name_prompt is None


def test_typing_outside_name_entry_is_ignored(running_engine):
    session = GameSession(running_engine, Leaderboard())
    session.type_character("x")
    assert session.name_buffer == ""


def test_leaderboard_command_toggles_overlay(engine):
    session = GameSession(engine, Leaderboard())
    engine.handle(Command.SHOW_LEADERBOARD)
    assert session.show_leaderboard
    engine.handle(Command.SHOW_LEADERBOARD)
    assert not session.show_leaderboard
